from datetime import datetime, timezone

from leaguelore.badges.rules import CareerContext, SeasonContext, season_fees
from leaguelore.badges.rules.career import champion_drought, tenure, total_wins
from leaguelore.badges.rules.transactions import action_king, broke_ass
from leaguelore.config import EngineSettings
from leaguelore.ingest import LeagueHistory
from leaguelore.models import BadgeCategory, RosterSeasonStats, Transaction


def _stats(owner: str, season: int, **kwargs) -> RosterSeasonStats:
    return RosterSeasonStats(season=season, owner_id=owner, roster_id=f"r_{owner}", **kwargs)


def _tx(tx_id: str, year: int, *rosters: str, fee: float | None = None) -> Transaction:
    return Transaction(
        transaction_id=tx_id,
        type="waiver",
        created=datetime(year, 10, 1, tzinfo=timezone.utc),
        roster_ids=tuple(rosters),
        fee=fee,
    )


def _season_context(transactions, settings=None, stats=None) -> SeasonContext:
    stats = tuple(stats or (_stats("a", 2023), _stats("b", 2023)))
    history = LeagueHistory.from_records(stats=stats, transactions=transactions)
    return SeasonContext(
        season=2023,
        stats=stats,
        matchups=(),
        picks=(),
        history=history,
        settings=settings or EngineSettings(),
    )


def _career_history() -> LeagueHistory:
    stats = []
    for season in range(2015, 2026):
        stats.append(_stats("a", season, wins=10, is_champion=season == 2015))
        stats.append(_stats("b", season, wins=5))
    return LeagueHistory.from_records(stats=stats)


def _career_context(**settings) -> CareerContext:
    return CareerContext(history=_career_history(), settings=EngineSettings(**settings), latest_season=2025)


def test_action_king_counts_transactions_in_season_year():
    transactions = [
        _tx("1", 2023, "r_a"),
        _tx("2", 2023, "r_a", "r_b"),
        _tx("3", 2023, "r_a"),
        _tx("4", 2022, "r_b"),
        _tx("5", 2022, "r_b"),
        _tx("6", 2022, "r_b"),
    ]

    badges = action_king(_season_context(transactions, EngineSettings(transaction_milestone=2)))

    assert sorted((b.key.slug, b.team_id, b.metadata["transactions"]) for b in badges) == [
        ("action_king", "a", 3),
        ("season_transactions", "a", 3),
    ]


def test_broke_ass_charges_fee_to_first_roster():
    transactions = [
        _tx("1", 2023, "r_b", "r_a", fee=10.0),
        _tx("2", 2023, "r_a", fee=4.0),
        _tx("3", 2023, "r_a", fee=3.0),
    ]

    badges = broke_ass(_season_context(transactions))

    assert [(b.team_id, b.metadata["fees"], b.category) for b in badges] == [("b", 10.0, BadgeCategory.BLUNDER)]


def test_fee_source_modes():
    transactions = [_tx("1", 2023, "r_a", fee=10.0)]
    stats = (_stats("a", 2023), _stats("b", 2023, transaction_fees=25.0))

    by_transaction = _season_context(transactions, stats=stats)
    by_metrics = _season_context(transactions, EngineSettings(fee_source="season_metrics"), stats)
    fallback = _season_context([], EngineSettings(fee_source="transaction_then_metrics"), stats)

    assert season_fees(by_transaction) == {"a": 10.0}
    assert season_fees(by_metrics) == {"b": 25.0}
    assert season_fees(fallback) == {"b": 25.0}


def test_champion_drought_milestones():
    badges = champion_drought(_career_context())

    assert sorted((b.team_id, b.name, b.year) for b in badges) == [
        ("a", "Champion Drought - 10", 2025),
        ("a", "Champion Drought - 5", 2020),
        ("b", "Champion Drought - 10", 2024),
        ("b", "Champion Drought - 5", 2019),
    ]
    assert all(b.category is BadgeCategory.BLUNDER for b in badges)


def test_total_wins_awarded_in_crossing_season():
    badges = total_wins(_career_context())

    by_owner = {}
    for badge in badges:
        by_owner.setdefault(badge.team_id, []).append((badge.name, badge.year))
    assert by_owner["a"] == [
        ("Total Wins - 25", 2017),
        ("Total Wins - 50", 2019),
        ("Total Wins - 75", 2022),
        ("Total Wins - 100", 2024),
    ]
    assert by_owner["b"] == [("Total Wins - 25", 2019), ("Total Wins - 50", 2024)]


def test_tenure_badges_are_career_scoped():
    badges = tenure(_career_context())

    assert sorted((b.key.slug, b.team_id) for b in badges) == [
        ("old_timer", "a"),
        ("old_timer", "b"),
        ("veteran_presence", "a"),
        ("veteran_presence", "b"),
    ]
    assert all(b.year is None for b in badges)
    assert badges[0].id == "veteran_presence:career:a"


def test_tenure_thresholds_from_settings():
    badges = tenure(_career_context(veteran_seasons=20, old_timer_seasons=11))

    assert sorted(b.key.slug for b in badges) == ["old_timer", "old_timer"]
