from datetime import datetime, timezone

import pytest

from leaguelore.badges import BadgeCollector, BadgeResult, compute_badges, compute_badges_from_raw
from leaguelore.badges import engine as engine_module
from leaguelore.badges.rules import award
from leaguelore.badges.rules.season import season_title
from leaguelore.config import EngineSettings
from leaguelore.errors import BadgeRuleError
from leaguelore.ingest import LeagueHistory
from leaguelore.models import BadgeCategory, DraftPick, Matchup, RosterSeasonStats

NOW = datetime(2026, 1, 15, tzinfo=timezone.utc)


def _stats(owner: str, season: int, **kwargs) -> RosterSeasonStats:
    return RosterSeasonStats(season=season, owner_id=owner, roster_id=f"r_{owner}", team_name=f"Team {owner}", **kwargs)


def _game(season: int, week: int, a: str, score_a: float, b: str, score_b: float) -> Matchup:
    return Matchup(
        season=season,
        week=week,
        team1_roster_id=f"r_{a}",
        team2_roster_id=f"r_{b}",
        team1_score=score_a,
        team2_score=score_b,
        team1_owner_id=a,
        team2_owner_id=b,
    )


def _sample_history() -> LeagueHistory:
    stats = []
    matchups = []
    for season in (2021, 2022, 2023):
        stats.extend(
            [
                _stats("a", season, wins=9, points_for=1500.0, adjusted_dpr=1.2, luck_rating=1.0, is_champion=season == 2022),
                _stats("b", season, wins=7, points_for=1450.0, adjusted_dpr=1.0, luck_rating=-1.0, is_runner_up=True),
                _stats("c", season, wins=5, points_for=1300.0, adjusted_dpr=0.9, luck_rating=0.5),
                _stats("d", season, wins=3, points_for=1200.0, adjusted_dpr=0.8, luck_rating=0.0),
            ]
        )
        for week in range(1, 4):
            matchups.append(_game(season, week, "a", 100.0 + week, "b", 90.0 + 2 * week))
            matchups.append(_game(season, week, "c", 80.0 + week, "d", 110.0 - week))
    picks = [
        DraftPick(season=2023, pick_no=n, round=1, owner_id=o, roster_id=f"r_{o}", position=p, fantasy_points=f)
        for n, o, p, f in ((1, "a", "QB", 1.0), (2, "b", "WR", 0.0), (3, "c", "RB", 0.0), (4, "d", "QB", 12.0))
    ]
    return LeagueHistory.from_records(stats=stats, matchups=matchups, picks=picks)


def test_single_roster_season_title_and_points_title():
    history = LeagueHistory.from_records(stats=[_stats("a", 2024, wins=10, points_for=1500.0)])

    result = compute_badges(history, now=NOW, strict=True)

    names = {badge.name for badge in result.badges_by_team["a"]}
    assert {"Season Title", "Points Title"} <= names


def test_worst_draft_pick_for_lowest_delta():
    picks = [
        DraftPick(season=2024, pick_no=1, round=1, owner_id="a", position="QB", fantasy_points=1.0),
        DraftPick(season=2024, pick_no=2, round=1, owner_id="b", position="WR", fantasy_points=0.0),
        DraftPick(season=2024, pick_no=3, round=1, owner_id="c", position="RB", fantasy_points=0.0),
    ]

    result = compute_badges(LeagueHistory.from_records(picks=picks), now=NOW, strict=True)

    worst = [b for b in result.all_badges() if b.name == "Worst Draft Pick"]
    assert [(b.team_id, b.category) for b in worst] == [("a", BadgeCategory.DRAFT_BLUNDER)]


def test_badge_ids_are_unique():
    result = compute_badges(_sample_history(), now=NOW, strict=True)

    ids = [badge.id for badge in result.all_badges()]
    assert ids
    assert len(ids) == len(set(ids))
    assert {b.id for b in result.recent_badges} == set(ids)


def test_badges_are_normalised():
    result = compute_badges(_sample_history(), now=NOW, strict=True)

    for badge in result.all_badges():
        assert badge.display_name
        assert badge.accent
        assert badge.icon
        assert badge.timestamp is not None
        assert badge.metadata["team_name"] == f"Team {badge.team_id}"
        if badge.year is None:
            assert badge.timestamp == NOW
        else:
            assert badge.timestamp == datetime(badge.year, 12, 31, tzinfo=timezone.utc)


def test_team_name_callback_is_used():
    result = compute_badges(_sample_history(), now=NOW, team_name=lambda owner, season: f"{owner.upper()}-{season}")

    champion = next(b for b in result.all_badges() if b.name == "Champion")
    assert champion.metadata["team_name"] == "A-2022"


def test_recent_badges_sorted_newest_first_and_limited():
    result = compute_badges(_sample_history(), EngineSettings(recent_limit=5), now=NOW)

    recent = result.recent_badges
    assert len(recent) == 5
    timestamps = [b.timestamp for b in recent]
    assert timestamps == sorted(timestamps, reverse=True)


def test_current_season_bounds_processed_seasons():
    result = compute_badges(_sample_history(), EngineSettings(current_season=2022), now=NOW)

    assert all(b.year is None or b.year <= 2022 for b in result.all_badges())


def test_failing_rule_is_isolated(monkeypatch, caplog):
    def explode(ctx):
        raise ValueError("broken rule")

    monkeypatch.setattr(engine_module, "PER_SEASON_RULES", (explode, season_title))

    result = compute_badges(_sample_history(), now=NOW)

    assert result.failed_rules == ["explode:2021", "explode:2022", "explode:2023"]
    assert sum(1 for b in result.all_badges() if b.name == "Season Title") == 3
    assert "explode" in caplog.text

    with pytest.raises(BadgeRuleError) as excinfo:
        compute_badges(_sample_history(), now=NOW, strict=True)
    assert excinfo.value.rule == "explode"


@pytest.mark.parametrize(
    "payload",
    [
        None,
        "nonsense",
        {"matchupsBySeason": {"2023": [None, 5, {"week": "?"}]}, "draftPicksBySeason": {"x": [1]}},
        {"rostersBySeason": {"2023": [{"roster_id": 1, "owner_id": "u1"}]}, "tradedPicksBySeason": {"2023": "junk"}},
    ],
)
def test_compute_badges_from_raw_never_raises(payload):
    result = compute_badges_from_raw(payload, payload, payload, payload, now=NOW)

    assert isinstance(result, BadgeResult)


def test_compute_badges_from_raw_returns_empty_result_on_failure(monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(engine_module, "compute_badges", boom)

    result = compute_badges_from_raw({}, now=NOW)

    assert result == BadgeResult()


def test_result_serialises_with_ids():
    result = compute_badges(_sample_history(), now=NOW)

    payload = result.model_dump(mode="json")

    badge = payload["badges_by_team"]["a"][0]
    assert "id" in badge
    assert "key" not in badge


def test_collector_keeps_first_badge_and_builds_once():
    collector = BadgeCollector()
    first = award("champion", "Champion", BadgeCategory.CHAMPION, "a", 2022)
    duplicate = award("champion", "Champion (again)", BadgeCategory.CHAMPION, "a", 2022)

    assert collector.add(first)
    assert not collector.add(duplicate)
    assert first.key in collector
    assert len(collector) == 1

    built = collector.build()
    assert built == {"a": (first,)}
    with pytest.raises(RuntimeError):
        collector.build()
    with pytest.raises(RuntimeError):
        collector.add(first)


def test_out_of_range_season_does_not_blank_other_seasons():
    metrics = {"1": {"ownerId": "u1", "wins": 9, "pointsFor": 1500.0}, "2": {"ownerId": "u2", "wins": 4, "pointsFor": 1200.0}}

    result = compute_badges_from_raw({}, {"2022": metrics, "10000": metrics}, now=NOW)

    titles = [b for b in result.all_badges() if b.name == "Season Title"]
    assert [(b.team_id, b.year) for b in titles] == [("u1", 2022)]


def test_unusable_badge_year_falls_back_to_now():
    history = LeagueHistory.from_records(stats=[_stats("a", 10000, wins=10, points_for=1500.0)])

    result = compute_badges(history, now=NOW, strict=True)

    title = next(b for b in result.all_badges() if b.name == "Season Title")
    assert title.year == 10000
    assert title.timestamp == NOW


def test_implausible_win_totals_are_dropped():
    metrics = {"1": {"ownerId": "u1", "wins": 1e12}, "2": {"ownerId": "u2", "wins": 3}}

    result = compute_badges_from_raw({}, {"2022": metrics}, now=NOW)

    assert "u1" not in result.badges_by_team
    assert not [b for b in result.all_badges() if b.key.slug == "total_wins"]


def test_naive_now_is_treated_as_utc():
    result = compute_badges(_sample_history(), EngineSettings(veteran_seasons=3), now=NOW.replace(tzinfo=None))

    career = [b for b in result.all_badges() if b.year is None]
    assert sorted(b.team_id for b in career) == ["a", "b", "c", "d"]
    assert all(b.timestamp == NOW for b in career)
    assert result.recent_badges[0].year is None
