from leaguelore.badges.rules import SeasonContext
from leaguelore.badges.rules.matchups import (
    bully,
    double_up,
    margin_bands,
    massacre,
    peak_performance,
    score_share,
    spoiled_goods,
    the_shootout,
    the_snoozer,
    thread_the_needle,
)
from leaguelore.config import EngineSettings
from leaguelore.ingest import LeagueHistory
from leaguelore.models import BadgeCategory, Matchup


def _game(week: int, a: str, score_a: float, b: str, score_b: float) -> Matchup:
    return Matchup(
        season=2023,
        week=week,
        team1_roster_id=f"r_{a}",
        team2_roster_id=f"r_{b}",
        team1_score=score_a,
        team2_score=score_b,
        team1_owner_id=a,
        team2_owner_id=b,
    )


def _context(matchups, settings=None) -> SeasonContext:
    matchups = tuple(matchups)
    return SeasonContext(
        season=2023,
        stats=(),
        matchups=matchups,
        picks=(),
        history=LeagueHistory.from_records(matchups=matchups),
        settings=settings or EngineSettings(),
    )


def _sample_context() -> SeasonContext:
    return _context(
        [
            _game(1, "a", 150.0, "b", 140.0),
            _game(1, "c", 100.0, "d", 90.0),
            _game(2, "a", 120.0, "c", 60.0),
            _game(2, "b", 101.5, "d", 100.0),
            _game(3, "a", 100.6, "d", 100.0),
            _game(3, "b", 80.25, "c", 80.0),
        ]
    )


def _awarded(badges):
    return sorted((b.key.slug, b.team_id) for b in badges)


def test_peak_performance_and_shootout():
    ctx = _sample_context()

    peak = peak_performance(ctx)
    assert _awarded(peak) == [("peak_performance", "a")]
    assert peak[0].metadata["score"] == 150.0
    assert peak[0].key.disambiguator == ("1", "b")

    shootout = the_shootout(ctx)
    assert _awarded(shootout) == [("the_shootout", "a"), ("the_shootout", "b")]
    assert shootout[0].metadata["combined_score"] == 290.0


def test_massacre_pairs_with_bye_week():
    badges = massacre(_sample_context())

    assert _awarded(badges) == [("massacre", "a"), ("the_bye_week", "c")]
    bye_week = next(b for b in badges if b.key.slug == "the_bye_week")
    assert bye_week.category is BadgeCategory.BLUNDER
    assert bye_week.metadata["margin"] == 60.0


def test_margin_bands_award_victory_and_defeat_twins():
    badges = margin_bands(_sample_context())

    assert _awarded(badges) == [
        ("a_micro_defeat", "d"),
        ("a_micro_victory", "a"),
        ("a_nano_defeat", "c"),
        ("a_nano_victory", "b"),
        ("a_small_defeat", "d"),
        ("a_small_victory", "b"),
    ]


def test_double_up():
    assert _awarded(double_up(_sample_context())) == [("double_up", "a"), ("doubled_up", "c")]


def test_score_share_extremes():
    badges = score_share(_sample_context())

    assert _awarded(badges) == [("firing_squad", "a"), ("the_undercard", "c")]
    firing = next(b for b in badges if b.key.slug == "firing_squad")
    assert firing.metadata["score_share"] == 0.6667
    assert firing.metadata["week"] == 2


def test_thread_the_needle_and_snoozer():
    ctx = _sample_context()

    assert _awarded(thread_the_needle(ctx)) == [("thread_the_needle", "b")]
    assert _awarded(the_snoozer(ctx)) == [("the_snoozer", "c")]


def test_snoozer_ignores_games_with_a_zero_score():
    ctx = _context([_game(1, "a", 50.0, "b", 0.0), _game(1, "c", 70.0, "d", 60.0)])

    assert _awarded(the_snoozer(ctx)) == [("the_snoozer", "d")]


def test_spoiled_goods_for_second_best_losing_to_best():
    ctx = _sample_context()

    badges = spoiled_goods(ctx)

    assert sorted((b.metadata["week"], b.team_id) for b in badges) == [(1, "b"), (3, "d")]


def test_spoiled_goods_skips_tied_top_score():
    ctx = _context([_game(1, "a", 120.0, "b", 120.0), _game(1, "c", 100.0, "d", 90.0)])

    assert spoiled_goods(ctx) == []


def test_bully_awarded_once_per_pair_at_threshold():
    ctx = _context(
        [
            _game(1, "a", 110.0, "b", 100.0),
            _game(4, "b", 90.0, "a", 100.0),
            _game(7, "a", 120.0, "b", 100.0),
            _game(9, "a", 130.0, "b", 100.0),
            _game(2, "c", 100.0, "d", 90.0),
        ]
    )

    badges = bully(ctx)

    assert _awarded(badges) == [("bullied", "b"), ("bully", "a")]
    bully_badge = next(b for b in badges if b.key.slug == "bully")
    assert bully_badge.metadata["week"] == 7
    assert bully_badge.key.disambiguator == ("b",)


def test_bully_threshold_comes_from_settings():
    ctx = _context(
        [_game(1, "a", 110.0, "b", 100.0), _game(4, "a", 110.0, "b", 100.0)],
        settings=EngineSettings(bully_wins=2),
    )

    assert _awarded(bully(ctx)) == [("bullied", "b"), ("bully", "a")]
