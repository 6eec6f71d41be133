import pytest

from leaguelore.models import Matchup
from leaguelore.records import PUBLISHED_CATEGORIES, StreakCategory, detect_streaks, streak_records
from leaguelore.records import streaks as streaks_module


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


def _head_to_head(season: int, results: str) -> list[Matchup]:
    scores = {"W": (100.0, 90.0), "L": (90.0, 100.0), "T": (95.0, 95.0)}
    games = []
    for week, result in enumerate(results, start=1):
        score_a, score_b = scores[result]
        games.append(_game(season, week, "a", score_a, "b", score_b))
    return games


def _four_team_week(season: int, week: int, scores: dict[str, float]) -> list[Matchup]:
    return [
        _game(season, week, "a", scores["a"], "b", scores["b"]),
        _game(season, week, "c", scores["c"], "d", scores["d"]),
    ]


def test_tie_breaks_win_streak():
    scan = detect_streaks(_head_to_head(2022, "WWWWWTWWW"))

    records = streak_records(scan)

    win = records[StreakCategory.WIN]
    assert win.value == 5
    assert [(s.owner_id, s.start, s.end) for s in win.entries] == [("a", (2022, 1), (2022, 5))]
    assert [s.length for s in win.history] == [5, 3]
    assert records[StreakCategory.LOSS].value == 5
    assert records[StreakCategory.LOSS].entries[0].owner_id == "b"


def test_outcome_streaks_continue_across_seasons():
    matchups = _head_to_head(2021, "LWW") + _head_to_head(2022, "WWL")

    records = streak_records(detect_streaks(matchups))

    win = records[StreakCategory.WIN]
    assert win.value == 4
    assert win.entries[0].start == (2021, 2)
    assert win.entries[0].end == (2022, 2)


def test_highest_score_requires_consecutive_weeks():
    matchups = (
        _four_team_week(2023, 1, {"a": 150, "b": 100, "c": 120, "d": 90})
        + _four_team_week(2023, 2, {"a": 100, "b": 95, "c": 160, "d": 90})
        + _four_team_week(2023, 3, {"a": 155, "b": 100, "c": 120, "d": 90})
    )

    scan = detect_streaks(matchups)

    owner_a = [s for s in scan.streaks(StreakCategory.HIGHEST_SCORE) if s.owner_id == "a"]
    assert [(s.length, s.start) for s in owner_a] == [(1, (2023, 1)), (1, (2023, 3))]
    record = streak_records(scan)[StreakCategory.HIGHEST_SCORE]
    assert record.value == 1
    assert len(record.entries) == 3


def test_bye_week_breaks_score_rank_streak():
    matchups = [
        _game(2023, 1, "a", 150, "b", 100),
        _game(2023, 2, "b", 120, "c", 100),
        _game(2023, 3, "a", 140, "c", 100),
    ]

    scan = detect_streaks(matchups)

    owner_a = [s for s in scan.streaks(StreakCategory.HIGHEST_SCORE) if s.owner_id == "a"]
    assert [s.length for s in owner_a] == [1, 1]


def test_current_week_neither_extends_nor_breaks_rank_streaks():
    matchups = [
        *_four_team_week(2024, 1, {"a": 150, "b": 100, "c": 120, "d": 90}),
        *_four_team_week(2024, 2, {"a": 150, "b": 100, "c": 120, "d": 90}),
        *_four_team_week(2024, 3, {"a": 150, "b": 100, "c": 120, "d": 90}),
    ]

    finished = detect_streaks(matchups, current_season=2024)
    in_progress = detect_streaks(matchups, current_season=2024, current_week=3)

    assert streak_records(finished)[StreakCategory.HIGHEST_SCORE].value == 3
    assert streak_records(in_progress)[StreakCategory.HIGHEST_SCORE].value == 2


def test_unplayed_games_are_ignored():
    matchups = _head_to_head(2024, "WW") + [_game(2024, 3, "a", 0.0, "b", 0.0)]

    records = streak_records(detect_streaks(matchups, current_season=2024))

    assert records[StreakCategory.WIN].value == 2
    assert records[StreakCategory.HIGHEST_SCORE].value == 2


def test_ties_for_longest_streak_are_all_listed():
    matchups = _head_to_head(2020, "WWLL")

    records = streak_records(detect_streaks(matchups))

    win = records[StreakCategory.WIN]
    assert win.value == 2
    assert {s.owner_id for s in win.entries} == {"a", "b"}


def test_lowest_score_is_tracked_but_not_published():
    scan = detect_streaks(_head_to_head(2020, "LLL"))

    assert scan.streaks(StreakCategory.LOWEST_SCORE)
    assert StreakCategory.LOWEST_SCORE not in PUBLISHED_CATEGORIES
    assert StreakCategory.LOWEST_SCORE not in streak_records(scan)


def test_failing_category_does_not_affect_others(monkeypatch):
    def explode(self, game, ranking, provisional):
        raise RuntimeError("tracker failure")

    monkeypatch.setattr(streaks_module._OutcomeTracker, "feed", explode)

    scan = detect_streaks(_head_to_head(2020, "WWW"))

    assert scan.failed == [StreakCategory.LOSS, StreakCategory.WIN]
    records = streak_records(scan)
    assert records[StreakCategory.WIN].value == 0
    assert records[StreakCategory.HIGHEST_SCORE].value == 3


def test_tracker_base_requires_feed():
    with pytest.raises(TypeError):
        streaks_module._Tracker(StreakCategory.WIN, "a")
