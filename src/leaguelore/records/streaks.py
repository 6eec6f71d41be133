"""Longest win, loss and score-rank streaks per owner.

Each owner's games are scanned once in chronological order while several
trackers run side by side. Outcome streaks (win, loss) continue across byes
and seasons; score-rank streaks (highest, lowest, top three of the week) only
continue when the next qualifying game is literally the following week of the
same season.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Literal, Optional, Sequence, Tuple

from leaguelore.models import Matchup


logger = logging.getLogger(__name__)

Outcome = Literal["W", "L", "T"]
WeekKey = Tuple[int, int]


class StreakCategory(str, Enum):
    WIN = "win"
    LOSS = "loss"
    HIGHEST_SCORE = "highest_score"
    LOWEST_SCORE = "lowest_score"
    TOP_THREE = "top_three"


PUBLISHED_CATEGORIES: Tuple[StreakCategory, ...] = (
    StreakCategory.WIN,
    StreakCategory.LOSS,
    StreakCategory.HIGHEST_SCORE,
    StreakCategory.TOP_THREE,
)


@dataclass(frozen=True)
class GameLogEntry:
    season: int
    week: int
    owner_id: str
    opponent_id: str
    score: float
    opponent_score: float
    outcome: Outcome

    @property
    def week_key(self) -> WeekKey:
        return (self.season, self.week)


@dataclass(frozen=True)
class WeekRanking:
    highest: float
    lowest: float
    top_three: Tuple[float, ...]


@dataclass(frozen=True)
class StreakEntry:
    owner_id: str
    length: int
    start: WeekKey
    end: WeekKey


@dataclass(frozen=True)
class StreakRecord:
    """Longest streak length, every owner tied at it, and all closed streaks."""

    value: int = 0
    entries: Tuple[StreakEntry, ...] = ()
    history: Tuple[StreakEntry, ...] = ()


@dataclass
class StreakScan:
    closed: Dict[StreakCategory, List[StreakEntry]] = field(default_factory=dict)
    failed: List[StreakCategory] = field(default_factory=list)

    def streaks(self, category: StreakCategory) -> List[StreakEntry]:
        return self.closed.get(category, [])


def build_game_logs(
    matchups: Iterable[Matchup], *, current_season: Optional[int] = None
) -> Dict[str, List[GameLogEntry]]:
    """Flatten matchups into per-owner chronological game logs."""

    logs: Dict[str, List[GameLogEntry]] = defaultdict(list)
    for matchup in matchups:
        if not matchup.has_owners or matchup.is_placeholder(current_season):
            continue
        winner = matchup.winner_side
        for side, other in ((1, 2), (2, 1)):
            owner = matchup.owner(side)
            outcome: Outcome = "T" if winner is None else ("W" if winner == side else "L")
            logs[owner].append(
                GameLogEntry(
                    season=matchup.season,
                    week=matchup.week,
                    owner_id=owner,
                    opponent_id=matchup.owner(other),
                    score=matchup.side(side)[2],
                    opponent_score=matchup.side(other)[2],
                    outcome=outcome,
                )
            )
    for games in logs.values():
        games.sort(key=lambda game: game.week_key)
    return dict(logs)


def weekly_rankings(
    matchups: Iterable[Matchup], *, current_season: Optional[int] = None
) -> Dict[WeekKey, WeekRanking]:
    scores: Dict[WeekKey, List[float]] = defaultdict(list)
    for matchup in matchups:
        if not matchup.has_owners or matchup.is_placeholder(current_season):
            continue
        scores[(matchup.season, matchup.week)].extend((matchup.team1_score, matchup.team2_score))
    rankings: Dict[WeekKey, WeekRanking] = {}
    for key, values in scores.items():
        ordered = sorted(values, reverse=True)
        rankings[key] = WeekRanking(highest=ordered[0], lowest=ordered[-1], top_three=tuple(ordered[:3]))
    return rankings


class _Tracker(ABC):
    """Open streak for one category plus the closed streaks it has emitted."""

    def __init__(self, category: StreakCategory, owner_id: str) -> None:
        self.category = category
        self.owner_id = owner_id
        self.length = 0
        self.start: Optional[WeekKey] = None
        self.last: Optional[WeekKey] = None
        self.closed: List[StreakEntry] = []

    @abstractmethod
    def feed(self, game: GameLogEntry, ranking: Optional[WeekRanking], provisional: bool) -> None:
        """Advance or close the open streak for one game."""

    def extend(self, key: WeekKey) -> None:
        if self.length == 0:
            self.start = key
        self.length += 1
        self.last = key

    def close(self) -> None:
        if self.length > 0 and self.start is not None and self.last is not None:
            self.closed.append(StreakEntry(self.owner_id, self.length, self.start, self.last))
        self.length = 0
        self.start = None
        self.last = None


class _OutcomeTracker(_Tracker):
    def __init__(self, category: StreakCategory, owner_id: str, outcome: Outcome) -> None:
        super().__init__(category, owner_id)
        self.outcome = outcome

    def feed(self, game: GameLogEntry, ranking: Optional[WeekRanking], provisional: bool) -> None:
        if game.outcome == self.outcome:
            self.extend(game.week_key)
        else:
            self.close()


class _RankTracker(_Tracker):
    def __init__(
        self,
        category: StreakCategory,
        owner_id: str,
        qualifies: Callable[[GameLogEntry, WeekRanking], bool],
    ) -> None:
        super().__init__(category, owner_id)
        self.qualifies = qualifies

    def feed(self, game: GameLogEntry, ranking: Optional[WeekRanking], provisional: bool) -> None:
        if provisional or ranking is None:
            return
        if not self.qualifies(game, ranking):
            self.close()
            return
        adjacent = self.last is not None and self.last == (game.season, game.week - 1)
        if self.length and not adjacent:
            self.close()
        self.extend(game.week_key)


def _trackers_for(owner_id: str) -> List[_Tracker]:
    return [
        _OutcomeTracker(StreakCategory.WIN, owner_id, "W"),
        _OutcomeTracker(StreakCategory.LOSS, owner_id, "L"),
        _RankTracker(StreakCategory.HIGHEST_SCORE, owner_id, lambda g, r: g.score == r.highest),
        _RankTracker(StreakCategory.LOWEST_SCORE, owner_id, lambda g, r: g.score == r.lowest),
        _RankTracker(StreakCategory.TOP_THREE, owner_id, lambda g, r: g.score in r.top_three),
    ]


def detect_streaks(
    matchups: Sequence[Matchup],
    *,
    current_season: Optional[int] = None,
    current_week: Optional[int] = None,
    diagnostics: logging.Logger | None = None,
) -> StreakScan:
    """Scan every owner's game log and collect all closed streaks per category.

    Games in ``(current_season, current_week)`` neither qualify for nor break
    a score-rank streak. A category whose tracker fails is reported through
    ``diagnostics`` and comes back empty; the other categories are unaffected.
    """

    log = diagnostics or logger
    logs = build_game_logs(matchups, current_season=current_season)
    rankings = weekly_rankings(matchups, current_season=current_season)
    current: Optional[WeekKey] = (
        (current_season, current_week) if current_season is not None and current_week is not None else None
    )

    scan = StreakScan(closed={category: [] for category in StreakCategory})
    failed: set[StreakCategory] = set()
    for owner_id in sorted(logs):
        trackers = [t for t in _trackers_for(owner_id) if t.category not in failed]
        for game in logs[owner_id]:
            ranking = rankings.get(game.week_key)
            provisional = current is not None and game.week_key == current
            for tracker in trackers:
                if tracker.category in failed:
                    continue
                try:
                    tracker.feed(game, ranking, provisional)
                except Exception:
                    log.warning("Streak category %s failed for %s", tracker.category.value, owner_id, exc_info=True)
                    failed.add(tracker.category)
        for tracker in trackers:
            if tracker.category in failed:
                continue
            tracker.close()
            scan.closed[tracker.category].extend(tracker.closed)

    for category in failed:
        scan.closed[category] = []
    scan.failed = sorted(failed, key=lambda c: c.value)
    return scan


def _aggregate(streaks: Sequence[StreakEntry]) -> StreakRecord:
    history = sorted(streaks, key=lambda s: (-s.length, s.start, s.owner_id))
    if not history:
        return StreakRecord()
    best = history[0].length
    entries = tuple(s for s in history if s.length == best)
    return StreakRecord(value=best, entries=entries, history=tuple(history))


def streak_records(
    scan: StreakScan,
    categories: Sequence[StreakCategory] = PUBLISHED_CATEGORIES,
    *,
    diagnostics: logging.Logger | None = None,
) -> Dict[StreakCategory, StreakRecord]:
    log = diagnostics or logger
    records: Dict[StreakCategory, StreakRecord] = {}
    for category in categories:
        try:
            records[category] = _aggregate(scan.streaks(category))
        except Exception:
            log.warning("Could not aggregate %s streaks", category.value, exc_info=True)
            records[category] = StreakRecord()
    return records


__all__ = [
    "GameLogEntry",
    "PUBLISHED_CATEGORIES",
    "StreakCategory",
    "StreakEntry",
    "StreakRecord",
    "StreakScan",
    "WeekRanking",
    "build_game_logs",
    "detect_streaks",
    "streak_records",
    "weekly_rankings",
]
