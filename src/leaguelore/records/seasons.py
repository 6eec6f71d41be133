"""Season leaderboards and career totals built from regular-season games.

Win/loss/tie counts and points come from the upstream season aggregates when
a roster has them; weekly score ranks, blowouts and all-play results are
always derived from the matchups themselves.
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Set, Tuple

from leaguelore.models import Matchup, RosterSeasonStats
from leaguelore.records.base import OwnerTotalEntry, RecordTable, RecordTracker
from leaguelore.records.streaks import weekly_rankings


BLOWOUT_RATIO = 0.40
SLIM_RATIO = 0.025


@dataclass
class OwnerSeasonTotals:
    season: int
    owner_id: str
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0
    points_against: float = 0.0
    highest_score: Optional[float] = None
    lowest_score: Optional[float] = None
    weekly_high_scores: int = 0
    weekly_top_three: int = 0
    blowout_wins: int = 0
    blowout_losses: int = 0
    slim_wins: int = 0
    slim_losses: int = 0
    all_play_wins: float = 0.0
    all_play_games: int = 0
    fallback_all_play: float = 0.0

    @property
    def games(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def win_percentage(self) -> float:
        return (self.wins + 0.5 * self.ties) / self.games if self.games else 0.0

    @property
    def all_play_win_percentage(self) -> float:
        if self.all_play_games:
            return self.all_play_wins / self.all_play_games
        return self.fallback_all_play


@dataclass(frozen=True)
class SeasonEntry:
    season: int
    owner_id: str
    value: float


@dataclass(frozen=True)
class SeasonRecords:
    most_wins: RecordTable[SeasonEntry]
    most_losses: RecordTable[SeasonEntry]
    best_all_play_win_percentage: RecordTable[SeasonEntry]
    most_weekly_high_scores: RecordTable[SeasonEntry]
    most_weekly_top_three: RecordTable[SeasonEntry]
    most_blowout_wins: RecordTable[SeasonEntry]
    most_blowout_losses: RecordTable[SeasonEntry]
    most_slim_wins: RecordTable[SeasonEntry]
    most_slim_losses: RecordTable[SeasonEntry]
    most_points_for: RecordTable[SeasonEntry]
    fewest_points_for: RecordTable[SeasonEntry]
    most_points_against: RecordTable[SeasonEntry]
    highest_weekly_score: RecordTable[SeasonEntry]
    lowest_weekly_score: RecordTable[SeasonEntry]


@dataclass(frozen=True)
class SeasonRecordBook:
    """Leaderboards per season plus the best single-season marks across all seasons."""

    by_season: Dict[int, SeasonRecords] = field(default_factory=dict)
    single_season: Optional[SeasonRecords] = None


@dataclass(frozen=True)
class CareerRecords:
    most_wins: RecordTable[OwnerTotalEntry]
    most_losses: RecordTable[OwnerTotalEntry]
    best_win_percentage: RecordTable[OwnerTotalEntry]
    best_all_play_win_percentage: RecordTable[OwnerTotalEntry]
    most_weekly_high_scores: RecordTable[OwnerTotalEntry]
    most_weekly_top_three: RecordTable[OwnerTotalEntry]
    most_winning_seasons: RecordTable[OwnerTotalEntry]
    most_losing_seasons: RecordTable[OwnerTotalEntry]
    most_points_for: RecordTable[OwnerTotalEntry]
    most_points_against: RecordTable[OwnerTotalEntry]


Metric = Tuple[str, Literal["max", "min"], Callable[[OwnerSeasonTotals], Optional[float]], bool]

# (field, mode, value, skip zero values)
_SEASON_METRICS: Tuple[Metric, ...] = (
    ("most_wins", "max", lambda t: t.wins, True),
    ("most_losses", "max", lambda t: t.losses, True),
    ("best_all_play_win_percentage", "max", lambda t: round(t.all_play_win_percentage, 4), True),
    ("most_weekly_high_scores", "max", lambda t: t.weekly_high_scores, True),
    ("most_weekly_top_three", "max", lambda t: t.weekly_top_three, True),
    ("most_blowout_wins", "max", lambda t: t.blowout_wins, True),
    ("most_blowout_losses", "max", lambda t: t.blowout_losses, True),
    ("most_slim_wins", "max", lambda t: t.slim_wins, True),
    ("most_slim_losses", "max", lambda t: t.slim_losses, True),
    ("most_points_for", "max", lambda t: round(t.points_for, 2), True),
    ("fewest_points_for", "min", lambda t: round(t.points_for, 2) if t.points_for > 0 else None, False),
    ("most_points_against", "max", lambda t: round(t.points_against, 2), True),
    ("highest_weekly_score", "max", lambda t: t.highest_score, True),
    ("lowest_weekly_score", "min", lambda t: t.lowest_score, False),
)


def _margin_ratio(winning: float, losing: float) -> float:
    return math.inf if losing == 0 else (winning - losing) / losing


def _regular_games(matchups: Iterable[Matchup], current_season: Optional[int]) -> List[Matchup]:
    return [m for m in matchups if not m.is_playoff and m.has_owners and not m.is_placeholder(current_season)]


def _tally_game(totals: Dict[Tuple[int, str], OwnerSeasonTotals], matchup: Matchup) -> None:
    outcome = matchup.outcome
    for side, other in ((1, 2), (2, 1)):
        owner = matchup.owner(side)
        score, opponent_score = matchup.side(side)[2], matchup.side(other)[2]
        row = totals.setdefault((matchup.season, owner), OwnerSeasonTotals(matchup.season, owner))
        row.points_for += score
        row.points_against += opponent_score
        row.highest_score = score if row.highest_score is None else max(row.highest_score, score)
        row.lowest_score = score if row.lowest_score is None else min(row.lowest_score, score)
        if outcome is None:
            row.ties += 1
            continue
        winner, loser = outcome
        won = side == winner
        if won:
            row.wins += 1
        else:
            row.losses += 1
        ratio = _margin_ratio(matchup.side(winner)[2], matchup.side(loser)[2])
        if ratio >= BLOWOUT_RATIO:
            if won:
                row.blowout_wins += 1
            else:
                row.blowout_losses += 1
        elif 0 < ratio < SLIM_RATIO:
            if won:
                row.slim_wins += 1
            else:
                row.slim_losses += 1


def _tally_weeks(totals: Dict[Tuple[int, str], OwnerSeasonTotals], games: Sequence[Matchup]) -> None:
    rankings = weekly_rankings(games)
    week_scores: Dict[Tuple[int, int], List[Tuple[str, float]]] = defaultdict(list)
    for matchup in games:
        for side in (1, 2):
            week_scores[(matchup.season, matchup.week)].append((matchup.owner(side), matchup.side(side)[2]))

    for (season, week), scores in week_scores.items():
        ranking = rankings[(season, week)]
        for owner, score in scores:
            row = totals[(season, owner)]
            if score == ranking.highest:
                row.weekly_high_scores += 1
            if score in ranking.top_three:
                row.weekly_top_three += 1
            for opponent, opponent_score in scores:
                if opponent == owner:
                    continue
                row.all_play_games += 1
                if score > opponent_score:
                    row.all_play_wins += 1
                elif score == opponent_score:
                    row.all_play_wins += 0.5


def _apply_aggregates(
    totals: Dict[Tuple[int, str], OwnerSeasonTotals], stats_by_season: Mapping[int, Sequence[RosterSeasonStats]]
) -> None:
    for season, rows in stats_by_season.items():
        for stats in rows:
            row = totals.setdefault((season, stats.owner_id), OwnerSeasonTotals(season, stats.owner_id))
            row.wins, row.losses, row.ties = stats.wins, stats.losses, stats.ties
            if stats.points_for or stats.points_against:
                row.points_for, row.points_against = stats.points_for, stats.points_against
            row.fallback_all_play = stats.all_play_win_percentage


def summarize_seasons(
    matchups: Iterable[Matchup],
    stats_by_season: Optional[Mapping[int, Sequence[RosterSeasonStats]]] = None,
    *,
    current_season: Optional[int] = None,
) -> Dict[int, Dict[str, OwnerSeasonTotals]]:
    """Per-season, per-owner regular-season totals."""

    games = _regular_games(matchups, current_season)
    totals: Dict[Tuple[int, str], OwnerSeasonTotals] = {}
    for matchup in games:
        _tally_game(totals, matchup)
    _tally_weeks(totals, games)
    if stats_by_season:
        _apply_aggregates(totals, stats_by_season)

    by_season: Dict[int, Dict[str, OwnerSeasonTotals]] = defaultdict(dict)
    for (season, owner_id), row in sorted(totals.items()):
        by_season[season][owner_id] = row
    return dict(by_season)


def _season_tables(rows: Iterable[OwnerSeasonTotals]) -> SeasonRecords:
    rows = list(rows)
    tables: Dict[str, RecordTable[SeasonEntry]] = {}
    for name, mode, metric, skip_zero in _SEASON_METRICS:
        tracker = RecordTracker[SeasonEntry](mode)
        for row in rows:
            value = metric(row)
            if value is None or (skip_zero and value <= 0):
                continue
            tracker.offer(value, SeasonEntry(season=row.season, owner_id=row.owner_id, value=value))
        tables[name] = tracker.table()
    return SeasonRecords(**tables)


def compute_season_records(summaries: Mapping[int, Mapping[str, OwnerSeasonTotals]]) -> SeasonRecordBook:
    if not summaries:
        return SeasonRecordBook()
    by_season = {season: _season_tables(rows.values()) for season, rows in sorted(summaries.items())}
    every_row = [row for season in sorted(summaries) for row in summaries[season].values()]
    return SeasonRecordBook(by_season=by_season, single_season=_season_tables(every_row))


def compute_career_records(summaries: Mapping[int, Mapping[str, OwnerSeasonTotals]]) -> CareerRecords:
    wins: Dict[str, int] = defaultdict(int)
    losses: Dict[str, int] = defaultdict(int)
    ties: Dict[str, int] = defaultdict(int)
    points_for: Dict[str, float] = defaultdict(float)
    points_against: Dict[str, float] = defaultdict(float)
    high_scores: Dict[str, int] = defaultdict(int)
    top_three: Dict[str, int] = defaultdict(int)
    all_play_wins: Dict[str, float] = defaultdict(float)
    all_play_games: Dict[str, int] = defaultdict(int)
    winning: Dict[str, int] = defaultdict(int)
    losing: Dict[str, int] = defaultdict(int)
    owners: Set[str] = set()

    for rows in summaries.values():
        for owner_id, row in rows.items():
            owners.add(owner_id)
            wins[owner_id] += row.wins
            losses[owner_id] += row.losses
            ties[owner_id] += row.ties
            points_for[owner_id] += row.points_for
            points_against[owner_id] += row.points_against
            high_scores[owner_id] += row.weekly_high_scores
            top_three[owner_id] += row.weekly_top_three
            all_play_wins[owner_id] += row.all_play_wins
            all_play_games[owner_id] += row.all_play_games
            if row.wins > row.losses:
                winning[owner_id] += 1
            elif row.losses > row.wins:
                losing[owner_id] += 1

    def win_percentage(owner_id: str) -> float:
        games = wins[owner_id] + losses[owner_id] + ties[owner_id]
        return round((wins[owner_id] + 0.5 * ties[owner_id]) / games, 4) if games else 0.0

    def all_play(owner_id: str) -> float:
        games = all_play_games[owner_id]
        return round(all_play_wins[owner_id] / games, 4) if games else 0.0

    metrics: Dict[str, Callable[[str], float]] = {
        "most_wins": lambda o: wins[o],
        "most_losses": lambda o: losses[o],
        "best_win_percentage": win_percentage,
        "best_all_play_win_percentage": all_play,
        "most_weekly_high_scores": lambda o: high_scores[o],
        "most_weekly_top_three": lambda o: top_three[o],
        "most_winning_seasons": lambda o: winning[o],
        "most_losing_seasons": lambda o: losing[o],
        "most_points_for": lambda o: round(points_for[o], 2),
        "most_points_against": lambda o: round(points_against[o], 2),
    }
    tables: Dict[str, RecordTable[OwnerTotalEntry]] = {}
    for name, metric in metrics.items():
        tracker = RecordTracker[OwnerTotalEntry]("max")
        for owner_id in sorted(owners):
            value = metric(owner_id)
            if value > 0:
                tracker.offer(value, OwnerTotalEntry(owner_id=owner_id, value=value))
        tables[name] = tracker.table()
    return CareerRecords(**tables)


__all__ = [
    "BLOWOUT_RATIO",
    "CareerRecords",
    "OwnerSeasonTotals",
    "SLIM_RATIO",
    "SeasonEntry",
    "SeasonRecordBook",
    "SeasonRecords",
    "compute_career_records",
    "compute_season_records",
    "summarize_seasons",
]
