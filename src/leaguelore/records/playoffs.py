"""Career playoff records from winners-bracket games."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Set

from leaguelore.models import Matchup
from leaguelore.records.base import OwnerTotalEntry, RecordTable, RecordTracker


@dataclass
class PlayoffSummary:
    owner_id: str
    appearances: Set[int] = field(default_factory=set)
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0
    points_against: float = 0.0
    championships: int = 0
    runner_ups: int = 0
    third_places: int = 0


@dataclass(frozen=True)
class PlayoffRecords:
    most_appearances: RecordTable[OwnerTotalEntry]
    most_wins: RecordTable[OwnerTotalEntry]
    most_points_for: RecordTable[OwnerTotalEntry]
    most_points_against: RecordTable[OwnerTotalEntry]
    most_championships: RecordTable[OwnerTotalEntry]
    most_runner_ups: RecordTable[OwnerTotalEntry]
    most_third_places: RecordTable[OwnerTotalEntry]
    summaries: Dict[str, PlayoffSummary]


def summarize_playoffs(matchups: Iterable[Matchup]) -> Dict[str, PlayoffSummary]:
    """Per-owner playoff totals. Losers-bracket games are not playoff games here."""

    summaries: Dict[str, PlayoffSummary] = {}
    for matchup in matchups:
        if not matchup.is_winners_bracket or not matchup.has_owners:
            continue
        owner1, owner2 = matchup.owner(1), matchup.owner(2)
        score1, score2 = matchup.team1_score, matchup.team2_score
        first = summaries.setdefault(owner1, PlayoffSummary(owner_id=owner1))
        second = summaries.setdefault(owner2, PlayoffSummary(owner_id=owner2))
        first.appearances.add(matchup.season)
        second.appearances.add(matchup.season)
        first.points_for += score1
        first.points_against += score2
        second.points_for += score2
        second.points_against += score1

        winner = matchup.winner_side
        if winner is None:
            first.ties += 1
            second.ties += 1
            continue
        won, lost = (first, second) if winner == 1 else (second, first)
        won.wins += 1
        lost.losses += 1
        if matchup.final_seeding_game == 1:
            won.championships += 1
            lost.runner_ups += 1
        elif matchup.final_seeding_game == 3:
            won.third_places += 1
    return summaries


def compute_playoff_records(matchups: Iterable[Matchup]) -> PlayoffRecords:
    summaries = summarize_playoffs(matchups)
    metrics = {
        "most_appearances": lambda s: len(s.appearances),
        "most_wins": lambda s: s.wins,
        "most_points_for": lambda s: round(s.points_for, 2),
        "most_points_against": lambda s: round(s.points_against, 2),
        "most_championships": lambda s: s.championships,
        "most_runner_ups": lambda s: s.runner_ups,
        "most_third_places": lambda s: s.third_places,
    }
    tables: Dict[str, RecordTable[OwnerTotalEntry]] = {}
    for name, metric in metrics.items():
        tracker = RecordTracker[OwnerTotalEntry]("max")
        for owner_id in sorted(summaries):
            value = metric(summaries[owner_id])
            if value > 0:
                tracker.offer(value, OwnerTotalEntry(owner_id=owner_id, value=value))
        tables[name] = tracker.table()
    return PlayoffRecords(summaries=summaries, **tables)


__all__ = ["PlayoffRecords", "PlayoffSummary", "compute_playoff_records", "summarize_playoffs"]
