"""Single-game records across every season."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from leaguelore.models import Matchup
from leaguelore.records.base import GameEntry, RecordTable, RecordTracker


@dataclass(frozen=True)
class MatchupRecords:
    most_points_scored: RecordTable[GameEntry]
    fewest_points_scored: RecordTable[GameEntry]
    highest_combined_score: RecordTable[GameEntry]
    lowest_combined_score: RecordTable[GameEntry]
    biggest_blowout: RecordTable[GameEntry]
    slimmest_win: RecordTable[GameEntry]


def _entry(matchup: Matchup, side: int) -> GameEntry:
    owner, _, score = matchup.side(side)
    opponent, _, opponent_score = matchup.side(2 if side == 1 else 1)
    return GameEntry(
        season=matchup.season,
        week=matchup.week,
        owner_id=owner or "",
        opponent_id=opponent or "",
        score=score,
        opponent_score=opponent_score,
        is_playoff=matchup.is_playoff,
    )


def compute_matchup_records(matchups: Iterable[Matchup], *, current_season: Optional[int] = None) -> MatchupRecords:
    """Best and worst single-game marks; placeholders and ownerless games are ignored."""

    most = RecordTracker[GameEntry]("max")
    fewest = RecordTracker[GameEntry]("min")
    high_combined = RecordTracker[GameEntry]("max")
    low_combined = RecordTracker[GameEntry]("min")
    blowout = RecordTracker[GameEntry]("max")
    slimmest = RecordTracker[GameEntry]("min")

    for matchup in matchups:
        if matchup.is_placeholder(current_season) or not matchup.has_owners:
            continue
        for side in (1, 2):
            entry = _entry(matchup, side)
            most.offer(entry.score, entry)
            fewest.offer(entry.score, entry)
        game = _entry(matchup, 1)
        high_combined.offer(matchup.combined_score, game)
        low_combined.offer(matchup.combined_score, game)
        winner = matchup.winner_side
        if winner is not None:
            winning = _entry(matchup, winner)
            margin = round(matchup.margin, 2)
            blowout.offer(margin, winning)
            if margin > 0:
                slimmest.offer(margin, winning)

    return MatchupRecords(
        most_points_scored=most.table(),
        fewest_points_scored=fewest.table(),
        highest_combined_score=high_combined.table(),
        lowest_combined_score=low_combined.table(),
        biggest_blowout=blowout.table(),
        slimmest_win=slimmest.table(),
    )


__all__ = ["MatchupRecords", "compute_matchup_records"]
