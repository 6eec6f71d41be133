"""Per-season worst scaled-VORP drafter at each position."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence

from leaguelore.config.settings import VorpStrategy
from leaguelore.draft.value import team_scaled_vorp_by_position

if TYPE_CHECKING:
    from leaguelore.ingest import LeagueHistory


DEFAULT_POSITIONS = ("QB", "RB", "WR", "TE", "K", "DEF")


@dataclass(frozen=True)
class WorstDrafterRow:
    season: int
    position: str
    owner_id: str
    scaled_sum: float
    raw_sum: float
    picks: int


def worst_drafter_report(
    history: "LeagueHistory",
    *,
    strategy: VorpStrategy = "per_pick_then_sum",
    min_target: float = -5.0,
    max_target: float = 5.0,
    positions: Sequence[str] = DEFAULT_POSITIONS,
    include_keepers: bool = False,
) -> List[WorstDrafterRow]:
    rows: List[WorstDrafterRow] = []
    for season in sorted(history.picks_by_season):
        picks = [p for p in history.picks_by_season[season] if include_keepers or not p.is_keeper]
        summary = team_scaled_vorp_by_position(
            picks, strategy=strategy, min_target=min_target, max_target=max_target, positions=positions
        )
        for position in sorted(positions):
            worst: Optional[WorstDrafterRow] = None
            for owner_id in sorted(summary.per_owner):
                totals = summary.per_owner[owner_id].positions.get(position)
                if totals is None or totals.count == 0:
                    continue
                if worst is None or totals.scaled_sum < worst.scaled_sum:
                    worst = WorstDrafterRow(
                        season=season,
                        position=position,
                        owner_id=owner_id,
                        scaled_sum=totals.scaled_sum,
                        raw_sum=totals.raw_sum,
                        picks=totals.count,
                    )
            if worst is not None:
                rows.append(worst)
    return rows


__all__ = ["WorstDrafterRow", "worst_drafter_report"]
