"""Shared helpers for badge rules: award construction, extremes and percentiles."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Tuple, TypeVar

from leaguelore.config import EngineSettings
from leaguelore.ingest import LeagueHistory
from leaguelore.models import Badge, BadgeCategory, BadgeKey, DraftPick, Matchup, RosterSeasonStats


T = TypeVar("T")

Rule = Callable[["SeasonContext"], List[Badge]]
CareerRule = Callable[["CareerContext"], List[Badge]]


@dataclass(frozen=True)
class SeasonContext:
    """Everything a per-season rule may look at, already scoped to one season."""

    season: int
    stats: Tuple[RosterSeasonStats, ...]
    matchups: Tuple[Matchup, ...]
    picks: Tuple[DraftPick, ...]
    history: LeagueHistory
    settings: EngineSettings

    @property
    def regular_matchups(self) -> Tuple[Matchup, ...]:
        return tuple(m for m in self.matchups if not m.is_playoff)

    def stats_for(self, owner_id: str) -> Optional[RosterSeasonStats]:
        for row in self.stats:
            if row.owner_id == owner_id:
                return row
        return None


@dataclass(frozen=True)
class CareerContext:
    history: LeagueHistory
    settings: EngineSettings
    latest_season: int


def award(
    slug: str,
    name: str,
    category: BadgeCategory,
    owner_id: str,
    season: Optional[int],
    *,
    disambiguator: Iterable[Any] = (),
    metadata: Optional[Mapping[str, Any]] = None,
) -> Badge:
    key = BadgeKey(slug=slug, season=season, owner_id=owner_id, disambiguator=tuple(str(p) for p in disambiguator))
    return Badge(
        key=key,
        name=name,
        category=category,
        year=season,
        team_id=owner_id,
        metadata=dict(metadata or {}),
    )


def extremes(items: Iterable[T], value: Callable[[T], float], mode: Literal["max", "min"] = "max") -> List[T]:
    """Every item tied at the max (or min) of ``value``; NaN values are ignored."""

    best: Optional[float] = None
    winners: List[T] = []
    for item in items:
        current = value(item)
        if current is None or (isinstance(current, float) and math.isnan(current)):
            continue
        if best is None or (current > best if mode == "max" else current < best):
            best = current
            winners = [item]
        elif current == best:
            winners.append(item)
    return winners


def percentile(values: Sequence[float], pct: float) -> Optional[float]:
    """Linear-interpolation percentile; ``None`` for an empty sequence."""

    if not values:
        return None
    ordered = sorted(values)
    if len(ordered) == 1:
        return ordered[0]
    rank = (pct / 100.0) * (len(ordered) - 1)
    low = math.floor(rank)
    high = math.ceil(rank)
    if low == high:
        return ordered[low]
    return ordered[low] + (ordered[high] - ordered[low]) * (rank - low)


def game_metadata(matchup: Matchup, side: int) -> Dict[str, Any]:
    owner, roster, score = matchup.side(side)
    opponent, opponent_roster, opponent_score = matchup.side(2 if side == 1 else 1)
    return {
        "week": matchup.week,
        "roster_id": roster,
        "score": score,
        "opponent_id": opponent,
        "opponent_roster_id": opponent_roster,
        "opponent_score": opponent_score,
        "margin": round(matchup.margin, 2),
        "is_playoff": matchup.is_playoff,
    }


__all__ = [
    "CareerContext",
    "CareerRule",
    "Rule",
    "SeasonContext",
    "award",
    "extremes",
    "game_metadata",
    "percentile",
]
