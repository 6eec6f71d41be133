"""Draft value model: expected value per pick slot and scaled VORP."""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from leaguelore.config.settings import VorpStrategy
from leaguelore.models import DraftPick


CURVE_INTERCEPT = 27.1
CURVE_SLOPE = CURVE_INTERCEPT / math.log(10)

_KNOWN_POSITIONS = ("QB", "RB", "WR", "TE", "K", "DEF")
_POSITION_ALIASES = {
    "DST": "DEF",
    "D/ST": "DEF",
    "DEFENSE": "DEF",
    "D": "DEF",
    "DEF": "DEF",
    "PK": "K",
    "P": "K",
    "K": "K",
    "HB": "RB",
    "FB": "RB",
    "WRR": "WR",
}


def expected_value(pick_no: int) -> float:
    return CURVE_INTERCEPT - CURVE_SLOPE * math.log(max(1, pick_no))


def expected_value_by_pick_slot(total_picks: int) -> Dict[int, float]:
    """Expected value for picks ``1..total_picks``.

    Pick 1 is worth 27.1 and pick 10 is worth 0; the curve keeps falling
    (negative) for later picks. ``total_picks <= 0`` yields an empty mapping.
    """

    if total_picks <= 0:
        return {}
    return {pick: expected_value(pick) for pick in range(1, total_picks + 1)}


def player_value(pick: DraftPick) -> float:
    value = pick.fantasy_points
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def vorp_delta(actual: float, expected: float) -> float:
    return actual - expected


def rescale(value: float, min_raw: float, max_raw: float, min_target: float, max_target: float) -> float:
    """Map ``value`` linearly from ``[min_raw, max_raw]`` onto the target range.

    A degenerate raw range returns ``min_target``.
    """

    if max_raw == min_raw:
        return min_target
    return (value - min_raw) / (max_raw - min_raw) * (max_target - min_target) + min_target


def normalize_position(raw: Optional[str]) -> str:
    text = (raw or "").strip().upper()
    if not text:
        return ""
    if text in _POSITION_ALIASES:
        return _POSITION_ALIASES[text]
    if text in _KNOWN_POSITIONS:
        return text
    prefix = text[:2]
    if prefix in _KNOWN_POSITIONS:
        return prefix
    return text


@dataclass(frozen=True)
class PickVorp:
    pick: DraftPick
    owner_id: str
    position: str
    actual: float
    expected: float
    delta: float
    scaled: Optional[float] = None


@dataclass
class PositionVorp:
    count: int = 0
    raw_sum: float = 0.0
    scaled_sum: float = 0.0


@dataclass
class OwnerVorp:
    owner_id: str
    total_raw: float = 0.0
    total_scaled: float = 0.0
    positions: Dict[str, PositionVorp] = field(default_factory=dict)


@dataclass(frozen=True)
class VorpScaleMeta:
    strategy: VorpStrategy
    min_raw: Optional[float]
    max_raw: Optional[float]
    min_target: float
    max_target: float
    pick_count: int


@dataclass
class TeamVorpSummary:
    per_owner: Dict[str, OwnerVorp]
    picks: List[PickVorp]
    meta: VorpScaleMeta

    def scaled_for(self, owner_id: str, position: str) -> Optional[float]:
        owner = self.per_owner.get(owner_id)
        if owner is None or position not in owner.positions:
            return None
        return owner.positions[position].scaled_sum


def _is_valid(pick: DraftPick) -> bool:
    return pick.pick_no > 0 and bool(pick.owner_id)


def pick_vorp_entries(picks: Iterable[DraftPick], *, total_picks: Optional[int] = None) -> List[PickVorp]:
    """VORP delta for each usable pick (positive ``pick_no`` and a resolved owner)."""

    valid = [pick for pick in picks if _is_valid(pick)]
    if not valid:
        return []
    slots = total_picks if total_picks is not None else max(len(valid), max(p.pick_no for p in valid))
    curve = expected_value_by_pick_slot(slots)
    entries: List[PickVorp] = []
    for pick in valid:
        expected = curve.get(pick.pick_no)
        if expected is None:
            expected = expected_value(pick.pick_no)
        actual = player_value(pick)
        entries.append(
            PickVorp(
                pick=pick,
                owner_id=pick.owner_id or "",
                position=pick.position or normalize_position(pick.player_position),
                actual=actual,
                expected=expected,
                delta=vorp_delta(actual, expected),
            )
        )
    return entries


def _bounds(values: Sequence[float]) -> Tuple[Optional[float], Optional[float]]:
    if not values:
        return None, None
    return min(values), max(values)


def _scaler(values: Sequence[float], min_target: float, max_target: float) -> Callable[[float], float]:
    if not values:
        return lambda value: min_target
    low, high = min(values), max(values)
    return lambda value: rescale(value, low, high, min_target, max_target)


def team_scaled_vorp_by_position(
    picks: Iterable[DraftPick],
    *,
    strategy: VorpStrategy = "per_pick_then_sum",
    min_target: float = -5.0,
    max_target: float = 5.0,
    positions: Optional[Sequence[str]] = None,
) -> TeamVorpSummary:
    """Aggregate VORP per owner and normalised position.

    ``per_pick_then_sum`` rescales every pick delta against the global delta
    range and sums the scaled values; ``sum_then_scale`` sums raw deltas per
    (owner, position) and rescales those sums against their own range. Both
    return the same shape.
    """

    if strategy not in ("per_pick_then_sum", "sum_then_scale"):
        raise ValueError(f"Unknown VORP strategy: {strategy}")

    allowed = {p.upper() for p in positions} if positions else None
    entries = [e for e in pick_vorp_entries(picks) if allowed is None or e.position in allowed]

    per_owner: Dict[str, OwnerVorp] = {}
    raw_sums: Dict[Tuple[str, str], float] = defaultdict(float)
    counts: Dict[Tuple[str, str], int] = defaultdict(int)
    for entry in entries:
        raw_sums[(entry.owner_id, entry.position)] += entry.delta
        counts[(entry.owner_id, entry.position)] += 1

    if strategy == "per_pick_then_sum":
        min_raw, max_raw = _bounds([e.delta for e in entries])
        scale = _scaler([e.delta for e in entries], min_target, max_target)
        scaled_entries = [
            PickVorp(
                pick=e.pick,
                owner_id=e.owner_id,
                position=e.position,
                actual=e.actual,
                expected=e.expected,
                delta=e.delta,
                scaled=scale(e.delta),
            )
            for e in entries
        ]
        scaled_sums: Dict[Tuple[str, str], float] = defaultdict(float)
        for entry in scaled_entries:
            scaled_sums[(entry.owner_id, entry.position)] += entry.scaled or 0.0
        entries = scaled_entries
    else:
        min_raw, max_raw = _bounds(list(raw_sums.values()))
        scale = _scaler(list(raw_sums.values()), min_target, max_target)
        scaled_sums = {key: scale(value) for key, value in raw_sums.items()}

    for (owner_id, position), raw in raw_sums.items():
        owner = per_owner.setdefault(owner_id, OwnerVorp(owner_id=owner_id))
        scaled = scaled_sums.get((owner_id, position), 0.0)
        owner.positions[position] = PositionVorp(count=counts[(owner_id, position)], raw_sum=raw, scaled_sum=scaled)
        owner.total_raw += raw
        owner.total_scaled += scaled

    meta = VorpScaleMeta(
        strategy=strategy,
        min_raw=min_raw,
        max_raw=max_raw,
        min_target=min_target,
        max_target=max_target,
        pick_count=len(entries),
    )
    return TeamVorpSummary(per_owner=per_owner, picks=entries, meta=meta)


__all__ = [
    "CURVE_INTERCEPT",
    "CURVE_SLOPE",
    "OwnerVorp",
    "PickVorp",
    "PositionVorp",
    "TeamVorpSummary",
    "VorpScaleMeta",
    "expected_value",
    "expected_value_by_pick_slot",
    "normalize_position",
    "pick_vorp_entries",
    "player_value",
    "rescale",
    "team_scaled_vorp_by_position",
    "vorp_delta",
]
