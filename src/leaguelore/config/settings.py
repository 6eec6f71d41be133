"""Engine settings with environment overrides."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Literal, Mapping, Optional, Tuple, TypeVar

from leaguelore.models.badge import BadgeCategory


logger = logging.getLogger(__name__)

_ENV_PREFIX = "LEAGUELORE_"

TimestampUnit = Literal["auto", "s", "ms"]
FeeSource = Literal["transaction", "season_metrics", "transaction_then_metrics"]
VorpStrategy = Literal["per_pick_then_sum", "sum_then_scale"]

ChoiceT = TypeVar("ChoiceT", bound=str)

_TIMESTAMP_UNITS: Tuple[TimestampUnit, ...] = ("auto", "s", "ms")
_FEE_SOURCES: Tuple[FeeSource, ...] = ("transaction", "season_metrics", "transaction_then_metrics")
_VORP_STRATEGIES: Tuple[VorpStrategy, ...] = ("per_pick_then_sum", "sum_then_scale")


def _env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


def _env_int(name: str, default: Optional[int], *, min_value: int | None = None) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %s", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def _env_choice(name: str, default: ChoiceT, choices: Tuple[ChoiceT, ...]) -> ChoiceT:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    for choice in choices:
        if choice == value:
            return choice
    logger.warning("Invalid value for %s: %s; expected one of %s", name, raw, ", ".join(choices))
    return default


def _env_category(name: str, default: BadgeCategory) -> BadgeCategory:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return BadgeCategory(raw.strip().lower())
    except ValueError:
        logger.warning("Invalid badge category for %s: %s; using %s", name, raw, default.value)
        return default


@dataclass(frozen=True)
class EngineSettings:
    """Knobs for the records and badge engine.

    ``current_season``/``current_week`` mark provisional data: all-zero games
    in the current season are placeholders, and the current week never counts
    toward score-rank streaks. When ``current_season`` is ``None`` the latest
    season in the history is treated as current.
    """

    current_season: Optional[int] = None
    current_week: Optional[int] = None
    timestamp_unit: TimestampUnit = "auto"
    fee_source: FeeSource = "transaction"
    worst_pick_category: BadgeCategory = BadgeCategory.DRAFT_BLUNDER
    worst_drafter_category: BadgeCategory = BadgeCategory.DRAFT_BLUNDER
    vorp_strategy: VorpStrategy = "per_pick_then_sum"
    vorp_min_target: float = -5.0
    vorp_max_target: float = 5.0
    transaction_milestone: int = 50
    wins_milestone_step: int = 25
    drought_step: int = 5
    veteran_seasons: int = 5
    old_timer_seasons: int = 10
    bully_wins: int = 3
    heavyweight_percentile: float = 75.0
    against_all_odds_percentile: float = 25.0
    comeback_weeks: int = 5
    recent_limit: Optional[int] = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "EngineSettings":
        """Build settings from ``LEAGUELORE_*`` variables, then apply overrides."""

        base = cls()
        settings = cls(
            current_season=_env_int(f"{_ENV_PREFIX}CURRENT_SEASON", base.current_season),
            current_week=_env_int(f"{_ENV_PREFIX}CURRENT_WEEK", base.current_week, min_value=0),
            timestamp_unit=_env_choice(f"{_ENV_PREFIX}TIMESTAMP_UNIT", base.timestamp_unit, _TIMESTAMP_UNITS),
            fee_source=_env_choice(f"{_ENV_PREFIX}FEE_SOURCE", base.fee_source, _FEE_SOURCES),
            worst_pick_category=_env_category(f"{_ENV_PREFIX}WORST_PICK_CATEGORY", base.worst_pick_category),
            worst_drafter_category=_env_category(f"{_ENV_PREFIX}WORST_DRAFTER_CATEGORY", base.worst_drafter_category),
            vorp_strategy=_env_choice(f"{_ENV_PREFIX}VORP_STRATEGY", base.vorp_strategy, _VORP_STRATEGIES),
            vorp_min_target=_env_float(f"{_ENV_PREFIX}VORP_MIN_TARGET", base.vorp_min_target),
            vorp_max_target=_env_float(f"{_ENV_PREFIX}VORP_MAX_TARGET", base.vorp_max_target),
            transaction_milestone=_env_int(f"{_ENV_PREFIX}TRANSACTION_MILESTONE", base.transaction_milestone, min_value=1)
            or base.transaction_milestone,
            heavyweight_percentile=_env_float(
                f"{_ENV_PREFIX}HEAVYWEIGHT_PERCENTILE", base.heavyweight_percentile, clamp_min=0.0, clamp_max=100.0
            ),
            against_all_odds_percentile=_env_float(
                f"{_ENV_PREFIX}AGAINST_ALL_ODDS_PERCENTILE",
                base.against_all_odds_percentile,
                clamp_min=0.0,
                clamp_max=100.0,
            ),
            recent_limit=_env_int(f"{_ENV_PREFIX}RECENT_LIMIT", base.recent_limit, min_value=0),
        )
        return settings.with_overrides(overrides)

    def with_overrides(self, overrides: Mapping[str, Any]) -> "EngineSettings":
        """Return a copy with known keys replaced; unknown keys are ignored with a warning."""

        known = {f.name for f in fields(self)}
        updates: dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in known:
                logger.warning("Ignoring unknown engine setting %r", key)
                continue
            if key in {"worst_pick_category", "worst_drafter_category"} and not isinstance(value, BadgeCategory):
                value = BadgeCategory(value)
            updates[key] = value
        return replace(self, **updates) if updates else self

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            payload[f.name] = value.value if isinstance(value, BadgeCategory) else value
        return payload


__all__ = ["EngineSettings", "FeeSource", "TimestampUnit", "VorpStrategy"]
