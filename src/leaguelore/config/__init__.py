"""Configuration helpers for badge rules and engine settings."""

from .badges import (
    DPR_TIERS,
    DRAFT_POSITIONS,
    MARGIN_BANDS,
    BadgeStyle,
    MarginBand,
    TierBand,
    get_style,
    slug_to_title,
)
from .settings import EngineSettings

__all__ = [
    "BadgeStyle",
    "DPR_TIERS",
    "DRAFT_POSITIONS",
    "EngineSettings",
    "MARGIN_BANDS",
    "MarginBand",
    "TierBand",
    "get_style",
    "slug_to_title",
]
