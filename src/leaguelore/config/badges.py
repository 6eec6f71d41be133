"""Static rule tables for badge thresholds and display styles."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from leaguelore.models.badge import BadgeCategory


@dataclass(frozen=True)
class TierBand:
    """Closed ``[low, high]`` band on adjusted DPR rounded to three decimals."""

    slug: str
    name: str
    low: Optional[float]
    high: Optional[float]
    category: BadgeCategory

    def contains(self, value: float) -> bool:
        if self.low is not None and value < self.low:
            return False
        if self.high is not None and value > self.high:
            return False
        return True


@dataclass(frozen=True)
class MarginBand:
    """Closed winning-margin band (rounded to cents) and its badge twins."""

    slug: str
    victory_name: str
    defeat_slug: str
    defeat_name: str
    low: float
    high: float

    def contains(self, margin: float) -> bool:
        return self.low <= margin <= self.high


@dataclass(frozen=True)
class BadgeStyle:
    accent: str
    icon: Optional[str] = None


DPR_TIERS: Tuple[TierBand, ...] = (
    TierBand("diamond_season", "Diamond Season", 1.226, None, BadgeCategory.SEASON_TIER),
    TierBand("gold_season", "Gold Season", 1.151, 1.225, BadgeCategory.SEASON_TIER),
    TierBand("silver_season", "Silver Season", 1.076, 1.150, BadgeCategory.SEASON_TIER),
    TierBand("bronze_season", "Bronze Season", 1.000, 1.075, BadgeCategory.SEASON_TIER),
    TierBand("iron_season", "Iron Season", 0.925, 0.999, BadgeCategory.BLUNDER),
    TierBand("wood_season", "Wood Season", 0.850, 0.924, BadgeCategory.BLUNDER),
    TierBand("clay_season", "Clay Season", None, 0.849, BadgeCategory.BLUNDER),
)

MARGIN_BANDS: Tuple[MarginBand, ...] = (
    MarginBand("a_small_victory", "A Small Victory", "a_small_defeat", "A Small Defeat", 1.0, 2.0),
    MarginBand("a_micro_victory", "A Micro Victory", "a_micro_defeat", "A Micro Defeat", 0.5, 0.99),
    MarginBand("a_nano_victory", "A Nano Victory", "a_nano_defeat", "A Nano Defeat", 0.01, 0.49),
)

DRAFT_POSITIONS: Tuple[str, ...] = ("QB", "RB", "WR", "TE", "K", "DEF")

_MATCHUP_ICON = "/badges/achievement/matchup-icon.svg"

_CATEGORY_ACCENTS: Dict[BadgeCategory, str] = {
    BadgeCategory.SEASON: "blue",
    BadgeCategory.SEASON_TIER: "blue",
    BadgeCategory.CHAMPION: "championAccent",
    BadgeCategory.MATCHUP: "matchupAccent",
    BadgeCategory.DRAFT: "green",
    BadgeCategory.DRAFT_BLUNDER: "red",
    BadgeCategory.TRANSACTION: "orange",
    BadgeCategory.BLUNDER: "red",
    BadgeCategory.LEAGUE: "purple",
    BadgeCategory.ROSTER: "green",
}

_BADGE_STYLES: Dict[str, BadgeStyle] = {
    "season_title": BadgeStyle("blue", "/badges/achievement/regular-season-champion.svg"),
    "points_title": BadgeStyle("blue", "/badges/achievement/points-champion.svg"),
    "season_all_play_title": BadgeStyle("blue", "/badges/achievement/season-all-play-champion.svg"),
    "triple_crown": BadgeStyle("yellow", "/badges/achievement/triple-crown.svg"),
    "champion": BadgeStyle("championAccent", "/badges/achievement/league-champion.svg"),
    "heavyweight_champion": BadgeStyle("championAccent", "/badges/achievement/heavyweight-champion.svg"),
    "bronze_season": BadgeStyle("brown", "/badges/achievement/season-score-bronze.svg"),
    "silver_season": BadgeStyle("gray", "/badges/achievement/season-score-silver.svg"),
    "gold_season": BadgeStyle("yellow", "/badges/achievement/season-score-gold.svg"),
    "diamond_season": BadgeStyle("diamond", "/badges/achievement/season-score-diamond.svg"),
    "lucky_duck": BadgeStyle("green", "/badges/achievement/season-lucky-duck.svg"),
    "action_king": BadgeStyle("orange", "/badges/achievement/season-action-king.svg"),
}
for _slug in (
    "peak_performance",
    "the_shootout",
    "massacre",
    "firing_squad",
    "a_small_victory",
    "a_micro_victory",
    "a_nano_victory",
    "double_up",
    "bully",
    "thread_the_needle",
):
    _BADGE_STYLES[_slug] = BadgeStyle("matchupAccent", _MATCHUP_ICON)


def slug_to_title(slug: str) -> str:
    """``"a_small_victory"`` -> ``"A Small Victory"``."""

    words = [word for word in re.split(r"[_\-\s]+", slug) if word]
    return " ".join(word.upper() if word in {"qb", "rb", "wr", "te", "k", "def"} else word.capitalize() for word in words)


def get_style(slug: str, category: BadgeCategory) -> BadgeStyle:
    """Resolve accent and icon for a badge slug, falling back to its category."""

    style = _BADGE_STYLES.get(slug)
    accent = style.accent if style else _CATEGORY_ACCENTS.get(category, "blue")
    icon = style.icon if style and style.icon else None
    if icon is None:
        folder = "blunder" if category.is_blunder else "achievement"
        icon = f"/badges/{folder}/{slug.replace('_', '-')}.svg"
    return BadgeStyle(accent=accent, icon=icon)


__all__ = [
    "BadgeStyle",
    "DPR_TIERS",
    "DRAFT_POSITIONS",
    "MARGIN_BANDS",
    "MarginBand",
    "TierBand",
    "get_style",
    "slug_to_title",
]
