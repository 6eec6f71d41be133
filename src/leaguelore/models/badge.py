"""Badge payloads emitted by the achievement engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

from pydantic import BaseModel, Field, computed_field
from pydantic.config import ConfigDict


class BadgeCategory(str, Enum):
    SEASON = "season"
    SEASON_TIER = "season-tier"
    CHAMPION = "champion"
    MATCHUP = "matchup"
    DRAFT = "draft"
    DRAFT_BLUNDER = "draft-blunder"
    TRANSACTION = "transaction"
    BLUNDER = "blunder"
    LEAGUE = "league"
    ROSTER = "roster"

    @property
    def is_blunder(self) -> bool:
        return self in (BadgeCategory.BLUNDER, BadgeCategory.DRAFT_BLUNDER)


@dataclass(frozen=True, order=True)
class BadgeKey:
    """Typed badge identity; only turned into a string at the output boundary.

    Every part is percent-encoded before joining, so two different keys can
    never serialise to the same id.
    """

    slug: str
    season: Optional[int]
    owner_id: str
    disambiguator: Tuple[str, ...] = ()

    def serialize(self) -> str:
        season = "career" if self.season is None else str(self.season)
        parts = (self.slug, season, self.owner_id, *self.disambiguator)
        return ":".join(quote(str(part), safe="") for part in parts)


class Badge(BaseModel):
    """Achievement or blunder awarded to an owner for a season or a career."""

    key: BadgeKey = Field(exclude=True)
    name: str
    display_name: Optional[str] = None
    category: BadgeCategory
    year: Optional[int] = None
    team_id: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    accent: Optional[str] = None
    icon: Optional[str] = None
    timestamp: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def id(self) -> str:
        return self.key.serialize()


__all__ = ["BadgeCategory", "BadgeKey", "Badge"]
