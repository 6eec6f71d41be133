"""Append-only badge collector merged into the final mapping exactly once."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from leaguelore.models import Badge, BadgeKey


logger = logging.getLogger(__name__)


class BadgeCollector:
    """Gather badges from independent rules, keeping the first badge per key."""

    def __init__(self, diagnostics: logging.Logger | None = None) -> None:
        self._log = diagnostics or logger
        self._badges: Dict[BadgeKey, Badge] = {}
        self._built = False

    def __contains__(self, key: object) -> bool:
        return key in self._badges

    def __len__(self) -> int:
        return len(self._badges)

    def add(self, badge: Badge) -> bool:
        if self._built:
            raise RuntimeError("BadgeCollector has already been built")
        if badge.key in self._badges:
            self._log.debug("Dropping duplicate badge %s", badge.id)
            return False
        self._badges[badge.key] = badge
        return True

    def extend(self, badges: Iterable[Badge]) -> int:
        return sum(1 for badge in badges if self.add(badge))

    def build(self, finalize: Optional[Callable[[Badge], Badge]] = None) -> Dict[str, Tuple[Badge, ...]]:
        """Group collected badges by owner; the collector is closed afterwards."""

        if self._built:
            raise RuntimeError("BadgeCollector has already been built")
        self._built = True
        grouped: Dict[str, List[Badge]] = {}
        for badge in self._badges.values():
            final = finalize(badge) if finalize else badge
            grouped.setdefault(final.team_id, []).append(final)
        return {owner: tuple(badges) for owner, badges in grouped.items()}


__all__ = ["BadgeCollector"]
