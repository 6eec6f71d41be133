"""Records and badge analytics for multi-season fantasy leagues."""

from __future__ import annotations

import logging

from leaguelore.errors import BadgeRuleError, IngestError, LeagueloreError

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BadgeRuleError",
    "IngestError",
    "LeagueloreError",
]
