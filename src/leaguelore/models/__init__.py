"""Canonical models shared across ingestion, analytics and badge layers."""

from .badge import Badge, BadgeCategory, BadgeKey
from .league import (
    MAX_SEASON,
    MAX_SEASON_GAMES,
    MIN_SEASON,
    DraftPick,
    Matchup,
    RosterAssignment,
    RosterSeasonStats,
    TradedPick,
    Transaction,
)

__all__ = [
    "Badge",
    "BadgeCategory",
    "BadgeKey",
    "DraftPick",
    "MAX_SEASON",
    "MAX_SEASON_GAMES",
    "MIN_SEASON",
    "Matchup",
    "RosterAssignment",
    "RosterSeasonStats",
    "TradedPick",
    "Transaction",
]
