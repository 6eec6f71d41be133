"""Raw league payload ingestion."""

from .league import (
    LeagueHistory,
    epoch_to_datetime,
    load_league_history,
    normalize_draft_pick,
    normalize_matchup,
    normalize_roster,
    normalize_season_stats,
    normalize_traded_pick,
    normalize_transaction,
)

__all__ = [
    "LeagueHistory",
    "epoch_to_datetime",
    "load_league_history",
    "normalize_draft_pick",
    "normalize_matchup",
    "normalize_roster",
    "normalize_season_stats",
    "normalize_traded_pick",
    "normalize_transaction",
]
