"""Record tables: single-game, playoff, season, career and streak records."""

from .base import GameEntry, OwnerTotalEntry, RecordTable, RecordTracker
from .league import LeagueRecords, compute_records
from .matchups import MatchupRecords, compute_matchup_records
from .playoffs import PlayoffRecords, PlayoffSummary, compute_playoff_records, summarize_playoffs
from .seasons import (
    CareerRecords,
    OwnerSeasonTotals,
    SeasonEntry,
    SeasonRecordBook,
    SeasonRecords,
    compute_career_records,
    compute_season_records,
    summarize_seasons,
)
from .streaks import (
    PUBLISHED_CATEGORIES,
    GameLogEntry,
    StreakCategory,
    StreakEntry,
    StreakRecord,
    StreakScan,
    WeekRanking,
    build_game_logs,
    detect_streaks,
    streak_records,
    weekly_rankings,
)

__all__ = [
    "CareerRecords",
    "GameEntry",
    "GameLogEntry",
    "LeagueRecords",
    "MatchupRecords",
    "OwnerSeasonTotals",
    "OwnerTotalEntry",
    "PUBLISHED_CATEGORIES",
    "PlayoffRecords",
    "PlayoffSummary",
    "RecordTable",
    "RecordTracker",
    "SeasonEntry",
    "SeasonRecordBook",
    "SeasonRecords",
    "StreakCategory",
    "StreakEntry",
    "StreakRecord",
    "StreakScan",
    "WeekRanking",
    "build_game_logs",
    "compute_career_records",
    "compute_matchup_records",
    "compute_playoff_records",
    "compute_records",
    "compute_season_records",
    "detect_streaks",
    "streak_records",
    "summarize_playoffs",
    "summarize_seasons",
    "weekly_rankings",
]
