"""Assemble every record table for a league history."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from leaguelore.config import EngineSettings
from leaguelore.ingest import LeagueHistory
from leaguelore.records.matchups import MatchupRecords, compute_matchup_records
from leaguelore.records.playoffs import PlayoffRecords, compute_playoff_records
from leaguelore.records.seasons import (
    CareerRecords,
    SeasonRecordBook,
    compute_career_records,
    compute_season_records,
    summarize_seasons,
)
from leaguelore.records.streaks import StreakCategory, StreakRecord, detect_streaks, streak_records


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeagueRecords:
    matchup: MatchupRecords
    playoff: PlayoffRecords
    streak: Dict[StreakCategory, StreakRecord]
    season: SeasonRecordBook
    career: CareerRecords


def compute_records(
    history: LeagueHistory,
    settings: Optional[EngineSettings] = None,
    *,
    diagnostics: logging.Logger | None = None,
) -> LeagueRecords:
    settings = settings or EngineSettings()
    log = diagnostics or logger
    current_season = settings.current_season if settings.current_season is not None else history.latest_season
    matchups = history.all_matchups()
    scan = detect_streaks(
        matchups,
        current_season=current_season,
        current_week=settings.current_week,
        diagnostics=log,
    )
    seasons = summarize_seasons(matchups, history.stats_by_season, current_season=current_season)
    return LeagueRecords(
        matchup=compute_matchup_records(matchups, current_season=current_season),
        playoff=compute_playoff_records(matchups),
        streak=streak_records(scan, diagnostics=log),
        season=compute_season_records(seasons),
        career=compute_career_records(seasons),
    )


__all__ = ["LeagueRecords", "compute_records"]
