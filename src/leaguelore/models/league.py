"""Canonical league records shared across ingestion, records and badge layers."""

from __future__ import annotations

from datetime import datetime
from typing import FrozenSet, Optional, Tuple

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


# Seasons outside this band cannot be turned into calendar timestamps safely.
MIN_SEASON = 1900
MAX_SEASON = 9998
# Upper bound for wins, losses or ties in a single season.
MAX_SEASON_GAMES = 100


class RosterAssignment(BaseModel):
    """Season-scoped pairing of a roster id with a stable owner identity."""

    season: int
    roster_id: str = Field(..., min_length=1)
    owner_id: str = Field(..., min_length=1)
    team_name: str = ""

    model_config = ConfigDict(frozen=True)


class RosterSeasonStats(BaseModel):
    """Season aggregate for one roster, computed upstream."""

    season: int
    owner_id: str = Field(..., min_length=1)
    roster_id: str = Field(..., min_length=1)
    team_name: str = ""
    wins: int = Field(default=0, ge=0, le=MAX_SEASON_GAMES)
    losses: int = Field(default=0, ge=0, le=MAX_SEASON_GAMES)
    ties: int = Field(default=0, ge=0, le=MAX_SEASON_GAMES)
    points_for: float = 0.0
    points_against: float = 0.0
    all_play_win_percentage: float = 0.0
    luck_rating: float = 0.0
    adjusted_dpr: float = 0.0
    is_champion: bool = False
    is_runner_up: bool = False
    is_third_place: bool = False
    transaction_fees: Optional[float] = None

    model_config = ConfigDict(frozen=True)


class Matchup(BaseModel):
    """One head-to-head game between two rosters."""

    season: int
    week: int = Field(..., ge=0)
    team1_roster_id: str = Field(..., min_length=1)
    team2_roster_id: str = Field(..., min_length=1)
    team1_score: float = Field(..., ge=0.0)
    team2_score: float = Field(..., ge=0.0)
    team1_owner_id: Optional[str] = None
    team2_owner_id: Optional[str] = None
    is_winners_bracket: bool = False
    is_losers_bracket: bool = False
    final_seeding_game: Optional[int] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_playoff(self) -> bool:
        return self.is_winners_bracket or self.is_losers_bracket

    @property
    def combined_score(self) -> float:
        return self.team1_score + self.team2_score

    @property
    def margin(self) -> float:
        return abs(self.team1_score - self.team2_score)

    @property
    def is_tie(self) -> bool:
        return self.team1_score == self.team2_score

    @property
    def winner_side(self) -> Optional[int]:
        if self.team1_score > self.team2_score:
            return 1
        if self.team2_score > self.team1_score:
            return 2
        return None

    @property
    def outcome(self) -> Optional[Tuple[int, int]]:
        """``(winner_side, loser_side)`` for a decided game, ``None`` for a tie."""

        winner = self.winner_side
        if winner is None:
            return None
        return winner, 2 if winner == 1 else 1

    @property
    def dedupe_key(self) -> Tuple[int, int, FrozenSet[str]]:
        return (self.season, self.week, frozenset((self.team1_roster_id, self.team2_roster_id)))

    @property
    def has_owners(self) -> bool:
        return bool(self.team1_owner_id) and bool(self.team2_owner_id)

    def is_placeholder(self, current_season: Optional[int]) -> bool:
        """Both scores zero in the current season means the game is not played yet."""

        return (
            current_season is not None
            and self.season == current_season
            and self.team1_score == 0
            and self.team2_score == 0
        )

    def side(self, side: int) -> Tuple[Optional[str], str, float]:
        """Return ``(owner_id, roster_id, score)`` for one side of the game."""

        if side == 1:
            return self.team1_owner_id, self.team1_roster_id, self.team1_score
        return self.team2_owner_id, self.team2_roster_id, self.team2_score

    def owner(self, side: int) -> str:
        """Owner id for one side, empty when ingestion could not resolve it."""

        return (self.team1_owner_id if side == 1 else self.team2_owner_id) or ""


class DraftPick(BaseModel):
    """Draft selection with identity resolved once at ingestion."""

    season: int
    pick_no: int
    round: int = Field(..., ge=1)
    pick_in_round: Optional[int] = None
    owner_id: Optional[str] = None
    roster_id: Optional[str] = None
    identity_keys: FrozenSet[str] = frozenset()
    original_roster_id: Optional[str] = None
    player_id: str = ""
    player_name: str = "Unknown Player"
    player_position: str = ""
    position: str = ""
    fantasy_points: float = 0.0
    is_keeper: bool = False

    model_config = ConfigDict(frozen=True)


class TradedPick(BaseModel):
    """Ledger entry for a draft pick that changed hands before the draft."""

    season: int
    round: int = Field(..., ge=1)
    original_roster_id: str = Field(..., min_length=1)
    current_owner_id: Optional[str] = None
    pick_no: Optional[int] = None

    model_config = ConfigDict(frozen=True)


class Transaction(BaseModel):
    """League transaction with its timestamp normalised to UTC."""

    transaction_id: str = ""
    type: str = ""
    created: datetime
    roster_ids: Tuple[str, ...] = ()
    fee: Optional[float] = None

    model_config = ConfigDict(frozen=True)


__all__ = [
    "MAX_SEASON",
    "MAX_SEASON_GAMES",
    "MIN_SEASON",
    "RosterAssignment",
    "RosterSeasonStats",
    "Matchup",
    "DraftPick",
    "TradedPick",
    "Transaction",
]
