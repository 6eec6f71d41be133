"""Draft value model and keeper slot resolution."""

from .keepers import KeeperSlot, derive_pick_in_round, resolve_keeper_pick, resolve_keeper_pick_for_history
from .report import WorstDrafterRow, worst_drafter_report
from .value import (
    OwnerVorp,
    PickVorp,
    PositionVorp,
    TeamVorpSummary,
    VorpScaleMeta,
    expected_value,
    expected_value_by_pick_slot,
    normalize_position,
    pick_vorp_entries,
    player_value,
    rescale,
    team_scaled_vorp_by_position,
    vorp_delta,
)

__all__ = [
    "KeeperSlot",
    "WorstDrafterRow",
    "OwnerVorp",
    "PickVorp",
    "PositionVorp",
    "TeamVorpSummary",
    "VorpScaleMeta",
    "derive_pick_in_round",
    "expected_value",
    "expected_value_by_pick_slot",
    "normalize_position",
    "pick_vorp_entries",
    "player_value",
    "rescale",
    "resolve_keeper_pick",
    "resolve_keeper_pick_for_history",
    "team_scaled_vorp_by_position",
    "vorp_delta",
    "worst_drafter_report",
]
