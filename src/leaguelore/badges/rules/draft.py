"""Draft and roster construction badges."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Tuple

from leaguelore.config import DRAFT_POSITIONS
from leaguelore.draft import pick_vorp_entries, player_value, team_scaled_vorp_by_position
from leaguelore.models import Badge, BadgeCategory, DraftPick

from .common import SeasonContext, award, extremes


def _drafted(ctx: SeasonContext) -> List[DraftPick]:
    return [pick for pick in ctx.picks if not pick.is_keeper and pick.owner_id]


def _pick_metadata(pick: DraftPick) -> Dict[str, object]:
    return {
        "pick_no": pick.pick_no,
        "round": pick.round,
        "player_id": pick.player_id,
        "player_name": pick.player_name,
        "position": pick.position,
        "fantasy_points": pick.fantasy_points,
    }


def draft_king(ctx: SeasonContext) -> List[Badge]:
    totals: Dict[str, float] = defaultdict(float)
    for pick in _drafted(ctx):
        if pick.owner_id:
            totals[pick.owner_id] += player_value(pick)
    leaders = extremes([(owner, total) for owner, total in totals.items() if total > 0], lambda item: item[1])
    return [
        award("draft_king", "Draft King", BadgeCategory.DRAFT, owner, ctx.season, metadata={"draft_value": round(total, 2)})
        for owner, total in leaders
    ]


def draft_picks(ctx: SeasonContext) -> List[Badge]:
    """Best Draft Pick (max positive VORP delta) and Worst Draft Pick (min negative delta)."""

    entries = pick_vorp_entries(_drafted(ctx))
    badges: List[Badge] = []
    for entry in extremes([e for e in entries if e.delta > 0], lambda e: e.delta, "max"):
        badges.append(
            award(
                "best_draft_pick",
                "Best Draft Pick",
                BadgeCategory.DRAFT,
                entry.owner_id,
                ctx.season,
                disambiguator=(entry.pick.pick_no,),
                metadata={**_pick_metadata(entry.pick), "expected": round(entry.expected, 2), "vorp_delta": round(entry.delta, 2)},
            )
        )
    for entry in extremes([e for e in entries if e.delta < 0], lambda e: e.delta, "min"):
        badges.append(
            award(
                "worst_draft_pick",
                "Worst Draft Pick",
                ctx.settings.worst_pick_category,
                entry.owner_id,
                ctx.season,
                disambiguator=(entry.pick.pick_no,),
                metadata={**_pick_metadata(entry.pick), "expected": round(entry.expected, 2), "vorp_delta": round(entry.delta, 2)},
            )
        )
    return badges


def worst_position_drafters(ctx: SeasonContext) -> List[Badge]:
    """Worst {POS} Drafter: lowest scaled VORP at a position among owners who drafted it."""

    settings = ctx.settings
    summary = team_scaled_vorp_by_position(
        _drafted(ctx),
        strategy=settings.vorp_strategy,
        min_target=settings.vorp_min_target,
        max_target=settings.vorp_max_target,
        positions=DRAFT_POSITIONS,
    )
    badges: List[Badge] = []
    for position in DRAFT_POSITIONS:
        scored: List[Tuple[str, float]] = [
            (owner_id, owner.positions[position].scaled_sum)
            for owner_id, owner in summary.per_owner.items()
            if position in owner.positions
        ]
        if len(scored) < 2:
            continue
        for owner_id, value in extremes(scored, lambda item: item[1], "min"):
            badges.append(
                award(
                    f"worst_{position.lower()}_drafter",
                    f"Worst {position} Drafter",
                    settings.worst_drafter_category,
                    owner_id,
                    ctx.season,
                    metadata={"position": position, "scaled_vorp": round(value, 3), "strategy": settings.vorp_strategy},
                )
            )
    return badges


def top_position_rosters(ctx: SeasonContext) -> List[Badge]:
    """Top {POS} Roster from the per-player points table when present, else draft fantasy points."""

    table = ctx.history.player_season_points.get(ctx.season)
    totals: Dict[str, Dict[str, float]] = defaultdict(lambda: defaultdict(float))
    for pick in ctx.picks:
        if not pick.owner_id or pick.position not in DRAFT_POSITIONS:
            continue
        if table:
            points = table.get(pick.player_id, 0.0) if pick.player_id else 0.0
        else:
            points = player_value(pick)
        totals[pick.position][pick.owner_id] += points

    badges: List[Badge] = []
    for position in DRAFT_POSITIONS:
        owners = [(owner, total) for owner, total in totals.get(position, {}).items() if total > 0]
        for owner_id, total in extremes(owners, lambda item: item[1]):
            badges.append(
                award(
                    f"top_{position.lower()}_roster",
                    f"Top {position} Roster",
                    BadgeCategory.ROSTER,
                    owner_id,
                    ctx.season,
                    metadata={"position": position, "points": round(total, 2), "source": "player_points" if table else "draft"},
                )
            )
    return badges


DRAFT_RULES = (draft_king, draft_picks, worst_position_drafters, top_position_rosters)

__all__ = ["DRAFT_RULES", "draft_king", "draft_picks", "top_position_rosters", "worst_position_drafters"]
