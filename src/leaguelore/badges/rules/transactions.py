"""Transaction volume and fee badges."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional

from leaguelore.models import Badge, BadgeCategory

from .common import SeasonContext, award, extremes


def _transaction_counts(ctx: SeasonContext) -> Dict[str, int]:
    """Transactions per owner inside the season's calendar year."""

    counts: Dict[str, int] = defaultdict(int)
    for transaction in ctx.history.transactions:
        if transaction.created.year != ctx.season:
            continue
        owners = {ctx.history.owner_for_roster(ctx.season, roster_id) for roster_id in transaction.roster_ids}
        for owner_id in owners:
            if owner_id is not None:
                counts[owner_id] += 1
    return counts


def action_king(ctx: SeasonContext) -> List[Badge]:
    counts = _transaction_counts(ctx)
    leaders = extremes([(owner, count) for owner, count in counts.items() if count > 0], lambda item: item[1])
    badges = [
        award("action_king", "Action King", BadgeCategory.TRANSACTION, owner, ctx.season, metadata={"transactions": count})
        for owner, count in leaders
    ]
    milestone = ctx.settings.transaction_milestone
    badges.extend(
        award(
            "season_transactions",
            "Season Transactions",
            BadgeCategory.TRANSACTION,
            owner,
            ctx.season,
            metadata={"transactions": count, "milestone": milestone},
        )
        for owner, count in sorted(counts.items())
        if count >= milestone
    )
    return badges


def _transaction_fees(ctx: SeasonContext) -> Dict[str, float]:
    """Fee totals per owner; a fee is charged to the first roster listed on the transaction."""

    fees: Dict[str, float] = defaultdict(float)
    for transaction in ctx.history.transactions:
        if transaction.created.year != ctx.season or not transaction.fee or not transaction.roster_ids:
            continue
        owner = ctx.history.owner_for_roster(ctx.season, transaction.roster_ids[0])
        if owner is not None:
            fees[owner] += transaction.fee
    return fees


def _metric_fees(ctx: SeasonContext) -> Dict[str, float]:
    fees: Dict[str, float] = {}
    for row in ctx.stats:
        if row.transaction_fees:
            fees[row.owner_id] = row.transaction_fees
    return fees


def season_fees(ctx: SeasonContext) -> Dict[str, float]:
    source = ctx.settings.fee_source
    fees: Optional[Dict[str, float]] = None
    if source in ("transaction", "transaction_then_metrics"):
        fees = _transaction_fees(ctx)
    if source == "season_metrics" or (source == "transaction_then_metrics" and not fees):
        fees = _metric_fees(ctx)
    return fees or {}


def broke_ass(ctx: SeasonContext) -> List[Badge]:
    fees = [(owner, total) for owner, total in season_fees(ctx).items() if total > 0]
    return [
        award("broke_ass", "Broke Ass", BadgeCategory.BLUNDER, owner, ctx.season, metadata={"fees": round(total, 2)})
        for owner, total in extremes(fees, lambda item: item[1])
    ]


TRANSACTION_RULES = (action_king, broke_ass)

__all__ = ["TRANSACTION_RULES", "action_king", "broke_ass", "season_fees"]
