"""Career badges: championship droughts, win milestones and tenure."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Set

from leaguelore.models import Badge, BadgeCategory

from .common import CareerContext, award


def _seasons_by_owner(ctx: CareerContext) -> Dict[str, Set[int]]:
    seasons: Dict[str, Set[int]] = defaultdict(set)
    for season, rows in ctx.history.stats_by_season.items():
        if season > ctx.latest_season:
            continue
        for row in rows:
            seasons[row.owner_id].add(season)
    return seasons


def champion_drought(ctx: CareerContext) -> List[Badge]:
    """One blunder per ``drought_step`` seasons without a title, counted to the latest season.

    The drought starts at the last title season, or the season before the
    owner's first season for owners who never won.
    """

    step = ctx.settings.drought_step
    if step <= 0:
        return []
    titles: Dict[str, List[int]] = defaultdict(list)
    for season, rows in ctx.history.stats_by_season.items():
        for row in rows:
            if row.is_champion and season <= ctx.latest_season:
                titles[row.owner_id].append(season)

    badges: List[Badge] = []
    for owner_id, seasons in sorted(_seasons_by_owner(ctx).items()):
        baseline = max(titles[owner_id]) if titles.get(owner_id) else min(seasons) - 1
        elapsed = ctx.latest_season - baseline
        for milestone in range(step, elapsed + 1, step):
            badges.append(
                award(
                    "champion_drought",
                    f"Champion Drought - {milestone}",
                    BadgeCategory.BLUNDER,
                    owner_id,
                    baseline + milestone,
                    disambiguator=(milestone,),
                    metadata={"seasons_without_title": milestone, "last_title": baseline if titles.get(owner_id) else None},
                )
            )
    return badges


def total_wins(ctx: CareerContext) -> List[Badge]:
    step = ctx.settings.wins_milestone_step
    if step <= 0:
        return []
    running: Dict[str, int] = defaultdict(int)
    badges: List[Badge] = []
    for season in sorted(ctx.history.stats_by_season):
        if season > ctx.latest_season:
            continue
        for row in sorted(ctx.history.stats_by_season[season], key=lambda r: r.owner_id):
            before = running[row.owner_id]
            after = before + row.wins
            running[row.owner_id] = after
            for threshold in range((before // step + 1) * step, after + 1, step):
                badges.append(
                    award(
                        "total_wins",
                        f"Total Wins - {threshold}",
                        BadgeCategory.LEAGUE,
                        row.owner_id,
                        season,
                        disambiguator=(threshold,),
                        metadata={"threshold": threshold, "career_wins": after},
                    )
                )
    return badges


def tenure(ctx: CareerContext) -> List[Badge]:
    """Veteran Presence and Old Timer; year-less career badges."""

    badges: List[Badge] = []
    for owner_id, seasons in sorted(_seasons_by_owner(ctx).items()):
        count = len(seasons)
        if count >= ctx.settings.veteran_seasons:
            badges.append(
                award("veteran_presence", "Veteran Presence", BadgeCategory.LEAGUE, owner_id, None, metadata={"seasons": count})
            )
        if count >= ctx.settings.old_timer_seasons:
            badges.append(award("old_timer", "Old Timer", BadgeCategory.LEAGUE, owner_id, None, metadata={"seasons": count}))
    return badges


CAREER_RULES = (champion_drought, total_wins, tenure)

__all__ = ["CAREER_RULES", "champion_drought", "tenure", "total_wins"]
