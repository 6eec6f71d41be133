"""Season standings badges: titles, finishes, DPR tiers and luck."""

from __future__ import annotations

from typing import List

from leaguelore.config import DPR_TIERS
from leaguelore.models import Badge, BadgeCategory, RosterSeasonStats

from .common import SeasonContext, award, extremes, percentile


def _title_holders(ctx: SeasonContext) -> List[RosterSeasonStats]:
    contenders = [row for row in ctx.stats if row.wins > 0]
    leaders = extremes(contenders, lambda row: row.wins)
    return extremes(leaders, lambda row: row.points_for)


def _all_play_holders(ctx: SeasonContext) -> List[RosterSeasonStats]:
    return extremes([row for row in ctx.stats if row.all_play_win_percentage > 0], lambda row: row.all_play_win_percentage)


def _points_ranking(ctx: SeasonContext) -> List[RosterSeasonStats]:
    scored = [row for row in ctx.stats if row.points_for > 0]
    return sorted(scored, key=lambda row: (-row.points_for, row.owner_id))


def season_title(ctx: SeasonContext) -> List[Badge]:
    return [
        award(
            "season_title",
            "Season Title",
            BadgeCategory.SEASON,
            row.owner_id,
            ctx.season,
            metadata={"wins": row.wins, "losses": row.losses, "points_for": row.points_for},
        )
        for row in _title_holders(ctx)
    ]


def points_titles(ctx: SeasonContext) -> List[Badge]:
    """Points Title, Points Runner-Up and Points 3rd from a stable points ranking."""

    places = (
        ("points_title", "Points Title"),
        ("points_runner_up", "Points Runner-Up"),
        ("points_third", "Points 3rd Place"),
    )
    badges: List[Badge] = []
    for rank, (row, (slug, name)) in enumerate(zip(_points_ranking(ctx), places), start=1):
        badges.append(
            award(slug, name, BadgeCategory.SEASON, row.owner_id, ctx.season, metadata={"rank": rank, "points_for": row.points_for})
        )
    return badges


def all_play_title(ctx: SeasonContext) -> List[Badge]:
    return [
        award(
            "season_all_play_title",
            "Season All-Play Title",
            BadgeCategory.SEASON,
            row.owner_id,
            ctx.season,
            metadata={"all_play_win_percentage": row.all_play_win_percentage},
        )
        for row in _all_play_holders(ctx)
    ]


def triple_crown(ctx: SeasonContext) -> List[Badge]:
    ranking = _points_ranking(ctx)
    if not ranking:
        return []
    title = {row.owner_id for row in _title_holders(ctx)}
    all_play = {row.owner_id for row in _all_play_holders(ctx)}
    owner = ranking[0].owner_id
    if owner in title and owner in all_play:
        return [award("triple_crown", "Triple Crown", BadgeCategory.CHAMPION, owner, ctx.season)]
    return []


def playoff_finishes(ctx: SeasonContext) -> List[Badge]:
    badges: List[Badge] = []
    for row in ctx.stats:
        if row.is_champion:
            badges.append(award("champion", "Champion", BadgeCategory.CHAMPION, row.owner_id, ctx.season))
        if row.is_runner_up:
            badges.append(award("runner_up", "Runner Up", BadgeCategory.CHAMPION, row.owner_id, ctx.season))
        if row.is_third_place:
            badges.append(award("third_place", "3rd Place", BadgeCategory.CHAMPION, row.owner_id, ctx.season))
    return badges


def dpr_tiers(ctx: SeasonContext) -> List[Badge]:
    badges: List[Badge] = []
    for row in ctx.stats:
        if row.adjusted_dpr <= 0:
            continue
        dpr = round(row.adjusted_dpr, 3)
        for tier in DPR_TIERS:
            if tier.contains(dpr):
                badges.append(
                    award(tier.slug, tier.name, tier.category, row.owner_id, ctx.season, metadata={"adjusted_dpr": dpr})
                )
                break
    return badges


def luck(ctx: SeasonContext) -> List[Badge]:
    """Lucky Duck (max luck rating) and Cursed (min); skipped when every rating is equal."""

    ratings = {row.luck_rating for row in ctx.stats}
    if len(ratings) < 2:
        return []
    badges = [
        award("lucky_duck", "Lucky Duck", BadgeCategory.SEASON, row.owner_id, ctx.season, metadata={"luck_rating": row.luck_rating})
        for row in extremes(ctx.stats, lambda row: row.luck_rating, "max")
    ]
    badges.extend(
        award("cursed", "Cursed", BadgeCategory.BLUNDER, row.owner_id, ctx.season, metadata={"luck_rating": row.luck_rating})
        for row in extremes(ctx.stats, lambda row: row.luck_rating, "min")
    )
    return badges


def _opponent_strength(ctx: SeasonContext, owner_id: str) -> float | None:
    """Average season points_for of the opponents ``owner_id`` met outside the playoffs."""

    strengths: List[float] = []
    for matchup in ctx.regular_matchups:
        if matchup.team1_owner_id == owner_id:
            opponent = matchup.team2_owner_id
        elif matchup.team2_owner_id == owner_id:
            opponent = matchup.team1_owner_id
        else:
            continue
        row = ctx.stats_for(opponent) if opponent else None
        if row is not None:
            strengths.append(row.points_for)
    if not strengths:
        return None
    return sum(strengths) / len(strengths)


def heavyweight_champion(ctx: SeasonContext) -> List[Badge]:
    champions = [row for row in ctx.stats if row.is_champion]
    if not champions:
        return []
    strength = {row.owner_id: _opponent_strength(ctx, row.owner_id) for row in ctx.stats}
    known = [value for value in strength.values() if value is not None]
    cutoff = percentile(known, ctx.settings.heavyweight_percentile)
    if cutoff is None:
        return []
    badges: List[Badge] = []
    for row in champions:
        value = strength.get(row.owner_id)
        if value is not None and value >= cutoff:
            badges.append(
                award(
                    "heavyweight_champion",
                    "Heavyweight Champion",
                    BadgeCategory.CHAMPION,
                    row.owner_id,
                    ctx.season,
                    metadata={"average_opponent_points_for": round(value, 2), "percentile_cutoff": round(cutoff, 2)},
                )
            )
    return badges


def comeback_kid(ctx: SeasonContext) -> List[Badge]:
    window = ctx.settings.comeback_weeks
    badges: List[Badge] = []
    for row in ctx.stats:
        if not row.is_champion:
            continue
        early = [
            m
            for m in ctx.regular_matchups
            if 1 <= m.week <= window and row.owner_id in (m.team1_owner_id, m.team2_owner_id)
        ]
        if not early:
            continue
        wins = sum(
            1
            for m in early
            if (m.winner_side == 1 and m.team1_owner_id == row.owner_id)
            or (m.winner_side == 2 and m.team2_owner_id == row.owner_id)
        )
        if wins == 0:
            badges.append(
                award(
                    "comeback_kid",
                    "Comeback Kid",
                    BadgeCategory.CHAMPION,
                    row.owner_id,
                    ctx.season,
                    metadata={"early_games": len(early), "weeks": window},
                )
            )
    return badges


def against_all_odds(ctx: SeasonContext) -> List[Badge]:
    cutoff = percentile([row.luck_rating for row in ctx.stats], ctx.settings.against_all_odds_percentile)
    if cutoff is None or len({row.luck_rating for row in ctx.stats}) < 2:
        return []
    return [
        award(
            "against_all_odds",
            "Against All Odds",
            BadgeCategory.CHAMPION,
            row.owner_id,
            ctx.season,
            metadata={"luck_rating": row.luck_rating, "percentile_cutoff": round(cutoff, 4)},
        )
        for row in ctx.stats
        if row.is_champion and row.luck_rating <= cutoff
    ]


def silverback_to_back(ctx: SeasonContext) -> List[Badge]:
    previous = {row.owner_id for row in ctx.history.stats_by_season.get(ctx.season - 1, ()) if row.is_runner_up}
    return [
        award("silverback_to_back", "Silverback-To-Back", BadgeCategory.CHAMPION, row.owner_id, ctx.season)
        for row in ctx.stats
        if row.is_runner_up and row.owner_id in previous
    ]


SEASON_RULES = (
    season_title,
    points_titles,
    all_play_title,
    triple_crown,
    playoff_finishes,
    dpr_tiers,
    luck,
    heavyweight_champion,
    comeback_kid,
    against_all_odds,
    silverback_to_back,
)

__all__ = [
    "SEASON_RULES",
    "against_all_odds",
    "all_play_title",
    "comeback_kid",
    "dpr_tiers",
    "heavyweight_champion",
    "luck",
    "playoff_finishes",
    "points_titles",
    "season_title",
    "silverback_to_back",
    "triple_crown",
]
