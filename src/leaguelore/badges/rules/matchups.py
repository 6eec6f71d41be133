"""Single-game badges scanned over every matchup of a season."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Literal, Tuple

from leaguelore.config import MARGIN_BANDS
from leaguelore.models import Badge, BadgeCategory, Matchup

from .common import SeasonContext, award, extremes, game_metadata


def _game_award(slug: str, name: str, category: BadgeCategory, ctx: SeasonContext, matchup: Matchup, side: int) -> Badge:
    other = 2 if side == 1 else 1
    return award(
        slug,
        name,
        category,
        matchup.owner(side),
        ctx.season,
        disambiguator=(matchup.week, matchup.owner(other)),
        metadata=game_metadata(matchup, side),
    )


def _sides(ctx: SeasonContext) -> List[Tuple[Matchup, int]]:
    return [(m, side) for m in ctx.matchups for side in (1, 2)]


def _decided(ctx: SeasonContext) -> List[Tuple[Matchup, int, int]]:
    """``(matchup, winner_side, loser_side)`` for every game that was not a tie."""

    decided: List[Tuple[Matchup, int, int]] = []
    for matchup in ctx.matchups:
        outcome = matchup.outcome
        if outcome is not None:
            decided.append((matchup, outcome[0], outcome[1]))
    return decided


def peak_performance(ctx: SeasonContext) -> List[Badge]:
    holders = extremes(_sides(ctx), lambda item: item[0].side(item[1])[2])
    return [
        _game_award("peak_performance", "Peak Performance", BadgeCategory.MATCHUP, ctx, m, side)
        for m, side in holders
        if m.side(side)[2] > 0
    ]


def the_shootout(ctx: SeasonContext) -> List[Badge]:
    badges: List[Badge] = []
    for matchup in extremes(ctx.matchups, lambda m: m.combined_score):
        if matchup.combined_score <= 0:
            continue
        for side in (1, 2):
            badge = _game_award("the_shootout", "The Shootout", BadgeCategory.MATCHUP, ctx, matchup, side)
            badges.append(badge.model_copy(update={"metadata": {**badge.metadata, "combined_score": matchup.combined_score}}))
    return badges


def massacre(ctx: SeasonContext) -> List[Badge]:
    """Largest winning margin; the loser of that game gets The Bye Week."""

    badges: List[Badge] = []
    for matchup, winner, loser in extremes(_decided(ctx), lambda item: round(item[0].margin, 2)):
        badges.append(_game_award("massacre", "Massacre", BadgeCategory.MATCHUP, ctx, matchup, winner))
        badges.append(_game_award("the_bye_week", "The Bye Week", BadgeCategory.BLUNDER, ctx, matchup, loser))
    return badges


def margin_bands(ctx: SeasonContext) -> List[Badge]:
    badges: List[Badge] = []
    for matchup, winner, loser in _decided(ctx):
        margin = round(matchup.margin, 2)
        band = next((b for b in MARGIN_BANDS if b.contains(margin)), None)
        if band is None:
            continue
        badges.append(_game_award(band.slug, band.victory_name, BadgeCategory.MATCHUP, ctx, matchup, winner))
        badges.append(_game_award(band.defeat_slug, band.defeat_name, BadgeCategory.BLUNDER, ctx, matchup, loser))
    return badges


def double_up(ctx: SeasonContext) -> List[Badge]:
    badges: List[Badge] = []
    for matchup, winner, loser in _decided(ctx):
        if matchup.side(winner)[2] >= 2 * matchup.side(loser)[2]:
            badges.append(_game_award("double_up", "Double Up", BadgeCategory.MATCHUP, ctx, matchup, winner))
            badges.append(_game_award("doubled_up", "Doubled Up", BadgeCategory.BLUNDER, ctx, matchup, loser))
    return badges


_SHARE_AWARDS: Tuple[Tuple[str, str, BadgeCategory, Literal["max", "min"]], ...] = (
    ("firing_squad", "Firing Squad", BadgeCategory.MATCHUP, "max"),
    ("the_undercard", "The Undercard", BadgeCategory.BLUNDER, "min"),
)


def score_share(ctx: SeasonContext) -> List[Badge]:
    """Firing Squad for the highest share of a game's points, The Undercard for the lowest."""

    sides = [(m, side) for m, side in _sides(ctx) if m.combined_score > 0]

    def share(item: Tuple[Matchup, int]) -> float:
        matchup, side = item
        return matchup.side(side)[2] / matchup.combined_score

    badges: List[Badge] = []
    for slug, name, category, mode in _SHARE_AWARDS:
        for matchup, side in extremes(sides, share, mode):
            badge = _game_award(slug, name, category, ctx, matchup, side)
            badges.append(badge.model_copy(update={"metadata": {**badge.metadata, "score_share": round(share((matchup, side)), 4)}}))
    return badges


def thread_the_needle(ctx: SeasonContext) -> List[Badge]:
    candidates = [item for item in _decided(ctx) if round(item[0].margin, 2) > 0]
    return [
        _game_award("thread_the_needle", "Thread The Needle", BadgeCategory.MATCHUP, ctx, matchup, winner)
        for matchup, winner, _ in extremes(candidates, lambda item: round(item[0].margin, 2), "min")
    ]


def the_snoozer(ctx: SeasonContext) -> List[Badge]:
    candidates = [m for m in ctx.matchups if m.team1_score > 0 and m.team2_score > 0]
    badges: List[Badge] = []
    for matchup in extremes(candidates, lambda m: m.combined_score, "min"):
        outcome = matchup.outcome
        if outcome is None:
            continue
        badges.append(_game_award("the_snoozer", "The Snoozer", BadgeCategory.BLUNDER, ctx, matchup, outcome[1]))
    return badges


def spoiled_goods(ctx: SeasonContext) -> List[Badge]:
    """Second-best score of the week, lost head-to-head to the week's top scorer."""

    by_week: Dict[int, List[Matchup]] = defaultdict(list)
    for matchup in ctx.matchups:
        by_week[matchup.week].append(matchup)
    badges: List[Badge] = []
    for week in sorted(by_week):
        scores = sorted((score for m in by_week[week] for score in (m.team1_score, m.team2_score)), reverse=True)
        if len(scores) < 2 or scores[0] == scores[1]:
            continue
        top, second = scores[0], scores[1]
        for matchup in by_week[week]:
            if {matchup.team1_score, matchup.team2_score} == {top, second}:
                loser = 1 if matchup.team1_score == second else 2
                badges.append(_game_award("spoiled_goods", "Spoiled Goods", BadgeCategory.BLUNDER, ctx, matchup, loser))
    return badges


def bully(ctx: SeasonContext) -> List[Badge]:
    """Bully/Bullied once a winner beats the same opponent ``bully_wins`` times in a season."""

    threshold = ctx.settings.bully_wins
    wins: Dict[Tuple[str, str], int] = defaultdict(int)
    badges: List[Badge] = []
    for matchup, winner, loser in sorted(_decided(ctx), key=lambda item: item[0].week):
        pair = (matchup.owner(winner), matchup.owner(loser))
        wins[pair] += 1
        if wins[pair] != threshold:
            continue
        metadata = {"week": matchup.week, "wins": threshold}
        badges.append(
            award("bully", "Bully", BadgeCategory.MATCHUP, pair[0], ctx.season, disambiguator=(pair[1],), metadata={**metadata, "opponent_id": pair[1]})
        )
        badges.append(
            award("bullied", "Bullied", BadgeCategory.BLUNDER, pair[1], ctx.season, disambiguator=(pair[0],), metadata={**metadata, "opponent_id": pair[0]})
        )
    return badges


MATCHUP_RULES = (
    peak_performance,
    the_shootout,
    massacre,
    margin_bands,
    double_up,
    score_share,
    thread_the_needle,
    the_snoozer,
    spoiled_goods,
    bully,
)

__all__ = [
    "MATCHUP_RULES",
    "bully",
    "double_up",
    "margin_bands",
    "massacre",
    "peak_performance",
    "score_share",
    "spoiled_goods",
    "the_shootout",
    "the_snoozer",
    "thread_the_needle",
]
