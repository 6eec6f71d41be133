"""Resolve the draft slot a keeper costs an owner, following traded picks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Set

from leaguelore.models import DraftPick, RosterAssignment, TradedPick

if TYPE_CHECKING:
    from leaguelore.ingest import LeagueHistory


_UNKNOWN_PICK = "\u2014"


@dataclass(frozen=True)
class KeeperSlot:
    resolved: bool
    label: str
    round: Optional[int] = None
    pick_in_round: Optional[int] = None
    pick_no: Optional[int] = None


def _unresolved(target_round: int) -> KeeperSlot:
    return KeeperSlot(resolved=False, label=f"Round Cost: R{target_round}")


def _roster_for(owner_id: str, rosters: Iterable[RosterAssignment]) -> Optional[str]:
    rosters = list(rosters)
    for roster in rosters:
        if roster.roster_id == owner_id:
            return roster.roster_id
    for roster in rosters:
        if roster.owner_id == owner_id:
            return roster.roster_id
    return None


def _matches(pick: DraftPick, identities: Set[str]) -> bool:
    if pick.identity_keys & identities:
        return True
    return pick.roster_id in identities or pick.owner_id in identities


def derive_pick_in_round(pick: DraftPick, season_picks: Sequence[DraftPick]) -> Optional[int]:
    """Position of ``pick`` within its round, derived from ``pick_no`` order when absent."""

    if pick.pick_in_round is not None:
        return pick.pick_in_round
    round_picks = sorted((p for p in season_picks if p.round == pick.round), key=lambda p: p.pick_no)
    for index, candidate in enumerate(round_picks, start=1):
        if candidate.pick_no == pick.pick_no:
            return index
    return None


def resolve_keeper_pick(
    season_picks: Sequence[DraftPick],
    traded_picks: Sequence[TradedPick],
    rosters_for_season: Sequence[RosterAssignment],
    owner_id: str,
    target_season: int,
    target_round: int,
) -> KeeperSlot:
    """Find the pick ``owner_id`` holds in ``target_round`` of ``target_season``.

    Lookup order: a pick the owner made directly, then a pick acquired
    through the traded-pick ledger, then the same two checks for each earlier
    round. Not finding anything is a normal outcome and yields a
    ``Round Cost`` label.
    """

    picks = [p for p in season_picks if p.season == target_season]
    if not picks:
        return _unresolved(target_round)

    roster_id = _roster_for(owner_id, (r for r in rosters_for_season if r.season == target_season))
    identities = {owner_id}
    if roster_id is not None:
        identities.add(roster_id)

    ledger = [tp for tp in traded_picks if tp.season == target_season]

    def find_in_round(round_no: int) -> Optional[DraftPick]:
        in_round = [p for p in picks if p.round == round_no]
        for pick in in_round:
            if _matches(pick, identities):
                return pick
        if roster_id is None:
            return None
        for traded in ledger:
            if traded.round != round_no or traded.current_owner_id != roster_id:
                continue
            original = traded.original_roster_id
            for pick in in_round:
                if pick.roster_id == original or pick.original_roster_id == original:
                    return pick
            if traded.pick_no is not None:
                for pick in in_round:
                    if pick.pick_no == traded.pick_no:
                        return pick
        return None

    for round_no in range(target_round, 0, -1):
        pick = find_in_round(round_no)
        if pick is None:
            continue
        pick_in_round = derive_pick_in_round(pick, picks)
        pick_no = pick.pick_no if pick.pick_no > 0 else None
        return KeeperSlot(
            resolved=True,
            label=f"R{round_no} • Pick {pick_in_round or pick_no or _UNKNOWN_PICK}",
            round=round_no,
            pick_in_round=pick_in_round,
            pick_no=pick_no,
        )
    return _unresolved(target_round)


def resolve_keeper_pick_for_history(
    history: "LeagueHistory", owner_id: str, target_season: int, target_round: int
) -> KeeperSlot:
    return resolve_keeper_pick(
        history.picks_by_season.get(target_season, ()),
        history.traded_picks_by_season.get(target_season, ()),
        history.rosters_by_season.get(target_season, ()),
        owner_id,
        target_season,
        target_round,
    )


__all__ = ["KeeperSlot", "derive_pick_in_round", "resolve_keeper_pick", "resolve_keeper_pick_for_history"]
