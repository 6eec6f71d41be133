"""Normalise raw league history mappings into canonical records.

Raw payloads follow the shapes produced by the league data layer::

    historical_data = {
        "rostersBySeason": {season: [{"roster_id", "owner_id", "metadata": {...}}]},
        "matchupsBySeason": {season: [{"week", "team1_roster_id", "team1_score", ...}]},
        "winnersBracketBySeason": {...},   # optional, merged into matchups
        "losersBracketBySeason": {...},    # optional, merged into matchups
        "draftPicksBySeason": {season: [{"pick_no", "round", "picked_by", ...}]},
        "tradedPicksBySeason": {season: [{"round", "roster_id", "owner_id"}]},
        "playerSeasonPoints": {season: {player_id: points}},
    }
    processed_seasonal_records = {season: {roster_id: {"wins", "pointsFor", ...}}}

Owner identity is scattered across ``picked_by``/``owner_id``/``roster_id`` and
nested metadata variants. It is resolved here, once, into a canonical
``(owner_id, roster_id)`` pair per record; downstream code never repeats the
fallback chain. Malformed records are skipped with a diagnostic.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError

from leaguelore.config.settings import TimestampUnit
from leaguelore.draft.value import normalize_position
from leaguelore.errors import IngestError
from leaguelore.models import (
    MAX_SEASON,
    MIN_SEASON,
    DraftPick,
    Matchup,
    RosterAssignment,
    RosterSeasonStats,
    TradedPick,
    Transaction,
)


logger = logging.getLogger(__name__)

_MS_THRESHOLD = 1e11

_PICK_IDENTITY_FIELDS = ("roster_id", "picked_by", "owner_id")
_PICK_METADATA_IDENTITY_FIELDS = ("owner_id", "owner", "original_owner_id", "original_owner")
_PICK_LINKAGE_FIELDS = ("original_roster_id", "original_owner_roster_id", "original_owner")


# ----------------------------
# Scalar coercion
# ----------------------------


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def _to_int(value: Any) -> Optional[int]:
    number = _to_float(value)
    if number is None:
        return None
    return int(number)


def _to_id(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, Mapping):
        return list(value.values())
    return []


def _season_in_range(season: int) -> bool:
    return MIN_SEASON <= season <= MAX_SEASON


def _season_items(container: Any, log: logging.Logger, label: str) -> Iterable[Tuple[int, Any]]:
    for key, value in _as_mapping(container).items():
        season = _to_int(key)
        if season is None:
            log.debug("Skipping %s entry with non-numeric season key %r", label, key)
            continue
        if not _season_in_range(season):
            log.warning("Skipping %s entry with out-of-range season %s", label, season)
            continue
        yield season, value


def epoch_to_datetime(value: Any, unit: TimestampUnit = "auto") -> datetime:
    """Convert an epoch value to an aware UTC datetime.

    ``unit="auto"`` treats magnitudes of 1e11 and above as milliseconds;
    seconds-based timestamps do not reach that range until the year 5138.
    """

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    number = _to_float(value)
    if number is None:
        raise IngestError(f"timestamp {value!r} is not numeric")
    if unit == "ms" or (unit == "auto" and abs(number) >= _MS_THRESHOLD):
        number /= 1000.0
    try:
        return datetime.fromtimestamp(number, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise IngestError(f"timestamp {value!r} is out of range") from exc


# ----------------------------
# History container
# ----------------------------


@dataclass(frozen=True)
class LeagueHistory:
    """Materialised league history keyed by season."""

    rosters_by_season: Mapping[int, Tuple[RosterAssignment, ...]] = field(default_factory=dict)
    stats_by_season: Mapping[int, Tuple[RosterSeasonStats, ...]] = field(default_factory=dict)
    matchups_by_season: Mapping[int, Tuple[Matchup, ...]] = field(default_factory=dict)
    picks_by_season: Mapping[int, Tuple[DraftPick, ...]] = field(default_factory=dict)
    traded_picks_by_season: Mapping[int, Tuple[TradedPick, ...]] = field(default_factory=dict)
    transactions: Tuple[Transaction, ...] = ()
    player_season_points: Mapping[int, Mapping[str, float]] = field(default_factory=dict)
    users: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_records(
        cls,
        *,
        rosters: Iterable[RosterAssignment] = (),
        stats: Iterable[RosterSeasonStats] = (),
        matchups: Iterable[Matchup] = (),
        picks: Iterable[DraftPick] = (),
        traded_picks: Iterable[TradedPick] = (),
        transactions: Iterable[Transaction] = (),
        player_season_points: Mapping[int, Mapping[str, float]] | None = None,
        users: Mapping[str, str] | None = None,
    ) -> "LeagueHistory":
        """Group already-normalised records by season.

        Rosters missing from ``rosters`` are derived from ``stats`` so owner
        lookups work for callers that only supply season aggregates.
        """

        roster_list = list(rosters)
        stats_list = list(stats)
        known = {(r.season, r.roster_id) for r in roster_list}
        for row in stats_list:
            if (row.season, row.roster_id) not in known:
                roster_list.append(
                    RosterAssignment(
                        season=row.season,
                        roster_id=row.roster_id,
                        owner_id=row.owner_id,
                        team_name=row.team_name,
                    )
                )
                known.add((row.season, row.roster_id))
        return cls(
            rosters_by_season=_group_by_season(roster_list),
            stats_by_season=_group_by_season(stats_list),
            matchups_by_season=_group_by_season(matchups),
            picks_by_season=_group_by_season(picks),
            traded_picks_by_season=_group_by_season(traded_picks),
            transactions=tuple(transactions),
            player_season_points=dict(player_season_points or {}),
            users=dict(users or {}),
        )

    @property
    def seasons(self) -> Tuple[int, ...]:
        keys = set(self.stats_by_season) | set(self.matchups_by_season) | set(self.picks_by_season)
        keys |= set(self.rosters_by_season)
        return tuple(sorted(keys))

    @property
    def latest_season(self) -> Optional[int]:
        seasons = self.seasons
        return seasons[-1] if seasons else None

    def owner_for_roster(self, season: int, roster_id: Optional[str]) -> Optional[str]:
        if roster_id is None:
            return None
        for roster in self.rosters_by_season.get(season, ()):
            if roster.roster_id == roster_id:
                return roster.owner_id
        return None

    def roster_for_owner(self, season: int, owner_id: Optional[str]) -> Optional[str]:
        if owner_id is None:
            return None
        for roster in self.rosters_by_season.get(season, ()):
            if roster.owner_id == owner_id:
                return roster.roster_id
        return None

    def team_name(self, owner_id: str, season: Optional[int] = None) -> str:
        """Best display name for an owner, preferring the season's team name."""

        seasons: Sequence[int] = (season,) if season is not None else tuple(reversed(self.seasons))
        for candidate in seasons:
            for row in self.stats_by_season.get(candidate, ()):
                if row.owner_id == owner_id and row.team_name:
                    return row.team_name
            for roster in self.rosters_by_season.get(candidate, ()):
                if roster.owner_id == owner_id and roster.team_name:
                    return roster.team_name
        return self.users.get(owner_id) or owner_id

    def all_matchups(self) -> List[Matchup]:
        return [m for season in sorted(self.matchups_by_season) for m in self.matchups_by_season[season]]


def _group_by_season(records: Iterable[Any]) -> Dict[int, Tuple[Any, ...]]:
    grouped: Dict[int, List[Any]] = defaultdict(list)
    for record in records:
        grouped[record.season].append(record)
    return {season: tuple(items) for season, items in sorted(grouped.items())}


# ----------------------------
# Single-record normalisers
# ----------------------------


def normalize_roster(raw: Any, season: int) -> RosterAssignment:
    if not isinstance(raw, Mapping):
        raise IngestError(f"roster entry must be a mapping, got {type(raw).__name__}")
    metadata = _as_mapping(raw.get("metadata"))
    roster_id = _to_id(_first(raw, "roster_id", "rosterId"))
    owner_id = _to_id(_first(raw, "owner_id", "ownerId"))
    if roster_id is None or owner_id is None:
        raise IngestError(f"roster entry missing roster_id/owner_id: {raw!r}")
    team_name = _first(metadata, "team_name") or _first(raw, "team_name", "teamName") or ""
    return RosterAssignment(season=season, roster_id=roster_id, owner_id=owner_id, team_name=str(team_name))


def normalize_season_stats(
    raw: Any,
    season: int,
    *,
    roster_key: Optional[str] = None,
    owner_lookup: Callable[[Optional[str]], Optional[str]] = lambda _roster_id: None,
) -> RosterSeasonStats:
    if not isinstance(raw, Mapping):
        raise IngestError(f"season metrics must be a mapping, got {type(raw).__name__}")
    roster_id = _to_id(_first(raw, "rosterId", "roster_id")) or roster_key
    owner_id = _to_id(_first(raw, "ownerId", "owner_id")) or owner_lookup(roster_id)
    if roster_id is None:
        raise IngestError(f"season metrics without roster id in {season}")
    if owner_id is None:
        raise IngestError(f"season metrics for roster {roster_id} in {season} have no owner")

    def number(*keys: str) -> float:
        value = _to_float(_first(raw, *keys))
        return value if value is not None else 0.0

    try:
        return RosterSeasonStats(
            season=season,
            owner_id=owner_id,
            roster_id=roster_id,
            team_name=str(_first(raw, "teamName", "team_name") or ""),
            wins=max(0, _to_int(raw.get("wins")) or 0),
            losses=max(0, _to_int(raw.get("losses")) or 0),
            ties=max(0, _to_int(raw.get("ties")) or 0),
            points_for=number("pointsFor", "points_for"),
            points_against=number("pointsAgainst", "points_against"),
            all_play_win_percentage=number("allPlayWinPercentage", "all_play_win_percentage"),
            luck_rating=number("luckRating", "luck_rating"),
            adjusted_dpr=number("adjustedDPR", "adjusted_dpr"),
            is_champion=bool(_first(raw, "isChampion", "is_champion")),
            is_runner_up=bool(_first(raw, "isRunnerUp", "is_runner_up")),
            is_third_place=bool(_first(raw, "isThirdPlace", "is_third_place")),
            transaction_fees=_to_float(_first(raw, "transactionFees", "transaction_fees")),
        )
    except ValidationError as exc:
        raise IngestError(f"invalid season metrics for roster {roster_id} in {season}: {exc}") from exc


def normalize_matchup(
    raw: Any,
    season: int,
    *,
    owner_lookup: Callable[[Optional[str]], Optional[str]] = lambda _roster_id: None,
    winners_bracket: bool = False,
    losers_bracket: bool = False,
) -> Matchup:
    if not isinstance(raw, Mapping):
        raise IngestError(f"matchup must be a mapping, got {type(raw).__name__}")
    record_season = _to_int(_first(raw, "season", "year"))
    week = _to_int(_first(raw, "week", "r"))
    team1 = _to_id(_first(raw, "team1_roster_id", "team1RosterId", "t1"))
    team2 = _to_id(_first(raw, "team2_roster_id", "team2RosterId", "t2"))
    score1 = _to_float(_first(raw, "team1_score", "team1Score", "t1_score"))
    score2 = _to_float(_first(raw, "team2_score", "team2Score", "t2_score"))
    if week is None or team1 is None or team2 is None or score1 is None or score2 is None:
        raise IngestError(f"matchup missing week, rosters or scores: {raw!r}")
    if record_season is not None and not _season_in_range(record_season):
        raise IngestError(f"matchup season {record_season} is out of range")
    seeding = _to_int(_first(raw, "finalSeedingGame", "final_seeding_game", "p"))
    try:
        return Matchup(
            season=record_season if record_season is not None else season,
            week=week,
            team1_roster_id=team1,
            team2_roster_id=team2,
            team1_score=score1,
            team2_score=score2,
            team1_owner_id=owner_lookup(team1),
            team2_owner_id=owner_lookup(team2),
            is_winners_bracket=winners_bracket or bool(_first(raw, "isWinnersBracket", "is_winners_bracket")),
            is_losers_bracket=losers_bracket or bool(_first(raw, "isLosersBracket", "is_losers_bracket")),
            final_seeding_game=seeding if seeding and seeding > 0 else None,
        )
    except ValidationError as exc:
        raise IngestError(f"invalid matchup in {season}: {exc}") from exc


def normalize_draft_pick(
    raw: Any,
    season: int,
    *,
    owner_lookup: Callable[[Optional[str]], Optional[str]] = lambda _roster_id: None,
    roster_lookup: Callable[[Optional[str]], Optional[str]] = lambda _owner_id: None,
    teams: int = 0,
) -> DraftPick:
    if not isinstance(raw, Mapping):
        raise IngestError(f"draft pick must be a mapping, got {type(raw).__name__}")
    metadata = _as_mapping(raw.get("metadata"))

    pick_no = _to_int(_first(raw, "pick_no", "pickNo")) or 0
    round_no = _to_int(raw.get("round"))
    if round_no is None and pick_no > 0 and teams > 0:
        round_no = math.ceil(pick_no / teams)
    if round_no is None or round_no < 1:
        raise IngestError(f"draft pick without a usable round: {raw!r}")

    candidates = [_to_id(raw.get(key)) for key in _PICK_IDENTITY_FIELDS]
    candidates += [_to_id(metadata.get(key)) for key in _PICK_METADATA_IDENTITY_FIELDS]
    identity_keys = {key for key in candidates if key is not None}

    roster_id = _to_id(raw.get("roster_id"))
    owner_id = _to_id(_first(raw, "picked_by", "owner_id")) or owner_lookup(roster_id)
    if roster_id is None:
        roster_id = roster_lookup(owner_id)

    raw_position = str(_first(raw, "player_position") or metadata.get("position") or "")
    position = normalize_position(raw_position)
    player_name = _first(raw, "player_name")
    if position == "DEF" or not player_name:
        composed = f"{metadata.get('first_name') or ''} {metadata.get('last_name') or ''}".strip()
        if composed:
            player_name = composed
        elif position == "DEF" and not player_name:
            player_name = "Unknown Defense"

    try:
        return DraftPick(
            season=season,
            pick_no=pick_no,
            round=round_no,
            pick_in_round=_to_int(_first(raw, "pick_in_round", "pickInRound")),
            owner_id=owner_id,
            roster_id=roster_id,
            identity_keys=frozenset(identity_keys),
            original_roster_id=_to_id(_first(metadata, *_PICK_LINKAGE_FIELDS)),
            player_id=_to_id(_first(raw, "player_id", "playerId")) or "",
            player_name=str(player_name or "Unknown Player"),
            player_position=raw_position,
            position=position,
            fantasy_points=_to_float(raw.get("fantasy_points")) or 0.0,
            is_keeper=bool(raw.get("is_keeper")),
        )
    except ValidationError as exc:
        raise IngestError(f"invalid draft pick in {season}: {exc}") from exc


def normalize_traded_pick(raw: Any, season: int) -> TradedPick:
    if not isinstance(raw, Mapping):
        raise IngestError(f"traded pick must be a mapping, got {type(raw).__name__}")
    round_no = _to_int(_first(raw, "round", "round_number", "draft_round"))
    original = _to_id(_first(raw, "roster_id", "original_roster_id"))
    if not round_no or original is None:
        raise IngestError(f"traded pick missing round or original roster: {raw!r}")
    record_season = _to_int(raw.get("season")) or season
    if not _season_in_range(record_season):
        raise IngestError(f"traded pick season {record_season} is out of range")
    return TradedPick(
        season=record_season,
        round=round_no,
        original_roster_id=original,
        current_owner_id=_to_id(_first(raw, "owner_id", "owner")),
        pick_no=_to_int(raw.get("pick_no")),
    )


def normalize_transaction(raw: Any, *, timestamp_unit: TimestampUnit = "auto") -> Transaction:
    if not isinstance(raw, Mapping):
        raise IngestError(f"transaction must be a mapping, got {type(raw).__name__}")
    created_raw = _first(raw, "created", "status_updated", "timestamp")
    if created_raw is None:
        raise IngestError(f"transaction without a timestamp: {raw!r}")
    roster_ids = tuple(rid for rid in (_to_id(value) for value in _as_list(raw.get("roster_ids"))) if rid)
    return Transaction(
        transaction_id=_to_id(raw.get("transaction_id")) or "",
        type=str(raw.get("type") or ""),
        created=epoch_to_datetime(created_raw, timestamp_unit),
        roster_ids=roster_ids,
        fee=_to_float(_first(raw, "fee", "amount")),
    )


# ----------------------------
# Batch loader
# ----------------------------


def _merge_matchup(existing: Matchup, incoming: Matchup) -> Matchup:
    update: Dict[str, Any] = {}
    if incoming.is_winners_bracket and not existing.is_winners_bracket:
        update["is_winners_bracket"] = True
    if incoming.is_losers_bracket and not existing.is_losers_bracket:
        update["is_losers_bracket"] = True
    if existing.final_seeding_game is None and incoming.final_seeding_game is not None:
        update["final_seeding_game"] = incoming.final_seeding_game
    return existing.model_copy(update=update) if update else existing


def load_league_history(
    historical_data: Any,
    processed_seasonal_records: Any = None,
    transactions: Any = None,
    users_data: Any = None,
    *,
    draft_picks_by_season: Any = None,
    timestamp_unit: TimestampUnit = "auto",
    diagnostics: logging.Logger | None = None,
) -> LeagueHistory:
    """Build a :class:`LeagueHistory` from raw collaborator payloads.

    Never raises for malformed content: each bad record is skipped and
    reported through ``diagnostics`` (defaults to this module's logger).
    """

    log = diagnostics or logger
    data = _as_mapping(historical_data)
    skipped = 0

    rosters: List[RosterAssignment] = []
    for season, entries in _season_items(data.get("rostersBySeason"), log, "roster"):
        for raw in _as_list(entries):
            try:
                rosters.append(normalize_roster(raw, season))
            except (IngestError, ValidationError) as exc:
                skipped += 1
                log.debug("Skipping roster in %s: %s", season, exc)

    owner_by_roster: Dict[Tuple[int, str], str] = {}
    roster_by_owner: Dict[Tuple[int, str], str] = {}
    for roster in rosters:
        owner_by_roster.setdefault((roster.season, roster.roster_id), roster.owner_id)
        roster_by_owner.setdefault((roster.season, roster.owner_id), roster.roster_id)

    stats: List[RosterSeasonStats] = []
    seen_stats: set[Tuple[int, str]] = set()
    for season, entries in _season_items(processed_seasonal_records, log, "season metrics"):
        items = entries.items() if isinstance(entries, Mapping) else ((None, e) for e in _as_list(entries))
        for roster_key, raw in items:
            try:
                row = normalize_season_stats(
                    raw,
                    season,
                    roster_key=_to_id(roster_key),
                    owner_lookup=lambda rid, s=season: owner_by_roster.get((s, rid)) if rid else None,
                )
            except IngestError as exc:
                skipped += 1
                log.debug("Skipping season metrics in %s: %s", season, exc)
                continue
            if (season, row.roster_id) in seen_stats:
                log.warning("Duplicate season metrics for roster %s in %s; keeping the first", row.roster_id, season)
                continue
            seen_stats.add((season, row.roster_id))
            stats.append(row)
            if (season, row.roster_id) not in owner_by_roster:
                owner_by_roster[(season, row.roster_id)] = row.owner_id
                roster_by_owner.setdefault((season, row.owner_id), row.roster_id)
                rosters.append(
                    RosterAssignment(season=season, roster_id=row.roster_id, owner_id=row.owner_id, team_name=row.team_name)
                )

    matchups: Dict[int, Dict[Any, Matchup]] = defaultdict(dict)
    sources = (
        ("matchupsBySeason", False, False),
        ("winnersBracketBySeason", True, False),
        ("losersBracketBySeason", False, True),
    )
    for source, winners, losers in sources:
        for season, entries in _season_items(data.get(source), log, source):
            for raw in _as_list(entries):
                try:
                    matchup = normalize_matchup(
                        raw,
                        season,
                        owner_lookup=lambda rid, s=season: owner_by_roster.get((s, rid)) if rid else None,
                        winners_bracket=winners,
                        losers_bracket=losers,
                    )
                except IngestError as exc:
                    skipped += 1
                    log.debug("Skipping matchup in %s (%s): %s", season, source, exc)
                    continue
                bucket = matchups[matchup.season]
                key = matchup.dedupe_key
                bucket[key] = _merge_matchup(bucket[key], matchup) if key in bucket else matchup

    teams_by_season: Dict[int, int] = defaultdict(int)
    for roster in rosters:
        teams_by_season[roster.season] += 1

    picks: List[DraftPick] = []
    pick_source = draft_picks_by_season if draft_picks_by_season is not None else data.get("draftPicksBySeason")
    for season, entries in _season_items(pick_source, log, "draft picks"):
        for raw in _as_list(entries):
            try:
                picks.append(
                    normalize_draft_pick(
                        raw,
                        season,
                        owner_lookup=lambda rid, s=season: owner_by_roster.get((s, rid)) if rid else None,
                        roster_lookup=lambda oid, s=season: roster_by_owner.get((s, oid)) if oid else None,
                        teams=teams_by_season.get(season, 0),
                    )
                )
            except IngestError as exc:
                skipped += 1
                log.debug("Skipping draft pick in %s: %s", season, exc)

    traded: List[TradedPick] = []
    for season, entries in _season_items(data.get("tradedPicksBySeason"), log, "traded picks"):
        for raw in _as_list(entries):
            try:
                traded.append(normalize_traded_pick(raw, season))
            except (IngestError, ValidationError) as exc:
                skipped += 1
                log.debug("Skipping traded pick in %s: %s", season, exc)

    parsed_transactions: List[Transaction] = []
    for raw in _as_list(transactions):
        try:
            parsed_transactions.append(normalize_transaction(raw, timestamp_unit=timestamp_unit))
        except (IngestError, ValidationError) as exc:
            skipped += 1
            log.debug("Skipping transaction: %s", exc)

    player_points: Dict[int, Dict[str, float]] = {}
    for season, table in _season_items(data.get("playerSeasonPoints"), log, "player points"):
        points: Dict[str, float] = {}
        for player_id, value in _as_mapping(table).items():
            number = _to_float(value)
            pid = _to_id(player_id)
            if number is not None and pid:
                points[pid] = number
        if points:
            player_points[season] = points

    users: Dict[str, str] = {}
    for raw in _as_list(users_data):
        if not isinstance(raw, Mapping):
            continue
        user_id = _to_id(raw.get("user_id"))
        if user_id:
            users[user_id] = str(raw.get("display_name") or user_id)

    if skipped:
        log.warning("Skipped %d malformed league records during ingestion", skipped)

    all_matchups = [m for season in sorted(matchups) for m in matchups[season].values()]
    return LeagueHistory.from_records(
        rosters=rosters,
        stats=stats,
        matchups=all_matchups,
        picks=picks,
        traded_picks=traded,
        transactions=parsed_transactions,
        player_season_points=player_points,
        users=users,
    )


__all__ = [
    "LeagueHistory",
    "epoch_to_datetime",
    "load_league_history",
    "normalize_draft_pick",
    "normalize_matchup",
    "normalize_roster",
    "normalize_season_stats",
    "normalize_traded_pick",
    "normalize_transaction",
]
