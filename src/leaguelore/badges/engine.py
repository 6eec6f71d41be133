"""Badge engine: run every rule over a league history and normalise the output."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from leaguelore.config import EngineSettings, get_style, slug_to_title
from leaguelore.errors import BadgeRuleError
from leaguelore.ingest import LeagueHistory, load_league_history
from leaguelore.models import Badge

from .collector import BadgeCollector
from .rules import CAREER_RULES, PER_SEASON_RULES, CareerContext, SeasonContext


logger = logging.getLogger(__name__)

TeamNameResolver = Callable[[str, Optional[int]], str]


class BadgeResult(BaseModel):
    badges_by_team: Dict[str, List[Badge]] = Field(default_factory=dict)
    recent_badges: List[Badge] = Field(default_factory=list)
    failed_rules: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def all_badges(self) -> List[Badge]:
        return [badge for badges in self.badges_by_team.values() for badge in badges]


def _run_rule(
    rule: Callable[[Any], List[Badge]],
    context: Any,
    label: str,
    collector: BadgeCollector,
    failed: List[str],
    log: logging.Logger,
    strict: bool,
) -> None:
    name = rule.__name__
    try:
        badges = list(rule(context))
    except Exception as exc:
        if strict:
            raise BadgeRuleError(name, f"{label}: {exc}") from exc
        log.warning("Badge rule %s failed for %s", name, label, exc_info=True)
        failed.append(f"{name}:{label}")
        return
    collector.extend(badges)


def _normalizer(
    history: LeagueHistory,
    team_name: Optional[TeamNameResolver],
    now: datetime,
    log: logging.Logger,
) -> Callable[[Badge], Badge]:
    def resolve_name(owner_id: str, season: Optional[int]) -> str:
        if team_name is not None:
            try:
                return team_name(owner_id, season)
            except Exception:
                log.debug("team_name callback failed for %s/%s", owner_id, season, exc_info=True)
        return history.team_name(owner_id, season)

    def year_end(badge: Badge) -> datetime:
        if badge.year is None:
            return now
        try:
            return datetime(badge.year, 12, 31, tzinfo=timezone.utc)
        except ValueError:
            log.warning("Badge %s has unusable year %s; stamping it with the current time", badge.id, badge.year)
            return now

    def normalize(badge: Badge) -> Badge:
        style = get_style(badge.key.slug, badge.category)
        timestamp = badge.timestamp or year_end(badge)
        metadata = dict(badge.metadata)
        metadata.setdefault("team_name", resolve_name(badge.team_id, badge.year))
        return badge.model_copy(
            update={
                "display_name": badge.display_name or badge.name or slug_to_title(badge.key.slug),
                "accent": badge.accent or style.accent,
                "icon": badge.icon or style.icon,
                "timestamp": timestamp,
                "metadata": metadata,
            }
        )

    return normalize


def _recent(badges: Sequence[Badge], limit: Optional[int], now: datetime) -> List[Badge]:
    ordered = sorted(badges, key=lambda badge: badge.id)
    ordered.sort(key=lambda badge: badge.timestamp or now, reverse=True)
    return ordered[:limit] if limit is not None else ordered


def compute_badges(
    history: LeagueHistory,
    settings: Optional[EngineSettings] = None,
    *,
    team_name: Optional[TeamNameResolver] = None,
    diagnostics: logging.Logger | None = None,
    now: Optional[datetime] = None,
    strict: bool = False,
) -> BadgeResult:
    """Compute the full badge catalogue for ``history``.

    Seasons are processed in ascending order. Each rule runs in isolation: a
    failing rule is logged and recorded in ``failed_rules`` while every other
    rule still contributes. ``strict=True`` raises :class:`BadgeRuleError`
    instead, which is useful in tests.
    """

    settings = settings or EngineSettings()
    log = diagnostics or logger
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    latest = settings.current_season if settings.current_season is not None else history.latest_season
    if latest is None:
        return BadgeResult()

    collector = BadgeCollector(diagnostics=log)
    failed: List[str] = []
    for season in (s for s in history.seasons if s <= latest):
        context = SeasonContext(
            season=season,
            stats=history.stats_by_season.get(season, ()),
            matchups=tuple(
                m for m in history.matchups_by_season.get(season, ()) if m.has_owners and not m.is_placeholder(latest)
            ),
            picks=history.picks_by_season.get(season, ()),
            history=history,
            settings=settings,
        )
        for rule in PER_SEASON_RULES:
            _run_rule(rule, context, str(season), collector, failed, log, strict)

    career = CareerContext(history=history, settings=settings, latest_season=latest)
    for rule in CAREER_RULES:
        _run_rule(rule, career, "career", collector, failed, log, strict)

    by_team = collector.build(finalize=_normalizer(history, team_name, now, log))
    all_badges = [badge for badges in by_team.values() for badge in badges]
    log.debug("Computed %d badges for %d owners", len(all_badges), len(by_team))
    return BadgeResult(
        badges_by_team={owner: list(badges) for owner, badges in by_team.items()},
        recent_badges=_recent(all_badges, settings.recent_limit, now),
        failed_rules=failed,
    )


def compute_badges_from_raw(
    historical_data: Any,
    processed_seasonal_records: Any = None,
    transactions: Any = None,
    users_data: Any = None,
    *,
    settings: Optional[EngineSettings] = None,
    team_name: Optional[TeamNameResolver] = None,
    diagnostics: logging.Logger | None = None,
    now: Optional[datetime] = None,
) -> BadgeResult:
    """Ingest raw payloads and compute badges. Never raises; returns an empty result on failure."""

    log = diagnostics or logger
    try:
        settings = settings or EngineSettings()
        history = load_league_history(
            historical_data,
            processed_seasonal_records,
            transactions,
            users_data,
            timestamp_unit=settings.timestamp_unit,
            diagnostics=log,
        )
        return compute_badges(history, settings, team_name=team_name, diagnostics=log, now=now)
    except Exception:
        log.error("Badge computation failed; returning an empty result", exc_info=True)
        return BadgeResult()


__all__ = ["BadgeResult", "TeamNameResolver", "compute_badges", "compute_badges_from_raw"]
