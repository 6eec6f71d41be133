"""Command-line interface for computing badges and records from a league snapshot."""

from __future__ import annotations

import argparse
import csv
import json
import logging
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from leaguelore.badges import compute_badges
from leaguelore.config import EngineSettings
from leaguelore.config_loader import SettingsProfile
from leaguelore.draft import worst_drafter_report
from leaguelore.ingest import load_league_history
from leaguelore.records import LeagueRecords, compute_records


logger = logging.getLogger("leaguelore.cli")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute league records and badges from a JSON snapshot")
    parser.add_argument("snapshot", type=Path, help="Path to league snapshot JSON")
    parser.add_argument("--output", type=Path, default=Path("badges.json"), help="Output badges JSON path")
    parser.add_argument("--records", type=Path, default=None, help="Optional path to write record tables JSON")
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Optional path to write the worst scaled-VORP drafter CSV",
    )
    parser.add_argument("--current-season", type=int, default=None, help="Season treated as in progress")
    parser.add_argument("--current-week", type=int, default=None, help="Week treated as not yet complete")
    parser.add_argument("--recent-limit", type=int, default=None, help="Maximum number of recent badges")
    parser.add_argument(
        "--vorp-strategy",
        choices=("per_pick_then_sum", "sum_then_scale"),
        default=None,
        help="Scaling strategy for position VORP",
    )
    parser.add_argument("--load-profile", type=Path, help="Load settings profile JSON", default=None)
    parser.add_argument("--save-profile", type=Path, help="Save settings profile JSON", default=None)
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...)")
    return parser.parse_args(argv)


def _load_snapshot(path: Path) -> dict[str, Any]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SystemExit(f"Could not read snapshot {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise SystemExit(f"Snapshot {path} must contain a JSON object")
    return payload


def _jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return _jsonable(asdict(value))
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(_jsonable(key)): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted(_jsonable(item) for item in value)
    return value


def _records_payload(records: LeagueRecords) -> dict[str, Any]:
    return {
        "matchup": _jsonable(records.matchup),
        "playoff": _jsonable(records.playoff),
        "streak": {category.value: _jsonable(record) for category, record in records.streak.items()},
        "season": _jsonable(records.season),
        "career": _jsonable(records.career),
    }


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))

    settings = EngineSettings.from_env()
    if args.load_profile:
        settings = SettingsProfile.load(args.load_profile).apply(settings)
    overrides = {
        "current_season": args.current_season,
        "current_week": args.current_week,
        "recent_limit": args.recent_limit,
        "vorp_strategy": args.vorp_strategy,
    }
    settings = settings.with_overrides({key: value for key, value in overrides.items() if value is not None})
    if args.save_profile:
        SettingsProfile.from_settings(settings).save(args.save_profile)
        print(f"Saved settings profile to {args.save_profile}")

    snapshot = _load_snapshot(args.snapshot)
    historical = snapshot.get("historicalData", snapshot)
    history = load_league_history(
        historical,
        snapshot.get("processedSeasonalRecords"),
        snapshot.get("transactions"),
        snapshot.get("usersData"),
        timestamp_unit=settings.timestamp_unit,
    )
    print(f"Loaded {len(history.seasons)} seasons: {', '.join(str(s) for s in history.seasons) or '-'}")

    result = compute_badges(history, settings)
    args.output.write_text(json.dumps(result.model_dump(mode="json"), indent=2), encoding="utf-8")
    print(f"Wrote {len(result.all_badges())} badges for {len(result.badges_by_team)} owners to {args.output}")
    if result.failed_rules:
        logger.warning("Badge rules failed: %s", ", ".join(result.failed_rules))

    if args.records:
        records = compute_records(history, settings)
        args.records.write_text(json.dumps(_records_payload(records), indent=2), encoding="utf-8")
        print(f"Wrote record tables to {args.records}")

    if args.report:
        rows = worst_drafter_report(
            history,
            strategy=settings.vorp_strategy,
            min_target=settings.vorp_min_target,
            max_target=settings.vorp_max_target,
        )
        with args.report.open("w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(["season", "position", "owner_id", "team_name", "scaled_sum", "raw_sum", "picks"])
            for row in rows:
                writer.writerow([
                    row.season,
                    row.position,
                    row.owner_id,
                    history.team_name(row.owner_id, row.season),
                    f"{row.scaled_sum:.3f}",
                    f"{row.raw_sum:.3f}",
                    row.picks,
                ])
        print(f"Wrote worst drafter report to {args.report}")


if __name__ == "__main__":
    main()
