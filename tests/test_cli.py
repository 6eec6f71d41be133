import csv
import json

import pytest

from leaguelore import cli


def _sample_snapshot() -> dict:
    return {
        "historicalData": {
            "rostersBySeason": {
                "2023": [
                    {"roster_id": 1, "owner_id": "u1", "metadata": {"team_name": "Alpha"}},
                    {"roster_id": 2, "owner_id": "u2", "metadata": {"team_name": "Beta"}},
                ]
            },
            "matchupsBySeason": {
                "2023": [
                    {"week": 1, "team1_roster_id": 1, "team2_roster_id": 2, "team1_score": 120.0, "team2_score": 100.0},
                    {"week": 2, "team1_roster_id": 2, "team2_roster_id": 1, "team1_score": 130.0, "team2_score": 90.0},
                ]
            },
            "draftPicksBySeason": {
                "2023": [
                    {"pick_no": 1, "round": 1, "roster_id": 1, "player_position": "QB", "fantasy_points": 10},
                    {"pick_no": 2, "round": 1, "roster_id": 2, "player_position": "QB", "fantasy_points": 30},
                ]
            },
        },
        "processedSeasonalRecords": {
            "2023": {
                "1": {"wins": 1, "losses": 1, "pointsFor": 210.0, "isChampion": True},
                "2": {"wins": 1, "losses": 1, "pointsFor": 230.0},
            }
        },
        "usersData": [{"user_id": "u1", "display_name": "Ann"}],
    }


def test_cli_writes_badges_records_and_report(tmp_path):
    snapshot = tmp_path / "snapshot.json"
    snapshot.write_text(json.dumps(_sample_snapshot()), encoding="utf-8")
    output = tmp_path / "badges.json"
    records = tmp_path / "records.json"
    report = tmp_path / "report.csv"

    cli.main([str(snapshot), "--output", str(output), "--records", str(records), "--report", str(report)])

    badges = json.loads(output.read_text(encoding="utf-8"))
    assert set(badges["badges_by_team"]) == {"u1", "u2"}
    assert all("id" in badge for badge in badges["recent_badges"])
    assert badges["failed_rules"] == []

    tables = json.loads(records.read_text(encoding="utf-8"))
    assert tables["matchup"]["most_points_scored"]["value"] == 130.0
    assert tables["streak"]["win"]["value"] == 1
    season_points = tables["season"]["by_season"]["2023"]["most_points_for"]
    assert (season_points["value"], season_points["entries"][0]["owner_id"]) == (230.0, "u2")
    assert tables["career"]["most_wins"]["value"] == 1

    with report.open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [(row["position"], row["owner_id"], row["team_name"]) for row in rows] == [("QB", "u1", "Alpha")]


def test_cli_saves_and_loads_profile(tmp_path):
    snapshot = tmp_path / "snapshot.json"
    snapshot.write_text(json.dumps(_sample_snapshot()), encoding="utf-8")
    profile = tmp_path / "profile.json"

    cli.main([str(snapshot), "--output", str(tmp_path / "a.json"), "--recent-limit", "2", "--save-profile", str(profile)])
    cli.main([str(snapshot), "--output", str(tmp_path / "b.json"), "--load-profile", str(profile)])

    assert json.loads(profile.read_text(encoding="utf-8")) == {"overrides": {"recent_limit": 2}}
    payload = json.loads((tmp_path / "b.json").read_text(encoding="utf-8"))
    assert len(payload["recent_badges"]) == 2


def test_cli_rejects_unreadable_snapshot(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")

    with pytest.raises(SystemExit):
        cli.main([str(broken), "--output", str(tmp_path / "out.json")])

    with pytest.raises(SystemExit):
        cli.main([str(tmp_path / "missing.json")])
