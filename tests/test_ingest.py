import logging
from datetime import timezone

import pytest

from leaguelore.errors import IngestError
from leaguelore.ingest import epoch_to_datetime, load_league_history, normalize_draft_pick, normalize_matchup


def _sample_payloads():
    historical = {
        "rostersBySeason": {
            "2023": [
                {"roster_id": 1, "owner_id": "u1", "metadata": {"team_name": "Alpha"}},
                {"roster_id": 2, "owner_id": "u2"},
                "garbage",
                {"roster_id": 3},
            ]
        },
        "matchupsBySeason": {
            "2023": [
                {"week": 1, "team1_roster_id": 1, "team2_roster_id": 2, "team1_score": 110.5, "team2_score": 99.0},
                {"week": 15, "team1_roster_id": 1, "team2_roster_id": 2, "team1_score": 120, "team2_score": 100},
                {"week": "x", "team1_roster_id": 1, "team2_roster_id": 2, "team1_score": 1, "team2_score": 2},
                {"week": 2, "team1_roster_id": 1, "team2_roster_id": 2, "team1_score": -5, "team2_score": 10},
            ],
            "not-a-season": [],
        },
        "winnersBracketBySeason": {
            "2023": [
                {
                    "week": 15,
                    "team1_roster_id": 2,
                    "team2_roster_id": 1,
                    "team1_score": 100,
                    "team2_score": 120,
                    "finalSeedingGame": 1,
                }
            ]
        },
        "draftPicksBySeason": {
            "2023": [
                {
                    "pick_no": 1,
                    "round": 1,
                    "picked_by": "u1",
                    "roster_id": 1,
                    "player_id": "p1",
                    "player_position": "DST",
                    "metadata": {"first_name": "Kansas City", "last_name": "Chiefs"},
                    "fantasy_points": 120,
                },
                {"pick_no": 2, "roster_id": 2, "player_id": "p2", "metadata": {"position": "RB"}},
            ]
        },
        "playerSeasonPoints": {"2023": {"p1": 120.0, "p2": "88.5", "p3": "n/a"}},
    }
    processed = {
        "2023": {
            "1": {"wins": 10, "losses": 4, "pointsFor": 1500.5, "adjustedDPR": 1.1, "isChampion": True},
            "2": {"wins": "4", "ownerId": "u2", "teamName": "Beta"},
            "3": "junk",
        }
    }
    transactions = [
        {"transaction_id": "t1", "type": "waiver", "created": 1695000000000, "roster_ids": [1], "fee": 5},
        {"transaction_id": "t2", "type": "trade", "created": 1695000000, "roster_ids": [1, 2]},
        {"type": "bad"},
    ]
    users = [{"user_id": "u1", "display_name": "Ann"}, "nobody"]
    return historical, processed, transactions, users


def test_load_league_history_normalises_raw_shapes():
    history = load_league_history(*_sample_payloads())

    assert history.seasons == (2023,)
    stats = {row.owner_id: row for row in history.stats_by_season[2023]}
    assert set(stats) == {"u1", "u2"}
    assert stats["u1"].wins == 10
    assert stats["u1"].adjusted_dpr == pytest.approx(1.1)
    assert stats["u1"].is_champion
    assert stats["u2"].wins == 4
    assert history.team_name("u1", 2023) == "Alpha"
    assert history.team_name("u2", 2023) == "Beta"
    assert history.users == {"u1": "Ann"}
    assert history.player_season_points[2023] == {"p1": 120.0, "p2": 88.5}


def test_bracket_games_merge_into_regular_matchups():
    history = load_league_history(*_sample_payloads())

    matchups = sorted(history.matchups_by_season[2023], key=lambda m: m.week)
    assert [m.week for m in matchups] == [1, 15]
    final = matchups[1]
    assert final.is_winners_bracket
    assert final.final_seeding_game == 1
    assert final.team1_owner_id == "u1"
    assert final.team2_owner_id == "u2"
    assert not matchups[0].is_playoff


def test_draft_picks_resolve_identity_and_names():
    history = load_league_history(*_sample_payloads())

    picks = {pick.pick_no: pick for pick in history.picks_by_season[2023]}
    defense = picks[1]
    assert defense.position == "DEF"
    assert defense.player_name == "Kansas City Chiefs"
    assert defense.owner_id == "u1"
    assert {"1", "u1"} <= defense.identity_keys
    derived = picks[2]
    assert derived.round == 1
    assert derived.owner_id == "u2"
    assert derived.roster_id == "2"
    assert derived.position == "RB"


def test_transaction_timestamps_accept_seconds_and_milliseconds():
    history = load_league_history(*_sample_payloads())

    created = {tx.transaction_id: tx.created for tx in history.transactions}
    assert set(created) == {"t1", "t2"}
    assert created["t1"] == created["t2"]
    assert created["t1"].year == 2023
    assert created["t1"].tzinfo == timezone.utc


def test_malformed_records_are_skipped_with_warning(caplog):
    with caplog.at_level(logging.WARNING):
        load_league_history(*_sample_payloads())

    assert "Skipped" in caplog.text


@pytest.mark.parametrize("payload", [None, "nonsense", 42, [], {"rostersBySeason": "bad", "matchupsBySeason": [1, 2]}])
def test_garbage_history_never_raises(payload):
    history = load_league_history(payload, payload, payload, payload)
    assert history.seasons == ()


def test_epoch_to_datetime_units():
    assert epoch_to_datetime(1_700_000_000) == epoch_to_datetime(1_700_000_000_000)
    assert epoch_to_datetime(1_700_000, unit="ms").year == 1970
    assert epoch_to_datetime("2023-09-18T01:20:00Z").tzinfo is not None
    with pytest.raises(IngestError):
        epoch_to_datetime("not a time")
    with pytest.raises(IngestError):
        epoch_to_datetime(1_700_000_000_000, unit="s")


def test_normalize_matchup_rejects_missing_scores():
    with pytest.raises(IngestError):
        normalize_matchup({"week": 1, "team1_roster_id": 1, "team2_roster_id": 2}, 2023)


def test_normalize_draft_pick_reads_linkage_metadata():
    pick = normalize_draft_pick(
        {"pick_no": 14, "round": 2, "roster_id": 3, "metadata": {"original_owner_roster_id": 7, "owner": "u9"}},
        2023,
        owner_lookup=lambda rid: "u3" if rid == "3" else None,
    )

    assert pick.owner_id == "u3"
    assert pick.original_roster_id == "7"
    assert "u9" in pick.identity_keys


def test_out_of_range_seasons_are_skipped(caplog):
    metrics = {"1": {"ownerId": "u1", "wins": 5}}
    historical = {
        "matchupsBySeason": {
            "2023": [
                {"week": 1, "team1_roster_id": 1, "team2_roster_id": 2, "team1_score": 1, "team2_score": 2, "season": 12000},
            ],
            "1066": [{"week": 1, "team1_roster_id": 1, "team2_roster_id": 2, "team1_score": 1, "team2_score": 2}],
        },
        "tradedPicksBySeason": {"2023": [{"round": 1, "roster_id": 1, "season": 99999}]},
    }

    with caplog.at_level(logging.WARNING):
        history = load_league_history(historical, {"2023": metrics, "10000": metrics, "-4": metrics})

    assert history.seasons == (2023,)
    assert history.matchups_by_season == {}
    assert history.traded_picks_by_season == {}
    assert "out-of-range season 10000" in caplog.text


def test_implausible_season_totals_are_skipped():
    processed = {"2023": {"1": {"ownerId": "u1", "wins": 1e12}, "2": {"ownerId": "u2", "wins": 3}}}

    history = load_league_history({}, processed)

    assert [(row.owner_id, row.wins) for row in history.stats_by_season[2023]] == [("u2", 3)]


def test_normalize_matchup_rejects_out_of_range_season():
    with pytest.raises(IngestError):
        normalize_matchup(
            {"week": 1, "team1_roster_id": 1, "team2_roster_id": 2, "team1_score": 1, "team2_score": 2, "year": 0},
            2023,
        )
