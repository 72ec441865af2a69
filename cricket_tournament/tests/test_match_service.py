"""
Tests for MatchService: match setup, selections, scoring persisted ball by
ball, stats verification/recompute and the points table on completion.
"""
from __future__ import annotations

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from cricket_tournament.errors import (
    BatsmenNotSet,
    InvalidDelivery,
    InvalidSelection,
    MatchAlreadyStarted,
    MatchNotFound,
    MatchNotLive,
    TeamNotFound,
)
from cricket_tournament.persistence.db import get_connection, init_db, set_db_path
from cricket_tournament.persistence.repositories import PlayerRepository
from cricket_tournament.services import MatchService, RegistryService, StandingsService


@pytest.fixture
def db_conn(tmp_path):
    db_path = tmp_path / "match_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def svc():
    return MatchService()


@pytest.fixture
def sides(db_conn):
    """Two teams of four players each, bought outright (no auction run)."""
    registry = RegistryService()
    players = PlayerRepository()
    out = {}
    for t_idx, (name, short) in enumerate((("Alpha", "ALP"), ("Bravo", "BRA"))):
        team = registry.create_team(db_conn, name, short, "#000", "#fff", budget=25000)
        ids = []
        for i in range(4):
            p = registry.register_player(
                db_conn,
                name=f"{short} {i}",
                mobile=f"8{t_idx}{i:08d}",
                address="Pune",
                role="All-rounder",
                batting_rating=5,
                bowling_rating=5,
                fielding_rating=5,
                photo_url="https://example.com/p.jpg",
            )
            players.mark_sold(db_conn, p.id, team.id, 1500)
            ids.append(p.id)
        out[short] = (team, ids)
    return out


@pytest.fixture
def live_match(db_conn, svc, sides):
    """One-over match, squad of four; Alpha wins the toss and bats."""
    alpha, a = sides["ALP"]
    bravo, b = sides["BRA"]
    m = svc.create_match(db_conn, alpha.id, bravo.id, squad_size=4, overs_limit=1)
    svc.start(db_conn, m.id, alpha.id, "bat")
    svc.set_batsmen(db_conn, m.id, a[0], a[1])
    svc.set_bowler(db_conn, m.id, b[0])
    return m.id


def _play_first_innings(conn, svc, sides, match_id):
    """1, 4, W(caught), 6, 0, 2 -> 13/1 off one over."""
    _, a = sides["ALP"]
    _, b = sides["BRA"]
    svc.record_ball(conn, match_id, runs=1)
    svc.record_ball(conn, match_id, runs=4)
    svc.record_ball(conn, match_id, is_wicket=True, wicket_type="caught", fielder_id=b[1])
    svc.new_batsman(conn, match_id, a[2])
    svc.record_ball(conn, match_id, runs=6)
    svc.record_ball(conn, match_id, runs=0)
    return svc.record_ball(conn, match_id, runs=2)


# ---------- Setup ----------


def test_create_match_numbers_sequentially(db_conn, svc, sides):
    alpha, _ = sides["ALP"]
    bravo, _ = sides["BRA"]
    m1 = svc.create_match(db_conn, alpha.id, bravo.id)
    m2 = svc.create_match(db_conn, bravo.id, alpha.id, stage="final")
    assert (m1.match_number, m2.match_number) == (1, 2)
    assert m1.status == "scheduled"
    assert m1.squad_size == 8 and m1.overs_limit == 6


def test_create_match_rejects_bad_input(db_conn, svc, sides):
    alpha, _ = sides["ALP"]
    with pytest.raises(InvalidSelection):
        svc.create_match(db_conn, alpha.id, alpha.id)
    with pytest.raises(TeamNotFound):
        svc.create_match(db_conn, alpha.id, "ghost")
    with pytest.raises(InvalidSelection):
        svc.create_match(db_conn, alpha.id, sides["BRA"][0].id, stage="quarterfinal")


def test_toss_bowl_puts_other_side_in(db_conn, svc, sides):
    alpha, _ = sides["ALP"]
    bravo, _ = sides["BRA"]
    m = svc.create_match(db_conn, alpha.id, bravo.id)
    started = svc.start(db_conn, m.id, alpha.id, "bowl")
    assert started.status == "live"
    assert started.batting_first_id == bravo.id
    with pytest.raises(MatchAlreadyStarted):
        svc.start(db_conn, m.id, alpha.id, "bat")


def test_get_unknown_match(db_conn, svc):
    with pytest.raises(MatchNotFound):
        svc.get_match(db_conn, "nope")


def test_ball_before_start_rejected(db_conn, svc, sides):
    alpha, _ = sides["ALP"]
    bravo, _ = sides["BRA"]
    m = svc.create_match(db_conn, alpha.id, bravo.id)
    with pytest.raises(MatchNotLive):
        svc.record_ball(db_conn, m.id, runs=1)


# ---------- Selections ----------


def test_batsmen_must_come_from_batting_side(db_conn, svc, sides, live_match):
    _, b = sides["BRA"]
    _, a = sides["ALP"]
    with pytest.raises(InvalidSelection):
        svc.set_batsmen(db_conn, live_match, a[0], b[0])
    with pytest.raises(InvalidSelection):
        svc.set_batsmen(db_conn, live_match, a[0], a[0])


def test_bowler_must_come_from_bowling_side(db_conn, svc, sides, live_match):
    _, a = sides["ALP"]
    with pytest.raises(InvalidSelection):
        svc.set_bowler(db_conn, live_match, a[3])


def test_dismissed_batter_cannot_return(db_conn, svc, sides, live_match):
    _, a = sides["ALP"]
    svc.record_ball(db_conn, live_match, is_wicket=True, wicket_type="bowled")
    with pytest.raises(InvalidSelection):
        svc.new_batsman(db_conn, live_match, a[0])
    with pytest.raises(BatsmenNotSet):
        svc.record_ball(db_conn, live_match, runs=1)
    m = svc.new_batsman(db_conn, live_match, a[2])
    assert m.striker_id == a[2]
    assert m.batting_order[1] == [a[0], a[1], a[2]]


def test_new_batsman_fills_vacant_non_striker_end(db_conn, svc, sides, live_match):
    _, a = sides["ALP"]
    _, b = sides["BRA"]
    m = svc.record_ball(
        db_conn, live_match, is_wicket=True, wicket_type="run_out",
        dismissed_player_id=a[1], fielder_id=b[1],
    )
    assert (m.striker_id, m.non_striker_id) == (a[0], None)
    with pytest.raises(InvalidSelection):
        svc.new_batsman(db_conn, live_match, a[2], replace_striker=True)
    m = svc.new_batsman(db_conn, live_match, a[2])
    assert (m.striker_id, m.non_striker_id) == (a[0], a[2])
    with pytest.raises(InvalidSelection):
        svc.new_batsman(db_conn, live_match, a[3])


def test_fielder_must_be_in_bowling_side(db_conn, svc, sides, live_match):
    _, a = sides["ALP"]
    with pytest.raises(InvalidDelivery):
        svc.record_ball(db_conn, live_match, is_wicket=True, wicket_type="caught", fielder_id=a[3])
    assert svc.list_balls(db_conn, live_match) == []


def test_power_over_bounds(db_conn, svc, live_match):
    with pytest.raises(InvalidSelection):
        svc.set_power_over(db_conn, live_match, over_number=2, innings=1)
    with pytest.raises(InvalidSelection):
        svc.set_power_over(db_conn, live_match, over_number=1, innings=3)
    m = svc.set_power_over(db_conn, live_match, over_number=1, innings=1)
    assert m.power_over.over_number == 1
    assert svc.record_ball(db_conn, live_match, runs=4).team1_score == 8


# ---------- Scoring ----------


def test_rejected_ball_changes_nothing(db_conn, svc, live_match):
    before = svc.get_match(db_conn, live_match)
    with pytest.raises(InvalidDelivery):
        svc.record_ball(db_conn, live_match, runs=9)
    after = svc.get_match(db_conn, live_match)
    assert after.to_dict() == before.to_dict()
    assert svc.list_balls(db_conn, live_match) == []


def test_first_innings_persisted(db_conn, svc, sides, live_match):
    _, a = sides["ALP"]
    _, b = sides["BRA"]
    m = _play_first_innings(db_conn, svc, sides, live_match)
    assert (m.team1_score, m.team1_wickets, m.team1_overs) == (13, 1, "1.0")
    assert m.current_innings == 2
    assert m.target == 14
    assert m.striker_id is None and m.current_bowler_id is None

    balls = svc.list_balls(db_conn, live_match)
    assert [x.sequence for x in balls] == list(range(1, 7))
    stats = {(s.player_id, s.innings): s for s in svc.list_player_stats(db_conn, live_match)}
    assert stats[(a[1], 1)].is_out
    assert stats[(a[1], 1)].dismissal_type == "caught"
    assert stats[(a[1], 1)].runs_scored == 4
    assert stats[(a[0], 1)].runs_scored == 1
    assert not stats[(a[0], 1)].is_out
    assert stats[(b[0], 1)].balls_bowled == 6
    assert stats[(b[0], 1)].runs_conceded == 13
    assert stats[(b[0], 1)].wickets_taken == 1
    assert stats[(b[1], 1)].catches == 1
    assert stats[(a[2], 1)].batting_position == 3
    out_rows = sum(1 for s in stats.values() if s.is_out)
    assert out_rows == sum(1 for x in balls if x.is_wicket)


def test_chase_completes_match_and_updates_points_table(db_conn, svc, sides, live_match):
    alpha, a = sides["ALP"]
    bravo, b = sides["BRA"]
    _play_first_innings(db_conn, svc, sides, live_match)
    svc.set_batsmen(db_conn, live_match, b[0], b[1])
    svc.set_bowler(db_conn, live_match, a[0])
    svc.record_ball(db_conn, live_match, runs=6)
    svc.record_ball(db_conn, live_match, runs=6)
    m = svc.record_ball(db_conn, live_match, runs=2)
    assert m.status == "completed"
    assert m.winner_id == bravo.id
    assert m.result == "win"
    assert m.team2_overs == "0.3"

    with pytest.raises(MatchNotLive):
        svc.record_ball(db_conn, live_match, runs=1)

    table = StandingsService().points_table(db_conn)
    assert [r["team_id"] for r in table] == [bravo.id, alpha.id]
    top = table[0]
    assert (top["played"], top["won"], top["points"]) == (1, 1, 3)
    assert top["runs_for"] == 14 and top["overs_for"] == "0.3"
    assert top["runs_against"] == 13 and top["overs_against"] == "1.0"
    # 14/0.5 - 13/1.0
    assert top["nrr"] == "15.000"
    assert table[1]["lost"] == 1 and table[1]["points"] == 0


# ---------- Verification ----------


def test_verify_stats_consistent_after_play(db_conn, svc, sides, live_match):
    _play_first_innings(db_conn, svc, sides, live_match)
    report = svc.verify_stats(db_conn, live_match)
    assert report["consistent"]
    assert report["totals_consistent"]
    assert report["balls"] == 6
    assert report["mismatches"] == []


def test_recompute_repairs_tampered_stats(db_conn, svc, sides, live_match):
    _, a = sides["ALP"]
    _play_first_innings(db_conn, svc, sides, live_match)
    db_conn.execute(
        "UPDATE player_match_stats SET runs_scored = 99 WHERE match_id = ? AND player_id = ?",
        (live_match, a[0]),
    )
    report = svc.verify_stats(db_conn, live_match)
    assert not report["consistent"]
    assert [x["player_id"] for x in report["mismatches"]] == [a[0]]

    rows = svc.recompute_player_stats(db_conn, live_match)
    fixed = next(r for r in rows if r.player_id == a[0])
    assert fixed.runs_scored == 1
    assert fixed.batting_position == 1
    assert svc.verify_stats(db_conn, live_match)["consistent"]
