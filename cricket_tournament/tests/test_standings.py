"""
Tests for points table arithmetic (result points, NRR, ordering) and the
stored table rebuilt from completed matches.
"""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from cricket_tournament.models import Match, PointsTableRow
from cricket_tournament.persistence.db import get_connection, init_db, set_db_path
from cricket_tournament.persistence.repositories import (
    MatchRepository,
    PointsTableRepository,
    TeamRepository,
)
from cricket_tournament.services import RegistryService, StandingsService
from cricket_tournament.standings import apply_result, build_table, nrr, sort_rows


def _completed(team1, team2, s1, b1, s2, b2, winner=None, result="win", mid="m"):
    return Match(
        id=mid,
        match_number=1,
        team1_id=team1,
        team2_id=team2,
        status="completed",
        stage="group",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        squad_size=8,
        overs_limit=6,
        batting_first_id=team1,
        winner_id=winner,
        result=result,
        team1_score=s1,
        team1_balls=b1,
        team2_score=s2,
        team2_balls=b2,
        current_innings=2,
    )


# ---------- Pure arithmetic ----------


def test_nrr_uses_balls_not_decimal_overs():
    # 60 off 5.3 overs (33 balls), 50 off 6.0 overs
    row = PointsTableRow(team_id="A", runs_for=60, balls_for=33, runs_against=50, balls_against=36)
    assert nrr(row) == pytest.approx(60 * 6 / 33 - 50 / 6)
    assert row.to_dict(nrr(row))["nrr"] == "2.576"


def test_nrr_zero_when_nothing_played():
    assert nrr(PointsTableRow(team_id="A")) == 0.0


def test_apply_result_win():
    table: dict[str, PointsTableRow] = {}
    apply_result(table, _completed("A", "B", 80, 36, 70, 36, winner="A"))
    a, b = table["A"], table["B"]
    assert (a.played, a.won, a.lost, a.points) == (1, 1, 0, 3)
    assert (b.played, b.won, b.lost, b.points) == (1, 0, 1, 0)
    assert (a.runs_for, a.balls_for, a.runs_against, a.balls_against) == (80, 36, 70, 36)
    assert (b.runs_for, b.runs_against) == (70, 80)


def test_apply_result_tie_gives_a_point_each():
    table: dict[str, PointsTableRow] = {}
    apply_result(table, _completed("A", "B", 50, 36, 50, 36, result="tie"))
    assert table["A"].points == table["B"].points == 1
    assert table["A"].tied == table["B"].tied == 1


def test_apply_result_refuses_live_match():
    m = _completed("A", "B", 1, 1, 0, 0)
    m.status = "live"
    with pytest.raises(ValueError):
        apply_result({}, m)


def test_build_table_is_order_independent():
    m1 = _completed("A", "B", 80, 36, 70, 36, winner="A", mid="1")
    m2 = _completed("B", "C", 90, 36, 91, 30, winner="C", mid="2")
    m3 = _completed("A", "C", 60, 36, 60, 36, result="tie", mid="3")
    forward = build_table([m1, m2, m3])
    backward = build_table([m3, m2, m1])
    assert {k: v.to_dict() for k, v in forward.items()} == {k: v.to_dict() for k, v in backward.items()}


def test_sort_by_points_then_nrr_then_name():
    rows = [
        PointsTableRow(team_id="z", points=3, runs_for=60, balls_for=36, runs_against=60, balls_against=36),
        PointsTableRow(team_id="y", points=3, runs_for=90, balls_for=36, runs_against=60, balls_against=36),
        PointsTableRow(team_id="x", points=6),
        PointsTableRow(team_id="w", points=3, runs_for=60, balls_for=36, runs_against=60, balls_against=36),
    ]
    names = {"w": "Wolves", "x": "Xenon", "y": "Yaks", "z": "Aces"}
    assert [r.team_id for r in sort_rows(rows, names)] == ["x", "y", "z", "w"]


# ---------- Stored table ----------


@pytest.fixture
def db_conn(tmp_path):
    db_path = tmp_path / "standings_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


def test_points_table_lists_every_team(db_conn):
    registry = RegistryService()
    for name in ("Bravo", "Alpha"):
        registry.create_team(db_conn, name, name[:3].upper(), "#000", "#fff")
    table = StandingsService().points_table(db_conn)
    assert [r["team_name"] for r in table] == ["Alpha", "Bravo"]
    assert all(r["played"] == 0 and r["nrr"] == "0.000" for r in table)
    assert [r["position"] for r in table] == [1, 2]


def test_rebuild_matches_incremental_table(db_conn):
    registry = RegistryService()
    a = registry.create_team(db_conn, "Alpha", "ALP", "#000", "#fff")
    b = registry.create_team(db_conn, "Bravo", "BRA", "#000", "#fff")
    repo = MatchRepository()
    m = repo.create(db_conn, match_number=1, team1_id=a.id, team2_id=b.id, stage="group",
                    group_name=None, squad_size=8, overs_limit=6)
    done = _completed(a.id, b.id, 70, 36, 71, 33, winner=b.id, mid=m.id)
    done.created_at = m.created_at
    repo.save(db_conn, done)

    svc = StandingsService()
    svc.apply_match(db_conn, done)
    incremental = svc.points_table(db_conn)

    PointsTableRepository().clear(db_conn)
    rebuilt = svc.rebuild_points_table(db_conn)
    assert rebuilt == incremental
    assert rebuilt[0]["team_id"] == b.id
    assert rebuilt[0]["points"] == 3
    assert rebuilt[0]["overs_for"] == "5.3"


def test_group_filter(db_conn):
    registry = RegistryService()
    a = registry.create_team(db_conn, "Alpha", "ALP", "#000", "#fff")
    registry.create_team(db_conn, "Bravo", "BRA", "#000", "#fff")
    TeamRepository().set_group(db_conn, a.id, "A")
    table = StandingsService().points_table(db_conn, group_name="A")
    assert [r["team_id"] for r in table] == [a.id]
