"""
Repository interfaces for tournament data.
No business logic; only read/write operations.
Repositories never commit; callers wrap writes in persistence.db.transaction().
"""
from __future__ import annotations

import json
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable

from cricket_tournament.models import (
    AuctionState,
    AuctionStatus,
    BallEvent,
    BidEntry,
    Match,
    MatchStatus,
    Player,
    PlayerMatchStats,
    PlayerStatus,
    ApprovalStatus,
    PaymentStatus,
    PointsTableRow,
    PowerOver,
    Team,
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_datetime(s: str | None) -> datetime:
    if s is None:
        raise ValueError("expected datetime string")
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


# ---------- TeamRepository ----------


def _team_from_row(row: sqlite3.Row) -> Team:
    r = dict(row)
    return Team(
        id=r["id"],
        name=r["name"],
        short_name=r["short_name"],
        primary_color=r["primary_color"],
        secondary_color=r["secondary_color"],
        logo_url=r["logo_url"],
        budget=r["budget"],
        remaining_budget=r["remaining_budget"],
        group_name=r["group_name"],
        captain_id=r["captain_id"],
        vice_captain_id=r["vice_captain_id"],
        created_at=_parse_datetime(r["created_at"]),
    )


class TeamRepository:
    """CRUD for teams. Budget changes are explicit calls (debit / reset)."""

    def create(
        self,
        conn: sqlite3.Connection,
        name: str,
        short_name: str,
        primary_color: str,
        secondary_color: str,
        budget: int,
        logo_url: str | None = None,
        id: str | None = None,
    ) -> Team:
        tid = id or str(uuid.uuid4())
        now = _now()
        conn.execute(
            """INSERT INTO teams (id, name, short_name, primary_color, secondary_color, logo_url,
               budget, remaining_budget, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (tid, name, short_name, primary_color, secondary_color, logo_url, budget, budget, now),
        )
        return Team(
            id=tid, name=name, short_name=short_name, primary_color=primary_color,
            secondary_color=secondary_color, logo_url=logo_url, budget=budget,
            remaining_budget=budget, created_at=_parse_datetime(now),
        )

    def get(self, conn: sqlite3.Connection, team_id: str) -> Team | None:
        row = conn.execute("SELECT * FROM teams WHERE id = ?", (team_id,)).fetchone()
        return _team_from_row(row) if row else None

    def get_by_name(self, conn: sqlite3.Connection, name: str) -> Team | None:
        row = conn.execute("SELECT * FROM teams WHERE name = ?", (name,)).fetchone()
        return _team_from_row(row) if row else None

    def list_all(self, conn: sqlite3.Connection) -> list[Team]:
        rows = conn.execute("SELECT * FROM teams ORDER BY rowid").fetchall()
        return [_team_from_row(r) for r in rows]

    def list_by_group(self, conn: sqlite3.Connection, group_name: str) -> list[Team]:
        rows = conn.execute(
            "SELECT * FROM teams WHERE group_name = ? ORDER BY rowid", (group_name,)
        ).fetchall()
        return [_team_from_row(r) for r in rows]

    def debit(self, conn: sqlite3.Connection, team_id: str, amount: int) -> None:
        conn.execute(
            "UPDATE teams SET remaining_budget = remaining_budget - ? WHERE id = ?",
            (amount, team_id),
        )

    def reset_budgets(self, conn: sqlite3.Connection) -> None:
        conn.execute("UPDATE teams SET remaining_budget = budget")

    def set_group(self, conn: sqlite3.Connection, team_id: str, group_name: str | None) -> None:
        conn.execute("UPDATE teams SET group_name = ? WHERE id = ?", (group_name, team_id))

    def clear_groups(self, conn: sqlite3.Connection) -> None:
        conn.execute("UPDATE teams SET group_name = NULL")

    def set_captains(
        self,
        conn: sqlite3.Connection,
        team_id: str,
        captain_id: str | None,
        vice_captain_id: str | None,
    ) -> None:
        conn.execute(
            "UPDATE teams SET captain_id = ?, vice_captain_id = ? WHERE id = ?",
            (captain_id, vice_captain_id, team_id),
        )


# ---------- PlayerRepository ----------


def _player_from_row(row: sqlite3.Row) -> Player:
    r = dict(row)
    return Player(
        id=r["id"],
        name=r["name"],
        mobile=r["mobile"],
        email=r["email"],
        address=r["address"],
        role=r["role"],
        batting_rating=r["batting_rating"],
        bowling_rating=r["bowling_rating"],
        fielding_rating=r["fielding_rating"],
        photo_url=r["photo_url"],
        category=r["category"],
        base_points=r["base_points"],
        status=r["status"],
        approval_status=r["approval_status"],
        payment_status=r["payment_status"],
        team_id=r["team_id"],
        sold_price=r["sold_price"],
        is_locked=bool(r["is_locked"]),
        created_at=_parse_datetime(r["created_at"]),
    )


class PlayerRepository:
    """CRUD for players. Listing is always in registration (rowid) order."""

    def create(
        self,
        conn: sqlite3.Connection,
        name: str,
        mobile: str,
        address: str,
        role: str,
        batting_rating: int,
        bowling_rating: int,
        fielding_rating: int,
        photo_url: str,
        email: str | None = None,
        id: str | None = None,
    ) -> Player:
        pid = id or str(uuid.uuid4())
        now = _now()
        conn.execute(
            """INSERT INTO players (id, name, mobile, email, address, role, batting_rating,
               bowling_rating, fielding_rating, photo_url, status, approval_status,
               payment_status, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                pid, name, mobile, email, address, role, batting_rating, bowling_rating,
                fielding_rating, photo_url, PlayerStatus.REGISTERED.value,
                ApprovalStatus.PENDING.value, PaymentStatus.PENDING.value, now,
            ),
        )
        player = self.get(conn, pid)
        assert player is not None
        return player

    def get(self, conn: sqlite3.Connection, player_id: str) -> Player | None:
        row = conn.execute("SELECT * FROM players WHERE id = ?", (player_id,)).fetchone()
        return _player_from_row(row) if row else None

    def get_by_mobile(self, conn: sqlite3.Connection, mobile: str) -> Player | None:
        row = conn.execute("SELECT * FROM players WHERE mobile = ?", (mobile,)).fetchone()
        return _player_from_row(row) if row else None

    def get_by_email(self, conn: sqlite3.Connection, email: str) -> Player | None:
        row = conn.execute(
            "SELECT * FROM players WHERE lower(email) = lower(?)", (email,)
        ).fetchone()
        return _player_from_row(row) if row else None

    def list_all(
        self,
        conn: sqlite3.Connection,
        status: str | None = None,
        category: str | None = None,
        team_id: str | None = None,
    ) -> list[Player]:
        clauses: list[str] = []
        args: list[Any] = []
        if status is not None:
            clauses.append("status = ?")
            args.append(status)
        if category is not None:
            clauses.append("category = ?")
            args.append(category)
        if team_id is not None:
            clauses.append("team_id = ?")
            args.append(team_id)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = conn.execute(f"SELECT * FROM players {where} ORDER BY rowid", args).fetchall()
        return [_player_from_row(r) for r in rows]

    def first_eligible(
        self,
        conn: sqlite3.Connection,
        status: str,
        category: str | None = None,
    ) -> Player | None:
        """
        First approved + payment-verified player with the given status, in
        registration order. category=None matches any category.
        """
        sql = (
            "SELECT * FROM players WHERE status = ? AND approval_status = ? "
            "AND payment_status = ? AND category IS NOT NULL"
        )
        args: list[Any] = [status, ApprovalStatus.APPROVED.value, PaymentStatus.VERIFIED.value]
        if category is not None:
            sql += " AND category = ?"
            args.append(category)
        row = conn.execute(sql + " ORDER BY rowid LIMIT 1", args).fetchone()
        return _player_from_row(row) if row else None

    def set_status(self, conn: sqlite3.Connection, player_id: str, status: str) -> None:
        conn.execute("UPDATE players SET status = ? WHERE id = ?", (status, player_id))

    def mark_sold(self, conn: sqlite3.Connection, player_id: str, team_id: str, price: int) -> None:
        conn.execute(
            "UPDATE players SET status = ?, team_id = ?, sold_price = ?, is_locked = 1 WHERE id = ?",
            (PlayerStatus.SOLD.value, team_id, price, player_id),
        )

    def set_approval(
        self,
        conn: sqlite3.Connection,
        player_id: str,
        approval_status: str,
        category: str | None = None,
        base_points: int | None = None,
    ) -> None:
        conn.execute(
            "UPDATE players SET approval_status = ?, category = ?, base_points = ? WHERE id = ?",
            (approval_status, category, base_points, player_id),
        )

    def set_payment_status(self, conn: sqlite3.Connection, player_id: str, payment_status: str) -> None:
        conn.execute("UPDATE players SET payment_status = ? WHERE id = ?", (payment_status, player_id))

    def reset_all(self, conn: sqlite3.Connection) -> None:
        """Back to the pre-auction pool: registered, unsold, unlocked."""
        conn.execute(
            "UPDATE players SET status = ?, team_id = NULL, sold_price = NULL, is_locked = 0",
            (PlayerStatus.REGISTERED.value,),
        )


# ---------- AuctionStateRepository ----------


class AuctionStateRepository:
    """The auction singleton row. init_db guarantees it exists."""

    def get(self, conn: sqlite3.Connection) -> AuctionState:
        row = conn.execute("SELECT * FROM auction_state WHERE id = 'auction'").fetchone()
        if row is None:
            raise RuntimeError("auction_state row missing: call init_db first")
        r = dict(row)
        history = [
            BidEntry(team_id=b["team_id"], amount=b["amount"], timestamp=b["timestamp"])
            for b in json.loads(r["bid_history"] or "[]")
        ]
        return AuctionState(
            status=r["status"],
            current_category=r["current_category"],
            current_player_id=r["current_player_id"],
            current_bid=r["current_bid"],
            current_bidding_team_id=r["current_bidding_team_id"],
            bid_history=history,
            resume_status=r["resume_status"],
            updated_at=_parse_datetime(r["updated_at"]),
        )

    def save(self, conn: sqlite3.Connection, state: AuctionState) -> AuctionState:
        now = _now()
        status = state.status.value if isinstance(state.status, AuctionStatus) else state.status
        conn.execute(
            """UPDATE auction_state SET status = ?, current_category = ?, current_player_id = ?,
               current_bid = ?, current_bidding_team_id = ?, bid_history = ?, resume_status = ?,
               updated_at = ? WHERE id = 'auction'""",
            (
                status,
                state.current_category,
                state.current_player_id,
                state.current_bid,
                state.current_bidding_team_id,
                json.dumps([b.to_dict() for b in state.bid_history]),
                state.resume_status,
                now,
            ),
        )
        state.updated_at = _parse_datetime(now)
        return state


# ---------- MatchRepository ----------


def _orders_from_json(raw: str | None) -> dict[int, list[str]]:
    data = json.loads(raw or "{}")
    return {1: list(data.get("1", [])), 2: list(data.get("2", []))}


def _orders_to_json(orders: dict[int, list[str]]) -> str:
    return json.dumps({"1": orders.get(1, []), "2": orders.get(2, [])})


def _match_from_row(row: sqlite3.Row) -> Match:
    r = dict(row)
    power_over = None
    if r["power_over_number"] is not None and r["power_over_innings"] is not None:
        power_over = PowerOver(over_number=r["power_over_number"], innings=r["power_over_innings"])
    return Match(
        id=r["id"],
        match_number=r["match_number"],
        team1_id=r["team1_id"],
        team2_id=r["team2_id"],
        status=r["status"],
        stage=r["stage"],
        group_name=r["group_name"],
        toss_winner_id=r["toss_winner_id"],
        toss_decision=r["toss_decision"],
        batting_first_id=r["batting_first_id"],
        winner_id=r["winner_id"],
        result=r["result"],
        team1_score=r["team1_score"],
        team1_wickets=r["team1_wickets"],
        team1_balls=r["team1_balls"],
        team2_score=r["team2_score"],
        team2_wickets=r["team2_wickets"],
        team2_balls=r["team2_balls"],
        current_innings=r["current_innings"],
        striker_id=r["striker_id"],
        non_striker_id=r["non_striker_id"],
        current_bowler_id=r["current_bowler_id"],
        batting_order=_orders_from_json(r["batting_order"]),
        bowling_order=_orders_from_json(r["bowling_order"]),
        power_over=power_over,
        squad_size=r["squad_size"],
        overs_limit=r["overs_limit"],
        created_at=_parse_datetime(r["created_at"]),
    )


class MatchRepository:
    """CRUD for matches. save() writes back every mutable column of a Match."""

    def create(
        self,
        conn: sqlite3.Connection,
        match_number: int,
        team1_id: str,
        team2_id: str,
        stage: str,
        squad_size: int,
        overs_limit: int,
        group_name: str | None = None,
        id: str | None = None,
    ) -> Match:
        mid = id or str(uuid.uuid4())
        now = _now()
        conn.execute(
            """INSERT INTO matches (id, match_number, team1_id, team2_id, status, stage, group_name,
               squad_size, overs_limit, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                mid, match_number, team1_id, team2_id, MatchStatus.SCHEDULED.value, stage,
                group_name, squad_size, overs_limit, now,
            ),
        )
        match = self.get(conn, mid)
        assert match is not None
        return match

    def get(self, conn: sqlite3.Connection, match_id: str) -> Match | None:
        row = conn.execute("SELECT * FROM matches WHERE id = ?", (match_id,)).fetchone()
        return _match_from_row(row) if row else None

    def list_all(self, conn: sqlite3.Connection, status: str | None = None) -> list[Match]:
        if status is None:
            rows = conn.execute("SELECT * FROM matches ORDER BY match_number").fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM matches WHERE status = ? ORDER BY match_number", (status,)
            ).fetchall()
        return [_match_from_row(r) for r in rows]

    def next_match_number(self, conn: sqlite3.Connection) -> int:
        row = conn.execute("SELECT COALESCE(MAX(match_number), 0) FROM matches").fetchone()
        return int(row[0]) + 1

    def count_started(self, conn: sqlite3.Connection) -> int:
        row = conn.execute(
            "SELECT COUNT(*) FROM matches WHERE status != ?", (MatchStatus.SCHEDULED.value,)
        ).fetchone()
        return int(row[0])

    def delete_scheduled(self, conn: sqlite3.Connection, stages: Iterable[str]) -> int:
        stages = list(stages)
        marks = ", ".join("?" for _ in stages)
        cur = conn.execute(
            f"DELETE FROM matches WHERE stage IN ({marks}) AND status = ?",
            (*stages, MatchStatus.SCHEDULED.value),
        )
        return cur.rowcount

    def save(self, conn: sqlite3.Connection, match: Match) -> Match:
        po = match.power_over
        conn.execute(
            """UPDATE matches SET status = ?, toss_winner_id = ?, toss_decision = ?,
               batting_first_id = ?, winner_id = ?, result = ?,
               team1_score = ?, team1_wickets = ?, team1_balls = ?,
               team2_score = ?, team2_wickets = ?, team2_balls = ?,
               current_innings = ?, striker_id = ?, non_striker_id = ?, current_bowler_id = ?,
               batting_order = ?, bowling_order = ?, power_over_number = ?, power_over_innings = ?
               WHERE id = ?""",
            (
                match.status, match.toss_winner_id, match.toss_decision,
                match.batting_first_id, match.winner_id, match.result,
                match.team1_score, match.team1_wickets, match.team1_balls,
                match.team2_score, match.team2_wickets, match.team2_balls,
                match.current_innings, match.striker_id, match.non_striker_id, match.current_bowler_id,
                _orders_to_json(match.batting_order), _orders_to_json(match.bowling_order),
                po.over_number if po else None, po.innings if po else None,
                match.id,
            ),
        )
        return match


# ---------- BallEventRepository ----------


def _ball_from_row(row: sqlite3.Row) -> BallEvent:
    r = dict(row)
    return BallEvent(
        id=r["id"],
        match_id=r["match_id"],
        innings=r["innings"],
        sequence=r["sequence"],
        over_number=r["over_number"],
        ball_number=r["ball_number"],
        batsman_id=r["batsman_id"],
        bowler_id=r["bowler_id"],
        runs=r["runs"],
        effective_runs=r["effective_runs"],
        extras=r["extras"],
        extra_type=r["extra_type"],
        is_wicket=bool(r["is_wicket"]),
        wicket_type=r["wicket_type"],
        dismissed_player_id=r["dismissed_player_id"],
        fielder_id=r["fielder_id"],
        is_power_over=bool(r["is_power_over"]),
        team_runs=r["team_runs"],
        created_at=_parse_datetime(r["created_at"]),
    )


class BallEventRepository:
    """Append-only. There is no update or delete."""

    def next_sequence(self, conn: sqlite3.Connection, match_id: str) -> int:
        row = conn.execute(
            "SELECT COALESCE(MAX(sequence), 0) FROM ball_events WHERE match_id = ?", (match_id,)
        ).fetchone()
        return int(row[0]) + 1

    def append(self, conn: sqlite3.Connection, ball: BallEvent) -> BallEvent:
        conn.execute(
            """INSERT INTO ball_events (id, match_id, innings, sequence, over_number, ball_number,
               batsman_id, bowler_id, runs, effective_runs, extras, extra_type, is_wicket,
               wicket_type, dismissed_player_id, fielder_id, is_power_over, team_runs, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                ball.id, ball.match_id, ball.innings, ball.sequence, ball.over_number,
                ball.ball_number, ball.batsman_id, ball.bowler_id, ball.runs,
                ball.effective_runs, ball.extras, ball.extra_type, int(ball.is_wicket),
                ball.wicket_type, ball.dismissed_player_id, ball.fielder_id,
                int(ball.is_power_over), ball.team_runs, ball.created_at.isoformat(),
            ),
        )
        return ball

    def list_for_match(
        self, conn: sqlite3.Connection, match_id: str, innings: int | None = None
    ) -> list[BallEvent]:
        if innings is None:
            rows = conn.execute(
                "SELECT * FROM ball_events WHERE match_id = ? ORDER BY sequence", (match_id,)
            ).fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM ball_events WHERE match_id = ? AND innings = ? ORDER BY sequence",
                (match_id, innings),
            ).fetchall()
        return [_ball_from_row(r) for r in rows]


# ---------- PlayerMatchStatsRepository ----------


def _stats_from_row(row: sqlite3.Row) -> PlayerMatchStats:
    r = dict(row)
    return PlayerMatchStats(
        match_id=r["match_id"],
        player_id=r["player_id"],
        innings=r["innings"],
        batting_position=r["batting_position"],
        runs_scored=r["runs_scored"],
        balls_faced=r["balls_faced"],
        fours=r["fours"],
        sixes=r["sixes"],
        balls_bowled=r["balls_bowled"],
        runs_conceded=r["runs_conceded"],
        wickets_taken=r["wickets_taken"],
        catches=r["catches"],
        run_outs=r["run_outs"],
        is_out=bool(r["is_out"]),
        dismissal_type=r["dismissal_type"],
        dismissed_by=r["dismissed_by"],
    )


class PlayerMatchStatsRepository:
    """
    One row per (match, player, innings).
    add() treats the given stats as increments; dismissal fields are set, not summed.
    """

    def get(
        self, conn: sqlite3.Connection, match_id: str, player_id: str, innings: int
    ) -> PlayerMatchStats | None:
        row = conn.execute(
            "SELECT * FROM player_match_stats WHERE match_id = ? AND player_id = ? AND innings = ?",
            (match_id, player_id, innings),
        ).fetchone()
        return _stats_from_row(row) if row else None

    def ensure(
        self,
        conn: sqlite3.Connection,
        match_id: str,
        player_id: str,
        innings: int,
        batting_position: int | None = None,
    ) -> None:
        conn.execute(
            """INSERT INTO player_match_stats (match_id, player_id, innings, batting_position)
               VALUES (?, ?, ?, ?)
               ON CONFLICT(match_id, player_id, innings) DO UPDATE SET
               batting_position = COALESCE(player_match_stats.batting_position, excluded.batting_position)""",
            (match_id, player_id, innings, batting_position),
        )

    def add(self, conn: sqlite3.Connection, delta: PlayerMatchStats) -> None:
        conn.execute(
            """INSERT INTO player_match_stats (match_id, player_id, innings, batting_position,
               runs_scored, balls_faced, fours, sixes, balls_bowled, runs_conceded, wickets_taken,
               catches, run_outs, is_out, dismissal_type, dismissed_by)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(match_id, player_id, innings) DO UPDATE SET
               runs_scored = runs_scored + excluded.runs_scored,
               balls_faced = balls_faced + excluded.balls_faced,
               fours = fours + excluded.fours,
               sixes = sixes + excluded.sixes,
               balls_bowled = balls_bowled + excluded.balls_bowled,
               runs_conceded = runs_conceded + excluded.runs_conceded,
               wickets_taken = wickets_taken + excluded.wickets_taken,
               catches = catches + excluded.catches,
               run_outs = run_outs + excluded.run_outs,
               is_out = MAX(is_out, excluded.is_out),
               dismissal_type = COALESCE(excluded.dismissal_type, dismissal_type),
               dismissed_by = COALESCE(excluded.dismissed_by, dismissed_by)""",
            (
                delta.match_id, delta.player_id, delta.innings, delta.batting_position,
                delta.runs_scored, delta.balls_faced, delta.fours, delta.sixes,
                delta.balls_bowled, delta.runs_conceded, delta.wickets_taken,
                delta.catches, delta.run_outs, int(delta.is_out), delta.dismissal_type,
                delta.dismissed_by,
            ),
        )

    def overwrite_counters(self, conn: sqlite3.Connection, stats: PlayerMatchStats) -> None:
        """Replace every ball-derived column, keeping batting_position."""
        self.ensure(conn, stats.match_id, stats.player_id, stats.innings)
        conn.execute(
            """UPDATE player_match_stats SET runs_scored = ?, balls_faced = ?, fours = ?, sixes = ?,
               balls_bowled = ?, runs_conceded = ?, wickets_taken = ?, catches = ?, run_outs = ?,
               is_out = ?, dismissal_type = ?, dismissed_by = ?
               WHERE match_id = ? AND player_id = ? AND innings = ?""",
            (
                stats.runs_scored, stats.balls_faced, stats.fours, stats.sixes,
                stats.balls_bowled, stats.runs_conceded, stats.wickets_taken,
                stats.catches, stats.run_outs, int(stats.is_out), stats.dismissal_type,
                stats.dismissed_by, stats.match_id, stats.player_id, stats.innings,
            ),
        )

    def list_for_match(self, conn: sqlite3.Connection, match_id: str) -> list[PlayerMatchStats]:
        rows = conn.execute(
            """SELECT * FROM player_match_stats WHERE match_id = ?
               ORDER BY innings, batting_position IS NULL, batting_position, player_id""",
            (match_id,),
        ).fetchall()
        return [_stats_from_row(r) for r in rows]

    def list_all(self, conn: sqlite3.Connection) -> list[PlayerMatchStats]:
        rows = conn.execute("SELECT * FROM player_match_stats").fetchall()
        return [_stats_from_row(r) for r in rows]


# ---------- PointsTableRepository ----------


def _points_from_row(row: sqlite3.Row) -> PointsTableRow:
    r = dict(row)
    return PointsTableRow(
        team_id=r["team_id"],
        played=r["played"],
        won=r["won"],
        lost=r["lost"],
        tied=r["tied"],
        points=r["points"],
        runs_for=r["runs_for"],
        balls_for=r["balls_for"],
        runs_against=r["runs_against"],
        balls_against=r["balls_against"],
    )


class PointsTableRepository:
    def get(self, conn: sqlite3.Connection, team_id: str) -> PointsTableRow | None:
        row = conn.execute("SELECT * FROM points_table WHERE team_id = ?", (team_id,)).fetchone()
        return _points_from_row(row) if row else None

    def list_all(self, conn: sqlite3.Connection) -> list[PointsTableRow]:
        rows = conn.execute("SELECT * FROM points_table").fetchall()
        return [_points_from_row(r) for r in rows]

    def upsert(self, conn: sqlite3.Connection, row: PointsTableRow) -> None:
        conn.execute(
            """INSERT INTO points_table (team_id, played, won, lost, tied, points, runs_for,
               balls_for, runs_against, balls_against) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(team_id) DO UPDATE SET played = excluded.played, won = excluded.won,
               lost = excluded.lost, tied = excluded.tied, points = excluded.points,
               runs_for = excluded.runs_for, balls_for = excluded.balls_for,
               runs_against = excluded.runs_against, balls_against = excluded.balls_against""",
            (
                row.team_id, row.played, row.won, row.lost, row.tied, row.points,
                row.runs_for, row.balls_for, row.runs_against, row.balls_against,
            ),
        )

    def clear(self, conn: sqlite3.Connection) -> None:
        conn.execute("DELETE FROM points_table")
