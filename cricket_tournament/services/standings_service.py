"""
Points table and leaderboards over persisted matches and stats.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Any, Callable

from cricket_tournament import scoring, standings
from cricket_tournament.locks import entity_lock
from cricket_tournament.models import Match, MatchStatus, PointsTableRow
from cricket_tournament.persistence.db import transaction
from cricket_tournament.persistence.repositories import (
    MatchRepository,
    PlayerMatchStatsRepository,
    PlayerRepository,
    PointsTableRepository,
    TeamRepository,
)

logger = logging.getLogger(__name__)

POINTS_TABLE_KEY = "points_table"


class StandingsService:
    def __init__(self) -> None:
        self._points_repo = PointsTableRepository()
        self._match_repo = MatchRepository()
        self._team_repo = TeamRepository()
        self._player_repo = PlayerRepository()
        self._stats_repo = PlayerMatchStatsRepository()

    def apply_match(self, conn: sqlite3.Connection, match: Match) -> None:
        """Fold one completed match into the stored table. Runs inside the caller's transaction."""
        with transaction(conn):
            table: dict[str, PointsTableRow] = {}
            for tid in (match.team1_id, match.team2_id):
                row = self._points_repo.get(conn, tid)
                if row is not None:
                    table[tid] = row
            standings.apply_result(table, match)
            for row in table.values():
                self._points_repo.upsert(conn, row)

    def rebuild_points_table(self, conn: sqlite3.Connection) -> list[dict[str, Any]]:
        """Discard the incremental table and rebuild it from completed matches."""
        with entity_lock(POINTS_TABLE_KEY), transaction(conn):
            completed = self._match_repo.list_all(conn, status=MatchStatus.COMPLETED.value)
            table = standings.build_table(completed)
            self._points_repo.clear(conn)
            for row in table.values():
                self._points_repo.upsert(conn, row)
        logger.info(f"Points table rebuilt from {len(completed)} completed matches")
        return self.points_table(conn)

    def points_table(self, conn: sqlite3.Connection, group_name: str | None = None) -> list[dict[str, Any]]:
        """Every team (zero rows for teams yet to play), sorted by points, NRR, name."""
        teams = {t.id: t for t in self._team_repo.list_all(conn)}
        rows = {r.team_id: r for r in self._points_repo.list_all(conn)}
        for tid in teams:
            rows.setdefault(tid, PointsTableRow(team_id=tid))
        if group_name is not None:
            rows = {tid: r for tid, r in rows.items() if tid in teams and teams[tid].group_name == group_name}
        names = {tid: t.name for tid, t in teams.items()}
        out: list[dict[str, Any]] = []
        for position, row in enumerate(standings.sort_rows(rows.values(), names), start=1):
            d = row.to_dict(nrr=standings.nrr(row))
            team = teams.get(row.team_id)
            d["position"] = position
            d["team_name"] = team.name if team else None
            d["short_name"] = team.short_name if team else None
            d["group_name"] = team.group_name if team else None
            out.append(d)
        return out

    # ---------- Leaderboards ----------

    def _leaderboard(
        self,
        conn: sqlite3.Connection,
        ranker: Callable[..., list[scoring.PlayerTotals]],
        limit: int,
    ) -> list[dict[str, Any]]:
        totals = scoring.aggregate(self._stats_repo.list_all(conn))
        players = {p.id: p for p in self._player_repo.list_all(conn)}
        teams = {t.id: t for t in self._team_repo.list_all(conn)}
        out = []
        for rank, t in enumerate(ranker(totals.values(), limit), start=1):
            d = t.to_dict()
            player = players.get(t.player_id)
            team = teams.get(player.team_id) if player and player.team_id else None
            d["rank"] = rank
            d["player_name"] = player.name if player else None
            d["team_id"] = team.id if team else None
            d["team_name"] = team.name if team else None
            out.append(d)
        return out

    def orange_cap(self, conn: sqlite3.Connection, limit: int = scoring.DEFAULT_LEADERBOARD_LIMIT) -> list[dict[str, Any]]:
        return self._leaderboard(conn, scoring.orange_cap, limit)

    def purple_cap(self, conn: sqlite3.Connection, limit: int = scoring.DEFAULT_LEADERBOARD_LIMIT) -> list[dict[str, Any]]:
        return self._leaderboard(conn, scoring.purple_cap, limit)

    def mvp(self, conn: sqlite3.Connection, limit: int = scoring.DEFAULT_LEADERBOARD_LIMIT) -> list[dict[str, Any]]:
        return self._leaderboard(conn, scoring.mvp, limit)
