"""
Match lifecycle and ball-by-ball scoring.

MatchService loads a match, runs one live_match_engine transition and persists
the new match row, the BallEvent and the stat increments in one transaction
(plus the points table when the ball completes the match).
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Any

from cricket_tournament import config, live_match_engine
from cricket_tournament.errors import (
    InvalidDelivery,
    InvalidSelection,
    MatchAlreadyStarted,
    MatchNotFound,
    MatchNotLive,
    PlayerNotFound,
    TeamNotFound,
)
from cricket_tournament.live_match_engine import Delivery
from cricket_tournament.locks import entity_lock, match_key
from cricket_tournament.models import (
    BallEvent,
    Match,
    MatchStage,
    MatchStatus,
    Player,
    PlayerMatchStats,
    PowerOver,
    TossDecision,
)
from cricket_tournament.persistence.db import transaction
from cricket_tournament.persistence.repositories import (
    BallEventRepository,
    MatchRepository,
    PlayerMatchStatsRepository,
    PlayerRepository,
    TeamRepository,
)
from cricket_tournament.services.standings_service import StandingsService

logger = logging.getLogger(__name__)

_STAGES = {s.value for s in MatchStage}
_TOSS_DECISIONS = {d.value for d in TossDecision}


class MatchService:
    """Domain logic for matches. Persistence is delegated to repositories."""

    def __init__(self) -> None:
        self._match_repo = MatchRepository()
        self._ball_repo = BallEventRepository()
        self._stats_repo = PlayerMatchStatsRepository()
        self._player_repo = PlayerRepository()
        self._team_repo = TeamRepository()
        self._standings = StandingsService()

    # ---------- Reads ----------

    def get_match(self, conn: sqlite3.Connection, match_id: str) -> Match:
        match = self._match_repo.get(conn, match_id)
        if match is None:
            raise MatchNotFound(f"Match not found: {match_id}")
        return match

    def list_matches(self, conn: sqlite3.Connection, status: str | None = None) -> list[Match]:
        return self._match_repo.list_all(conn, status=status)

    def list_balls(self, conn: sqlite3.Connection, match_id: str, innings: int | None = None) -> list[BallEvent]:
        self.get_match(conn, match_id)
        return self._ball_repo.list_for_match(conn, match_id, innings)

    def list_player_stats(self, conn: sqlite3.Connection, match_id: str) -> list[PlayerMatchStats]:
        self.get_match(conn, match_id)
        return self._stats_repo.list_for_match(conn, match_id)

    # ---------- Setup ----------

    def create_match(
        self,
        conn: sqlite3.Connection,
        team1_id: str,
        team2_id: str,
        stage: str = MatchStage.GROUP.value,
        group_name: str | None = None,
        squad_size: int | None = None,
        overs_limit: int | None = None,
    ) -> Match:
        if stage not in _STAGES:
            raise InvalidSelection(f"Unknown stage: {stage}")
        if team1_id == team2_id:
            raise InvalidSelection("A team cannot play itself")
        squad_size = squad_size or config.DEFAULT_SQUAD_SIZE
        overs_limit = overs_limit or config.DEFAULT_OVERS_LIMIT
        if squad_size < 2 or overs_limit < 1:
            raise InvalidSelection("Squad size must be at least 2 and overs limit at least 1")
        with transaction(conn):
            for tid in (team1_id, team2_id):
                if self._team_repo.get(conn, tid) is None:
                    raise TeamNotFound(f"Team not found: {tid}")
            match = self._match_repo.create(
                conn,
                match_number=self._match_repo.next_match_number(conn),
                team1_id=team1_id,
                team2_id=team2_id,
                stage=stage,
                group_name=group_name,
                squad_size=squad_size,
                overs_limit=overs_limit,
            )
        logger.info(f"Match {match.match_number} created ({stage}): {team1_id} vs {team2_id}")
        return match

    def start(
        self, conn: sqlite3.Connection, match_id: str, toss_winner_id: str, toss_decision: str
    ) -> Match:
        """scheduled -> live. The toss decides which side bats in innings 1."""
        with entity_lock(match_key(match_id)), transaction(conn):
            match = self.get_match(conn, match_id)
            if match.status != MatchStatus.SCHEDULED:
                raise MatchAlreadyStarted(f"Match {match.match_number} already {match.status}")
            if toss_winner_id not in (match.team1_id, match.team2_id):
                raise InvalidSelection("Toss winner must be one of the two teams")
            if toss_decision not in _TOSS_DECISIONS:
                raise InvalidSelection(f"Toss decision must be 'bat' or 'bowl': {toss_decision}")
            other = match.team2_id if toss_winner_id == match.team1_id else match.team1_id
            match.toss_winner_id = toss_winner_id
            match.toss_decision = toss_decision
            match.batting_first_id = toss_winner_id if toss_decision == TossDecision.BAT else other
            match.status = MatchStatus.LIVE.value
            match.current_innings = 1
            match.batting_order = {1: [], 2: []}
            match.bowling_order = {1: [], 2: []}
            self._match_repo.save(conn, match)
        logger.info(f"Match {match.match_number} live; {match.batting_first_id} bats first")
        return match

    def _live(self, conn: sqlite3.Connection, match_id: str) -> Match:
        match = self.get_match(conn, match_id)
        if match.status != MatchStatus.LIVE:
            raise MatchNotLive(f"Match {match.match_number} is not live (status: {match.status})")
        return match

    def _squad_member(self, conn: sqlite3.Connection, player_id: str, team_id: str, side: str) -> Player:
        player = self._player_repo.get(conn, player_id)
        if player is None:
            raise PlayerNotFound(f"Player not found: {player_id}")
        if player.team_id != team_id:
            raise InvalidSelection(f"{player.name} is not in the {side} side")
        return player

    def _assert_not_dismissed(self, conn: sqlite3.Connection, match: Match, player: Player) -> None:
        stats = self._stats_repo.get(conn, match.id, player.id, match.current_innings)
        if stats is not None and stats.is_out:
            raise InvalidSelection(f"{player.name} is already out this innings")

    def _add_batter(self, conn: sqlite3.Connection, match: Match, player_id: str) -> None:
        order = match.batting_order.setdefault(match.current_innings, [])
        if player_id not in order:
            order.append(player_id)
        self._stats_repo.ensure(
            conn, match.id, player_id, match.current_innings, batting_position=order.index(player_id) + 1
        )

    def set_batsmen(
        self, conn: sqlite3.Connection, match_id: str, striker_id: str, non_striker_id: str
    ) -> Match:
        with entity_lock(match_key(match_id)), transaction(conn):
            match = self._live(conn, match_id)
            if striker_id == non_striker_id:
                raise InvalidSelection("Striker and non-striker must be different players")
            batting = match.batting_team_id()
            for pid in (striker_id, non_striker_id):
                player = self._squad_member(conn, pid, batting, "batting")
                self._assert_not_dismissed(conn, match, player)
            for pid in (striker_id, non_striker_id):
                self._add_batter(conn, match, pid)
            match.striker_id = striker_id
            match.non_striker_id = non_striker_id
            return self._match_repo.save(conn, match)

    def set_bowler(self, conn: sqlite3.Connection, match_id: str, bowler_id: str) -> Match:
        with entity_lock(match_key(match_id)), transaction(conn):
            match = self._live(conn, match_id)
            self._squad_member(conn, bowler_id, match.bowling_team_id(), "bowling")
            order = match.bowling_order.setdefault(match.current_innings, [])
            if bowler_id not in order:
                order.append(bowler_id)
            self._stats_repo.ensure(conn, match.id, bowler_id, match.current_innings)
            match.current_bowler_id = bowler_id
            return self._match_repo.save(conn, match)

    def new_batsman(
        self,
        conn: sqlite3.Connection,
        match_id: str,
        player_id: str,
        replace_striker: bool | None = None,
    ) -> Match:
        """
        Fill the crease slot emptied by a wicket.
        With replace_striker unset the vacant slot is used; a named slot must be vacant.
        """
        with entity_lock(match_key(match_id)), transaction(conn):
            match = self._live(conn, match_id)
            player = self._squad_member(conn, player_id, match.batting_team_id(), "batting")
            self._assert_not_dismissed(conn, match, player)
            if player_id in (match.striker_id, match.non_striker_id):
                raise InvalidSelection(f"{player.name} is already at the crease")
            if replace_striker is None:
                if match.striker_id is not None and match.non_striker_id is not None:
                    raise InvalidSelection("Both batters are at the crease")
                replace_striker = match.striker_id is None
            occupant = match.striker_id if replace_striker else match.non_striker_id
            if occupant is not None:
                slot = "striker" if replace_striker else "non-striker"
                raise InvalidSelection(f"The {slot} slot is occupied by a not-out batter")
            self._add_batter(conn, match, player_id)
            if replace_striker:
                match.striker_id = player_id
            else:
                match.non_striker_id = player_id
            return self._match_repo.save(conn, match)

    def set_power_over(self, conn: sqlite3.Connection, match_id: str, over_number: int, innings: int) -> Match:
        with entity_lock(match_key(match_id)), transaction(conn):
            match = self._live(conn, match_id)
            if not 1 <= over_number <= match.overs_limit:
                raise InvalidSelection(f"Over number must be between 1 and {match.overs_limit}")
            if innings not in (1, 2):
                raise InvalidSelection("Innings must be 1 or 2")
            match.power_over = PowerOver(over_number=over_number, innings=innings)
            logger.info(f"Match {match.match_number}: power over set to over {over_number}, innings {innings}")
            return self._match_repo.save(conn, match)

    # ---------- Scoring ----------

    def record_ball(
        self,
        conn: sqlite3.Connection,
        match_id: str,
        runs: int = 0,
        extra_type: str | None = None,
        is_wicket: bool = False,
        wicket_type: str | None = None,
        dismissed_player_id: str | None = None,
        fielder_id: str | None = None,
    ) -> Match:
        """One delivery, fully validated before anything is written."""
        delivery = Delivery(
            runs=runs,
            extra_type=extra_type,
            is_wicket=is_wicket,
            wicket_type=wicket_type,
            dismissed_player_id=dismissed_player_id,
            fielder_id=fielder_id,
        )
        with entity_lock(match_key(match_id)), transaction(conn):
            match = self.get_match(conn, match_id)
            if is_wicket and fielder_id is not None and match.status == MatchStatus.LIVE:
                fielder = self._player_repo.get(conn, fielder_id)
                if fielder is None or fielder.team_id != match.bowling_team_id():
                    raise InvalidDelivery(f"Fielder {fielder_id} is not in the bowling side")
            outcome = live_match_engine.apply_delivery(
                match, delivery, sequence=self._ball_repo.next_sequence(conn, match_id)
            )
            self._ball_repo.append(conn, outcome.ball)
            for delta in outcome.stat_deltas:
                self._stats_repo.add(conn, delta)
            self._match_repo.save(conn, outcome.match)
            if outcome.match_completed:
                self._standings.apply_match(conn, outcome.match)
        new = outcome.match
        if outcome.match_completed:
            logger.info(
                f"Match {new.match_number} completed: {new.result}"
                + (f", winner {new.winner_id}" if new.winner_id else "")
            )
        elif outcome.innings_completed:
            score, wickets, _ = new.innings_totals(1)
            logger.info(f"Match {new.match_number}: innings 1 closed at {score}/{wickets}")
        return new

    # ---------- Recomputation ----------

    def recompute_player_stats(self, conn: sqlite3.Connection, match_id: str) -> list[PlayerMatchStats]:
        """Overwrite every stats row of the match with the ball-log replay."""
        with entity_lock(match_key(match_id)), transaction(conn):
            self.get_match(conn, match_id)
            replayed = live_match_engine.replay_stats(self._ball_repo.list_for_match(conn, match_id))
            for stored in self._stats_repo.list_for_match(conn, match_id):
                key = (stored.player_id, stored.innings)
                if key not in replayed:
                    replayed[key] = PlayerMatchStats(match_id=match_id, player_id=stored.player_id, innings=stored.innings)
            for stats in replayed.values():
                self._stats_repo.overwrite_counters(conn, stats)
            rows = self._stats_repo.list_for_match(conn, match_id)
        logger.info(f"Recomputed {len(rows)} stats rows for match {match_id}")
        return rows

    def verify_stats(self, conn: sqlite3.Connection, match_id: str) -> dict[str, Any]:
        """Compare stored stats rows and team totals against a replay of the ball log."""
        match = self.get_match(conn, match_id)
        balls = self._ball_repo.list_for_match(conn, match_id)
        replayed = live_match_engine.replay_stats(balls)
        stored = {(s.player_id, s.innings): s for s in self._stats_repo.list_for_match(conn, match_id)}
        mismatches: list[dict[str, Any]] = []
        for key in sorted(set(replayed) | set(stored)):
            expected = replayed.get(key) or PlayerMatchStats(match_id=match_id, player_id=key[0], innings=key[1])
            actual = stored.get(key) or PlayerMatchStats(match_id=match_id, player_id=key[0], innings=key[1])
            if expected.counters() != actual.counters():
                mismatches.append({
                    "player_id": key[0],
                    "innings": key[1],
                    "stored": actual.to_dict(),
                    "replayed": expected.to_dict(),
                })
        totals = live_match_engine.replay_totals(balls)
        totals_ok = all(
            totals.get(inn, (0, 0, 0)) == match.innings_totals(inn)
            for inn in (1, 2)
            if match.batting_first_id is not None
        )
        return {
            "match_id": match_id,
            "balls": len(balls),
            "consistent": not mismatches and totals_ok,
            "totals_consistent": totals_ok,
            "mismatches": mismatches,
        }
