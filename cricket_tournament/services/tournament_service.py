"""
Tournament structure: group draw, group fixtures and knockout matches.
"""
from __future__ import annotations

import logging
import sqlite3

from cricket_tournament import config
from cricket_tournament.errors import FixturesLocked, InvalidSelection
from cricket_tournament.models import Match, MatchStage, Team
from cricket_tournament.persistence.db import transaction
from cricket_tournament.persistence.repositories import MatchRepository, TeamRepository
from cricket_tournament.services.match_service import MatchService
from cricket_tournament.services.scheduling import assign_groups, group_fixtures

logger = logging.getLogger(__name__)

_KNOCKOUT_STAGES = {MatchStage.SEMIFINAL.value, MatchStage.FINAL.value}


class TournamentService:
    def __init__(self) -> None:
        self._team_repo = TeamRepository()
        self._match_repo = MatchRepository()
        self._match_service = MatchService()

    def assign_groups(self, conn: sqlite3.Connection, seed: int | None = None) -> list[Team]:
        """
        Redraw groups and regenerate every group fixture.
        Scheduled knockout matches are dropped with the old fixtures.
        Refused once any match has gone live.
        """
        with transaction(conn):
            if self._match_repo.count_started(conn) > 0:
                raise FixturesLocked("Cannot redraw groups after a match has started")
            teams = self._team_repo.list_all(conn)
            groups = assign_groups(
                [t.id for t in teams], config.GROUP_NAMES, config.GROUP_SIZE, seed=seed
            )
            self._team_repo.clear_groups(conn)
            for group_name, team_ids in groups.items():
                for tid in team_ids:
                    self._team_repo.set_group(conn, tid, group_name)
            removed = self._match_repo.delete_scheduled(conn, [s.value for s in MatchStage])
            fixtures = self.generate_fixtures(conn, groups)
            teams = self._team_repo.list_all(conn)
        logger.info(f"Groups drawn (seed={seed}); {removed} old fixtures replaced by {len(fixtures)}")
        return teams

    def generate_fixtures(self, conn: sqlite3.Connection, groups: dict[str, list[str]] | None = None) -> list[Match]:
        """Create group-stage matches for the current group assignment."""
        with transaction(conn):
            if groups is None:
                groups = {g: [t.id for t in self._team_repo.list_by_group(conn, g)] for g in config.GROUP_NAMES}
            first = self._match_repo.next_match_number(conn)
            created = []
            for fx in group_fixtures(groups, first_match_number=first):
                created.append(self._match_repo.create(
                    conn,
                    match_number=fx["match_number"],
                    team1_id=fx["team1_id"],
                    team2_id=fx["team2_id"],
                    stage=MatchStage.GROUP.value,
                    group_name=fx["group_name"],
                    squad_size=config.DEFAULT_SQUAD_SIZE,
                    overs_limit=config.DEFAULT_OVERS_LIMIT,
                ))
            return created

    def create_knockout_match(
        self, conn: sqlite3.Connection, stage: str, team1_id: str, team2_id: str
    ) -> Match:
        if stage not in _KNOCKOUT_STAGES:
            raise InvalidSelection(f"Knockout stage must be semifinal or final: {stage}")
        return self._match_service.create_match(conn, team1_id, team2_id, stage=stage)
