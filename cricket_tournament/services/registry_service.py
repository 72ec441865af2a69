"""
Team and player registry: team creation, player registration and the admin
approval / payment-verification steps that make a player auction-eligible.
"""
from __future__ import annotations

import logging
import re
import sqlite3

from cricket_tournament import config, rules
from cricket_tournament.errors import (
    DuplicateRegistration,
    InvalidRegistration,
    InvalidSelection,
    PlayerNotFound,
    TeamNotFound,
)
from cricket_tournament.models import (
    ApprovalStatus,
    PaymentStatus,
    Player,
    PlayerRole,
    PlayerStatus,
    Team,
)
from cricket_tournament.persistence.db import transaction
from cricket_tournament.persistence.repositories import PlayerRepository, TeamRepository

logger = logging.getLogger(__name__)

_MOBILE_RE = re.compile(r"^\d{10}$")
_ROLES = {r.value for r in PlayerRole}


class RegistryService:
    """Teams and players. Persistence is delegated to repositories."""

    def __init__(self) -> None:
        self._team_repo = TeamRepository()
        self._player_repo = PlayerRepository()

    # ---------- Teams ----------

    def create_team(
        self,
        conn: sqlite3.Connection,
        name: str,
        short_name: str,
        primary_color: str,
        secondary_color: str,
        budget: int | None = None,
        logo_url: str | None = None,
    ) -> Team:
        budget = config.DEFAULT_TEAM_BUDGET if budget is None else budget
        if budget <= 0:
            raise InvalidRegistration(f"Team budget must be positive: {budget}")
        with transaction(conn):
            if self._team_repo.get_by_name(conn, name) is not None:
                raise DuplicateRegistration(f"Team name already exists: {name}")
            team = self._team_repo.create(
                conn, name=name, short_name=short_name, primary_color=primary_color,
                secondary_color=secondary_color, budget=budget, logo_url=logo_url,
            )
        logger.info(f"Team created: {team.name} (budget {team.budget})")
        return team

    def get_team(self, conn: sqlite3.Connection, team_id: str) -> Team:
        team = self._team_repo.get(conn, team_id)
        if team is None:
            raise TeamNotFound(f"Team not found: {team_id}")
        return team

    def list_teams(self, conn: sqlite3.Connection) -> list[Team]:
        return self._team_repo.list_all(conn)

    def team_squad(self, conn: sqlite3.Connection, team_id: str) -> list[Player]:
        self.get_team(conn, team_id)
        return self._player_repo.list_all(conn, status=PlayerStatus.SOLD.value, team_id=team_id)

    def set_captain(
        self,
        conn: sqlite3.Connection,
        team_id: str,
        captain_id: str | None,
        vice_captain_id: str | None = None,
    ) -> Team:
        """Captain and vice-captain must be distinct players bought by the team."""
        with transaction(conn):
            self.get_team(conn, team_id)
            if captain_id and captain_id == vice_captain_id:
                raise InvalidSelection("Captain and vice-captain must be different players")
            for pid in (captain_id, vice_captain_id):
                if pid is None:
                    continue
                player = self.get_player(conn, pid)
                if player.team_id != team_id:
                    raise InvalidSelection(f"{player.name} does not play for this team")
            self._team_repo.set_captains(conn, team_id, captain_id, vice_captain_id)
            return self.get_team(conn, team_id)

    # ---------- Players ----------

    def register_player(
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
    ) -> Player:
        if not _MOBILE_RE.match(mobile):
            raise InvalidRegistration("Mobile number must be exactly 10 digits")
        if role not in _ROLES:
            raise InvalidRegistration(f"Unknown role: {role}")
        for label, rating in (
            ("batting", batting_rating), ("bowling", bowling_rating), ("fielding", fielding_rating)
        ):
            if not rules.RATING_MIN <= rating <= rules.RATING_MAX:
                raise InvalidRegistration(
                    f"{label} rating must be between {rules.RATING_MIN} and {rules.RATING_MAX}"
                )
        email = email.strip().lower() if email else None
        with transaction(conn):
            if self._player_repo.get_by_mobile(conn, mobile) is not None:
                raise DuplicateRegistration("Mobile number already registered")
            if email and self._player_repo.get_by_email(conn, email) is not None:
                raise DuplicateRegistration("Email already registered")
            player = self._player_repo.create(
                conn, name=name, mobile=mobile, email=email, address=address, role=role,
                batting_rating=batting_rating, bowling_rating=bowling_rating,
                fielding_rating=fielding_rating, photo_url=photo_url,
            )
        logger.info(f"Player registered: {player.name} ({player.role})")
        return player

    def get_player(self, conn: sqlite3.Connection, player_id: str) -> Player:
        player = self._player_repo.get(conn, player_id)
        if player is None:
            raise PlayerNotFound(f"Player not found: {player_id}")
        return player

    def list_players(
        self,
        conn: sqlite3.Connection,
        status: str | None = None,
        category: str | None = None,
        team_id: str | None = None,
    ) -> list[Player]:
        return self._player_repo.list_all(conn, status=status, category=category, team_id=team_id)

    def list_pending(self, conn: sqlite3.Connection) -> list[Player]:
        return [
            p for p in self._player_repo.list_all(conn)
            if p.approval_status == ApprovalStatus.PENDING
        ]

    def approve_player(self, conn: sqlite3.Connection, player_id: str) -> Player:
        """Approve and place the player in a price tier from the sum of their ratings."""
        with transaction(conn):
            player = self.get_player(conn, player_id)
            if player.status != PlayerStatus.REGISTERED:
                raise InvalidSelection(f"{player.name} is already in the auction pool ({player.status})")
            tier = rules.category_for_ratings(
                player.batting_rating, player.bowling_rating, player.fielding_rating
            )
            self._player_repo.set_approval(
                conn, player_id, ApprovalStatus.APPROVED.value, tier.category, tier.base_price
            )
            player = self.get_player(conn, player_id)
        logger.info(f"Player approved: {player.name} -> category {tier.category} ({tier.label})")
        return player

    def reject_player(self, conn: sqlite3.Connection, player_id: str) -> Player:
        with transaction(conn):
            player = self.get_player(conn, player_id)
            if player.status != PlayerStatus.REGISTERED:
                raise InvalidSelection(f"{player.name} is already in the auction pool ({player.status})")
            self._player_repo.set_approval(conn, player_id, ApprovalStatus.REJECTED.value)
            player = self.get_player(conn, player_id)
        logger.info(f"Player rejected: {player.name}")
        return player

    def verify_payment(self, conn: sqlite3.Connection, player_id: str) -> Player:
        """Records the admin's verified flag; no payment processing happens here."""
        with transaction(conn):
            self.get_player(conn, player_id)
            self._player_repo.set_payment_status(conn, player_id, PaymentStatus.VERIFIED.value)
            player = self.get_player(conn, player_id)
        logger.info(f"Payment verified: {player.name}")
        return player
