"""
Auction state machine: turn sequencing across categories, bid increments,
budget enforcement and the lost-gold re-auction round.

Every public method is one atomic transition on the auction singleton: it
takes the auction lock, opens a BEGIN IMMEDIATE transaction, validates, then
mutates. The returned AuctionState is the committed snapshot.
"""
from __future__ import annotations

import logging
import sqlite3
import time

from cricket_tournament import rules
from cricket_tournament.errors import (
    AuctionAlreadyStarted,
    AuctionNotActive,
    InsufficientBudget,
    InvalidCategory,
    NoBiddingTeam,
    NoBidsToUndo,
    NoEligiblePlayers,
    NoPlayerInAuction,
    PlayerAlreadyInAuction,
    PlayerNotFound,
    TeamAlreadyLeading,
    TeamNotFound,
)
from cricket_tournament.locks import AUCTION_KEY, entity_lock
from cricket_tournament.models import (
    ACTIVE_AUCTION_STATUSES,
    AuctionState,
    AuctionStatus,
    BidEntry,
    Player,
    PlayerStatus,
)
from cricket_tournament.persistence.db import transaction
from cricket_tournament.persistence.repositories import (
    AuctionStateRepository,
    PlayerRepository,
    TeamRepository,
)

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class AuctionService:
    """
    Domain logic for the player auction. Persistence is delegated to repositories.
    Eligible = approved + payment verified; selection is registration order.
    """

    def __init__(self) -> None:
        self._state_repo = AuctionStateRepository()
        self._player_repo = PlayerRepository()
        self._team_repo = TeamRepository()

    # ---------- Reads ----------

    def get_state(self, conn: sqlite3.Connection) -> AuctionState:
        return self._state_repo.get(conn)

    def current_player(self, conn: sqlite3.Connection, state: AuctionState | None = None) -> Player | None:
        state = state or self._state_repo.get(conn)
        if state.current_player_id is None:
            return None
        return self._player_repo.get(conn, state.current_player_id)

    # ---------- Guards ----------

    def _assert_active(self, state: AuctionState) -> None:
        if state.status not in ACTIVE_AUCTION_STATUSES:
            raise AuctionNotActive(f"Auction not in progress (status: {state.status})")

    def _live_player(self, conn: sqlite3.Connection, state: AuctionState) -> Player:
        if state.current_player_id is None or state.current_bid is None:
            raise NoPlayerInAuction("No player in auction")
        player = self._player_repo.get(conn, state.current_player_id)
        if player is None:
            raise PlayerNotFound(f"Player not found: {state.current_player_id}")
        return player

    @staticmethod
    def _validate_category(category: str | None) -> str:
        if not rules.is_valid_category(category):
            raise InvalidCategory(
                f"Invalid category {category!r}. Must be one of {', '.join(rules.CATEGORIES)}"
            )
        assert category is not None
        return category

    # ---------- Transitions ----------

    def start(self, conn: sqlite3.Connection, category: str) -> AuctionState:
        """not_started -> in_progress with the first eligible player of the category."""
        category = self._validate_category(category)
        with entity_lock(AUCTION_KEY), transaction(conn):
            state = self._state_repo.get(conn)
            if state.status != AuctionStatus.NOT_STARTED:
                raise AuctionAlreadyStarted(f"Auction already started (status: {state.status})")
            player = self._player_repo.first_eligible(conn, PlayerStatus.REGISTERED.value, category)
            if player is None:
                raise NoEligiblePlayers(f"No payment-verified players available in category {category}")
            state.current_category = category
            self._open(conn, state, player, AuctionStatus.IN_PROGRESS)
            logger.info(f"Auction started: category {category}, first up {player.name}")
            return self._state_repo.save(conn, state)

    def select_category(self, conn: sqlite3.Connection, category: str) -> AuctionState:
        category = self._validate_category(category)
        with entity_lock(AUCTION_KEY), transaction(conn):
            state = self._state_repo.get(conn)
            state.current_category = category
            return self._state_repo.save(conn, state)

    def next_player(self, conn: sqlite3.Connection, category: str | None = None) -> AuctionState:
        """
        Open the next player when nobody is under the hammer (category exhausted,
        or after stop). Falls back to the lost-gold pool like the advance cascade.
        """
        if category is not None:
            category = self._validate_category(category)
        with entity_lock(AUCTION_KEY), transaction(conn):
            state = self._state_repo.get(conn)
            if state.status in (AuctionStatus.NOT_STARTED, AuctionStatus.PAUSED):
                raise AuctionNotActive(f"Cannot open next player (status: {state.status})")
            if state.current_player_id is not None:
                raise PlayerAlreadyInAuction("A player is already in auction; sell or mark unsold first")
            selected = category or state.current_category or rules.CATEGORIES[0]
            state.current_category = selected
            player = self._player_repo.first_eligible(conn, PlayerStatus.REGISTERED.value, selected)
            if player is not None:
                self._open(conn, state, player, AuctionStatus.IN_PROGRESS)
                return self._state_repo.save(conn, state)
            lost_gold = self._player_repo.first_eligible(conn, PlayerStatus.LOST_GOLD.value)
            if lost_gold is not None:
                logger.info(f"Category {selected} exhausted; opening lost-gold round")
                self._open(conn, state, lost_gold, AuctionStatus.LOST_GOLD_ROUND)
                return self._state_repo.save(conn, state)
            raise NoEligiblePlayers(
                f"No payment-verified players available in category {selected}. Select a different category."
            )

    def place_bid(self, conn: sqlite3.Connection, team_id: str) -> AuctionState:
        with entity_lock(AUCTION_KEY), transaction(conn):
            state = self._state_repo.get(conn)
            self._assert_active(state)
            self._live_player(conn, state)
            team = self._team_repo.get(conn, team_id)
            if team is None:
                raise TeamNotFound(f"Team not found: {team_id}")
            if state.current_bidding_team_id == team_id:
                raise TeamAlreadyLeading(f"{team.name} already holds the highest bid")
            assert state.current_bid is not None
            new_bid = rules.next_bid(state.current_bid)
            if new_bid > team.remaining_budget:
                raise InsufficientBudget(
                    f"Insufficient budget: {team.name} has {team.remaining_budget}, bid would be {new_bid}"
                )
            state.bid_history.append(BidEntry(team_id=team_id, amount=new_bid, timestamp=_now_ms()))
            state.current_bid = new_bid
            state.current_bidding_team_id = team_id
            return self._state_repo.save(conn, state)

    def undo_bid(self, conn: sqlite3.Connection) -> AuctionState:
        """Drop the last bid; with no bids left the player reverts to base price."""
        with entity_lock(AUCTION_KEY), transaction(conn):
            state = self._state_repo.get(conn)
            self._assert_active(state)
            player = self._live_player(conn, state)
            if not state.bid_history:
                raise NoBidsToUndo("No bids to undo")
            state.bid_history.pop()
            if state.bid_history:
                previous = state.bid_history[-1]
                state.current_bid = previous.amount
                state.current_bidding_team_id = previous.team_id
            else:
                state.current_bid = self._opening_bid(player)
                state.current_bidding_team_id = None
            return self._state_repo.save(conn, state)

    def sell(self, conn: sqlite3.Connection) -> AuctionState:
        with entity_lock(AUCTION_KEY), transaction(conn):
            state = self._state_repo.get(conn)
            self._assert_active(state)
            player = self._live_player(conn, state)
            if state.current_bidding_team_id is None:
                raise NoBiddingTeam("No bidding team for the current player")
            team = self._team_repo.get(conn, state.current_bidding_team_id)
            if team is None:
                raise TeamNotFound(f"Team not found: {state.current_bidding_team_id}")
            price = state.current_bid
            assert price is not None
            if price > team.remaining_budget:
                raise InsufficientBudget(f"{team.name} cannot afford {price}")
            self._player_repo.mark_sold(conn, player.id, team.id, price)
            self._team_repo.debit(conn, team.id, price)
            logger.info(f"SOLD: {player.name} to {team.name} for {price} ({team.remaining_budget - price} left)")
            self._advance(conn, state)
            return self._state_repo.save(conn, state)

    def mark_unsold(self, conn: sqlite3.Connection) -> AuctionState:
        """First pass: player -> lost_gold. Lost-gold round: player -> unsold (final)."""
        with entity_lock(AUCTION_KEY), transaction(conn):
            state = self._state_repo.get(conn)
            self._assert_active(state)
            player = self._live_player(conn, state)
            if state.status == AuctionStatus.LOST_GOLD_ROUND:
                self._player_repo.set_status(conn, player.id, PlayerStatus.UNSOLD.value)
                logger.info(f"UNSOLD (final): {player.name}")
            else:
                self._player_repo.set_status(conn, player.id, PlayerStatus.LOST_GOLD.value)
                logger.info(f"UNSOLD: {player.name} moves to lost gold")
            self._advance(conn, state)
            return self._state_repo.save(conn, state)

    def pause(self, conn: sqlite3.Connection) -> AuctionState:
        with entity_lock(AUCTION_KEY), transaction(conn):
            state = self._state_repo.get(conn)
            self._assert_active(state)
            state.resume_status = state.status
            state.status = AuctionStatus.PAUSED.value
            logger.info("Auction paused")
            return self._state_repo.save(conn, state)

    def resume(self, conn: sqlite3.Connection) -> AuctionState:
        with entity_lock(AUCTION_KEY), transaction(conn):
            state = self._state_repo.get(conn)
            if state.status != AuctionStatus.PAUSED:
                raise AuctionNotActive(f"Auction is not paused (status: {state.status})")
            state.status = state.resume_status or AuctionStatus.IN_PROGRESS.value
            state.resume_status = None
            logger.info(f"Auction resumed ({state.status})")
            return self._state_repo.save(conn, state)

    def stop(self, conn: sqlite3.Connection) -> AuctionState:
        """End the auction; a live player goes back to the pool it was drawn from."""
        with entity_lock(AUCTION_KEY), transaction(conn):
            state = self._state_repo.get(conn)
            if state.status == AuctionStatus.NOT_STARTED:
                raise AuctionNotActive("Auction has not started")
            if state.current_player_id is not None:
                in_lost_gold = AuctionStatus.LOST_GOLD_ROUND.value in (state.status, state.resume_status)
                back_to = PlayerStatus.LOST_GOLD if in_lost_gold else PlayerStatus.REGISTERED
                self._player_repo.set_status(conn, state.current_player_id, back_to.value)
            self._complete(state)
            logger.info("Auction stopped")
            return self._state_repo.save(conn, state)

    def reset(self, conn: sqlite3.Connection) -> AuctionState:
        """Every player back to registered, every budget restored, state not_started."""
        with entity_lock(AUCTION_KEY), transaction(conn):
            self._player_repo.reset_all(conn)
            self._team_repo.reset_budgets(conn)
            state = self._state_repo.get(conn)
            self._complete(state)
            state.status = AuctionStatus.NOT_STARTED.value
            state.current_category = None
            logger.info("Auction reset")
            return self._state_repo.save(conn, state)

    # ---------- Cascade ----------

    @staticmethod
    def _opening_bid(player: Player) -> int:
        if player.base_points is not None:
            return player.base_points
        assert player.category is not None
        return rules.base_price(player.category)

    def _open(
        self,
        conn: sqlite3.Connection,
        state: AuctionState,
        player: Player,
        status: AuctionStatus,
    ) -> None:
        self._player_repo.set_status(conn, player.id, PlayerStatus.IN_AUCTION.value)
        state.status = status.value
        state.resume_status = None
        state.current_player_id = player.id
        state.current_bid = self._opening_bid(player)
        state.current_bidding_team_id = None
        state.bid_history = []
        if status == AuctionStatus.LOST_GOLD_ROUND:
            state.current_category = player.category

    @staticmethod
    def _complete(state: AuctionState) -> None:
        state.status = AuctionStatus.COMPLETED.value
        state.resume_status = None
        state.current_player_id = None
        state.current_bid = None
        state.current_bidding_team_id = None
        state.bid_history = []

    def _advance(self, conn: sqlite3.Connection, state: AuctionState) -> None:
        """
        Primary round: next registered player of the current category, else the
        lost-gold pool (any category), else completed.
        Lost-gold round: next lost-gold player, else completed.
        """
        if state.status != AuctionStatus.LOST_GOLD_ROUND:
            player = self._player_repo.first_eligible(
                conn, PlayerStatus.REGISTERED.value, state.current_category
            )
            if player is not None:
                self._open(conn, state, player, AuctionStatus.IN_PROGRESS)
                return
            logger.info(f"Category {state.current_category} exhausted")
        player = self._player_repo.first_eligible(conn, PlayerStatus.LOST_GOLD.value)
        if player is not None:
            self._open(conn, state, player, AuctionStatus.LOST_GOLD_ROUND)
            return
        self._complete(state)
        logger.info("Auction completed: no eligible players left")
