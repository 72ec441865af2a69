"""
Persistence layer for tournament data.
No business logic; only read/write interfaces.
"""
from .db import get_connection, init_db, set_db_path, transaction
from .repositories import (
    TeamRepository,
    PlayerRepository,
    AuctionStateRepository,
    MatchRepository,
    BallEventRepository,
    PlayerMatchStatsRepository,
    PointsTableRepository,
)

__all__ = [
    "get_connection",
    "init_db",
    "set_db_path",
    "transaction",
    "TeamRepository",
    "PlayerRepository",
    "AuctionStateRepository",
    "MatchRepository",
    "BallEventRepository",
    "PlayerMatchStatsRepository",
    "PointsTableRepository",
]
