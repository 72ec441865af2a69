"""
Database connection, initialization and transactions.
"""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from cricket_tournament import config

from .schema import all_schema_sql

logger = logging.getLogger(__name__)

_db_path: Path | None = None


def set_db_path(path: str | Path) -> None:
    """Set the database path. Call before first get_connection if not using default."""
    global _db_path
    _db_path = Path(path)


def get_db_path() -> Path:
    """Return the current database path."""
    if _db_path is not None:
        return _db_path
    return config.DB_PATH


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """
    Return a new SQLite connection in autocommit mode.
    Writes go through transaction(); close() is the caller's job.
    """
    path = Path(db_path) if db_path else get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), isolation_level=None, timeout=30)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    BEGIN IMMEDIATE ... COMMIT, rolled back on any exception.
    Nested use joins the outer transaction.
    """
    if conn.in_transaction:
        yield conn
        return
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")


def _ensure_auction_row(conn: sqlite3.Connection) -> None:
    now = datetime.now(timezone.utc).isoformat()
    conn.execute(
        "INSERT OR IGNORE INTO auction_state (id, status, bid_history, updated_at) VALUES ('auction', 'not_started', '[]', ?)",
        (now,),
    )


def init_db(db_path: str | Path | None = None) -> None:
    """Create or ensure all tables exist, plus the auction singleton row."""
    path = Path(db_path) if db_path else get_db_path()
    conn = get_connection(path)
    try:
        conn.executescript(all_schema_sql())
        with transaction(conn):
            _ensure_auction_row(conn)
        logger.info(f"Database ready at {path}")
    finally:
        conn.close()
