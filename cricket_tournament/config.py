"""
Runtime configuration read from environment variables.
Defaults match the Season 2 tournament format (8-player squads, 6 overs).
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _get_env(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def _default_db_path() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "tournament.db"


# ---------- Storage ----------
DB_PATH: Path = Path(_get_env("TOURNAMENT_DB_PATH") or _default_db_path())

# ---------- Logging ----------
LOG_LEVEL: str = _get_env("LOG_LEVEL", "INFO").upper()

# ---------- Admin auth ----------
ADMIN_USERNAME: str = _get_env("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD: str = _get_env("ADMIN_PASSWORD", "admin-dev-password")
JWT_SECRET_KEY: str = _get_env("JWT_SECRET_KEY", "tournament-dev-secret-change-in-production")
ACCESS_TOKEN_EXPIRE_MINUTES: int = _get_env_int("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 12)

# ---------- Tournament format ----------
DEFAULT_TEAM_BUDGET: int = _get_env_int("DEFAULT_TEAM_BUDGET", 25000)
DEFAULT_SQUAD_SIZE: int = _get_env_int("DEFAULT_SQUAD_SIZE", 8)
DEFAULT_OVERS_LIMIT: int = _get_env_int("DEFAULT_OVERS_LIMIT", 6)
GROUP_NAMES: list[str] = [g.strip() for g in _get_env("GROUP_NAMES", "A,B,C,D").split(",") if g.strip()]
GROUP_SIZE: int = _get_env_int("GROUP_SIZE", 3)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the process (idempotent)."""
    logging.basicConfig(
        level=getattr(logging, level or LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def validate_config() -> None:
    if DEFAULT_TEAM_BUDGET <= 0:
        raise RuntimeError("DEFAULT_TEAM_BUDGET must be positive")
    if DEFAULT_SQUAD_SIZE < 2:
        raise RuntimeError("DEFAULT_SQUAD_SIZE must allow at least two batters")
    if DEFAULT_OVERS_LIMIT <= 0:
        raise RuntimeError("DEFAULT_OVERS_LIMIT must be positive")
    if not GROUP_NAMES:
        raise RuntimeError("GROUP_NAMES must name at least one group")
    if GROUP_SIZE < 2:
        raise RuntimeError("GROUP_SIZE must be at least 2")
