"""
Overs notation helpers.
Overs are stored as legal-ball counts everywhere; "O.B" strings are only
produced for snapshots.
"""
from __future__ import annotations

from cricket_tournament.rules import BALLS_PER_OVER


def balls_to_overs(balls: int) -> str:
    """118 -> "19.4". The ball component is always 0-5."""
    if balls < 0:
        raise ValueError(f"Balls cannot be negative: {balls}")
    return f"{balls // BALLS_PER_OVER}.{balls % BALLS_PER_OVER}"


def overs_as_float(balls: int) -> float:
    """Overs for rate calculations: full overs + balls/6."""
    if balls <= 0:
        return 0.0
    return balls / BALLS_PER_OVER


def run_rate(runs: int, balls: int) -> float:
    overs = overs_as_float(balls)
    if overs == 0.0:
        return 0.0
    return runs / overs


def format_nrr(value: float) -> str:
    return f"{value:.3f}"
