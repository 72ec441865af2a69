"""
Tournament rule tables: player categories, bid increments, match points.
Rules live here as data so the auction and match state machines never
hard-code a price or threshold.
"""
from __future__ import annotations

from dataclasses import dataclass


# ---------- Player categories (price tiers) ----------
@dataclass(frozen=True)
class CategoryTier:
    """One price band. min_rating_sum is inclusive; tiers are checked top-down."""
    category: str
    base_price: int
    min_rating_sum: int
    label: str


CATEGORY_TIERS: tuple[CategoryTier, ...] = (
    CategoryTier("3000", 3000, 24, "Jhakaas Superstars"),
    CategoryTier("2500", 2500, 18, "Solid Performers"),
    CategoryTier("2000", 2000, 12, "Promising Talent"),
    CategoryTier("1500", 1500, 0, "Hidden Gems"),
)

CATEGORIES: tuple[str, ...] = tuple(t.category for t in CATEGORY_TIERS)

RATING_MIN = 1
RATING_MAX = 10


def is_valid_category(category: str | None) -> bool:
    return category in CATEGORIES


def tier_for(category: str) -> CategoryTier:
    for tier in CATEGORY_TIERS:
        if tier.category == category:
            return tier
    raise KeyError(category)


def base_price(category: str) -> int:
    """Opening bid for a category."""
    return tier_for(category).base_price


def category_for_ratings(batting: int, bowling: int, fielding: int) -> CategoryTier:
    """Place a player in a tier from the sum of their three ratings (max 30)."""
    total = batting + bowling + fielding
    for tier in CATEGORY_TIERS:
        if total >= tier.min_rating_sum:
            return tier
    return CATEGORY_TIERS[-1]


# ---------- Bid increments ----------
# (upper_bound, increment): the first row whose upper bound is above the current
# bid applies. None = no upper bound.
BID_INCREMENT_STEPS: tuple[tuple[int | None, int], ...] = (
    (4000, 100),
    (None, 200),
)


def bid_increment(current_bid: int) -> int:
    for upper, step in BID_INCREMENT_STEPS:
        if upper is None or current_bid < upper:
            return step
    raise ValueError("BID_INCREMENT_STEPS must end with an unbounded row")


def next_bid(current_bid: int) -> int:
    return current_bid + bid_increment(current_bid)


# ---------- Match format ----------
BALLS_PER_OVER = 6
MAX_RUNS_PER_BALL = 6
EXTRA_PENALTY_RUNS = 1  # wide / no-ball

POWER_OVER_MULTIPLIER = 2
POWER_OVER_WICKET_PENALTY = 5


def max_wickets(squad_size: int) -> int:
    """Wickets that leave exactly one batter (last man standing)."""
    return squad_size - 1


def lone_batter_wickets(squad_size: int) -> int:
    """From this many wickets on a ball may be bowled without a non-striker."""
    return squad_size - 2


# ---------- Points table ----------
WIN_POINTS = 3
TIE_POINTS = 1
LOSS_POINTS = 0
