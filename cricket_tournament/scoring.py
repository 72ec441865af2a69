"""
Tournament leaderboards: orange cap, purple cap and MVP.
Aggregates per-match stats rows into season totals; pure functions only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from cricket_tournament.models import PlayerMatchStats
from cricket_tournament.overs import balls_to_overs


# ---------- MVP weights ----------
MVP_RUN_POINTS = 1
MVP_FOUR_BONUS = 1
MVP_SIX_BONUS = 2
MVP_WICKET_POINTS = 20
MVP_CATCH_POINTS = 10
MVP_RUN_OUT_POINTS = 10

DEFAULT_LEADERBOARD_LIMIT = 10


@dataclass
class PlayerTotals:
    """Season totals for one player across every match and innings."""
    player_id: str
    runs: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    balls_bowled: int = 0
    runs_conceded: int = 0
    wickets: int = 0
    catches: int = 0
    run_outs: int = 0
    dismissals: int = 0
    match_ids: set[str] = field(default_factory=set)

    @property
    def matches(self) -> int:
        return len(self.match_ids)

    @property
    def strike_rate(self) -> float:
        return self.runs * 100 / self.balls_faced if self.balls_faced else 0.0

    @property
    def economy(self) -> float:
        return self.runs_conceded * 6 / self.balls_bowled if self.balls_bowled else 0.0

    @property
    def mvp_points(self) -> int:
        return (
            self.runs * MVP_RUN_POINTS
            + self.fours * MVP_FOUR_BONUS
            + self.sixes * MVP_SIX_BONUS
            + self.wickets * MVP_WICKET_POINTS
            + self.catches * MVP_CATCH_POINTS
            + self.run_outs * MVP_RUN_OUT_POINTS
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "matches": self.matches,
            "runs": self.runs,
            "balls_faced": self.balls_faced,
            "fours": self.fours,
            "sixes": self.sixes,
            "strike_rate": round(self.strike_rate, 2),
            "overs_bowled": balls_to_overs(self.balls_bowled),
            "runs_conceded": self.runs_conceded,
            "wickets": self.wickets,
            "economy": round(self.economy, 2),
            "catches": self.catches,
            "run_outs": self.run_outs,
            "mvp_points": self.mvp_points,
        }


def aggregate(stats: Iterable[PlayerMatchStats]) -> dict[str, PlayerTotals]:
    totals: dict[str, PlayerTotals] = {}
    for s in stats:
        t = totals.setdefault(s.player_id, PlayerTotals(player_id=s.player_id))
        t.match_ids.add(s.match_id)
        t.runs += s.runs_scored
        t.balls_faced += s.balls_faced
        t.fours += s.fours
        t.sixes += s.sixes
        t.balls_bowled += s.balls_bowled
        t.runs_conceded += s.runs_conceded
        t.wickets += s.wickets_taken
        t.catches += s.catches
        t.run_outs += s.run_outs
        t.dismissals += 1 if s.is_out else 0
    return totals


def orange_cap(totals: Iterable[PlayerTotals], limit: int = DEFAULT_LEADERBOARD_LIMIT) -> list[PlayerTotals]:
    """Most runs; ties broken by strike rate (higher first), then player id."""
    batters = [t for t in totals if t.balls_faced > 0 or t.runs > 0]
    batters.sort(key=lambda t: (-t.runs, -t.strike_rate, t.player_id))
    return batters[:limit]


def purple_cap(totals: Iterable[PlayerTotals], limit: int = DEFAULT_LEADERBOARD_LIMIT) -> list[PlayerTotals]:
    """Most wickets; ties broken by economy (lower first), then player id."""
    bowlers = [t for t in totals if t.balls_bowled > 0 or t.wickets > 0]
    bowlers.sort(key=lambda t: (-t.wickets, t.economy, t.player_id))
    return bowlers[:limit]


def mvp(totals: Iterable[PlayerTotals], limit: int = DEFAULT_LEADERBOARD_LIMIT) -> list[PlayerTotals]:
    """Weighted all-round points; ties broken by runs, then player id."""
    ranked = [t for t in totals if t.mvp_points > 0]
    ranked.sort(key=lambda t: (-t.mvp_points, -t.runs, t.player_id))
    return ranked[:limit]
