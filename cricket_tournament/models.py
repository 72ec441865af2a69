"""
Data models for the tournament backend.
Domain objects only; no persistence or API logic.

Auction and match state are single rows mutated one transition at a time;
BallEvent is the append-only audit log the derived stats are checked against.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from cricket_tournament.overs import balls_to_overs, format_nrr


# ---------- Player lifecycle ----------
class PlayerStatus(str, Enum):
    """registered -> in_auction -> sold | unsold | lost_gold; lost_gold -> in_auction again."""
    REGISTERED = "registered"
    IN_AUCTION = "in_auction"
    SOLD = "sold"
    UNSOLD = "unsold"  # terminal
    LOST_GOLD = "lost_gold"  # waiting for the second pass


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"


class PlayerRole(str, Enum):
    BATSMAN = "Batsman"
    BOWLER = "Bowler"
    ALL_ROUNDER = "All-rounder"


# ---------- Auction status (state machine) ----------
class AuctionStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    LOST_GOLD_ROUND = "lost_gold_round"
    COMPLETED = "completed"


ACTIVE_AUCTION_STATUSES = frozenset({AuctionStatus.IN_PROGRESS.value, AuctionStatus.LOST_GOLD_ROUND.value})


# ---------- Match ----------
class MatchStatus(str, Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    COMPLETED = "completed"


class MatchStage(str, Enum):
    GROUP = "group"
    SEMIFINAL = "semifinal"
    FINAL = "final"


class MatchResult(str, Enum):
    WIN = "win"
    TIE = "tie"


class TossDecision(str, Enum):
    BAT = "bat"
    BOWL = "bowl"


class ExtraType(str, Enum):
    WIDE = "wide"
    NO_BALL = "no_ball"


class WicketType(str, Enum):
    BOWLED = "bowled"
    CAUGHT = "caught"
    LBW = "lbw"
    RUN_OUT = "run_out"
    STUMPED = "stumped"
    HIT_WICKET = "hit_wicket"


# Dismissals the bowler is not credited with
NON_BOWLER_WICKETS = frozenset({WicketType.RUN_OUT.value})


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt is not None else None


# ---------- Team ----------
@dataclass
class Team:
    """
    A franchise taking part in the auction and the tournament.
    remaining_budget starts equal to budget and only decreases on a sale
    (reset is the one operation that restores it).
    """
    id: str
    name: str
    short_name: str
    primary_color: str
    secondary_color: str
    budget: int
    remaining_budget: int
    created_at: datetime
    logo_url: str | None = None
    group_name: str | None = None
    captain_id: str | None = None
    vice_captain_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "short_name": self.short_name,
            "primary_color": self.primary_color,
            "secondary_color": self.secondary_color,
            "logo_url": self.logo_url,
            "budget": self.budget,
            "remaining_budget": self.remaining_budget,
            "group_name": self.group_name,
            "captain_id": self.captain_id,
            "vice_captain_id": self.vice_captain_id,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Player ----------
@dataclass
class Player:
    """
    A registered player. category/base_points are set once at approval time.
    team_id and sold_price are only set when status is sold.
    """
    id: str
    name: str
    mobile: str
    address: str
    role: str  # PlayerRole value
    batting_rating: int
    bowling_rating: int
    fielding_rating: int
    photo_url: str
    status: str  # PlayerStatus value
    approval_status: str  # ApprovalStatus value
    payment_status: str  # PaymentStatus value
    created_at: datetime
    email: str | None = None
    category: str | None = None
    base_points: int | None = None
    team_id: str | None = None
    sold_price: int | None = None
    is_locked: bool = False

    @property
    def rating_total(self) -> int:
        return self.batting_rating + self.bowling_rating + self.fielding_rating

    @property
    def is_auction_eligible(self) -> bool:
        return (
            self.approval_status == ApprovalStatus.APPROVED
            and self.payment_status == PaymentStatus.VERIFIED
            and self.category is not None
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "mobile": self.mobile,
            "email": self.email,
            "address": self.address,
            "role": self.role,
            "batting_rating": self.batting_rating,
            "bowling_rating": self.bowling_rating,
            "fielding_rating": self.fielding_rating,
            "photo_url": self.photo_url,
            "category": self.category,
            "base_points": self.base_points,
            "status": self.status,
            "approval_status": self.approval_status,
            "payment_status": self.payment_status,
            "team_id": self.team_id,
            "sold_price": self.sold_price,
            "is_locked": self.is_locked,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Auction ----------
@dataclass(frozen=True)
class BidEntry:
    team_id: str
    amount: int
    timestamp: int  # epoch milliseconds

    def to_dict(self) -> dict[str, Any]:
        return {"team_id": self.team_id, "amount": self.amount, "timestamp": self.timestamp}


@dataclass
class AuctionState:
    """
    The auction singleton. current_bid is set iff current_player_id is set;
    the last bid_history entry always belongs to current_bidding_team_id.
    bid_history only covers the player currently under the hammer.
    """
    status: str  # AuctionStatus value
    current_category: str | None = None
    current_player_id: str | None = None
    current_bid: int | None = None
    current_bidding_team_id: str | None = None
    bid_history: list[BidEntry] = field(default_factory=list)
    resume_status: str | None = None  # status to restore on resume
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "current_category": self.current_category,
            "current_player_id": self.current_player_id,
            "current_bid": self.current_bid,
            "current_bidding_team_id": self.current_bidding_team_id,
            "bid_history": [b.to_dict() for b in self.bid_history],
            "updated_at": _iso(self.updated_at),
        }


# ---------- Match ----------
@dataclass(frozen=True)
class PowerOver:
    """Admin-designated over (1-based) in which runs double and wickets cost runs."""
    over_number: int
    innings: int

    def to_dict(self) -> dict[str, Any]:
        return {"active": True, "over_number": self.over_number, "innings": self.innings}


@dataclass
class Match:
    """
    A fixture between two teams, scored ball by ball while live.
    Per-team overs are kept as legal-ball counts; to_dict renders "O.B".
    batting_first_id is fixed by the toss when the match starts.
    """
    id: str
    match_number: int
    team1_id: str
    team2_id: str
    status: str  # MatchStatus value
    stage: str  # MatchStage value
    created_at: datetime
    squad_size: int
    overs_limit: int
    group_name: str | None = None
    toss_winner_id: str | None = None
    toss_decision: str | None = None
    batting_first_id: str | None = None
    winner_id: str | None = None
    result: str | None = None  # MatchResult value
    team1_score: int = 0
    team1_wickets: int = 0
    team1_balls: int = 0
    team2_score: int = 0
    team2_wickets: int = 0
    team2_balls: int = 0
    current_innings: int = 1
    striker_id: str | None = None
    non_striker_id: str | None = None
    current_bowler_id: str | None = None
    batting_order: dict[int, list[str]] = field(default_factory=lambda: {1: [], 2: []})
    bowling_order: dict[int, list[str]] = field(default_factory=lambda: {1: [], 2: []})
    power_over: PowerOver | None = None

    # ---- innings helpers ----
    def batting_team_id(self, innings: int | None = None) -> str:
        inn = innings or self.current_innings
        first = self.batting_first_id or self.team1_id
        second = self.team2_id if first == self.team1_id else self.team1_id
        return first if inn == 1 else second

    def bowling_team_id(self, innings: int | None = None) -> str:
        batting = self.batting_team_id(innings)
        return self.team2_id if batting == self.team1_id else self.team1_id

    def _side(self, team_id: str) -> str:
        return "team1" if team_id == self.team1_id else "team2"

    def innings_totals(self, innings: int | None = None) -> tuple[int, int, int]:
        """(score, wickets, legal balls) of the side batting in the given innings."""
        side = self._side(self.batting_team_id(innings))
        return (
            getattr(self, f"{side}_score"),
            getattr(self, f"{side}_wickets"),
            getattr(self, f"{side}_balls"),
        )

    def set_innings_totals(self, innings: int, score: int, wickets: int, balls: int) -> None:
        side = self._side(self.batting_team_id(innings))
        setattr(self, f"{side}_score", score)
        setattr(self, f"{side}_wickets", wickets)
        setattr(self, f"{side}_balls", balls)

    def team_totals(self, team_id: str) -> tuple[int, int, int]:
        side = self._side(team_id)
        return (
            getattr(self, f"{side}_score"),
            getattr(self, f"{side}_wickets"),
            getattr(self, f"{side}_balls"),
        )

    @property
    def team1_overs(self) -> str:
        return balls_to_overs(self.team1_balls)

    @property
    def team2_overs(self) -> str:
        return balls_to_overs(self.team2_balls)

    @property
    def target(self) -> int | None:
        """Runs the side batting second needs; None until the first innings is over."""
        if self.current_innings < 2:
            return None
        score, _, _ = self.innings_totals(1)
        return score + 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "match_number": self.match_number,
            "team1_id": self.team1_id,
            "team2_id": self.team2_id,
            "status": self.status,
            "stage": self.stage,
            "group_name": self.group_name,
            "toss_winner_id": self.toss_winner_id,
            "toss_decision": self.toss_decision,
            "batting_first_id": self.batting_first_id,
            "winner_id": self.winner_id,
            "result": self.result,
            "team1_score": self.team1_score,
            "team1_wickets": self.team1_wickets,
            "team1_overs": self.team1_overs,
            "team2_score": self.team2_score,
            "team2_wickets": self.team2_wickets,
            "team2_overs": self.team2_overs,
            "current_innings": self.current_innings,
            "target": self.target,
            "striker_id": self.striker_id,
            "non_striker_id": self.non_striker_id,
            "current_bowler_id": self.current_bowler_id,
            "innings1_batting_order": list(self.batting_order.get(1, [])),
            "innings2_batting_order": list(self.batting_order.get(2, [])),
            "innings1_bowling_order": list(self.bowling_order.get(1, [])),
            "innings2_bowling_order": list(self.bowling_order.get(2, [])),
            "power_over": self.power_over.to_dict() if self.power_over else {"active": False},
            "squad_size": self.squad_size,
            "overs_limit": self.overs_limit,
            "created_at": self.created_at.isoformat(),
        }


# ---------- BallEvent ----------
@dataclass(frozen=True)
class BallEvent:
    """
    One delivery attempt. Never mutated after creation.
    team_runs is the signed change to the batting total (power-over wicket
    penalty included), so summing it over an innings reproduces the score.
    """
    id: str
    match_id: str
    innings: int
    sequence: int
    over_number: int  # 1-based
    ball_number: int  # legal balls in the over after this delivery
    batsman_id: str
    bowler_id: str
    runs: int  # off the bat, before any multiplier
    effective_runs: int  # after the power-over multiplier
    extras: int
    extra_type: str | None
    is_wicket: bool
    wicket_type: str | None
    dismissed_player_id: str | None
    fielder_id: str | None
    is_power_over: bool
    team_runs: int
    created_at: datetime

    @property
    def is_legal(self) -> bool:
        return self.extra_type is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "match_id": self.match_id,
            "innings": self.innings,
            "sequence": self.sequence,
            "over_number": self.over_number,
            "ball_number": self.ball_number,
            "batsman_id": self.batsman_id,
            "bowler_id": self.bowler_id,
            "runs": self.runs,
            "effective_runs": self.effective_runs,
            "extras": self.extras,
            "extra_type": self.extra_type,
            "is_wicket": self.is_wicket,
            "wicket_type": self.wicket_type,
            "dismissed_player_id": self.dismissed_player_id,
            "fielder_id": self.fielder_id,
            "is_power_over": self.is_power_over,
            "team_runs": self.team_runs,
            "created_at": self.created_at.isoformat(),
        }


# ---------- PlayerMatchStats ----------
@dataclass
class PlayerMatchStats:
    """Batting, bowling and fielding figures for one player in one innings of a match."""
    match_id: str
    player_id: str
    innings: int
    batting_position: int | None = None
    runs_scored: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    balls_bowled: int = 0
    runs_conceded: int = 0
    wickets_taken: int = 0
    catches: int = 0
    run_outs: int = 0
    is_out: bool = False
    dismissal_type: str | None = None
    dismissed_by: str | None = None

    @property
    def overs_bowled(self) -> str:
        return balls_to_overs(self.balls_bowled)

    @property
    def strike_rate(self) -> float:
        return round(self.runs_scored * 100 / self.balls_faced, 2) if self.balls_faced else 0.0

    @property
    def economy(self) -> float:
        return round(self.runs_conceded * 6 / self.balls_bowled, 2) if self.balls_bowled else 0.0

    def counters(self) -> tuple[Any, ...]:
        """Everything derived from the ball log (batting_position is not)."""
        return (
            self.runs_scored, self.balls_faced, self.fours, self.sixes,
            self.balls_bowled, self.runs_conceded, self.wickets_taken,
            self.catches, self.run_outs, self.is_out, self.dismissal_type,
            self.dismissed_by,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_id": self.match_id,
            "player_id": self.player_id,
            "innings": self.innings,
            "batting_position": self.batting_position,
            "runs_scored": self.runs_scored,
            "balls_faced": self.balls_faced,
            "fours": self.fours,
            "sixes": self.sixes,
            "strike_rate": self.strike_rate,
            "overs_bowled": self.overs_bowled,
            "runs_conceded": self.runs_conceded,
            "wickets_taken": self.wickets_taken,
            "economy": self.economy,
            "catches": self.catches,
            "run_outs": self.run_outs,
            "is_out": self.is_out,
            "dismissal_type": self.dismissal_type,
            "dismissed_by": self.dismissed_by,
        }


# ---------- Points table ----------
@dataclass
class PointsTableRow:
    """Aggregated standings for one team. Overs for/against kept as balls."""
    team_id: str
    played: int = 0
    won: int = 0
    lost: int = 0
    tied: int = 0
    points: int = 0
    runs_for: int = 0
    balls_for: int = 0
    runs_against: int = 0
    balls_against: int = 0

    def to_dict(self, nrr: float | None = None) -> dict[str, Any]:
        d: dict[str, Any] = {
            "team_id": self.team_id,
            "played": self.played,
            "won": self.won,
            "lost": self.lost,
            "tied": self.tied,
            "points": self.points,
            "runs_for": self.runs_for,
            "overs_for": balls_to_overs(self.balls_for),
            "runs_against": self.runs_against,
            "overs_against": balls_to_overs(self.balls_against),
        }
        if nrr is not None:
            d["nrr"] = format_nrr(nrr)
        return d
