"""
Ball-by-ball match engine.

apply_delivery() is a pure transition: it takes a live Match and one Delivery
and returns the next Match, the BallEvent to append and the per-player stat
increments. Nothing here touches the database; MatchService persists the
outcome in one transaction.

Stat increments are derived from the BallEvent alone (stat_deltas), so the
same function drives live scoring and replay_stats() recomputation.
"""
from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from cricket_tournament import rules
from cricket_tournament.models import (
    BallEvent,
    ExtraType,
    Match,
    MatchResult,
    MatchStatus,
    NON_BOWLER_WICKETS,
    PlayerMatchStats,
    WicketType,
)
from cricket_tournament.errors import (
    BatsmenNotSet,
    BowlerNotSet,
    InvalidDelivery,
    LastManStanding,
    MatchNotLive,
)

_EXTRA_TYPES = {e.value for e in ExtraType}
_WICKET_TYPES = {w.value for w in WicketType}


@dataclass(frozen=True)
class Delivery:
    """What the scorer reports for one ball."""
    runs: int = 0
    extra_type: str | None = None
    is_wicket: bool = False
    wicket_type: str | None = None
    dismissed_player_id: str | None = None  # defaults to the striker
    fielder_id: str | None = None


@dataclass
class DeliveryOutcome:
    match: Match
    ball: BallEvent
    stat_deltas: list[PlayerMatchStats] = field(default_factory=list)
    innings_completed: bool = False
    match_completed: bool = False


def is_power_over(match: Match, innings: int, over_number: int) -> bool:
    po = match.power_over
    return po is not None and po.innings == innings and po.over_number == over_number


def validate_delivery(match: Match, delivery: Delivery) -> None:
    """Raise the matching domain error if the delivery cannot be recorded."""
    if match.status != MatchStatus.LIVE:
        raise MatchNotLive(f"Match {match.match_number} is not live (status: {match.status})")
    if not match.striker_id:
        raise BatsmenNotSet("Striker must be selected first")
    _, wickets, _ = match.innings_totals()
    if not match.non_striker_id and wickets < rules.lone_batter_wickets(match.squad_size):
        raise BatsmenNotSet("Both batsmen must be selected")
    if not match.current_bowler_id:
        raise BowlerNotSet("Bowler must be selected first")
    if not 0 <= delivery.runs <= rules.MAX_RUNS_PER_BALL:
        raise InvalidDelivery(f"Runs must be between 0 and {rules.MAX_RUNS_PER_BALL}: {delivery.runs}")
    if delivery.extra_type is not None and delivery.extra_type not in _EXTRA_TYPES:
        raise InvalidDelivery(f"Unknown extra type: {delivery.extra_type}")
    if not delivery.is_wicket:
        return
    if delivery.wicket_type is not None and delivery.wicket_type not in _WICKET_TYPES:
        raise InvalidDelivery(f"Unknown wicket type: {delivery.wicket_type}")
    if wickets >= rules.max_wickets(match.squad_size):
        raise LastManStanding("Cannot take more wickets - last man standing")
    dismissed = delivery.dismissed_player_id or match.striker_id
    if dismissed not in (match.striker_id, match.non_striker_id):
        raise InvalidDelivery(f"Dismissed player {dismissed} is not at the crease")


def apply_delivery(
    match: Match,
    delivery: Delivery,
    sequence: int,
    now: datetime | None = None,
) -> DeliveryOutcome:
    """
    Apply one delivery to a live match. The input match is not mutated.
    Raises a TournamentError subclass (and changes nothing) if the delivery is rejected.
    """
    validate_delivery(match, delivery)
    now = now or datetime.now(timezone.utc)
    nxt = copy.deepcopy(match)
    innings = match.current_innings
    score, wickets, balls = match.innings_totals()
    striker, non_striker, bowler = match.striker_id, match.non_striker_id, match.current_bowler_id
    assert striker is not None and bowler is not None

    legal = delivery.extra_type is None
    over_number = balls // rules.BALLS_PER_OVER + 1
    balls_in_over = balls % rules.BALLS_PER_OVER
    power = is_power_over(match, innings, over_number)

    # Raw runs, then the power-over multiplier, then the extra penalty
    effective = delivery.runs * rules.POWER_OVER_MULTIPLIER if power else delivery.runs
    extras = 0 if legal else rules.EXTRA_PENALTY_RUNS
    new_score = score + effective + extras
    new_wickets = wickets
    dismissed: str | None = None
    if delivery.is_wicket:
        new_wickets += 1
        dismissed = delivery.dismissed_player_id or striker
        if power:
            new_score = max(0, new_score - rules.POWER_OVER_WICKET_PENALTY)
    new_balls = balls + 1 if legal else balls

    ball = BallEvent(
        id=str(uuid.uuid4()),
        match_id=match.id,
        innings=innings,
        sequence=sequence,
        over_number=over_number,
        ball_number=balls_in_over + 1 if legal else balls_in_over,
        batsman_id=striker,
        bowler_id=bowler,
        runs=delivery.runs,
        effective_runs=effective,
        extras=extras,
        extra_type=delivery.extra_type,
        is_wicket=delivery.is_wicket,
        wicket_type=delivery.wicket_type if delivery.is_wicket else None,
        dismissed_player_id=dismissed,
        fielder_id=delivery.fielder_id if delivery.is_wicket else None,
        is_power_over=power,
        team_runs=new_score - score,
        created_at=now,
    )

    nxt.set_innings_totals(innings, new_score, new_wickets, new_balls)
    end_of_over = legal and new_balls % rules.BALLS_PER_OVER == 0
    cap = rules.max_wickets(match.squad_size)

    if delivery.is_wicket:
        survivor = non_striker if dismissed == striker else striker
        if new_wickets >= cap:
            nxt.striker_id, nxt.non_striker_id = survivor, None
        elif dismissed == striker:
            nxt.striker_id = None
        else:
            nxt.non_striker_id = None
    elif non_striker is not None and new_wickets < cap:
        rotate = legal and delivery.runs % 2 == 1
        if end_of_over:
            rotate = not rotate
        if rotate:
            nxt.striker_id, nxt.non_striker_id = non_striker, striker

    if end_of_over:
        nxt.current_bowler_id = None

    innings_completed = new_balls >= match.overs_limit * rules.BALLS_PER_OVER
    match_completed = False
    if innings == 1:
        if innings_completed:
            nxt.current_innings = 2
            nxt.striker_id = nxt.non_striker_id = nxt.current_bowler_id = None
    else:
        first_score, _, _ = match.innings_totals(1)
        chasing, defending = match.batting_team_id(2), match.batting_team_id(1)
        if new_score >= first_score + 1:
            _complete(nxt, chasing, MatchResult.WIN)
            match_completed = True
        elif innings_completed:
            if new_score == first_score:
                _complete(nxt, None, MatchResult.TIE)
            else:
                _complete(nxt, defending, MatchResult.WIN)
            match_completed = True
        innings_completed = innings_completed or match_completed

    return DeliveryOutcome(
        match=nxt,
        ball=ball,
        stat_deltas=stat_deltas(ball),
        innings_completed=innings_completed,
        match_completed=match_completed,
    )


def _complete(match: Match, winner_id: str | None, result: MatchResult) -> None:
    match.status = MatchStatus.COMPLETED.value
    match.winner_id = winner_id
    match.result = result.value


# ---------- Stats ----------


def stat_deltas(ball: BallEvent) -> list[PlayerMatchStats]:
    """Per-player increments produced by one ball (batter, bowler, dismissed, fielder)."""
    out: dict[str, PlayerMatchStats] = {}

    def row(player_id: str) -> PlayerMatchStats:
        if player_id not in out:
            out[player_id] = PlayerMatchStats(match_id=ball.match_id, player_id=player_id, innings=ball.innings)
        return out[player_id]

    bowler = row(ball.bowler_id)
    if ball.is_legal:
        bat = row(ball.batsman_id)
        bat.runs_scored += ball.runs
        bat.balls_faced += 1
        bat.fours += 1 if ball.runs == 4 else 0
        bat.sixes += 1 if ball.runs == 6 else 0
        bowler.balls_bowled += 1
        bowler.runs_conceded += ball.effective_runs
        if ball.is_wicket and ball.wicket_type not in NON_BOWLER_WICKETS:
            bowler.wickets_taken += 1
    else:
        bowler.runs_conceded += ball.effective_runs + ball.extras

    if ball.is_wicket and ball.dismissed_player_id:
        out_row = row(ball.dismissed_player_id)
        out_row.is_out = True
        out_row.dismissal_type = ball.wicket_type
        out_row.dismissed_by = ball.bowler_id
        if ball.fielder_id:
            if ball.wicket_type == WicketType.CAUGHT:
                row(ball.fielder_id).catches += 1
            elif ball.wicket_type == WicketType.RUN_OUT:
                row(ball.fielder_id).run_outs += 1
    return list(out.values())


def accumulate(target: PlayerMatchStats, delta: PlayerMatchStats) -> None:
    target.runs_scored += delta.runs_scored
    target.balls_faced += delta.balls_faced
    target.fours += delta.fours
    target.sixes += delta.sixes
    target.balls_bowled += delta.balls_bowled
    target.runs_conceded += delta.runs_conceded
    target.wickets_taken += delta.wickets_taken
    target.catches += delta.catches
    target.run_outs += delta.run_outs
    if delta.is_out:
        target.is_out = True
        target.dismissal_type = delta.dismissal_type
        target.dismissed_by = delta.dismissed_by


def replay_stats(balls: Iterable[BallEvent]) -> dict[tuple[str, int], PlayerMatchStats]:
    """Rebuild every (player, innings) stats row from the ball log."""
    rows: dict[tuple[str, int], PlayerMatchStats] = {}
    for ball in sorted(balls, key=lambda b: b.sequence):
        for delta in stat_deltas(ball):
            key = (delta.player_id, delta.innings)
            if key not in rows:
                rows[key] = PlayerMatchStats(match_id=delta.match_id, player_id=delta.player_id, innings=delta.innings)
            accumulate(rows[key], delta)
    return rows


def replay_totals(balls: Iterable[BallEvent]) -> dict[int, tuple[int, int, int]]:
    """(score, wickets, legal balls) per innings, summed from team_runs."""
    totals: dict[int, tuple[int, int, int]] = {}
    for ball in balls:
        score, wickets, legal = totals.get(ball.innings, (0, 0, 0))
        totals[ball.innings] = (
            score + ball.team_runs,
            wickets + (1 if ball.is_wicket else 0),
            legal + (1 if ball.is_legal else 0),
        )
    return totals
