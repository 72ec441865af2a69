"""
Tests for the pure ball-by-ball engine: ball accounting, extras, power over,
strike rotation, wickets, innings and match completion.
No database; matches are built in memory.
"""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from cricket_tournament.errors import (
    BatsmenNotSet,
    BowlerNotSet,
    InvalidDelivery,
    LastManStanding,
    MatchNotLive,
)
from cricket_tournament.live_match_engine import (
    Delivery,
    apply_delivery,
    replay_stats,
    replay_totals,
)
from cricket_tournament.models import Match, PowerOver
from cricket_tournament.overs import balls_to_overs


def _match(**overrides) -> Match:
    """Live match, team A batting first, a1/a2 at the crease, b1 bowling."""
    m = Match(
        id="m1",
        match_number=1,
        team1_id="A",
        team2_id="B",
        status="live",
        stage="group",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        squad_size=8,
        overs_limit=6,
        batting_first_id="A",
        striker_id="a1",
        non_striker_id="a2",
        current_bowler_id="b1",
    )
    for key, value in overrides.items():
        setattr(m, key, value)
    return m


class _Scorer:
    """Feeds deliveries through the engine, re-selecting a bowler after each over."""

    def __init__(self, match: Match) -> None:
        self.match = match
        self.balls = []
        self.outcomes = []

    def ball(self, **kw):
        if self.match.current_bowler_id is None:
            self.match.current_bowler_id = "b2" if len(self.balls) // 6 % 2 else "b1"
        out = apply_delivery(self.match, Delivery(**kw), sequence=len(self.balls) + 1)
        self.match = out.match
        self.balls.append(out.ball)
        self.outcomes.append(out)
        return out


# ---------- Ball accounting ----------


def test_legal_ball_advances_counter():
    out = apply_delivery(_match(), Delivery(runs=2), sequence=1)
    assert out.match.team1_score == 2
    assert out.match.team1_overs == "0.1"
    assert out.ball.over_number == 1
    assert out.ball.ball_number == 1


@pytest.mark.parametrize("n", [0, 1, 5, 6, 7, 11, 12, 35])
def test_overs_string_after_n_legal_balls(n):
    s = _Scorer(_match())
    for _ in range(n):
        s.ball(runs=0)
    assert s.match.team1_overs == f"{n // 6}.{n % 6}"
    assert s.match.team1_overs == balls_to_overs(n)


def test_input_match_not_mutated():
    m = _match()
    apply_delivery(m, Delivery(runs=4), sequence=1)
    assert m.team1_score == 0
    assert m.team1_balls == 0


# ---------- Extras ----------


@pytest.mark.parametrize("extra", ["wide", "no_ball"])
def test_extra_adds_one_and_is_not_a_legal_ball(extra):
    out = apply_delivery(_match(), Delivery(runs=2, extra_type=extra), sequence=1)
    assert out.match.team1_score == 3
    assert out.match.team1_balls == 0
    assert out.ball.extras == 1
    assert out.ball.ball_number == 0
    deltas = {d.player_id: d for d in out.stat_deltas}
    assert "a1" not in deltas  # batter's ball count untouched
    assert deltas["b1"].runs_conceded == 3
    assert deltas["b1"].balls_bowled == 0


def test_extra_does_not_rotate_strike():
    out = apply_delivery(_match(), Delivery(runs=1, extra_type="wide"), sequence=1)
    assert out.match.striker_id == "a1"


# ---------- Power over ----------


def test_power_over_doubles_runs():
    m = _match(power_over=PowerOver(over_number=1, innings=1))
    out = apply_delivery(m, Delivery(runs=4), sequence=1)
    assert out.match.team1_score == 8
    assert out.ball.is_power_over
    assert out.ball.effective_runs == 8
    bat = next(d for d in out.stat_deltas if d.player_id == "a1")
    assert bat.runs_scored == 4  # batter keeps actual runs


def test_power_over_wicket_costs_five():
    m = _match(team1_score=20, power_over=PowerOver(over_number=1, innings=1))
    out = apply_delivery(m, Delivery(runs=0, is_wicket=True, wicket_type="bowled"), sequence=1)
    assert out.match.team1_score == 15
    assert out.match.team1_wickets == 1
    assert out.ball.team_runs == -5


def test_power_over_wicket_penalty_floored_at_zero():
    m = _match(team1_score=3, power_over=PowerOver(over_number=1, innings=1))
    out = apply_delivery(m, Delivery(runs=0, is_wicket=True, wicket_type="caught"), sequence=1)
    assert out.match.team1_score == 0


def test_power_over_penalty_applied_after_runs():
    m = _match(team1_score=2, power_over=PowerOver(over_number=1, innings=1))
    out = apply_delivery(m, Delivery(runs=2, is_wicket=True, wicket_type="run_out", dismissed_player_id="a2"), sequence=1)
    # 2 + (2 * 2) - 5
    assert out.match.team1_score == 1


def test_power_over_only_in_designated_innings_and_over():
    m = _match(team1_balls=6, power_over=PowerOver(over_number=1, innings=1))
    out = apply_delivery(m, Delivery(runs=4), sequence=1)
    assert out.match.team1_score == 4
    assert not out.ball.is_power_over


def test_power_over_wide_doubles_runs_then_adds_penalty():
    m = _match(power_over=PowerOver(over_number=1, innings=1))
    out = apply_delivery(m, Delivery(runs=1, extra_type="wide"), sequence=1)
    assert out.match.team1_score == 3


# ---------- Strike rotation ----------


def test_odd_runs_rotate_strike():
    out = apply_delivery(_match(), Delivery(runs=1), sequence=1)
    assert (out.match.striker_id, out.match.non_striker_id) == ("a2", "a1")


def test_even_runs_keep_strike():
    out = apply_delivery(_match(), Delivery(runs=2), sequence=1)
    assert out.match.striker_id == "a1"


def test_single_off_last_ball_of_over_keeps_striker():
    """0.5 -> 1.0 with a single: odd-run toggle and end-of-over toggle cancel out."""
    m = _match(team1_balls=5)
    out = apply_delivery(m, Delivery(runs=1), sequence=6)
    assert out.match.team1_overs == "1.0"
    assert out.match.current_bowler_id is None
    assert (out.match.striker_id, out.match.non_striker_id) == ("a1", "a2")


def test_dot_ball_off_last_ball_of_over_swaps_ends():
    m = _match(team1_balls=5)
    out = apply_delivery(m, Delivery(runs=0), sequence=6)
    assert (out.match.striker_id, out.match.non_striker_id) == ("a2", "a1")


def test_wide_on_sixth_ball_does_not_end_over():
    m = _match(team1_balls=5)
    out = apply_delivery(m, Delivery(runs=0, extra_type="wide"), sequence=6)
    assert out.match.team1_overs == "0.5"
    assert out.match.current_bowler_id == "b1"


# ---------- Wickets ----------


def test_wicket_clears_striker_slot():
    out = apply_delivery(_match(), Delivery(is_wicket=True, wicket_type="bowled"), sequence=1)
    assert out.match.striker_id is None
    assert out.match.non_striker_id == "a2"
    assert out.ball.dismissed_player_id == "a1"
    out_row = next(d for d in out.stat_deltas if d.player_id == "a1")
    assert out_row.is_out and out_row.dismissal_type == "bowled" and out_row.dismissed_by == "b1"


def test_run_out_of_non_striker_keeps_striker():
    out = apply_delivery(
        _match(),
        Delivery(runs=1, is_wicket=True, wicket_type="run_out", dismissed_player_id="a2", fielder_id="b5"),
        sequence=1,
    )
    assert out.match.striker_id == "a1"
    assert out.match.non_striker_id is None
    deltas = {d.player_id: d for d in out.stat_deltas}
    assert deltas["b1"].wickets_taken == 0  # run-outs are not the bowler's
    assert deltas["b5"].run_outs == 1


def test_caught_credits_fielder_and_bowler():
    out = apply_delivery(
        _match(), Delivery(is_wicket=True, wicket_type="caught", fielder_id="b4"), sequence=1
    )
    deltas = {d.player_id: d for d in out.stat_deltas}
    assert deltas["b1"].wickets_taken == 1
    assert deltas["b4"].catches == 1


def test_wicket_on_last_ball_does_not_rotate():
    m = _match(team1_balls=5)
    out = apply_delivery(m, Delivery(runs=1, is_wicket=True, wicket_type="run_out", dismissed_player_id="a2"), sequence=6)
    assert out.match.striker_id == "a1"
    assert out.match.non_striker_id is None
    assert out.match.current_bowler_id is None


def test_wicket_reaching_cap_leaves_survivor_alone_on_strike():
    m = _match(team1_wickets=6)
    out = apply_delivery(m, Delivery(is_wicket=True, wicket_type="bowled"), sequence=1)
    assert out.match.team1_wickets == 7
    assert out.match.striker_id == "a2"
    assert out.match.non_striker_id is None


def test_last_man_standing_cannot_be_dismissed():
    m = _match(team1_wickets=7, non_striker_id=None)
    with pytest.raises(LastManStanding):
        apply_delivery(m, Delivery(is_wicket=True, wicket_type="bowled"), sequence=1)


def test_last_man_bats_alone_without_rotation():
    m = _match(team1_wickets=7, non_striker_id=None)
    out = apply_delivery(m, Delivery(runs=1), sequence=1)
    assert out.match.striker_id == "a1"
    assert out.match.team1_score == 1


def test_lone_batter_allowed_from_squad_minus_two_wickets():
    m = _match(team1_wickets=6, non_striker_id=None)
    out = apply_delivery(m, Delivery(runs=3), sequence=1)
    assert out.match.striker_id == "a1"


# ---------- Preconditions ----------


def test_rejects_when_not_live():
    with pytest.raises(MatchNotLive):
        apply_delivery(_match(status="scheduled"), Delivery(runs=1), sequence=1)


def test_requires_striker():
    with pytest.raises(BatsmenNotSet):
        apply_delivery(_match(striker_id=None), Delivery(runs=1), sequence=1)


def test_requires_non_striker_before_last_pair():
    with pytest.raises(BatsmenNotSet):
        apply_delivery(_match(non_striker_id=None, team1_wickets=5), Delivery(runs=1), sequence=1)


def test_requires_bowler():
    with pytest.raises(BowlerNotSet):
        apply_delivery(_match(current_bowler_id=None), Delivery(runs=1), sequence=1)


@pytest.mark.parametrize("runs", [-1, 7])
def test_rejects_runs_out_of_range(runs):
    with pytest.raises(InvalidDelivery):
        apply_delivery(_match(), Delivery(runs=runs), sequence=1)


def test_rejects_dismissal_of_player_not_at_crease():
    with pytest.raises(InvalidDelivery):
        apply_delivery(_match(), Delivery(is_wicket=True, wicket_type="bowled", dismissed_player_id="a7"), sequence=1)


# ---------- Innings and match completion ----------


def test_first_innings_ends_at_overs_limit():
    m = _match(team1_balls=35, team1_score=50)
    out = apply_delivery(m, Delivery(runs=2), sequence=36)
    assert out.innings_completed
    assert not out.match_completed
    assert out.match.current_innings == 2
    assert out.match.team1_overs == "6.0"
    assert out.match.striker_id is None
    assert out.match.non_striker_id is None
    assert out.match.current_bowler_id is None
    assert out.match.target == 53


def test_chase_reaching_target_wins_immediately():
    """Target 121, 118 before the ball, a four wins it with overs to spare."""
    m = _match(
        overs_limit=20, current_innings=2, team1_score=120, team1_balls=120,
        team2_score=118, team2_balls=100, striker_id="b1", non_striker_id="b2",
        current_bowler_id="a1",
    )
    out = apply_delivery(m, Delivery(runs=4), sequence=200)
    assert out.match_completed
    assert out.match.team2_score == 122
    assert out.match.status == "completed"
    assert out.match.winner_id == "B"
    assert out.match.result == "win"


def test_second_innings_tie():
    m = _match(
        current_innings=2, team1_score=40, team1_balls=36, team2_score=38, team2_balls=35,
        striker_id="b1", non_striker_id="b2", current_bowler_id="a1",
    )
    out = apply_delivery(m, Delivery(runs=2), sequence=80)
    assert out.match.result == "tie"
    assert out.match.winner_id is None


def test_defending_side_wins_when_chase_falls_short():
    m = _match(
        current_innings=2, team1_score=40, team1_balls=36, team2_score=30, team2_balls=35,
        striker_id="b1", non_striker_id="b2", current_bowler_id="a1",
    )
    out = apply_delivery(m, Delivery(runs=1), sequence=80)
    assert out.match.status == "completed"
    assert out.match.winner_id == "A"


def test_toss_decides_batting_side():
    """B bats first: innings-1 runs land on team2."""
    m = _match(batting_first_id="B", striker_id="b1", non_striker_id="b2", current_bowler_id="a1")
    out = apply_delivery(m, Delivery(runs=6), sequence=1)
    assert out.match.team2_score == 6
    assert out.match.team1_score == 0


# ---------- Replay ----------


def test_replay_matches_incremental_stats_and_totals():
    s = _Scorer(_match(power_over=PowerOver(over_number=2, innings=1)))
    script = [
        dict(runs=1), dict(runs=4), dict(runs=0, extra_type="wide"), dict(runs=6),
        dict(runs=0, is_wicket=True, wicket_type="caught", fielder_id="b3"),
    ]
    for kw in script:
        s.ball(**kw)
    s.match.striker_id = "a3"
    for kw in [dict(runs=2), dict(runs=1), dict(runs=4), dict(runs=0, is_wicket=True, wicket_type="bowled")]:
        s.ball(**kw)
    s.match.striker_id = "a4"
    s.ball(runs=3, extra_type="no_ball")

    incremental: dict = {}
    for out in s.outcomes:
        for d in out.stat_deltas:
            row = incremental.setdefault((d.player_id, d.innings), [0, 0, 0, 0, 0, 0])
            row[0] += d.runs_scored
            row[1] += d.balls_faced
            row[2] += d.balls_bowled
            row[3] += d.runs_conceded
            row[4] += d.wickets_taken
            row[5] += d.catches
    replayed = replay_stats(s.balls)
    for key, row in incremental.items():
        r = replayed[key]
        assert [r.runs_scored, r.balls_faced, r.balls_bowled, r.runs_conceded, r.wickets_taken, r.catches] == row

    score, wickets, legal = replay_totals(s.balls)[1]
    assert (score, wickets, legal) == (s.match.team1_score, s.match.team1_wickets, s.match.team1_balls)
    assert sum(1 for r in replayed.values() if r.is_out) == sum(1 for b in s.balls if b.is_wicket)
