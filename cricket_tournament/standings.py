"""
Points table arithmetic: result application, net run rate, ordering.
All overs are carried as BALLS; overs = balls / 6 only inside run_rate().
"""
from __future__ import annotations

from typing import Iterable

from cricket_tournament import rules
from cricket_tournament.models import Match, MatchResult, MatchStatus, PointsTableRow
from cricket_tournament.overs import run_rate


def nrr(row: PointsTableRow) -> float:
    """Net Run Rate = runs_for / overs_for - runs_against / overs_against."""
    return run_rate(row.runs_for, row.balls_for) - run_rate(row.runs_against, row.balls_against)


def apply_result(table: dict[str, PointsTableRow], match: Match) -> None:
    """
    Fold one completed match into the table (rows created on demand).
    Both teams: +1 played and runs/balls for and against.
    Win: winner +WIN_POINTS and +1 won, loser +1 lost. Tie: +1 tied and TIE_POINTS each.
    """
    if match.status != MatchStatus.COMPLETED:
        raise ValueError(f"Match {match.id} is not completed")
    t1 = table.setdefault(match.team1_id, PointsTableRow(team_id=match.team1_id))
    t2 = table.setdefault(match.team2_id, PointsTableRow(team_id=match.team2_id))

    for row, own, opp in ((t1, match.team1_id, match.team2_id), (t2, match.team2_id, match.team1_id)):
        runs_for, _, balls_for = match.team_totals(own)
        runs_against, _, balls_against = match.team_totals(opp)
        row.played += 1
        row.runs_for += runs_for
        row.balls_for += balls_for
        row.runs_against += runs_against
        row.balls_against += balls_against

    if match.result == MatchResult.TIE:
        for row in (t1, t2):
            row.tied += 1
            row.points += rules.TIE_POINTS
        return
    winner, loser = (t1, t2) if match.winner_id == match.team1_id else (t2, t1)
    winner.won += 1
    winner.points += rules.WIN_POINTS
    loser.lost += 1
    loser.points += rules.LOSS_POINTS


def build_table(matches: Iterable[Match]) -> dict[str, PointsTableRow]:
    """Recompute the whole table from completed matches (order-independent)."""
    table: dict[str, PointsTableRow] = {}
    for m in matches:
        if m.status == MatchStatus.COMPLETED:
            apply_result(table, m)
    return table


def sort_rows(rows: Iterable[PointsTableRow], team_names: dict[str, str]) -> list[PointsTableRow]:
    """Points desc, then NRR desc, then team name asc."""
    return sorted(
        rows,
        key=lambda r: (-r.points, -nrr(r), team_names.get(r.team_id, r.team_id)),
    )
