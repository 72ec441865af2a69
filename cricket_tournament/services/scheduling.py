"""
Deterministic group draw and group-stage fixture generation.

Round-robin uses the circle method: fix the first slot, rotate the others each
round. With an odd group size a virtual BYE pads the circle and the team drawn
against it sits that round out, so a group of 3 plays three single-match rounds.

Fixtures from different groups are interleaved round by round (A1, B1, C1, D1,
A2, ...) so no group plays all its matches back to back.
"""
from __future__ import annotations

import random
from typing import Any, Sequence

BYE = "BYE"


def round_robin_rounds(team_ids: Sequence[str]) -> list[list[tuple[str, str]]]:
    """
    Rounds of (team1_id, team2_id) pairings; every pair meets exactly once.
    Same team order => same rounds.
    """
    if len(team_ids) < 2:
        return []
    ids = list(team_ids)
    if len(ids) % 2 == 1:
        ids.append(BYE)
    n = len(ids)
    order = list(range(n))
    rounds: list[list[tuple[str, str]]] = []
    for _ in range(n - 1):
        pairs: list[tuple[str, str]] = []
        for i in range(n // 2):
            a, b = ids[order[i]], ids[order[n - 1 - i]]
            if BYE in (a, b):
                continue
            # Keep registration order within a pairing
            if team_ids.index(a) > team_ids.index(b):
                a, b = b, a
            pairs.append((a, b))
        rounds.append(pairs)
        order = [order[0], order[n - 1]] + order[1 : n - 1]
    return rounds


def assign_groups(
    team_ids: Sequence[str],
    group_names: Sequence[str],
    group_size: int,
    seed: int | None = None,
) -> dict[str, list[str]]:
    """
    Shuffle teams with a seeded RNG and deal them into groups of group_size.
    Teams beyond len(group_names) * group_size are left out of every group.
    """
    shuffled = list(team_ids)
    random.Random(seed).shuffle(shuffled)
    groups: dict[str, list[str]] = {g: [] for g in group_names}
    for i, tid in enumerate(shuffled):
        idx = i // group_size
        if idx >= len(group_names):
            break
        groups[group_names[idx]].append(tid)
    return groups


def group_fixtures(groups: dict[str, list[str]], first_match_number: int = 1) -> list[dict[str, Any]]:
    """
    Fixtures: { "match_number", "round", "group_name", "team1_id", "team2_id" }.
    Groups with fewer than two teams produce nothing.
    """
    per_group = {g: round_robin_rounds(teams) for g, teams in groups.items()}
    max_rounds = max((len(r) for r in per_group.values()), default=0)
    fixtures: list[dict[str, Any]] = []
    number = first_match_number
    for rnd in range(max_rounds):
        for group_name, rounds in per_group.items():
            if rnd >= len(rounds):
                continue
            for team1_id, team2_id in rounds[rnd]:
                fixtures.append({
                    "match_number": number,
                    "round": rnd + 1,
                    "group_name": group_name,
                    "team1_id": team1_id,
                    "team2_id": team2_id,
                })
                number += 1
    return fixtures
