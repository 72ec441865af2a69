#!/usr/bin/env python3
"""
Seed a demo tournament: 12 teams, a pool of approved + verified players,
groups drawn with a fixed seed. The auction is left not_started.
Run from project root: python3 scripts/seed_tournament.py [--db PATH] [--players N]
"""
from __future__ import annotations

import argparse
import random
import sys
from pathlib import Path

# Ensure project root on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from cricket_tournament import config
from cricket_tournament.models import PlayerRole
from cricket_tournament.persistence import get_connection, init_db, set_db_path
from cricket_tournament.services import RegistryService, TournamentService

TEAMS = [
    ("Thunder Strikers", "TS", "#1e3a8a", "#facc15"),
    ("Royal Challengers", "RC", "#b91c1c", "#111827"),
    ("Desert Hawks", "DH", "#b45309", "#fef3c7"),
    ("Coastal Kings", "CK", "#0e7490", "#ecfeff"),
    ("Mountain Lions", "ML", "#4d7c0f", "#f7fee7"),
    ("City Warriors", "CW", "#6d28d9", "#ede9fe"),
    ("River Rangers", "RR", "#0369a1", "#e0f2fe"),
    ("Sunrise Blasters", "SB", "#ea580c", "#fff7ed"),
    ("Night Riders", "NR", "#312e81", "#fde68a"),
    ("Storm Chasers", "SC", "#374151", "#f9fafb"),
    ("Golden Eagles", "GE", "#a16207", "#fefce8"),
    ("Green Titans", "GT", "#15803d", "#f0fdf4"),
]

FIRST_NAMES = ["Aarav", "Vihaan", "Arjun", "Sai", "Rohan", "Kabir", "Ishaan", "Dev", "Yash", "Aditya",
               "Karan", "Rahul", "Nikhil", "Varun", "Siddharth", "Manav", "Pranav", "Harsh"]
LAST_NAMES = ["Sharma", "Patil", "Deshmukh", "Kulkarni", "Joshi", "Iyer", "Reddy", "Naik", "Shinde", "Gupta"]


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a demo cricket tournament")
    parser.add_argument("--db", type=Path, default=PROJECT_ROOT / "data" / "seed.db")
    parser.add_argument("--players", type=int, default=120)
    parser.add_argument("--seed", type=int, default=2024)
    args = parser.parse_args()

    config.configure_logging()
    set_db_path(args.db)
    init_db(args.db)
    rng = random.Random(args.seed)
    registry = RegistryService()

    conn = get_connection()
    try:
        if registry.list_teams(conn):
            print(f"{args.db} already seeded; delete it to reseed")
            return
        for name, short, primary, secondary in TEAMS:
            registry.create_team(conn, name, short, primary, secondary, budget=config.DEFAULT_TEAM_BUDGET)

        roles = [r.value for r in PlayerRole]
        for i in range(args.players):
            name = f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"
            player = registry.register_player(
                conn,
                name=name,
                mobile=f"9{i:09d}",
                email=f"player{i}@example.com",
                address="Pune",
                role=rng.choice(roles),
                batting_rating=rng.randint(1, 10),
                bowling_rating=rng.randint(1, 10),
                fielding_rating=rng.randint(1, 10),
                photo_url=f"https://example.com/photos/{i}.jpg",
            )
            registry.approve_player(conn, player.id)
            registry.verify_payment(conn, player.id)

        teams = TournamentService().assign_groups(conn, seed=args.seed)
        by_category: dict[str, int] = {}
        for p in registry.list_players(conn):
            by_category[p.category or "-"] = by_category.get(p.category or "-", 0) + 1
        print(f"Seeded {len(teams)} teams and {args.players} players into {args.db}")
        for category in sorted(by_category, reverse=True):
            print(f"  category {category}: {by_category[category]} players")
        for t in teams:
            print(f"  {t.group_name or '-'}  {t.name}")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
