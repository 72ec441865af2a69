"""
SQLite schema for tournament entities.
Migration-friendly: each table created with IF NOT EXISTS.
Selection order (registration order) is SQLite rowid order.
"""
from __future__ import annotations


def teams_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS teams (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL UNIQUE,
        short_name TEXT NOT NULL,
        primary_color TEXT NOT NULL,
        secondary_color TEXT NOT NULL,
        logo_url TEXT,
        budget INTEGER NOT NULL,
        remaining_budget INTEGER NOT NULL,
        group_name TEXT,
        captain_id TEXT,
        vice_captain_id TEXT,
        created_at TEXT NOT NULL,
        CHECK (remaining_budget >= 0 AND remaining_budget <= budget)
    );
    CREATE INDEX IF NOT EXISTS ix_teams_group ON teams(group_name);
    """


def players_schema() -> str:
    """status: registered | in_auction | sold | unsold | lost_gold."""
    return """
    CREATE TABLE IF NOT EXISTS players (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        mobile TEXT NOT NULL UNIQUE,
        email TEXT UNIQUE,
        address TEXT NOT NULL,
        role TEXT NOT NULL,
        batting_rating INTEGER NOT NULL,
        bowling_rating INTEGER NOT NULL,
        fielding_rating INTEGER NOT NULL,
        photo_url TEXT NOT NULL,
        category TEXT,
        base_points INTEGER,
        status TEXT NOT NULL DEFAULT 'registered',
        approval_status TEXT NOT NULL DEFAULT 'pending',
        payment_status TEXT NOT NULL DEFAULT 'pending',
        team_id TEXT,
        sold_price INTEGER,
        is_locked INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        FOREIGN KEY (team_id) REFERENCES teams(id)
    );
    CREATE INDEX IF NOT EXISTS ix_players_status_category ON players(status, category);
    CREATE INDEX IF NOT EXISTS ix_players_team ON players(team_id);
    """


def auction_state_schema() -> str:
    """Singleton row (id = 'auction'). bid_history is a JSON list for the live player only."""
    return """
    CREATE TABLE IF NOT EXISTS auction_state (
        id TEXT PRIMARY KEY CHECK (id = 'auction'),
        status TEXT NOT NULL DEFAULT 'not_started',
        current_category TEXT,
        current_player_id TEXT,
        current_bid INTEGER,
        current_bidding_team_id TEXT,
        bid_history TEXT NOT NULL DEFAULT '[]',
        resume_status TEXT,
        updated_at TEXT NOT NULL,
        CHECK ((current_player_id IS NULL) = (current_bid IS NULL))
    );
    """


def matches_schema() -> str:
    """
    One row per fixture. *_balls are legal-ball counts (overs rendered on read).
    batting/bowling orders are JSON lists keyed by innings.
    """
    return """
    CREATE TABLE IF NOT EXISTS matches (
        id TEXT PRIMARY KEY,
        match_number INTEGER NOT NULL UNIQUE,
        team1_id TEXT NOT NULL,
        team2_id TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'scheduled',
        stage TEXT NOT NULL DEFAULT 'group',
        group_name TEXT,
        toss_winner_id TEXT,
        toss_decision TEXT,
        batting_first_id TEXT,
        winner_id TEXT,
        result TEXT,
        team1_score INTEGER NOT NULL DEFAULT 0,
        team1_wickets INTEGER NOT NULL DEFAULT 0,
        team1_balls INTEGER NOT NULL DEFAULT 0,
        team2_score INTEGER NOT NULL DEFAULT 0,
        team2_wickets INTEGER NOT NULL DEFAULT 0,
        team2_balls INTEGER NOT NULL DEFAULT 0,
        current_innings INTEGER NOT NULL DEFAULT 1,
        striker_id TEXT,
        non_striker_id TEXT,
        current_bowler_id TEXT,
        batting_order TEXT NOT NULL DEFAULT '{"1": [], "2": []}',
        bowling_order TEXT NOT NULL DEFAULT '{"1": [], "2": []}',
        power_over_number INTEGER,
        power_over_innings INTEGER,
        squad_size INTEGER NOT NULL,
        overs_limit INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (team1_id) REFERENCES teams(id),
        FOREIGN KEY (team2_id) REFERENCES teams(id),
        CHECK (team1_id != team2_id),
        CHECK (current_innings IN (1, 2))
    );
    CREATE INDEX IF NOT EXISTS ix_matches_status ON matches(status);
    """


def ball_events_schema() -> str:
    """Append-only audit log. (match_id, sequence) is unique and gap-free per match."""
    return """
    CREATE TABLE IF NOT EXISTS ball_events (
        id TEXT PRIMARY KEY,
        match_id TEXT NOT NULL,
        innings INTEGER NOT NULL,
        sequence INTEGER NOT NULL,
        over_number INTEGER NOT NULL,
        ball_number INTEGER NOT NULL,
        batsman_id TEXT NOT NULL,
        bowler_id TEXT NOT NULL,
        runs INTEGER NOT NULL,
        effective_runs INTEGER NOT NULL,
        extras INTEGER NOT NULL DEFAULT 0,
        extra_type TEXT,
        is_wicket INTEGER NOT NULL DEFAULT 0,
        wicket_type TEXT,
        dismissed_player_id TEXT,
        fielder_id TEXT,
        is_power_over INTEGER NOT NULL DEFAULT 0,
        team_runs INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (match_id) REFERENCES matches(id)
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_ball_events_match_seq ON ball_events(match_id, sequence);
    """


def player_match_stats_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS player_match_stats (
        match_id TEXT NOT NULL,
        player_id TEXT NOT NULL,
        innings INTEGER NOT NULL,
        batting_position INTEGER,
        runs_scored INTEGER NOT NULL DEFAULT 0,
        balls_faced INTEGER NOT NULL DEFAULT 0,
        fours INTEGER NOT NULL DEFAULT 0,
        sixes INTEGER NOT NULL DEFAULT 0,
        balls_bowled INTEGER NOT NULL DEFAULT 0,
        runs_conceded INTEGER NOT NULL DEFAULT 0,
        wickets_taken INTEGER NOT NULL DEFAULT 0,
        catches INTEGER NOT NULL DEFAULT 0,
        run_outs INTEGER NOT NULL DEFAULT 0,
        is_out INTEGER NOT NULL DEFAULT 0,
        dismissal_type TEXT,
        dismissed_by TEXT,
        PRIMARY KEY (match_id, player_id, innings),
        FOREIGN KEY (match_id) REFERENCES matches(id),
        FOREIGN KEY (player_id) REFERENCES players(id)
    );
    CREATE INDEX IF NOT EXISTS ix_player_match_stats_player ON player_match_stats(player_id);
    """


def points_table_schema() -> str:
    """Balls for/against stored as legal-ball counts; NRR derived on read."""
    return """
    CREATE TABLE IF NOT EXISTS points_table (
        team_id TEXT PRIMARY KEY,
        played INTEGER NOT NULL DEFAULT 0,
        won INTEGER NOT NULL DEFAULT 0,
        lost INTEGER NOT NULL DEFAULT 0,
        tied INTEGER NOT NULL DEFAULT 0,
        points INTEGER NOT NULL DEFAULT 0,
        runs_for INTEGER NOT NULL DEFAULT 0,
        balls_for INTEGER NOT NULL DEFAULT 0,
        runs_against INTEGER NOT NULL DEFAULT 0,
        balls_against INTEGER NOT NULL DEFAULT 0,
        FOREIGN KEY (team_id) REFERENCES teams(id)
    );
    """


def all_schema_sql() -> str:
    """Full schema (teams first; players and matches reference it)."""
    return "\n".join([
        teams_schema(),
        players_schema(),
        auction_state_schema(),
        matches_schema(),
        ball_events_schema(),
        player_match_stats_schema(),
        points_table_schema(),
    ])
