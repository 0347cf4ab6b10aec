"""
SQLite schema for league entities.
Migration-friendly: each table created with IF NOT EXISTS.
"""
from __future__ import annotations


def leagues_schema() -> str:
    """Competition container. public_link_id is the shareable read-only handle."""
    return """
    CREATE TABLE IF NOT EXISTS leagues (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        organizer_id TEXT NOT NULL,
        public_link_id TEXT NOT NULL,
        created_at TEXT NOT NULL
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_leagues_public_link ON leagues(public_link_id);
    CREATE INDEX IF NOT EXISTS ix_leagues_organizer ON leagues(organizer_id);
    """


def seasons_schema() -> str:
    """One or more seasons per league; at most one is_active in practice."""
    return """
    CREATE TABLE IF NOT EXISTS seasons (
        id TEXT PRIMARY KEY,
        league_id TEXT NOT NULL,
        name TEXT NOT NULL,
        start_date TEXT NOT NULL,
        end_date TEXT NOT NULL,
        is_active INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        FOREIGN KEY (league_id) REFERENCES leagues(id)
    );
    CREATE INDEX IF NOT EXISTS ix_seasons_league ON seasons(league_id);
    """


def teams_schema() -> str:
    """Entrants of a season. Registration order (position) is the final standings tie-break."""
    return """
    CREATE TABLE IF NOT EXISTS teams (
        id TEXT PRIMARY KEY,
        season_id TEXT NOT NULL,
        name TEXT NOT NULL,
        position INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (season_id) REFERENCES seasons(id)
    );
    CREATE INDEX IF NOT EXISTS ix_teams_season ON teams(season_id);
    """


def fixtures_schema() -> str:
    """One row per ordered (home, away) pair per season. status: scheduled | live | completed."""
    return """
    CREATE TABLE IF NOT EXISTS fixtures (
        id TEXT PRIMARY KEY,
        season_id TEXT NOT NULL,
        home_team_id TEXT NOT NULL,
        away_team_id TEXT NOT NULL,
        match_date TEXT NOT NULL,
        round INTEGER NOT NULL,
        leg INTEGER NOT NULL,
        slot INTEGER NOT NULL,
        status TEXT NOT NULL DEFAULT 'scheduled',
        created_at TEXT NOT NULL,
        FOREIGN KEY (season_id) REFERENCES seasons(id),
        FOREIGN KEY (home_team_id) REFERENCES teams(id),
        FOREIGN KEY (away_team_id) REFERENCES teams(id),
        CHECK (home_team_id <> away_team_id)
    );
    CREATE INDEX IF NOT EXISTS ix_fixtures_season ON fixtures(season_id);
    CREATE UNIQUE INDEX IF NOT EXISTS ix_fixtures_pair ON fixtures(season_id, home_team_id, away_team_id);
    """


def results_schema() -> str:
    """At most one result per fixture (upsert)."""
    return """
    CREATE TABLE IF NOT EXISTS results (
        id TEXT PRIMARY KEY,
        fixture_id TEXT NOT NULL,
        home_goals INTEGER NOT NULL CHECK (home_goals >= 0),
        away_goals INTEGER NOT NULL CHECK (away_goals >= 0),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (fixture_id) REFERENCES fixtures(id)
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_results_fixture ON results(fixture_id);
    """


def all_schema_sql() -> str:
    """Combine all schema DDL for a single execution. Order: leagues, seasons, teams, fixtures, results."""
    return "\n".join([
        leagues_schema(),
        seasons_schema(),
        teams_schema(),
        fixtures_schema(),
        results_schema(),
    ])
