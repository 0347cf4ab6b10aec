"""
Season-centric service: loads a consistent snapshot, calls the pure scheduling
and standings core, persists what it returns.
Leg generation, result recording, standings refresh, public overview.
"""
from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Any

from league_backend.errors import PreconditionError
from league_backend.models import Entrant, Fixture, FixtureStatus, Result, Season, StandingsRow
from league_backend.persistence.repositories import (
    FixtureRepository,
    LeagueRepository,
    ResultRepository,
    SeasonRepository,
    TeamRepository,
)
from league_backend.services.fixture_views import (
    completed_fixtures,
    fixtures_on_day,
    upcoming_fixtures,
)
from league_backend.services.scheduling import current_round, generate_leg, is_leg_complete
from league_backend.services.standings import compute_standings, standings_to_dicts

logger = logging.getLogger(__name__)

# ---------- Exceptions ----------


class SeasonNotFoundError(LookupError):
    """No season with the given id (or no active season for a league)."""


class FixtureNotFoundError(LookupError):
    """No fixture with the given id."""


class LeagueNotFoundError(LookupError):
    """No league with the given id or public link."""


class TeamNotFoundError(LookupError):
    """Team id not on the given season's roster."""


# ---------- SeasonService ----------


class SeasonService:
    """
    Orchestrates the fixture/standings core for one season at a time.
    Persistence is delegated to repositories; the core never touches the DB.
    """

    def __init__(self) -> None:
        self._league_repo = LeagueRepository()
        self._season_repo = SeasonRepository()
        self._team_repo = TeamRepository()
        self._fixture_repo = FixtureRepository()
        self._result_repo = ResultRepository()

    def _get_season(self, conn: sqlite3.Connection, season_id: str) -> Season:
        season = self._season_repo.get(conn, season_id)
        if season is None:
            raise SeasonNotFoundError(f"Season not found: {season_id}")
        return season

    # ---------- Teams ----------

    def add_team(self, conn: sqlite3.Connection, season_id: str, name: str) -> Entrant:
        """Register an entrant. Refused once fixtures exist (roster is frozen)."""
        self._get_season(conn, season_id)
        if self._fixture_repo.list_by_season(conn, season_id):
            raise PreconditionError(
                "Cannot add teams after fixtures have been generated", season_id=season_id
            )
        return self._team_repo.create(conn, season_id, name)

    def remove_team(self, conn: sqlite3.Connection, season_id: str, team_id: str) -> None:
        """Remove an entrant. Refused once fixtures exist (they reference it)."""
        self._get_season(conn, season_id)
        if self._team_repo.get(conn, season_id, team_id) is None:
            raise TeamNotFoundError(f"Team {team_id} is not registered in season {season_id}")
        if self._fixture_repo.list_by_season(conn, season_id):
            raise PreconditionError(
                "Cannot remove teams after fixtures have been generated",
                season_id=season_id,
                entrant_id=team_id,
            )
        if not self._team_repo.delete(conn, season_id, team_id):
            raise TeamNotFoundError(f"Team {team_id} is not registered in season {season_id}")
        logger.info("Removed team %s from season %s", team_id, season_id)

    # ---------- Scheduling ----------

    def generate_leg(self, conn: sqlite3.Connection, season_id: str, leg_number: int) -> list[Fixture]:
        """
        Generate and persist one leg. Existing fixtures are handed to the
        scheduler, so asking for the same leg twice raises DuplicateLegError.
        Leg 2 requires every leg-1 fixture to be completed.
        """
        season = self._get_season(conn, season_id)
        entrants = self._team_repo.list_by_season(conn, season_id)
        existing = self._fixture_repo.list_by_season(conn, season_id)
        first_leg = [f for f in existing if f.leg == 1]
        fixtures = generate_leg(
            entrants,
            season.window,
            leg_number,
            first_leg if leg_number == 2 else None,
            season_id=season_id,
            existing_fixtures=existing,
        )
        created = self._fixture_repo.bulk_create(conn, fixtures)
        logger.info("Persisted %d fixtures for season %s leg %d", len(created), season_id, leg_number)
        return created

    def generate_next_leg(self, conn: sqlite3.Connection, season_id: str) -> list[Fixture]:
        """Leg 1 when the season has no fixtures yet, otherwise leg 2."""
        existing = self._fixture_repo.list_by_season(conn, season_id)
        leg_number = 2 if any(f.leg == 1 for f in existing) else 1
        return self.generate_leg(conn, season_id, leg_number)

    def can_generate_second_leg(self, conn: sqlite3.Connection, season_id: str) -> bool:
        """Leg 1 fully completed and leg 2 not generated yet. Queried fresh each call."""
        entrants = self._team_repo.list_by_season(conn, season_id)
        fixtures = self._fixture_repo.list_by_season(conn, season_id)
        if any(f.leg == 2 for f in fixtures):
            return False
        return is_leg_complete(fixtures, len(entrants), leg_number=1)

    def list_fixtures(self, conn: sqlite3.Connection, season_id: str) -> list[Fixture]:
        self._get_season(conn, season_id)
        return self._fixture_repo.list_by_season(conn, season_id)

    # ---------- Results ----------

    def record_result(
        self, conn: sqlite3.Connection, fixture_id: str, home_goals: int, away_goals: int
    ) -> Fixture:
        """Upsert the fixture's result and mark it completed, in one transaction."""
        fixture = self._fixture_repo.get(conn, fixture_id)
        if fixture is None:
            raise FixtureNotFoundError(f"Fixture not found: {fixture_id}")
        result = Result(fixture_id=fixture_id, home_goals=home_goals, away_goals=away_goals)
        try:
            self._result_repo.upsert(conn, fixture_id, result.home_goals, result.away_goals, commit=False)
            self._fixture_repo.update_status(conn, fixture_id, FixtureStatus.COMPLETED.value, commit=False)
        except sqlite3.Error:
            conn.rollback()
            raise
        conn.commit()
        logger.info("Recorded result %d-%d for fixture %s", home_goals, away_goals, fixture_id)
        fixture.status = FixtureStatus.COMPLETED.value
        fixture.result = result
        return fixture

    def set_live(self, conn: sqlite3.Connection, fixture_id: str) -> Fixture:
        """scheduled -> live. A completed fixture stays completed."""
        fixture = self._fixture_repo.get(conn, fixture_id)
        if fixture is None:
            raise FixtureNotFoundError(f"Fixture not found: {fixture_id}")
        if fixture.is_completed:
            raise PreconditionError(
                f"Fixture {fixture_id} is already completed", season_id=fixture.season_id
            )
        self._fixture_repo.update_status(conn, fixture_id, FixtureStatus.LIVE.value)
        fixture.status = FixtureStatus.LIVE.value
        return fixture

    # ---------- Standings ----------

    def standings(self, conn: sqlite3.Connection, season_id: str) -> list[StandingsRow]:
        """Recomputed from the stored fixtures and results on every call."""
        self._get_season(conn, season_id)
        entrants = self._team_repo.list_by_season(conn, season_id)
        fixtures = self._fixture_repo.list_by_season(conn, season_id)
        pairs = [(f, f.result) for f in fixtures if f.is_completed and f.result is not None]
        return compute_standings(entrants, pairs)

    def season_overview(
        self, conn: sqlite3.Connection, season_id: str, now: datetime | None = None
    ) -> dict[str, Any]:
        """Everything a public season page shows, from one snapshot."""
        season = self._get_season(conn, season_id)
        now = now or datetime.now(timezone.utc)
        entrants = self._team_repo.list_by_season(conn, season_id)
        names = {e.id: e.name for e in entrants}
        fixtures = self._fixture_repo.list_by_season(conn, season_id)
        pairs = [(f, f.result) for f in fixtures if f.is_completed and f.result is not None]
        table = compute_standings(entrants, pairs)

        def view(f: Fixture) -> dict[str, Any]:
            d = f.to_dict()
            d["home_team"] = names.get(f.home_id)
            d["away_team"] = names.get(f.away_id)
            return d

        return {
            "season": season.to_dict(),
            "current_round": current_round(fixtures),
            "standings": standings_to_dicts(table),
            "today": [view(f) for f in fixtures_on_day(fixtures, now)],
            "upcoming": [view(f) for f in upcoming_fixtures(fixtures, now)],
            "completed": [view(f) for f in completed_fixtures(fixtures)],
        }

    def public_overview(
        self, conn: sqlite3.Connection, public_link_id: str, now: datetime | None = None
    ) -> dict[str, Any]:
        """Overview of a league's active season, looked up by its public link."""
        league = self._league_repo.get_by_public_link(conn, public_link_id)
        if league is None:
            raise LeagueNotFoundError(f"League not found: {public_link_id}")
        season = self._season_repo.get_active_for_league(conn, league.id)
        if season is None:
            raise SeasonNotFoundError(f"No active season for league {league.id}")
        overview = self.season_overview(conn, season.id, now)
        overview["league"] = league.to_dict()
        return overview
