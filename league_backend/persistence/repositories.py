"""
Repository interfaces for league data.
No business logic, only read/write operations.
"""
from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Sequence

from league_backend.models import Entrant, Fixture, League, Result, Season


def _parse_datetime(s: str | None) -> datetime:
    if s is None:
        raise ValueError("expected datetime string")
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------- LeagueRepository ----------


class LeagueRepository:
    """CRUD for leagues. No business logic."""

    def create(
        self,
        conn: sqlite3.Connection,
        name: str,
        organizer_id: str,
        description: str | None = None,
        id: str | None = None,
    ) -> League:
        lid = id or str(uuid.uuid4())
        public_link_id = uuid.uuid4().hex[:12]
        now = _now_iso()
        conn.execute(
            "INSERT INTO leagues (id, name, description, organizer_id, public_link_id, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (lid, name, description, organizer_id, public_link_id, now),
        )
        conn.commit()
        return League(
            id=lid, name=name, organizer_id=organizer_id, public_link_id=public_link_id,
            created_at=_parse_datetime(now), description=description,
        )

    def _from_row(self, row: sqlite3.Row) -> League:
        return League(
            id=row["id"],
            name=row["name"],
            organizer_id=row["organizer_id"],
            public_link_id=row["public_link_id"],
            created_at=_parse_datetime(row["created_at"]),
            description=row["description"],
        )

    def get(self, conn: sqlite3.Connection, league_id: str) -> League | None:
        row = conn.execute("SELECT * FROM leagues WHERE id = ?", (league_id,)).fetchone()
        return self._from_row(row) if row else None

    def get_by_public_link(self, conn: sqlite3.Connection, public_link_id: str) -> League | None:
        row = conn.execute(
            "SELECT * FROM leagues WHERE public_link_id = ?", (public_link_id,)
        ).fetchone()
        return self._from_row(row) if row else None

    def list_by_organizer(self, conn: sqlite3.Connection, organizer_id: str) -> list[League]:
        """Newest first."""
        rows = conn.execute(
            "SELECT * FROM leagues WHERE organizer_id = ? ORDER BY created_at DESC",
            (organizer_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]


# ---------- SeasonRepository ----------


class SeasonRepository:
    """CRUD for seasons. No business logic."""

    def create(
        self,
        conn: sqlite3.Connection,
        league_id: str,
        name: str,
        start_date: datetime,
        end_date: datetime,
        id: str | None = None,
    ) -> Season:
        """New season becomes the league's only active one."""
        sid = id or str(uuid.uuid4())
        now = _now_iso()
        try:
            conn.execute("UPDATE seasons SET is_active = 0 WHERE league_id = ?", (league_id,))
            conn.execute(
                "INSERT INTO seasons (id, league_id, name, start_date, end_date, is_active, created_at) "
                "VALUES (?, ?, ?, ?, ?, 1, ?)",
                (sid, league_id, name, start_date.isoformat(), end_date.isoformat(), now),
            )
        except sqlite3.Error:
            conn.rollback()
            raise
        conn.commit()
        return Season(
            id=sid, league_id=league_id, name=name, start_date=start_date, end_date=end_date,
            is_active=True, created_at=_parse_datetime(now),
        )

    def _from_row(self, row: sqlite3.Row) -> Season:
        return Season(
            id=row["id"],
            league_id=row["league_id"],
            name=row["name"],
            start_date=_parse_datetime(row["start_date"]),
            end_date=_parse_datetime(row["end_date"]),
            is_active=bool(row["is_active"]),
            created_at=_parse_datetime(row["created_at"]),
        )

    def get(self, conn: sqlite3.Connection, season_id: str) -> Season | None:
        row = conn.execute("SELECT * FROM seasons WHERE id = ?", (season_id,)).fetchone()
        return self._from_row(row) if row else None

    def get_active_for_league(self, conn: sqlite3.Connection, league_id: str) -> Season | None:
        row = conn.execute(
            "SELECT * FROM seasons WHERE league_id = ? AND is_active = 1 ORDER BY created_at DESC LIMIT 1",
            (league_id,),
        ).fetchone()
        return self._from_row(row) if row else None

    def list_by_league(self, conn: sqlite3.Connection, league_id: str) -> list[Season]:
        """Active season first, then newest."""
        rows = conn.execute(
            "SELECT * FROM seasons WHERE league_id = ? ORDER BY is_active DESC, created_at DESC",
            (league_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]


# ---------- TeamRepository ----------


class TeamRepository:
    """Entrants of a season, in registration order."""

    def create(self, conn: sqlite3.Connection, season_id: str, name: str, id: str | None = None) -> Entrant:
        tid = id or str(uuid.uuid4())
        row = conn.execute(
            "SELECT COALESCE(MAX(position), 0) FROM teams WHERE season_id = ?", (season_id,)
        ).fetchone()
        position = row[0] + 1
        conn.execute(
            "INSERT INTO teams (id, season_id, name, position, created_at) VALUES (?, ?, ?, ?, ?)",
            (tid, season_id, name, position, _now_iso()),
        )
        conn.commit()
        return Entrant(id=tid, name=name)

    def list_by_season(self, conn: sqlite3.Connection, season_id: str) -> list[Entrant]:
        rows = conn.execute(
            "SELECT id, name FROM teams WHERE season_id = ? ORDER BY position",
            (season_id,),
        ).fetchall()
        return [Entrant(id=r["id"], name=r["name"]) for r in rows]

    def get(self, conn: sqlite3.Connection, season_id: str, team_id: str) -> Entrant | None:
        row = conn.execute(
            "SELECT id, name FROM teams WHERE id = ? AND season_id = ?", (team_id, season_id)
        ).fetchone()
        return Entrant(id=row["id"], name=row["name"]) if row else None

    def delete(self, conn: sqlite3.Connection, season_id: str, team_id: str) -> bool:
        """False when the team is not on that season's roster."""
        cur = conn.execute("DELETE FROM teams WHERE id = ? AND season_id = ?", (team_id, season_id))
        conn.commit()
        return cur.rowcount > 0


# ---------- FixtureRepository ----------


_FIXTURE_SELECT = """
    SELECT f.id, f.season_id, f.home_team_id, f.away_team_id, f.match_date, f.round, f.leg,
           f.status, r.home_goals, r.away_goals
    FROM fixtures f
    LEFT JOIN results r ON r.fixture_id = f.id
"""


class FixtureRepository:
    """Fixtures of a season. Bulk insert is all-or-nothing."""

    def _from_row(self, row: sqlite3.Row) -> Fixture:
        result = None
        if row["home_goals"] is not None:
            result = Result(fixture_id=row["id"], home_goals=row["home_goals"], away_goals=row["away_goals"])
        return Fixture(
            id=row["id"],
            season_id=row["season_id"],
            home_id=row["home_team_id"],
            away_id=row["away_team_id"],
            kickoff=_parse_datetime(row["match_date"]),
            round_number=row["round"],
            leg=row["leg"],
            status=row["status"],
            result=result,
        )

    def bulk_create(self, conn: sqlite3.Connection, fixtures: Sequence[Fixture]) -> list[Fixture]:
        """Insert every fixture in one transaction; assigns ids. Rolls back on any error."""
        now = _now_iso()
        created: list[Fixture] = []
        try:
            for slot, f in enumerate(fixtures):
                fid = f.id or str(uuid.uuid4())
                conn.execute(
                    "INSERT INTO fixtures (id, season_id, home_team_id, away_team_id, match_date, round, leg, slot, status, created_at) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (fid, f.season_id, f.home_id, f.away_id, f.kickoff_iso, f.round_number, f.leg, slot, f.status, now),
                )
                created.append(
                    Fixture(
                        id=fid, season_id=f.season_id, home_id=f.home_id, away_id=f.away_id,
                        kickoff=f.kickoff, round_number=f.round_number, leg=f.leg, status=f.status,
                    )
                )
        except sqlite3.Error:
            conn.rollback()
            raise
        conn.commit()
        return created

    def get(self, conn: sqlite3.Connection, fixture_id: str) -> Fixture | None:
        row = conn.execute(_FIXTURE_SELECT + " WHERE f.id = ?", (fixture_id,)).fetchone()
        return self._from_row(row) if row else None

    def list_by_season(self, conn: sqlite3.Connection, season_id: str) -> list[Fixture]:
        rows = conn.execute(
            _FIXTURE_SELECT + " WHERE f.season_id = ? ORDER BY f.round, f.slot",
            (season_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def update_status(
        self, conn: sqlite3.Connection, fixture_id: str, status: str, commit: bool = True
    ) -> None:
        conn.execute("UPDATE fixtures SET status = ? WHERE id = ?", (status, fixture_id))
        if commit:
            conn.commit()


# ---------- ResultRepository ----------


class ResultRepository:
    """One result per fixture; writes are upserts."""

    def upsert(
        self,
        conn: sqlite3.Connection,
        fixture_id: str,
        home_goals: int,
        away_goals: int,
        commit: bool = True,
    ) -> Result:
        now = _now_iso()
        conn.execute(
            "INSERT INTO results (id, fixture_id, home_goals, away_goals, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(fixture_id) DO UPDATE SET "
            "home_goals = excluded.home_goals, away_goals = excluded.away_goals, updated_at = excluded.updated_at",
            (str(uuid.uuid4()), fixture_id, home_goals, away_goals, now, now),
        )
        if commit:
            conn.commit()
        return Result(fixture_id=fixture_id, home_goals=home_goals, away_goals=away_goals)

    def get_by_fixture(self, conn: sqlite3.Connection, fixture_id: str) -> Result | None:
        row = conn.execute(
            "SELECT fixture_id, home_goals, away_goals FROM results WHERE fixture_id = ?",
            (fixture_id,),
        ).fetchone()
        if row is None:
            return None
        return Result(fixture_id=row["fixture_id"], home_goals=row["home_goals"], away_goals=row["away_goals"])
