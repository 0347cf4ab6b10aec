"""
Data models for the league backend.
Domain objects only. No persistence or API logic.

Season-centric architecture: leagues have seasons; seasons register teams
(entrants); fixtures are generated per leg and resolved by results.
Standings are never stored; they are derived from fixtures + results.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any

from league_backend.errors import PreconditionError


def as_utc(value: date | datetime) -> datetime:
    """Promote a date to midnight UTC; treat naive datetimes as UTC."""
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------- Fixture status ----------
class FixtureStatus(str, Enum):
    """Fixture lifecycle: scheduled → live → completed."""
    SCHEDULED = "scheduled"
    LIVE = "live"
    COMPLETED = "completed"  # Result recorded


# ---------- Entrant ----------
@dataclass(frozen=True)
class Entrant:
    """
    A team registered to a season. Identity must not change once a fixture
    references it.
    """
    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


# ---------- SeasonWindow ----------
@dataclass(frozen=True)
class SeasonWindow:
    """
    Date range a season's fixtures are spread over.
    start == end is allowed: every round lands on the same instant.
    """
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", as_utc(self.start))
        object.__setattr__(self, "end", as_utc(self.end))
        if self.start > self.end:
            raise PreconditionError(
                f"Season window ends before it starts: {self.start.isoformat()} > {self.end.isoformat()}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


# ---------- Result ----------
@dataclass(frozen=True)
class Result:
    """Final score of one fixture. One result per fixture (upsert)."""
    fixture_id: str | None
    home_goals: int
    away_goals: int

    def __post_init__(self) -> None:
        for label, goals in (("home_goals", self.home_goals), ("away_goals", self.away_goals)):
            if isinstance(goals, bool) or not isinstance(goals, int) or goals < 0:
                raise ValueError(f"{label} must be a non-negative integer, got {goals!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "fixture_id": self.fixture_id,
            "home_goals": self.home_goals,
            "away_goals": self.away_goals,
        }


# ---------- Fixture ----------
@dataclass
class Fixture:
    """
    One scheduled match. Created once per leg by the scheduler; afterwards only
    status and result change. id is None until the storage layer assigns one.
    """
    season_id: str
    home_id: str
    away_id: str
    kickoff: datetime
    round_number: int  # 1-based, continues across legs (leg 2 starts at rounds_per_leg + 1)
    leg: int  # 1 | 2
    status: str = FixtureStatus.SCHEDULED.value
    id: str | None = None
    result: Result | None = None

    def __post_init__(self) -> None:
        if self.home_id == self.away_id:
            raise PreconditionError(
                f"Entrant {self.home_id} cannot play itself",
                season_id=self.season_id,
                leg_number=self.leg,
                entrant_id=self.home_id,
            )
        if isinstance(self.status, FixtureStatus):
            self.status = self.status.value

    @property
    def kickoff_iso(self) -> str:
        return self.kickoff.isoformat()

    @property
    def is_completed(self) -> bool:
        return self.status == FixtureStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "season_id": self.season_id,
            "home_team_id": self.home_id,
            "away_team_id": self.away_id,
            "match_date": self.kickoff_iso,
            "round": self.round_number,
            "leg": self.leg,
            "status": self.status,
        }
        if self.result is not None:
            d["home_goals"] = self.result.home_goals
            d["away_goals"] = self.result.away_goals
        return d


# ---------- StandingsRow ----------
@dataclass
class StandingsRow:
    """
    One line of the league table. Entirely derived; never persisted.
    """
    entrant_id: str
    team: str
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    points: int = 0
    position: int = 0  # 1-based, assigned after sorting

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": self.position,
            "team_id": self.entrant_id,
            "team": self.team,
            "played": self.played,
            "won": self.won,
            "drawn": self.drawn,
            "lost": self.lost,
            "goals_for": self.goals_for,
            "goals_against": self.goals_against,
            "goal_difference": self.goal_difference,
            "points": self.points,
        }


# ---------- League ----------
@dataclass
class League:
    """
    Competition container owned by an organizer. public_link_id is the
    shareable read-only handle.
    """
    id: str
    name: str
    organizer_id: str
    public_link_id: str
    created_at: datetime
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "organizer_id": self.organizer_id,
            "public_link_id": self.public_link_id,
            "created_at": self.created_at.isoformat(),
        }
        if self.description is not None:
            d["description"] = self.description
        return d


# ---------- Season ----------
@dataclass
class Season:
    """One season of a league. Owns its teams and fixtures."""
    id: str
    league_id: str
    name: str
    start_date: datetime
    end_date: datetime
    is_active: bool
    created_at: datetime

    @property
    def window(self) -> SeasonWindow:
        return SeasonWindow(self.start_date, self.end_date)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "league_id": self.league_id,
            "name": self.name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
        }
