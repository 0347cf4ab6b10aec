"""
REST API for the league backend.
Thin wrappers around the season service and persistence.
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager, contextmanager
from datetime import date
from pathlib import Path
from typing import Any, AsyncGenerator, Generator

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, model_validator

# Ensure project root on path
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from league_backend.errors import DuplicateLegError, PreconditionError, UnknownEntrantError
from league_backend.logging_config import setup_logging
from league_backend.models import as_utc
from league_backend.persistence import (
    get_connection,
    init_db,
    LeagueRepository,
    SeasonRepository,
    TeamRepository,
)
from league_backend.persistence.db import get_db_path
from league_backend.services.season_service import SeasonService
from league_backend.services.standings import standings_to_dicts

logger = logging.getLogger(__name__)

CORS_ORIGINS = [
    o.strip()
    for o in os.environ.get("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if o.strip()
]


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    init_db(db_path=get_db_path())
    logger.info("League API started (db=%s)", get_db_path())
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="League Fixtures API",
    description="Round-robin fixture generation and league standings",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Request/Response models ----------


class CreateLeagueRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    organizer_id: str = Field(..., min_length=1, description="Owner; auth is handled upstream")
    description: str | None = Field(None, max_length=2000)


class CreateSeasonRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _check_window(self) -> "CreateSeasonRequest":
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class AddTeamRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class RecordResultRequest(BaseModel):
    home_goals: int = Field(..., ge=0)
    away_goals: int = Field(..., ge=0)


def _raise_for_engine_error(e: Exception) -> None:
    """Map domain errors to HTTP errors."""
    if isinstance(e, DuplicateLegError):
        raise HTTPException(status_code=409, detail=e.to_dict())
    if isinstance(e, UnknownEntrantError):
        raise HTTPException(status_code=422, detail=e.to_dict())
    if isinstance(e, PreconditionError):
        raise HTTPException(status_code=400, detail=e.to_dict())
    if isinstance(e, LookupError):
        raise HTTPException(status_code=404, detail=str(e))
    raise e


# ---------- Leagues & seasons ----------


@app.post("/leagues")
def create_league(req: CreateLeagueRequest) -> dict[str, Any]:
    with db_conn() as conn:
        league = LeagueRepository().create(conn, req.name, req.organizer_id, description=req.description)
        return league.to_dict()


@app.get("/leagues")
def list_leagues(organizer_id: str) -> dict[str, Any]:
    """An organizer's leagues, newest first."""
    with db_conn() as conn:
        leagues = LeagueRepository().list_by_organizer(conn, organizer_id)
        return {"leagues": [lg.to_dict() for lg in leagues]}


@app.get("/leagues/{league_id}/seasons")
def list_seasons(league_id: str) -> dict[str, Any]:
    """Seasons of a league, active one first."""
    with db_conn() as conn:
        if LeagueRepository().get(conn, league_id) is None:
            raise HTTPException(status_code=404, detail="League not found")
        seasons = SeasonRepository().list_by_league(conn, league_id)
        return {"seasons": [s.to_dict() for s in seasons]}


@app.post("/leagues/{league_id}/seasons")
def create_season(league_id: str, req: CreateSeasonRequest) -> dict[str, Any]:
    with db_conn() as conn:
        if LeagueRepository().get(conn, league_id) is None:
            raise HTTPException(status_code=404, detail="League not found")
        season = SeasonRepository().create(
            conn, league_id, req.name, as_utc(req.start_date), as_utc(req.end_date)
        )
        return season.to_dict()


@app.post("/seasons/{season_id}/teams")
def add_team(season_id: str, req: AddTeamRequest) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            team = SeasonService().add_team(conn, season_id, req.name)
        except (PreconditionError, LookupError) as e:
            _raise_for_engine_error(e)
        return team.to_dict()


@app.delete("/seasons/{season_id}/teams/{team_id}")
def remove_team(season_id: str, team_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            SeasonService().remove_team(conn, season_id, team_id)
        except (PreconditionError, LookupError) as e:
            _raise_for_engine_error(e)
        return {"deleted": team_id}


@app.get("/seasons/{season_id}/teams")
def list_teams(season_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        if SeasonRepository().get(conn, season_id) is None:
            raise HTTPException(status_code=404, detail="Season not found")
        teams = TeamRepository().list_by_season(conn, season_id)
        return {"teams": [t.to_dict() for t in teams]}


# ---------- Fixtures ----------


@app.post("/seasons/{season_id}/legs/{leg_number}")
def generate_leg(season_id: str, leg_number: int) -> dict[str, Any]:
    """Generate one leg. 409 if that leg already exists; 400 if leg 1 is not finished."""
    with db_conn() as conn:
        try:
            fixtures = SeasonService().generate_leg(conn, season_id, leg_number)
        except (PreconditionError, DuplicateLegError, UnknownEntrantError, LookupError) as e:
            _raise_for_engine_error(e)
        return {
            "season_id": season_id,
            "leg": leg_number,
            "count": len(fixtures),
            "fixtures": [f.to_dict() for f in fixtures],
        }


@app.get("/seasons/{season_id}/fixtures")
def list_fixtures(season_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            fixtures = SeasonService().list_fixtures(conn, season_id)
        except LookupError as e:
            _raise_for_engine_error(e)
        return {"fixtures": [f.to_dict() for f in fixtures]}


@app.put("/fixtures/{fixture_id}/result")
def record_result(fixture_id: str, req: RecordResultRequest) -> dict[str, Any]:
    """Create or overwrite the result; the fixture becomes completed."""
    with db_conn() as conn:
        try:
            fixture = SeasonService().record_result(conn, fixture_id, req.home_goals, req.away_goals)
        except (PreconditionError, LookupError) as e:
            _raise_for_engine_error(e)
        return fixture.to_dict()


@app.post("/fixtures/{fixture_id}/live")
def set_fixture_live(fixture_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            fixture = SeasonService().set_live(conn, fixture_id)
        except (PreconditionError, LookupError) as e:
            _raise_for_engine_error(e)
        return fixture.to_dict()


# ---------- Standings ----------


@app.get("/seasons/{season_id}/standings")
def get_standings(season_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            table = SeasonService().standings(conn, season_id)
        except (UnknownEntrantError, PreconditionError, LookupError) as e:
            _raise_for_engine_error(e)
        return {"season_id": season_id, "standings": standings_to_dicts(table)}


@app.get("/seasons/{season_id}/overview")
def get_season_overview(season_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            return SeasonService().season_overview(conn, season_id)
        except (UnknownEntrantError, PreconditionError, LookupError) as e:
            _raise_for_engine_error(e)


@app.get("/public/{public_link_id}")
def get_public_league(public_link_id: str) -> dict[str, Any]:
    """Read-only view of a league's active season."""
    with db_conn() as conn:
        try:
            return SeasonService().public_overview(conn, public_link_id)
        except (UnknownEntrantError, PreconditionError, LookupError) as e:
            _raise_for_engine_error(e)


# ---------- Run with: uvicorn league_backend.api:app --reload ----------
