"""
Persistence layer for league data.
Read/write interfaces only. Scheduling lives in services.
"""
from .db import get_connection, init_db, set_db_path
from .repositories import (
    LeagueRepository,
    SeasonRepository,
    TeamRepository,
    FixtureRepository,
    ResultRepository,
)

__all__ = [
    "get_connection",
    "init_db",
    "set_db_path",
    "LeagueRepository",
    "SeasonRepository",
    "TeamRepository",
    "FixtureRepository",
    "ResultRepository",
]
