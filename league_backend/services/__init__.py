"""
Service layer: pure fixture scheduling and standings core, plus the season
service that feeds it snapshots and persists its output.
"""
from .scheduling import generate_leg, is_leg_complete, current_round
from .standings import compute_standings, classify_zone
from .season_service import (
    SeasonService,
    SeasonNotFoundError,
    FixtureNotFoundError,
    LeagueNotFoundError,
    TeamNotFoundError,
)

__all__ = [
    "generate_leg",
    "is_leg_complete",
    "current_round",
    "compute_standings",
    "classify_zone",
    "SeasonService",
    "SeasonNotFoundError",
    "FixtureNotFoundError",
    "LeagueNotFoundError",
    "TeamNotFoundError",
]
