"""
Domain errors for fixture scheduling and standings.
Raised synchronously to the caller; never retried here. Each carries the
season / leg / entrant context needed for a user-facing message.
"""
from __future__ import annotations


class LeagueEngineError(ValueError):
    """Base class for scheduling and standings failures."""

    def __init__(
        self,
        message: str,
        *,
        season_id: str | None = None,
        leg_number: int | None = None,
        entrant_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.season_id = season_id
        self.leg_number = leg_number
        self.entrant_id = entrant_id

    def to_dict(self) -> dict[str, str | int | None]:
        return {
            "error": type(self).__name__,
            "message": str(self),
            "season_id": self.season_id,
            "leg_number": self.leg_number,
            "entrant_id": self.entrant_id,
        }


class PreconditionError(LeagueEngineError):
    """Input cannot be scheduled (e.g. fewer than 2 entrants, first leg incomplete)."""


class DuplicateLegError(LeagueEngineError):
    """Fixtures for this leg already exist; regeneration refused."""


class UnknownEntrantError(LeagueEngineError):
    """A fixture/result references an entrant that is not on the roster."""
