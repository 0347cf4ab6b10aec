"""
Read-side views over a season's fixture snapshot: today, upcoming, completed,
by round. Pure filters; callers pass the snapshot and the reference time.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable

from league_backend.models import Fixture, FixtureStatus, as_utc

UPCOMING_LIMIT = 10


def _by_kickoff(fixtures: Iterable[Fixture]) -> list[Fixture]:
    return sorted(fixtures, key=lambda f: (f.kickoff, f.round_number))


def _day_start(day: date | datetime) -> datetime:
    if isinstance(day, datetime):
        day = as_utc(day).date()
    return as_utc(day)


def fixtures_on_day(fixtures: Iterable[Fixture], day: date | datetime) -> list[Fixture]:
    """Fixtures kicking off within the UTC calendar day."""
    start = _day_start(day)
    end = start + timedelta(days=1)
    return _by_kickoff(f for f in fixtures if start <= as_utc(f.kickoff) < end)


def upcoming_fixtures(
    fixtures: Iterable[Fixture], now: datetime, limit: int = UPCOMING_LIMIT
) -> list[Fixture]:
    """Scheduled fixtures from tomorrow onwards, soonest first."""
    tomorrow = _day_start(now) + timedelta(days=1)
    upcoming = _by_kickoff(
        f for f in fixtures
        if as_utc(f.kickoff) >= tomorrow and f.status == FixtureStatus.SCHEDULED
    )
    return upcoming[:limit]


def completed_fixtures(fixtures: Iterable[Fixture]) -> list[Fixture]:
    return _by_kickoff(f for f in fixtures if f.is_completed)


def group_by_round(fixtures: Iterable[Fixture]) -> dict[int, list[Fixture]]:
    rounds: dict[int, list[Fixture]] = {}
    for f in sorted(fixtures, key=lambda f: f.round_number):
        rounds.setdefault(f.round_number, []).append(f)
    return rounds
