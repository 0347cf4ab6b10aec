"""
Tests for fixture views: today, upcoming, completed, by round.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from league_backend.models import Fixture, FixtureStatus
from league_backend.services.fixture_views import (
    completed_fixtures,
    fixtures_on_day,
    group_by_round,
    upcoming_fixtures,
)

NOW = datetime(2025, 5, 10, 15, 30, tzinfo=timezone.utc)


def _fixture(home: str, away: str, kickoff: datetime, round_number: int = 1, status: str = "scheduled") -> Fixture:
    return Fixture(
        season_id="s1", home_id=home, away_id=away, kickoff=kickoff,
        round_number=round_number, leg=1, status=status, id=f"{home}-{away}",
    )


def test_fixtures_on_day_uses_calendar_day():
    morning = _fixture("A", "B", datetime(2025, 5, 10, 0, 0, tzinfo=timezone.utc))
    evening = _fixture("C", "D", datetime(2025, 5, 10, 23, 59, tzinfo=timezone.utc))
    tomorrow = _fixture("E", "F", datetime(2025, 5, 11, 0, 0, tzinfo=timezone.utc))
    yesterday = _fixture("G", "H", datetime(2025, 5, 9, 23, 0, tzinfo=timezone.utc))
    today = fixtures_on_day([evening, tomorrow, morning, yesterday], NOW)
    assert [f.id for f in today] == ["A-B", "C-D"]
    assert [f.id for f in fixtures_on_day([morning, tomorrow], date(2025, 5, 11))] == ["E-F"]


def test_upcoming_starts_tomorrow_and_only_scheduled():
    later_today = _fixture("A", "B", NOW + timedelta(hours=2))
    tomorrow = _fixture("C", "D", datetime(2025, 5, 11, 12, tzinfo=timezone.utc))
    live = _fixture("E", "F", datetime(2025, 5, 12, tzinfo=timezone.utc), status=FixtureStatus.LIVE.value)
    next_week = _fixture("G", "H", datetime(2025, 5, 17, tzinfo=timezone.utc))
    upcoming = upcoming_fixtures([next_week, live, later_today, tomorrow], NOW)
    assert [f.id for f in upcoming] == ["C-D", "G-H"]


def test_upcoming_respects_limit():
    fixtures = [
        _fixture(f"H{i}", f"A{i}", datetime(2025, 6, 1, tzinfo=timezone.utc) + timedelta(days=i))
        for i in range(15)
    ]
    upcoming = upcoming_fixtures(fixtures, NOW)
    assert len(upcoming) == 10
    assert upcoming[0].id == "H0-A0"
    assert len(upcoming_fixtures(fixtures, NOW, limit=3)) == 3


def test_completed_and_grouping():
    fixtures = [
        _fixture("A", "B", NOW, round_number=2, status="completed"),
        _fixture("C", "D", NOW - timedelta(days=7), round_number=1, status="completed"),
        _fixture("E", "F", NOW + timedelta(days=7), round_number=3),
    ]
    assert [f.id for f in completed_fixtures(fixtures)] == ["C-D", "A-B"]
    rounds = group_by_round(fixtures)
    assert list(rounds) == [1, 2, 3]
    assert [f.id for f in rounds[3]] == ["E-F"]
