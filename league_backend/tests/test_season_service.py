"""
Tests for the season service: leg generation against persisted fixtures,
result upserts, standings refresh, overview.
"""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from league_backend.errors import DuplicateLegError, PreconditionError
from league_backend.models import FixtureStatus
from league_backend.persistence.db import get_connection, init_db, set_db_path
from league_backend.persistence.repositories import (
    FixtureRepository,
    LeagueRepository,
    ResultRepository,
    SeasonRepository,
    TeamRepository,
)
from league_backend.services.season_service import (
    FixtureNotFoundError,
    LeagueNotFoundError,
    SeasonNotFoundError,
    SeasonService,
    TeamNotFoundError,
)

START = datetime(2025, 8, 1, tzinfo=timezone.utc)
END = datetime(2025, 8, 13, tzinfo=timezone.utc)


@pytest.fixture
def db_conn(tmp_path):
    """Temporary DB with the league schema."""
    db_path = tmp_path / "league_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def service():
    return SeasonService()


@pytest.fixture
def league(db_conn):
    return LeagueRepository().create(db_conn, "Sunday League", "organizer-1")


@pytest.fixture
def season(db_conn, league):
    return SeasonRepository().create(db_conn, league.id, "2025", START, END)


@pytest.fixture
def teams(db_conn, service, season):
    return [service.add_team(db_conn, season.id, name) for name in ("Ajax", "Benfica", "Celtic", "Dynamo")]


def _complete_leg(conn, service, fixtures, score=(1, 0)):
    for f in fixtures:
        service.record_result(conn, f.id, *score)


def test_generate_first_leg_persists_fixtures(db_conn, service, season, teams):
    created = service.generate_leg(db_conn, season.id, 1)
    assert len(created) == 6
    assert all(f.id for f in created)
    stored = FixtureRepository().list_by_season(db_conn, season.id)
    assert [f.id for f in stored] == [f.id for f in created]
    assert Counter(f.round_number for f in stored) == {1: 2, 2: 2, 3: 2}
    assert all(f.status == FixtureStatus.SCHEDULED for f in stored)


def test_generate_same_leg_twice_raises(db_conn, service, season, teams):
    service.generate_leg(db_conn, season.id, 1)
    with pytest.raises(DuplicateLegError) as exc_info:
        service.generate_leg(db_conn, season.id, 1)
    assert exc_info.value.season_id == season.id
    assert len(FixtureRepository().list_by_season(db_conn, season.id)) == 6


def test_second_leg_before_first_completes_raises(db_conn, service, season, teams):
    first = service.generate_leg(db_conn, season.id, 1)
    _complete_leg(db_conn, service, first[:-1])
    assert service.can_generate_second_leg(db_conn, season.id) is False
    with pytest.raises(PreconditionError, match="first leg incomplete"):
        service.generate_leg(db_conn, season.id, 2)
    assert len(FixtureRepository().list_by_season(db_conn, season.id)) == 6


def test_second_leg_after_first_completes(db_conn, service, season, teams):
    first = service.generate_leg(db_conn, season.id, 1)
    _complete_leg(db_conn, service, first)
    assert service.can_generate_second_leg(db_conn, season.id) is True
    second = service.generate_leg(db_conn, season.id, 2)
    assert len(second) == 6
    assert {(f.home_id, f.away_id) for f in second} == {(f.away_id, f.home_id) for f in first}
    assert {f.round_number for f in second} == {4, 5, 6}
    assert service.can_generate_second_leg(db_conn, season.id) is False


def test_generate_next_leg_picks_leg(db_conn, service, season, teams):
    first = service.generate_next_leg(db_conn, season.id)
    assert {f.leg for f in first} == {1}
    _complete_leg(db_conn, service, first)
    second = service.generate_next_leg(db_conn, season.id)
    assert {f.leg for f in second} == {2}


def test_generate_with_one_team_raises(db_conn, service, season):
    service.add_team(db_conn, season.id, "Lonely FC")
    with pytest.raises(PreconditionError):
        service.generate_leg(db_conn, season.id, 1)
    assert FixtureRepository().list_by_season(db_conn, season.id) == []


def test_roster_frozen_after_generation(db_conn, service, season, teams):
    service.generate_leg(db_conn, season.id, 1)
    with pytest.raises(PreconditionError):
        service.add_team(db_conn, season.id, "Latecomers")
    with pytest.raises(PreconditionError):
        service.remove_team(db_conn, season.id, teams[0].id)


def test_remove_team_before_fixtures(db_conn, service, season, teams):
    service.remove_team(db_conn, season.id, teams[1].id)
    remaining = TeamRepository().list_by_season(db_conn, season.id)
    assert [t.name for t in remaining] == ["Ajax", "Celtic", "Dynamo"]


def test_remove_team_of_another_season(db_conn, service, league, season, teams):
    other = SeasonRepository().create(db_conn, league.id, "2026", START, END)
    outsider = service.add_team(db_conn, other.id, "Elfsborg")
    with pytest.raises(TeamNotFoundError):
        service.remove_team(db_conn, season.id, outsider.id)
    assert [t.id for t in TeamRepository().list_by_season(db_conn, other.id)] == [outsider.id]
    assert len(TeamRepository().list_by_season(db_conn, season.id)) == 4


def test_remove_team_of_scheduled_season_from_other_season(db_conn, service, league, season, teams):
    other = SeasonRepository().create(db_conn, league.id, "2026", START, END)
    service.generate_leg(db_conn, season.id, 1)
    with pytest.raises(TeamNotFoundError):
        service.remove_team(db_conn, other.id, teams[0].id)
    assert len(TeamRepository().list_by_season(db_conn, season.id)) == 4


def test_remove_unknown_team(db_conn, service, season, teams):
    with pytest.raises(TeamNotFoundError):
        service.remove_team(db_conn, season.id, "does-not-exist")


def test_new_season_deactivates_previous(db_conn, league, season):
    repo = SeasonRepository()
    newer = repo.create(db_conn, league.id, "2026", START, END)
    assert repo.get(db_conn, season.id).is_active is False
    assert repo.get(db_conn, newer.id).is_active is True
    assert repo.get_active_for_league(db_conn, league.id).id == newer.id
    assert [s.id for s in repo.list_by_league(db_conn, league.id)] == [newer.id, season.id]


def test_other_league_seasons_stay_active(db_conn, league, season):
    other_league = LeagueRepository().create(db_conn, "Midweek League", "organizer-1")
    SeasonRepository().create(db_conn, other_league.id, "2025", START, END)
    assert SeasonRepository().get(db_conn, season.id).is_active is True


def test_list_leagues_by_organizer(db_conn, league):
    repo = LeagueRepository()
    repo.create(db_conn, "Someone Else's League", "organizer-2")
    mine = repo.list_by_organizer(db_conn, "organizer-1")
    assert [lg.id for lg in mine] == [league.id]
    assert repo.list_by_organizer(db_conn, "nobody") == []


def test_record_result_upserts_and_completes(db_conn, service, season, teams):
    fixture = service.generate_leg(db_conn, season.id, 1)[0]
    service.record_result(db_conn, fixture.id, 2, 2)
    updated = service.record_result(db_conn, fixture.id, 3, 1)
    assert updated.status == FixtureStatus.COMPLETED
    stored = FixtureRepository().get(db_conn, fixture.id)
    assert stored.status == FixtureStatus.COMPLETED
    assert (stored.result.home_goals, stored.result.away_goals) == (3, 1)
    assert ResultRepository().get_by_fixture(db_conn, fixture.id).home_goals == 3
    count = db_conn.execute("SELECT COUNT(*) FROM results WHERE fixture_id = ?", (fixture.id,)).fetchone()[0]
    assert count == 1


def test_record_result_rejects_negative_goals(db_conn, service, season, teams):
    fixture = service.generate_leg(db_conn, season.id, 1)[0]
    with pytest.raises(ValueError):
        service.record_result(db_conn, fixture.id, -1, 0)
    assert FixtureRepository().get(db_conn, fixture.id).status == FixtureStatus.SCHEDULED


def test_record_result_unknown_fixture(db_conn, service):
    with pytest.raises(FixtureNotFoundError):
        service.record_result(db_conn, "missing", 1, 0)


def test_set_live(db_conn, service, season, teams):
    fixture = service.generate_leg(db_conn, season.id, 1)[0]
    assert service.set_live(db_conn, fixture.id).status == FixtureStatus.LIVE
    service.record_result(db_conn, fixture.id, 1, 0)
    with pytest.raises(PreconditionError):
        service.set_live(db_conn, fixture.id)


def test_standings_recomputed_from_results(db_conn, service, season, teams):
    first = service.generate_leg(db_conn, season.id, 1)
    home_win = first[0]
    service.record_result(db_conn, home_win.id, 2, 0)
    table = service.standings(db_conn, season.id)
    assert len(table) == 4
    assert table[0].entrant_id == home_win.home_id
    assert table[0].points == 3
    assert sum(r.played for r in table) == 2
    # Overwriting the result changes the table, nothing accumulates
    service.record_result(db_conn, home_win.id, 0, 1)
    table = service.standings(db_conn, season.id)
    assert table[0].entrant_id == home_win.away_id
    assert sum(r.played for r in table) == 2


def test_unknown_season(db_conn, service):
    with pytest.raises(SeasonNotFoundError):
        service.generate_leg(db_conn, "nope", 1)
    with pytest.raises(SeasonNotFoundError):
        service.standings(db_conn, "nope")


def test_season_overview(db_conn, service, season, teams):
    first = service.generate_leg(db_conn, season.id, 1)
    service.record_result(db_conn, first[0].id, 1, 1)
    overview = service.season_overview(db_conn, season.id, now=START)
    assert overview["current_round"] == 1
    assert len(overview["today"]) == 2
    assert overview["today"][0]["home_team"] in {"Ajax", "Benfica", "Celtic", "Dynamo"}
    assert len(overview["completed"]) == 1
    assert len(overview["upcoming"]) == 4
    assert [r["position"] for r in overview["standings"]] == [1, 2, 3, 4]
    assert overview["standings"][0]["zone"] == "champion"


def test_public_overview(db_conn, service, league, season, teams):
    overview = service.public_overview(db_conn, league.public_link_id, now=START)
    assert overview["league"]["id"] == league.id
    assert overview["season"]["id"] == season.id
    with pytest.raises(LeagueNotFoundError):
        service.public_overview(db_conn, "not-a-link")
