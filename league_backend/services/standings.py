"""
League table from recorded results.
Recomputed from fixtures + results on every call; no running table is kept.

Three points for a win, one for a draw. Ranking: points, then goal difference,
then goals for; rows still level keep roster (registration) order. Positions
are 1..N and never shared.
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from league_backend.errors import PreconditionError, UnknownEntrantError
from league_backend.models import Entrant, Fixture, Result, StandingsRow

logger = logging.getLogger(__name__)

POINTS_WIN = 3
POINTS_DRAW = 1

# Zone bands for table highlighting: (zone, first position, last position)
TOP_ZONES: list[tuple[str, int, int]] = [
    ("champion", 1, 1),
    ("champions_league", 2, 4),
    ("europa_league", 5, 5),
]
RELEGATION_SPOTS = 3


def _apply(row: StandingsRow, scored: int, conceded: int) -> None:
    row.played += 1
    row.goals_for += scored
    row.goals_against += conceded
    if scored > conceded:
        row.won += 1
    elif scored < conceded:
        row.lost += 1
    else:
        row.drawn += 1
    row.points = POINTS_WIN * row.won + POINTS_DRAW * row.drawn
    row.goal_difference = row.goals_for - row.goals_against


def _ranking_key(row: StandingsRow) -> tuple[int, int, int]:
    return (-row.points, -row.goal_difference, -row.goals_for)


def compute_standings(
    entrants: Sequence[Entrant],
    results: Iterable[tuple[Fixture, Result]],
) -> list[StandingsRow]:
    """
    Ranked table for entrants given (fixture, result) pairs.
    Only completed fixtures count. A fixture naming an entrant missing from the
    roster raises UnknownEntrantError; nothing is skipped. Each fixture counts
    at most once.
    """
    rows: dict[str, StandingsRow] = {e.id: StandingsRow(entrant_id=e.id, team=e.name) for e in entrants}
    seen: set[str] = set()
    for fixture, result in results:
        if not fixture.is_completed:
            continue
        if fixture.id is not None and result.fixture_id is not None and result.fixture_id != fixture.id:
            raise PreconditionError(
                f"Result for fixture {result.fixture_id} paired with fixture {fixture.id}",
                season_id=fixture.season_id,
                leg_number=fixture.leg,
            )
        fixture_id = fixture.id or result.fixture_id
        if fixture_id is not None:
            if fixture_id in seen:
                raise PreconditionError(
                    f"More than one result for fixture {fixture_id}",
                    season_id=fixture.season_id,
                    leg_number=fixture.leg,
                )
            seen.add(fixture_id)
        for entrant_id in (fixture.home_id, fixture.away_id):
            if entrant_id not in rows:
                raise UnknownEntrantError(
                    f"Result references unknown entrant {entrant_id}",
                    season_id=fixture.season_id,
                    leg_number=fixture.leg,
                    entrant_id=entrant_id,
                )
        _apply(rows[fixture.home_id], result.home_goals, result.away_goals)
        _apply(rows[fixture.away_id], result.away_goals, result.home_goals)
    # sorted() is stable: full ties keep roster order
    table = sorted(rows.values(), key=_ranking_key)
    for position, row in enumerate(table, start=1):
        row.position = position
    logger.debug("Computed standings for %d entrants", len(table))
    return table


def classify_zone(position: int, total: int) -> str | None:
    """Highlight band for a table position; top bands win over relegation."""
    for zone, first, last in TOP_ZONES:
        if first <= position <= last:
            return zone
    if position > total - RELEGATION_SPOTS:
        return "relegation"
    return None


def standings_to_dicts(table: Sequence[StandingsRow]) -> list[dict]:
    """Rows as dicts with their zone, ready for rendering."""
    total = len(table)
    out = []
    for row in table:
        d = row.to_dict()
        d["zone"] = classify_zone(row.position, total)
        out.append(d)
    return out
