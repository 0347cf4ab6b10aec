"""
Deterministic double round-robin fixture generation for a season.

Leg 1 uses the circle method: fix the first slot, rotate the others each round.
Every pair of entrants meets exactly once per leg; season length is N-1 rounds
(N even) or N rounds (N odd). Leg 2 mirrors leg 1 with home/away swapped and
continues the round numbering and the calendar.

BYE handling: when the number of entrants is odd, a virtual BYE takes the fixed
slot. Each round the entrant paired with BYE sits out and that pairing is not
emitted; every real entrant rotates.

Home/away alternation (canonical; changing it changes every persisted calendar):
  - pair 0 holds the fixed entrant, who hosts in odd rounds and travels in even rounds;
  - pair i > 0: slot i hosts when i is odd, otherwise the opposite slot hosts.
Over one leg each entrant's home and away counts differ by at most one (odd
counts: exactly equal).

Dates: the season window is cut into 2 * rounds_per_leg equal intervals up
front, so leg 1 never collides with the (not yet generated) leg 2.
Same entrant ordering + same window => same calendar.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, Sequence

from league_backend.errors import DuplicateLegError, PreconditionError, UnknownEntrantError
from league_backend.models import Entrant, Fixture, SeasonWindow

logger = logging.getLogger(__name__)

# Sentinel for bye when number of entrants is odd
BYE = "BYE"

LEGS = (1, 2)


def _slot_count(entrant_count: int) -> int:
    return entrant_count + (entrant_count % 2)


def rounds_per_leg(entrant_count: int) -> int:
    """Rounds in one leg: N-1 for even N, N for odd N (one bye per round)."""
    if entrant_count < 2:
        return 0
    return _slot_count(entrant_count) - 1


def fixtures_per_leg(entrant_count: int) -> int:
    """Every unordered pair meets once per leg, regardless of parity."""
    return entrant_count * (entrant_count - 1) // 2


def circle_rounds(entrant_ids: Sequence[str]) -> list[list[tuple[str, str]]]:
    """
    Leg-1 pairings per round as (home_id, away_id), byes dropped.
    Index 0 of the returned list is round 1.
    """
    if len(entrant_ids) < 2:
        return []
    ids = list(entrant_ids)
    # Bye takes the fixed slot and is tracked by index, not by id
    bye_slot = 0 if len(ids) % 2 == 1 else None
    if bye_slot is not None:
        ids.insert(0, BYE)
    N = len(ids)  # N is even
    rounds: list[list[tuple[str, str]]] = []
    order = list(range(N))
    for r in range(1, N):
        pairs: list[tuple[str, str]] = []
        # Pair order[0] with order[N-1], order[1] with order[N-2], ...
        for i in range(N // 2):
            a, b = order[i], order[N - 1 - i]
            if bye_slot in (a, b):
                continue
            left, right = ids[a], ids[b]
            if i == 0:
                left_hosts = r % 2 == 1
            else:
                left_hosts = i % 2 == 1
            pairs.append((left, right) if left_hosts else (right, left))
        rounds.append(pairs)
        # Rotate: keep 0, then order[N-1], order[1], order[2], ..., order[N-2]
        order = [order[0]] + [order[N - 1]] + order[1 : N - 1]
    return rounds


def round_interval(window: SeasonWindow, entrant_count: int) -> timedelta:
    """Spacing between consecutive rounds; both legs share one window."""
    total_rounds = 2 * rounds_per_leg(entrant_count)
    if total_rounds == 0:
        return timedelta(0)
    return (window.end - window.start) / total_rounds


def round_kickoff(window: SeasonWindow, entrant_count: int, round_number: int) -> datetime:
    """Kickoff for a season-wide round number (leg 2 continues from leg 1)."""
    return window.start + (round_number - 1) * round_interval(window, entrant_count)


def assert_leg_not_generated(
    existing_fixtures: Iterable[Fixture] | None, leg_number: int, season_id: str | None = None
) -> None:
    """Raise DuplicateLegError if fixtures for leg_number are already present."""
    if not existing_fixtures:
        return
    count = sum(1 for f in existing_fixtures if f.leg == leg_number)
    if count:
        raise DuplicateLegError(
            f"Leg {leg_number} already has {count} fixtures; refusing to regenerate",
            season_id=season_id,
            leg_number=leg_number,
        )


def is_leg_complete(fixtures: Iterable[Fixture], entrant_count: int, leg_number: int = 1) -> bool:
    """
    True when every fixture of the leg exists, every round of the leg is
    present and every fixture is completed. Evaluated on the given snapshot.
    """
    leg_fixtures = [f for f in fixtures if f.leg == leg_number]
    if entrant_count < 2 or len(leg_fixtures) != fixtures_per_leg(entrant_count):
        return False
    pairs = {frozenset((f.home_id, f.away_id)) for f in leg_fixtures}
    if len(pairs) != len(leg_fixtures):
        return False
    per_leg = rounds_per_leg(entrant_count)
    offset = (leg_number - 1) * per_leg
    expected_rounds = set(range(offset + 1, offset + per_leg + 1))
    if {f.round_number for f in leg_fixtures} != expected_rounds:
        return False
    return all(f.is_completed for f in leg_fixtures)


def current_round(fixtures: Iterable[Fixture]) -> int | None:
    """Lowest round with an unfinished fixture; None if nothing is pending."""
    pending = [f.round_number for f in fixtures if not f.is_completed]
    return min(pending) if pending else None


def _validate_entrants(entrants: Sequence[Entrant], season_id: str, leg_number: int) -> None:
    if len(entrants) < 2:
        raise PreconditionError(
            f"Need at least 2 entrants to generate fixtures (got {len(entrants)})",
            season_id=season_id,
            leg_number=leg_number,
        )
    seen: set[str] = set()
    for e in entrants:
        if e.id in seen:
            raise PreconditionError(
                f"Duplicate entrant id: {e.id}",
                season_id=season_id,
                leg_number=leg_number,
                entrant_id=e.id,
            )
        seen.add(e.id)


def _first_leg(entrants: Sequence[Entrant], window: SeasonWindow, season_id: str) -> list[Fixture]:
    n = len(entrants)
    fixtures: list[Fixture] = []
    for round_number, pairs in enumerate(circle_rounds([e.id for e in entrants]), start=1):
        kickoff = round_kickoff(window, n, round_number)
        for home_id, away_id in pairs:
            fixtures.append(
                Fixture(
                    season_id=season_id,
                    home_id=home_id,
                    away_id=away_id,
                    kickoff=kickoff,
                    round_number=round_number,
                    leg=1,
                )
            )
    return fixtures


def _second_leg(
    entrants: Sequence[Entrant],
    window: SeasonWindow,
    season_id: str,
    previous_leg_fixtures: Sequence[Fixture] | None,
) -> list[Fixture]:
    n = len(entrants)
    first = [f for f in (previous_leg_fixtures or []) if f.leg == 1]
    roster = {e.id for e in entrants}
    for f in first:
        for entrant_id in (f.home_id, f.away_id):
            if entrant_id not in roster:
                raise UnknownEntrantError(
                    f"First-leg fixture references unknown entrant {entrant_id}",
                    season_id=season_id,
                    leg_number=2,
                    entrant_id=entrant_id,
                )
    if not is_leg_complete(first, n, leg_number=1):
        raise PreconditionError("first leg incomplete", season_id=season_id, leg_number=2)
    offset = rounds_per_leg(n)
    # Stable sort keeps the first leg's slot order within a round
    ordered = sorted(first, key=lambda f: f.round_number)
    return [
        Fixture(
            season_id=season_id,
            home_id=f.away_id,
            away_id=f.home_id,
            kickoff=round_kickoff(window, n, offset + f.round_number),
            round_number=offset + f.round_number,
            leg=2,
        )
        for f in ordered
    ]


def generate_leg(
    entrants: Sequence[Entrant],
    window: SeasonWindow,
    leg_number: int,
    previous_leg_fixtures: Sequence[Fixture] | None = None,
    *,
    season_id: str,
    existing_fixtures: Sequence[Fixture] | None = None,
) -> list[Fixture]:
    """
    Return the fixtures of one leg, ordered by round then slot. Pure: nothing is
    persisted and ids are left unset. All-or-nothing: raises before returning
    anything if a precondition fails.

    leg_number 2 requires the complete, fully completed leg-1 fixture set in
    previous_leg_fixtures. existing_fixtures (the persisted set for the
    season) makes a second generation of the same leg fail with DuplicateLegError.
    """
    if leg_number not in LEGS:
        raise PreconditionError(
            f"Leg must be one of {LEGS}, got {leg_number}",
            season_id=season_id,
            leg_number=leg_number,
        )
    _validate_entrants(entrants, season_id, leg_number)
    assert_leg_not_generated(existing_fixtures, leg_number, season_id)
    if leg_number == 1:
        fixtures = _first_leg(entrants, window, season_id)
    else:
        fixtures = _second_leg(entrants, window, season_id, previous_leg_fixtures)
    logger.info(
        "Generated leg %d for season %s: %d fixtures over %d rounds",
        leg_number, season_id, len(fixtures), rounds_per_leg(len(entrants)),
    )
    return fixtures
