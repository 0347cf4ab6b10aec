"""
Print a fixture calendar for a list of team names, without touching the DB.
Leg 2 is previewed by treating leg 1 as played.
"""
from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

# Run from project root: python -m league_backend.run_schedule
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from league_backend.errors import LeagueEngineError
from league_backend.models import Entrant, Fixture, FixtureStatus, SeasonWindow
from league_backend.services.fixture_views import group_by_round
from league_backend.services.scheduling import generate_leg

PREVIEW_SEASON_ID = "preview"


def _print_rounds(fixtures: list[Fixture], names: dict[str, str]) -> None:
    for round_number, matches in group_by_round(fixtures).items():
        kickoff = matches[0].kickoff.strftime("%Y-%m-%d %H:%M")
        print(f"  Round {round_number:>2}  ({kickoff})")
        for f in matches:
            print(f"    {names[f.home_id]:>20}  vs  {names[f.away_id]}")


def run(teams: list[str], start: date, end: date, legs: int = 2) -> None:
    entrants = [Entrant(id=f"T{i + 1}", name=name) for i, name in enumerate(teams)]
    names = {e.id: e.name for e in entrants}
    window = SeasonWindow(start, end)
    first = generate_leg(entrants, window, 1, season_id=PREVIEW_SEASON_ID)
    print(f"\n  Leg 1: {len(first)} fixtures")
    print("  " + "-" * 56)
    _print_rounds(first, names)
    if legs < 2:
        return
    played = [replace(f, status=FixtureStatus.COMPLETED.value) for f in first]
    second = generate_leg(entrants, window, 2, played, season_id=PREVIEW_SEASON_ID)
    print(f"\n  Leg 2: {len(second)} fixtures")
    print("  " + "-" * 56)
    _print_rounds(second, names)


def main():
    parser = argparse.ArgumentParser(description="Preview a double round-robin calendar.")
    parser.add_argument("teams", nargs="+", help="Team names in registration order")
    parser.add_argument("--start", type=date.fromisoformat, required=True, help="Season start (YYYY-MM-DD)")
    parser.add_argument("--end", type=date.fromisoformat, required=True, help="Season end (YYYY-MM-DD)")
    parser.add_argument("--legs", type=int, choices=(1, 2), default=2, help="Legs to preview")
    args = parser.parse_args()
    try:
        run(args.teams, args.start, args.end, legs=args.legs)
    except LeagueEngineError as e:
        parser.exit(2, f"error: {e}\n")


if __name__ == "__main__":
    main()
