"""Print the stored workouts, optionally filtered by name."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from workout_log.logging_config import configure_logging
from workout_log.models.records import Workout, dump_collection
from workout_log.services.search import filter_by_name
from workout_log.services.workout_store import StorageUnavailable, get_workout_store


logger = logging.getLogger("scripts.list_workouts")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="List logged workouts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Every workout, oldest first
  python scripts/list_workouts.py

  # Only workouts whose name contains "leg" (any case)
  python scripts/list_workouts.py --query leg

  # Raw stored JSON
  python scripts/list_workouts.py --json
        """
    )
    parser.add_argument(
        "--query",
        type=str,
        default="",
        help="Case-insensitive name filter"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the matching workouts in the stored JSON format"
    )
    return parser.parse_args(argv)


def format_workout(workout: Workout) -> str:
    """Render a workout as a short human-readable block."""
    lines = [f"{workout.name} ({workout.date}) [{workout.id}]"]
    for exercise in workout.exercises:
        lines.append(f"  {exercise.name or '(unnamed exercise)'}")
        for number, workout_set in enumerate(exercise.sets, start=1):
            lines.append(f"    Set {number}: {workout_set.weight:g}kg x {workout_set.reps} reps")
    return "\n".join(lines)


async def run(args: argparse.Namespace) -> int:
    store = get_workout_store()
    try:
        workouts = filter_by_name(await store.list_workouts(), args.query)
    except StorageUnavailable as e:
        logger.error("Cannot read workouts: %s", e)
        return 1

    if args.json:
        print(dump_collection(workouts))
    elif not workouts:
        print("No workouts found")
    else:
        print("\n\n".join(format_workout(w) for w in workouts))
    return 0


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    return asyncio.run(run(parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
