"""Name search over an already loaded list of workouts."""
from __future__ import annotations

from typing import Iterable

from workout_log.models.records import Workout


def filter_by_name(workouts: Iterable[Workout], query: str) -> list[Workout]:
    """Return workouts whose name contains ``query``, ignoring case.

    The result is a new list in the original order; the input is left
    untouched. An empty query matches every workout.
    """
    needle = query.casefold()
    return [workout for workout in workouts if needle in workout.name.casefold()]
