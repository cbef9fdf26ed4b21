"""CRUD operations over the persisted workout collection.

Every public coroutine is one complete cycle: read the whole collection from
the medium, apply a single change to a freshly built copy, and write the whole
collection back. Nothing is cached between calls, so a sequence of calls from
one caller always sees its own earlier writes. The store takes no locks; two
overlapping mutations race and the last write wins.

Outcomes:
    * ``True`` - the change was applied (or was a no-op success).
    * ``False`` - the referenced workout/exercise does not exist; nothing was
      written.
    * :class:`StorageUnavailable` - the medium failed or holds data that cannot
      be decoded. A mutation never writes after a failed read.
    * :class:`SetIndexError` - a set position is out of range.
    * :class:`DuplicateExerciseError` - a write would repeat an exercise id
      inside one workout; nothing is written.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Callable

from pydantic_core import PydanticSerializationError

from workout_log.config import get_settings
from workout_log.models.records import (
    CollectionDecodeError,
    Exercise,
    Workout,
    WorkoutSet,
    dump_collection,
    duplicate_exercise_ids,
    load_collection,
)
from workout_log.services.storage_medium import (
    StorageMedium,
    StorageMediumError,
    build_storage_medium,
)


logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "workouts"


class StorageUnavailable(Exception):
    """Raised when the collection cannot be read, decoded or written."""


class SetIndexError(IndexError):
    """Raised when a set position does not exist in the exercise."""


class DuplicateExerciseError(ValueError):
    """Raised when a write would give two exercises of one workout the same id."""


class WorkoutStore:
    """Workout collection stored as a single value in a key-value medium."""

    def __init__(self, medium: StorageMedium, key: str = DEFAULT_STORAGE_KEY) -> None:
        self.medium = medium
        self.key = key

    async def _load(self) -> list[Workout]:
        try:
            raw = await self.medium.get(self.key)
        except StorageMediumError as err:
            logger.exception("Failed to read workout collection")
            raise StorageUnavailable(f"Could not read workouts: {err}") from err

        try:
            return load_collection(raw)
        except CollectionDecodeError as err:
            # Refuse to treat unreadable data as empty; a later save would erase it.
            logger.error("Stored workout collection under %r could not be decoded: %s", self.key, err)
            raise StorageUnavailable(f"Stored workouts are unreadable: {err}") from err

    async def _save(self, workouts: list[Workout]) -> None:
        try:
            raw = dump_collection(workouts)
            # Never store a blob that the next read would reject.
            load_collection(raw)
        except (PydanticSerializationError, CollectionDecodeError) as err:
            logger.error("Refusing to write workout collection: %s", err)
            raise StorageUnavailable(f"Could not serialise workouts: {err}") from err
        try:
            await self.medium.set(self.key, raw)
        except StorageMediumError as err:
            logger.exception("Failed to write workout collection")
            raise StorageUnavailable(f"Could not save workouts: {err}") from err

    @staticmethod
    def _find(workouts: list[Workout], workout_id: str) -> int | None:
        for index, workout in enumerate(workouts):
            if workout.id == workout_id:
                return index
        return None

    async def _modify_exercise(
        self,
        workout_id: str,
        exercise_id: str,
        change: Callable[[list[WorkoutSet]], list[WorkoutSet]],
    ) -> bool:
        """Replace one exercise's sets with ``change(sets)`` and save."""

        workouts = await self._load()
        workout_index = self._find(workouts, workout_id)
        if workout_index is None:
            return False

        workout = workouts[workout_index]
        exercise_index = next(
            (i for i, exercise in enumerate(workout.exercises) if exercise.id == exercise_id),
            None,
        )
        if exercise_index is None:
            return False

        exercise = workout.exercises[exercise_index]
        exercises = list(workout.exercises)
        exercises[exercise_index] = exercise.model_copy(update={"sets": change(list(exercise.sets))})
        workouts[workout_index] = workout.model_copy(update={"exercises": exercises})
        await self._save(workouts)
        return True

    @staticmethod
    def _check_exercise_ids(workout: Workout) -> None:
        duplicates = duplicate_exercise_ids(workout.exercises)
        if duplicates:
            raise DuplicateExerciseError(
                f"Workout {workout.id} would contain duplicate exercise ids: {', '.join(duplicates)}"
            )

    @staticmethod
    def _check_set_index(sets: list[WorkoutSet], set_index: int) -> None:
        if not 0 <= set_index < len(sets):
            raise SetIndexError(f"Set index {set_index} out of range (exercise has {len(sets)} sets)")

    async def list_workouts(self) -> list[Workout]:
        """Return every workout in stored order; empty on first run."""

        return await self._load()

    async def get_workout(self, workout_id: str) -> Workout | None:
        """Return the first workout with ``workout_id``, if any."""

        workouts = await self._load()
        index = self._find(workouts, workout_id)
        return workouts[index] if index is not None else None

    async def create_workout(self, workout: Workout) -> bool:
        """Append ``workout`` to the collection.

        Ids are not checked for uniqueness; a duplicate id is stored as a
        second entry and later lookups resolve to the first one.
        """
        self._check_exercise_ids(workout)
        workouts = await self._load()
        workouts.append(workout.model_copy(deep=True))
        await self._save(workouts)
        logger.info("Created workout %s (%d total)", workout.id, len(workouts))
        return True

    async def delete_workout(self, workout_id: str) -> bool:
        """Remove every workout with ``workout_id``; unknown ids are a no-op."""

        workouts = await self._load()
        remaining = [w for w in workouts if w.id != workout_id]
        await self._save(remaining)
        logger.info("Deleted %d workout(s) with id %s", len(workouts) - len(remaining), workout_id)
        return True

    async def update_workout(self, workout: Workout) -> bool:
        """Replace the stored workout with the same id wholesale."""

        self._check_exercise_ids(workout)
        workouts = await self._load()
        index = self._find(workouts, workout.id)
        if index is None:
            logger.warning("Update skipped, workout %s not found", workout.id)
            return False
        workouts[index] = workout.model_copy(deep=True)
        await self._save(workouts)
        return True

    async def add_exercise(self, workout_id: str, exercise: Exercise) -> bool:
        """Append ``exercise`` to the end of a workout's exercises."""

        workouts = await self._load()
        index = self._find(workouts, workout_id)
        if index is None:
            return False
        workout = workouts[index].model_copy(
            update={"exercises": [*workouts[index].exercises, exercise.model_copy(deep=True)]}
        )
        self._check_exercise_ids(workout)
        workouts[index] = workout
        await self._save(workouts)
        return True

    async def delete_exercise(self, workout_id: str, exercise_id: str) -> bool:
        """Remove an exercise from a workout; ``False`` when the workout is missing."""

        workouts = await self._load()
        index = self._find(workouts, workout_id)
        if index is None:
            return False
        workout = workouts[index]
        workouts[index] = workout.model_copy(
            update={"exercises": [e for e in workout.exercises if e.id != exercise_id]}
        )
        await self._save(workouts)
        return True

    async def add_set(
        self,
        workout_id: str,
        exercise_id: str,
        workout_set: WorkoutSet | None = None,
    ) -> bool:
        """Append a set (zero weight and reps by default) to an exercise."""

        new_set = workout_set.model_copy() if workout_set else WorkoutSet()
        return await self._modify_exercise(workout_id, exercise_id, lambda sets: [*sets, new_set])

    async def update_set(
        self,
        workout_id: str,
        exercise_id: str,
        set_index: int,
        workout_set: WorkoutSet,
    ) -> bool:
        """Replace the set at ``set_index``."""

        def replace(sets: list[WorkoutSet]) -> list[WorkoutSet]:
            self._check_set_index(sets, set_index)
            sets[set_index] = workout_set.model_copy()
            return sets

        return await self._modify_exercise(workout_id, exercise_id, replace)

    async def delete_set(self, workout_id: str, exercise_id: str, set_index: int) -> bool:
        """Remove the set at ``set_index``; later sets move down one position.

        Positions are not identities. Compute ``set_index`` from a freshly
        loaded workout right before calling.
        """

        def remove(sets: list[WorkoutSet]) -> list[WorkoutSet]:
            self._check_set_index(sets, set_index)
            return sets[:set_index] + sets[set_index + 1:]

        return await self._modify_exercise(workout_id, exercise_id, remove)


@lru_cache()
def get_workout_store() -> WorkoutStore:
    """FastAPI dependency returning the store for the configured medium."""

    settings = get_settings()
    medium = build_storage_medium(settings)
    logger.info("Workout store using %s medium (key=%s)", medium.name, settings.storage_key)
    return WorkoutStore(medium, key=settings.storage_key)
