"""API endpoints for browsing, searching and editing workouts."""
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from workout_log.models.records import Exercise, Workout, WorkoutSet, new_workout
from workout_log.models.schemas import (
    ExerciseCreate,
    WorkoutCreate,
    WorkoutListResponse,
    WorkoutReplace,
)
from workout_log.services.search import filter_by_name
from workout_log.services.workout_store import (
    DuplicateExerciseError,
    SetIndexError,
    WorkoutStore,
    get_workout_store,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/workouts", tags=["workouts"])

Store = Annotated[WorkoutStore, Depends(get_workout_store)]


def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{what} not found")


@router.get("", response_model=WorkoutListResponse, response_model_exclude_none=True)
async def list_workouts(store: Store, q: str | None = None):
    """
    List all workouts in stored order.

    Args:
        q: Optional case-insensitive name filter

    Returns:
        WorkoutListResponse: count, the query and the matching workouts
    """
    workouts = await store.list_workouts()
    if q is not None:
        workouts = filter_by_name(workouts, q)
    return {"count": len(workouts), "query": q, "workouts": workouts}


@router.get("/{workout_id}", response_model=Workout, response_model_exclude_none=True)
async def get_workout(workout_id: str, store: Store):
    """Return a single workout by id."""
    workout = await store.get_workout(workout_id)
    if workout is None:
        raise _not_found("Workout")
    return workout


@router.post(
    "",
    response_model=Workout,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_workout(payload: WorkoutCreate, store: Store):
    """
    Create a workout with a generated id.

    Exercises given without sets start with a single empty set.
    """
    workout = new_workout(
        payload.name,
        exercises=[exercise.to_exercise() for exercise in payload.exercises],
        date=payload.date,
    )
    await store.create_workout(workout)
    logger.info("Created workout via API: id=%s, exercises=%d", workout.id, len(workout.exercises))
    return workout


@router.put("/{workout_id}", response_model=Workout, response_model_exclude_none=True)
async def replace_workout(workout_id: str, payload: WorkoutReplace, store: Store):
    """Replace a workout wholesale (name, date and every exercise)."""
    workout = payload.to_workout(workout_id)
    try:
        updated = await store.update_workout(workout)
    except DuplicateExerciseError as err:
        raise HTTPException(status_code=409, detail=str(err)) from err
    if not updated:
        raise _not_found("Workout")
    return workout


@router.delete("/{workout_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workout(workout_id: str, store: Store) -> Response:
    """Delete a workout; deleting an unknown id succeeds."""
    await store.delete_workout(workout_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{workout_id}/exercises",
    response_model=Exercise,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def add_exercise(workout_id: str, payload: ExerciseCreate, store: Store):
    """Append an exercise to a workout."""
    exercise = payload.to_exercise()
    try:
        added = await store.add_exercise(workout_id, exercise)
    except DuplicateExerciseError as err:
        raise HTTPException(status_code=409, detail=str(err)) from err
    if not added:
        raise _not_found("Workout")
    return exercise


@router.delete("/{workout_id}/exercises/{exercise_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_exercise(workout_id: str, exercise_id: str, store: Store) -> Response:
    """Remove an exercise from a workout."""
    if not await store.delete_exercise(workout_id, exercise_id):
        raise _not_found("Workout")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{workout_id}/exercises/{exercise_id}/sets",
    response_model=WorkoutSet,
    status_code=status.HTTP_201_CREATED,
)
async def add_set(
    workout_id: str,
    exercise_id: str,
    store: Store,
    workout_set: Annotated[WorkoutSet | None, Body()] = None,
):
    """Append a set to an exercise (an empty set when no body is sent)."""
    new_set = workout_set or WorkoutSet()
    if not await store.add_set(workout_id, exercise_id, new_set):
        raise _not_found("Workout or exercise")
    return new_set


@router.put("/{workout_id}/exercises/{exercise_id}/sets/{set_index}", response_model=WorkoutSet)
async def update_set(
    workout_id: str,
    exercise_id: str,
    set_index: int,
    workout_set: WorkoutSet,
    store: Store,
):
    """Replace the set at ``set_index``."""
    try:
        updated = await store.update_set(workout_id, exercise_id, set_index, workout_set)
    except SetIndexError as err:
        raise HTTPException(status_code=400, detail=str(err)) from err
    if not updated:
        raise _not_found("Workout or exercise")
    return workout_set


@router.delete(
    "/{workout_id}/exercises/{exercise_id}/sets/{set_index}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_set(workout_id: str, exercise_id: str, set_index: int, store: Store) -> Response:
    """
    Delete the set at ``set_index``; later sets shift down by one.

    Raises:
        HTTPException: 404 if the workout or exercise is missing, 400 if the index is out of range
    """
    try:
        deleted = await store.delete_set(workout_id, exercise_id, set_index)
    except SetIndexError as err:
        raise HTTPException(status_code=400, detail=str(err)) from err
    if not deleted:
        raise _not_found("Workout or exercise")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
