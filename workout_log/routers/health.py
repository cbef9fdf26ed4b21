"""Router exposing basic system endpoints."""
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from workout_log.services.workout_store import WorkoutStore, get_workout_store


logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/status")
async def get_status(store: Annotated[WorkoutStore, Depends(get_workout_store)]) -> dict[str, str]:
    """Return a minimal status payload naming the active storage medium."""
    return {"status": "online", "storage_backend": store.medium.name}


@router.get("/storage")
async def get_storage_status(store: Annotated[WorkoutStore, Depends(get_workout_store)]) -> dict:
    """
    Check that the stored workout collection can be read and decoded.

    Returns:
        dict: {
            "storage_backend": medium name,
            "storage_key": key holding the collection,
            "workout_count": int
        }

    An unreadable collection surfaces as 503 through the app's
    StorageUnavailable handler.
    """
    workouts = await store.list_workouts()
    logger.debug("Storage check read %d workouts", len(workouts))
    return {
        "storage_backend": store.medium.name,
        "storage_key": store.key,
        "workout_count": len(workouts),
    }
