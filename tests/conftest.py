"""Pytest configuration for global fixtures and logging setup."""
from __future__ import annotations

import os
import tempfile
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

os.environ["STORAGE_BACKEND"] = "memory"
os.environ["LOG_DIR"] = os.environ.get("LOG_DIR") or os.path.join(tempfile.gettempdir(), "workout_log_test_logs")

from workout_log.logging_config import configure_logging

configure_logging()

from workout_log.main import app
from workout_log.models.records import Exercise, Workout, WorkoutSet
from workout_log.services.storage_medium import MemoryStorageMedium
from workout_log.services.workout_store import WorkoutStore, get_workout_store


@pytest.fixture
def medium() -> MemoryStorageMedium:
    """Empty in-memory medium (first-run state)."""

    return MemoryStorageMedium()


@pytest.fixture
def store(medium: MemoryStorageMedium) -> WorkoutStore:
    """Workout store backed by the in-memory medium."""

    return WorkoutStore(medium)


@pytest.fixture
def test_client(store: WorkoutStore) -> Iterator[TestClient]:
    """Provide a FastAPI test client wired to the test store."""

    app.dependency_overrides[get_workout_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_workout_store, None)


@pytest.fixture
def leg_day() -> Workout:
    """Workout with two exercises, the first holding three distinct sets."""

    return Workout(
        id="1714588200000-aaaa0001",
        name="Leg Day",
        date="2024-05-01T18:30:00.000Z",
        exercises=[
            Exercise(
                id="ex-squat",
                name="Squat",
                image_uri="file:///photos/squat.jpg",
                sets=[
                    WorkoutSet(weight=60, reps=10),
                    WorkoutSet(weight=80, reps=8),
                    WorkoutSet(weight=100, reps=5),
                ],
            ),
            Exercise(id="ex-lunge", name="Lunge", sets=[WorkoutSet(weight=20, reps=12)]),
        ],
    )


@pytest.fixture
def arm_day() -> Workout:
    return Workout(
        id="1714674600000-bbbb0002",
        name="Arm day",
        date="2024-05-02T18:30:00.000Z",
        exercises=[Exercise(id="ex-curl", name="Curl", sets=[WorkoutSet(weight=12.5, reps=12)])],
    )
