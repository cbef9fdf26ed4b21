"""Workout, exercise and set records plus the on-disk collection codec.

The whole collection is stored as one JSON array::

    [{"id": "...", "name": "...", "date": "2024-05-01T18:30:00.000Z",
      "exercises": [{"id": "...", "name": "...", "imageUri": "file:///...",
                     "sets": [{"weight": 60, "reps": 8}]}]}]

``imageUri`` is omitted when an exercise has no picture.
"""
from __future__ import annotations

import secrets
import time
from datetime import datetime, timezone
from typing import Annotated, Iterable

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


class CollectionDecodeError(ValueError):
    """Raised when a stored collection is not valid JSON of the expected shape."""


def _check_iso_timestamp(value: str) -> str:
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as err:
        raise ValueError(f"date must be an ISO-8601 timestamp, got {value!r}") from err
    return value


# Kept verbatim as a string; only the format is checked.
IsoTimestamp = Annotated[str, AfterValidator(_check_iso_timestamp)]


def _check_utf8(value: str) -> str:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as err:
        raise ValueError("text must be valid UTF-8 (lone surrogates are not allowed)") from err
    return value


# Any string that ends up in the stored JSON.
Text = Annotated[str, AfterValidator(_check_utf8)]


class WorkoutSet(BaseModel):
    """One performed set: weight in kilograms and repetition count."""

    weight: float = Field(default=0, ge=0, allow_inf_nan=False)
    reps: int = Field(default=0, ge=0)


class Exercise(BaseModel):
    """A named movement inside a workout."""

    model_config = ConfigDict(populate_by_name=True)

    id: Text
    name: Text
    image_uri: Text | None = Field(default=None, alias="imageUri")
    sets: list[WorkoutSet] = Field(default_factory=list)


class Workout(BaseModel):
    """A named, dated list of exercises."""

    id: Text
    name: Text
    date: IsoTimestamp
    exercises: list[Exercise] = Field(default_factory=list)


_collection_adapter = TypeAdapter(list[Workout])


def duplicate_exercise_ids(exercises: Iterable[Exercise]) -> list[str]:
    """Return exercise ids that occur more than once, in first-seen order."""

    seen: set[str] = set()
    duplicates: list[str] = []
    for exercise in exercises:
        if exercise.id in seen and exercise.id not in duplicates:
            duplicates.append(exercise.id)
        seen.add(exercise.id)
    return duplicates


def generate_id() -> str:
    """Return a new record id: epoch milliseconds plus a random suffix."""

    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def utc_timestamp(moment: datetime | None = None) -> str:
    """Format ``moment`` (default: now) like ``2024-05-01T18:30:00.000Z``."""

    moment = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def new_exercise(name: str = "", image_uri: str | None = None) -> Exercise:
    """Create an exercise with a fresh id and a single empty set."""

    return Exercise(id=generate_id(), name=name, image_uri=image_uri, sets=[WorkoutSet()])


def new_workout(
    name: str,
    exercises: Iterable[Exercise] = (),
    date: str | None = None,
) -> Workout:
    """Create a workout with a fresh id, dated now unless ``date`` is given."""

    return Workout(
        id=generate_id(),
        name=name,
        date=date or utc_timestamp(),
        exercises=list(exercises),
    )


def dump_collection(workouts: Iterable[Workout]) -> str:
    """Serialise workouts to the stored JSON array."""

    return _collection_adapter.dump_json(list(workouts), by_alias=True, exclude_none=True).decode("utf-8")


def load_collection(raw: str | None) -> list[Workout]:
    """Parse a stored JSON array; a missing or blank value is an empty collection."""

    if raw is None or not raw.strip():
        return []
    try:
        return _collection_adapter.validate_json(raw)
    except ValidationError as err:
        raise CollectionDecodeError(
            f"Stored workout collection is malformed ({err.error_count()} errors)"
        ) from err
