"""Pydantic models describing API payloads."""
from pydantic import BaseModel, ConfigDict, Field, field_validator

from workout_log.models.records import (
    Exercise,
    IsoTimestamp,
    Text,
    Workout,
    WorkoutSet,
    duplicate_exercise_ids,
    new_exercise,
)


class ExerciseCreate(BaseModel):
    """Schema for adding an exercise; the server assigns the id."""

    model_config = ConfigDict(populate_by_name=True)

    name: Text = ""
    image_uri: Text | None = Field(default=None, alias="imageUri")
    sets: list[WorkoutSet] | None = Field(
        default=None,
        description="Initial sets; a single empty set when omitted.",
    )

    def to_exercise(self) -> Exercise:
        exercise = new_exercise(self.name, self.image_uri)
        if self.sets is not None:
            exercise = exercise.model_copy(update={"sets": list(self.sets)})
        return exercise


class WorkoutCreate(BaseModel):
    """Schema for creating a workout; id (and date, if omitted) are generated."""

    name: Text = Field(min_length=1)
    date: IsoTimestamp | None = Field(default=None, description="ISO-8601 timestamp, defaults to now")
    exercises: list[ExerciseCreate] = []


class WorkoutReplace(BaseModel):
    """Full workout body for a wholesale update; the id comes from the path."""

    name: Text = Field(min_length=1)
    date: IsoTimestamp
    exercises: list[Exercise] = []

    @field_validator("exercises")
    @classmethod
    def validate_unique_exercise_ids(cls, value: list[Exercise]) -> list[Exercise]:
        duplicates = duplicate_exercise_ids(value)
        if duplicates:
            raise ValueError(f"exercise ids must be unique within a workout: {', '.join(duplicates)}")
        return value

    def to_workout(self, workout_id: str) -> Workout:
        return Workout(id=workout_id, name=self.name, date=self.date, exercises=self.exercises)


class WorkoutListResponse(BaseModel):
    """Schema for the workout list endpoint."""

    count: int
    query: str | None = None
    workouts: list[Workout]
