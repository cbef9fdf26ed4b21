"""Tests for the workout records and the stored collection format."""
import json
import re
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from workout_log.models.records import (
    CollectionDecodeError,
    Exercise,
    Workout,
    WorkoutSet,
    dump_collection,
    duplicate_exercise_ids,
    generate_id,
    load_collection,
    new_exercise,
    new_workout,
    utc_timestamp,
)


class TestFactories:
    """Freshly created records."""

    def test_new_exercise_has_one_empty_set(self):
        exercise = new_exercise("Bench Press")

        assert exercise.name == "Bench Press"
        assert exercise.image_uri is None
        assert exercise.sets == [WorkoutSet(weight=0, reps=0)]

    def test_new_exercise_keeps_image_uri_verbatim(self):
        exercise = new_exercise("Row", image_uri="content://media/external/images/42")
        assert exercise.image_uri == "content://media/external/images/42"

    def test_new_workout_defaults_date_to_now(self):
        before = datetime.now(timezone.utc).replace(microsecond=0)
        workout = new_workout("Push")

        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", workout.date)
        parsed = datetime.fromisoformat(workout.date.replace("Z", "+00:00"))
        assert parsed >= before
        assert workout.exercises == []

    def test_new_workout_uses_given_date_and_exercises(self):
        squat = new_exercise("Squat")
        workout = new_workout("Legs", exercises=[squat], date="2024-01-15T07:00:00.000Z")

        assert workout.date == "2024-01-15T07:00:00.000Z"
        assert workout.exercises == [squat]

    def test_generated_ids_are_unique(self):
        ids = {generate_id() for _ in range(500)}
        assert len(ids) == 500

    def test_utc_timestamp_formats_milliseconds(self):
        moment = datetime(2024, 5, 1, 18, 30, 0, 123456, tzinfo=timezone.utc)
        assert utc_timestamp(moment) == "2024-05-01T18:30:00.123Z"


class TestValidation:
    """Field constraints on the records."""

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            WorkoutSet(weight=-1, reps=5)

    def test_negative_reps_rejected(self):
        with pytest.raises(ValidationError):
            WorkoutSet(weight=10, reps=-3)

    def test_non_iso_date_rejected(self):
        with pytest.raises(ValidationError):
            Workout(id="w1", name="Bad", date="yesterday")

    def test_offset_date_accepted(self):
        workout = Workout(id="w1", name="Ok", date="2024-05-01T20:30:00+02:00")
        assert workout.date == "2024-05-01T20:30:00+02:00"

    @pytest.mark.parametrize("weight", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_weight_rejected(self, weight):
        with pytest.raises(ValidationError):
            WorkoutSet(weight=weight, reps=1)

    def test_infinity_literal_in_stored_json_rejected(self):
        with pytest.raises(ValidationError):
            WorkoutSet.model_validate_json('{"weight": Infinity, "reps": 1}')

    @pytest.mark.parametrize(
        "fields",
        [
            {"name": "\ud800"},
            {"id": "w\udfff"},
        ],
    )
    def test_lone_surrogate_in_workout_text_rejected(self, fields):
        values = {"id": "w1", "name": "Leg Day", "date": "2024-05-01T18:30:00.000Z", **fields}
        with pytest.raises(ValidationError):
            Workout(**values)

    def test_lone_surrogate_in_image_uri_rejected(self):
        with pytest.raises(ValidationError):
            Exercise(id="e1", name="Squat", imageUri="file:///\ud83d.jpg")

    def test_non_ascii_text_accepted(self):
        workout = Workout(id="w1", name="Beinträning 💪", date="2024-05-01T18:30:00.000Z")
        assert load_collection(dump_collection([workout])) == [workout]

    def test_duplicate_exercise_ids_listed_once_in_first_seen_order(self):
        exercises = [
            Exercise(id="b", name="B"),
            Exercise(id="a", name="A"),
            Exercise(id="b", name="B again"),
            Exercise(id="a", name="A again"),
            Exercise(id="b", name="B third"),
        ]
        assert duplicate_exercise_ids(exercises) == ["b", "a"]
        assert duplicate_exercise_ids(exercises[:2]) == []


class TestCollectionFormat:
    """Serialised shape of the whole collection."""

    def test_dump_uses_wire_field_names(self, leg_day):
        data = json.loads(dump_collection([leg_day]))

        assert data[0]["id"] == leg_day.id
        assert data[0]["date"] == "2024-05-01T18:30:00.000Z"
        squat = data[0]["exercises"][0]
        assert squat["imageUri"] == "file:///photos/squat.jpg"
        assert "image_uri" not in squat
        assert squat["sets"][1] == {"weight": 80, "reps": 8}

    def test_dump_omits_missing_image(self, leg_day):
        data = json.loads(dump_collection([leg_day]))
        assert "imageUri" not in data[0]["exercises"][1]

    def test_load_accepts_stored_shape(self):
        raw = json.dumps([
            {
                "id": "1700000000000",
                "name": "Pull",
                "date": "2023-11-14T22:13:20.000Z",
                "exercises": [
                    {"id": "1700000000001", "name": "Deadlift", "sets": [{"weight": 140, "reps": 3}]},
                ],
            }
        ])

        workouts = load_collection(raw)

        assert len(workouts) == 1
        assert workouts[0].exercises[0].sets == [WorkoutSet(weight=140, reps=3)]
        assert workouts[0].exercises[0].image_uri is None

    def test_load_preserves_order(self, leg_day, arm_day):
        assert load_collection(dump_collection([arm_day, leg_day])) == [arm_day, leg_day]

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_load_missing_value_is_empty(self, raw):
        assert load_collection(raw) == []

    def test_load_rejects_invalid_json(self):
        with pytest.raises(CollectionDecodeError):
            load_collection("[{not json")

    def test_load_rejects_wrong_shape(self):
        with pytest.raises(CollectionDecodeError):
            load_collection(json.dumps({"workouts": []}))

    def test_load_rejects_missing_fields(self):
        with pytest.raises(CollectionDecodeError):
            load_collection(json.dumps([{"id": "w1", "name": "No date"}]))

    def test_exercise_accepts_either_field_name(self):
        by_alias = Exercise.model_validate({"id": "e", "name": "n", "imageUri": "x"})
        by_name = Exercise(id="e", name="n", image_uri="x")
        assert by_alias == by_name
