"""Tests for the list_workouts command-line script."""
from __future__ import annotations

import json

import pytest

from scripts import list_workouts
from workout_log.models.records import Workout, dump_collection
from workout_log.services.storage_medium import MemoryStorageMedium
from workout_log.services.workout_store import WorkoutStore


@pytest.fixture
def seeded_store(monkeypatch: pytest.MonkeyPatch, leg_day: Workout, arm_day: Workout) -> WorkoutStore:
    store = WorkoutStore(MemoryStorageMedium({"workouts": dump_collection([leg_day, arm_day])}))
    monkeypatch.setattr(list_workouts, "get_workout_store", lambda: store)
    return store


def test_prints_every_workout(seeded_store, capsys):
    assert list_workouts.main([]) == 0

    out = capsys.readouterr().out
    assert "Leg Day (2024-05-01T18:30:00.000Z)" in out
    assert "Set 2: 80kg x 8 reps" in out
    assert "Arm day" in out
    assert out.index("Leg Day") < out.index("Arm day")


def test_query_filters_by_name(seeded_store, capsys):
    assert list_workouts.main(["--query", "ARM"]) == 0

    out = capsys.readouterr().out
    assert "Arm day" in out
    assert "Leg Day" not in out


def test_json_output_uses_stored_format(seeded_store, capsys, arm_day: Workout):
    assert list_workouts.main(["--json", "--query", "arm"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert [w["id"] for w in data] == [arm_day.id]


def test_no_match_message(seeded_store, capsys):
    assert list_workouts.main(["--query", "yoga"]) == 0
    assert "No workouts found" in capsys.readouterr().out


def test_unreadable_storage_exits_nonzero(monkeypatch: pytest.MonkeyPatch):
    store = WorkoutStore(MemoryStorageMedium({"workouts": "garbage"}))
    monkeypatch.setattr(list_workouts, "get_workout_store", lambda: store)

    assert list_workouts.main([]) == 1
