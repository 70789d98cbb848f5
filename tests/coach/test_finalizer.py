"""
Session summaries and workout storage.
"""

import pytest

from core.database import MockFirestoreClient
from coach_service.models.exercises import SquatProcessor
from coach_service.models.finalizer import (
    SessionFinalizer,
    WorkoutStore,
    estimate_calories,
)
from coach_service.models.session_registry import Session


def make_session(start_time=100.0, reps=0):
    processor = SquatProcessor()
    processor.state.rep_count = reps
    return Session(
        session_id="conn-1",
        exercise_name="Squat",
        processor=processor,
        user_id="user-1",
        start_time=start_time,
    )


def test_estimate_calories():
    # MET 8 * 3.5 * 70kg / 200 * 10 min
    assert estimate_calories("Push-up", 10, 70) == 98
    assert estimate_calories("Yoga", 10, 70) == 61


def test_estimate_calories_rounds_halves_up():
    # 5.0 * 3.5 * 60kg / 200 * 2 min = 10.5
    assert estimate_calories("Squat", 2, 60) == 11


def test_summary_payload(store):
    finalizer = SessionFinalizer(store=store)
    summary = finalizer.finalize(make_session(start_time=100.0, reps=12), now=190.04)

    assert summary.rep_count == 12
    assert summary.duration_minutes == pytest.approx(1.5, abs=1e-3)
    assert summary.to_payload() == {"exercise": "Squat", "reps": 12, "sets": 1, "duration": 90.0}
    assert store.records == [{
        "userId": "user-1",
        "exerciseName": "Squat",
        "repCount": 12,
        "durationMinutes": 1.5,
    }]


def test_store_errors_propagate(failing_store):
    finalizer = SessionFinalizer(store=failing_store)
    with pytest.raises(ConnectionError):
        finalizer.finalize(make_session())


def test_workout_store_writes_document():
    db = MockFirestoreClient()
    workout_store = WorkoutStore(db=db, default_weight_kg=70)

    workout_id = workout_store.save_workout({
        "userId": "user-1",
        "exerciseName": "Squat",
        "repCount": 20,
        "durationMinutes": 0.5,
    })

    docs = db.collection("workouts").stream()
    assert len(docs) == 1
    assert docs[0].id == workout_id

    data = docs[0].to_dict()
    assert data["user"] == "user-1"
    assert data["status"] == "completed"
    assert data["exercises"] == [{"name": "Squat", "reps": 20, "sets": 1}]
    # Short sessions are billed as one minute: 5 * 3.5 * 70 / 200
    assert data["caloriesBurned"] == 6
