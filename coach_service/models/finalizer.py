"""
FormCoach Coach Service - Session Finalizer

Summarizes an ended session and hands it to the workout store. The store
applies its own calorie estimate; the engine only supplies reps and duration.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.config import settings
from core.database import get_database
from shared.utils import round_half_up

from .session_registry import Session

logger = logging.getLogger(__name__)


# Approximate MET values per exercise
EXERCISE_METS: Dict[str, float] = {
    "Squat": 5.0,
    "Lunge": 5.0,
    "Push-up": 8.0,
    "Bicep Curl": 3.8,
    "Shoulder Press": 3.8,
    "Jumping Jack": 8.0,
    "Tricep Dip": 6.0,
    "Mountain Climber": 8.0,
}
DEFAULT_MET = 5.0


@dataclass
class WorkoutSummary:
    """Final numbers of one session."""
    user_id: str
    exercise_name: str
    rep_count: int
    duration_seconds: float
    sets: int = 1

    @property
    def duration_minutes(self) -> float:
        return self.duration_seconds / 60

    def to_store_record(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "exerciseName": self.exercise_name,
            "repCount": self.rep_count,
            "durationMinutes": round(self.duration_minutes, 2),
        }

    def to_payload(self) -> Dict[str, Any]:
        """Body of the `session:summary` event."""
        return {
            "exercise": self.exercise_name,
            "reps": self.rep_count,
            "sets": self.sets,
            "duration": round(self.duration_seconds, 1),
        }


def estimate_calories(exercise_name: str, duration_minutes: float, weight_kg: float) -> int:
    """Calories burned: MET * 3.5 * weight(kg) / 200 * minutes."""
    met = EXERCISE_METS.get(exercise_name, DEFAULT_MET)
    return round_half_up(met * 3.5 * weight_kg / 200 * duration_minutes)


class WorkoutStore:
    """Persists finished workouts to the `workouts` collection (Firestore or mock)."""

    COLLECTION = "workouts"

    def __init__(self, db=None, default_weight_kg: Optional[float] = None):
        self._db = db
        self.default_weight_kg = default_weight_kg or settings.DEFAULT_USER_WEIGHT_KG

    @property
    def db(self):
        return self._db if self._db is not None else get_database()

    def save_workout(self, record: Dict[str, Any]) -> str:
        """Store a workout record and return its document id."""
        minutes = max(1.0, float(record["durationMinutes"]))
        document = {
            "user": record["userId"],
            "status": "completed",
            "exercises": [{"name": record["exerciseName"], "reps": record["repCount"], "sets": 1}],
            "duration": record["durationMinutes"],
            "caloriesBurned": estimate_calories(record["exerciseName"], minutes, self.default_weight_kg),
            "endTime": datetime.now(timezone.utc).isoformat(),
        }
        _, doc_ref = self.db.collection(self.COLLECTION).add(document)
        return doc_ref.id


class SessionFinalizer:
    """Turns an ended session into a stored workout."""

    def __init__(self, store: Optional[WorkoutStore] = None):
        self.store = store or WorkoutStore()

    def summarize(self, session: Session, now: Optional[float] = None) -> WorkoutSummary:
        now = now if now is not None else time.time()
        return WorkoutSummary(
            user_id=session.user_id,
            exercise_name=session.exercise_name,
            rep_count=session.rep_count,
            duration_seconds=max(0.0, now - session.start_time),
        )

    def finalize(self, session: Session, now: Optional[float] = None) -> WorkoutSummary:
        """Summarize the session and save it. Store errors propagate to the caller."""
        summary = self.summarize(session, now)
        workout_id = self.store.save_workout(summary.to_store_record())
        logger.info(
            f"💾 [{session.session_id}] Workout {workout_id} saved for user {summary.user_id}: "
            f"{summary.exercise_name} x{summary.rep_count} in {summary.duration_seconds:.1f}s"
        )
        return summary
