"""
FormCoach Coach Service - Exercise Catalog

The exercise library a session has to be started against. Backed by the
Firestore `exercises` collection, with the seeded library as default.
"""

import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from core.database import get_database, is_mock_mode

logger = logging.getLogger(__name__)


@dataclass
class CatalogExercise:
    """An exercise library entry."""
    name: str
    description: str = ""
    difficulty: str = "Beginner"
    muscles_targeted: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "difficulty": self.difficulty,
            "muscles_targeted": self.muscles_targeted,
        }


DEFAULT_EXERCISES = [
    CatalogExercise(
        "Squat", "A lower-body exercise that strengthens the legs and glutes.",
        "Beginner", ["Quadriceps", "Glutes", "Hamstrings", "Calves"],
    ),
    CatalogExercise(
        "Push-up", "An upper-body exercise that builds chest, shoulder and tricep strength.",
        "Intermediate", ["Pectorals", "Deltoids", "Triceps", "Core"],
    ),
    CatalogExercise(
        "Lunge", "A single-leg exercise for lower-body strength and balance.",
        "Beginner", ["Quadriceps", "Glutes", "Hamstrings"],
    ),
    CatalogExercise(
        "Bicep Curl", "An isolation exercise for the front of the upper arm.",
        "Beginner", ["Biceps", "Brachialis"],
    ),
    CatalogExercise(
        "Shoulder Press", "An overhead press for shoulder and upper-arm strength.",
        "Intermediate", ["Deltoids", "Triceps", "Trapezius"],
    ),
    CatalogExercise(
        "Jumping Jack", "A full-body cardio exercise.",
        "Beginner", ["Full Body", "Cardio"],
    ),
    CatalogExercise(
        "Tricep Dip", "A bodyweight exercise for the back of the upper arm.",
        "Intermediate", ["Triceps", "Pectorals", "Deltoids"],
    ),
    CatalogExercise(
        "Mountain Climber", "A plank-based cardio exercise driving the knees forward.",
        "Intermediate", ["Core", "Deltoids", "Glutes", "Cardio"],
    ),
]


def _catalog_key(name: str) -> str:
    """Spelling-insensitive lookup key: 'Push ups', 'pushup' and 'PUSH-UP' all match."""
    key = re.sub(r"[^a-z0-9]", "", name.lower())
    if key.endswith("es") and key[:-2].endswith(("ss", "sh", "ch")):
        return key[:-2]
    if key.endswith("s") and not key.endswith("ss"):
        return key[:-1]
    return key


class ExerciseCatalog:
    """
    Exercise library with canonical-name resolution.

    `exists` and `canonicalize` accept free-text spellings; the canonical
    name is the library's own spelling.
    """

    def __init__(self, exercises: Optional[List[CatalogExercise]] = None):
        self._lock = threading.Lock()
        self._by_key: Dict[str, CatalogExercise] = {}
        for exercise in exercises if exercises is not None else DEFAULT_EXERCISES:
            self.add(exercise)

    def add(self, exercise: CatalogExercise):
        with self._lock:
            self._by_key[_catalog_key(exercise.name)] = exercise

    def get(self, name: str) -> Optional[CatalogExercise]:
        if not name:
            return None
        return self._by_key.get(_catalog_key(name))

    def exists(self, name: str) -> bool:
        return self.get(name) is not None

    def canonicalize(self, name: str) -> str:
        """
        Get the library spelling of an exercise name.

        Raises:
            KeyError: if the exercise is not in the library
        """
        exercise = self.get(name)
        if exercise is None:
            raise KeyError(name)
        return exercise.name

    def list_exercises(self) -> List[CatalogExercise]:
        return sorted(self._by_key.values(), key=lambda e: e.name)

    def __len__(self) -> int:
        return len(self._by_key)


class FirestoreExerciseCatalog(ExerciseCatalog):
    """Exercise catalog loaded from the Firestore `exercises` collection."""

    COLLECTION = "exercises"

    def load(self) -> int:
        """
        Replace the default library with the Firestore collection.

        Keeps the defaults in mock mode or when the collection is empty.
        Returns the number of entries now in the catalog.
        """
        if is_mock_mode():
            logger.info(f"📚 Exercise catalog using {len(self)} default entries (mock mode)")
            return len(self)

        entries = []
        for doc in get_database().collection(self.COLLECTION).stream():
            data = doc.to_dict() or {}
            if not data.get("name"):
                continue
            entries.append(CatalogExercise(
                name=data["name"].strip(),
                description=data.get("description", ""),
                difficulty=data.get("difficulty", "Beginner"),
                muscles_targeted=list(data.get("musclesTargeted") or data.get("muscles_targeted") or []),
            ))

        if not entries:
            logger.warning("⚠️ Firestore exercise library is empty, keeping default entries")
            return len(self)

        with self._lock:
            self._by_key = {_catalog_key(e.name): e for e in entries}
        logger.info(f"📚 Exercise catalog loaded {len(entries)} entries from Firestore")
        return len(self)


_catalog_instance: Optional[FirestoreExerciseCatalog] = None


def get_exercise_catalog() -> FirestoreExerciseCatalog:
    """Get or create the global exercise catalog."""
    global _catalog_instance
    if _catalog_instance is None:
        _catalog_instance = FirestoreExerciseCatalog()
    return _catalog_instance
