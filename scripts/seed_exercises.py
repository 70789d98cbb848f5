"""
FormCoach Exercise Library Seeder

Populates the Firestore `exercises` collection with the default exercise
library the coaching sessions are started against.

Run with: python -m scripts.seed_exercises
"""

import re
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.database import init_firebase, get_database, is_mock_mode
from coach_service.models.catalog import DEFAULT_EXERCISES


def exercise_doc_id(name: str) -> str:
    return "ex_" + re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def seed_exercises(db) -> int:
    """Write every default exercise; existing entries with the same id are overwritten."""
    print("\n🏋️ Seeding exercise library...")
    exercises_ref = db.collection("exercises")

    for exercise in DEFAULT_EXERCISES:
        exercises_ref.document(exercise_doc_id(exercise.name)).set({
            "name": exercise.name,
            "description": exercise.description,
            "difficulty": exercise.difficulty,
            "musclesTargeted": exercise.muscles_targeted,
        })
        print(f"  ✅ {exercise.name} ({exercise.difficulty})")

    return len(DEFAULT_EXERCISES)


def main():
    """Main seeder function."""
    print("=" * 60)
    print("🌱 FormCoach Exercise Seeder")
    print("=" * 60)

    print("\n📡 Connecting to Firebase...")
    if not init_firebase() and is_mock_mode():
        print("⚠️ Running in MOCK MODE - data will not be persisted!")
        print("   To connect to Firestore, add your service-account.json")
        return

    count = seed_exercises(get_database())

    print("\n" + "=" * 60)
    print(f"🎉 Seeded {count} exercises")
    print("=" * 60)


if __name__ == "__main__":
    main()
