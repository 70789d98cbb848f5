"""
FormCoach Firebase Database Initialization

Initializes Firebase Admin SDK for Firestore access.
Supports mock mode when credentials are unavailable.
"""

import logging
from pathlib import Path
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore

from core.config import settings

logger = logging.getLogger(__name__)

# Global Firestore client
_db: Optional[firestore.Client] = None
_mock_db: Optional["MockFirestoreClient"] = None
_mock_mode: bool = False


def init_firebase() -> bool:
    """
    Initialize Firebase Admin SDK.

    Returns:
        bool: True if connected successfully, False if running in mock mode.
    """
    global _db, _mock_mode

    if _db is not None:
        return not _mock_mode

    cred_path = Path(__file__).parent.parent / settings.FIREBASE_CREDENTIALS_PATH

    if not cred_path.exists():
        logger.warning(
            f"⚠️ Firebase credentials not found at '{cred_path}'. "
            "Running in MOCK MODE - workouts are kept in memory."
        )
        _mock_mode = True
        return False

    try:
        cred = credentials.Certificate(str(cred_path))

        # Already initialized during hot reload
        if not firebase_admin._apps:
            firebase_admin.initialize_app(cred, {
                'projectId': settings.FIREBASE_PROJECT_ID,
            })
            logger.info(f"🔥 Firebase Admin SDK initialized for project: {settings.FIREBASE_PROJECT_ID}")

        _db = firestore.client()
        logger.info("✅ Connected to Firestore successfully!")
        return True

    except Exception as e:
        logger.error(f"❌ Failed to initialize Firebase: {e}")
        logger.warning("Running in MOCK MODE - workouts are kept in memory.")
        _mock_mode = True
        return False


def is_mock_mode() -> bool:
    """Check if running in mock mode (no Firebase connection)."""
    return _mock_mode or _db is None


# ============================================
# Mock Database for Development/Testing
# ============================================

class MockFirestoreClient:
    """
    Mock Firestore client for development without Firebase.
    Stores data in memory.
    """

    def __init__(self):
        self._collections: dict = {}
        logger.info("🧪 MockFirestoreClient initialized (in-memory storage)")

    def collection(self, name: str) -> "MockCollection":
        if name not in self._collections:
            self._collections[name] = MockCollection(name)
        return self._collections[name]


class MockCollection:
    """Mock Firestore collection."""

    def __init__(self, name: str):
        self.name = name
        self._documents: dict = {}

    def document(self, doc_id: str = None) -> "MockDocument":
        if doc_id is None:
            doc_id = f"mock_{len(self._documents) + 1}"
        if doc_id not in self._documents:
            self._documents[doc_id] = MockDocument(doc_id)
        return self._documents[doc_id]

    def add(self, data: dict):
        doc = self.document()
        doc.set(data)
        return (None, doc)

    def stream(self):
        return [doc for doc in self._documents.values() if doc.exists]


class MockDocument:
    """Mock Firestore document."""

    def __init__(self, doc_id: str):
        self.id = doc_id
        self._data: dict = {}
        self.exists = False

    def set(self, data: dict, merge: bool = False):
        if merge:
            self._data.update(data)
        else:
            self._data = data.copy()
        self.exists = True

    def to_dict(self):
        return self._data.copy()


def get_mock_db() -> MockFirestoreClient:
    """Get the process-wide mock database client."""
    global _mock_db
    if _mock_db is None:
        _mock_db = MockFirestoreClient()
    return _mock_db


def get_database():
    """
    Get database client (real or mock).
    Use this in services to automatically handle mock mode.
    """
    if is_mock_mode():
        return get_mock_db()
    return _db
