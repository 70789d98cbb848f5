"""
Shared fixtures for the coach service tests.
"""

import sys
from pathlib import Path
from typing import List, Tuple

import pytest

# Add backend to path
backend_dir = Path(__file__).parent.parent.parent
sys.path.insert(0, str(backend_dir))

from core.threading import WorkerPool
from core.websocket import WebSocketMessage


# ═══════════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════════

class RecordingSender:
    """Collects outbound messages per connection."""

    def __init__(self):
        self.messages: List[Tuple[str, WebSocketMessage]] = []

    async def __call__(self, connection_id: str, message: WebSocketMessage):
        self.messages.append((connection_id, message))

    def types(self, connection_id: str) -> List[str]:
        return [
            m.type.value if hasattr(m.type, "value") else m.type
            for cid, m in self.messages if cid == connection_id
        ]

    def last(self, connection_id: str) -> WebSocketMessage:
        return [m for cid, m in self.messages if cid == connection_id][-1]


class RecordingStore:
    """Workout store double that keeps saved records in memory."""

    def __init__(self, fail: bool = False):
        self.records: List[dict] = []
        self.fail = fail

    def save_workout(self, record: dict) -> str:
        if self.fail:
            raise ConnectionError("workout store unreachable")
        self.records.append(record)
        return f"workout_{len(self.records)}"


@pytest.fixture
def worker_pool():
    pool = WorkerPool(max_workers=2, name="test_pool")
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def failing_store():
    return RecordingStore(fail=True)
