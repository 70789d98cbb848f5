"""
FormCoach Coach Service - Session Registry

Owns the connection -> active session mapping. Insert and remove are
serialized with a lock; per-frame processing of different sessions runs
without it.
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.config import settings

from .errors import SessionAlreadyActive
from .exercises import ExerciseProcessor, ProcessResult

logger = logging.getLogger(__name__)


@dataclass
class RepRecord:
    """One credited repetition."""
    rep: int
    timestamp: float


@dataclass
class Session:
    """A live exercise session bound to one connection."""
    session_id: str  # connection identity
    exercise_name: str
    processor: ExerciseProcessor
    user_id: str
    start_time: float = field(default_factory=time.time)
    rep_history: List[RepRecord] = field(default_factory=list)
    last_activity: float = field(default_factory=time.time)
    frames_processed: int = 0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def rep_count(self) -> int:
        return self.processor.rep_count

    @property
    def duration_seconds(self) -> float:
        return time.time() - self.start_time

    def record_result(self, result: ProcessResult, now: Optional[float] = None):
        """Track activity and append to rep history once per rep count increase."""
        now = now if now is not None else time.time()
        self.last_activity = now
        self.frames_processed += 1
        last_rep = self.rep_history[-1].rep if self.rep_history else 0
        if result.rep_count > last_rep:
            self.rep_history.append(RepRecord(rep=result.rep_count, timestamp=now))

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable view without processor internals."""
        return {
            "session_id": self.session_id,
            "exercise": self.exercise_name,
            "user_id": self.user_id,
            "rep_count": self.rep_count,
            "stage": self.processor.stage,
            "score": self.processor.form_score,
            "frames_processed": self.frames_processed,
            "start_time": self.start_time,
            "duration_seconds": round(self.duration_seconds, 1),
            "idle_seconds": round(time.time() - self.last_activity, 1),
        }


class SessionRegistry:
    """
    Thread-safe registry of active sessions keyed by connection id.

    A connection holds at most one session. Starting another one either
    replaces it or is rejected, depending on `replace_on_restart`.
    """

    def __init__(self, replace_on_restart: Optional[bool] = None):
        self.replace_on_restart = (
            settings.SESSION_REPLACE_ON_RESTART if replace_on_restart is None else replace_on_restart
        )
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()
        self._created_count = 0
        self._replaced_count = 0
        self._reaped_count = 0

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def create(
        self,
        connection_id: str,
        exercise_name: str,
        processor: ExerciseProcessor,
        user_id: str
    ) -> Session:
        """
        Register a fresh session for a connection.

        Raises:
            SessionAlreadyActive: if the connection already has a session and
                replacing is disabled
        """
        session = Session(
            session_id=connection_id,
            exercise_name=exercise_name,
            processor=processor,
            user_id=user_id,
        )

        with self._lock:
            previous = self._sessions.get(connection_id)
            if previous is not None:
                if not self.replace_on_restart:
                    raise SessionAlreadyActive(previous.exercise_name)
                self._replaced_count += 1
            self._sessions[connection_id] = session
            self._created_count += 1

        if previous is not None:
            logger.warning(
                f"[{connection_id}] Replaced active {previous.exercise_name} session "
                f"({previous.rep_count} reps discarded)"
            )
        return session

    def get(self, connection_id: str) -> Optional[Session]:
        return self._sessions.get(connection_id)

    def remove(self, connection_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.pop(connection_id, None)

    def reap_idle(self, max_idle_seconds: float, now: Optional[float] = None) -> List[Session]:
        """Remove and return sessions without a frame for longer than max_idle_seconds."""
        now = now if now is not None else time.time()
        with self._lock:
            stale = [
                connection_id for connection_id, session in self._sessions.items()
                if now - session.last_activity > max_idle_seconds
            ]
            reaped = [self._sessions.pop(connection_id) for connection_id in stale]
            self._reaped_count += len(reaped)

        for session in reaped:
            logger.info(
                f"🧹 [{session.session_id}] Reaped idle {session.exercise_name} session "
                f"after {now - session.last_activity:.0f}s"
            )
        return reaped

    def list_sessions(self) -> List[Session]:
        with self._lock:
            return list(self._sessions.values())

    def get_stats(self) -> dict:
        return {
            "active_sessions": self.session_count,
            "created_sessions": self._created_count,
            "replaced_sessions": self._replaced_count,
            "reaped_sessions": self._reaped_count,
            "replace_on_restart": self.replace_on_restart,
        }
