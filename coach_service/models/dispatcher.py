"""
FormCoach Coach Service - Session Dispatcher

Routes inbound coaching events to the session registry and processors and
sends results back to the connection they came from.

Frames of one session are processed one at a time in arrival order under
the session's lock; different sessions run concurrently in the worker pool.
A failure inside one session is reported to that connection only.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, ValidationError

from core.config import settings
from core.threading import WorkerPool, get_pose_pool
from core.websocket import MessageType, WebSocketMessage

from .catalog import ExerciseCatalog, get_exercise_catalog
from .errors import CoachError, ExerciseNotFound, ProcessingFault, ProcessorUnavailable
from .exercises import ProcessResult, create_processor
from .finalizer import SessionFinalizer, WorkoutSummary
from .session_registry import Session, SessionRegistry
from .thresholds import ExerciseKind, thresholds_for

logger = logging.getLogger(__name__)

Sender = Callable[[str, WebSocketMessage], Awaitable[Any]]

SAVE_FAILED_MESSAGE = "Failed to save your workout session."
SAVE_SUCCESS_MESSAGE = "Workout saved successfully!"


# ============= Inbound Payloads =============

class LandmarkModel(BaseModel):
    x: float
    y: float
    z: Optional[float] = None
    visibility: Optional[float] = None


class SessionStartPayload(BaseModel):
    exercise: str
    userId: str


class PoseUpdatePayload(BaseModel):
    poseLandmarks: Optional[List[Optional[LandmarkModel]]] = None

    def landmarks(self) -> Optional[List[Optional[Dict[str, Any]]]]:
        if self.poseLandmarks is None:
            return None
        return [lm.model_dump() if lm is not None else None for lm in self.poseLandmarks]


# ============= Dispatcher =============

class SessionDispatcher:
    """
    Coaching session lifecycle: start, frame update, end and disconnect.

    `sender(connection_id, message)` delivers an outbound message to one
    connection.
    """

    def __init__(
        self,
        registry: Optional[SessionRegistry] = None,
        catalog: Optional[ExerciseCatalog] = None,
        finalizer: Optional[SessionFinalizer] = None,
        worker_pool: Optional[WorkerPool] = None,
        sender: Optional[Sender] = None,
        threshold_overrides: Optional[Mapping[str, Mapping[str, float]]] = None
    ):
        self.registry = registry or SessionRegistry()
        self.catalog = catalog or get_exercise_catalog()
        self.finalizer = finalizer or SessionFinalizer()
        self.worker_pool = worker_pool or get_pose_pool()
        self.sender = sender
        self.threshold_overrides = dict(
            settings.EXERCISE_THRESHOLDS if threshold_overrides is None else threshold_overrides
        )
        self._validate_overrides()

        self._reaper_task: Optional[asyncio.Task] = None
        self._frames_processed = 0
        self._frame_faults = 0

    def _validate_overrides(self):
        """Fail at startup on overrides for unknown exercises or thresholds."""
        for exercise_name, overrides in self.threshold_overrides.items():
            thresholds_for(ExerciseKind(exercise_name), overrides)

    async def _send(self, connection_id: str, message: WebSocketMessage):
        if self.sender is None:
            logger.debug(f"[{connection_id}] No sender configured, dropping {message.type}")
            return
        await self.sender(connection_id, message)

    async def _send_error(self, connection_id: str, message: str):
        await self._send(connection_id, WebSocketMessage.error(message))

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    def open_session(self, connection_id: str, exercise: str, user_id: str) -> Session:
        """
        Resolve the exercise and register a fresh session for the connection.

        Raises:
            ExerciseNotFound: if the exercise is not in the catalog
            ProcessorUnavailable: if the exercise has no real-time processor
            SessionAlreadyActive: if the connection has a session and replacing is disabled
        """
        if not exercise or not self.catalog.exists(exercise):
            raise ExerciseNotFound(exercise)

        canonical = self.catalog.canonicalize(exercise)
        processor = create_processor(canonical, self.threshold_overrides.get(canonical))
        if processor is None:
            raise ProcessorUnavailable(canonical)

        return self.registry.create(connection_id, canonical, processor, user_id)

    async def start(self, connection_id: str, exercise: str, user_id: str) -> Optional[Session]:
        """Start a session and acknowledge it, or report why it was rejected."""
        try:
            session = self.open_session(connection_id, exercise, user_id)
        except CoachError as e:
            logger.warning(f"⚠️ [{connection_id}] Session start rejected: {e.message}")
            await self._send_error(connection_id, e.message)
            return None

        logger.info(f"🏋️ [{connection_id}] {session.exercise_name} session started for user {user_id}")
        await self._send(connection_id, WebSocketMessage(type=MessageType.SESSION_READY, payload={}))
        return session

    async def update(self, connection_id: str, landmarks: Optional[List[Any]]) -> Optional[ProcessResult]:
        """Process one pose frame for the connection's session and send the feedback."""
        session = self.registry.get(connection_id)
        if session is None:
            logger.warning(f"⚠️ [{connection_id}] Pose update without an active session")
            return None

        async with session.lock:
            # Session ended or replaced while waiting for the previous frame
            if self.registry.get(connection_id) is not session:
                return None

            snapshot = session.processor.snapshot()
            try:
                result = await self.worker_pool.submit_async(session.processor.process, landmarks)
            except Exception:
                session.processor.restore(snapshot)
                self._frame_faults += 1
                logger.exception(
                    f"❌ [{connection_id}] {session.exercise_name} processor failed, state restored"
                )
                await self._send_error(connection_id, ProcessingFault().message)
                return None

            self._frames_processed += 1
            session.record_result(result)
            await self._send(connection_id, WebSocketMessage(
                type=MessageType.FEEDBACK_NEW,
                payload=result.to_payload()
            ))
            return result

    async def end(self, connection_id: str) -> Optional[WorkoutSummary]:
        """End the connection's session, store the workout and send the summary."""
        session = self.registry.remove(connection_id)
        if session is None:
            logger.warning(f"⚠️ [{connection_id}] Session end without an active session")
            return None

        # Let an in-flight frame finish before reading the final rep count
        async with session.lock:
            pass

        try:
            summary = await self.worker_pool.submit_async(self.finalizer.finalize, session)
        except Exception:
            logger.exception(f"❌ [{connection_id}] Failed to store {session.exercise_name} workout")
            await self._send_error(connection_id, SAVE_FAILED_MESSAGE)
            return None

        payload = summary.to_payload()
        payload["message"] = SAVE_SUCCESS_MESSAGE
        await self._send(connection_id, WebSocketMessage(type=MessageType.SESSION_SUMMARY, payload=payload))
        logger.info(
            f"🏁 [{connection_id}] {summary.exercise_name} session ended with {summary.rep_count} reps"
        )
        return summary

    async def disconnect(self, connection_id: str) -> Optional[Session]:
        """Drop the connection's session without storing it."""
        session = self.registry.remove(connection_id)
        if session is not None:
            logger.info(
                f"🔌 [{connection_id}] Connection closed, discarded {session.exercise_name} session "
                f"({session.rep_count} reps)"
            )
        return session

    # ------------------------------------------------------------------
    # Inbound routing
    # ------------------------------------------------------------------

    async def handle(self, connection_id: str, message: WebSocketMessage):
        """Route an inbound envelope by its type."""
        msg_type = message.type.value if isinstance(message.type, MessageType) else message.type
        payload = message.payload if message.payload is not None else {}

        try:
            if msg_type == MessageType.SESSION_START.value:
                data = SessionStartPayload.model_validate(payload)
                await self.start(connection_id, data.exercise, data.userId)

            elif msg_type == MessageType.POSE_UPDATE.value:
                data = PoseUpdatePayload.model_validate(payload)
                await self.update(connection_id, data.landmarks())

            elif msg_type == MessageType.SESSION_END.value:
                await self.end(connection_id)

            else:
                logger.warning(f"⚠️ [{connection_id}] Unknown message type: {msg_type}")
                await self._send_error(connection_id, f"Unknown message type '{msg_type}'.")

        except ValidationError as e:
            logger.warning(f"⚠️ [{connection_id}] Invalid {msg_type} payload: {e.error_count()} error(s)")
            await self._send_error(connection_id, f"Invalid '{msg_type}' payload.")

    # ------------------------------------------------------------------
    # Idle session reaper
    # ------------------------------------------------------------------

    async def start_reaper(self, interval: float = None, max_idle: float = None):
        """Periodically drop sessions that stopped receiving frames."""
        interval = interval or settings.SESSION_REAP_INTERVAL_SECONDS
        max_idle = max_idle or settings.SESSION_IDLE_TIMEOUT_SECONDS

        async def reaper_loop():
            while True:
                await asyncio.sleep(interval)
                try:
                    self.registry.reap_idle(max_idle)
                except Exception:
                    logger.exception("❌ Idle session sweep failed")

        self._reaper_task = asyncio.create_task(reaper_loop())
        logger.info(f"🧹 Session reaper started (interval: {interval}s, idle timeout: {max_idle}s)")

    async def stop_reaper(self):
        if self._reaper_task:
            self._reaper_task.cancel()
            self._reaper_task = None

    def get_stats(self) -> dict:
        return {
            **self.registry.get_stats(),
            "frames_processed": self._frames_processed,
            "frame_faults": self._frame_faults,
        }
