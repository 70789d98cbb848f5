"""
FormCoach Coach Service Models

Rule-based rep counting and form scoring over streamed pose landmarks.
"""

from typing import Optional

from .catalog import (
    CatalogExercise,
    ExerciseCatalog,
    FirestoreExerciseCatalog,
    get_exercise_catalog
)

from .dispatcher import (
    SessionDispatcher,
    SessionStartPayload,
    PoseUpdatePayload,
    LandmarkModel
)

from .errors import (
    CoachError,
    IncompletePoseData,
    ExerciseNotFound,
    ProcessorUnavailable,
    SessionAlreadyActive,
    ProcessingFault
)

from .exercises import (
    ExerciseProcessor,
    ProcessResult,
    PROCESSOR_REGISTRY,
    create_processor,
    get_processor_class
)

from .finalizer import (
    SessionFinalizer,
    WorkoutStore,
    WorkoutSummary
)

from .geometry import calculate_angle
from .landmarks import JointType, Landmark, POSE_LANDMARK_COUNT
from .session_registry import RepRecord, Session, SessionRegistry
from .thresholds import ExerciseKind, thresholds_for


_session_dispatcher: Optional[SessionDispatcher] = None


def get_session_dispatcher() -> SessionDispatcher:
    """Get or create the global session dispatcher, wired to the WebSocket manager."""
    global _session_dispatcher
    if _session_dispatcher is None:
        from core.websocket import connection_manager

        _session_dispatcher = SessionDispatcher(sender=connection_manager.send_to_client)
        connection_manager.on_disconnect(_session_dispatcher.disconnect)
    return _session_dispatcher


__all__ = [
    # Catalog
    "CatalogExercise",
    "ExerciseCatalog",
    "FirestoreExerciseCatalog",
    "get_exercise_catalog",
    # Dispatcher
    "SessionDispatcher",
    "SessionStartPayload",
    "PoseUpdatePayload",
    "LandmarkModel",
    "get_session_dispatcher",
    # Errors
    "CoachError",
    "IncompletePoseData",
    "ExerciseNotFound",
    "ProcessorUnavailable",
    "SessionAlreadyActive",
    "ProcessingFault",
    # Processors
    "ExerciseKind",
    "ExerciseProcessor",
    "ProcessResult",
    "PROCESSOR_REGISTRY",
    "create_processor",
    "get_processor_class",
    "thresholds_for",
    # Finalizer
    "SessionFinalizer",
    "WorkoutStore",
    "WorkoutSummary",
    # Sessions
    "RepRecord",
    "Session",
    "SessionRegistry",
    # Geometry
    "calculate_angle",
    "JointType",
    "Landmark",
    "POSE_LANDMARK_COUNT",
]
