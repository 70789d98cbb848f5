"""
FormCoach Coach Service Router

Real-time exercise coaching: clients stream pose landmarks over the
WebSocket and get rep counts, stage, form score and feedback back.
"""

from fastapi import APIRouter, WebSocket, HTTPException

from core.websocket import websocket_endpoint
from shared.utils import success_response

from .models import (
    get_exercise_catalog,
    get_processor_class,
    get_session_dispatcher
)
from .models.dispatcher import SAVE_FAILED_MESSAGE

router = APIRouter()


# ============= WebSocket =============

@router.websocket("/ws")
async def coach_stream(websocket: WebSocket):
    """
    Coaching event stream.

    Inbound: `session:start`, `pose:update`, `session:end`, `ping`.
    Outbound: `session:ready`, `feedback:new`, `session:summary`, `error`, `pong`.
    """
    dispatcher = get_session_dispatcher()
    await websocket_endpoint(websocket, dispatcher.handle)


# ============= REST Endpoints =============

@router.get("/exercises")
async def list_exercises():
    """Exercise library, flagging the entries with real-time analysis."""
    catalog = get_exercise_catalog()
    exercises = [
        {**exercise.to_dict(), "realtime_available": get_processor_class(exercise.name) is not None}
        for exercise in catalog.list_exercises()
    ]
    return success_response(data=exercises, message=f"{len(exercises)} exercises")


@router.get("/sessions")
async def list_sessions():
    """Active coaching sessions."""
    dispatcher = get_session_dispatcher()
    sessions = [session.to_dict() for session in dispatcher.registry.list_sessions()]
    return success_response(data=sessions, message=f"{len(sessions)} active sessions")


@router.post("/sessions/{connection_id}/end")
async def end_session(connection_id: str):
    """End a connection's session and store the workout."""
    dispatcher = get_session_dispatcher()
    if dispatcher.registry.get(connection_id) is None:
        raise HTTPException(status_code=404, detail=f"No active session for connection {connection_id}")

    summary = await dispatcher.end(connection_id)
    if summary is None:
        raise HTTPException(status_code=500, detail=SAVE_FAILED_MESSAGE)

    return success_response(data=summary.to_payload(), message="Workout saved successfully!")
