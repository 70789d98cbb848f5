"""
FormCoach WebSocket Connection Manager

Manages coaching WebSocket connections: one client id per socket,
JSON envelopes and heartbeat monitoring.
"""

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Any, Callable

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from core.config import settings

logger = logging.getLogger(__name__)


class MessageType(str, Enum):
    """WebSocket message types."""
    # System messages
    PING = "ping"
    PONG = "pong"
    ERROR = "error"

    # Inbound coaching events
    SESSION_START = "session:start"
    POSE_UPDATE = "pose:update"
    SESSION_END = "session:end"

    # Outbound coaching events
    SESSION_READY = "session:ready"
    FEEDBACK_NEW = "feedback:new"
    SESSION_SUMMARY = "session:summary"


@dataclass
class WebSocketMessage:
    """Structured WebSocket message."""
    type: Any
    payload: Any = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_json(self) -> str:
        return json.dumps({
            "type": self.type.value if isinstance(self.type, MessageType) else self.type,
            "payload": self.payload if self.payload is not None else {},
            "timestamp": self.timestamp
        })

    @classmethod
    def from_json(cls, data: str) -> "WebSocketMessage":
        parsed = json.loads(data)
        if not isinstance(parsed, dict):
            raise ValueError("Message must be a JSON object")
        return cls(
            type=parsed.get("type"),
            payload=parsed.get("payload"),
            timestamp=parsed.get("timestamp") or datetime.now(timezone.utc).isoformat()
        )

    @classmethod
    def error(cls, message: str) -> "WebSocketMessage":
        return cls(type=MessageType.ERROR, payload={"message": message})


@dataclass
class ConnectedClient:
    """Represents a connected WebSocket client."""
    websocket: WebSocket
    client_id: str
    last_activity: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def is_connected(self) -> bool:
        return self.websocket.client_state == WebSocketState.CONNECTED


class ConnectionManager:
    """
    Manages all coaching WebSocket connections.

    Every socket gets its own client id, which is also the identity its
    exercise session is keyed by. Messages only ever go back to the
    client they concern.
    """

    def __init__(self, max_connections: int = None):
        self.max_connections = max_connections or settings.WS_MAX_CONNECTIONS

        # Active connections: client_id -> ConnectedClient
        self._connections: Dict[str, ConnectedClient] = {}

        self._lock = asyncio.Lock()

        self._heartbeat_task: Optional[asyncio.Task] = None
        self._disconnect_callbacks: list = []

        logger.info(f"🔌 ConnectionManager initialized (max: {self.max_connections})")

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def on_disconnect(self, callback: Callable[[str], Any]):
        """Register an async callback run with the client id of every dropped connection."""
        self._disconnect_callbacks.append(callback)

    async def connect(self, websocket: WebSocket, client_id: str = None) -> ConnectedClient:
        """
        Accept a new WebSocket connection.
        """
        if self.connection_count >= self.max_connections:
            await websocket.close(code=1013, reason="Server at capacity")
            raise ConnectionError("Maximum connections reached")

        await websocket.accept()

        client = ConnectedClient(websocket=websocket, client_id=client_id or uuid.uuid4().hex)

        async with self._lock:
            self._connections[client.client_id] = client

        logger.info(f"✅ Client connected: {client.client_id}")
        return client

    async def disconnect(self, client_id: str):
        """Disconnect and cleanup a client."""
        async with self._lock:
            client = self._connections.pop(client_id, None)

        if not client:
            return

        logger.info(f"👋 Client disconnected: {client_id}")
        for callback in self._disconnect_callbacks:
            try:
                await callback(client_id)
            except Exception as e:
                logger.error(f"Disconnect callback failed for {client_id}: {e}")

    async def send_to_client(self, client_id: str, message: WebSocketMessage) -> bool:
        """Send a message to a specific client."""
        client = self._connections.get(client_id)

        if not client or not client.is_connected():
            return False

        try:
            await client.websocket.send_text(message.to_json())
            client.last_activity = datetime.now(timezone.utc)
            return True
        except Exception as e:
            logger.error(f"Failed to send to {client_id}: {e}")
            await self.disconnect(client_id)
            return False

    async def handle_message(
        self,
        client_id: str,
        raw_message: str,
        handler: Callable[[str, WebSocketMessage], Any] = None
    ):
        """Process an incoming message from a client."""
        try:
            message = WebSocketMessage.from_json(raw_message)
        except ValueError:
            await self.send_to_client(client_id, WebSocketMessage.error("Invalid JSON"))
            return

        try:
            client = self._connections.get(client_id)
            if client:
                client.last_activity = datetime.now(timezone.utc)

            if message.type == MessageType.PING.value:
                await self.send_to_client(client_id, WebSocketMessage(type=MessageType.PONG))
                return

            if handler:
                await handler(client_id, message)

        except Exception as e:
            logger.error(f"Error handling message from {client_id}: {e}")

    async def start_heartbeat(self, interval: int = None):
        """Start heartbeat task to check connection health."""
        interval = interval or settings.WS_HEARTBEAT_INTERVAL

        async def heartbeat_loop():
            while True:
                await asyncio.sleep(interval)
                await self._check_connections()

        self._heartbeat_task = asyncio.create_task(heartbeat_loop())
        logger.info(f"💓 Heartbeat started (interval: {interval}s)")

    async def stop_heartbeat(self):
        """Stop the heartbeat task."""
        if self._heartbeat_task:
            self._heartbeat_task.cancel()
            self._heartbeat_task = None

    async def _check_connections(self):
        """Check all connections and disconnect dead ones."""
        for client_id in list(self._connections.keys()):
            client = self._connections.get(client_id)
            if client and not client.is_connected():
                await self.disconnect(client_id)

    def get_stats(self) -> dict:
        """Get connection statistics."""
        return {
            "total_connections": self.connection_count,
            "max_connections": self.max_connections
        }


# Global connection manager instance
connection_manager = ConnectionManager()


async def websocket_endpoint(
    websocket: WebSocket,
    handler: Callable[[str, WebSocketMessage], Any] = None,
    manager: ConnectionManager = None
):
    """
    Reusable WebSocket endpoint handler.

    Usage in router:
        @router.websocket("/ws")
        async def ws_route(websocket: WebSocket):
            await websocket_endpoint(websocket, my_handler)
    """
    manager = manager or connection_manager
    try:
        client = await manager.connect(websocket)
    except ConnectionError as e:
        logger.warning(f"⚠️ Rejected WebSocket connection: {e}")
        return

    try:
        while True:
            data = await websocket.receive_text()
            await manager.handle_message(client.client_id, data, handler)

    except WebSocketDisconnect:
        await manager.disconnect(client.client_id)

    except Exception as e:
        logger.error(f"WebSocket error for {client.client_id}: {e}")
        await manager.disconnect(client.client_id)
