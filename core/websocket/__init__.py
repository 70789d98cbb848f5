"""
FormCoach WebSocket Module
"""

from .manager import (
    ConnectionManager,
    connection_manager,
    WebSocketMessage,
    MessageType,
    ConnectedClient,
    websocket_endpoint
)

__all__ = [
    'ConnectionManager',
    'connection_manager',
    'WebSocketMessage',
    'MessageType',
    'ConnectedClient',
    'websocket_endpoint'
]
