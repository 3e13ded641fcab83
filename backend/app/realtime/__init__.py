"""
Real-time module for Socket.IO based presence and notifications.
"""
from app.realtime.auth import SocketAuthenticator
from app.realtime.errors import (
    AuthenticationError,
    RelayAlreadyInitializedError,
    RelayError,
    UninitializedRelayError,
)
from app.realtime.registry import ConnectionRegistry
from app.realtime.relay import NotificationRelay
from app.realtime.socket import create_socket_app, create_socket_server

__all__ = [
    "AuthenticationError",
    "ConnectionRegistry",
    "NotificationRelay",
    "RelayAlreadyInitializedError",
    "RelayError",
    "SocketAuthenticator",
    "UninitializedRelayError",
    "create_socket_app",
    "create_socket_server",
]
