"""
Presence & notification relay.

Binds to a Socket.IO server once at startup, admits authenticated
connections into per-user rooms and delivers notifications to one user,
a set of users, or everybody connected.

Rooms:
- {user_id} - every live socket of one user

Server -> client events:
- connected - handshake accepted (sent to the new socket)
- onlineUsers - distinct online user count (sent to everybody)
- newNotification - notification for one user
- newMessage - direct message for sender and recipient
- broadcast - notification for everybody

Client -> server events:
- markNotificationRead - notification id the user has read
"""
import logging
from typing import Any, Awaitable, Callable, Iterable, Optional

import socketio
from socketio.exceptions import ConnectionRefusedError as SocketConnectionRefused

from app.realtime.auth import SocketAuthenticator
from app.realtime.errors import (
    AuthenticationError,
    RelayAlreadyInitializedError,
    UninitializedRelayError,
)
from app.realtime.registry import ConnectionRegistry, UserId

logger = logging.getLogger(__name__)

CONNECTED_MESSAGE = "Connected to notification server"

ReadHandler = Callable[[str, Any], Awaitable[None]]


class NotificationRelay:
    """Mediates between application code and the Socket.IO transport."""

    def __init__(
        self,
        authenticator: SocketAuthenticator,
        registry: Optional[ConnectionRegistry] = None,
        read_handler: Optional[ReadHandler] = None,
    ):
        self.authenticator = authenticator
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.read_handler = read_handler
        self._server: Optional[socketio.AsyncServer] = None

    # ------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------

    @property
    def initialized(self) -> bool:
        return self._server is not None

    @property
    def server(self) -> socketio.AsyncServer:
        if self._server is None:
            raise UninitializedRelayError()
        return self._server

    def initialize(self, server: socketio.AsyncServer) -> "NotificationRelay":
        """Bind to a Socket.IO server and register event handlers. Call once."""
        if self._server is not None:
            raise RelayAlreadyInitializedError()

        server.on("connect", self.on_connect)
        server.on("disconnect", self.on_disconnect)
        server.on("markNotificationRead", self.on_mark_notification_read)
        server.on("error", self.on_error)

        self._server = server
        logger.info("Socket.IO initialized")
        return self

    # ------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------

    async def on_connect(self, sid: str, environ: dict, auth: Optional[dict] = None):
        """Authenticate, register and join the user's room."""
        try:
            user = await self.authenticator.authenticate(auth, environ)
        except AuthenticationError as e:
            logger.warning(f"Socket connection rejected: {sid} ({e.reason})")
            raise SocketConnectionRefused(f"Authentication error: {e.reason}")

        server = self.server
        user_id = str(user["id"])

        # Disconnect may already have run while the lookup was pending
        if not server.manager.is_connected(sid, "/"):
            logger.info(f"Socket {sid} closed during handshake; not registering user {user_id}")
            return False

        await server.save_session(sid, {"user": user})
        self.registry.register(user_id, sid)
        await server.enter_room(sid, user_id)

        await server.emit("connected", {
            "message": CONNECTED_MESSAGE,
            "userId": user_id,
        }, to=sid)
        await self._emit_online_count()

        logger.info(f"User connected: {user.get('name')} ({user_id})")

    async def on_disconnect(self, sid: str, reason: Any = None):
        """Unregister the socket and broadcast the new online count."""
        info = self.registry.unregister(sid)
        if info is None:
            logger.info(f"Socket disconnected: {sid} (unauthenticated)")
            return

        logger.info(f"User disconnected: {info['user_id']} ({reason})")
        await self._emit_online_count()

    async def on_mark_notification_read(self, sid: str, notification_id: Any = None):
        user_id = self.registry.user_for(sid)
        if user_id is None:
            logger.warning(f"Ignoring markNotificationRead from unauthenticated socket {sid}")
            return

        logger.info(f"Notification {notification_id} marked as read by {user_id}")
        if self.read_handler is None:
            return
        try:
            await self.read_handler(user_id, notification_id)
        except Exception as e:
            logger.error(f"markNotificationRead handler failed for {user_id}: {e}")

    async def on_error(self, sid: str, error: Any = None):
        logger.error(f"Socket error on {sid}: {error}")

    async def _emit_online_count(self):
        await self.server.emit("onlineUsers", {"count": self.registry.online_count()})

    # ------------------------------------------------------------
    # Delivery API (called from other parts of the application)
    # ------------------------------------------------------------

    async def send_to_user(self, user_id: UserId, notification: Any) -> bool:
        """
        Emit newNotification to every socket of a user.
        Offline users are a silent no-op; delivery is never confirmed.
        """
        return await self.emit_to_user(user_id, "newNotification", notification)

    async def send_to_users(self, user_ids: Iterable[UserId], notification: Any) -> bool:
        return await self.emit_to_users(user_ids, "newNotification", notification)

    async def broadcast_to_all(self, notification: Any) -> bool:
        """Emit broadcast to every connected socket."""
        try:
            await self.server.emit("broadcast", notification)
        except Exception as e:
            logger.error(f"Error broadcasting notification: {e}")
            return False
        logger.debug("Broadcast notification sent")
        return True

    async def emit_to_user(self, user_id: UserId, event: str, data: Any) -> bool:
        room = str(user_id)
        try:
            await self.server.emit(event, data, room=room)
        except Exception as e:
            logger.error(f"Error sending {event} to user {room}: {e}")
            return False
        logger.debug(f"Emitted {event} to user {room}")
        return True

    async def emit_to_users(self, user_ids: Iterable[UserId], event: str, data: Any) -> bool:
        """Emit an event to each user's room; skips falsy ids."""
        try:
            server = self.server
            rooms = [str(user_id) for user_id in user_ids if user_id]
            for room in rooms:
                await server.emit(event, data, room=room)
        except Exception as e:
            logger.error(f"Error sending {event} to users: {e}")
            return False
        logger.debug(f"Emitted {event} to {len(rooms)} users")
        return True

    async def send_chat_message(
        self,
        sender_id: UserId,
        recipient_id: UserId,
        message: Any,
        notification: Any = None,
    ) -> bool:
        """
        Deliver a direct message to the recipient and echo it to the
        sender's other tabs; optionally notify the recipient as well.
        """
        delivered = await self.emit_to_users([recipient_id, sender_id], "newMessage", message)
        if delivered and notification is not None:
            delivered = await self.send_to_user(recipient_id, notification)
        return delivered

    # ------------------------------------------------------------
    # Registry queries
    # ------------------------------------------------------------

    def is_user_online(self, user_id: UserId) -> bool:
        return self.registry.is_user_online(user_id)

    def online_count(self) -> int:
        return self.registry.online_count()

    def online_user_ids(self) -> list:
        return self.registry.online_user_ids()

    def connection_id_for(self, user_id: UserId) -> Optional[str]:
        return self.registry.connection_id_for(user_id)
