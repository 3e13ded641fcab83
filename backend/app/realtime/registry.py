"""
In-memory registry of live Socket.IO connections per user.

Supports multiple browser tabs/devices per user: each user maps to an
ordered set of socket ids, and each socket id maps back to its user so a
disconnect only ever removes its own entry.
"""
import logging
from typing import Dict, List, Optional, Union
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

UserId = Union[str, int]


@dataclass
class ConnectionRegistry:
    """
    Structure:
    - user_sockets[user_id] = {socket_id: None, ...} (insertion ordered)
    - socket_users[socket_id] = user_id (for cleanup on disconnect)
    """
    user_sockets: Dict[str, Dict[str, None]] = field(default_factory=dict)
    socket_users: Dict[str, str] = field(default_factory=dict)

    def register(self, user_id: UserId, socket_id: str) -> bool:
        """
        Record a newly admitted connection.

        Returns True if this is the user's first live socket (they came online).
        """
        user_id = str(user_id)

        # A socket id is only ever owned by one user
        previous = self.socket_users.get(socket_id)
        if previous is not None and previous != user_id:
            self.unregister(socket_id)

        sockets = self.user_sockets.setdefault(user_id, {})
        came_online = not sockets
        sockets.pop(socket_id, None)
        sockets[socket_id] = None
        self.socket_users[socket_id] = user_id

        if came_online:
            logger.info(f"User {user_id} came online (socket: {socket_id})")
        else:
            logger.debug(f"User {user_id} added socket {socket_id} (now {len(sockets)} connections)")
        return came_online

    def unregister(self, socket_id: str) -> Optional[dict]:
        """
        Remove one connection.

        Returns {user_id, went_offline} if the socket was tracked, else None.
        """
        user_id = self.socket_users.pop(socket_id, None)
        if user_id is None:
            return None

        sockets = self.user_sockets.get(user_id, {})
        sockets.pop(socket_id, None)
        went_offline = not sockets
        if went_offline:
            self.user_sockets.pop(user_id, None)
            logger.info(f"User {user_id} went offline")
        else:
            logger.debug(f"User {user_id} closed socket {socket_id} ({len(sockets)} remaining)")

        return {"user_id": user_id, "went_offline": went_offline}

    def is_user_online(self, user_id: UserId) -> bool:
        return bool(self.user_sockets.get(str(user_id)))

    def online_count(self) -> int:
        """Number of distinct users with at least one live socket."""
        return len(self.user_sockets)

    def online_user_ids(self) -> List[str]:
        return list(self.user_sockets.keys())

    def connection_id_for(self, user_id: UserId) -> Optional[str]:
        """Most recently admitted live socket id for a user."""
        sockets = self.user_sockets.get(str(user_id))
        if not sockets:
            return None
        return next(reversed(sockets))

    def connection_ids_for(self, user_id: UserId) -> List[str]:
        return list(self.user_sockets.get(str(user_id), {}))

    def user_for(self, socket_id: str) -> Optional[str]:
        return self.socket_users.get(socket_id)

    def connection_count(self) -> int:
        return len(self.socket_users)

    def clear(self):
        """Drop all entries (process restart semantics, tests)."""
        self.user_sockets.clear()
        self.socket_users.clear()
