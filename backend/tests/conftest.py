from datetime import timedelta
from typing import Optional

import pytest
from socketio.exceptions import ConnectionRefusedError as SocketConnectionRefused

from app.core.config import Settings
from app.core.security import create_access_token
from app.realtime.auth import SocketAuthenticator
from app.realtime.relay import NotificationRelay

TEST_SECRET = "test-secret"


@pytest.fixture
def test_settings():
    return Settings(JWT_SECRET=TEST_SECRET, FRONTEND_URL="https://helpinghands.example")


def make_token(user_id, expires_delta: Optional[timedelta] = None, secret: str = TEST_SECRET,
               claim: str = "id") -> str:
    """Create a test JWT token."""
    return create_access_token({claim: str(user_id)}, expires_delta or timedelta(hours=1), secret=secret)


class FakeUserDirectory:
    """In-memory user store keyed by string id."""

    def __init__(self, *users):
        self.users = {str(u["id"]): dict(u) for u in users}
        self.lookups = []

    def add(self, user_id, name, is_blocked=False):
        self.users[str(user_id)] = {
            "id": str(user_id),
            "name": name,
            "email": f"{name.lower()}@example.com",
            "hashed_password": "not-a-real-hash",
            "is_blocked": is_blocked,
        }

    async def get_user(self, user_id):
        self.lookups.append(user_id)
        user = self.users.get(str(user_id))
        return dict(user) if user else None


class FakeSocketServer:
    """
    Stand-in for socketio.AsyncServer implementing rooms, sessions and emit.

    Every sid is in a room named after itself, as in python-socketio.
    Packets only reach sids that are still connected.
    """

    def __init__(self):
        self.handlers = {}
        self.rooms = {}
        self.sessions = {}
        self.connected = set()
        self.sent = []
        self.manager = self

    def is_connected(self, sid, namespace):
        return sid in self.connected

    def on(self, event, handler=None):
        self.handlers[event] = handler

    async def save_session(self, sid, session):
        self.sessions[sid] = session

    async def get_session(self, sid):
        return self.sessions[sid]

    async def enter_room(self, sid, room):
        self.rooms.setdefault(room, set()).add(sid)

    async def emit(self, event, data=None, to=None, room=None, skip_sid=None):
        target = to if to is not None else room
        if target is None:
            sids = set(self.connected)
        else:
            sids = set(self.rooms.get(target, set()))
        for sid in sorted(sids & self.connected):
            if sid != skip_sid:
                self.sent.append((sid, event, data))

    # Test drivers

    async def connect(self, sid, token=None, headers=None) -> bool:
        """Run the connect handler; returns False if the handshake was refused."""
        environ = {}
        for key, value in (headers or {}).items():
            environ["HTTP_" + key.upper().replace("-", "_")] = value
        auth = {"token": token} if token else None

        self.connected.add(sid)
        self.rooms.setdefault(sid, set()).add(sid)
        try:
            result = await self.handlers["connect"](sid, environ, auth)
        except SocketConnectionRefused as e:
            self._drop(sid)
            self.last_refusal = e.error_args
            return False
        if result is False:
            self._drop(sid)
            return False
        return True

    async def disconnect(self, sid, reason="client namespace disconnect"):
        self.connected.discard(sid)
        await self.handlers["disconnect"](sid, reason)
        self._drop(sid)

    async def trigger(self, sid, event, *args):
        return await self.handlers[event](sid, *args)

    def received(self, sid, event=None):
        return [data for s, e, data in self.sent if s == sid and (event is None or e == event)]

    def _drop(self, sid):
        self.connected.discard(sid)
        self.sessions.pop(sid, None)
        for members in self.rooms.values():
            members.discard(sid)


@pytest.fixture
def users():
    directory = FakeUserDirectory()
    directory.add("u1", "Alice")
    directory.add("u2", "Bob")
    directory.add("u3", "Carol")
    directory.add("blocked", "Mallory", is_blocked=True)
    return directory


@pytest.fixture
def fake_server():
    return FakeSocketServer()


@pytest.fixture
def relay(users, test_settings, fake_server):
    authenticator = SocketAuthenticator(users, test_settings)
    return NotificationRelay(authenticator).initialize(fake_server)


@pytest.fixture
def uninitialized_relay(users, test_settings):
    return NotificationRelay(SocketAuthenticator(users, test_settings))


@pytest.fixture
def token_factory():
    return make_token
