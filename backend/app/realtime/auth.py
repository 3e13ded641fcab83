"""
Socket.IO authentication module.
Validates JWT tokens for socket connections.
"""
from typing import Optional, Protocol
import logging

from app.core.config import Settings, settings as default_settings
from app.core.security import JWTError, decode_token, token_subject
from app.realtime.errors import AuthenticationError

logger = logging.getLogger(__name__)

NO_TOKEN = "No token provided"
INVALID_TOKEN = "Invalid token"
USER_NOT_FOUND = "User not found"
USER_BLOCKED = "User is blocked"


class UserDirectory(Protocol):
    async def get_user(self, user_id: str) -> Optional[dict]:
        ...


def extract_token(auth: Optional[dict] = None, environ: Optional[dict] = None) -> Optional[str]:
    """
    Extract a bearer token from:
    1. auth.token (preferred - sent in Socket.IO auth object)
    2. Authorization header (fallback)
    """
    token = None

    if auth and isinstance(auth, dict):
        token = auth.get("token")

    if not token and environ:
        header = environ.get("HTTP_AUTHORIZATION", "")
        if header.startswith("Bearer "):
            token = header[7:].strip()

    return token or None


class SocketAuthenticator:
    """Verifies handshake credentials and resolves them to a user."""

    def __init__(self, users: UserDirectory, settings: Settings = default_settings):
        self.users = users
        self.secret = settings.JWT_SECRET
        self.algorithm = settings.JWT_ALGORITHM

    async def authenticate(self, auth: Optional[dict] = None, environ: Optional[dict] = None) -> dict:
        """
        Authenticate a Socket.IO connection attempt.

        Returns the user context ({id, name, email, is_blocked}).
        Raises AuthenticationError with the rejection reason.
        """
        token = extract_token(auth, environ)
        if not token:
            raise AuthenticationError(NO_TOKEN)
        return await self.authenticate_token(token)

    async def authenticate_token(self, token: str) -> dict:
        if not isinstance(token, str):
            logger.warning(f"Socket connection rejected: token is {type(token).__name__}, not a string")
            raise AuthenticationError(INVALID_TOKEN)

        try:
            payload = decode_token(token, self.secret, self.algorithm)
        except (JWTError, AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Socket connection rejected: Invalid JWT - {e}")
            raise AuthenticationError(INVALID_TOKEN)

        user_id = token_subject(payload)
        if not user_id:
            logger.warning("Socket connection rejected: No user id in token")
            raise AuthenticationError(INVALID_TOKEN)

        try:
            user = await self.users.get_user(user_id)
        except Exception as e:
            logger.error(f"Socket authentication error: {e}")
            raise AuthenticationError(INVALID_TOKEN)

        if not user:
            logger.warning(f"Socket connection rejected: User {user_id} not found")
            raise AuthenticationError(USER_NOT_FOUND)

        if user.get("is_blocked"):
            logger.warning(f"Socket connection rejected: User {user_id} is blocked")
            raise AuthenticationError(USER_BLOCKED)

        user = {k: v for k, v in user.items() if k not in ("hashed_password", "password")}

        logger.info(f"Socket authenticated for user {user.get('name')} (ID: {user_id})")
        return user


def decode_token_sync(token: str, settings: Settings = default_settings) -> Optional[dict]:
    """
    Synchronous token decode for simple validation.
    Does not verify user exists in database.
    """
    try:
        return decode_token(token, settings.JWT_SECRET, settings.JWT_ALGORITHM)
    except JWTError:
        return None
