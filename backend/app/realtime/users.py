"""
User lookup used by the socket handshake.
"""
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.models import User


def user_to_context(user: User) -> dict:
    """Public view of a user; never includes the password hash."""
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "is_blocked": bool(user.is_blocked),
    }


class SqlUserDirectory:
    """Resolves user ids against the users table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_user(self, user_id: str) -> Optional[dict]:
        # Non-numeric ids raise ValueError; the handshake treats that as a bad token
        pk = int(user_id)

        async with self.session_factory() as db:
            result = await db.execute(select(User).where(User.id == pk))
            user = result.scalar_one_or_none()
            if user is None:
                return None
            return user_to_context(user)
