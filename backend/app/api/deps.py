from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.realtime.auth import USER_BLOCKED
from app.realtime.errors import AuthenticationError
from app.realtime.relay import NotificationRelay

security = HTTPBearer(auto_error=False)


def get_relay(request: Request) -> NotificationRelay:
    """The relay built at startup by create_app."""
    return request.app.state.relay


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    relay: NotificationRelay = Depends(get_relay),
) -> dict:
    """Resolve a bearer token with the same rules as the socket handshake."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return await relay.authenticator.authenticate_token(credentials.credentials)
    except AuthenticationError as e:
        if e.reason == USER_BLOCKED:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.reason)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.reason,
            headers={"WWW-Authenticate": "Bearer"},
        )
