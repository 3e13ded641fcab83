from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt

from app.core.config import settings


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None,
                        secret: Optional[str] = None) -> str:
    """Sign an access token. Subjects go in the ``id`` claim."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt


def decode_token(token: str, secret: Optional[str] = None, algorithm: Optional[str] = None) -> dict:
    """Verify signature and expiry. Raises JWTError on failure."""
    return jwt.decode(
        token,
        secret or settings.JWT_SECRET,
        algorithms=[algorithm or settings.JWT_ALGORITHM],
    )


def token_subject(payload: dict) -> Optional[str]:
    """Subject id from the ``id`` claim, falling back to ``sub``."""
    subject = payload.get("id")
    if subject is None:
        subject = payload.get("sub")
    if subject is None:
        return None
    return str(subject)


__all__ = ["create_access_token", "decode_token", "token_subject", "JWTError"]
