from pydantic_settings import BaseSettings
from typing import List, Optional
import logging
import os


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "helping-hands"
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = False
    TESTING: bool = False

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite+aiosqlite:///./helping_hands.db"
    )

    # JWT
    JWT_SECRET: str = os.getenv("JWT_SECRET", "your-secret-key-change-in-production")
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 15

    # CORS
    FRONTEND_URL: Optional[str] = os.getenv("FRONTEND_URL")
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
        "http://localhost:8081",
        "http://localhost:3000",
    ]

    # Socket.IO
    SOCKETIO_PATH: str = "socket.io"
    SOCKET_PING_TIMEOUT: int = 60
    SOCKET_PING_INTERVAL: int = 25

    class Config:
        env_file = ".env"

    @property
    def allowed_origins(self) -> List[str]:
        """Configured origins plus FRONTEND_URL when set."""
        origins = list(self.CORS_ORIGINS)
        if self.FRONTEND_URL and self.FRONTEND_URL not in origins:
            origins.append(self.FRONTEND_URL)
        return origins


settings = Settings()

logger = logging.getLogger(settings.APP_NAME)
