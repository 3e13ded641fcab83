from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional

from app.api import health, realtime
from app.core.config import Settings, settings as default_settings
from app.core.middleware import RequestContextMiddleware, global_exception_handler
from app.db.database import async_session, create_tables
from app.realtime import (
    NotificationRelay,
    SocketAuthenticator,
    create_socket_app,
    create_socket_server,
)
from app.realtime.relay import ReadHandler
from app.realtime.users import SqlUserDirectory


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await create_tables()
    yield


def create_api(
    settings: Settings = default_settings,
    users=None,
    read_handler: Optional[ReadHandler] = None,
    use_lifespan: bool = True,
) -> FastAPI:
    """
    Build the HTTP application and the relay it shares with the socket layer.

    The relay is initialized exactly once here and exposed as app.state.relay.
    """
    app = FastAPI(
        title="Helping Hands API",
        description="Presence and notification relay for Helping Hands",
        version="0.1.0",
        lifespan=lifespan if use_lifespan else None,
    )

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(health.router, prefix="", tags=["Health"])
    app.include_router(realtime.router, prefix="/api/realtime", tags=["Realtime"])

    authenticator = SocketAuthenticator(users or SqlUserDirectory(async_session), settings)
    relay = NotificationRelay(authenticator, read_handler=read_handler)
    sio = create_socket_server(settings)
    relay.initialize(sio)

    app.state.settings = settings
    app.state.sio = sio
    app.state.relay = relay
    return app


def create_app(settings: Settings = default_settings, **kwargs):
    """FastAPI app wrapped by the Socket.IO ASGI app."""
    api = create_api(settings, **kwargs)
    return create_socket_app(api.state.sio, api, settings)


app = create_app()
