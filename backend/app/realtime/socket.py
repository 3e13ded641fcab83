"""
Socket.IO server construction.
"""
import socketio

from app.core.config import Settings, settings as default_settings


def create_socket_server(settings: Settings = default_settings) -> socketio.AsyncServer:
    # async_mode="asgi" for FastAPI/Starlette compatibility
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=settings.allowed_origins,
        cors_credentials=True,
        ping_timeout=settings.SOCKET_PING_TIMEOUT,
        ping_interval=settings.SOCKET_PING_INTERVAL,
        logger=False,
        engineio_logger=False,
    )


def create_socket_app(server: socketio.AsyncServer, other_asgi_app=None,
                      settings: Settings = default_settings) -> socketio.ASGIApp:
    """Wrap the Socket.IO server, forwarding other traffic to other_asgi_app."""
    return socketio.ASGIApp(
        server,
        other_asgi_app=other_asgi_app,
        socketio_path=settings.SOCKETIO_PATH,
    )
