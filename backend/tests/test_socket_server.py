import socketio

from app.main import create_app
from app.realtime.socket import create_socket_server


def test_server_heartbeat_and_cors(test_settings):
    sio = create_socket_server(test_settings)

    assert isinstance(sio, socketio.AsyncServer)
    assert sio.eio.ping_timeout == 60
    assert sio.eio.ping_interval == 25
    assert "http://localhost:5173" in sio.eio.cors_allowed_origins
    assert "https://helpinghands.example" in sio.eio.cors_allowed_origins


def test_frontend_url_optional(test_settings):
    test_settings.FRONTEND_URL = None

    assert test_settings.allowed_origins == test_settings.CORS_ORIGINS


def test_create_app_wraps_api(test_settings, users):
    asgi = create_app(test_settings, users=users, use_lifespan=False)

    assert isinstance(asgi, socketio.ASGIApp)
