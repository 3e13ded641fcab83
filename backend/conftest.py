"""Pytest collection helpers for backend test runs.

This file sits at the backend/ directory root so pytest loads it before
collecting tests and the settings below are in place before any app module
builds engines or servers from them.
"""
import inspect
import os

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

from app.core.config import settings  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def force_testing_mode():
    """Force TESTING=True early in the test session so imports can read it."""
    settings.TESTING = True


@pytest.hookimpl(tryfirst=True)
def pytest_pycollect_makeitem(collector, name, obj):
    """Request anyio_backend up front for asyncio-marked coroutine tests so parametrized ids survive."""
    if collector.istestfunction(obj, name) and inspect.iscoroutinefunction(obj):
        if any(m.name == "asyncio" for m in getattr(obj, "pytestmark", ())):
            pytest.mark.usefixtures("anyio_backend")(obj)


def pytest_collection_modifyitems(items):
    """Treat pytest.mark.asyncio as anyio-compatible so tests run under the anyio plugin."""
    for item in items:
        if 'asyncio' in getattr(item, 'keywords', {}):
            item.add_marker(pytest.mark.anyio)


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"
