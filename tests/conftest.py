"""
Shared pytest fixtures and configuration.
"""

from datetime import timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

import lastfast.settings as settings_mod
from lastfast.actions.fasting import FastingController
from lastfast.actions.live_status import LiveStatus
from lastfast.api.app import create_app
from lastfast.scheduling.notifications import LocalNotificationCenter, NotificationScheduler
from lastfast.store.sessions import SessionStore


@pytest.fixture(autouse=True)
def tmp_settings_file(tmp_path, monkeypatch):
    """
    Redirect the settings store to a fresh temp file for each test.
    Also resets the in-memory cache so each test starts clean.
    """
    fake_file = tmp_path / "settings.json"
    monkeypatch.setattr(settings_mod, "_FILE", fake_file)
    monkeypatch.setattr(settings_mod, "_current", {})
    yield fake_file


@pytest.fixture
def store(tmp_path):
    """A fresh SessionStore backed by a temp file."""
    return SessionStore(tmp_path / "sessions.db")


@pytest.fixture
def center():
    return LocalNotificationCenter()


@pytest.fixture
def live():
    return LiveStatus(enabled=True)


@pytest.fixture
def remembered():
    """Stand-in for the persisted goal setting."""
    return {"goal": 960}


@pytest.fixture
def controller(store, center, live, remembered):
    return FastingController(
        store,
        NotificationScheduler(center, tz=timezone.utc),
        live,
        saved_goal=lambda: remembered["goal"],
        remember_goal=lambda goal: remembered.update(goal=goal),
    )


@pytest.fixture
def app(tmp_path):
    """Create a fresh app instance with its own database per test."""
    return create_app(db_path=tmp_path / "api.db")


@pytest_asyncio.fixture
async def client(app):
    """Async HTTP client wired directly to the ASGI app (no server needed)."""
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
