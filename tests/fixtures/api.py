"""Shared fixtures for API testing.

These fixtures provide a TestClient wired to a fresh CalendarCoordinator
for each test, ensuring test isolation.
"""

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_coordinator
from main import app
from tests.fixtures.calendars import create_coordinator


@pytest.fixture
def fresh_coordinator():
    """Provide a fresh coordinator with an active "Home" (New York) calendar
    and a "Work" (Los Angeles) calendar."""
    return create_coordinator(
        {"Home": "America/New_York", "Work": "America/Los_Angeles"},
        active="Home",
    )


@pytest.fixture
def client(fresh_coordinator):
    """Provide a TestClient with a fresh coordinator injected.

    Uses FastAPI's dependency override system so routes see the test
    coordinator instead of the global one.

    Yields:
        A tuple of (TestClient, CalendarCoordinator).
    """
    app.dependency_overrides[get_coordinator] = lambda: fresh_coordinator

    yield TestClient(app), fresh_coordinator

    app.dependency_overrides.clear()


@pytest.fixture
def bare_client():
    """Provide a TestClient with a coordinator that has no calendars."""
    coordinator = create_coordinator()
    app.dependency_overrides[get_coordinator] = lambda: coordinator

    yield TestClient(app), coordinator

    app.dependency_overrides.clear()
