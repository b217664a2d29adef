"""Dependency injection providers for the FastAPI application.

This module defines dependencies that can be injected into route handlers,
providing access to the shared CalendarCoordinator.
"""

from typing import Annotated, Optional

from fastapi import Depends

from models.calendar import NamedCalendar
from models.coordinator import CalendarCoordinator
from models.settings import EngineSettings


# Global state
# The engine is a single-process in-memory store, so one coordinator is
# created when the app starts and shared by every request.
_coordinator: CalendarCoordinator | None = None


def get_coordinator() -> CalendarCoordinator:
    """Get the shared CalendarCoordinator instance.

    Returns:
        The shared CalendarCoordinator instance.

    Raises:
        RuntimeError: If the coordinator hasn't been initialized yet.
    """
    if _coordinator is None:
        raise RuntimeError(
            "CalendarCoordinator not initialized. Call initialize_coordinator() first."
        )

    return _coordinator


def initialize_coordinator(settings: Optional[EngineSettings] = None) -> CalendarCoordinator:
    """Initialize the shared CalendarCoordinator instance.

    This should be called once when the FastAPI app starts up.

    Args:
        settings: Engine settings; defaults to EngineSettings().

    Returns:
        The newly created CalendarCoordinator instance.
    """
    global _coordinator

    _coordinator = CalendarCoordinator(settings)
    return _coordinator


def shutdown_coordinator():
    """Drop the shared CalendarCoordinator when the app shuts down."""
    global _coordinator

    _coordinator = None


# Type aliases for dependency injection
CoordinatorDep = Annotated[CalendarCoordinator, Depends(get_coordinator)]


def get_active_calendar(coordinator: CoordinatorDep) -> NamedCalendar:
    """Resolve the active calendar for routes that operate on it.

    Raises:
        NoActiveCalendarError: If no calendar is in use.
    """
    return coordinator.require_active()


ActiveCalendarDep = Annotated[NamedCalendar, Depends(get_active_calendar)]
