"""Calendar endpoints.

Provides REST API for creating, renaming, retiming and selecting named
calendars.
"""

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from api.dependencies import CoordinatorDep
from api.models import ERROR_RESPONSES, EditPropertyRequest
from models.calendar import NamedCalendar
from models.coordinator import CalendarCoordinator

router = APIRouter(
    prefix="/calendars",
    tags=["calendars"],
    responses=ERROR_RESPONSES,
)


# Request Models


class CreateCalendarRequest(BaseModel):
    """Request to create a new calendar.

    Args:
        name: Calendar name.
        timezone: IANA timezone; defaults to the configured default zone.
    """

    name: str = Field(description="Calendar name")
    timezone: Optional[str] = Field(default=None, description="IANA timezone")


# Response Models


class CalendarResponse(BaseModel):
    """Response model for a single calendar.

    Args:
        name: Calendar name.
        timezone: IANA timezone.
        event_count: Number of stored events.
        series_count: Number of registered series.
        active: Whether this is the calendar in use.
    """

    name: str
    timezone: str
    event_count: int
    series_count: int
    active: bool

    @classmethod
    def of(cls, calendar: NamedCalendar, coordinator: CalendarCoordinator) -> "CalendarResponse":
        return cls(
            **calendar.get_summary(),
            active=coordinator.active_calendar is calendar,
        )


class CalendarListResponse(BaseModel):
    """Response model for the calendar listing.

    Args:
        calendars: Calendars ordered by name.
        active: Name of the calendar in use, if any.
        count: Number of calendars.
    """

    calendars: list[CalendarResponse]
    active: Optional[str]
    count: int


# Route Handlers


@router.get("", response_model=CalendarListResponse)
async def list_calendars(coordinator: CoordinatorDep):
    """List every calendar.

    Args:
        coordinator: Calendar coordinator dependency.

    Returns:
        Calendars ordered by name and the active calendar's name.
    """
    calendars = [
        CalendarResponse.of(coordinator.get_calendar(name), coordinator)
        for name in coordinator.calendar_names()
    ]
    active = coordinator.active_calendar
    return CalendarListResponse(
        calendars=calendars,
        active=active.name if active else None,
        count=len(calendars),
    )


@router.post("", response_model=CalendarResponse)
async def create_calendar(request: CreateCalendarRequest, coordinator: CoordinatorDep):
    """Create a new calendar.

    Args:
        request: Calendar name and optional timezone.
        coordinator: Calendar coordinator dependency.

    Returns:
        The created calendar.
    """
    calendar = coordinator.create_calendar(request.name, request.timezone)
    return CalendarResponse.of(calendar, coordinator)


@router.get("/active", response_model=CalendarResponse)
async def get_active_calendar(coordinator: CoordinatorDep):
    """Get the calendar currently in use.

    Raises:
        NoActiveCalendarError: If no calendar has been selected.
    """
    return CalendarResponse.of(coordinator.require_active(), coordinator)


@router.patch("/{name}", response_model=CalendarResponse)
async def edit_calendar(name: str, request: EditPropertyRequest, coordinator: CoordinatorDep):
    """Rename a calendar or change its timezone.

    Args:
        name: Calendar to edit.
        request: ``name`` or ``timezone`` and the new value.
        coordinator: Calendar coordinator dependency.

    Returns:
        The edited calendar.
    """
    calendar = coordinator.edit_calendar(name, request.property, request.value or "")
    return CalendarResponse.of(calendar, coordinator)


@router.post("/{name}/use", response_model=CalendarResponse)
async def use_calendar(name: str, coordinator: CoordinatorDep):
    """Select the calendar that event, series and copy endpoints act on."""
    calendar = coordinator.use_calendar(name)
    return CalendarResponse.of(calendar, coordinator)
