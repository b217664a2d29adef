"""Event endpoints.

Provides REST API for creating, querying and editing single events in the
active calendar.
"""

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from api.dependencies import ActiveCalendarDep
from api.models import ERROR_RESPONSES, EditPropertyRequest, EventListResponse
from models.errors import EventNotFoundError
from models.event import Event

router = APIRouter(
    prefix="/events",
    tags=["events"],
    responses=ERROR_RESPONSES,
)


# Request Models


class CreateEventRequest(BaseModel):
    """Request to create a single event.

    Omitting ``end`` creates an all-day event on the start's date.

    Args:
        subject: Event subject.
        start: Start date-time (``YYYY-MM-DDTHH:MM``) or date for all-day events.
        end: End date-time.
        description: Event description.
        location: ``physical`` or ``online``.
        location_detail: Room, address or link.
        status: ``public`` or ``private``.
    """

    subject: str = Field(description="Event subject")
    start: str = Field(description="Start date-time or date")
    end: Optional[str] = Field(default=None, description="End date-time")
    description: Optional[str] = Field(default=None, description="Event description")
    location: Optional[str] = Field(default=None, description="Event location")
    location_detail: Optional[str] = Field(default=None, description="Location detail")
    status: Optional[str] = Field(default=None, description="Event status")


# Response Models


class BusyResponse(BaseModel):
    """Response model for busy checks.

    Args:
        at: The instant checked.
        busy: Whether any event occupies it.
    """

    at: str
    busy: bool


# Route Handlers


@router.post("", response_model=Event)
async def create_event(request: CreateEventRequest, calendar: ActiveCalendarDep):
    """Create a single event in the active calendar.

    Args:
        request: Event details.
        calendar: Active calendar dependency.

    Returns:
        The created event.
    """
    return calendar.store.create_event(
        request.subject,
        request.start,
        request.end,
        description=request.description,
        location=request.location,
        location_detail=request.location_detail,
        status=request.status,
    )


@router.get("/on/{day}", response_model=EventListResponse)
async def get_events_on(day: str, calendar: ActiveCalendarDep):
    """List events touching a calendar day (``YYYY-MM-DD``)."""
    return EventListResponse.of(calendar.store.get_events_on(day))


@router.get("/range", response_model=EventListResponse)
async def get_events_in_range(start: str, end: str, calendar: ActiveCalendarDep):
    """List events overlapping the half-open range [start, end).

    Args:
        start: Range start date-time.
        end: Range end date-time.
        calendar: Active calendar dependency.

    Returns:
        Overlapping events in chronological order.
    """
    return EventListResponse.of(calendar.store.get_events_in_range(start, end))


@router.get("/find", response_model=EventListResponse)
async def find_events(
    subject: str, start: str, calendar: ActiveCalendarDep, end: Optional[str] = None
):
    """Find events by subject (case-insensitive) and exact start, optionally exact end."""
    if end is None:
        events = calendar.store.find_by_subject_and_start(subject, start)
    else:
        events = calendar.store.find_by_details(subject, start, end)
    return EventListResponse.of(events)


@router.get("/busy", response_model=BusyResponse)
async def is_busy(at: str, calendar: ActiveCalendarDep):
    """Check whether any event occupies an instant."""
    return BusyResponse(at=at, busy=calendar.store.is_busy_at(at))


@router.get("/{event_id}", response_model=Event)
async def get_event(event_id: str, calendar: ActiveCalendarDep):
    """Get a single event by ID.

    Raises:
        EventNotFoundError: If the active calendar has no such event.
    """
    event = calendar.store.get_event(event_id)
    if event is None:
        raise EventNotFoundError(f"Event not found: {event_id}")
    return event


@router.patch("/{event_id}", response_model=Event)
async def edit_event(event_id: str, request: EditPropertyRequest, calendar: ActiveCalendarDep):
    """Edit one property of an event.

    Editing ``start`` or ``end`` of a series occurrence detaches it from the
    series.

    Args:
        event_id: Event to edit.
        request: Property and new value.
        calendar: Active calendar dependency.

    Returns:
        The edited event.
    """
    return calendar.store.edit_event(event_id, request.property, request.value)
