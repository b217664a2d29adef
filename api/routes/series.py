"""Series endpoints.

Provides REST API for creating recurring series in the active calendar and
editing them as a whole or from one occurrence forward.
"""

from typing import Optional, Union

from fastapi import APIRouter
from pydantic import BaseModel, Field

from api.dependencies import ActiveCalendarDep
from api.models import ERROR_RESPONSES, EditPropertyRequest, SeriesResponse
from models.calendar import NamedCalendar
from models.errors import EventNotFoundError
from models.series import Series

router = APIRouter(
    prefix="/series",
    tags=["series"],
    responses=ERROR_RESPONSES,
)


# Request Models


class CreateSeriesRequest(BaseModel):
    """Request to create a recurring series.

    Exactly one of ``end_date`` and ``occurrence_count`` must be given.

    Args:
        subject: Subject of every occurrence.
        start_time: Occurrence start time (``HH:MM``).
        end_time: Occurrence end time (``HH:MM``), same day.
        weekdays: Compact symbols such as ``"MWF"`` or a list of weekday names.
        start_date: First date considered (``YYYY-MM-DD``).
        end_date: Inclusive last date.
        occurrence_count: Number of occurrences.
        description: Description of every occurrence.
        location: ``physical`` or ``online``.
        location_detail: Room, address or link.
        status: ``public`` or ``private``.
    """

    subject: str = Field(description="Series subject")
    start_time: str = Field(description="Occurrence start time")
    end_time: str = Field(description="Occurrence end time")
    weekdays: Union[str, list[str]] = Field(description="Recurrence weekdays")
    start_date: str = Field(description="Anchor date")
    end_date: Optional[str] = Field(default=None, description="Inclusive end date")
    occurrence_count: Optional[int] = Field(default=None, description="Occurrence count")
    description: Optional[str] = Field(default=None, description="Description")
    location: Optional[str] = Field(default=None, description="Location")
    location_detail: Optional[str] = Field(default=None, description="Location detail")
    status: Optional[str] = Field(default=None, description="Status")


class EditSeriesFromRequest(EditPropertyRequest):
    """Request to edit a series from one occurrence forward.

    Args:
        from_start: Start of the first occurrence to edit; defaults to the
            earliest occurrence still linked to the series.
    """

    from_start: Optional[str] = Field(default=None, description="First occurrence start")


def _require_series(calendar: NamedCalendar, series_id: str) -> Series:
    series = calendar.store.get_series_by_id(series_id)
    if series is None:
        raise EventNotFoundError(f"Series not found: {series_id}")
    return series


# Route Handlers


@router.post("", response_model=SeriesResponse)
async def create_series(request: CreateSeriesRequest, calendar: ActiveCalendarDep):
    """Create a recurring series and all of its occurrences.

    Args:
        request: Pattern, termination and metadata.
        calendar: Active calendar dependency.

    Returns:
        The series and its generated occurrences.
    """
    series = calendar.store.create_event_series(
        subject=request.subject,
        start_time=request.start_time,
        end_time=request.end_time,
        weekdays=request.weekdays,
        start_date=request.start_date,
        end_date=request.end_date,
        occurrence_count=request.occurrence_count,
        description=request.description,
        location=request.location,
        location_detail=request.location_detail,
        status=request.status,
    )
    return SeriesResponse.of(series, calendar.store)


@router.get("/{series_id}", response_model=SeriesResponse)
async def get_series(series_id: str, calendar: ActiveCalendarDep):
    """Get a series pattern and its linked occurrences."""
    return SeriesResponse.of(_require_series(calendar, series_id), calendar.store)


@router.patch("/{series_id}", response_model=SeriesResponse)
async def edit_series(series_id: str, request: EditPropertyRequest, calendar: ActiveCalendarDep):
    """Edit a property on every occurrence of a series.

    ``start`` and ``end`` take a time of day applied to each occurrence's own
    date.

    Args:
        series_id: Series to edit.
        request: Property and new value.
        calendar: Active calendar dependency.

    Returns:
        The edited series and its occurrences.
    """
    series = _require_series(calendar, series_id)
    calendar.store.edit_series(series_id, request.property, request.value)
    return SeriesResponse.of(series, calendar.store)


@router.patch("/{series_id}/from", response_model=SeriesResponse)
async def edit_series_from(
    series_id: str, request: EditSeriesFromRequest, calendar: ActiveCalendarDep
):
    """Edit a property on series occurrences from one occurrence forward.

    When a pattern property (subject, start, end) is edited on only part of the
    series, the edited occurrences move to a new series. The response describes
    the original series after the edit.

    Args:
        series_id: Series to edit.
        request: Property, new value and optional first occurrence start.
        calendar: Active calendar dependency.

    Returns:
        The original series and the occurrences still linked to it.
    """
    series = _require_series(calendar, series_id)
    calendar.store.edit_series_from_date(
        series_id, request.property, request.value, request.from_start
    )
    return SeriesResponse.of(series, calendar.store)
