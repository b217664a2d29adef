"""Copy endpoints.

Provides REST API for copying events from the active calendar into another
calendar, converting times between the two calendars' timezones.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from api.dependencies import CoordinatorDep
from api.models import ERROR_RESPONSES, BatchCopyResponse
from models.event import Event

router = APIRouter(
    prefix="/copy",
    tags=["copy"],
    responses=ERROR_RESPONSES,
)


# Request Models


class CopyEventRequest(BaseModel):
    """Request to copy one event.

    Args:
        subject: Subject of the source event.
        source_start: Exact start of the source event.
        target_calendar: Calendar to copy into.
        target_start: Start of the copy, in the target calendar's zone.
    """

    subject: str = Field(description="Source event subject")
    source_start: str = Field(description="Source event start")
    target_calendar: str = Field(description="Target calendar name")
    target_start: str = Field(description="Copy start")


class CopyDateRequest(BaseModel):
    """Request to copy every event on one day.

    Args:
        source_date: Day to copy from.
        target_calendar: Calendar to copy into.
        target_date: Day to place the copies on.
    """

    source_date: str = Field(description="Source day")
    target_calendar: str = Field(description="Target calendar name")
    target_date: str = Field(description="Target day")


class CopyRangeRequest(BaseModel):
    """Request to copy every event in an inclusive date range.

    Args:
        start_date: First source day.
        end_date: Last source day (inclusive).
        target_calendar: Calendar to copy into.
        target_start_date: Day that ``start_date`` maps onto.
    """

    start_date: str = Field(description="First source day")
    end_date: str = Field(description="Last source day")
    target_calendar: str = Field(description="Target calendar name")
    target_start_date: str = Field(description="Target start day")


# Route Handlers


@router.post("/event", response_model=Event)
async def copy_event(request: CopyEventRequest, coordinator: CoordinatorDep):
    """Copy one event from the active calendar.

    Args:
        request: Source event and target placement.
        coordinator: Calendar coordinator dependency.

    Returns:
        The created copy.
    """
    return coordinator.copy_event(
        request.subject,
        request.source_start,
        request.target_calendar,
        request.target_start,
    )


@router.post("/date", response_model=BatchCopyResponse)
async def copy_events_on_date(request: CopyDateRequest, coordinator: CoordinatorDep):
    """Copy every event on one day of the active calendar.

    Individual failures are reported in the response and do not stop the batch.
    """
    report = coordinator.copy_events_on_date(
        request.source_date, request.target_calendar, request.target_date
    )
    return BatchCopyResponse.of(report)


@router.post("/range", response_model=BatchCopyResponse)
async def copy_events_between_dates(request: CopyRangeRequest, coordinator: CoordinatorDep):
    """Copy every event in a date range of the active calendar.

    Individual failures are reported in the response and do not stop the batch.
    """
    report = coordinator.copy_events_between_dates(
        request.start_date,
        request.end_date,
        request.target_calendar,
        request.target_start_date,
    )
    return BatchCopyResponse.of(report)
