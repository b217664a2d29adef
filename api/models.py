"""Shared request and response models for API endpoints.

This module contains models used across several route modules so that
events, series and copy results are returned with a consistent shape.
"""

from typing import Optional

from pydantic import BaseModel, Field

from models.coordinator import CopyFailure, CopyReport
from models.event import Event
from models.series import Series
from models.store import EventStore


class EditPropertyRequest(BaseModel):
    """Request to change one property of an event, series or calendar.

    Attributes:
        property: Property name (e.g. ``subject``, ``start``, ``location``).
        value: New value as text; ``None`` clears a description.
    """

    property: str = Field(description="Property to edit")
    value: Optional[str] = Field(default=None, description="New value")


class EventListResponse(BaseModel):
    """Response model for endpoints returning several events.

    Attributes:
        events: Events in chronological order.
        count: Number of events returned.
    """

    events: list[Event]
    count: int

    @classmethod
    def of(cls, events: list[Event]) -> "EventListResponse":
        return cls(events=events, count=len(events))


class SeriesResponse(BaseModel):
    """Response model for a series and its linked occurrences.

    Attributes:
        series: The recurrence pattern.
        end_time: Occurrence end time of day (``HH:MM``).
        events: Occurrences still linked to the series.
        count: Number of linked occurrences.
    """

    series: Series
    end_time: str
    events: list[Event]
    count: int

    @classmethod
    def of(cls, series: Series, store: EventStore) -> "SeriesResponse":
        members = store.series_members(series.series_id)
        return cls(
            series=series,
            end_time=series.end_time.isoformat(timespec="minutes"),
            events=members,
            count=len(members),
        )


class BatchCopyResponse(BaseModel):
    """Response model for batch copy endpoints.

    Attributes:
        copied: Copies created in the target calendar.
        failures: Events that could not be copied, with the error kind.
        copied_count: Number of copies created.
        failed_count: Number of failures.
    """

    copied: list[Event]
    failures: list[CopyFailure]
    copied_count: int
    failed_count: int

    @classmethod
    def of(cls, report: CopyReport) -> "BatchCopyResponse":
        return cls(
            copied=report.copied,
            failures=report.failures,
            copied_count=len(report.copied),
            failed_count=len(report.failures),
        )


class ErrorResponse(BaseModel):
    """Standard error response model.

    Attributes:
        error: Error kind (e.g. ``DuplicateEvent``).
        detail: Human-readable error message.
    """

    error: str
    detail: str


# OpenAPI documentation for the errors calendar_error_handler can return
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    404: {"model": ErrorResponse, "description": "Calendar, event or series not found"},
    409: {"model": ErrorResponse, "description": "Conflict with the current state"},
}
