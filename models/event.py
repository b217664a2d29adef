"""Calendar event model."""

from datetime import date, datetime, timedelta
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_serializer

from models.enums import EventStatus, Location
from models.timeutil import format_datetime, iter_days


EventKey = tuple[str, datetime, datetime]


class Event(BaseModel):
    """One concrete occurrence on a calendar, standalone or generated by a series.

    Two events are duplicates when subject, start and end are all equal; equality
    and hashing are defined over that triple only, so description, location,
    status and series membership never affect uniqueness.

    Args:
        event_id: Unique event identifier, assigned at creation and never changed.
        subject: Event subject.
        start: Start wall-clock time.
        end: End wall-clock time (never before start).
        description: Free-text description.
        location: Physical or online.
        location_detail: Free-text detail for the location (room, link).
        status: Public or private.
        series_id: Series this occurrence belongs to; None when standalone.
    """

    event_id: str = Field(
        default_factory=lambda: str(uuid4()),
        frozen=True,
        description="Unique event identifier",
    )
    subject: str = Field(description="Event subject")
    start: datetime = Field(description="Start wall-clock time")
    end: datetime = Field(description="End wall-clock time")
    description: Optional[str] = Field(default=None, description="Event description")
    location: Optional[Location] = Field(default=None, description="Event location")
    location_detail: Optional[str] = Field(
        default=None, description="Location detail"
    )
    status: Optional[EventStatus] = Field(default=None, description="Event status")
    series_id: Optional[str] = Field(
        default=None, description="Owning series, None if standalone"
    )

    @field_serializer("start", "end")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime to ``YYYY-MM-DDTHH:MM``.

        Args:
            dt: Datetime to serialize.

        Returns:
            ISO format string.
        """
        return format_datetime(dt)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    @property
    def key(self) -> EventKey:
        """The (subject, start, end) triple that identifies duplicates."""
        return (self.subject, self.start, self.end)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def location_display(self) -> str:
        """Location rendered for display, e.g. ``PHYSICAL: Room 4``.

        Returns:
            Empty string when no location is set.
        """
        if self.location is None:
            return ""
        if self.location_detail:
            return f"{self.location.name}: {self.location_detail}"
        return self.location.name

    def is_standalone(self) -> bool:
        """Check if this occurrence is not linked to a series.

        Returns:
            True if series_id is None.
        """
        return self.series_id is None

    def days(self) -> list[date]:
        """Every calendar day this event touches, from start date to end date."""
        return list(iter_days(self.start.date(), self.end.date()))

    def occupies(self, instant: datetime) -> bool:
        """Check if the event is in progress at an instant.

        An event occupies the half-open interval [start, end): the end instant is
        free. A zero-duration event occupies exactly its single instant.

        Args:
            instant: Wall-clock time to test.

        Returns:
            True if the event occupies the instant.
        """
        if self.start == self.end:
            return instant == self.start
        return self.start <= instant < self.end

    def overlaps(self, range_start: datetime, range_end: datetime) -> bool:
        """Check if the event overlaps the half-open range [range_start, range_end).

        Zero-duration events and empty ranges fall back to the occupancy rule at
        the single instant involved.

        Args:
            range_start: Inclusive range start.
            range_end: Exclusive range end.

        Returns:
            True if any instant is shared.
        """
        if range_start == range_end:
            return self.occupies(range_start)
        if self.start == self.end:
            return range_start <= self.start < range_end
        return self.start < range_end and self.end > range_start

    def copy_to(self, start: datetime, end: datetime) -> "Event":
        """Build a standalone copy of this event at new times.

        The copy gets a fresh event_id and no series link; subject, description,
        location and status are carried verbatim.

        Args:
            start: Start of the copy.
            end: End of the copy.

        Returns:
            New Event, not yet stored anywhere.
        """
        return Event(
            subject=self.subject,
            start=start,
            end=end,
            description=self.description,
            location=self.location,
            location_detail=self.location_detail,
            status=self.status,
        )

    def get_summary(self) -> str:
        """Generate human-readable summary of this event.

        Returns:
            Summary string such as ``Standup (2025-06-02T09:00 to 2025-06-02T09:15)``.
        """
        summary = f"{self.subject} ({format_datetime(self.start)} to {format_datetime(self.end)})"
        if self.location is not None:
            summary += f" @ {self.location_display}"
        return summary
