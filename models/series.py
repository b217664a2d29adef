"""Recurring event series model."""

from datetime import date, datetime, time, timedelta
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_serializer

from models.enums import Weekday
from models.errors import InvalidSeriesError, SeriesSpanError
from models.event import Event


class Series(BaseModel):
    """A weekly recurrence pattern that materializes into Event occurrences.

    The series keeps only the pattern. Occurrences it generated point back to it
    through ``Event.series_id``; the series never holds the live events, so the
    store stays the single owner of occurrences.

    Exactly one termination condition must be set: a positive occurrence count
    or an inclusive end date.

    Args:
        series_id: Unique series identifier.
        subject: Subject given to every occurrence.
        start_time: Time of day each occurrence starts.
        duration: Length of each occurrence; never crosses midnight.
        weekdays: Days of the week the series recurs on.
        start_date: Anchor date; expansion starts here.
        end_date: Inclusive last date, if terminated by date.
        occurrence_count: Number of occurrences, if terminated by count.

    Raises:
        InvalidSeriesError: If the pattern is empty, unterminated, doubly
            terminated, ends before it starts, or crosses midnight.
    """

    series_id: str = Field(
        default_factory=lambda: str(uuid4()),
        frozen=True,
        description="Unique series identifier",
    )
    subject: str = Field(description="Subject of every occurrence")
    start_time: time = Field(description="Occurrence start time of day")
    duration: timedelta = Field(description="Occurrence length")
    weekdays: frozenset[Weekday] = Field(description="Recurrence weekdays")
    start_date: date = Field(description="Anchor date")
    end_date: Optional[date] = Field(default=None, description="Inclusive end date")
    occurrence_count: Optional[int] = Field(
        default=None, description="Number of occurrences"
    )

    def __init__(self, **data):
        """Validate the recurrence pattern after field validation."""
        super().__init__(**data)
        self._validate_pattern()

    @classmethod
    def from_times(
        cls,
        subject: str,
        start_time: time,
        end_time: time,
        weekdays: frozenset[Weekday],
        start_date: date,
        end_date: Optional[date] = None,
        occurrence_count: Optional[int] = None,
    ) -> "Series":
        """Build a series from a start and end time of day.

        Args:
            subject: Subject of every occurrence.
            start_time: Occurrence start time.
            end_time: Occurrence end time, on the same day.
            weekdays: Recurrence weekdays.
            start_date: Anchor date.
            end_date: Inclusive end date, or None.
            occurrence_count: Occurrence count, or None.

        Returns:
            Validated Series.

        Raises:
            InvalidSeriesError: If the pattern is invalid.
        """
        anchor = datetime.combine(start_date, start_time)
        return cls(
            subject=subject,
            start_time=start_time,
            duration=datetime.combine(start_date, end_time) - anchor,
            weekdays=frozenset(weekdays),
            start_date=start_date,
            end_date=end_date,
            occurrence_count=occurrence_count,
        )

    @field_serializer("weekdays")
    def serialize_weekdays(self, weekdays: frozenset[Weekday]) -> list[str]:
        """Serialize weekdays in calendar order.

        Args:
            weekdays: Weekdays to serialize.

        Returns:
            Weekday names ordered Monday first.
        """
        return [day.value for day in sorted(weekdays, key=lambda day: day.index)]

    def _validate_pattern(self) -> None:
        if not self.weekdays:
            raise InvalidSeriesError("At least one recurrence day required")

        if self.occurrence_count is not None and self.occurrence_count <= 0:
            raise InvalidSeriesError(
                f"Occurrence count must be positive, got {self.occurrence_count}"
            )
        if (self.occurrence_count is None) == (self.end_date is None):
            raise InvalidSeriesError(
                "Series must specify exactly one of occurrence count or end date"
            )

        if self.end_date is not None and self.end_date < self.start_date:
            raise InvalidSeriesError(
                f"Series end date {self.end_date} is before start date {self.start_date}"
            )

        if self.duration < timedelta(0):
            raise InvalidSeriesError("Series end time is before its start time")
        if self._crosses_midnight(self.start_time, self.duration):
            raise InvalidSeriesError("Series occurrences must start and end on the same day")

    def _crosses_midnight(self, start_time: time, duration: timedelta) -> bool:
        anchor = datetime.combine(self.start_date, start_time)
        return (anchor + duration).date() != anchor.date()

    @property
    def end_time(self) -> time:
        """Time of day each occurrence ends."""
        return (datetime.combine(self.start_date, self.start_time) + self.duration).time()

    @property
    def is_count_terminated(self) -> bool:
        return self.occurrence_count is not None

    def check_duration(self, duration: timedelta, start_time: Optional[time] = None) -> None:
        """Verify an occurrence length stays within the anchor date.

        Args:
            duration: Candidate occurrence length.
            start_time: Candidate start time (defaults to the current one).

        Raises:
            SeriesSpanError: If an occurrence would cross a day boundary.
        """
        if self._crosses_midnight(start_time or self.start_time, duration):
            raise SeriesSpanError(
                f"Duration {duration} from {start_time or self.start_time} "
                f"would cross a day boundary"
            )

    def generate_events(self) -> list[Event]:
        """Expand the pattern into its occurrences.

        Walks forward one day at a time from the anchor date, emitting an
        occurrence on each recurrence weekday, until the occurrence count is
        reached or the day passes the (inclusive) end date.

        Returns:
            Occurrences in chronological order, linked to this series and not
            yet stored anywhere.

        Raises:
            SeriesSpanError: If an occurrence would cross a day boundary.
        """
        occurrences: list[Event] = []
        day = self.start_date

        while not self._exhausted(day, len(occurrences)):
            if Weekday.of(day) in self.weekdays:
                start = datetime.combine(day, self.start_time)
                end = start + self.duration
                if end.date() != day:
                    raise SeriesSpanError(
                        f"Generated occurrence spans multiple days: {start} to {end}"
                    )
                occurrences.append(
                    Event(
                        subject=self.subject,
                        start=start,
                        end=end,
                        series_id=self.series_id,
                    )
                )
            day += timedelta(days=1)

        return occurrences

    def _exhausted(self, day: date, count: int) -> bool:
        if self.end_date is not None:
            return day > self.end_date
        return count >= self.occurrence_count
