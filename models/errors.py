"""Error kinds raised by the calendar engine.

Every failure the core can report is a subclass of CalendarError. The ``kind``
attribute is the stable name of the error and is what the HTTP layer uses to
pick a status code.
"""

from datetime import datetime
from typing import Optional


class CalendarError(Exception):
    """Base class for all calendar engine errors.

    Args:
        message: Human-readable description of the failure.
    """

    kind: str = "CalendarError"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidRangeError(CalendarError):
    """Raised when a start instant or date falls after its end.

    Args:
        start: The offending start value.
        end: The offending end value.
        message: Optional override for the default message.
    """

    kind = "InvalidRange"

    def __init__(self, start, end, message: Optional[str] = None):
        self.start = start
        self.end = end
        super().__init__(message or f"Start {start} is after end {end}")


class DuplicateEventError(CalendarError):
    """Raised when an event with the same subject, start and end already exists.

    Args:
        subject: Subject of the rejected event.
        start: Start of the rejected event.
        end: End of the rejected event.
    """

    kind = "DuplicateEvent"

    def __init__(self, subject: str, start: datetime, end: datetime):
        self.subject = subject
        self.start = start
        self.end = end
        super().__init__(
            f"Event '{subject}' from {start.isoformat()} to {end.isoformat()} already exists"
        )


class InvalidSeriesError(CalendarError):
    """Raised when a recurrence pattern cannot be built."""

    kind = "InvalidSeries"


class SeriesSpanError(CalendarError):
    """Raised when a series occurrence would cross a calendar-day boundary."""

    kind = "SeriesSpanError"


class EventNotFoundError(CalendarError):
    """Raised when no event matches an id or a lookup.

    Args:
        message: Description of what was looked up.
    """

    kind = "NotFound"


class AmbiguousMatchError(CalendarError):
    """Raised when a lookup that must be unique matches several events.

    Args:
        message: Description of the lookup.
        count: Number of events that matched.
    """

    kind = "AmbiguousMatch"

    def __init__(self, message: str, count: int):
        self.count = count
        super().__init__(message)


class ConflictingEventError(CalendarError):
    """Raised when an edit would make an event equal to another stored event.

    Args:
        event_id: The event whose edit was rolled back.
        conflicting_id: The stored event it would have collided with.
    """

    kind = "ConflictingEvent"

    def __init__(self, event_id: str, conflicting_id: str):
        self.event_id = event_id
        self.conflicting_id = conflicting_id
        super().__init__(
            f"Edit of event {event_id} conflicts with existing event {conflicting_id}"
        )


class InvalidEnumError(CalendarError):
    """Raised when text does not name a member of a closed value set.

    Args:
        enum_name: Name of the value set (e.g. "location").
        value: The rejected text.
        allowed: The accepted textual forms.
    """

    kind = "InvalidEnum"

    def __init__(self, enum_name: str, value: object, allowed: list[str]):
        self.enum_name = enum_name
        self.value = value
        self.allowed = allowed
        super().__init__(
            f"Invalid {enum_name}: {value!r}, valid values are: {', '.join(allowed)}"
        )


class InvalidValueError(CalendarError):
    """Raised when date, time or date-time text cannot be parsed."""

    kind = "InvalidValue"


class NoActiveCalendarError(CalendarError):
    """Raised when an operation needs an active calendar and none is selected."""

    kind = "NoActiveCalendar"

    def __init__(self, message: str = "No calendar in use; select one first"):
        super().__init__(message)


class CalendarNotFoundError(CalendarError):
    """Raised when a calendar name does not resolve.

    Args:
        name: The requested calendar name.
        available: Names that do exist.
    """

    kind = "CalendarNotFound"

    def __init__(self, name: str, available: Optional[list[str]] = None):
        self.name = name
        self.available = available or []
        super().__init__(f"Calendar not found: {name}")


class DuplicateCalendarError(CalendarError):
    """Raised when creating or renaming onto an existing calendar name."""

    kind = "DuplicateCalendar"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Calendar with name '{name}' already exists")


class InvalidTimezoneError(CalendarError):
    """Raised when a timezone identifier is not a known IANA zone."""

    kind = "InvalidTimezone"

    def __init__(self, timezone: str):
        self.timezone = timezone
        super().__init__(f"Invalid timezone: {timezone}")


class InvalidCalendarNameError(CalendarError):
    """Raised when a calendar name is empty or blank."""

    kind = "InvalidCalendarName"
