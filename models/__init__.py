"""Calendar engine data models package.

This package contains the core of the calendar engine: events, recurring
series, the per-calendar event store with its edit engine, named calendars
and the coordinator that copies events between them.
"""

from models.calendar import NamedCalendar
from models.coordinator import CalendarCoordinator, CopyFailure, CopyReport
from models.enums import (
    CalendarProperty,
    EventProperty,
    EventStatus,
    Location,
    ParseResult,
    Weekday,
)
from models.errors import CalendarError
from models.event import Event
from models.series import Series
from models.settings import EngineSettings
from models.store import EventStore

__all__ = [
    "CalendarCoordinator",
    "CalendarError",
    "CalendarProperty",
    "CopyFailure",
    "CopyReport",
    "EngineSettings",
    "Event",
    "EventProperty",
    "EventStatus",
    "EventStore",
    "Location",
    "NamedCalendar",
    "ParseResult",
    "Series",
    "Weekday",
]
