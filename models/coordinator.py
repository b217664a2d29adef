"""Multi-calendar coordinator.

Holds the named calendars, tracks which one is active, and copies events
between calendars. Copies convert wall-clock times through the source and
target calendars' timezones; batch copies keep going past individual failures
and report them in a CopyReport.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Optional, Union

from pydantic import BaseModel, Field, field_serializer

from models.calendar import NamedCalendar
from models.enums import CalendarProperty
from models.errors import (
    AmbiguousMatchError,
    CalendarError,
    CalendarNotFoundError,
    DuplicateCalendarError,
    EventNotFoundError,
    InvalidCalendarNameError,
    InvalidRangeError,
    NoActiveCalendarError,
)
from models.event import Event
from models.settings import EngineSettings
from models.store import EventStore
from models.timeutil import (
    DateLike,
    DateTimeLike,
    convert_wall_time,
    format_datetime,
    parse_date,
    parse_datetime,
    resolve_zone,
    start_of_day,
)

logger = logging.getLogger(__name__)


class CopyFailure(BaseModel):
    """One event a batch copy could not place in the target calendar.

    Args:
        subject: Subject of the source event.
        start: Start the copy would have had.
        end: End the copy would have had.
        error: Error kind (e.g. ``DuplicateEvent``).
        message: Error message.
    """

    subject: str
    start: datetime
    end: datetime
    error: str
    message: str

    @field_serializer("start", "end")
    def serialize_datetime(self, dt: datetime) -> str:
        return format_datetime(dt)


class CopyReport(BaseModel):
    """Outcome of a batch copy.

    Args:
        copied: Events created in the target calendar.
        failures: Events that could not be copied.
    """

    copied: list[Event] = Field(default_factory=list, description="Created copies")
    failures: list[CopyFailure] = Field(default_factory=list, description="Failed copies")

    @property
    def ok(self) -> bool:
        return not self.failures


class CalendarCoordinator:
    """Registry of named calendars and the copy operations between them.

    Args:
        settings: Engine settings, shared with every calendar's store.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()
        self._calendars: dict[str, NamedCalendar] = {}
        self._active: Optional[NamedCalendar] = None
        self._lock = threading.RLock()

    # ===== Calendar lifecycle =====

    def create_calendar(self, name: str, timezone: Optional[str] = None) -> NamedCalendar:
        """Create an empty calendar.

        Args:
            name: Calendar name; surrounding whitespace is ignored.
            timezone: IANA zone; defaults to the configured default zone.

        Returns:
            The new calendar.

        Raises:
            InvalidCalendarNameError: If the name is blank.
            InvalidTimezoneError: If the zone is unknown.
            DuplicateCalendarError: If the name is taken.
        """
        name = self._clean_name(name)
        timezone = (timezone or self.settings.default_timezone).strip()
        resolve_zone(timezone)

        with self._lock:
            if name in self._calendars:
                raise DuplicateCalendarError(name)
            calendar = NamedCalendar(
                name=name, timezone=timezone, store=EventStore(self.settings)
            )
            self._calendars[name] = calendar

        logger.info(f"Created calendar '{name}' ({timezone})")
        return calendar

    def edit_calendar(
        self, name: str, property: Union[CalendarProperty, str], new_value: str
    ) -> NamedCalendar:
        """Rename a calendar or change its timezone.

        Renaming keeps the active selection pointing at the same calendar.
        Changing the timezone relabels the calendar only; stored wall-clock
        times are not shifted.

        Args:
            name: Calendar to edit.
            property: ``name`` or ``timezone``.
            new_value: New name or IANA zone.

        Returns:
            The edited calendar.

        Raises:
            CalendarNotFoundError: If no calendar has that name.
            InvalidEnumError: If the property is not name or timezone.
            InvalidCalendarNameError: If the new name is blank.
            DuplicateCalendarError: If the new name is taken.
            InvalidTimezoneError: If the zone is unknown.
        """
        prop = CalendarProperty.parse(property).unwrap()
        with self._lock:
            calendar = self.get_calendar(name)

            if prop is CalendarProperty.NAME:
                new_name = self._clean_name(new_value)
                if new_name != calendar.name and new_name in self._calendars:
                    raise DuplicateCalendarError(new_name)
                del self._calendars[calendar.name]
                calendar.name = new_name
                self._calendars[new_name] = calendar
            else:
                timezone = str(new_value).strip()
                resolve_zone(timezone)
                calendar.timezone = timezone

        logger.info(f"Edited {prop.value} of calendar '{name}' to '{new_value}'")
        return calendar

    def use_calendar(self, name: str) -> NamedCalendar:
        """Make a calendar the active one.

        Raises:
            CalendarNotFoundError: If no calendar has that name.
        """
        with self._lock:
            self._active = self.get_calendar(name)
        logger.info(f"Using calendar '{self._active.name}'")
        return self._active

    @property
    def active_calendar(self) -> Optional[NamedCalendar]:
        return self._active

    def require_active(self) -> NamedCalendar:
        """Return the active calendar.

        Raises:
            NoActiveCalendarError: If no calendar has been selected.
        """
        if self._active is None:
            raise NoActiveCalendarError()
        return self._active

    def get_calendar(self, name: str) -> NamedCalendar:
        """Look up a calendar by name.

        Raises:
            CalendarNotFoundError: If no calendar has that name.
        """
        calendar = self._calendars.get(str(name).strip())
        if calendar is None:
            raise CalendarNotFoundError(name, self.calendar_names())
        return calendar

    def calendar_names(self) -> list[str]:
        return sorted(self._calendars)

    def has_calendar(self, name: str) -> bool:
        return str(name).strip() in self._calendars

    # ===== Copy operations =====

    def copy_event(
        self,
        subject: str,
        source_start: DateTimeLike,
        target_calendar: str,
        target_start: DateTimeLike,
    ) -> Event:
        """Copy one event from the active calendar into another calendar.

        The copy starts at ``target_start`` (a wall-clock time in the target
        calendar) and keeps the source event's duration. It is always
        standalone and carries the source's description, location and status.

        Args:
            subject: Subject of the source event (case-insensitive).
            source_start: Exact start of the source event.
            target_calendar: Name of the calendar to copy into.
            target_start: Start of the copy.

        Returns:
            The stored copy.

        Raises:
            NoActiveCalendarError: If no calendar is active.
            CalendarNotFoundError: If the target calendar does not exist.
            EventNotFoundError: If no source event matches.
            AmbiguousMatchError: If several source events match.
            DuplicateEventError: If the target already holds an equal event.
        """
        source = self.require_active()
        target = self.get_calendar(target_calendar)
        source_start = parse_datetime(source_start)
        target_start = parse_datetime(target_start)

        matches = source.store.find_by_subject_and_start(subject, source_start)
        if not matches:
            raise EventNotFoundError(
                f"No event '{subject}' starting at {format_datetime(source_start)} "
                f"in calendar '{source.name}'"
            )
        if len(matches) > 1:
            raise AmbiguousMatchError(
                f"{len(matches)} events named '{subject}' start at "
                f"{format_datetime(source_start)} in calendar '{source.name}'",
                len(matches),
            )

        original = matches[0]
        copy = target.store.add_event(
            original.copy_to(target_start, target_start + original.duration)
        )
        logger.info(
            f"Copied '{original.subject}' from '{source.name}' to '{target.name}' "
            f"at {format_datetime(target_start)}"
        )
        return copy

    def copy_events_on_date(
        self, source_date: DateLike, target_calendar: str, target_date: DateLike
    ) -> CopyReport:
        """Copy every event on a day of the active calendar onto a target day.

        Each event's times are converted from the source zone to the target zone
        and the converted time of day is placed on ``target_date``. If the
        converted end falls on a later local day than the converted start, the
        copy ends the same number of days after ``target_date``.

        Args:
            source_date: Day to copy from the active calendar.
            target_calendar: Name of the calendar to copy into.
            target_date: Day the copies are placed on.

        Returns:
            CopyReport listing created copies and per-event failures.

        Raises:
            NoActiveCalendarError: If no calendar is active.
            CalendarNotFoundError: If the target calendar does not exist.
        """
        source = self.require_active()
        target = self.get_calendar(target_calendar)
        source_date = parse_date(source_date)
        target_date = parse_date(target_date)
        source_zone, target_zone = source.zone, target.zone

        placements = []
        for event in source.store.get_events_on(source_date):
            start = convert_wall_time(event.start, source_zone, target_zone)
            end = convert_wall_time(event.end, source_zone, target_zone)
            new_start = datetime.combine(target_date, start.time())
            new_end = datetime.combine(target_date + (end.date() - start.date()), end.time())
            placements.append((event, new_start, new_end))

        report = self._place_copies(target, placements)
        self._log_report(
            report,
            f"Copied {len(report.copied)} events from '{source.name}' on {source_date} "
            f"to '{target.name}' on {target_date}",
        )
        return report

    def copy_events_between_dates(
        self,
        start_date: DateLike,
        end_date: DateLike,
        target_calendar: str,
        target_start_date: DateLike,
    ) -> CopyReport:
        """Copy all events in an inclusive date range, shifted by a fixed day offset.

        The offset is ``target_start_date - start_date``. When the two calendars
        share a timezone the offset is applied to the stored times; otherwise the
        times are converted to the target zone first, so durations are preserved.

        Args:
            start_date: First day of the source range.
            end_date: Last day of the source range (inclusive).
            target_calendar: Name of the calendar to copy into.
            target_start_date: Day that ``start_date`` maps onto.

        Returns:
            CopyReport listing created copies and per-event failures.

        Raises:
            NoActiveCalendarError: If no calendar is active.
            CalendarNotFoundError: If the target calendar does not exist.
            InvalidRangeError: If start_date is after end_date.
        """
        source = self.require_active()
        target = self.get_calendar(target_calendar)
        start_date = parse_date(start_date)
        end_date = parse_date(end_date)
        target_start_date = parse_date(target_start_date)
        if start_date > end_date:
            raise InvalidRangeError(start_date, end_date, "Start date cannot be after end date")

        offset = target_start_date - start_date
        same_zone = source.zone.key == target.zone.key
        events = source.store.get_events_in_range(
            start_of_day(start_date), start_of_day(end_date + timedelta(days=1))
        )

        placements = []
        for event in events:
            if same_zone:
                start, end = event.start, event.end
            else:
                start = convert_wall_time(event.start, source.zone, target.zone)
                end = convert_wall_time(event.end, source.zone, target.zone)
            placements.append((event, start + offset, end + offset))

        report = self._place_copies(target, placements)
        self._log_report(
            report,
            f"Copied {len(report.copied)} events from '{source.name}' "
            f"({start_date} to {end_date}) to '{target.name}' from {target_start_date}",
        )
        return report

    def get_snapshot(self) -> dict:
        """Get every calendar's summary and the active calendar's name."""
        with self._lock:
            return {
                "active": self._active.name if self._active else None,
                "calendars": [self._calendars[n].get_summary() for n in self.calendar_names()],
            }

    # ===== Internals =====

    @staticmethod
    def _clean_name(name: str) -> str:
        cleaned = str(name or "").strip()
        if not cleaned:
            raise InvalidCalendarNameError("Calendar name cannot be empty")
        return cleaned

    @staticmethod
    def _place_copies(
        target: NamedCalendar, placements: list[tuple[Event, datetime, datetime]]
    ) -> CopyReport:
        report = CopyReport()
        for event, start, end in placements:
            try:
                report.copied.append(target.store.add_event(event.copy_to(start, end)))
            except CalendarError as e:
                logger.warning(
                    f"Could not copy '{event.subject}' to '{target.name}' at "
                    f"{format_datetime(start)}: {e.message}"
                )
                report.failures.append(
                    CopyFailure(
                        subject=event.subject,
                        start=start,
                        end=end,
                        error=e.kind,
                        message=e.message,
                    )
                )
        return report

    @staticmethod
    def _log_report(report: CopyReport, summary: str) -> None:
        if report.ok:
            logger.info(summary)
        else:
            logger.warning(f"{summary} ({len(report.failures)} failed)")
