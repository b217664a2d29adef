"""Per-calendar event store.

EventStore owns every occurrence of one calendar and keeps four structures in
step: a date index (an event is listed under every day it touches), an id
index, the uniqueness index over (subject, start, end), and the series
registry. Creation, queries and the edit engine all live here.

Edits follow a remove / mutate / reinsert sequence against the uniqueness
index. The pre-edit field values of every touched event are captured first
and written back if reinsertion collides, so a failed edit leaves no trace.
"""

import logging
import threading
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, Optional, Union
from uuid import uuid4

from models.enums import EventProperty, EventStatus, Location, Weekday
from models.errors import (
    ConflictingEventError,
    DuplicateEventError,
    EventNotFoundError,
    InvalidRangeError,
    InvalidSeriesError,
    InvalidValueError,
)
from models.event import Event, EventKey
from models.series import Series
from models.settings import EngineSettings
from models.timeutil import (
    DateLike,
    DateTimeLike,
    TimeLike,
    iter_days,
    parse_date,
    parse_datetime,
    parse_time_of_day,
)

logger = logging.getLogger(__name__)

# Field updates for one event, applied together by _apply_changes
Change = dict[str, Any]

_TRACKED_FIELDS = (
    "subject",
    "start",
    "end",
    "description",
    "location",
    "location_detail",
    "status",
    "series_id",
)


class EventStore:
    """In-memory event store for a single calendar.

    Every public operation runs under one reentrant lock, so a store shared
    between threads never interleaves an edit's remove/reinsert sequence with
    another read or write.

    Args:
        settings: Engine settings (all-day bounds). Defaults to EngineSettings().
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()
        self._events: dict[str, Event] = {}
        self._events_by_day: dict[date, dict[str, Event]] = {}
        self._unique: dict[EventKey, str] = {}
        self._series: dict[str, Series] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._events

    # ===== Creation =====

    def create_event(
        self,
        subject: str,
        start: Union[DateTimeLike, date],
        end: Optional[DateTimeLike] = None,
        *,
        description: Optional[str] = None,
        location: Optional[Union[Location, str]] = None,
        location_detail: Optional[str] = None,
        status: Optional[Union[EventStatus, str]] = None,
    ) -> Event:
        """Create a single standalone event.

        When ``end`` is omitted the event becomes an all-day event on the start's
        calendar day, running from the configured all-day start to end
        (08:00-17:00 by default).

        Args:
            subject: Event subject.
            start: Start date-time, or a date for the all-day form.
            end: End date-time, or None for the all-day form.
            description: Optional description.
            location: Optional location (``physical`` or ``online``).
            location_detail: Optional location detail.
            status: Optional status (``public`` or ``private``).

        Returns:
            The stored Event.

        Raises:
            InvalidRangeError: If start is after end.
            DuplicateEventError: If an equal (subject, start, end) event exists.
            InvalidValueError: If a date-time cannot be parsed or the subject is blank.
            InvalidValueError: If a date-time cannot be parsed.
        """
        subject = _clean_subject(subject)
        start, end = self._resolve_bounds(start, end)
        if start > end:
            raise InvalidRangeError(start, end, "Start date cannot be after end date")

        event = Event(
            subject=subject,
            start=start,
            end=end,
            description=description,
            location=self._parse_location(location),
            location_detail=location_detail,
            status=self._parse_status(status),
        )

        with self._lock:
            if event.key in self._unique:
                raise DuplicateEventError(subject, start, end)
            self._insert(event)

        logger.info(f"Created event {event.event_id}: {event.get_summary()}")
        return event

    def add_event(self, event: Event) -> Event:
        """Store an already-built event (e.g. a copy from another calendar).

        Args:
            event: Event to store; its event_id must be new to this store.

        Returns:
            The stored event.

        Raises:
            InvalidRangeError: If the event starts after it ends.
            DuplicateEventError: If an equal event exists.
        """
        if event.start > event.end:
            raise InvalidRangeError(event.start, event.end, "Start date cannot be after end date")
        with self._lock:
            if event.key in self._unique:
                raise DuplicateEventError(event.subject, event.start, event.end)
            self._insert(event)

        logger.info(f"Added event {event.event_id}: {event.get_summary()}")
        return event

    def create_event_series(
        self,
        subject: str,
        start_time: TimeLike,
        end_time: TimeLike,
        weekdays: Union[str, Iterable[Union[Weekday, str]]],
        start_date: DateLike,
        end_date: Optional[DateLike] = None,
        occurrence_count: Optional[int] = None,
        description: Optional[str] = None,
        location: Optional[Union[Location, str]] = None,
        status: Optional[Union[EventStatus, str]] = None,
        location_detail: Optional[str] = None,
    ) -> Series:
        """Create a recurring series and store all of its occurrences.

        Insertion is all-or-nothing: every generated occurrence is checked
        against the uniqueness index before the first one is stored, so a
        duplicate leaves the store exactly as it was.

        Args:
            subject: Subject of every occurrence.
            start_time: Occurrence start time of day.
            end_time: Occurrence end time of day.
            weekdays: Compact symbols (``"MWF"``) or an iterable of weekdays.
            start_date: Anchor date.
            end_date: Inclusive end date, or None when terminated by count.
            occurrence_count: Number of occurrences; None or <= 0 means "not set".
            description: Description applied to every occurrence.
            location: Location applied to every occurrence.
            status: Status applied to every occurrence.
            location_detail: Location detail applied to every occurrence.

        Returns:
            The registered Series.

        Raises:
            InvalidSeriesError: If weekdays are empty, no termination is given,
                or an occurrence would cross midnight.
            SeriesSpanError: If a generated occurrence spans two days.
            DuplicateEventError: If any occurrence equals a stored event.
            InvalidValueError: If the subject is blank.
        """
        subject = _clean_subject(subject)
        if occurrence_count is not None and occurrence_count <= 0:
            if end_date is None:
                raise InvalidSeriesError(
                    f"Occurrence count must be positive, got {occurrence_count}"
                )
            occurrence_count = None

        series = Series.from_times(
            subject=subject,
            start_time=parse_time_of_day(start_time),
            end_time=parse_time_of_day(end_time),
            weekdays=self._resolve_weekdays(weekdays),
            start_date=parse_date(start_date),
            end_date=parse_date(end_date) if end_date is not None else None,
            occurrence_count=occurrence_count,
        )

        occurrences = series.generate_events()
        parsed_location = self._parse_location(location)
        parsed_status = self._parse_status(status)
        for occurrence in occurrences:
            occurrence.description = description
            occurrence.location = parsed_location
            occurrence.location_detail = location_detail
            occurrence.status = parsed_status

        with self._lock:
            for occurrence in occurrences:
                if occurrence.key in self._unique:
                    raise DuplicateEventError(
                        occurrence.subject, occurrence.start, occurrence.end
                    )
            for occurrence in occurrences:
                self._insert(occurrence)
            self._series[series.series_id] = series

        logger.info(
            f"Created series {series.series_id} '{subject}' with "
            f"{len(occurrences)} occurrences"
        )
        return series

    # ===== Queries =====

    def get_event(self, event_id: str) -> Optional[Event]:
        """Get event by ID.

        Returns:
            Event or None if not found.
        """
        return self._events.get(event_id)

    def get_series_by_id(self, series_id: str) -> Optional[Series]:
        """Get series by ID.

        Returns:
            Series or None if not found.
        """
        return self._series.get(series_id)

    def series_members(self, series_id: str) -> list[Event]:
        """Events still linked to a series, in chronological order."""
        with self._lock:
            return self._members(series_id)

    def all_events(self) -> list[Event]:
        with self._lock:
            return _ordered(self._events.values())

    def all_series(self) -> list[Series]:
        with self._lock:
            return sorted(self._series.values(), key=lambda s: (s.start_date, s.start_time))

    def get_events_on(self, day: DateLike) -> list[Event]:
        """Events indexed under a calendar day.

        Multi-day events appear on every day they touch.

        Args:
            day: Calendar day.

        Returns:
            Events ordered by start; empty list if none.
        """
        day = parse_date(day)
        with self._lock:
            return _ordered(self._events_by_day.get(day, {}).values())

    def get_events_in_range(self, start: DateTimeLike, end: DateTimeLike) -> list[Event]:
        """Events overlapping the half-open range [start, end).

        Args:
            start: Inclusive range start.
            end: Exclusive range end.

        Returns:
            Distinct overlapping events ordered by start.

        Raises:
            InvalidRangeError: If start is after end.
        """
        start = parse_datetime(start)
        end = parse_datetime(end)
        if start > end:
            raise InvalidRangeError(start, end)

        with self._lock:
            candidates: dict[str, Event] = {}
            for day in iter_days(start.date(), end.date()):
                candidates.update(self._events_by_day.get(day, {}))
            return _ordered(e for e in candidates.values() if e.overlaps(start, end))

    def find_by_subject_and_start(self, subject: str, start: DateTimeLike) -> list[Event]:
        """Events with a subject (case-insensitive) starting exactly at ``start``."""
        start = parse_datetime(start)
        wanted = subject.casefold()
        return [
            event
            for event in self.get_events_on(start.date())
            if event.subject.casefold() == wanted and event.start == start
        ]

    def find_by_details(
        self, subject: str, start: DateTimeLike, end: DateTimeLike
    ) -> list[Event]:
        """Events with a subject (case-insensitive), exact start and exact end."""
        end = parse_datetime(end)
        return [
            event
            for event in self.find_by_subject_and_start(subject, start)
            if event.end == end
        ]

    def is_busy_at(self, instant: DateTimeLike) -> bool:
        """Check if any event occupies an instant.

        Occupancy is half-open: an event is busy from its start up to, but not
        including, its end. A zero-duration event is busy only at its start.

        Args:
            instant: Wall-clock time to test.

        Returns:
            True if some event on that day occupies the instant.
        """
        instant = parse_datetime(instant)
        return any(event.occupies(instant) for event in self.get_events_on(instant.date()))

    # ===== Edit engine =====

    def edit_event(
        self, event_id: str, property: Union[EventProperty, str], new_value: Any
    ) -> Event:
        """Edit one property of a single event.

        Editing ``start`` or ``end`` of a series member detaches it from the
        series. Any other property keeps the series link.

        Args:
            event_id: Event to edit.
            property: One of subject, start, end, description, location, status.
            new_value: New value (text is parsed for times and enums).

        Returns:
            The edited event.

        Raises:
            EventNotFoundError: If event_id is unknown.
            InvalidEnumError: If the property, location or status is invalid.
            InvalidValueError: If a date-time cannot be parsed or a subject is blank.
            InvalidRangeError: If the edit would put start after end.
            ConflictingEventError: If the edit would duplicate another event; the
                event is left exactly as it was.
        """
        with self._lock:
            event = self._events.get(event_id)
            if event is None:
                raise EventNotFoundError(f"Event not found: {event_id}")
            prop = EventProperty.parse(property).unwrap()
            change = self._resolve_change(event, prop, new_value)
            self._apply_changes([(event, change)])

        logger.info(f"Edited {prop.value} of event {event_id}: {event.get_summary()}")
        return event

    def edit_series(
        self, series_id: str, property: Union[EventProperty, str], new_value: Any
    ) -> None:
        """Edit a property across an entire series.

        ``start`` and ``end`` take a time of day that is applied to each
        occurrence's own date; the series pattern (start time, duration) is
        updated to match. Members stay linked to the series. Unknown series ids
        are ignored.

        Args:
            series_id: Series to edit.
            property: Property to change.
            new_value: New value.

        Raises:
            InvalidRangeError: If the new start falls after the series end time,
                or the new end before its start time.
            SeriesSpanError: If the new duration would cross a day boundary (an end
                of 00:00 is the end of the day).
            ConflictingEventError: If any member would duplicate another event;
                all members and the pattern are restored.
        """
        prop = EventProperty.parse(property).unwrap()
        with self._lock:
            series = self._series.get(series_id)
            if series is None:
                logger.debug(f"edit_series ignored unknown series {series_id}")
                return
            members = self._members(series_id)
            self._edit_members(series, members, prop, new_value)

        logger.info(f"Edited {prop.value} of series {series_id} ({len(members)} occurrences)")

    def edit_series_from_date(
        self,
        series_id: str,
        property: Union[EventProperty, str],
        new_value: Any,
        from_start: Optional[DateTimeLike] = None,
    ) -> None:
        """Edit a property on series members from one occurrence forward.

        Members starting at or after ``from_start`` are edited; when
        ``from_start`` is omitted the earliest stored member is used. If only
        part of the series is selected and the property belongs to the pattern
        (subject, start, end), the selected members move to a new series that
        carries the edited pattern and the original series is truncated before
        them.

        Args:
            series_id: Series to edit.
            property: Property to change.
            new_value: New value.
            from_start: First occurrence start to include.

        Raises:
            InvalidRangeError: As for edit_series.
            SeriesSpanError: As for edit_series.
            ConflictingEventError: As for edit_series.
        """
        prop = EventProperty.parse(property).unwrap()
        threshold = parse_datetime(from_start) if from_start is not None else None

        with self._lock:
            series = self._series.get(series_id)
            if series is None:
                logger.debug(f"edit_series_from_date ignored unknown series {series_id}")
                return
            members = self._members(series_id)
            if not members:
                return
            if threshold is None:
                threshold = members[0].start
            selected = [event for event in members if event.start >= threshold]
            if not selected:
                return

            if prop.is_pattern and len(selected) < len(members):
                self._split_series(series, members, selected, prop, new_value)
            else:
                self._edit_members(series, selected, prop, new_value)

        logger.info(
            f"Edited {prop.value} of series {series_id} from {threshold} "
            f"({len(selected)} occurrences)"
        )

    # ===== Consistency =====

    def validate_state(self) -> list[str]:
        """Validate that all indexes agree.

        Returns:
            List of validation error messages (empty list if valid).
        """
        errors = []
        with self._lock:
            for event_id, event in self._events.items():
                if self._unique.get(event.key) != event_id:
                    errors.append(f"Event {event_id} missing from uniqueness index")
                if event.end < event.start:
                    errors.append(
                        f"Event {event_id} has invalid time range: {event.start} to {event.end}"
                    )
                for day in event.days():
                    if event_id not in self._events_by_day.get(day, {}):
                        errors.append(f"Event {event_id} missing from date index on {day}")
                if event.series_id and event.series_id not in self._series:
                    errors.append(
                        f"Event {event_id} references missing series {event.series_id}"
                    )

            for key, event_id in self._unique.items():
                event = self._events.get(event_id)
                if event is None or event.key != key:
                    errors.append(f"Uniqueness entry {key} points at stale event {event_id}")

            for day, bucket in self._events_by_day.items():
                for event_id in bucket:
                    event = self._events.get(event_id)
                    if event is None:
                        errors.append(f"Date index on {day} references missing event {event_id}")
                    elif day not in event.days():
                        errors.append(f"Event {event_id} indexed on {day} outside its range")

        return errors

    def get_snapshot(self) -> dict[str, Any]:
        """Get complete store snapshot.

        Returns:
            Dictionary containing all events and series.
        """
        with self._lock:
            return {
                "event_count": len(self._events),
                "series_count": len(self._series),
                "events": [e.model_dump(mode="json") for e in _ordered(self._events.values())],
                "series": [s.model_dump(mode="json") for s in self._series.values()],
            }

    # ===== Internals =====

    def _resolve_bounds(self, start, end) -> tuple[datetime, datetime]:
        if end is not None:
            if isinstance(start, date) and not isinstance(start, datetime):
                raise InvalidValueError(f"Start {start} needs a time when an end is given")
            return parse_datetime(start), parse_datetime(end)

        if isinstance(start, str) and "T" not in start:
            day = parse_date(start)
        elif isinstance(start, date) and not isinstance(start, datetime):
            day = start
        else:
            day = parse_datetime(start).date()
        return (
            datetime.combine(day, self.settings.all_day_start),
            datetime.combine(day, self.settings.all_day_end),
        )

    @staticmethod
    def _resolve_weekdays(weekdays) -> frozenset[Weekday]:
        if isinstance(weekdays, str):
            return Weekday.parse_symbols(weekdays)
        resolved = set()
        for day in weekdays:
            if isinstance(day, str) and len(day) == 1:
                resolved.add(Weekday.from_symbol(day).unwrap())
            else:
                resolved.add(Weekday.parse(day).unwrap())
        return frozenset(resolved)

    @staticmethod
    def _parse_location(value) -> Optional[Location]:
        return Location.parse(value).unwrap() if value is not None else None

    @staticmethod
    def _parse_status(value) -> Optional[EventStatus]:
        return EventStatus.parse(value).unwrap() if value is not None else None

    def _insert(self, event: Event) -> None:
        self._unique[event.key] = event.event_id
        self._events[event.event_id] = event
        self._index(event)

    def _index(self, event: Event) -> None:
        for day in event.days():
            self._events_by_day.setdefault(day, {})[event.event_id] = event

    def _unindex(self, event_id: str, start: datetime, end: datetime) -> None:
        for day in iter_days(start.date(), end.date()):
            bucket = self._events_by_day.get(day)
            if bucket is None:
                continue
            bucket.pop(event_id, None)
            if not bucket:
                del self._events_by_day[day]

    def _members(self, series_id: str) -> list[Event]:
        return _ordered(e for e in self._events.values() if e.series_id == series_id)

    def _resolve_change(self, event: Event, prop: EventProperty, value: Any) -> Change:
        """Validate a single-event edit and describe it without mutating anything."""
        if prop.is_timing:
            return self._resolve_timing(event, prop, parse_datetime(value))
        if prop is EventProperty.SUBJECT:
            return {"subject": _clean_subject(value)}
        if prop is EventProperty.DESCRIPTION:
            return {"description": None if value is None else str(value)}
        if prop is EventProperty.LOCATION:
            return {"location": Location.parse(value).unwrap()}
        return {"status": EventStatus.parse(value).unwrap()}

    @staticmethod
    def _resolve_timing(event: Event, prop: EventProperty, moment: datetime) -> Change:
        if prop is EventProperty.START:
            if moment > event.end:
                raise InvalidRangeError(
                    moment, event.end, "New start time cannot be after current end time"
                )
            change: Change = {"start": moment}
        else:
            if event.start > moment:
                raise InvalidRangeError(
                    event.start, moment, "New end time cannot be before current start time"
                )
            change = {"end": moment}

        # Moving an occurrence detaches it from its series
        if event.series_id is not None:
            change["series_id"] = None
        return change

    def _series_changes(
        self, series: Series, members: list[Event], prop: EventProperty, value: Any
    ) -> tuple[list[Change], Change]:
        """Describe a series edit as per-member changes plus a pattern update."""
        if prop is EventProperty.SUBJECT:
            subject = _clean_subject(value)
            return [{"subject": subject} for _ in members], {"subject": subject}

        if prop is EventProperty.START:
            new_time = parse_time_of_day(value)
            anchor_end = datetime.combine(series.start_date, series.start_time) + series.duration
            new_anchor = datetime.combine(series.start_date, new_time)
            if new_anchor > anchor_end:
                raise InvalidRangeError(
                    new_time, series.end_time, "New start time cannot be after series end time"
                )
            changes = []
            for event in members:
                new_start = datetime.combine(event.start.date(), new_time)
                if new_start > event.end:
                    raise InvalidRangeError(new_start, event.end)
                changes.append({"start": new_start})
            return changes, {"start_time": new_time, "duration": anchor_end - new_anchor}

        if prop is EventProperty.END:
            new_time = parse_time_of_day(value)
            anchor = datetime.combine(series.start_date, series.start_time)
            new_end = datetime.combine(series.start_date, new_time)
            # 00:00 names the end of the anchor day, which is the next day
            if new_time == time(0) and series.start_time != time(0):
                new_end += timedelta(days=1)
            duration = new_end - anchor
            if duration < timedelta(0):
                raise InvalidRangeError(
                    series.start_time, new_time, "New end time cannot be before series start time"
                )
            series.check_duration(duration)
            return [{"end": event.start + duration} for event in members], {"duration": duration}

        return [self._resolve_change(event, prop, value) for event in members], {}

    def _edit_members(
        self,
        series: Series,
        members: list[Event],
        prop: EventProperty,
        value: Any,
        relink: bool = False,
    ) -> None:
        changes, pattern = self._series_changes(series, members, prop, value)
        if relink:
            for change in changes:
                change["series_id"] = series.series_id
        self._apply_changes(list(zip(members, changes)))
        for field, field_value in pattern.items():
            setattr(series, field, field_value)

    def _split_series(
        self,
        series: Series,
        members: list[Event],
        selected: list[Event],
        prop: EventProperty,
        value: Any,
    ) -> None:
        """Move ``selected`` (a strict suffix of ``members``) to a new series."""
        first_day = selected[0].start.date()
        earlier_count = len(members) - len(selected)
        update: dict[str, Any] = {"series_id": str(uuid4()), "start_date": first_day}
        if series.is_count_terminated:
            update["occurrence_count"] = len(selected)
        successor = series.model_copy(update=update)

        self._edit_members(successor, selected, prop, value, relink=True)

        if series.is_count_terminated:
            series.occurrence_count = earlier_count
        else:
            series.end_date = first_day - timedelta(days=1)
        self._series[successor.series_id] = successor
        logger.info(
            f"Split series {series.series_id} at {first_day} into {successor.series_id}"
        )

    def _apply_changes(self, batch: list[tuple[Event, Change]]) -> None:
        """Apply field changes to several events as one unit.

        Removes every touched event from the uniqueness index, mutates them,
        then reinserts. On any collision all touched events get their captured
        field values back and ConflictingEventError is raised. The date index is
        only touched once the whole batch has been accepted.
        """
        snapshots = [
            (event, {field: getattr(event, field) for field in _TRACKED_FIELDS})
            for event, _ in batch
        ]

        for event, _ in batch:
            del self._unique[event.key]
        for event, change in batch:
            for field, value in change.items():
                setattr(event, field, value)

        claimed: dict[EventKey, str] = {}
        for event, _ in batch:
            holder = self._unique.get(event.key) or claimed.get(event.key)
            if holder is not None:
                self._restore(snapshots)
                raise ConflictingEventError(event.event_id, holder)
            claimed[event.key] = event.event_id
        self._unique.update(claimed)

        for event, before in snapshots:
            if event.start != before["start"] or event.end != before["end"]:
                self._unindex(event.event_id, before["start"], before["end"])
                self._index(event)

    def _restore(self, snapshots: list[tuple[Event, dict[str, Any]]]) -> None:
        for event, before in snapshots:
            for field, value in before.items():
                setattr(event, field, value)
        for event, _ in snapshots:
            self._unique[event.key] = event.event_id


def _ordered(events: Iterable[Event]) -> list[Event]:
    return sorted(events, key=lambda e: (e.start, e.end, e.subject, e.event_id))


def _clean_subject(value: Any) -> str:
    if value is None or not str(value).strip():
        raise InvalidValueError(f"Subject must be non-empty text, got {value!r}")
    return str(value)
