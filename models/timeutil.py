"""Date and time helpers shared by the store and the coordinator.

All event times are naive wall-clock datetimes interpreted in the timezone of
the calendar that holds them. Conversion between calendars goes through an
aware instant.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterator, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from models.errors import InvalidTimezoneError, InvalidValueError


DateTimeLike = Union[datetime, str]
DateLike = Union[date, str]
TimeLike = Union[time, datetime, str]


def parse_datetime(value: DateTimeLike) -> datetime:
    """Parse an ISO-8601 local date-time (``YYYY-MM-DDTHH:MM``).

    Args:
        value: A naive datetime (returned unchanged) or ISO text.

    Returns:
        Naive datetime.

    Raises:
        InvalidValueError: If the text is not a valid date-time, or the value
            carries a UTC offset.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if "T" not in text:
            raise InvalidValueError(f"Invalid date-time: {value!r}, expected YYYY-MM-DDTHH:MM")
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidValueError(f"Invalid date-time: {value!r}, expected YYYY-MM-DDTHH:MM")
    # Stored times are naive wall-clock times in the owning calendar's zone.
    if parsed.tzinfo is not None:
        raise InvalidValueError(f"Date-time {value!r} must not carry a UTC offset")
    return parsed


def parse_date(value: DateLike) -> date:
    """Parse an ISO-8601 date (``YYYY-MM-DD``).

    Raises:
        InvalidValueError: If the text is not a valid date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise InvalidValueError(f"Invalid date: {value!r}, expected YYYY-MM-DD")


def parse_time_of_day(value: TimeLike) -> time:
    """Parse a time of day.

    Accepts ``HH:MM`` text, a ``time``, or a full date-time (text or object)
    whose time part is used.

    Raises:
        InvalidValueError: If the value is neither a time nor a date-time.
    """
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    text = str(value).strip()
    if "T" in text:
        return parse_datetime(text).time()
    try:
        return time.fromisoformat(text)
    except ValueError:
        raise InvalidValueError(f"Invalid time: {value!r}, expected HH:MM")


def resolve_zone(name: str) -> ZoneInfo:
    """Look up an IANA timezone.

    Args:
        name: Zone identifier such as ``America/New_York``.

    Returns:
        The ZoneInfo for that identifier.

    Raises:
        InvalidTimezoneError: If the identifier is unknown or malformed.
    """
    try:
        return ZoneInfo(str(name).strip())
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidTimezoneError(name)


def convert_wall_time(moment: datetime, source: ZoneInfo, target: ZoneInfo) -> datetime:
    """Convert a wall-clock time in one zone to the wall-clock time in another.

    Args:
        moment: Naive wall-clock time in ``source``.
        source: Zone the moment is expressed in.
        target: Zone to express the same instant in.

    Returns:
        Naive wall-clock time in ``target``.
    """
    return moment.replace(tzinfo=source).astimezone(target).replace(tzinfo=None)


def iter_days(first: date, last: date) -> Iterator[date]:
    """Yield every calendar day from ``first`` to ``last`` inclusive."""
    current = first
    while current <= last:
        yield current
        current += timedelta(days=1)


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def format_datetime(moment: datetime) -> str:
    """Render a wall-clock time as ``YYYY-MM-DDTHH:MM`` (seconds kept when present)."""
    if moment.second or moment.microsecond:
        return moment.isoformat()
    return moment.isoformat(timespec="minutes")
