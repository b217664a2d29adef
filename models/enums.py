"""Closed value sets used by events, series and calendars.

Each enum parses its own textual form. Parsing never raises: ``parse`` returns
a ParseResult holding either the member or the InvalidEnumError describing why
the text was rejected, and the caller decides whether to raise it.
"""

from datetime import date
from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from models.errors import InvalidEnumError


EnumT = TypeVar("EnumT")


class ParseResult(BaseModel, Generic[EnumT]):
    """Outcome of parsing text into an enum member.

    Args:
        value: The parsed member, if parsing succeeded.
        error: The rejection, if parsing failed.
    """

    model_config = {"arbitrary_types_allowed": True}

    value: Optional[EnumT] = Field(default=None, description="Parsed member")
    error: Optional[InvalidEnumError] = Field(default=None, description="Rejection")

    @property
    def ok(self) -> bool:
        """Whether parsing succeeded."""
        return self.error is None

    def unwrap(self) -> EnumT:
        """Return the parsed member or raise the carried error.

        Returns:
            The parsed enum member.

        Raises:
            InvalidEnumError: If parsing failed.
        """
        if self.error is not None:
            raise self.error
        return self.value


class TextEnum(str, Enum):
    """String enum whose members parse case-insensitively from their values."""

    @classmethod
    def parse(cls, text: object) -> ParseResult:
        """Parse text (or an existing member) into a member of this enum.

        Args:
            text: Text to parse; surrounding whitespace and case are ignored.

        Returns:
            ParseResult with either the member or an InvalidEnumError.
        """
        if isinstance(text, cls):
            return ParseResult(value=text)
        normalized = str(text).strip().lower() if text is not None else ""
        for member in cls:
            if member.value == normalized:
                return ParseResult(value=member)
        return ParseResult(
            error=InvalidEnumError(
                _ENUM_LABELS.get(cls.__name__, cls.__name__),
                text,
                [member.value for member in cls],
            )
        )

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class Location(TextEnum):
    """Where an event takes place."""

    PHYSICAL = "physical"
    ONLINE = "online"


class EventStatus(TextEnum):
    """Visibility of an event."""

    PUBLIC = "public"
    PRIVATE = "private"


class EventProperty(TextEnum):
    """Event fields that the edit operations accept."""

    SUBJECT = "subject"
    START = "start"
    END = "end"
    DESCRIPTION = "description"
    LOCATION = "location"
    STATUS = "status"

    @property
    def is_timing(self) -> bool:
        """Whether editing this property moves the event in time."""
        return self in (EventProperty.START, EventProperty.END)

    @property
    def is_pattern(self) -> bool:
        """Whether this property is part of a series' recurrence pattern."""
        return self in (EventProperty.SUBJECT, EventProperty.START, EventProperty.END)


class CalendarProperty(TextEnum):
    """Calendar fields that can be edited."""

    NAME = "name"
    TIMEZONE = "timezone"


class Weekday(TextEnum):
    """Day of the week a series recurs on.

    Members carry the single-letter symbols used in compact weekday strings
    (``M T W R F S U``) and the index returned by ``date.weekday()``.
    """

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def symbol(self) -> str:
        return _WEEKDAY_SYMBOLS[self]

    @property
    def index(self) -> int:
        return list(Weekday).index(self)

    @classmethod
    def of(cls, day: date) -> "Weekday":
        """Return the weekday a calendar date falls on."""
        return list(cls)[day.weekday()]

    @classmethod
    def from_symbol(cls, symbol: str) -> ParseResult:
        """Parse a single weekday letter (case-insensitive).

        Args:
            symbol: One of ``M T W R F S U``.

        Returns:
            ParseResult with the weekday or an InvalidEnumError.
        """
        for day, letter in _WEEKDAY_SYMBOLS.items():
            if letter == symbol.upper():
                return ParseResult(value=day)
        return ParseResult(
            error=InvalidEnumError("weekday symbol", symbol, list(_WEEKDAY_SYMBOLS.values()))
        )

    @classmethod
    def parse_symbols(cls, symbols: str) -> frozenset["Weekday"]:
        """Parse a compact weekday string such as ``"MWF"``.

        Args:
            symbols: Concatenated weekday letters.

        Returns:
            The set of weekdays named.

        Raises:
            InvalidEnumError: If any letter is not a weekday symbol.
        """
        return frozenset(cls.from_symbol(letter).unwrap() for letter in symbols.strip())


_WEEKDAY_SYMBOLS = {
    Weekday.MONDAY: "M",
    Weekday.TUESDAY: "T",
    Weekday.WEDNESDAY: "W",
    Weekday.THURSDAY: "R",
    Weekday.FRIDAY: "F",
    Weekday.SATURDAY: "S",
    Weekday.SUNDAY: "U",
}

_ENUM_LABELS = {
    "Location": "location",
    "EventStatus": "event status",
    "EventProperty": "property",
    "CalendarProperty": "calendar property",
    "Weekday": "weekday",
}
