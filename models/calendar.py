"""Named calendar: one event store paired with a timezone."""

from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field, field_validator

from models.errors import InvalidTimezoneError
from models.store import EventStore
from models.timeutil import resolve_zone


class NamedCalendar(BaseModel):
    """A calendar the coordinator can select, copy from and copy into.

    Event times inside ``store`` are wall-clock times in ``timezone``.

    Args:
        name: Unique calendar name.
        timezone: IANA zone identifier.
        store: The calendar's events.
    """

    model_config = {"arbitrary_types_allowed": True}

    name: str = Field(description="Calendar name")
    timezone: str = Field(description="IANA timezone identifier")
    store: EventStore = Field(default_factory=EventStore, description="Event store")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            resolve_zone(value)
        except InvalidTimezoneError as e:
            raise ValueError(e.message)
        return value

    @property
    def zone(self) -> ZoneInfo:
        return resolve_zone(self.timezone)

    def get_summary(self) -> dict:
        """Summarize this calendar for listings.

        Returns:
            Dictionary with name, timezone, event and series counts.
        """
        return {
            "name": self.name,
            "timezone": self.timezone,
            "event_count": len(self.store),
            "series_count": len(self.store.all_series()),
        }
