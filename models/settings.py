"""Engine configuration."""

import os
from datetime import time
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from models.errors import InvalidTimezoneError
from models.timeutil import resolve_zone


class EngineSettings(BaseModel):
    """Configuration shared by the coordinator and every event store.

    Args:
        default_timezone: Zone given to calendars created without one.
        all_day_start: Start time used when an event is created without an end.
        all_day_end: End time used when an event is created without an end.
        log_level: Level passed to logging.basicConfig by the application.
    """

    default_timezone: str = Field(default="UTC", description="Default calendar zone")
    all_day_start: time = Field(default=time(8, 0), description="All-day event start")
    all_day_end: time = Field(default=time(17, 0), description="All-day event end")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("default_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Reject unknown IANA zone identifiers.

        Raises:
            ValueError: If the zone cannot be resolved.
        """
        try:
            resolve_zone(value)
        except InvalidTimezoneError as e:
            raise ValueError(e.message)
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {value}")
        return level

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "EngineSettings":
        """Build settings from the process environment.

        Loads ``env_file`` (or a ``.env`` in the working directory) first; values
        already present in the environment win over the file.

        Environment variables:
            CALENDAR_DEFAULT_TIMEZONE, CALENDAR_ALL_DAY_START,
            CALENDAR_ALL_DAY_END, CALENDAR_LOG_LEVEL.

        Returns:
            Validated EngineSettings.
        """
        load_dotenv(env_file)
        overrides = {
            "default_timezone": os.getenv("CALENDAR_DEFAULT_TIMEZONE"),
            "all_day_start": os.getenv("CALENDAR_ALL_DAY_START"),
            "all_day_end": os.getenv("CALENDAR_ALL_DAY_END"),
            "log_level": os.getenv("CALENDAR_LOG_LEVEL"),
        }
        return cls(**{key: value for key, value in overrides.items() if value})
