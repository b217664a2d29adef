"""Unit tests for EventStore creation and queries."""

from datetime import date, datetime, time

import pytest

from models.enums import EventStatus, Location
from models.errors import (
    DuplicateEventError,
    InvalidEnumError,
    InvalidRangeError,
    InvalidSeriesError,
    InvalidValueError,
)
from models.settings import EngineSettings
from models.store import EventStore


class TestCreateEvent:
    """Test single event creation."""

    def test_create_event(self, store):
        event = store.create_event("Meeting", "2025-06-05T09:00", "2025-06-05T10:00")

        assert event.start == datetime(2025, 6, 5, 9, 0)
        assert event.end == datetime(2025, 6, 5, 10, 0)
        assert event.is_standalone()
        assert len(store) == 1
        assert event.event_id in store
        assert store.get_event(event.event_id) is event

    def test_duplicate_rejected(self, store):
        """Creating the identical event twice fails the second time."""
        store.create_event("Meeting", "2025-06-05T09:00", "2025-06-05T10:00")

        with pytest.raises(DuplicateEventError) as exc_info:
            store.create_event("Meeting", "2025-06-05T09:00", "2025-06-05T10:00")

        assert exc_info.value.kind == "DuplicateEvent"
        assert exc_info.value.subject == "Meeting"
        assert len(store) == 1

    def test_same_times_different_subject_allowed(self, store):
        store.create_event("Meeting", "2025-06-05T09:00", "2025-06-05T10:00")
        store.create_event("Lunch", "2025-06-05T09:00", "2025-06-05T10:00")
        assert len(store) == 2

    def test_duplicate_ignores_metadata(self, store):
        store.create_event("Meeting", "2025-06-05T09:00", "2025-06-05T10:00")
        with pytest.raises(DuplicateEventError):
            store.create_event(
                "Meeting",
                "2025-06-05T09:00",
                "2025-06-05T10:00",
                description="different",
                status="private",
            )

    def test_start_after_end_rejected(self, store):
        with pytest.raises(InvalidRangeError):
            store.create_event("Meeting", "2025-06-05T11:00", "2025-06-05T10:00")
        assert len(store) == 0

    def test_zero_duration_allowed(self, store):
        event = store.create_event("Ping", "2025-06-05T12:00", "2025-06-05T12:00")
        assert event.duration.total_seconds() == 0

    def test_all_day_from_date_text(self, store):
        event = store.create_event("Holiday", "2025-06-05")
        assert event.start == datetime(2025, 6, 5, 8, 0)
        assert event.end == datetime(2025, 6, 5, 17, 0)

    def test_all_day_from_datetime_uses_its_day(self, store):
        event = store.create_event("Holiday", datetime(2025, 6, 5, 13, 45))
        assert event.start == datetime(2025, 6, 5, 8, 0)
        assert event.end == datetime(2025, 6, 5, 17, 0)

    def test_all_day_bounds_from_settings(self):
        store = EventStore(EngineSettings(all_day_start=time(0, 0), all_day_end=time(23, 59)))
        event = store.create_event("Holiday", date(2025, 6, 5))
        assert event.start == datetime(2025, 6, 5, 0, 0)
        assert event.end == datetime(2025, 6, 5, 23, 59)

    def test_metadata_parsed(self, store):
        event = store.create_event(
            "Review",
            "2025-06-05T09:00",
            "2025-06-05T10:00",
            description="Quarterly",
            location="Physical",
            location_detail="Room 4",
            status="PRIVATE",
        )
        assert event.location is Location.PHYSICAL
        assert event.status is EventStatus.PRIVATE
        assert event.location_detail == "Room 4"

    def test_invalid_location_rejected_before_insert(self, store):
        with pytest.raises(InvalidEnumError):
            store.create_event("Review", "2025-06-05T09:00", "2025-06-05T10:00", location="moon")
        assert len(store) == 0

    def test_malformed_datetime(self, store):
        with pytest.raises(InvalidValueError):
            store.create_event("Review", "tomorrow", "2025-06-05T10:00")

    def test_blank_subject_rejected(self, store):
        with pytest.raises(InvalidValueError):
            store.create_event("  ", "2025-06-05T09:00", "2025-06-05T10:00")
        with pytest.raises(InvalidValueError):
            store.create_event(None, "2025-06-05T09:00", "2025-06-05T10:00")
        assert len(store) == 0

    def test_multi_day_event_indexed_on_every_day(self, store):
        event = store.create_event("Trip", "2025-06-05T18:00", "2025-06-07T09:00")

        for day in ("2025-06-05", "2025-06-06", "2025-06-07"):
            assert store.get_events_on(day) == [event]
        assert store.get_events_on("2025-06-08") == []
        assert store.validate_state() == []


class TestCreateEventSeries:
    """Test series creation."""

    def test_standup_example(self, standup):
        store, series = standup

        members = store.series_members(series.series_id)
        assert [e.start.date() for e in members] == [
            date(2025, 6, 2),
            date(2025, 6, 4),
            date(2025, 6, 6),
            date(2025, 6, 9),
            date(2025, 6, 11),
        ]
        assert store.get_series_by_id(series.series_id) is series
        assert store.validate_state() == []

    def test_metadata_applied_to_every_occurrence(self, store):
        series = store.create_event_series(
            "Class",
            "10:00",
            "11:30",
            "TR",
            "2025-06-02",
            end_date="2025-06-13",
            description="Algorithms",
            location="online",
            status="public",
            location_detail="https://example.test/room",
        )

        members = store.series_members(series.series_id)
        assert len(members) == 4
        assert all(e.description == "Algorithms" for e in members)
        assert all(e.location is Location.ONLINE for e in members)
        assert all(e.status is EventStatus.PUBLIC for e in members)

    def test_weekday_names_accepted(self, store):
        series = store.create_event_series(
            "Gym", "07:00", "08:00", ["monday", "F"], "2025-06-02", occurrence_count=2
        )
        assert [e.start.date() for e in store.series_members(series.series_id)] == [
            date(2025, 6, 2),
            date(2025, 6, 6),
        ]

    def test_empty_weekdays_rejected(self, store):
        with pytest.raises(InvalidSeriesError):
            store.create_event_series("Gym", "07:00", "08:00", "", "2025-06-02", occurrence_count=2)

    def test_no_termination_rejected(self, store):
        with pytest.raises(InvalidSeriesError):
            store.create_event_series("Gym", "07:00", "08:00", "M", "2025-06-02")

    def test_negative_count_without_end_date_rejected(self, store):
        with pytest.raises(InvalidSeriesError):
            store.create_event_series("Gym", "07:00", "08:00", "M", "2025-06-02", occurrence_count=-1)

    def test_zero_count_with_end_date_means_no_count(self, store):
        series = store.create_event_series(
            "Gym", "07:00", "08:00", "M", "2025-06-02", end_date="2025-06-16", occurrence_count=0
        )
        assert series.occurrence_count is None
        assert len(store.series_members(series.series_id)) == 3

    def test_blank_subject_rejected(self, store):
        with pytest.raises(InvalidValueError):
            store.create_event_series("", "07:00", "08:00", "M", "2025-06-02", occurrence_count=2)
        assert store.all_series() == []

    def test_crossing_midnight_rejected(self, store):
        with pytest.raises(InvalidSeriesError):
            store.create_event_series("Late", "23:00", "22:00", "F", "2025-06-02", occurrence_count=2)

    def test_duplicate_occurrence_inserts_nothing(self, store):
        """Verify series creation is all-or-nothing on a duplicate."""
        store.create_event("Standup", "2025-06-09T09:00", "2025-06-09T09:15")

        with pytest.raises(DuplicateEventError):
            store.create_event_series(
                "Standup", "09:00", "09:15", "MWF", "2025-06-02", occurrence_count=5
            )

        assert len(store) == 1
        assert store.all_series() == []
        assert store.get_events_on("2025-06-02") == []
        assert store.validate_state() == []


class TestQueries:
    """Test read-only queries."""

    @pytest.fixture
    def populated(self, store):
        store.create_event("Breakfast", "2025-06-05T07:00", "2025-06-05T08:00")
        store.create_event("Meeting", "2025-06-05T09:00", "2025-06-05T10:00")
        store.create_event("Overnight", "2025-06-05T22:00", "2025-06-06T06:00")
        store.create_event("Review", "2025-06-06T09:00", "2025-06-06T10:00")
        return store

    def test_get_events_on_sorted(self, populated):
        subjects = [e.subject for e in populated.get_events_on(date(2025, 6, 5))]
        assert subjects == ["Breakfast", "Meeting", "Overnight"]

    def test_get_events_on_empty_day(self, populated):
        assert populated.get_events_on("2025-07-01") == []

    def test_range_half_open(self, populated):
        events = populated.get_events_in_range("2025-06-05T08:00", "2025-06-05T09:00")
        assert events == []

    def test_range_deduplicates_multi_day_events(self, populated):
        events = populated.get_events_in_range("2025-06-05T09:30", "2025-06-06T09:30")
        assert [e.subject for e in events] == ["Meeting", "Overnight", "Review"]

    def test_range_rejects_reversed_bounds(self, populated):
        with pytest.raises(InvalidRangeError):
            populated.get_events_in_range("2025-06-06T00:00", "2025-06-05T00:00")

    def test_find_by_subject_and_start_case_insensitive(self, populated):
        events = populated.find_by_subject_and_start("mEETING", "2025-06-05T09:00")
        assert [e.subject for e in events] == ["Meeting"]

    def test_find_by_subject_and_start_exact_time(self, populated):
        assert populated.find_by_subject_and_start("Meeting", "2025-06-05T09:01") == []

    def test_find_by_details(self, populated):
        assert len(populated.find_by_details("meeting", "2025-06-05T09:00", "2025-06-05T10:00")) == 1
        assert populated.find_by_details("meeting", "2025-06-05T09:00", "2025-06-05T11:00") == []

    def test_is_busy_at_half_open(self, populated):
        assert populated.is_busy_at("2025-06-05T09:00")
        assert populated.is_busy_at("2025-06-05T09:59")
        assert not populated.is_busy_at("2025-06-05T10:00")

    def test_is_busy_across_midnight(self, populated):
        assert populated.is_busy_at("2025-06-06T03:00")

    def test_is_busy_zero_duration(self, store):
        store.create_event("Ping", "2025-06-05T12:00", "2025-06-05T12:00")
        assert store.is_busy_at("2025-06-05T12:00")
        assert not store.is_busy_at("2025-06-05T12:01")

    def test_get_unknown_ids(self, store):
        assert store.get_event("missing") is None
        assert store.get_series_by_id("missing") is None

    def test_snapshot(self, populated):
        snapshot = populated.get_snapshot()
        assert snapshot["event_count"] == 4
        assert snapshot["series_count"] == 0
        assert snapshot["events"][0]["subject"] == "Breakfast"
        assert snapshot["events"][0]["start"] == "2025-06-05T07:00"
