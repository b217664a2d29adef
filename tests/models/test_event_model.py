"""Unit tests for the Event model."""

from datetime import date, datetime, timedelta

from models.enums import EventStatus, Location
from models.event import Event
from tests.fixtures.calendars import create_event


class TestEventIdentity:
    """Test identity, equality and hashing."""

    def test_event_id_generated(self):
        first = create_event()
        second = create_event()
        assert first.event_id
        assert first.event_id != second.event_id

    def test_equality_uses_subject_start_end_only(self):
        """Verify metadata and series membership do not affect equality."""
        plain = create_event()
        decorated = create_event(
            description="notes",
            location=Location.ONLINE,
            status=EventStatus.PRIVATE,
            series_id="abc",
        )

        assert plain == decorated
        assert hash(plain) == hash(decorated)
        assert len({plain, decorated}) == 1

    def test_different_subject_not_equal(self):
        assert create_event(subject="Meeting") != create_event(subject="meeting")

    def test_key(self):
        event = create_event()
        assert event.key == ("Meeting", datetime(2025, 6, 5, 9, 0), datetime(2025, 6, 5, 10, 0))


class TestEventTime:
    """Test occupancy, overlap and day coverage."""

    def test_occupies_half_open(self):
        event = create_event()
        assert event.occupies(datetime(2025, 6, 5, 9, 0))
        assert event.occupies(datetime(2025, 6, 5, 9, 59))
        assert not event.occupies(datetime(2025, 6, 5, 10, 0))
        assert not event.occupies(datetime(2025, 6, 5, 8, 59))

    def test_zero_duration_occupies_its_instant(self):
        instant = datetime(2025, 6, 5, 12, 0)
        event = create_event(start=instant, end=instant)
        assert event.occupies(instant)
        assert not event.occupies(instant + timedelta(minutes=1))

    def test_overlaps(self):
        event = create_event()
        assert event.overlaps(datetime(2025, 6, 5, 9, 30), datetime(2025, 6, 5, 11, 0))
        assert not event.overlaps(datetime(2025, 6, 5, 10, 0), datetime(2025, 6, 5, 11, 0))
        assert not event.overlaps(datetime(2025, 6, 5, 8, 0), datetime(2025, 6, 5, 9, 0))

    def test_zero_duration_overlaps_containing_range(self):
        instant = datetime(2025, 6, 5, 12, 0)
        event = create_event(start=instant, end=instant)
        assert event.overlaps(datetime(2025, 6, 5, 12, 0), datetime(2025, 6, 5, 13, 0))
        assert not event.overlaps(datetime(2025, 6, 5, 11, 0), datetime(2025, 6, 5, 12, 0))

    def test_empty_range_uses_occupancy(self):
        event = create_event()
        assert event.overlaps(datetime(2025, 6, 5, 9, 0), datetime(2025, 6, 5, 9, 0))
        assert not event.overlaps(datetime(2025, 6, 5, 10, 0), datetime(2025, 6, 5, 10, 0))

    def test_days_of_multi_day_event(self):
        event = create_event(start=datetime(2025, 6, 5, 22, 0), end=datetime(2025, 6, 7, 2, 0))
        assert event.days() == [date(2025, 6, 5), date(2025, 6, 6), date(2025, 6, 7)]

    def test_duration(self):
        assert create_event().duration == timedelta(hours=1)


class TestEventCopy:
    def test_copy_to_is_standalone_with_metadata(self):
        original = create_event(
            description="Quarterly review",
            location=Location.PHYSICAL,
            location_detail="Room 4",
            status=EventStatus.PUBLIC,
            series_id="series-1",
        )

        copy = original.copy_to(datetime(2025, 7, 1, 14, 0), datetime(2025, 7, 1, 15, 0))

        assert copy.event_id != original.event_id
        assert copy.series_id is None
        assert copy.is_standalone()
        assert copy.subject == "Meeting"
        assert copy.description == "Quarterly review"
        assert copy.location is Location.PHYSICAL
        assert copy.location_detail == "Room 4"
        assert copy.status is EventStatus.PUBLIC


class TestEventSerialization:
    def test_model_dump_json_times(self):
        data = create_event().model_dump(mode="json")
        assert data["start"] == "2025-06-05T09:00"
        assert data["end"] == "2025-06-05T10:00"
        assert data["series_id"] is None

    def test_location_display(self):
        assert create_event().location_display == ""
        event = create_event(location=Location.PHYSICAL, location_detail="Room 4")
        assert event.location_display == "PHYSICAL: Room 4"
        assert create_event(location=Location.ONLINE).location_display == "ONLINE"

    def test_summary(self):
        summary = create_event(location=Location.ONLINE).get_summary()
        assert summary == "Meeting (2025-06-05T09:00 to 2025-06-05T10:00) @ ONLINE"

    def test_round_trip_through_validation(self):
        """Verify the JSON form validates back into an equal event."""
        event = create_event()
        restored = Event.model_validate(event.model_dump(mode="json"))
        assert restored == event
        assert restored.event_id == event.event_id
