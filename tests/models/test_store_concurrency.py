"""Concurrency tests for EventStore.

Every public store operation runs under the store's lock, so concurrent
callers on one store must never leave the indexes disagreeing or let two
equal (subject, start, end) events in.

Note: These tests use ThreadPoolExecutor to run store calls from several
threads at once.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timedelta
from typing import Callable

from models.errors import CalendarError


def run_concurrent(
    tasks: list[Callable],
    max_workers: int = 10,
) -> list:
    """Run multiple tasks concurrently and collect results.

    Args:
        tasks: List of callable functions to execute.
        max_workers: Maximum number of concurrent threads.

    Returns:
        List of results from each task (in completion order).
    """
    results = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(task) for task in tasks]
        for future in as_completed(futures):
            results.append(future.result())
    return results


def outcome(call: Callable) -> Callable:
    """Wrap a store call so it returns "ok" or the error kind it raised."""

    def task():
        try:
            call()
        except CalendarError as e:
            return e.kind
        return "ok"

    return task


def assert_consistent(store):
    events = store.all_events()
    assert store.validate_state() == []
    assert len({event.key for event in events}) == len(events)


class TestConcurrentCreates:
    """Tests for concurrent event creation."""

    def test_identical_creates_store_one_event(self, store):
        """Only one of many simultaneous identical creates succeeds."""
        tasks = [
            outcome(lambda: store.create_event("Meeting", "2025-06-05T09:00", "2025-06-05T10:00"))
            for _ in range(20)
        ]

        results = run_concurrent(tasks)

        assert results.count("ok") == 1
        assert results.count("DuplicateEvent") == 19
        assert len(store) == 1
        assert_consistent(store)

    def test_distinct_creates_all_stored(self, store):
        base = datetime(2025, 6, 2, 8, 0)

        def create(i):
            start = base + timedelta(hours=i)
            return outcome(lambda: store.create_event(f"Task {i}", start, start + timedelta(hours=2)))

        results = run_concurrent([create(i) for i in range(40)])

        assert results == ["ok"] * 40
        assert len(store) == 40
        assert_consistent(store)


class TestConcurrentEdits:
    """Tests for concurrent edits racing on the uniqueness index."""

    def test_colliding_subject_edits_admit_one(self, store):
        """Renaming same-slot events to one subject lets exactly one through."""
        events = [
            store.create_event(f"Meeting {i}", "2025-06-05T09:00", "2025-06-05T10:00")
            for i in range(10)
        ]
        tasks = [
            outcome(lambda event_id=event.event_id: store.edit_event(event_id, "subject", "Shared"))
            for event in events
        ]

        results = run_concurrent(tasks)

        assert results.count("ok") == 1
        assert results.count("ConflictingEvent") == 9
        assert len(store.find_by_subject_and_start("Shared", "2025-06-05T09:00")) == 1
        assert_consistent(store)

    def test_mixed_reads_and_writes(self, store):
        """Creates, time edits and range queries interleave without corrupting the store."""
        base = datetime(2025, 6, 2, 9, 0)
        movers = [
            store.create_event(f"Mover {i}", base + timedelta(days=i), base + timedelta(days=i, hours=1))
            for i in range(10)
        ]

        def create(i):
            start = base + timedelta(days=i, hours=3)
            return outcome(lambda: store.create_event(f"New {i}", start, start + timedelta(hours=1)))

        def move(event):
            new_end = event.end + timedelta(days=1)
            return outcome(lambda: store.edit_event(event.event_id, "end", new_end.isoformat()))

        def query(i):
            def task():
                found = store.get_events_in_range(base + timedelta(days=i), base + timedelta(days=i + 2))
                assert len({event.event_id for event in found}) == len(found)
                return "ok"

            return task

        tasks = []
        for i in range(10):
            tasks.extend([create(i), move(movers[i]), query(i)])

        results = run_concurrent(tasks)

        assert results == ["ok"] * 30
        assert len(store) == 20
        assert all(event.end - event.start == timedelta(days=1, hours=1) for event in movers)
        assert_consistent(store)
