"""Test fixtures for the calendar engine.

This package provides reusable test fixtures:
- calendars: factories for stores, coordinators and sample events
- api: TestClient wired to a fresh coordinator
"""
