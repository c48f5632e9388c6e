"""Shared fixtures for MarketTracker tests."""

import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from markettracker.db import AlertStore, MemoryKeyValueStore, SqliteKeyValueStore


class FakeClock:
    """Manually advanced clock returning epoch milliseconds."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


class FakeDateClock:
    """Manually advanced clock returning datetimes."""

    def __init__(self, start: datetime = datetime(2024, 5, 1, 10, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class CountingKeyValueStore(MemoryKeyValueStore):
    """In-memory store that counts writes."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.writes = 0

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        super().set(key, value)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def date_clock():
    return FakeDateClock()


@pytest.fixture
def kv():
    return CountingKeyValueStore()


@pytest.fixture
def store(kv, date_clock):
    return AlertStore(kv, clock=date_clock)


@pytest.fixture
def temp_db():
    """Create a temporary SQLite key-value store."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield SqliteKeyValueStore(Path(tmpdir) / "test.db")
