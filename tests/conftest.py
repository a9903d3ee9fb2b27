"""Shared fixtures for the Mollier test suite."""

import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from core.mollier.exceptions import HAConnectionError
from core.mollier.models import HistorySample

BASE_TIME = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def at(minutes: float) -> datetime:
    """Timestamp `minutes` after the base time."""
    return BASE_TIME + timedelta(minutes=minutes)


def series(*pairs) -> list[HistorySample]:
    """Build history from (minutes, value) pairs."""
    return [HistorySample(timestamp=at(m), value=v) for m, v in pairs]


class FakeHistorySource:
    """In-memory history source that records call concurrency."""

    def __init__(self, histories: dict | None = None, failing: set | None = None, delay: float = 0.0):
        self.histories = histories or {}
        self.failing = failing or set()
        self.delay = delay
        self.calls = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def get_history(self, entity_id, start_time, end_time):
        delay = self.delay
        with self._lock:
            self.calls.append((entity_id, start_time, end_time))
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if delay:
                time.sleep(delay)
            if entity_id in self.failing:
                raise HAConnectionError(f"Failed to fetch history for {entity_id}: 401 Unauthorized")
            return list(self.histories.get(entity_id, []))
        finally:
            with self._lock:
                self.active -= 1


@pytest.fixture
def history_source():
    return FakeHistorySource(
        histories={
            "sensor.living_temperature": series((0, 20.0), (5, 21.0), (10, 22.0)),
            "sensor.living_humidity": series((0, 50.0), (10, 55.0)),
            "sensor.bath_temperature": series((0, 24.0)),
            "sensor.bath_humidity": series((0, 70.0)),
        }
    )
