"""
Root pytest configuration.

Provides a controllable clock for simulating IST days and resets the
process-wide tracker caches between tests.
"""

from datetime import datetime, timedelta

import pytest
import pytz

from src.tracker.extremes import clear_default_caches
from src.tracker.history import clear_default_history_caches


class FakeClock:
    """Callable clock returning a settable aware UTC datetime."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def utc(*args) -> datetime:
    """Aware UTC datetime, e.g. utc(2026, 3, 2, 6, 30)."""
    return datetime(*args, tzinfo=pytz.UTC)


@pytest.fixture
def clock():
    # 12:00 IST on 2026-03-02
    return FakeClock(utc(2026, 3, 2, 6, 30))


@pytest.fixture(autouse=True)
def _reset_default_caches():
    clear_default_caches()
    clear_default_history_caches()
    yield
    clear_default_caches()
    clear_default_history_caches()
