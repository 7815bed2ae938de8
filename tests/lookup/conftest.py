"""Shared fixtures for lookup tests."""

from datetime import UTC, datetime, timedelta
from unittest.mock import Mock

import pytest

from lookup.cache import MemoryCache
from lookup.cancellation import CancellationToken, Clock

START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


class FakeClock(Clock):
    """Clock whose sleeps advance time instantly and are recorded."""

    def __init__(self, start: datetime = START):
        self.current = start
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self.current

    def sleep(self, seconds: float, cancellation: CancellationToken) -> None:
        cancellation.raise_if_cancelled()
        self.sleeps.append(seconds)
        self.current += timedelta(seconds=seconds)

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


def make_response(status_code=200, json_data=None, headers=None, bad_json=False):
    """Build a Mock standing in for requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.headers = headers or {}
    if bad_json:
        response.json.side_effect = ValueError("Expecting value: line 1 column 1")
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def clock():
    """Fake clock starting at a fixed UTC instant."""
    return FakeClock()


@pytest.fixture
def session():
    """Mock requests session; set `request.side_effect` per test."""
    return Mock()


@pytest.fixture
def cache(clock):
    """In-memory cache driven by the fake clock."""
    return MemoryCache(clock=clock)
