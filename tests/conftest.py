"""Shared fixtures for webfilter tests."""

from pathlib import Path
from unittest.mock import patch

import pytest

from webfilter.common import NANOS_PER_MINUTE
from webfilter.registry import Registry
from webfilter.store import HostStore

# 2024-01-01T00:00:00Z in nanoseconds
START_NS = 1_704_067_200 * 10**9


class FakeClock:
    """Controllable nanosecond clock."""

    def __init__(self, now: int = START_NS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, minutes: float = 0, seconds: float = 0) -> None:
        self.now += int(minutes * NANOS_PER_MINUTE) + int(seconds * 10**9)


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path):
    """Keep audit logs and default state out of the real user data dir."""
    data_dir = tmp_path / "data"
    with patch("webfilter.common.get_data_dir", return_value=data_dir):
        with patch("webfilter.config.get_data_dir", return_value=data_dir):
            yield data_dir


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def state_file(tmp_path) -> Path:
    return tmp_path / "hosts.json"


@pytest.fixture
def store(state_file):
    return HostStore(state_file)


@pytest.fixture
def registry(store, clock):
    return Registry(store, clock=clock)
