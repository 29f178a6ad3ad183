"""Pytest configuration and shared fixtures for HeyFocus tests."""

from datetime import datetime, timedelta

import pytest

from heyfocus.services.clock import Clock
from heyfocus.services.config_service import reset_config_service
from heyfocus.services.data_store import DataStore
from heyfocus.services.event_bus import reset_event_bus
from heyfocus.services.kv_store import JsonFileStore
from heyfocus.services.task_state_machine import TaskStateMachine


class FrozenClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: datetime):
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float = 0, **kwargs) -> None:
        self._now += timedelta(seconds=seconds, **kwargs)

    def set(self, when: datetime) -> None:
        self._now = when


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset module-level singletons between tests."""
    reset_config_service()
    reset_event_bus()
    yield
    reset_config_service()
    reset_event_bus()


@pytest.fixture
def clock():
    """A frozen clock at 09:00 on a fixed day."""
    return FrozenClock(datetime(2026, 3, 2, 9, 0, 0))


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "heyfocus_data.json"


@pytest.fixture
def kv(store_path):
    return JsonFileStore(store_path)


@pytest.fixture
def data_store(kv, clock):
    return DataStore(kv, clock=clock)


@pytest.fixture
def machine(data_store, clock):
    """A TaskStateMachine over an empty temporary store."""
    return TaskStateMachine(data_store, clock=clock)
