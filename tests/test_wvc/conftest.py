"""
Pytest fixtures for WVC tests.
"""

import pytest

from wvc.application.services import VersionControlEngine
from wvc.infrastructure.events import WVCEventBus
from wvc.infrastructure.stores import InMemoryStateStore

from .builders import FakeClock, RecordingNotifier


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def event_bus() -> WVCEventBus:
    return WVCEventBus(max_history=100)


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def engine(store, event_bus, clock) -> VersionControlEngine:
    """Engine on an in-memory store with a deterministic clock."""
    return VersionControlEngine(
        workspace_id="ws-test",
        state_store=store,
        event_bus=event_bus,
        clock=clock,
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
