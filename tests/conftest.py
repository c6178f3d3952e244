# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import asyncio
import copy
from collections import Counter
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import httpx
import pytest

from marina_core.api import APIConfig, MarinaAPIClient
from marina_core.datasource import ModeStore, MockDataProvider
from marina_core.datasource import demo_data
from marina_core.errors import ErrorKind, ProviderError
from marina_core.offline import OfflineSimulationSwitch
from marina_core.state import ConnectionSettings, EventBus, InMemoryStorage


# Outcome that never settles; used to exercise timeouts
HANG = object()

ONLINE_STATUS = {
    "isOnline": True,
    "lastSync": "2024-01-15T14:30:00",
    "nextSync": "2024-01-15T15:00:00",
    "pendingOperations": 2,
    "serverLatency": 25,
}
OFFLINE_STATUS = dict(ONLINE_STATUS, isOnline=False)


def unavailable(message="backend unreachable"):
    return ProviderError(message, kind=ErrorKind.UNAVAILABLE)


# =============================================================================
# STATE FIXTURES
# =============================================================================

@pytest.fixture
def storage():
    """Fresh in-memory settings storage"""
    return InMemoryStorage()


@pytest.fixture
def bus():
    """Event bus that records every published event"""
    event_bus = EventBus()
    event_bus.keep_history = True
    return event_bus


@pytest.fixture
def settings(storage, bus):
    return ConnectionSettings(storage, bus)


@pytest.fixture
def mode_store(storage, bus, settings):
    return ModeStore(storage, bus, settings)


@pytest.fixture
def simulation(storage, bus):
    return OfflineSimulationSwitch(storage, bus)


class FakeClock:
    """Deterministic datetime source"""

    def __init__(self, start=datetime(2024, 1, 15, 12, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


# =============================================================================
# PROVIDER FIXTURES
# =============================================================================

class ScriptedProvider(MockDataProvider):
    """
    Demo provider whose feed methods play back scripted outcomes.

    Each script is a list consumed front to back; the last entry repeats.
    An entry is a payload, an exception instance (raised) or HANG.
    """

    def __init__(self, status=None, operations=None, notifications=None, delay=0.0):
        super().__init__()
        self.scripts = {
            "get_sync_status": list(status or []),
            "get_pending_operations": list(operations or []),
            "get_notifications": list(notifications or []),
        }
        self.calls = Counter()
        self.delay = delay

    def script(self, name, *outcomes):
        self.scripts[name] = list(outcomes)

    async def _play(self, name, default):
        self.calls[name] += 1
        if self.delay:
            await asyncio.sleep(self.delay)

        script = self.scripts[name]
        if len(script) > 1:
            outcome = script.pop(0)
        elif script:
            outcome = script[0]
        else:
            outcome = default

        if outcome is HANG:
            await asyncio.sleep(3600)
        if isinstance(outcome, BaseException):
            raise outcome
        return copy.deepcopy(outcome)

    async def get_sync_status(self):
        return await self._play("get_sync_status", ONLINE_STATUS)

    async def get_pending_operations(self):
        return await self._play("get_pending_operations", demo_data.DEMO_PENDING_OPERATIONS)

    async def get_notifications(self):
        return await self._play("get_notifications", demo_data.DEMO_NOTIFICATIONS)


class RecordingFactory:
    """Provider factory that always hands out the same provider"""

    def __init__(self, provider):
        self.provider = provider
        self.modes = []

    def __call__(self, mode):
        self.modes.append(mode)
        return self.provider


@pytest.fixture
def provider():
    return ScriptedProvider()


@pytest.fixture
def factory(provider):
    return RecordingFactory(provider)


# =============================================================================
# HTTP FIXTURES
# =============================================================================

@pytest.fixture
def make_api_client():
    """Build a MarinaAPIClient served by an httpx.MockTransport handler"""

    def _make(handler, timeout=8.0):
        return MarinaAPIClient(
            APIConfig(base_url="http://marina.test", timeout=timeout),
            transport=httpx.MockTransport(handler),
        )

    return _make


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_streamlit(monkeypatch):
    """Replace the streamlit module used by the error handlers"""
    import marina_core.errors.handlers as handlers

    mock_st = MagicMock()
    mock_st.session_state = {}
    monkeypatch.setattr(handlers, "st", mock_st)
    return mock_st


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def event_names(bus):
    """Names of every event the bus has published, in order"""
    return [event.name for event in bus.history]
