"""Pytest configuration and fixtures."""

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Friday afternoon
FIXED_NOW = datetime(2025, 11, 21, 14, 30, tzinfo=timezone.utc)

NO_ACTION_RESPONSE = json.dumps({"shouldAct": False, "reasoning": "Nothing to do"})

ACT_RESPONSE = json.dumps(
    {
        "shouldAct": True,
        "reasoning": "Meeting moved",
        "suggestion": {
            "message": "Want to see today's events?",
            "actions": [{"app": "calendar", "action": "get_events", "params": {}}],
            "priority": "low",
        },
    }
)


class FakeApp:
    """Configurable app module for registry/orchestrator tests."""

    def __init__(self, name, state=None, result=None, error=None, capabilities=None, actions=None):
        from awareos.models import AppManifest

        self.manifest = AppManifest(
            name=name,
            domain="testing",
            capabilities=capabilities or [],
            actions=actions or [],
        )
        self._state = state
        self._result = result
        self._error = error
        self.calls = []

    def get_state(self):
        return self._state

    def dispatch(self, action, params):
        self.calls.append((action, params))
        if self._error:
            raise self._error
        return self._result


@pytest.fixture
def make_app():
    """Factory for FakeApp modules."""
    return FakeApp


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from awareos.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest_asyncio.fixture
async def context_store(storage):
    """Create initialized ContextStore over in-memory storage."""
    from awareos.context_store import ContextStore

    cs = ContextStore(storage)
    await cs.init()
    return cs


@pytest.fixture
def event_bus():
    """Create EventBus."""
    from awareos.event_bus import EventBus

    return EventBus()


@pytest.fixture
def registry():
    """Create empty Registry."""
    from awareos.registry import Registry

    return Registry()


@pytest.fixture
def mock_llm():
    """Create mock LLM provider that never suggests anything."""
    llm = Mock()
    llm.complete = AsyncMock(return_value=NO_ACTION_RESPONSE)
    return llm


@pytest.fixture
def captured(event_bus):
    """Record every event emitted on the bus as (topic, payload)."""
    events = []
    event_bus.on("*", lambda topic, payload: events.append((topic, payload)))
    return events


@pytest_asyncio.fixture
async def orchestrator(event_bus, registry, context_store, mock_llm):
    """Create Orchestrator with a mock LLM and a fixed clock."""
    from awareos.orchestrator import Orchestrator

    orch = Orchestrator(
        event_bus=event_bus,
        registry=registry,
        context_store=context_store,
        llm_provider=mock_llm,
        clock=lambda: FIXED_NOW,
    )
    await orch.init()
    yield orch
    await orch.stop()


@pytest_asyncio.fixture
async def observer(event_bus, registry, context_store):
    """Create Orchestrator without any reasoning provider (observe-only)."""
    from awareos.orchestrator import Orchestrator

    orch = Orchestrator(
        event_bus=event_bus,
        registry=registry,
        context_store=context_store,
        clock=lambda: FIXED_NOW,
    )
    await orch.init()
    yield orch
    await orch.stop()


async def entries_of(context_store, kind):
    """All log entries of a given kind, newest first."""
    return [e for e in await context_store.get_log(1000) if e.kind == kind]


@pytest.fixture
def log_entries(context_store):
    """Async helper: log entries of one kind, newest first."""

    async def _entries(kind):
        return await entries_of(context_store, kind)

    return _entries


@pytest.fixture
def act_response():
    return ACT_RESPONSE
