"""Shared fixtures for channel gateway tests."""
import pytest
from channelgate.adapters.memory import InMemoryStore
from channelgate.observability import DiagnosticSink
from channelgate.resolvers import DirectStoreStrategy, SubscriptionRecorder

TABLE = "sample-table"
T = "2024-05-01T12:00:00.000Z"


class RecordingSink(DiagnosticSink):
    """Diagnostic sink that keeps every emitted event for assertions."""

    def __init__(self):
        self.events = []

    def emit(self, event, **fields):
        self.events.append((event, fields))


class SequenceIds:
    """Deterministic id factory: sub-1, sub-2, ..."""

    def __init__(self, prefix="sub"):
        self.prefix = prefix
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return f"{self.prefix}-{self.calls}"


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def recorder(sink):
    return SubscriptionRecorder(TABLE, sink, clock=lambda: T, id_factory=SequenceIds())


@pytest.fixture
def direct(store, recorder):
    return DirectStoreStrategy(store, recorder)
