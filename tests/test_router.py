"""Tests for the channel router."""
import pytest
from channelgate.errors import ConfigurationError
from channelgate.event_models import Operation
from channelgate.resolvers import ComputeInvocationStrategy, StrategyKind
from channelgate.routing.channel_router import ChannelRouter, channel_namespace


@pytest.fixture
def compute():
    return ComputeInvocationStrategy("http://compute.test/invoke")


@pytest.fixture
def router(direct, compute):
    router = ChannelRouter()
    router.register("bar", publish=direct, subscribe=direct)
    router.register("/foo/", publish=compute, subscribe=compute)
    router.register("audit", subscribe=direct)
    return router


def test_channel_namespace():
    """Test the namespace is the first path segment."""
    assert channel_namespace("/bar") == "bar"
    assert channel_namespace("/bar/room-1/x") == "bar"
    assert channel_namespace("bar/room-1") == "bar"
    assert channel_namespace("/") is None
    assert channel_namespace("") is None


def test_resolve_by_namespace(router, direct, compute):
    """Test channels resolve to the strategy bound to their namespace."""
    assert router.resolve("/bar", Operation.PUBLISH) is direct
    assert router.resolve("/bar/room-1", "subscribe") is direct
    assert router.resolve("/foo/x", Operation.PUBLISH) is compute


def test_resolve_is_stable(router):
    """Test repeated lookups return the same strategy."""
    first = router.resolve("/foo", Operation.SUBSCRIBE)
    for _ in range(5):
        assert router.resolve("/foo", Operation.SUBSCRIBE) is first
    assert first.kind is StrategyKind.COMPUTE


@pytest.mark.parametrize(
    "channel,operation",
    [
        ("/unknown", Operation.PUBLISH),
        ("/unknown", Operation.SUBSCRIBE),
        ("/audit", Operation.PUBLISH),
        ("/", Operation.PUBLISH),
        ("/bar", "delete"),
    ],
)
def test_resolve_unbound_raises(router, channel, operation):
    """Test unbound pairs raise ConfigurationError every time."""
    with pytest.raises(ConfigurationError) as exc_info:
        router.resolve(channel, operation)
    assert exc_info.value.channel == channel

    with pytest.raises(ConfigurationError):
        router.resolve(channel, operation)


def test_register_rejects_duplicates(router, direct):
    """Test a namespace cannot be bound twice."""
    with pytest.raises(ValueError):
        router.register("bar", publish=direct)


def test_register_rejects_nested_namespace(direct):
    """Test namespaces must be a single path segment."""
    with pytest.raises(ValueError):
        ChannelRouter().register("bar/baz", publish=direct)


def test_namespaces(router):
    assert router.namespaces() == ["audit", "bar", "foo"]
