"""Tests for direct-store and compute-invocation strategies."""
import httpx
import orjson
import pytest
from unittest.mock import AsyncMock
from channelgate.errors import ComputeInvocationFailure, StoreWriteFailure
from channelgate.event_models import Event, ResponseEvent
from channelgate.resolvers import ComputeInvocationStrategy, DirectStoreStrategy, StrategyKind
from conftest import TABLE, T


@pytest.mark.asyncio
async def test_direct_publish_example(direct, store):
    """Test publishing one event stores the flattened record and echoes it."""
    response = await direct.publish("bar", [Event(id="e1", payload={"msg": "hi"})])

    assert await store.get(TABLE, "e1") == {"id": "e1", "channel": "bar", "timestamp": T, "msg": "hi"}
    assert response == [ResponseEvent(id="e1", payload={"channel": "bar", "timestamp": T, "msg": "hi"})]


@pytest.mark.asyncio
@pytest.mark.parametrize("n", [0, 1, 5])
async def test_direct_publish_n_records(direct, store, n):
    """Test a batch of N events leaves N records and N response events."""
    events = [Event(id=f"e{i}", payload={"i": i}) for i in range(n)]

    response = await direct.publish("/bar", events)

    records = await store.scan(TABLE)
    assert len(records) == n
    assert len(response) == n
    for record in records:
        assert record["channel"] == "/bar"
        assert record["timestamp"] == T
        assert record["i"] == int(record["id"][1:])
    for event in response:
        assert event.payload["channel"] == "/bar"
        assert event.payload["timestamp"] == T


@pytest.mark.asyncio
async def test_direct_publish_last_write_wins(direct, store):
    """Test the second publish of an id replaces the first."""
    await direct.publish("/bar", [Event(id="e1", payload={"v": "first"})])
    await direct.publish("/bar", [Event(id="e1", payload={"v": "second"})])

    assert (await store.get(TABLE, "e1"))["v"] == "second"
    assert len(await store.scan(TABLE)) == 1


@pytest.mark.asyncio
async def test_direct_publish_store_failure_propagates(direct, store):
    """Test a rejected batch raises and writes nothing."""
    with pytest.raises(StoreWriteFailure):
        await direct.publish("/bar", [Event(id="e1"), Event(id="e1")])

    assert await store.scan(TABLE) == []


@pytest.mark.asyncio
async def test_direct_publish_malformed_result_degrades(recorder, sink):
    """Test a store result missing the table key yields an empty response."""
    store = AsyncMock()
    store.put.return_value = {"some-other-table": []}
    strategy = DirectStoreStrategy(store, recorder)

    response = await strategy.publish("/bar", [Event(id="e1")])

    assert response == []
    assert sink.events[0][0] == "store.malformed_response"
    assert sink.events[0][1]["raw"] == {"some-other-table": []}


@pytest.mark.asyncio
async def test_direct_subscribe_writes_one_marker(direct, store):
    """Test subscribe writes exactly one marker and answers with nothing."""
    assert await direct.subscribe("bar") is None

    records = await store.scan(TABLE)
    assert records == [{"id": "sub-1", "channel": "bar", "timestamp": T}]


@pytest.mark.asyncio
async def test_direct_subscribe_ignores_result_shape(recorder):
    """Test the subscribe response is empty even when the store result is odd."""
    store = AsyncMock()
    store.put.return_value = None
    strategy = DirectStoreStrategy(store, recorder)

    assert await strategy.subscribe("/bar") is None
    store.put.assert_awaited_once()
    table, items = store.put.await_args[0]
    assert table == TABLE
    assert len(items) == 1


@pytest.mark.asyncio
async def test_direct_subscribe_store_failure_propagates(recorder):
    store = AsyncMock()
    store.put.side_effect = StoreWriteFailure(TABLE, "throttled")
    strategy = DirectStoreStrategy(store, recorder)

    with pytest.raises(StoreWriteFailure):
        await strategy.subscribe("/bar")


def test_strategy_tags(direct):
    assert direct.kind is StrategyKind.DIRECT
    assert ComputeInvocationStrategy("http://x").kind is StrategyKind.COMPUTE


def _compute(handler):
    return ComputeInvocationStrategy("http://compute.test/invoke", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_compute_publish_forwards_events():
    """Test publish forwards the channel, operation and events verbatim."""
    seen = []

    def handler(request):
        body = orjson.loads(request.content)
        seen.append(body)
        return httpx.Response(200, json={"events": [
            {"id": e["id"], "payload": {**e["payload"], "handled": True}} for e in body["events"]
        ]})

    response = await _compute(handler).publish("/foo/x", [Event(id="e1", payload={"msg": "hi"})])

    assert seen == [{
        "info": {"channel": {"path": "/foo/x"}, "operation": "PUBLISH"},
        "events": [{"id": "e1", "payload": {"msg": "hi"}}],
    }]
    assert response == [ResponseEvent(id="e1", payload={"msg": "hi", "handled": True})]


@pytest.mark.asyncio
async def test_compute_publish_empty_body():
    """Test an empty endpoint answer means no response events."""
    response = await _compute(lambda request: httpx.Response(200)).publish("/foo", [Event(id="e1")])

    assert response == []


@pytest.mark.asyncio
async def test_compute_subscribe_returns_nothing():
    seen = []

    def handler(request):
        seen.append(orjson.loads(request.content))
        return httpx.Response(200, json=None)

    assert await _compute(handler).subscribe("/foo") is None
    assert seen[0]["info"] == {"channel": {"path": "/foo"}, "operation": "SUBSCRIBE"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response,category",
    [
        (httpx.Response(500), "http_status"),
        (httpx.Response(200, content=b"not json"), "invalid_payload"),
        (httpx.Response(200, json={"error": "boom"}), "handler_error"),
        (httpx.Response(200, json={"events": [{"payload": {}}]}), "invalid_payload"),
        (httpx.Response(200, json=["not", "an", "object"]), "invalid_payload"),
    ],
)
async def test_compute_publish_failures(response, category):
    """Test endpoint failures raise ComputeInvocationFailure with a category."""
    with pytest.raises(ComputeInvocationFailure) as exc_info:
        await _compute(lambda request: response).publish("/foo", [Event(id="e1")])

    assert exc_info.value.category == category


@pytest.mark.asyncio
async def test_compute_transport_error():
    def handler(request):
        raise httpx.ConnectError("Connection refused")

    with pytest.raises(ComputeInvocationFailure) as exc_info:
        await _compute(handler).subscribe("/foo")

    assert exc_info.value.category == "transport_error"


@pytest.mark.asyncio
async def test_direct_publish_detaches_stored_record(direct, store):
    """Test mutating an event payload after publish does not reach the store."""
    event = Event(id="e1", payload={"tags": ["x"]})
    await direct.publish("/bar", [event])

    event.payload["tags"].append("y")

    assert (await store.get(TABLE, "e1"))["tags"] == ["x"]
