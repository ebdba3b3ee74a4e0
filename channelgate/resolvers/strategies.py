"""Per-channel handler strategies."""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar, Iterable, Mapping
import httpx
import structlog
from pydantic import ValidationError
from .subscription import SubscriptionRecorder
from ..adapters.base import StoreAdapter
from ..errors import ComputeInvocationFailure
from ..event_models import Event, ResponseEvent

log = structlog.get_logger()


class StrategyKind(str, Enum):
    """Tag identifying how a channel's operations are resolved."""
    DIRECT = "direct"
    COMPUTE = "compute"


class HandlerStrategy(ABC):
    """Handles publish and subscribe calls for the channels it is bound to."""

    kind: ClassVar[StrategyKind]

    @abstractmethod
    async def publish(self, channel: str, events: Iterable[Event | Mapping[str, Any]]) -> list[ResponseEvent]:
        pass

    @abstractmethod
    async def subscribe(self, channel: str) -> None:
        pass


class DirectStoreStrategy(HandlerStrategy):
    """
    Resolves channel operations straight against the record store.

    Publish writes one record per event and answers with the store's echo.
    Subscribe writes a single audit marker and answers with nothing.
    Store failures propagate untouched.
    """

    kind = StrategyKind.DIRECT

    def __init__(self, store: StoreAdapter, recorder: SubscriptionRecorder):
        self.store = store
        self.recorder = recorder

    @property
    def table(self) -> str:
        return self.recorder.table

    async def publish(self, channel: str, events: Iterable[Event | Mapping[str, Any]]) -> list[ResponseEvent]:
        records = self.recorder.publish_request(channel, events)
        result = await self.store.put(self.table, records)
        response = self.recorder.publish_response(channel, result)
        log.info("channel.published", channel=channel, table=self.table, count=len(records),
                 returned=len(response), strategy=self.kind.value)
        return response

    async def subscribe(self, channel: str) -> None:
        markers = self.recorder.subscribe_request(channel)
        result = await self.store.put(self.table, markers)
        log.info("channel.subscribed", channel=channel, table=self.table,
                 marker_id=markers[0]["id"], strategy=self.kind.value)
        return self.recorder.subscribe_response(result)


class ComputeInvocationStrategy(HandlerStrategy):
    """
    Forwards channel operations to an external request/response compute endpoint.

    The endpoint receives ``{"info": {"channel": {"path"}, "operation"}, "events"}``
    and answers publish calls with ``{"events": [{id, payload}, ...]}``.
    """

    kind = StrategyKind.COMPUTE

    def __init__(self, endpoint: str, timeout: float = 60.0, transport: httpx.AsyncBaseTransport | None = None):
        """
        Args:
            endpoint: URL the invocation is POSTed to
            timeout: Per-call timeout in seconds
            transport: Optional httpx transport, used to stub the endpoint
        """
        self.endpoint = endpoint
        self.timeout = timeout
        self._transport = transport

    async def publish(self, channel: str, events: Iterable[Event | Mapping[str, Any]]) -> list[ResponseEvent]:
        body = [
            (e if isinstance(e, Event) else Event.model_validate(e)).model_dump()
            for e in events
        ]
        payload = await self._invoke(channel, "PUBLISH", body)
        if payload is None:
            return []
        if not isinstance(payload, dict):
            raise ComputeInvocationFailure(self.endpoint, "response is not an object", "invalid_payload")
        try:
            return [ResponseEvent.model_validate(e) for e in payload.get("events") or []]
        except (ValidationError, TypeError) as e:
            raise ComputeInvocationFailure(self.endpoint, str(e), "invalid_payload") from e

    async def subscribe(self, channel: str) -> None:
        await self._invoke(channel, "SUBSCRIBE", None)
        return None

    async def _invoke(self, channel: str, operation: str, events: list[dict] | None) -> Any:
        request = {
            "info": {"channel": {"path": channel}, "operation": operation},
            "events": events,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.endpoint, json=request)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            log.error("compute.invoke_failed", endpoint=self.endpoint, channel=channel, error=str(e))
            raise ComputeInvocationFailure(self.endpoint, str(e), "network_timeout") from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            log.error("compute.invoke_failed", endpoint=self.endpoint, channel=channel, status=status_code)
            raise ComputeInvocationFailure(self.endpoint, f"http status {status_code}", "http_status") from e
        except httpx.HTTPError as e:
            log.error("compute.invoke_failed", endpoint=self.endpoint, channel=channel, error=str(e))
            raise ComputeInvocationFailure(self.endpoint, str(e)) from e

        if not response.content:
            return None
        try:
            payload = response.json()
        except ValueError as e:
            raise ComputeInvocationFailure(self.endpoint, "response is not JSON", "invalid_payload") from e
        if isinstance(payload, dict) and payload.get("error"):
            raise ComputeInvocationFailure(self.endpoint, str(payload["error"]), "handler_error")
        return payload
