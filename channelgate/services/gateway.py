"""Channel gateway service wired from configuration."""
from typing import Any, Iterable, Mapping
import structlog
from ..adapters.base import StoreAdapter
from ..adapters.memory import InMemoryStore
from ..adapters.redis_hash import RedisHashStore
from ..config import Settings, get_settings
from ..errors import GatewayError
from ..event_models import Event, Operation, ResponseEvent
from ..metrics import Metrics
from ..observability import DiagnosticSink, LogDiagnosticSink
from ..resolvers import ComputeInvocationStrategy, DirectStoreStrategy, SubscriptionRecorder
from ..routing.channel_router import ChannelRouter, channel_namespace

log = structlog.get_logger()


class ChannelGateway:
    """
    Entry point for channel operations.

    Resolves the strategy through the router and delegates to it. Errors are
    counted and re-raised unchanged; nothing is retried.
    """

    def __init__(self, router: ChannelRouter, metrics: Metrics | None = None):
        self.router = router
        self._metrics = metrics

    async def publish(self, channel: str, events: Iterable[Event | Mapping[str, Any]]) -> list[ResponseEvent]:
        """Publish a batch of events to a channel."""
        events = list(events)
        try:
            strategy = self.router.resolve(channel, Operation.PUBLISH)
            response = await strategy.publish(channel, events)
        except GatewayError as e:
            self._record_failure(Operation.PUBLISH, e)
            raise

        if self._metrics:
            self._metrics.record_publish(channel_namespace(channel) or "", strategy.kind.value, len(events))
        return response

    async def subscribe(self, channel: str) -> None:
        """Subscribe to a channel. Always answers with nothing."""
        try:
            strategy = self.router.resolve(channel, Operation.SUBSCRIBE)
            await strategy.subscribe(channel)
        except GatewayError as e:
            self._record_failure(Operation.SUBSCRIBE, e)
            raise

        if self._metrics:
            self._metrics.record_subscribe(channel_namespace(channel) or "", strategy.kind.value)
        return None

    def _record_failure(self, operation: Operation, error: GatewayError):
        log.warning("channel.operation_failed", operation=operation.value,
                    error_type=type(error).__name__, error=str(error))
        if self._metrics:
            self._metrics.record_failure(operation.value, type(error).__name__)


def build_gateway(
    settings: Settings | None = None,
    store: StoreAdapter | None = None,
    sink: DiagnosticSink | None = None,
    metrics: Metrics | None = None,
) -> ChannelGateway:
    """
    Wire a gateway from configuration.

    Direct namespaces share one store and write to ``settings.CHANNEL_TABLE``.
    Compute namespaces forward to ``settings.COMPUTE_ENDPOINT_URL``; without
    an endpoint they stay unbound.

    Args:
        settings: Configuration (defaults to get_settings())
        store: Store adapter (defaults to the configured adapter)
        sink: Diagnostic sink (defaults to structlog warnings)
        metrics: Prometheus metrics to record into
    """
    settings = settings or get_settings()
    router = ChannelRouter()

    direct = settings.direct_namespaces()
    if direct:
        store = store or create_store(settings)
        recorder = SubscriptionRecorder(settings.CHANNEL_TABLE, sink or LogDiagnosticSink(metrics=metrics))
        strategy = DirectStoreStrategy(store, recorder)
        for namespace in direct:
            router.register(namespace, publish=strategy, subscribe=strategy)

    compute = settings.compute_namespaces()
    if compute and settings.COMPUTE_ENDPOINT_URL:
        strategy = ComputeInvocationStrategy(
            str(settings.COMPUTE_ENDPOINT_URL),
            timeout=settings.COMPUTE_TIMEOUT_SECONDS,
        )
        for namespace in compute:
            router.register(namespace, publish=strategy, subscribe=strategy)
    elif compute:
        log.warning(
            "compute.unbound",
            namespaces=compute,
            reason="COMPUTE_ENDPOINT_URL not configured"
        )

    return ChannelGateway(router, metrics=metrics)


def create_store(settings: Settings) -> StoreAdapter:
    """
    Create the store adapter based on configuration.

    Returns:
        StoreAdapter instance based on STORE_ADAPTER setting
    """
    if settings.STORE_ADAPTER == "redis":
        if not settings.REDIS_URL:
            log.warning(
                "adapter.fallback",
                requested="redis",
                actual="memory",
                reason="REDIS_URL not configured"
            )
            return InMemoryStore()

        log.info("adapter.selected", type="redis", url=str(settings.REDIS_URL))
        return RedisHashStore(str(settings.REDIS_URL), key_prefix=settings.REDIS_KEY_PREFIX)
    else:
        log.info("adapter.selected", type="memory")
        return InMemoryStore()
