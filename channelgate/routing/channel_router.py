"""Channel router: picks the handler strategy bound to a channel operation."""
import structlog
from ..errors import ConfigurationError
from ..event_models import Operation
from ..resolvers.strategies import HandlerStrategy

log = structlog.get_logger()


def channel_namespace(channel: str) -> str | None:
    """First path segment of a channel, e.g. ``/bar/room-1`` -> ``bar``."""
    for segment in channel.split("/"):
        if segment:
            return segment
    return None


class ChannelRouter:
    """
    Maps (channel namespace, operation) pairs to handler strategies.

    Bindings are fixed at configuration time. ``resolve`` carries no per-call
    state and returns the same strategy object for the same inputs.
    """

    def __init__(self):
        self._bindings: dict[tuple[str, Operation], HandlerStrategy] = {}

    def register(
        self,
        namespace: str,
        publish: HandlerStrategy | None = None,
        subscribe: HandlerStrategy | None = None,
    ):
        """
        Bind strategies to a channel namespace.

        Args:
            namespace: First channel path segment, with or without slashes
            publish: Strategy for publish calls (left unbound if None)
            subscribe: Strategy for subscribe calls (left unbound if None)

        Raises:
            ValueError: If the namespace is empty or already registered
        """
        name = namespace.strip("/")
        if not name or "/" in name:
            raise ValueError(f"Invalid channel namespace: {namespace!r}")
        if any(bound == name for bound, _ in self._bindings):
            raise ValueError(f"Channel namespace {name} is already registered")

        for operation, strategy in ((Operation.PUBLISH, publish), (Operation.SUBSCRIBE, subscribe)):
            if strategy is not None:
                self._bindings[(name, operation)] = strategy
                log.info("channel.bound", namespace=name, operation=operation.value,
                         strategy=strategy.kind.value)

    def resolve(self, channel: str, operation: Operation | str) -> HandlerStrategy:
        """
        Look up the strategy for a channel operation.

        Raises:
            ConfigurationError: If nothing is bound to the pair
        """
        try:
            op = Operation(operation)
        except ValueError:
            raise ConfigurationError(channel, str(operation)) from None

        namespace = channel_namespace(channel)
        strategy = self._bindings.get((namespace, op)) if namespace else None
        if strategy is None:
            raise ConfigurationError(channel, op.value)
        return strategy

    def namespaces(self) -> list[str]:
        """List registered namespaces."""
        return sorted({name for name, _ in self._bindings})
