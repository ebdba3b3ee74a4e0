"""Channel resolvers: event transformation and handler strategies."""

from .transformer import EventTransformer, now_iso8601
from .subscription import SubscriptionRecorder
from .strategies import (
    ComputeInvocationStrategy,
    DirectStoreStrategy,
    HandlerStrategy,
    StrategyKind,
)

__all__ = [
    "EventTransformer",
    "now_iso8601",
    "SubscriptionRecorder",
    "HandlerStrategy",
    "StrategyKind",
    "DirectStoreStrategy",
    "ComputeInvocationStrategy",
]
