"""Audit markers written when a client subscribes to a channel."""
import uuid
from typing import Any, Callable
from .transformer import EventTransformer
from ..adapters.base import Item, PARTITION_KEY


def new_marker_id() -> str:
    return str(uuid.uuid4())


class SubscriptionRecorder(EventTransformer):
    """Event transformer that also knows how to record subscriptions."""

    def __init__(self, *args, id_factory: Callable[[], str] = new_marker_id, **kwargs):
        super().__init__(*args, **kwargs)
        self._id_factory = id_factory

    def subscribe_request(self, channel: str) -> list[Item]:
        """One marker record with a fresh id and timestamp, and no payload fields."""
        return [{
            PARTITION_KEY: self._id_factory(),
            "channel": channel,
            "timestamp": self._clock(),
        }]

    def subscribe_response(self, result: Any) -> None:
        # Subscribing only leaves the audit trail; the caller gets nothing back.
        return None
