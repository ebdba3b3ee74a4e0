"""Gateway error taxonomy."""
from typing import Any


class GatewayError(Exception):
    """Base class for all gateway errors."""


class ConfigurationError(GatewayError):
    """No strategy is bound to the requested channel operation.

    Fatal: surfaced to the caller as-is and never retried.
    """

    def __init__(self, channel: str, operation: str):
        self.channel = channel
        self.operation = operation
        super().__init__(f"No {operation} handler configured for channel {channel}")


class StoreWriteFailure(GatewayError):
    """The store rejected a batch write. Nothing from the batch was persisted."""

    def __init__(self, table: str, reason: str):
        self.table = table
        self.reason = reason
        super().__init__(f"Batch write to {table} rejected: {reason}")


class MalformedStoreResponse(GatewayError):
    """The store succeeded but its result cannot be decoded.

    Recovered locally by the publish decoder; callers never see it.
    """

    def __init__(self, table: str, raw: Any, reason: str):
        self.table = table
        self.raw = raw
        self.reason = reason
        super().__init__(f"Unexpected result for table {table}: {reason}")


class ComputeInvocationFailure(GatewayError):
    """The external compute endpoint failed or answered with an unusable payload."""

    def __init__(self, endpoint: str, reason: str, category: str = "transport_error"):
        self.endpoint = endpoint
        self.reason = reason
        self.category = category
        super().__init__(f"Compute invocation of {endpoint} failed: {reason}")
