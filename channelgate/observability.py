"""Diagnostic event sinks.

Resolvers never write diagnostics directly; they are handed a sink at wiring
time so the events can be routed to logs in production and captured in tests.
"""
from abc import ABC, abstractmethod
from typing import Any
import structlog


class DiagnosticSink(ABC):
    """Receives structured observability events."""

    @abstractmethod
    def emit(self, event: str, **fields: Any) -> None:
        pass


class LogDiagnosticSink(DiagnosticSink):
    """Emits diagnostic events as structlog warnings, optionally counting them."""

    def __init__(self, logger=None, metrics=None):
        self._log = logger or structlog.get_logger()
        self._metrics = metrics

    def emit(self, event: str, **fields: Any) -> None:
        self._log.warning(event, **fields)
        if self._metrics is not None and event == "store.malformed_response":
            self._metrics.record_malformed_response(str(fields.get("table", "")))
