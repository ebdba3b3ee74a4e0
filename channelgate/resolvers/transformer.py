"""Mapping between client event shapes and store record shapes."""
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping
from ..adapters.base import Item, PARTITION_KEY
from ..errors import MalformedStoreResponse
from ..event_models import Event, ResponseEvent
from ..observability import DiagnosticSink

Clock = Callable[[], str]


def now_iso8601() -> str:
    """Current UTC time as ISO-8601 with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class EventTransformer:
    """
    Builds batch writes from published events and decodes the store's echo.

    The transformer is bound to one table and one diagnostic sink at wiring
    time. It holds no per-call state.
    """

    def __init__(self, table: str, sink: DiagnosticSink, clock: Clock = now_iso8601):
        """
        Args:
            table: Table the channel's records are written to
            sink: Receives the diagnostic event for undecodable store results
            clock: Timestamp source, called once per write
        """
        self.table = table
        self._sink = sink
        self._clock = clock

    def publish_request(self, channel: str, events: Iterable[Event | Mapping[str, Any]]) -> list[Item]:
        """
        Build the records for one publish call.

        Every record shares the same timestamp. Payload fields are merged at
        the top level after the reserved fields, so a payload key named
        ``id``, ``channel`` or ``timestamp`` replaces the reserved value.
        """
        timestamp = self._clock()
        records = []
        for event in events:
            if not isinstance(event, Event):
                event = Event.model_validate(event)
            records.append({
                PARTITION_KEY: event.id,
                "channel": channel,
                "timestamp": timestamp,
                **event.payload,
            })
        return records

    def publish_response(self, channel: str, result: Any) -> list[ResponseEvent]:
        """
        Turn the store's echo into response events, in the order the store returned them.

        An undecodable result is reported to the sink and yields an empty list.
        """
        try:
            records = self._decode(result)
        except MalformedStoreResponse as exc:
            self._sink.emit(
                "store.malformed_response",
                channel=channel,
                table=self.table,
                reason=exc.reason,
                raw=result,
            )
            return []

        return [
            ResponseEvent(
                id=record[PARTITION_KEY],
                payload={k: v for k, v in record.items() if k != PARTITION_KEY},
            )
            for record in records
        ]

    def _decode(self, result: Any) -> list[Mapping[str, Any]]:
        if result is None:
            raise MalformedStoreResponse(self.table, result, "no result")
        if not isinstance(result, Mapping):
            raise MalformedStoreResponse(self.table, result, "result is not a mapping")
        if self.table not in result:
            raise MalformedStoreResponse(self.table, result, "table missing from result")

        records = result[self.table]
        if not isinstance(records, list):
            raise MalformedStoreResponse(self.table, result, "table entry is not a list")
        for record in records:
            if not isinstance(record, Mapping) or not isinstance(record.get(PARTITION_KEY), str):
                raise MalformedStoreResponse(self.table, result, "record without string id")
        return records
