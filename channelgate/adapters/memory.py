"""In-memory record store adapter."""
import asyncio
import copy
from typing import Any, Mapping, Sequence
import structlog
from .base import Item, PARTITION_KEY, StoreAdapter, validate_batch

log = structlog.get_logger()


class InMemoryStore(StoreAdapter):
    """In-memory implementation of the record store."""

    def __init__(self):
        self._tables: dict[str, dict[str, Item]] = {}
        self._lock = asyncio.Lock()

    async def put(self, table: str, items: Sequence[Mapping[str, Any]]) -> dict[str, list[Item]]:
        """Write the batch to the in-memory table as one unit."""
        batch = validate_batch(table, items)
        async with self._lock:
            rows = self._tables.setdefault(table, {})
            for item in batch:
                rows[item[PARTITION_KEY]] = item
        log.info("store.batch_written", table=table, count=len(batch), adapter="memory")
        return {table: copy.deepcopy(batch)}

    async def get(self, table: str, item_id: str) -> Item | None:
        item = self._tables.get(table, {}).get(item_id)
        return copy.deepcopy(item) if item is not None else None

    async def scan(self, table: str) -> list[Item]:
        return copy.deepcopy(list(self._tables.get(table, {}).values()))

    async def health_check(self) -> bool:
        """In-memory store is always healthy."""
        return True
