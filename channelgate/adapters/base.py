"""Base adapter interface for record store backends."""
import copy
from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence

from ..errors import StoreWriteFailure

Item = dict[str, Any]

PARTITION_KEY = "id"


class StoreAdapter(ABC):
    """Abstract interface for an atomic "put many items under one table" store."""

    @abstractmethod
    async def put(self, table: str, items: Sequence[Mapping[str, Any]]) -> dict[str, list[Item]]:
        """
        Persist every item under the table, or none of them.

        Args:
            table: Target table name
            items: Records to write, each carrying a string ``id``

        Returns:
            ``{table: [persisted items]}`` echoing each item's full attribute set

        Raises:
            StoreWriteFailure: If the batch is rejected
        """
        pass

    @abstractmethod
    async def get(self, table: str, item_id: str) -> Item | None:
        """Fetch a single item by partition key."""
        pass

    @abstractmethod
    async def scan(self, table: str) -> list[Item]:
        """Return every item held in the table."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the backend is healthy and accessible.

        Returns:
            True if backend is healthy, False otherwise
        """
        pass


def validate_batch(table: str, items: Sequence[Mapping[str, Any]]) -> list[Item]:
    """Check partition keys for a whole batch before anything is written.

    Returns deep copies of the items, detached from the caller.

    Raises:
        StoreWriteFailure: On a missing, non-string or duplicated ``id``
    """
    seen: set[str] = set()
    batch = []
    for index, item in enumerate(items):
        key = item.get(PARTITION_KEY)
        if not isinstance(key, str) or not key:
            raise StoreWriteFailure(table, f"item {index} has no string '{PARTITION_KEY}'")
        if key in seen:
            raise StoreWriteFailure(table, f"duplicate '{PARTITION_KEY}' {key!r} in batch")
        seen.add(key)
        batch.append(copy.deepcopy(dict(item)))
    return batch
