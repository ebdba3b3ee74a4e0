"""Redis hash record store adapter."""
from typing import Any, Mapping, Sequence
import structlog
import orjson
from redis import Redis
from redis.exceptions import RedisError
from .base import Item, PARTITION_KEY, StoreAdapter, validate_batch
from ..errors import StoreWriteFailure
from ..config import get_settings

log = structlog.get_logger()
settings = get_settings()


class RedisHashStore(StoreAdapter):
    """Redis implementation of the record store.

    Each table is one Redis hash keyed by item id. A batch is applied inside
    a MULTI/EXEC transaction and the persisted items are read back in the
    same transaction, so the echo reflects what Redis actually holds.
    """

    def __init__(self, redis_url: str | None = None, key_prefix: str | None = None):
        """
        Initialize Redis hash store.

        Args:
            redis_url: Redis connection URL (defaults to settings.REDIS_URL)
            key_prefix: Namespace for table keys (defaults to settings.REDIS_KEY_PREFIX)
        """
        self.redis_url = redis_url or str(settings.REDIS_URL)
        self.key_prefix = key_prefix if key_prefix is not None else settings.REDIS_KEY_PREFIX
        self._client: Redis | None = None

    def _get_client(self) -> Redis:
        """Get or create Redis client."""
        if self._client is None:
            self._client = Redis.from_url(
                self.redis_url,
                decode_responses=False,  # orjson handles encoding
                socket_connect_timeout=5,
                socket_timeout=5
            )
        return self._client

    def _table_key(self, table: str) -> str:
        return f"{self.key_prefix}:{table}"

    async def put(self, table: str, items: Sequence[Mapping[str, Any]]) -> dict[str, list[Item]]:
        """
        Write the batch to the table hash in one transaction.

        Raises:
            StoreWriteFailure: If validation, serialization or Redis rejects the batch
        """
        batch = validate_batch(table, items)
        if not batch:
            return {table: []}

        try:
            encoded = {item[PARTITION_KEY]: orjson.dumps(item) for item in batch}
        except TypeError as e:
            raise StoreWriteFailure(table, f"unserializable item: {e}") from e

        key = self._table_key(table)
        ids = [item[PARTITION_KEY] for item in batch]
        try:
            client = self._get_client()
            pipe = client.pipeline(transaction=True)
            pipe.hset(key, mapping=encoded)
            pipe.hmget(key, ids)
            results = pipe.execute()
        except RedisError as e:
            log.error("redis.put_failed", error=str(e), table=table, count=len(batch))
            raise StoreWriteFailure(table, str(e)) from e

        persisted = [orjson.loads(raw) for raw in results[-1] if raw is not None]
        log.info("store.batch_written", table=table, count=len(persisted), adapter="redis")
        return {table: persisted}

    async def get(self, table: str, item_id: str) -> Item | None:
        raw = self._get_client().hget(self._table_key(table), item_id)
        return orjson.loads(raw) if raw is not None else None

    async def scan(self, table: str) -> list[Item]:
        entries = self._get_client().hgetall(self._table_key(table))
        return [orjson.loads(raw) for raw in entries.values()]

    async def health_check(self) -> bool:
        """
        Check Redis connection health.

        Returns:
            True if Redis is accessible, False otherwise
        """
        try:
            client = self._get_client()
            return client.ping()
        except RedisError as e:
            log.warning("redis.health_check_failed", error=str(e))
            return False

    def close(self):
        """Close Redis connection."""
        if self._client:
            self._client.close()
            self._client = None
