"""Redis-backed cache store."""

from typing import Optional

from weather_planner.cache_store.base import CacheStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_store/redis_cache_store")

CACHE_KEY_PATTERN = "lc:*"


class RedisCacheStore(CacheStore):
    """Cache entries stored as strings in Redis.

    When the caller passes a TTL hint the key is written with `PX` so Redis
    evicts it on its own; the TTL cache still checks `expireAt` on every read.
    Errors from the client are not caught here.
    """

    def __init__(self, client, *, key_pattern: str = CACHE_KEY_PATTERN) -> None:
        """Initialize with a redis-py client (or anything with the same methods)."""
        logger.debug("Initializing RedisCacheStore")
        self.client = client
        self.key_pattern = key_pattern

    def get(self, key: str) -> Optional[str]:
        raw = self.client.get(key)
        if raw is None:
            return None
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        return str(raw)

    def set(self, key: str, value: str, ttl_ms: Optional[int] = None) -> None:
        if ttl_ms is not None and ttl_ms > 0:
            self.client.set(key, value.encode("utf-8"), px=int(ttl_ms))
        else:
            self.client.set(key, value.encode("utf-8"))

    def delete(self, key: str) -> None:
        self.client.delete(key)

    def clear(self) -> None:
        """Delete every key matching the cache prefix."""
        for key in self.client.scan_iter(self.key_pattern):
            self.client.delete(key)
