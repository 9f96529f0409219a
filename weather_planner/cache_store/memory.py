"""In-memory cache store, used when Redis is not configured and in tests."""

import threading
from typing import Optional

from weather_planner.cache_store.base import CacheStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_store/in_memory_cache_store")


class InMemoryCacheStore(CacheStore):
    """Thread-safe dict store. Expiry is left to the TTL cache reading the entries."""

    def __init__(self) -> None:
        logger.debug("Initializing InMemoryCacheStore")
        self._items: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set(self, key: str, value: str, ttl_ms: Optional[int] = None) -> None:
        with self._lock:
            self._items[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def keys(self) -> list[str]:
        """Snapshot of stored keys (debugging/tests)."""
        with self._lock:
            return list(self._items)
