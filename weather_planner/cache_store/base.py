"""Shared protocol for the key-value stores backing the TTL cache."""

from typing import Optional, Protocol


class CacheStore(Protocol):
    """Protocol for persistent string key-value stores.

    Implementations may raise on any call (e.g. the backend is down); the TTL
    cache treats every store error as a miss and keeps working without it.
    """

    def get(self, key: str) -> Optional[str]:
        """Return the stored string, or None if absent."""

    def set(self, key: str, value: str, ttl_ms: Optional[int] = None) -> None:
        """Store a string. `ttl_ms` is a hint the backend may use for its own expiry."""

    def delete(self, key: str) -> None:
        """Remove a key without raising if it is absent."""

    def clear(self) -> None:
        """Remove every cache entry."""
