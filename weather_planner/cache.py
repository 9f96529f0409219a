"""Memoizing TTL cache for async lookups, persisted through a pluggable key-value store.

Keys follow `lc:{namespace}:{base}{:vVERSION}` where `base` is either a
caller-supplied key or `functionName(serializedArgs)`. Entries are stored as
JSON `{"value": ..., "expireAt": epoch_ms, "v": version}`.

Store calls run in a worker thread so a slow store never stalls the event
loop. The store is best-effort: if it is missing, raises, or holds garbage, the
wrapped function is simply called every time.
"""

from __future__ import annotations

import asyncio
import dataclasses
import datetime as dt
import inspect
import json
import time
from enum import Enum
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar

from pydantic import BaseModel

from weather_planner.cache_store.base import CacheStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache")

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 60 * 60
KEY_PREFIX = "lc:"


def _json_default(obj: Any) -> Any:
    """JSON fallback for dates, enums, dataclasses and pydantic models."""
    if isinstance(obj, (dt.date, dt.datetime)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def serialize_args(args: Sequence[Any]) -> str:
    """
    JSON-ish rendering of call arguments for cache keys.

    Callables are dropped. Arguments JSON cannot represent (cycles, arbitrary
    objects) fall back to `[str(a),...]` instead of failing.
    """
    kept = [a for a in args if not inspect.isroutine(a)]
    try:
        return json.dumps(kept, default=_json_default, separators=(",", ":"))
    except (TypeError, ValueError, RecursionError):
        try:
            return "[" + ",".join(str(a) for a in kept) + "]"
        except Exception:
            return "[unserializable]"


def namespaced_key(base: str, namespace: Optional[str] = None, version: Any = None) -> str:
    """Apply the `lc:` prefix, optional namespace and optional version suffix."""
    ns = f"{namespace}:" if namespace else ""
    ver = f":v{version}" if version is not None else ""
    return f"{KEY_PREFIX}{ns}{base}{ver}"


def build_key(
    fn_name: str,
    args: Sequence[Any],
    *,
    namespace: Optional[str] = None,
    version: Any = None,
    key_fn: Optional[Callable[[Sequence[Any]], str]] = None,
) -> str:
    """Derive the storage key for one call."""
    if key_fn is not None:
        return namespaced_key(key_fn(args), namespace, version)
    return namespaced_key(f"{fn_name}({serialize_args(args)})", namespace, version)


class TTLCache:
    """
    Memoizes resolved results of async functions with a time-to-live.

    One instance is created by the composition root and shared by every
    wrapped client. Concurrent callers may race a single recomputation; the
    last write wins.
    """

    def __init__(
        self,
        store: Optional[CacheStore],
        *,
        default_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        namespace: Optional[str] = None,
        version: Any = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.default_ttl_seconds = default_ttl_seconds
        self.namespace = namespace
        self.version = version
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def read(self, key: str) -> Any:
        """Return the cached value for `key`, or None when absent, expired, or unreadable."""
        if self.store is None:
            return None
        try:
            raw = await asyncio.to_thread(self.store.get, key)
            if not raw:
                return None
            parsed = json.loads(raw)
            if not isinstance(parsed, dict):
                return None
            expire_at = parsed.get("expireAt")
            if not isinstance(expire_at, (int, float)) or isinstance(expire_at, bool):
                return None
            if self._now_ms() >= expire_at:
                await asyncio.to_thread(self.store.delete, key)
                return None
            return parsed.get("value")
        except Exception as exc:
            logger.debug("Cache read bypassed for %s: %s", key, exc)
            return None

    async def write(self, key: str, value: Any, ttl_seconds: float, version: Any = None) -> None:
        """Persist `value` under `key`; failures are logged and ignored."""
        if self.store is None:
            return
        try:
            ttl_ms = int(ttl_seconds * 1000)
            payload = {"value": value, "expireAt": self._now_ms() + ttl_ms, "v": version}
            raw = json.dumps(payload, default=_json_default)
            await asyncio.to_thread(self.store.set, key, raw, ttl_ms)
        except Exception as exc:
            logger.debug("Cache write skipped for %s: %s", key, exc)

    def wrap(
        self,
        fn: Callable[..., Awaitable[T] | T],
        *,
        ttl_seconds: Optional[float] = None,
        namespace: Optional[str] = None,
        version: Any = None,
        key_fn: Optional[Callable[[Sequence[Any]], str]] = None,
        decode: Optional[Callable[[Any], T]] = None,
    ) -> Callable[..., Awaitable[T]]:
        """
        Return an async function with `fn`'s signature whose results are memoized.

        Args:
            fn: Function to wrap; sync or async.
            ttl_seconds: Entry lifetime; defaults to the cache's default TTL.
            namespace: Key namespace, nested under the cache's own namespace.
            version: Key version suffix; defaults to the cache's version.
            key_fn: Builds the key base from the call args (kwargs appended as a dict).
            decode: Rebuilds the domain value from its cached JSON form.
        """
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        ns = ":".join(part for part in (self.namespace, namespace) if part) or None
        ver = self.version if version is None else version
        fn_name = getattr(fn, "__name__", None) or "anonymous"

        @wraps(fn)
        async def wrapper(*args, **kwargs):
            key_args = list(args) + ([kwargs] if kwargs else [])
            key = build_key(fn_name, key_args, namespace=ns, version=ver, key_fn=key_fn)

            cached = await self.read(key)
            if cached is not None:
                logger.debug("Cache hit for %s", key)
                if decode is None:
                    return cached
                try:
                    return decode(cached)
                except Exception as exc:
                    logger.debug("Discarding undecodable cache entry %s: %s", key, exc)

            result = fn(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            if result is not None:
                await self.write(key, result, ttl, ver)
            return result

        return wrapper
