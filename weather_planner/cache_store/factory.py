"""Factory for choosing the cache store at startup."""

from __future__ import annotations

import redis

from weather_planner.cache_store.base import CacheStore
from weather_planner.cache_store.memory import InMemoryCacheStore
from weather_planner.cache_store.redis import RedisCacheStore
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="cache_store/factory")


def build_cache_store(settings) -> CacheStore:
    """Pick the backing store: Redis when configured and reachable, otherwise in-memory."""
    url = settings.cache_redis_url
    logger.debug("Initializing cache store: redis_url='%s'", mask_url(url) or "None")
    if url:
        try:
            client = redis.Redis.from_url(url)
            client.ping()
            logger.info("Using RedisCacheStore", extra={"redis_url": mask_url(url)})
            return RedisCacheStore(client)
        except Exception as exc:
            logger.warning("Falling back to InMemoryCacheStore (Redis unavailable): %s", exc)
    return InMemoryCacheStore()
