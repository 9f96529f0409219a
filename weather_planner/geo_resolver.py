"""Resolve city names to coordinates with retries, caching and a fallback."""

from __future__ import annotations

from typing import List, Optional, Tuple

from weather_planner.cache import TTLCache
from weather_planner.data_sources.base import GeocodeProvider
from weather_planner.domain import Coordinates
from weather_planner.retry import DEFAULT_POLICY, RetryPolicy, retrying
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="geo_resolver")

GEO_NAMESPACE = "geo"


def normalize_city(city: str) -> str:
    """Cache-key form of a city name: trimmed and case-folded."""
    return " ".join((city or "").split()).casefold()


class GeoResolver:
    """
    City-to-coordinates lookups that never raise to the caller.

    Provider calls go through the retry policy first and the shared TTL cache
    second, so a cache hit skips the network and the retries entirely.
    """

    def __init__(
        self,
        provider: GeocodeProvider,
        *,
        fallback: Coordinates,
        cache: Optional[TTLCache] = None,
        retry_policy: RetryPolicy = DEFAULT_POLICY,
        ttl_seconds: Optional[float] = None,
    ) -> None:
        self.provider = provider
        self.fallback = fallback

        async def geocode(city: str) -> Optional[Coordinates]:
            return await provider.geocode(city)

        lookup = retrying(geocode, retry_policy)
        if cache is not None:
            lookup = cache.wrap(
                lookup,
                ttl_seconds=ttl_seconds,
                namespace=GEO_NAMESPACE,
                key_fn=lambda args: f"geocode({normalize_city(args[0])})",
                decode=Coordinates.from_dict,
            )
        self._lookup = lookup

    async def resolve(self, city: str) -> Optional[Coordinates]:
        """Coordinates for `city`, or None if it is blank, unknown, or the provider keeps failing."""
        name = " ".join((city or "").split())
        if not name:
            return None
        try:
            return await self._lookup(name)
        except Exception as exc:
            logger.warning("Geocoding failed for %r: %s", name, exc)
            return None

    async def resolve_or_fallback(self, city: str) -> Tuple[Coordinates, bool]:
        """Coordinates for `city` plus whether they were actually resolved."""
        coords = await self.resolve(city)
        if coords is None:
            return self.fallback, False
        return coords, True

    async def search(self, query: str, limit: int = 5) -> List[str]:
        """Place-name suggestions; provider failures yield an empty list."""
        if not (query or "").strip():
            return []
        try:
            return await self.provider.search(query, limit)
        except Exception as exc:
            logger.warning("City search failed for %r: %s", query, exc)
            return []
