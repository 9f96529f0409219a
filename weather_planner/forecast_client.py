"""Retrying, cached access to daily forecast series."""

from __future__ import annotations

import datetime as dt
from typing import Callable, Optional

from weather_planner.cache import TTLCache, serialize_args
from weather_planner.data_sources.base import ForecastProvider, ProviderResponseError
from weather_planner.domain import Coordinates, ForecastSeries
from weather_planner.retry import DEFAULT_POLICY, RetryPolicy, retrying
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="forecast_client")

FORECAST_NAMESPACE = "forecast"


class ForecastClient:
    """
    Fetches forecast series for coordinates. Errors propagate once retries are
    exhausted; callers are expected to degrade (placeholder days).
    """

    def __init__(
        self,
        provider: ForecastProvider,
        *,
        cache: Optional[TTLCache] = None,
        retry_policy: RetryPolicy = DEFAULT_POLICY,
        ttl_seconds: Optional[float] = None,
        today: Callable[[], dt.date] = dt.date.today,
    ) -> None:
        self.provider = provider

        async def daily_range(coords: Coordinates, start: dt.date, end: dt.date) -> ForecastSeries:
            series = await provider.daily_range(coords, start, end)
            expected = (end - start).days + 1
            if len(series) != expected:
                raise ProviderResponseError(
                    f"Forecast covers {len(series)} days, expected {expected} ({start}..{end})"
                )
            return series

        async def next_days(coords: Coordinates, days: int) -> ForecastSeries:
            return await provider.next_days(coords, days)

        self._daily_range = retrying(daily_range, retry_policy)
        self._next_days = retrying(next_days, retry_policy)
        if cache is not None:
            self._daily_range = cache.wrap(
                self._daily_range,
                ttl_seconds=ttl_seconds,
                namespace=FORECAST_NAMESPACE,
                decode=ForecastSeries.from_dict,
            )
            self._next_days = cache.wrap(
                self._next_days,
                ttl_seconds=ttl_seconds,
                namespace=FORECAST_NAMESPACE,
                # Key carries the current date; index 0 of the series is today.
                key_fn=lambda args: f"next_days({today().isoformat()},{serialize_args(args)})",
                decode=ForecastSeries.from_dict,
            )

    async def fetch_range(self, coords: Coordinates, start: dt.date, end: dt.date) -> ForecastSeries:
        """Daily series covering exactly [start, end]; raises after retries are exhausted."""
        if end < start:
            raise ValueError(f"end {end} precedes start {start}")
        logger.debug("Fetching forecast range", extra={"coords": coords, "start": start, "end": end})
        return await self._daily_range(coords, start, end)

    async def fetch_next_days(self, coords: Coordinates, days: int = 7) -> ForecastSeries:
        """Daily series for the next `days` days as reported by the provider."""
        return await self._next_days(coords, days)
