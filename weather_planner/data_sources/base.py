"""Interfaces, errors and test doubles for geocoding and forecast providers."""

from __future__ import annotations

import datetime as dt
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Protocol

import requests

from weather_planner.domain import Coordinates, ForecastSeries


class ProviderError(RuntimeError):
    """A provider call failed (transport error or non-2xx response)."""

    def __init__(self, message: str, *, status_code: int | None = None, transient: bool = False) -> None:
        super().__init__(message)
        self.status_code = status_code
        self._transient = transient

    @property
    def transient(self) -> bool:
        """True for failures worth retrying: connection problems, 429 and 5xx."""
        if self._transient:
            return True
        if self.status_code is None:
            return False
        return self.status_code == 429 or self.status_code >= 500


class ProviderResponseError(ProviderError):
    """The provider answered, but the payload has the wrong shape."""


def is_transient_error(error: BaseException, _attempt: int = 0) -> bool:
    """Retry predicate: only transient provider and transport failures are retried."""
    if isinstance(error, ProviderError):
        return error.transient
    return isinstance(error, (requests.ConnectionError, requests.Timeout, ConnectionError, TimeoutError))


class GeocodeProvider(Protocol):
    """Interface for anything that can turn a place name into coordinates."""

    async def geocode(self, city: str) -> Optional[Coordinates]:
        """Return coordinates of the first candidate, or None when nothing matches."""
        ...

    async def search(self, query: str, limit: int = 5) -> List[str]:
        """Return up to `limit` place-name suggestions."""
        ...


class ForecastProvider(Protocol):
    """Interface for anything that can provide a daily forecast series."""

    async def daily_range(self, coords: Coordinates, start: dt.date, end: dt.date) -> ForecastSeries:
        """Return daily metrics for the inclusive date range."""
        ...

    async def next_days(self, coords: Coordinates, days: int = 7) -> ForecastSeries:
        """Return daily metrics for `days` days starting at the provider's today."""
        ...


async def _call(fn: Callable[..., Any], *args, **kwargs) -> Any:
    result = fn(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


@dataclass
class CallableGeocodeProvider(GeocodeProvider):
    """Wrap plain callables (sync or async) so they can stand in for a geocoder."""

    geocode_fn: Callable[[str], Optional[Coordinates] | Awaitable[Optional[Coordinates]]]
    search_fn: Optional[Callable[..., List[str] | Awaitable[List[str]]]] = None

    async def geocode(self, city: str) -> Optional[Coordinates]:
        return await _call(self.geocode_fn, city)

    async def search(self, query: str, limit: int = 5) -> List[str]:
        if self.search_fn is None:
            return []
        return await _call(self.search_fn, query, limit)


@dataclass
class CallableForecastProvider(ForecastProvider):
    """Wrap plain callables (sync or async) so they can stand in for a forecast API."""

    daily_range_fn: Callable[..., ForecastSeries | Awaitable[ForecastSeries]]
    next_days_fn: Optional[Callable[..., ForecastSeries | Awaitable[ForecastSeries]]] = None

    async def daily_range(self, coords: Coordinates, start: dt.date, end: dt.date) -> ForecastSeries:
        return await _call(self.daily_range_fn, coords, start, end)

    async def next_days(self, coords: Coordinates, days: int = 7) -> ForecastSeries:
        if self.next_days_fn is None:
            today = dt.date.today()
            return await self.daily_range(coords, today, today + dt.timedelta(days=days - 1))
        return await _call(self.next_days_fn, coords, days)
