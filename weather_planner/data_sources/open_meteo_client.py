"""Helpers for fetching daily forecasts and geocoding results from the Open-Meteo APIs."""
from __future__ import annotations

import asyncio
import datetime as dt
from typing import Any, List, Mapping, Optional

import requests

from weather_planner.data_sources import http
from weather_planner.data_sources.base import (
    ForecastProvider,
    GeocodeProvider,
    ProviderResponseError,
)
from weather_planner.domain import Coordinates, ForecastSeries
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="open_meteo_client")

OPEN_METEO_BASE_URL = "https://api.open-meteo.com"
OPEN_METEO_GEOCODING_URL = "https://geocoding-api.open-meteo.com"

DAILY_VARS = [
    "precipitation_probability_max",
    "temperature_2m_min",
    "wind_speed_10m_max",
]

# Older API versions spell the wind field without the underscore.
WIND_KEYS = ("wind_speed_10m_max", "windspeed_10m_max")

EXPECTED_DAILY_UNITS = {
    "precipitation_probability_max": "%",
    "temperature_2m_min": "°C",
    "wind_speed_10m_max": "m/s",
}


def _warn_on_unexpected_units(units: Optional[Mapping[str, Any]], *, context: str) -> None:
    """Log a warning if Open-Meteo returns units we did not request."""
    if not units:
        return
    for field, expected in EXPECTED_DAILY_UNITS.items():
        actual = units.get(field)
        if actual and actual != expected:
            logger.warning(
                "Unexpected Open-Meteo unit",
                extra={"context": context, "field": field, "unit": actual, "expected": expected},
            )


def parse_daily(data: Any) -> ForecastSeries:
    """Convert an Open-Meteo `daily` payload into a ForecastSeries."""
    if not isinstance(data, Mapping) or not isinstance(data.get("daily"), Mapping):
        raise ProviderResponseError("Unexpected response from Open-Meteo: 'daily' block missing")

    daily = data["daily"]
    _warn_on_unexpected_units(data.get("daily_units"), context="forecast_daily")
    times = daily.get("time")
    if not isinstance(times, list):
        raise ProviderResponseError("Unexpected response from Open-Meteo: 'daily.time' missing")

    precip = daily.get("precipitation_probability_max", [None] * len(times))
    temp = daily.get("temperature_2m_min", [None] * len(times))
    wind = next((daily[k] for k in WIND_KEYS if k in daily), [None] * len(times))

    try:
        return ForecastSeries(dates=times, precip=precip, wind=wind, temp=temp)
    except (TypeError, ValueError) as exc:
        raise ProviderResponseError(f"Malformed Open-Meteo daily arrays: {exc}") from exc


class OpenMeteoForecastProvider(ForecastProvider):
    """Daily precipitation probability, max wind (m/s) and min temperature (C)."""

    def __init__(
        self,
        *,
        base_url: str = OPEN_METEO_BASE_URL,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.url = f"{base_url.rstrip('/')}/v1/forecast"
        self.session = session or http.session
        self.timeout = timeout

    def _params(self, coords: Coordinates) -> dict:
        return {
            "latitude": coords.lat,
            "longitude": coords.lon,
            "daily": ",".join(DAILY_VARS),
            "wind_speed_unit": "ms",
            "timezone": "auto",
        }

    def fetch_daily_range(self, coords: Coordinates, start: dt.date, end: dt.date) -> ForecastSeries:
        """Blocking fetch for the inclusive [start, end] range."""
        params = self._params(coords)
        params["start_date"] = start.isoformat()
        params["end_date"] = end.isoformat()
        logger.debug("Fetching daily range", extra={"params": params})
        data = http.get_json(self.session, self.url, params=params, timeout=self.timeout)
        return parse_daily(data)

    def fetch_next_days(self, coords: Coordinates, days: int = 7) -> ForecastSeries:
        """Blocking fetch for `days` days starting today at the location."""
        params = self._params(coords)
        params["forecast_days"] = int(days)
        logger.debug("Fetching next days", extra={"params": params})
        data = http.get_json(self.session, self.url, params=params, timeout=self.timeout)
        return parse_daily(data)

    async def daily_range(self, coords: Coordinates, start: dt.date, end: dt.date) -> ForecastSeries:
        return await asyncio.to_thread(self.fetch_daily_range, coords, start, end)

    async def next_days(self, coords: Coordinates, days: int = 7) -> ForecastSeries:
        return await asyncio.to_thread(self.fetch_next_days, coords, days)


def _place_label(result: Mapping[str, Any]) -> str:
    parts = [result.get("name"), result.get("admin1"), result.get("country")]
    return ", ".join(str(p) for p in parts if p)


class OpenMeteoGeocodeProvider(GeocodeProvider):
    """Geocoding through Open-Meteo's place search; the first result wins."""

    def __init__(
        self,
        *,
        base_url: str = OPEN_METEO_GEOCODING_URL,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.url = f"{base_url.rstrip('/')}/v1/search"
        self.session = session or http.session
        self.timeout = timeout

    def _results(self, name: str, count: int) -> List[Mapping[str, Any]]:
        params = {"name": name, "count": int(count), "language": "en", "format": "json"}
        data = http.get_json(self.session, self.url, params=params, timeout=self.timeout)
        if not isinstance(data, Mapping):
            raise ProviderResponseError("Unexpected response from Open-Meteo geocoding")
        results = data.get("results") or []
        if not isinstance(results, list):
            raise ProviderResponseError("Unexpected 'results' in Open-Meteo geocoding response")
        return results

    def fetch_geocode(self, city: str) -> Optional[Coordinates]:
        results = self._results(city, 1)
        if not results:
            return None
        first = results[0]
        try:
            return Coordinates(lat=float(first["latitude"]), lon=float(first["longitude"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderResponseError(f"Unparseable coordinates for {city!r}") from exc

    def fetch_search(self, query: str, limit: int = 5) -> List[str]:
        if not query.strip():
            return []
        labels: List[str] = []
        for result in self._results(query, limit):
            label = _place_label(result)
            if label and label not in labels:
                labels.append(label)
        return labels[:limit]

    async def geocode(self, city: str) -> Optional[Coordinates]:
        return await asyncio.to_thread(self.fetch_geocode, city)

    async def search(self, query: str, limit: int = 5) -> List[str]:
        return await asyncio.to_thread(self.fetch_search, query, limit)
