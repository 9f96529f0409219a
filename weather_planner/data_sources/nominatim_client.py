"""OpenStreetMap Nominatim geocoding and place-name search."""
from __future__ import annotations

import asyncio
from typing import Any, List, Optional

import requests

from weather_planner.data_sources import http
from weather_planner.data_sources.base import GeocodeProvider, ProviderResponseError
from weather_planner.domain import Coordinates
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="nominatim_client")

NOMINATIM_BASE_URL = "https://nominatim.openstreetmap.org"
DEFAULT_USER_AGENT = "waw-app/1.0"


class NominatimGeocodeProvider(GeocodeProvider):
    """Nominatim `/search` client. Latitude/longitude arrive as strings."""

    def __init__(
        self,
        *,
        base_url: str = NOMINATIM_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.url = f"{base_url.rstrip('/')}/search"
        self.headers = {"Accept-Language": "en", "User-Agent": user_agent}
        self.session = session or http.session
        self.timeout = timeout

    def _search(self, params: dict) -> List[Any]:
        data = http.get_json(self.session, self.url, params=params, headers=self.headers, timeout=self.timeout)
        if not isinstance(data, list):
            raise ProviderResponseError("Unexpected response from Nominatim: expected a list")
        return data

    def fetch_geocode(self, city: str) -> Optional[Coordinates]:
        """Blocking lookup of the first candidate for `city`."""
        candidates = self._search({"format": "json", "limit": 1, "q": city})
        if not candidates:
            logger.debug("No Nominatim candidates", extra={"city": city})
            return None
        first = candidates[0]
        try:
            return Coordinates(lat=float(first["lat"]), lon=float(first["lon"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderResponseError(f"Unparseable coordinates for {city!r}") from exc

    def fetch_search(self, query: str, limit: int = 5) -> List[str]:
        """Blocking suggestion search; display names de-duplicated in order."""
        if not query.strip():
            return []
        candidates = self._search({"format": "json", "addressdetails": 0, "limit": int(limit), "q": query})
        names: List[str] = []
        for candidate in candidates:
            name = candidate.get("display_name") if isinstance(candidate, dict) else None
            if name and name not in names:
                names.append(name)
        return names

    async def geocode(self, city: str) -> Optional[Coordinates]:
        return await asyncio.to_thread(self.fetch_geocode, city)

    async def search(self, query: str, limit: int = 5) -> List[str]:
        return await asyncio.to_thread(self.fetch_search, query, limit)
