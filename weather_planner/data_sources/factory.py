"""Factory helpers for choosing geocoding and forecast providers at startup."""

from __future__ import annotations

from weather_planner import config
from weather_planner.data_sources.base import ForecastProvider, GeocodeProvider
from weather_planner.data_sources.nominatim_client import NominatimGeocodeProvider
from weather_planner.data_sources.open_meteo_client import (
    OpenMeteoForecastProvider,
    OpenMeteoGeocodeProvider,
)
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_GEOCODE_SOURCE = "nominatim"
DEFAULT_FORECAST_SOURCE = "open_meteo"


def build_geocode_provider(settings: config.Settings | None = None) -> GeocodeProvider:
    """Instantiate the configured geocoding provider."""
    settings = settings or config.settings
    source = (settings.geocode_source or DEFAULT_GEOCODE_SOURCE).lower()

    if source == "nominatim":
        logger.info("Using Nominatim geocoder")
        return NominatimGeocodeProvider(
            base_url=settings.nominatim_base_url,
            user_agent=settings.user_agent,
            timeout=settings.http_timeout_seconds,
        )

    if source == "open_meteo":
        logger.info("Using Open-Meteo geocoder")
        return OpenMeteoGeocodeProvider(
            base_url=settings.open_meteo_geocoding_url,
            timeout=settings.http_timeout_seconds,
        )

    raise ValueError(f"Unknown geocode source '{source}'")


def build_forecast_provider(settings: config.Settings | None = None) -> ForecastProvider:
    """Instantiate the configured forecast provider."""
    settings = settings or config.settings
    source = (settings.forecast_source or DEFAULT_FORECAST_SOURCE).lower()

    if source == "open_meteo":
        logger.info("Using Open-Meteo forecast source")
        return OpenMeteoForecastProvider(
            base_url=settings.open_meteo_base_url,
            timeout=settings.http_timeout_seconds,
        )

    raise ValueError(f"Unknown forecast source '{source}'")
