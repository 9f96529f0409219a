"""Geocoding and forecast providers plus factories for plugging them in."""

from .base import (
    CallableForecastProvider,
    CallableGeocodeProvider,
    ForecastProvider,
    GeocodeProvider,
    ProviderError,
    ProviderResponseError,
    is_transient_error,
)
from .factory import build_forecast_provider, build_geocode_provider
from .nominatim_client import NominatimGeocodeProvider
from .open_meteo_client import OpenMeteoForecastProvider, OpenMeteoGeocodeProvider, parse_daily

__all__ = [
    "build_forecast_provider",
    "build_geocode_provider",
    "CallableForecastProvider",
    "CallableGeocodeProvider",
    "ForecastProvider",
    "GeocodeProvider",
    "NominatimGeocodeProvider",
    "OpenMeteoForecastProvider",
    "OpenMeteoGeocodeProvider",
    "ProviderError",
    "ProviderResponseError",
    "is_transient_error",
    "parse_daily",
]
