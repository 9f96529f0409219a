"""Application configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the weather-aware planner."""
    model_config = SettingsConfigDict(env_prefix="PLANNER_", extra="ignore")

    default_city: str = "Seattle"
    default_latitude: float = 47.6062
    default_longitude: float = -122.3321
    timezone: str = "America/Los_Angeles"

    geocode_source: str = "nominatim"  # options: nominatim, open_meteo
    forecast_source: str = "open_meteo"
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    open_meteo_base_url: str = "https://api.open-meteo.com"
    open_meteo_geocoding_url: str = "https://geocoding-api.open-meteo.com"
    http_timeout_seconds: float = 10.0
    user_agent: str = "waw-app/1.0"
    geocode_timeout_seconds: float = 2.5

    retry_max_attempts: int = 5
    retry_initial_delay_ms: int = 200
    retry_backoff_factor: float = 2.0
    retry_max_delay_ms: int | None = None

    cache_ttl_seconds: int = 3600
    geocode_cache_ttl_seconds: int = 86400
    cache_namespace: str = "planner"
    cache_version: str | None = "1"
    cache_redis_url: str | None = None

    task_database_url: str | None = None
    task_seed_path: str | None = None

    log_level: str = "INFO"

    @field_validator("nominatim_base_url", "open_meteo_base_url", "open_meteo_geocoding_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("geocode_source", "forecast_source", mode="after")
    @classmethod
    def lower_source_name(cls, v: str) -> str:
        """Source names are matched case-insensitively."""
        return str(v).strip().lower()

    def masked(self) -> dict:
        """Settings dump safe for logging (connection URLs masked)."""
        data = self.model_dump()
        data["cache_redis_url"] = mask_url(self.cache_redis_url)
        data["task_database_url"] = mask_url(self.task_database_url)
        return data


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug("Loaded settings: %s", settings.masked())
