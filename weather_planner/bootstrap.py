"""Composition root: wires settings into the planner's services."""

from __future__ import annotations

from dataclasses import dataclass

from weather_planner import config
from weather_planner.cache import TTLCache
from weather_planner.cache_store import CacheStore, build_cache_store
from weather_planner.data_sources import (
    build_forecast_provider,
    build_geocode_provider,
    is_transient_error,
)
from weather_planner.domain import Coordinates
from weather_planner.forecast_client import ForecastClient
from weather_planner.geo_resolver import GeoResolver
from weather_planner.planner import PlannerAggregator
from weather_planner.reschedule import RescheduleEngine
from weather_planner.retry import RetryPolicy
from weather_planner.task_store import TaskStore, build_task_store
from weather_planner.week import today_in
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="bootstrap")


@dataclass
class PlannerServices:
    """Everything the HTTP layer needs, built once per process."""
    settings: config.Settings
    cache: TTLCache
    geo_resolver: GeoResolver
    forecast_client: ForecastClient
    task_store: TaskStore
    planner: PlannerAggregator
    rescheduler: RescheduleEngine


def build_services(
    settings: config.Settings | None = None,
    *,
    cache_store: CacheStore | None = None,
    task_store: TaskStore | None = None,
    geo_resolver: GeoResolver | None = None,
    forecast_client: ForecastClient | None = None,
) -> PlannerServices:
    """
    Build the service graph from settings.

    Any collaborator may be passed in to replace the configured one (tests use
    this to inject fake providers and in-memory stores).
    """
    settings = settings or config.settings
    logger.debug("Building services with settings: %s", settings.masked())

    cache = TTLCache(
        cache_store if cache_store is not None else build_cache_store(settings),
        default_ttl_seconds=settings.cache_ttl_seconds,
        namespace=settings.cache_namespace,
        version=settings.cache_version,
    )
    policy = RetryPolicy.from_settings(settings, should_retry=is_transient_error)
    fallback = Coordinates(lat=settings.default_latitude, lon=settings.default_longitude)

    if geo_resolver is None:
        geo_resolver = GeoResolver(
            build_geocode_provider(settings),
            fallback=fallback,
            cache=cache,
            retry_policy=policy,
            ttl_seconds=settings.geocode_cache_ttl_seconds,
        )
    if forecast_client is None:
        forecast_client = ForecastClient(
            build_forecast_provider(settings),
            cache=cache,
            retry_policy=policy,
            ttl_seconds=settings.cache_ttl_seconds,
            today=lambda: today_in(settings.timezone),
        )
    if task_store is None:
        task_store = build_task_store(settings)

    planner = PlannerAggregator(
        geo_resolver,
        forecast_client,
        task_store,
        default_city=settings.default_city,
        geocode_timeout_seconds=settings.geocode_timeout_seconds,
        timezone=settings.timezone,
    )
    rescheduler = RescheduleEngine(geo_resolver, forecast_client, task_store, timezone=settings.timezone)
    return PlannerServices(
        settings=settings,
        cache=cache,
        geo_resolver=geo_resolver,
        forecast_client=forecast_client,
        task_store=task_store,
        planner=planner,
        rescheduler=rescheduler,
    )
