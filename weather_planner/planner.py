"""Week outlook aggregation for a city and for every city with tasks in the week."""

from __future__ import annotations

import asyncio
import datetime as dt
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from weather_planner.deadline import Deadline, DeadlineExceeded
from weather_planner.domain import Coordinates, DailyWeather, PlannerOutlook, Task, WeekWindow
from weather_planner.forecast_client import ForecastClient
from weather_planner.geo_resolver import GeoResolver
from weather_planner.risk import classify_series, placeholder_days
from weather_planner.task_store.base import TaskStore
from weather_planner.week import compute_week_window, today_in
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="planner")

DEFAULT_GEOCODE_TIMEOUT_SECONDS = 2.5


def cities_in_window(tasks: Iterable[Task], window: WeekWindow) -> List[str]:
    """Distinct cities, sorted, that have at least one task dated inside the window."""
    return sorted({task.city for task in tasks if window.contains(task.date)})


def group_tasks_by_date_city(
    tasks: Iterable[Task], days: Sequence[dt.date]
) -> Dict[str, Dict[str, List[Task]]]:
    """Bucket tasks by ISO date then city, for the given days only (empty days kept)."""
    grouped: Dict[str, Dict[str, List[Task]]] = {d.isoformat(): defaultdict(list) for d in days}
    for task in tasks:
        bucket = grouped.get(task.date.isoformat())
        if bucket is not None:
            bucket[task.city].append(task)
    return {day: dict(by_city) for day, by_city in grouped.items()}


class PlannerAggregator:
    """
    Builds the 7-day risk outlook for a requested city plus per-city outlooks
    for every city that has a task in the same week.

    Environmental failures never raise out of `aggregate`: the primary city
    falls back to default coordinates and/or placeholder days and the result
    is flagged `degraded`.
    """

    def __init__(
        self,
        geo_resolver: GeoResolver,
        forecast_client: ForecastClient,
        task_store: Optional[TaskStore] = None,
        *,
        default_city: str,
        geocode_timeout_seconds: float = DEFAULT_GEOCODE_TIMEOUT_SECONDS,
        timezone: Optional[str] = None,
    ) -> None:
        self.geo_resolver = geo_resolver
        self.forecast_client = forecast_client
        self.task_store = task_store
        self.default_city = default_city
        self.geocode_timeout_seconds = geocode_timeout_seconds
        self.timezone = timezone

    def _is_default_city(self, city: str) -> bool:
        return city.strip().casefold() == self.default_city.strip().casefold()

    async def _resolve_primary(self, city: str) -> Tuple[Coordinates, bool]:
        """Coordinates for the requested city under the geocode deadline, plus a degraded flag."""
        deadline = Deadline(self.geocode_timeout_seconds)
        try:
            coords = await deadline.run(self.geo_resolver.resolve(city))
        except DeadlineExceeded:
            logger.warning("Geocoding %r timed out after %.1fs; using fallback", city, deadline.timeout)
            coords = None

        if coords is not None:
            return coords, False
        return self.geo_resolver.fallback, not self._is_default_city(city)

    async def _week_days(self, coords: Coordinates, window: WeekWindow) -> Tuple[List[DailyWeather], bool]:
        """Classified days for the window, or placeholders (and True) when the forecast fails."""
        try:
            series = await self.forecast_client.fetch_range(coords, window.start, window.end)
            return classify_series(series), False
        except Exception as exc:
            logger.warning(
                "Forecast unavailable; using placeholder days",
                extra={"coords": coords, "start": window.start, "error": str(exc)},
            )
            return placeholder_days(list(window.days)), True

    async def _city_week(self, city: str, window: WeekWindow) -> List[DailyWeather]:
        coords, _resolved = await self.geo_resolver.resolve_or_fallback(city)
        days, _failed = await self._week_days(coords, window)
        return days

    async def aggregate(
        self,
        city: Optional[str] = None,
        week_offset: int = 0,
        all_tasks: Optional[Sequence[Task]] = None,
        *,
        today: Optional[dt.date] = None,
    ) -> PlannerOutlook:
        """Aggregate the outlook for `city` (default city when blank) and the given week offset."""
        city = (city or "").strip() or self.default_city
        window = compute_week_window(today or today_in(self.timezone), week_offset)
        if all_tasks is None:
            all_tasks = self.task_store.list() if self.task_store is not None else []

        coords, degraded = await self._resolve_primary(city)
        task_cities = cities_in_window(all_tasks, window)

        primary, per_city = await asyncio.gather(
            self._week_days(coords, window),
            asyncio.gather(*(self._city_week(c, window) for c in task_cities)),
        )
        days, forecast_failed = primary
        city_days = dict(zip(task_cities, per_city))

        logger.info(
            "Aggregated planner outlook",
            extra={"city": city, "week": window.week_offset, "cities": len(city_days),
                   "degraded": degraded or forecast_failed},
        )
        return PlannerOutlook(
            week=window.week_offset,
            week_start=window.start,
            week_end=window.end,
            city=city,
            coords=coords,
            days=days,
            city_days=city_days,
            degraded=degraded or forecast_failed,
        )
