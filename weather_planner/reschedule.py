"""Risk-aware rescheduling: move a task to the next acceptable day."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional, Sequence, Tuple

from weather_planner.domain import DailyWeather, RiskLevel, Task, TaskNotFoundError
from weather_planner.forecast_client import ForecastClient
from weather_planner.geo_resolver import GeoResolver
from weather_planner.risk import classify_series
from weather_planner.task_store.base import TaskStore
from weather_planner.week import today_in
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="reschedule")

HORIZON_DAYS = 7
ACCEPTABLE_RISKS = (RiskLevel.LOW, RiskLevel.MEDIUM)


def pick_day(days: Sequence[DailyWeather]) -> Optional[dt.date]:
    """
    Earliest low-risk day after today (index 0), else the earliest medium-risk
    one, else None.
    """
    candidates = days[1:HORIZON_DAYS]
    for wanted in ACCEPTABLE_RISKS:
        for day in candidates:
            if day.risk == wanted:
                return day.date
    return None


class RescheduleEngine:
    """Chooses a new date for a task from the 7-day forecast starting today."""

    def __init__(
        self,
        geo_resolver: GeoResolver,
        forecast_client: ForecastClient,
        task_store: Optional[TaskStore] = None,
        *,
        timezone: Optional[str] = None,
    ) -> None:
        self.geo_resolver = geo_resolver
        self.forecast_client = forecast_client
        self.task_store = task_store
        self.timezone = timezone

    async def outlook(self, city: str, today: dt.date) -> List[DailyWeather]:
        """Classified days from `today` through today+6; empty when the forecast is unavailable."""
        coords, _resolved = await self.geo_resolver.resolve_or_fallback(city)
        end = today + dt.timedelta(days=HORIZON_DAYS - 1)
        try:
            series = await self.forecast_client.fetch_range(coords, today, end)
        except Exception as exc:
            logger.warning("Forecast unavailable for reschedule of %r: %s", city, exc)
            return []
        return classify_series(series)

    async def reschedule(self, task: Task, today: Optional[dt.date] = None) -> Task:
        """Return `task` with only its date moved, or the task unchanged if no day qualifies."""
        today = today or today_in(self.timezone)
        new_date = pick_day(await self.outlook(task.city, today))
        if new_date is None:
            logger.info("No acceptable day found; task left unchanged", extra={"task_id": task.id})
            return task
        return task.model_copy(update={"date": new_date})

    async def reschedule_task(self, task_id: str, today: Optional[dt.date] = None) -> Tuple[Task, bool]:
        """Load, reschedule and persist a stored task. Returns the task and whether its date changed."""
        if self.task_store is None:
            raise TaskNotFoundError(task_id)
        task = self.task_store.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        updated = await self.reschedule(task, today)
        changed = updated.date != task.date
        if changed:
            self.task_store.update(updated)
            logger.info(
                "Task rescheduled",
                extra={"task_id": task_id, "from": task.date.isoformat(), "to": updated.date.isoformat()},
            )
        return updated, changed
