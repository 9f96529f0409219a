"""Week-window arithmetic: Monday-to-Sunday spans relative to today."""

from __future__ import annotations

import datetime as dt
from zoneinfo import ZoneInfo

from weather_planner.domain import WeekWindow

DAYS_IN_WEEK = 7


def today_in(timezone: str | None) -> dt.date:
    """Current calendar date in `timezone` (system local time when None)."""
    if not timezone:
        return dt.date.today()
    return dt.datetime.now(ZoneInfo(timezone)).date()


def monday_of(day: dt.date) -> dt.date:
    """Monday of the week containing `day` (weeks run Monday to Sunday)."""
    return day - dt.timedelta(days=day.weekday())


def compute_week_window(today: dt.date | dt.datetime, week_offset: int = 0) -> WeekWindow:
    """
    Return the Monday-Sunday window `week_offset` weeks away from `today`'s week.

    A datetime is reduced to its calendar date first, so time of day never
    shifts the window. Sunday belongs to the week that started six days earlier.
    """
    if isinstance(today, dt.datetime):
        today = today.date()
    offset = int(week_offset)

    start = monday_of(today) + dt.timedelta(days=offset * DAYS_IN_WEEK)
    days = tuple(start + dt.timedelta(days=i) for i in range(DAYS_IN_WEEK))
    return WeekWindow(week_offset=offset, start=days[0], end=days[-1], days=days)


def parse_week_offset(raw: object) -> int:
    """Lenient week-offset parsing: non-numeric input means the current week."""
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0
    if value != value or value in (float("inf"), float("-inf")):
        return 0
    return int(value)
