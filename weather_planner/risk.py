"""Classify daily weather metrics into a field-work risk level."""

from __future__ import annotations

import datetime as dt
import math
from typing import List, Optional

from weather_planner.domain import DailyWeather, ForecastSeries, RiskLevel

RAIN_PROBABILITY_THRESHOLD = 40  # percent, inclusive; compared after rounding half up
WIND_SPEED_THRESHOLD = 10.0  # m/s, inclusive
COLD_TEMPERATURE_THRESHOLD = 0.0  # deg C, inclusive


def classify(precip: Optional[float], wind: Optional[float], temp: Optional[float]) -> RiskLevel:
    """
    Return the risk level for one day.

    Each of rain (precip >= 40%), wind (max >= 10 m/s) and cold (min <= 0 C)
    scores one point; missing values never score. Two or more points is high,
    one is medium, none is low.
    """
    rain_risk = precip is not None and precip >= RAIN_PROBABILITY_THRESHOLD
    wind_risk = wind is not None and wind >= WIND_SPEED_THRESHOLD
    cold_risk = temp is not None and temp <= COLD_TEMPERATURE_THRESHOLD
    score = sum((rain_risk, wind_risk, cold_risk))

    if score >= 2:
        return RiskLevel.HIGH
    if score == 1:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _as_percent(value: Optional[float]) -> Optional[int]:
    if value is None:
        return None
    return int(math.floor(value + 0.5))


def build_daily_weather(
    day: dt.date | str,
    precip: Optional[float],
    wind: Optional[float],
    temp: Optional[float],
) -> DailyWeather:
    """Create a DailyWeather whose risk is always derived from its metrics."""
    precip_percent = _as_percent(precip)
    return DailyWeather(
        date=day,
        precip_prob_percent=precip_percent,
        wind_max_ms=wind,
        temp_min_c=temp,
        risk=classify(precip_percent, wind, temp),
    )


def classify_series(series: ForecastSeries) -> List[DailyWeather]:
    """Classify every day of a forecast series, preserving order."""
    return [
        build_daily_weather(series.dates[i], series.precip[i], series.wind[i], series.temp[i])
        for i in range(len(series))
    ]


def placeholder_days(days: List[dt.date]) -> List[DailyWeather]:
    """Days with no metrics (risk low), used when a forecast could not be fetched."""
    return [DailyWeather(date=day) for day in days]
