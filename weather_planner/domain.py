"""Domain vocabulary and schemas for the weather-aware task planner.

This module defines the contract shared by the risk engine, the planner and
the HTTP layer: enums, immutable provider payloads (coordinates, forecast
series), and the Pydantic models that flow out to clients. Outbound models
serialize with camelCase aliases. No fetching or scheduling logic lives here.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel


class InvalidTaskError(ValueError):
    """Raised when task input is malformed. Never softened into degraded output."""


class TaskNotFoundError(LookupError):
    """Raised when a task id is unknown to the task store."""


class _CamelModel(BaseModel):
    """Base model that accepts snake_case or camelCase and dumps camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RiskLevel(str, Enum):
    """Daily weather risk for outdoor field work."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Role(str, Enum):
    """User roles; only managers and dispatchers may reschedule."""
    MANAGER = "manager"
    TECHNICIAN = "technician"
    DISPATCHER = "dispatcher"


class TaskStatus(str, Enum):
    """Work status of a task."""
    TODO = "ToDo"
    IN_PROGRESS = "InProgress"
    DONE = "Done"


@dataclass(frozen=True)
class Coordinates:
    """Latitude/longitude pair returned by a geocoding provider."""
    lat: float
    lon: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Coordinates":
        """Rebuild coordinates from a cached JSON object."""
        return cls(lat=float(data["lat"]), lon=float(data["lon"]))


@dataclass(frozen=True)
class ForecastSeries:
    """Day-indexed forecast; index i of every list describes dates[i]."""
    dates: Tuple[str, ...] = field(default_factory=tuple)
    precip: Tuple[Optional[float], ...] = field(default_factory=tuple)
    wind: Tuple[Optional[float], ...] = field(default_factory=tuple)
    temp: Tuple[Optional[float], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Lists coming from JSON are frozen into tuples.
        for name in ("dates", "precip", "wind", "temp"):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        lengths = {len(self.dates), len(self.precip), len(self.wind), len(self.temp)}
        if len(lengths) != 1:
            raise ValueError(
                "Forecast arrays must have equal length "
                f"(dates={len(self.dates)}, precip={len(self.precip)}, "
                f"wind={len(self.wind)}, temp={len(self.temp)})"
            )

    def __len__(self) -> int:
        return len(self.dates)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ForecastSeries":
        """Rebuild a series from a cached JSON object."""
        return cls(
            dates=data.get("dates") or (),
            precip=data.get("precip") or (),
            wind=data.get("wind") or (),
            temp=data.get("temp") or (),
        )


class DailyWeather(_CamelModel):
    """Weather metrics for one day plus the risk derived from them."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    date: dt.date
    precip_prob_percent: Optional[int] = None
    wind_max_ms: Optional[float] = None
    temp_min_c: Optional[float] = None
    risk: RiskLevel = RiskLevel.LOW


class WeekWindow(_CamelModel):
    """Monday-to-Sunday span for a week offset relative to the current week."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    week_offset: int
    start: dt.date
    end: dt.date
    days: Tuple[dt.date, ...]

    def contains(self, day: dt.date) -> bool:
        """True if `day` falls within [start, end]."""
        return self.start <= day <= self.end


class Task(_CamelModel):
    """A field-work task. Owned by the task store; the planner only moves `date`."""

    id: str
    title: str
    description: Optional[str] = None
    date: dt.date
    role: Role = Role.TECHNICIAN
    city: str
    duration_hours: float
    status: TaskStatus = TaskStatus.TODO
    notes: Optional[str] = None

    @field_validator("title", "city", mode="after")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("duration_hours", mode="after")
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v != v or v < 0:  # NaN check
            raise ValueError("must be a non-negative number")
        return v

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, v: Any) -> Any:
        valid = {s.value for s in TaskStatus}
        if isinstance(v, TaskStatus) or v in valid:
            return v
        return TaskStatus.TODO

    @field_validator("description", "notes", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


def parse_task(data: Mapping[str, Any], *, task_id: str | None = None) -> Task:
    """Validate raw task input, raising InvalidTaskError on malformed data."""
    payload = dict(data)
    if task_id is not None:
        payload["id"] = task_id
    payload.setdefault("id", "tmp")
    raw_date = payload.get("date")
    # Accept full timestamps; only the calendar day matters.
    if isinstance(raw_date, dt.datetime):
        payload["date"] = raw_date.date()
    elif isinstance(raw_date, str):
        payload["date"] = raw_date.strip()[:10]
    try:
        return Task.model_validate(payload)
    except ValidationError as exc:
        raise InvalidTaskError(f"Invalid task data: {exc.errors(include_url=False)}") from exc


class User(_CamelModel):
    """The acting user as reported by the auth store."""
    id: str
    name: str
    username: str
    role: Role


class PlannerOutlook(_CamelModel):
    """Aggregated week outlook for a city plus per-city outlooks for tasks in the week."""
    week: int
    week_start: dt.date
    week_end: dt.date
    city: str
    coords: Coordinates
    days: List[DailyWeather]
    city_days: Dict[str, List[DailyWeather]] = Field(default_factory=dict)
    degraded: bool = False
