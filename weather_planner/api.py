"""HTTP API for the weather-aware task planner."""

import uuid
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from weather_planner.auth import (
    AuthStore,
    RescheduleNotAllowed,
    StaticAuthStore,
    apply_task_edit,
    ensure_can_reschedule,
)
from weather_planner.bootstrap import PlannerServices, build_services
from weather_planner.config import settings
from weather_planner.domain import (
    InvalidTaskError,
    PlannerOutlook,
    Role,
    Task,
    TaskNotFoundError,
    User,
    parse_task,
)
from weather_planner.planner import group_tasks_by_date_city
from weather_planner.week import parse_week_offset
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="weather_planner/api")

router = APIRouter()


@lru_cache(maxsize=1)
def get_services() -> PlannerServices:
    """Process-wide service graph; tests replace it through dependency overrides."""
    return build_services(settings)


def get_auth_store(
    x_user_name: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> AuthStore:
    """
    Identity as forwarded by the upstream gateway.

    Missing or unknown roles mean an anonymous caller.
    """
    if not x_user_name or not x_user_role:
        return StaticAuthStore(None)
    try:
        role = Role(x_user_role.strip().lower())
    except ValueError:
        logger.debug("Ignoring unknown role header %r", x_user_role)
        return StaticAuthStore(None)
    name = x_user_name.strip()
    return StaticAuthStore(User(id=name, name=name, username=name, role=role))


class _CamelResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlannerResponse(PlannerOutlook):
    """Week outlook plus the tasks scheduled inside the week."""
    tasks: List[Task] = []
    tasks_by_date: Dict[str, Dict[str, List[Task]]] = {}


class CitiesResponse(_CamelResponse):
    cities: List[str]


class RescheduleResponse(_CamelResponse):
    task: Task
    rescheduled: bool


def _task_edit_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Map snake_case or camelCase edit keys onto the camelCase wire names."""
    aliases = {name: field.alias or name for name, field in Task.model_fields.items()}
    known = set(aliases.values())
    edits: Dict[str, Any] = {}
    for key, value in payload.items():
        alias = aliases.get(key, key)
        if alias not in known:
            raise InvalidTaskError(f"Unknown task field: {key}")
        edits[alias] = value
    return edits


def _invalid(exc: InvalidTaskError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("/planner", response_model=PlannerResponse)
async def get_planner(
    city: Optional[str] = Query(default=None),
    week: Optional[str] = Query(default=None),
    services: PlannerServices = Depends(get_services),
):
    """Seven-day risk outlook for `city` and every city with tasks in the week."""
    tasks = services.task_store.list()
    outlook = await services.planner.aggregate(city, parse_week_offset(week), tasks)
    in_week = [t for t in tasks if outlook.week_start <= t.date <= outlook.week_end]
    days = [d.date for d in outlook.days]
    return PlannerResponse(
        **outlook.model_dump(),
        tasks=in_week,
        tasks_by_date=group_tasks_by_date_city(in_week, days),
    )


@router.get("/cities", response_model=CitiesResponse)
async def search_cities(
    q: str = Query(default=""),
    services: PlannerServices = Depends(get_services),
):
    """Place-name suggestions for the city picker."""
    return CitiesResponse(cities=await services.geo_resolver.search(q))


@router.get("/tasks", response_model=List[Task])
def list_tasks(services: PlannerServices = Depends(get_services)):
    return services.task_store.list()


@router.get("/tasks/{task_id}", response_model=Task)
def get_task(task_id: str, services: PlannerServices = Depends(get_services)):
    task = services.task_store.get(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Unknown task ID")
    return task


@router.post("/tasks", response_model=Task, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: Dict[str, Any] = Body(...),
    services: PlannerServices = Depends(get_services),
):
    """Create a task; the server assigns its id."""
    try:
        task = parse_task(payload, task_id=uuid.uuid4().hex)
    except InvalidTaskError as exc:
        raise _invalid(exc)
    logger.info("Creating task", extra={"task_id": task.id, "city": task.city})
    return services.task_store.add(task)


@router.put("/tasks/{task_id}", response_model=Task)
def update_task(
    task_id: str,
    payload: Dict[str, Any] = Body(...),
    services: PlannerServices = Depends(get_services),
    auth: AuthStore = Depends(get_auth_store),
):
    """Edit a task. Technicians may only change status and notes."""
    existing = services.task_store.get(task_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Unknown task ID")
    try:
        merged = {**existing.model_dump(by_alias=True), **_task_edit_fields(payload)}
        incoming = parse_task(merged, task_id=task_id)
    except InvalidTaskError as exc:
        raise _invalid(exc)
    return services.task_store.update(apply_task_edit(existing, incoming, auth.current_user()))


@router.post("/tasks/{task_id}/reschedule", response_model=RescheduleResponse)
async def reschedule_task(
    task_id: str,
    services: PlannerServices = Depends(get_services),
    auth: AuthStore = Depends(get_auth_store),
):
    """Move a task to the next acceptable-risk day (managers and dispatchers only)."""
    user = auth.current_user()
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user")
    try:
        ensure_can_reschedule(user)
    except RescheduleNotAllowed as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    try:
        task, changed = await services.rescheduler.reschedule_task(task_id)
    except TaskNotFoundError:
        raise HTTPException(status_code=404, detail="Unknown task ID")
    return RescheduleResponse(task=task, rescheduled=changed)
