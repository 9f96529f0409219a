"""Factory for choosing the task store at startup."""

from __future__ import annotations

from weather_planner.task_store.base import TaskStore
from weather_planner.task_store.memory import InMemoryTaskStore
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="task_store/factory")


def build_task_store(settings) -> TaskStore:
    """SQL store when a database URL is configured, otherwise in-memory (optionally seeded)."""
    if settings.task_database_url:
        from .sql import SqlTaskStore

        logger.info("Using SqlTaskStore", extra={"db_url": mask_url(settings.task_database_url)})
        return SqlTaskStore.from_url(settings.task_database_url)

    if settings.task_seed_path:
        return InMemoryTaskStore.from_json_file(settings.task_seed_path)

    logger.info("Using empty InMemoryTaskStore")
    return InMemoryTaskStore()
