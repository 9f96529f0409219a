"""SQLAlchemy-backed task store.

Tasks live in a single `tasks` table that is created on first use. Works with
any SQLAlchemy URL; SQLite and Postgres are the ones used in practice.
"""

from __future__ import annotations

from typing import List, Mapping, Optional

from sqlalchemy import Column, Date, Float, MetaData, String, Table, Text, create_engine, select
from sqlalchemy.engine import Engine

from weather_planner.domain import Task
from weather_planner.task_store.base import TaskStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="task_store/sql_task_store")

metadata = MetaData()

tasks_table = Table(
    "tasks",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("title", String(255), nullable=False),
    Column("description", Text, nullable=True),
    Column("date", Date, nullable=False),
    Column("role", String(32), nullable=False),
    Column("city", String(255), nullable=False),
    Column("duration_hours", Float, nullable=False),
    Column("status", String(32), nullable=False),
    Column("notes", Text, nullable=True),
)


class SqlTaskStore(TaskStore):
    """Persist tasks through a SQLAlchemy engine."""

    def __init__(self, engine: Engine, *, create_schema: bool = True) -> None:
        self.engine = engine
        if create_schema:
            metadata.create_all(engine)

    @classmethod
    def from_url(cls, database_url: str, **kwargs) -> "SqlTaskStore":
        """Create an engine from a URL and build the store."""
        engine = create_engine(database_url, future=True)
        return cls(engine, **kwargs)

    @staticmethod
    def _to_row(task: Task) -> dict:
        return {
            "id": task.id,
            "title": task.title,
            "description": task.description,
            "date": task.date,
            "role": task.role.value,
            "city": task.city,
            "duration_hours": task.duration_hours,
            "status": task.status.value,
            "notes": task.notes,
        }

    @staticmethod
    def _from_row(row: Mapping) -> Task:
        return Task.model_validate(dict(row))

    def list(self) -> List[Task]:
        with self.engine.connect() as conn:
            rows = conn.execute(select(tasks_table).order_by(tasks_table.c.date, tasks_table.c.id)).mappings().all()
        return [self._from_row(r) for r in rows]

    def get(self, task_id: str) -> Optional[Task]:
        with self.engine.connect() as conn:
            row = conn.execute(select(tasks_table).where(tasks_table.c.id == task_id)).mappings().first()
        return self._from_row(row) if row else None

    def add(self, task: Task) -> Task:
        with self.engine.begin() as conn:
            conn.execute(tasks_table.insert().values(**self._to_row(task)))
        return task

    def update(self, task: Task) -> Task:
        values = self._to_row(task)
        with self.engine.begin() as conn:
            result = conn.execute(
                tasks_table.update().where(tasks_table.c.id == task.id).values(**values)
            )
            if result.rowcount == 0:
                logger.debug("Update of unknown task id %s; inserting", task.id)
                conn.execute(tasks_table.insert().values(**values))
        return task
