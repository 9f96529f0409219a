"""Shared protocol for task persistence backends."""

from typing import List, Optional, Protocol

from weather_planner.domain import Task


class TaskStore(Protocol):
    """Protocol for task stores consumed by the planner and the reschedule engine."""

    def list(self) -> List[Task]:
        """Return every stored task."""

    def get(self, task_id: str) -> Optional[Task]:
        """Return one task, or None if the id is unknown."""

    def add(self, task: Task) -> Task:
        """Persist a new task and return it."""

    def update(self, task: Task) -> Task:
        """Replace the task with the same id (inserting it if unknown) and return it."""
