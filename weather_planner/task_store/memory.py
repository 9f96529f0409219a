"""In-memory task store, optionally seeded from a JSON file."""

import json
import threading
from pathlib import Path
from typing import Iterable, List, Optional

from weather_planner.domain import Task, parse_task
from weather_planner.task_store.base import TaskStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="task_store/in_memory_task_store")


class InMemoryTaskStore(TaskStore):
    """Thread-safe, insertion-ordered task store (dev/test)."""

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._tasks: dict[str, Task] = {}
        self._lock = threading.Lock()
        for task in tasks:
            self._tasks[task.id] = task.model_copy()

    @classmethod
    def from_json_file(cls, path: str | Path) -> "InMemoryTaskStore":
        """Load seed tasks from a JSON array; malformed entries raise InvalidTaskError."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        tasks = [parse_task(item) for item in raw]
        logger.info("Seeded task store", extra={"path": str(path), "count": len(tasks)})
        return cls(tasks)

    def list(self) -> List[Task]:
        with self._lock:
            return [t.model_copy() for t in self._tasks.values()]

    def get(self, task_id: str) -> Optional[Task]:
        with self._lock:
            task = self._tasks.get(task_id)
            return task.model_copy() if task else None

    def add(self, task: Task) -> Task:
        with self._lock:
            self._tasks[task.id] = task.model_copy()
            return task

    def update(self, task: Task) -> Task:
        with self._lock:
            if task.id not in self._tasks:
                logger.debug("Update of unknown task id %s; inserting", task.id)
            self._tasks[task.id] = task.model_copy()
            return task
