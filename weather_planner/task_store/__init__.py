"""Task persistence backends."""

from .base import TaskStore
from .factory import build_task_store
from .memory import InMemoryTaskStore
from .sql import SqlTaskStore

__all__ = [
    "TaskStore",
    "InMemoryTaskStore",
    "SqlTaskStore",
    "build_task_store",
]
