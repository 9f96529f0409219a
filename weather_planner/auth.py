"""Role checks around task edits and rescheduling.

Identity comes from an injected AuthStore; this module never authenticates.
"""

from __future__ import annotations

from typing import Optional, Protocol

from weather_planner.domain import Role, Task, User

RESCHEDULE_ROLES = frozenset({Role.MANAGER, Role.DISPATCHER})
TECHNICIAN_EDITABLE_FIELDS = ("status", "notes")


class RescheduleNotAllowed(PermissionError):
    """The acting user's role may not reschedule tasks."""


class AuthStore(Protocol):
    """Source of the acting user."""

    def current_user(self) -> Optional[User]:
        """Return the signed-in user, or None when anonymous."""


class StaticAuthStore(AuthStore):
    """Auth store that always reports the same user (may be None)."""

    def __init__(self, user: Optional[User] = None) -> None:
        self.user = user

    def current_user(self) -> Optional[User]:
        return self.user


def can_reschedule(user: Optional[User]) -> bool:
    """Managers and dispatchers may reschedule; technicians and anonymous callers may not."""
    return user is not None and user.role in RESCHEDULE_ROLES


def ensure_can_reschedule(user: Optional[User]) -> None:
    if not can_reschedule(user):
        role = user.role.value if user else "anonymous"
        raise RescheduleNotAllowed(f"Role {role!r} may not reschedule tasks")


def apply_task_edit(existing: Task, incoming: Task, user: Optional[User]) -> Task:
    """
    Merge an edit into `existing` according to the user's role.

    Technicians may only change status and notes; every other field of their
    submission is ignored. Other roles replace the task wholesale. The id is
    always kept from `existing`.
    """
    if user is not None and user.role == Role.TECHNICIAN:
        changes = {name: getattr(incoming, name) for name in TECHNICIAN_EDITABLE_FIELDS}
        return existing.model_copy(update=changes)
    return incoming.model_copy(update={"id": existing.id})
