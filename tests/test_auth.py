import datetime as dt
import unittest

from weather_planner.auth import (
    RescheduleNotAllowed,
    StaticAuthStore,
    apply_task_edit,
    can_reschedule,
    ensure_can_reschedule,
)
from weather_planner.domain import Role, Task, TaskStatus, User


def user(role):
    return User(id="u1", name="Sam", username="sam", role=role)


def make_task(**kwargs):
    data = dict(id="t1", title="Inspect pump", city="Seattle", date=dt.date(2025, 6, 10), duration_hours=2)
    data.update(kwargs)
    return Task(**data)


class TestAuth(unittest.TestCase):
    def test_can_reschedule_by_role(self):
        self.assertTrue(can_reschedule(user(Role.MANAGER)))
        self.assertTrue(can_reschedule(user(Role.DISPATCHER)))
        self.assertFalse(can_reschedule(user(Role.TECHNICIAN)))
        self.assertFalse(can_reschedule(None))

    def test_ensure_can_reschedule_raises_permission_error(self):
        with self.assertRaises(RescheduleNotAllowed):
            ensure_can_reschedule(user(Role.TECHNICIAN))
        with self.assertRaises(PermissionError):
            ensure_can_reschedule(None)
        ensure_can_reschedule(user(Role.MANAGER))

    def test_static_auth_store(self):
        self.assertIsNone(StaticAuthStore().current_user())
        manager = user(Role.MANAGER)
        self.assertIs(StaticAuthStore(manager).current_user(), manager)

    def test_technician_edits_only_status_and_notes(self):
        existing = make_task()
        incoming = make_task(title="Hijacked", city="Boise", status=TaskStatus.DONE, notes="fixed")

        result = apply_task_edit(existing, incoming, user(Role.TECHNICIAN))

        self.assertEqual(result.title, "Inspect pump")
        self.assertEqual(result.city, "Seattle")
        self.assertEqual(result.status, TaskStatus.DONE)
        self.assertEqual(result.notes, "fixed")

    def test_manager_replaces_task_but_keeps_id(self):
        existing = make_task()
        incoming = make_task(id="other", title="Renamed", duration_hours=5)

        result = apply_task_edit(existing, incoming, user(Role.MANAGER))

        self.assertEqual(result.id, "t1")
        self.assertEqual(result.title, "Renamed")
        self.assertEqual(result.duration_hours, 5)


if __name__ == "__main__":
    unittest.main()
