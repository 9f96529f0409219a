import datetime as dt
import json
import os
import tempfile
import unittest

from weather_planner.domain import InvalidTaskError, Role, Task, TaskStatus
from weather_planner.task_store import InMemoryTaskStore, SqlTaskStore, build_task_store


def make_task(task_id="t1", **kwargs):
    data = dict(id=task_id, title="Inspect pump", city="Seattle", date=dt.date(2025, 6, 10), duration_hours=2)
    data.update(kwargs)
    return Task(**data)


class DummySettings:
    def __init__(self, **kwargs):
        self.task_database_url = None
        self.task_seed_path = None
        for k, v in kwargs.items():
            setattr(self, k, v)


class _StoreContract:
    """Behavior shared by every TaskStore implementation."""

    def make_store(self):
        raise NotImplementedError

    def test_add_get_list(self):
        store = self.make_store()
        store.add(make_task("a", city="Portland", notes="gate code 1234"))
        store.add(make_task("b", date=dt.date(2025, 6, 12), role=Role.MANAGER))

        fetched = store.get("a")
        self.assertEqual(fetched.city, "Portland")
        self.assertEqual(fetched.notes, "gate code 1234")
        self.assertEqual(fetched.date, dt.date(2025, 6, 10))
        self.assertEqual(sorted(t.id for t in store.list()), ["a", "b"])
        self.assertEqual(store.get("b").role, Role.MANAGER)

    def test_get_unknown_is_none(self):
        self.assertIsNone(self.make_store().get("nope"))

    def test_update_replaces_fields(self):
        store = self.make_store()
        store.add(make_task("a"))
        store.update(make_task("a", status=TaskStatus.DONE, date=dt.date(2025, 6, 13)))

        updated = store.get("a")
        self.assertEqual(updated.status, TaskStatus.DONE)
        self.assertEqual(updated.date, dt.date(2025, 6, 13))
        self.assertEqual(len(store.list()), 1)

    def test_update_unknown_inserts(self):
        store = self.make_store()
        store.update(make_task("new"))
        self.assertIsNotNone(store.get("new"))


class TestInMemoryTaskStore(_StoreContract, unittest.TestCase):
    def make_store(self):
        return InMemoryTaskStore()

    def test_returned_tasks_are_copies(self):
        store = InMemoryTaskStore([make_task("a")])
        fetched = store.get("a")
        fetched.title = "changed"
        self.assertEqual(store.get("a").title, "Inspect pump")

    def test_seed_from_json_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "tasks.json")
            with open(path, "w", encoding="utf-8") as fh:
                json.dump([
                    {"id": "s1", "title": "Trim trees", "date": "2025-06-10T08:00:00Z",
                     "city": "Tacoma", "durationHours": 4, "status": "InProgress"},
                ], fh)

            store = build_task_store(DummySettings(task_seed_path=path))

        self.assertIsInstance(store, InMemoryTaskStore)
        task = store.get("s1")
        self.assertEqual(task.date, dt.date(2025, 6, 10))
        self.assertEqual(task.status, TaskStatus.IN_PROGRESS)

    def test_invalid_seed_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "tasks.json")
            with open(path, "w", encoding="utf-8") as fh:
                json.dump([{"id": "bad", "title": "", "date": "2025-06-10", "city": "X", "durationHours": 1}], fh)
            with self.assertRaises(InvalidTaskError):
                InMemoryTaskStore.from_json_file(path)


class TestSqlTaskStore(_StoreContract, unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.url = f"sqlite:///{os.path.join(self._tmp.name, 'tasks.db')}"
        self._stores = []

    def tearDown(self):
        for store in self._stores:
            store.engine.dispose()
        self._tmp.cleanup()

    def make_store(self):
        store = SqlTaskStore.from_url(self.url)
        self._stores.append(store)
        return store

    def test_data_survives_new_store_instance(self):
        self.make_store().add(make_task("persist", description="north lot"))
        self.assertEqual(self.make_store().get("persist").description, "north lot")

    def test_factory_picks_sql_when_url_set(self):
        store = build_task_store(DummySettings(task_database_url=self.url))
        self._stores.append(store)
        self.assertIsInstance(store, SqlTaskStore)


class TestBuildTaskStoreDefault(unittest.TestCase):
    def test_defaults_to_empty_memory_store(self):
        store = build_task_store(DummySettings())
        self.assertIsInstance(store, InMemoryTaskStore)
        self.assertEqual(store.list(), [])


if __name__ == "__main__":
    unittest.main()
