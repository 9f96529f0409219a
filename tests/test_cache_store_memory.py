import unittest

from weather_planner.cache_store.memory import InMemoryCacheStore


class TestInMemoryCacheStore(unittest.TestCase):
    def test_set_get_delete(self):
        store = InMemoryCacheStore()
        store.set("lc:a", "1", ttl_ms=500)
        self.assertEqual(store.get("lc:a"), "1")
        store.delete("lc:a")
        self.assertIsNone(store.get("lc:a"))

    def test_delete_missing_key_is_noop(self):
        store = InMemoryCacheStore()
        store.delete("lc:missing")
        self.assertEqual(len(store), 0)

    def test_clear_removes_everything(self):
        store = InMemoryCacheStore()
        store.set("lc:a", "1")
        store.set("lc:b", "2")
        self.assertEqual(sorted(store.keys()), ["lc:a", "lc:b"])
        store.clear()
        self.assertEqual(len(store), 0)


if __name__ == "__main__":
    unittest.main()
