import unittest
from unittest.mock import patch

from weather_planner.cache_store import factory
from weather_planner.cache_store.factory import build_cache_store
from weather_planner.cache_store.memory import InMemoryCacheStore
from weather_planner.cache_store.redis import RedisCacheStore


class FakeRedis:
    def __init__(self):
        self.store = {}
        self.expires = {}
        self.pinged = False

    def set(self, key, value, px=None):
        self.store[key] = value
        if px is not None:
            self.expires[key] = px
        else:
            self.expires.pop(key, None)

    def get(self, key):
        return self.store.get(key)

    def delete(self, key):
        self.store.pop(key, None)
        self.expires.pop(key, None)

    def scan_iter(self, pattern):
        prefix = pattern.rstrip("*")
        return [k for k in list(self.store.keys()) if k.startswith(prefix)]

    def ping(self):
        self.pinged = True
        return True


class DummySettings:
    def __init__(self, cache_redis_url=None):
        self.cache_redis_url = cache_redis_url


class TestRedisCacheStore(unittest.TestCase):
    def test_set_uses_px_expiry_and_get_decodes(self):
        client = FakeRedis()
        store = RedisCacheStore(client)

        store.set("lc:geo:x", '{"value": 1}', ttl_ms=1500)

        self.assertEqual(client.store["lc:geo:x"], b'{"value": 1}')
        self.assertEqual(client.expires["lc:geo:x"], 1500)
        self.assertEqual(store.get("lc:geo:x"), '{"value": 1}')

    def test_set_without_ttl_has_no_expiry(self):
        client = FakeRedis()
        store = RedisCacheStore(client)
        store.set("lc:k", "v", ttl_ms=0)
        self.assertNotIn("lc:k", client.expires)

    def test_get_missing_returns_none(self):
        self.assertIsNone(RedisCacheStore(FakeRedis()).get("lc:none"))

    def test_clear_removes_only_cache_keys(self):
        client = FakeRedis()
        store = RedisCacheStore(client)
        store.set("lc:a", "1")
        store.set("lc:b", "2")
        client.store["session:abc"] = b"keep"

        store.clear()

        self.assertEqual(list(client.store), ["session:abc"])

    def test_client_errors_propagate(self):
        class Exploding(FakeRedis):
            def get(self, key):
                raise ConnectionError("down")

        with self.assertRaises(ConnectionError):
            RedisCacheStore(Exploding()).get("lc:a")


class TestBuildCacheStore(unittest.TestCase):
    def test_no_url_uses_memory(self):
        self.assertIsInstance(build_cache_store(DummySettings()), InMemoryCacheStore)

    def test_reachable_redis_is_used(self):
        client = FakeRedis()
        with patch.object(factory.redis.Redis, "from_url", return_value=client):
            store = build_cache_store(DummySettings("redis://:secret@cache:6379/0"))
        self.assertIsInstance(store, RedisCacheStore)
        self.assertIs(store.client, client)
        self.assertTrue(client.pinged)

    def test_unreachable_redis_falls_back_to_memory(self):
        class Unreachable(FakeRedis):
            def ping(self):
                raise ConnectionError("refused")

        with patch.object(factory.redis.Redis, "from_url", return_value=Unreachable()):
            store = build_cache_store(DummySettings("redis://cache:6379/0"))
        self.assertIsInstance(store, InMemoryCacheStore)


if __name__ == "__main__":
    unittest.main()
