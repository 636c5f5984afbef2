"""Unit tests for the persistent TTL cache."""

import time

from smart_pub.cache import STORAGE_KEY, TTLCache
from smart_pub.config import Settings
from smart_pub.storage import StateStore


class TestCacheBasicOperations:
    """Test basic cache storage and retrieval."""

    def test_set_and_get(self, cache):
        cache.set("package:http", {"version": "1.2.0"})
        assert cache.get("package:http") == {"version": "1.2.0"}

    def test_get_missing_key(self, cache):
        assert cache.get("missing") is None
        assert cache.has("missing") is False

    def test_overwrite(self, cache):
        cache.set("k", "old")
        cache.set("k", "new")
        assert cache.get("k") == "new"

    def test_delete(self, cache):
        cache.set("k", "v")
        cache.delete("k")
        assert cache.get("k") is None

    def test_delete_missing_key(self, cache):
        cache.delete("missing")

    def test_clear(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()
        assert len(cache) == 0
        assert cache.get("a") is None

    def test_info(self, cache, store):
        cache.set("a", 1)
        info = cache.info()
        assert info["count"] == 1
        assert info["path"] == str(store.db_path)

    def test_enabled_follows_settings(self, store, clock):
        assert TTLCache(store, Settings(enable_cache=False), clock=clock).enabled is False
        assert TTLCache(store, Settings(), clock=clock).enabled is True


class TestCacheTTL:
    """Test expiry semantics."""

    def test_entry_expires_after_ttl(self, cache, clock):
        cache.set("k", "v", 1)
        clock.advance(1.5)
        assert cache.get("k") is None
        assert cache.has("k") is False

    def test_entry_valid_at_expiry_instant(self, cache, clock):
        cache.set("k", "v", 10)
        clock.advance(10)
        assert cache.get("k") == "v"

    def test_default_ttl_from_settings(self, store, clock):
        cache = TTLCache(store, Settings(cache_expiration=60), clock=clock)
        cache.set("k", "v")
        clock.advance(59)
        assert cache.has("k")
        clock.advance(2)
        assert not cache.has("k")

    def test_zero_ttl_uses_default(self, cache, clock):
        cache.set("k", "v", 0)
        clock.advance(3599)
        assert cache.get("k") == "v"

    def test_expired_entry_is_evicted_and_persisted(self, cache, store, clock):
        cache.set("k", "v", 1)
        clock.advance(2)
        cache.get("k")
        assert "k" not in store.get(STORAGE_KEY)

    def test_expires_with_real_clock(self, store):
        cache = TTLCache(store)
        cache.set("k", "v", 1)
        time.sleep(1.1)
        assert cache.get("k") is None
        assert cache.has("k") is False


class TestCachePersistence:
    """Test the snapshot persist/reload cycle."""

    def test_round_trip_across_reload(self, store, settings, clock):
        TTLCache(store, settings, clock=clock).set("search:http:1", [{"name": "http"}])

        reloaded = TTLCache(store, settings, clock=clock)
        assert reloaded.get("search:http:1") == [{"name": "http"}]

    def test_every_mutation_is_persisted(self, cache, store):
        cache.set("a", 1)
        assert set(store.get(STORAGE_KEY)) == {"a"}
        cache.set("b", 2)
        assert set(store.get(STORAGE_KEY)) == {"a", "b"}
        cache.delete("a")
        assert set(store.get(STORAGE_KEY)) == {"b"}
        cache.clear()
        assert store.get(STORAGE_KEY) == {}

    def test_expired_entries_swept_on_load(self, store, settings, clock):
        cache = TTLCache(store, settings, clock=clock)
        cache.set("short", "x", 5)
        cache.set("long", "y", 500)

        clock.advance(10)
        reloaded = TTLCache(store, settings, clock=clock)

        assert len(reloaded) == 1
        assert set(store.get(STORAGE_KEY)) == {"long"}

    def test_corrupted_snapshot_starts_empty(self, store, settings, clock):
        store.update(STORAGE_KEY, {"k": {"unexpected": True}})

        cache = TTLCache(store, settings, clock=clock)

        assert len(cache) == 0
        cache.set("k", "v")
        assert cache.get("k") == "v"

    def test_non_numeric_expiry_starts_empty(self, store, settings, clock):
        store.update(STORAGE_KEY, {"k": {"data": 1, "timestamp": 0, "expires_at": "soon"}})

        cache = TTLCache(store, settings, clock=clock)

        assert len(cache) == 0


class TestCacheUnavailableStorage:
    """The cache keeps working in memory when its store cannot be opened."""

    def test_works_in_memory(self, tmp_path, settings, clock):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        cache = TTLCache(StateStore(blocker / "state.db"), settings, clock=clock)

        cache.set("k", "v")

        assert cache.get("k") == "v"
        cache.clear()
        assert len(cache) == 0
