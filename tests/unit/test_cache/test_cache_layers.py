#!/usr/bin/env python3
"""Tests for the memory, file and tiered caches."""

from datetime import datetime

import pytest

from spendsight.cache import FileStore, MemoryCache, NullCache, TieredCache
from spendsight.core.config import CacheConfig


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class BrokenStore:
    """Store whose every operation fails like an unreachable backend."""

    directory = "unreachable"

    def open(self):
        pass

    def close(self):
        pass

    def get(self, key):
        raise OSError("store down")

    def set(self, key, value, ttl=None):
        raise OSError("store down")

    def delete(self, key):
        raise OSError("store down")

    def clear(self):
        raise OSError("store down")


@pytest.mark.cache
class TestMemoryCache:
    """Test the in-process cache."""

    def test_set_get_and_expiry(self):
        clock = FakeClock()
        cache = MemoryCache(ttl_seconds=60, clock=clock)

        cache.set("k", [1, 2])
        assert cache.get("k") == [1, 2]

        clock.now += 61
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_per_entry_ttl(self):
        clock = FakeClock()
        cache = MemoryCache(ttl_seconds=60, clock=clock)
        cache.set("short", "v", ttl=5)
        clock.now += 10
        assert cache.get("short") is None

    def test_none_is_not_stored(self):
        cache = MemoryCache()
        cache.set("k", None)
        assert len(cache) == 0

    def test_delete_and_close(self):
        cache = MemoryCache()
        cache.set("a", 1)
        cache.set("b", 2)
        cache.delete("a")
        assert cache.get("a") is None
        cache.close()
        assert cache.get("b") is None


@pytest.mark.cache
class TestFileStore:
    """Test the file-backed store."""

    def test_round_trip_serializes_values(self, tmp_path):
        store = FileStore(tmp_path / "store")
        store.open()

        store.set("rows:transactions", [{"when": datetime(2024, 3, 5, 10, 0), "amount": 5}])

        assert store.get("rows:transactions") == [{"when": "2024-03-05T10:00:00", "amount": 5}]
        assert len(list((tmp_path / "store").glob("*.json"))) == 1

    def test_expired_entries_are_removed(self, tmp_path):
        clock = FakeClock()
        store = FileStore(tmp_path, ttl_seconds=10, clock=clock)
        store.set("k", "v")

        clock.now += 11

        assert store.get("k") is None
        assert list(tmp_path.glob("*.json")) == []

    def test_corrupt_entry_is_a_miss(self, tmp_path):
        store = FileStore(tmp_path)
        store.set("k", "v")
        next(tmp_path.glob("*.json")).write_text("{not json", encoding="utf-8")

        assert store.get("k") is None

    def test_clear_counts_removed_entries(self, tmp_path):
        store = FileStore(tmp_path)
        store.set("a", 1)
        store.set("b", 2)
        assert store.clear() == 2
        assert store.get("a") is None

    def test_missing_directory_is_empty(self, tmp_path):
        store = FileStore(tmp_path / "absent")
        assert store.get("k") is None
        assert store.clear() == 0


@pytest.mark.cache
class TestTieredCache:
    """Test the combined cache."""

    def test_store_hit_is_promoted_to_memory(self, tmp_path):
        store = FileStore(tmp_path)
        store.set("k", {"v": 1})
        memory = MemoryCache()

        with TieredCache(memory, store) as cache:
            assert cache.get("k") == {"v": 1}
            assert memory.get("k") == {"v": 1}

    def test_get_or_load_computes_once(self, tmp_path):
        calls = []

        def loader():
            calls.append(1)
            return ["row"]

        with TieredCache(MemoryCache(), FileStore(tmp_path)) as cache:
            assert cache.get_or_load("k", loader) == ["row"]
            assert cache.get_or_load("k", loader) == ["row"]

        assert len(calls) == 1

    def test_failing_store_degrades_to_recompute(self, caplog):
        cache = TieredCache(MemoryCache(), BrokenStore())

        assert cache.get("k") is None
        cache.set("k", "v")
        assert cache.get("k") == "v"
        cache.delete("k")
        cache.clear()

        assert "Cache store" in caplog.text

    def test_get_or_load_with_failing_store(self):
        cache = TieredCache(MemoryCache(), BrokenStore())
        assert cache.get_or_load("k", lambda: 42) == 42

    def test_from_config(self, tmp_path):
        enabled = TieredCache.from_config(CacheConfig(store_dir=tmp_path))
        assert isinstance(enabled, TieredCache)
        assert enabled.store.directory == tmp_path

        disabled = TieredCache.from_config(CacheConfig(store_dir=tmp_path, enabled=False))
        assert isinstance(disabled, NullCache)


@pytest.mark.cache
class TestNullCache:
    """Test the disabled cache."""

    def test_always_loads(self):
        cache = NullCache()
        cache.set("k", 1)
        assert cache.get("k") is None
        assert cache.get_or_load("k", lambda: 2) == 2
