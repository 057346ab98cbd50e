"""Tests for the L1 memory cache."""

import time

from imgvariants.cache.memory import MemoryCache
from imgvariants.cache.stats import FreshnessEntry


def _entry(key: str, artifact: str = "test", **kwargs) -> FreshnessEntry:
    return FreshnessEntry(key=key, artifact=artifact, **kwargs)


class TestMemoryCache:
    def test_get_set(self):
        cache = MemoryCache()
        cache.set("k1", _entry("k1", "srcset"))
        assert cache.get("k1").artifact == "srcset"

    def test_get_miss(self):
        assert MemoryCache().get("missing") is None

    def test_expired_removed(self):
        cache = MemoryCache()
        cache.set("k1", _entry("k1", last_accessed=time.time() - 100, ttl_seconds=1))
        assert cache.get("k1") is None
        assert len(cache) == 0

    def test_get_refreshes_last_accessed(self):
        cache = MemoryCache()
        cache.set("k1", _entry("k1", last_accessed=time.time() - 50, ttl_seconds=100))
        before = time.time()
        assert cache.get("k1").last_accessed >= before

    def test_lru_eviction(self):
        cache = MemoryCache(max_size_mb=100 / (1024 * 1024))
        cache.set("k1", _entry("k1", "a" * 40))
        cache.set("k2", _entry("k2", "b" * 40))
        cache.get("k1")
        cache.set("k3", _entry("k3", "c" * 40))
        assert cache.get("k2") is None
        assert cache.get("k1") is not None
        assert cache.get("k3") is not None

    def test_size_tracking(self):
        cache = MemoryCache()
        cache.set("k1", _entry("k1", "a" * 1024))
        cache.set("k1", _entry("k1", "a" * 2048))
        assert cache.size_mb == 2048 / (1024 * 1024)
        cache.delete("k1")
        assert cache.size_mb == 0

    def test_invalidate_by_source(self):
        cache = MemoryCache()
        cache.set("k1", _entry("k1", source_path="/a.jpg"))
        cache.set("k2", _entry("k2", source_path="/a.jpg"))
        cache.set("k3", _entry("k3", source_path="/b.jpg"))
        assert cache.invalidate("/a.jpg") == 2
        assert len(cache) == 1

    def test_invalidate_all(self):
        cache = MemoryCache()
        cache.set("k1", _entry("k1"))
        cache.set("k2", _entry("k2"))
        assert cache.invalidate() == 2

    def test_clear(self):
        cache = MemoryCache()
        cache.set("k1", _entry("k1"))
        cache.clear()
        assert len(cache) == 0
        assert cache.size_mb == 0
