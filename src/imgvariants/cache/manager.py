"""Cache manager — orchestrates L1 (memory) and L2 (disk) tiers."""

from __future__ import annotations

import logging
from pathlib import Path

from imgvariants.cache.disk import DiskCache
from imgvariants.cache.memory import MemoryCache
from imgvariants.cache.stats import CacheStats, FreshnessEntry

logger = logging.getLogger(__name__)


class CacheManager:
    """Two-tier key/value store: L1 in-memory → L2 on-disk (SQLite)."""

    def __init__(
        self,
        memory_max_mb: float = 64,
        disk_max_mb: float = 500,
        disk_path: Path | None = None,
        enabled: bool = True,
    ) -> None:
        self._enabled = enabled
        self._l1 = MemoryCache(max_size_mb=memory_max_mb)
        self._l2 = DiskCache(db_path=disk_path, max_size_mb=disk_max_mb) if enabled else None

    @property
    def enabled(self) -> bool:
        return self._enabled

    def load(self, key: str) -> FreshnessEntry | None:
        """Look up a key. L1 first, then L2 (with promotion)."""
        if not self._enabled:
            return None

        # L1
        entry = self._l1.get(key)
        if entry is not None:
            if entry.sliding and self._l2:
                self._l2.touch(key, entry.last_accessed)
            return entry

        # L2
        if self._l2:
            entry = self._l2.get(key)
            if entry is not None:
                self._l1.set(key, entry)
                return entry

        return None

    def save(self, key: str, entry: FreshnessEntry) -> None:
        """Store in L1 and L2, replacing any previous entry as a unit."""
        if not self._enabled:
            return
        self._l1.set(key, entry)
        if self._l2:
            self._l2.set(key, entry)

    def delete(self, key: str) -> None:
        self._l1.delete(key)
        if self._l2:
            self._l2.delete(key)

    def invalidate(self, source_path: str | None = None) -> int:
        """Remove entries for ``source_path`` (everything if None) from both tiers."""
        count = self._l1.invalidate(source_path=source_path)
        if self._l2:
            count = max(count, self._l2.invalidate(source_path=source_path))
        return count

    def clear(self) -> None:
        """Clear all caches."""
        self._l1.clear()
        if self._l2:
            self._l2.clear()

    def stats(self) -> CacheStats:
        """Return entry count and size; hit counters are kept by FreshnessCache."""
        return CacheStats(
            entries=self._l2.entry_count if self._l2 else len(self._l1),
            size_mb=self._l2.size_mb if self._l2 else self._l1.size_mb,
        )

    def close(self) -> None:
        if self._l2:
            self._l2.close()
