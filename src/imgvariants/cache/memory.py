"""L1 in-memory LRU cache."""

from __future__ import annotations

import time
from collections import OrderedDict

from imgvariants.cache.stats import FreshnessEntry

_DEFAULT_MAX_SIZE_MB = 64


class MemoryCache:
    """In-memory LRU cache with size-based eviction."""

    def __init__(self, max_size_mb: float = _DEFAULT_MAX_SIZE_MB) -> None:
        self._store: OrderedDict[str, FreshnessEntry] = OrderedDict()
        self._max_size_bytes = int(max_size_mb * 1024 * 1024)
        self._current_size_bytes = 0

    def get(self, key: str) -> FreshnessEntry | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired:
            self._remove(key)
            return None
        entry.last_accessed = time.time()
        # Move to end (most recently used)
        self._store.move_to_end(key)
        return entry

    def set(self, key: str, entry: FreshnessEntry) -> None:
        if key in self._store:
            self._remove(key)
        entry_size = entry.size_bytes
        # Evict until there's room
        while self._current_size_bytes + entry_size > self._max_size_bytes and self._store:
            self._evict_oldest()
        self._store[key] = entry
        self._current_size_bytes += entry_size

    def delete(self, key: str) -> bool:
        if key not in self._store:
            return False
        self._remove(key)
        return True

    def clear(self) -> None:
        self._store.clear()
        self._current_size_bytes = 0

    def invalidate(self, source_path: str | None = None) -> int:
        """Remove entries derived from ``source_path`` (all entries if None)."""
        to_remove = [
            key
            for key, entry in self._store.items()
            if source_path is None or entry.source_path == source_path
        ]
        for key in to_remove:
            self._remove(key)
        return len(to_remove)

    @property
    def size_mb(self) -> float:
        return self._current_size_bytes / (1024 * 1024)

    def __len__(self) -> int:
        return len(self._store)

    def _remove(self, key: str) -> None:
        entry = self._store.pop(key, None)
        if entry:
            self._current_size_bytes -= entry.size_bytes

    def _evict_oldest(self) -> None:
        _, entry = self._store.popitem(last=False)
        self._current_size_bytes -= entry.size_bytes
