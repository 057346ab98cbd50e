"""Freshness-checked memoisation of derived artifacts.

An entry is reused only while the source file's content hash and modification
time both match what was recorded when the entry was computed. Anything else
recomputes and replaces the whole entry.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable
from pathlib import Path

from imgvariants.cache.keys import hash_file
from imgvariants.cache.manager import CacheManager
from imgvariants.cache.stats import CacheStats, FreshnessEntry
from imgvariants.concurrency.singleflight import SingleFlight
from imgvariants.config.defaults import DEFAULT_CACHE_EXPIRY_SECONDS, DEFAULT_CACHE_SLIDING
from imgvariants.errors.exceptions import SourceNotFoundError

logger = logging.getLogger(__name__)

# compute(file_changed) -> artifact
ComputeFn = Callable[[bool], Awaitable[str]]


class FreshnessCache:
    """Wraps a CacheManager with source freshness checks and single-flight.

    Concurrent calls for the same fingerprint share one computation.
    """

    def __init__(
        self,
        manager: CacheManager,
        ttl_seconds: float = DEFAULT_CACHE_EXPIRY_SECONDS,
        sliding: bool = DEFAULT_CACHE_SLIDING,
    ) -> None:
        self._manager = manager
        self._ttl_seconds = ttl_seconds
        self._sliding = sliding
        self._flight: SingleFlight[str] = SingleFlight()
        self._hits = 0
        self._misses = 0
        self._stale = 0

    @property
    def manager(self) -> CacheManager:
        return self._manager

    async def get_or_compute(
        self,
        fingerprint: str,
        source_path: str | Path,
        compute: ComputeFn,
    ) -> str:
        """Return the cached artifact if fresh, otherwise compute and store it.

        ``compute`` receives ``file_changed``: True when a stale entry existed
        (the source changed since it was built), False for a first build.
        """
        return await self._flight.do(
            fingerprint, lambda: self._get_or_compute(fingerprint, Path(source_path), compute)
        )

    async def _get_or_compute(
        self,
        fingerprint: str,
        source_path: Path,
        compute: ComputeFn,
    ) -> str:
        content_hash, modified_time = await asyncio.to_thread(source_identity, source_path)

        entry = self._manager.load(fingerprint)
        if entry is not None and entry.matches(content_hash, modified_time):
            self._hits += 1
            return entry.artifact

        stale = entry is not None
        if stale:
            self._stale += 1
            logger.info("Source %s changed, rebuilding cached artifact", source_path)
        else:
            self._misses += 1

        artifact = await compute(stale)

        self._manager.save(
            fingerprint,
            FreshnessEntry(
                key=fingerprint,
                artifact=artifact,
                source_path=str(source_path),
                source_content_hash=content_hash,
                source_modified_time=modified_time,
                ttl_seconds=self._ttl_seconds,
                sliding=self._sliding,
            ),
        )
        return artifact

    def stats(self) -> CacheStats:
        base = self._manager.stats()
        return base.model_copy(
            update={"hits": self._hits, "misses": self._misses, "stale": self._stale}
        )


def source_identity(path: Path) -> tuple[str, float]:
    """(content hash, modification time) of the live source file."""
    try:
        modified_time = os.stat(path).st_mtime
        return hash_file(path), modified_time
    except FileNotFoundError:
        raise SourceNotFoundError(f"File not found: {path}", path=path) from None
