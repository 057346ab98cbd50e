"""Freshness entry and statistics models."""

from __future__ import annotations

import time

from pydantic import BaseModel, Field

from imgvariants.config.defaults import DEFAULT_CACHE_EXPIRY_SECONDS


class FreshnessEntry(BaseModel):
    """A cached artifact plus the source identity it was derived from."""

    key: str
    artifact: str
    source_path: str = ""
    source_content_hash: str = ""
    source_modified_time: float = 0.0
    created_at: float = Field(default_factory=time.time)
    last_accessed: float = Field(default_factory=time.time)
    ttl_seconds: float = DEFAULT_CACHE_EXPIRY_SECONDS
    sliding: bool = True

    @property
    def expires_at(self) -> float:
        anchor = self.last_accessed if self.sliding else self.created_at
        return anchor + self.ttl_seconds

    @property
    def is_expired(self) -> bool:
        return time.time() > self.expires_at

    @property
    def size_bytes(self) -> int:
        return len(self.artifact.encode("utf-8"))

    def matches(self, content_hash: str, modified_time: float) -> bool:
        """Fresh iff both the content hash and the modification time match."""
        return (
            self.source_content_hash == content_hash
            and self.source_modified_time == modified_time
        )


class CacheStats(BaseModel):
    """Aggregate cache statistics."""

    entries: int = 0
    size_mb: float = 0.0
    hits: int = 0
    misses: int = 0
    stale: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses + self.stale
        return self.hits / total if total > 0 else 0.0
