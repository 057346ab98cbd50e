"""L2 disk cache backed by SQLite."""

from __future__ import annotations

import logging
import sqlite3
import time
from pathlib import Path

from imgvariants.cache.stats import FreshnessEntry

logger = logging.getLogger(__name__)

_DEFAULT_MAX_SIZE_MB = 500
_DEFAULT_DB_PATH = Path.home() / ".imgvariants" / "cache.db"

# Sliding entries expire relative to their last access, others to creation
_EXPIRED_WHERE = (
    "(CASE WHEN sliding THEN last_accessed ELSE created_at END) + ttl_seconds < ?"
)


class DiskCache:
    """SQLite-backed persistent cache with TTL (absolute or sliding) and LRU eviction."""

    def __init__(
        self,
        db_path: Path | None = None,
        max_size_mb: float = _DEFAULT_MAX_SIZE_MB,
    ) -> None:
        self._db_path = db_path or _DEFAULT_DB_PATH
        self._max_size_bytes = int(max_size_mb * 1024 * 1024)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.row_factory = sqlite3.Row
        self._create_table()

    def get(self, key: str) -> FreshnessEntry | None:
        row = self._conn.execute(
            "SELECT * FROM freshness WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return None
        entry = self._row_to_entry(row)
        if entry.is_expired:
            self.delete(key)
            return None
        entry.last_accessed = time.time()
        self.touch(key, entry.last_accessed)
        return entry

    def set(self, key: str, entry: FreshnessEntry) -> None:
        self._evict_if_needed(entry.size_bytes)
        self._conn.execute(
            """INSERT OR REPLACE INTO freshness
               (key, artifact, source_path, source_hash, source_mtime,
                created_at, last_accessed, ttl_seconds, sliding, size_bytes)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                key, entry.artifact, entry.source_path,
                entry.source_content_hash, entry.source_modified_time,
                entry.created_at, entry.last_accessed, entry.ttl_seconds,
                int(entry.sliding), entry.size_bytes,
            ),
        )
        self._conn.commit()

    def touch(self, key: str, accessed_at: float | None = None) -> None:
        """Update last_accessed (extends sliding expiry, feeds LRU)."""
        self._conn.execute(
            "UPDATE freshness SET last_accessed = ? WHERE key = ?",
            (accessed_at or time.time(), key),
        )
        self._conn.commit()

    def delete(self, key: str) -> bool:
        cursor = self._conn.execute("DELETE FROM freshness WHERE key = ?", (key,))
        self._conn.commit()
        return cursor.rowcount > 0

    def clear(self) -> None:
        self._conn.execute("DELETE FROM freshness")
        self._conn.commit()

    def invalidate(self, source_path: str | None = None) -> int:
        if source_path is None:
            cursor = self._conn.execute("DELETE FROM freshness")
        else:
            cursor = self._conn.execute(
                "DELETE FROM freshness WHERE source_path = ?", (source_path,)
            )
        self._conn.commit()
        return cursor.rowcount

    def purge_expired(self) -> int:
        cursor = self._conn.execute(
            f"DELETE FROM freshness WHERE {_EXPIRED_WHERE}", (time.time(),)
        )
        self._conn.commit()
        if cursor.rowcount:
            logger.debug("Purged %d expired cache entries", cursor.rowcount)
        return cursor.rowcount

    @property
    def entry_count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) FROM freshness").fetchone()
        return row[0]

    @property
    def size_mb(self) -> float:
        row = self._conn.execute(
            "SELECT COALESCE(SUM(size_bytes), 0) FROM freshness"
        ).fetchone()
        return row[0] / (1024 * 1024)

    def close(self) -> None:
        self._conn.close()

    def _create_table(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS freshness (
                key TEXT PRIMARY KEY,
                artifact TEXT,
                source_path TEXT,
                source_hash TEXT,
                source_mtime REAL,
                created_at REAL,
                last_accessed REAL,
                ttl_seconds REAL,
                sliding INTEGER,
                size_bytes INTEGER
            )
        """)
        self._conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_freshness_source ON freshness (source_path)"
        )
        self._conn.commit()

    def _evict_if_needed(self, new_entry_size: int) -> None:
        self.purge_expired()

        # LRU evict if still over limit
        while True:
            row = self._conn.execute(
                "SELECT COALESCE(SUM(size_bytes), 0) FROM freshness"
            ).fetchone()
            if row[0] + new_entry_size <= self._max_size_bytes:
                break
            oldest = self._conn.execute(
                "SELECT key FROM freshness ORDER BY last_accessed ASC LIMIT 1"
            ).fetchone()
            if oldest is None:
                break
            self._conn.execute("DELETE FROM freshness WHERE key = ?", (oldest[0],))
            self._conn.commit()

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> FreshnessEntry:
        return FreshnessEntry(
            key=row["key"],
            artifact=row["artifact"] or "",
            source_path=row["source_path"] or "",
            source_content_hash=row["source_hash"] or "",
            source_modified_time=row["source_mtime"] or 0.0,
            created_at=row["created_at"],
            last_accessed=row["last_accessed"],
            ttl_seconds=row["ttl_seconds"],
            sliding=bool(row["sliding"]),
        )
