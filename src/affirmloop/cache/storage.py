"""SQLite cache storage implementation."""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from ..db import get_connection, transaction
from .models import CacheEntry, CacheStats

logger = logging.getLogger(__name__)


def _row_to_entry(row: sqlite3.Row) -> CacheEntry:
    return CacheEntry(
        cache_key=row["cache_key"],
        text=row["text"],
        voice=row["voice"],
        pace=row["pace"],
        audio_path=Path(row["audio_path"]),
        byte_size=row["byte_size"],
        created_at=datetime.fromisoformat(row["created_at"]),
        last_accessed_at=datetime.fromisoformat(row["last_accessed_at"]),
        access_count=row["access_count"],
    )


class CacheStorage:
    """SQLite-based metadata store for synthesized audio.

    Audio files live on the filesystem; each row points at one file.
    The UNIQUE cache_key keeps concurrent processes from creating two
    entries for the same content.
    """

    def __init__(self, db_path: Path):
        """Initialize cache storage.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        self._init_db()

    def _init_db(self) -> None:
        """Initialize database schema with tables and indexes."""
        with transaction(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS audio_cache (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    cache_key TEXT NOT NULL UNIQUE,
                    text TEXT NOT NULL,
                    voice TEXT NOT NULL,
                    pace TEXT NOT NULL,
                    audio_path TEXT NOT NULL,
                    byte_size INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    last_accessed_at TEXT NOT NULL,
                    access_count INTEGER NOT NULL DEFAULT 1
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_cache_last_accessed
                ON audio_cache(last_accessed_at)
            """)

    def get(self, cache_key: str) -> CacheEntry | None:
        """Retrieve a cache entry by key without touching it."""
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT * FROM audio_cache WHERE cache_key = ?", (cache_key,)
            ).fetchone()
        finally:
            conn.close()
        return _row_to_entry(row) if row else None

    def insert(self, entry: CacheEntry) -> CacheEntry:
        """Insert an entry unless one with the same key already exists.

        Returns:
            The stored entry, which is the existing one on conflict
        """
        with transaction(self.db_path) as conn:
            cursor = conn.execute(
                """
                INSERT OR IGNORE INTO audio_cache
                    (cache_key, text, voice, pace, audio_path, byte_size,
                     created_at, last_accessed_at, access_count)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    entry.cache_key,
                    entry.text,
                    entry.voice,
                    entry.pace,
                    str(entry.audio_path),
                    entry.byte_size,
                    entry.created_at.isoformat(),
                    entry.last_accessed_at.isoformat(),
                    entry.access_count,
                ),
            )
            if cursor.rowcount > 0:
                return entry

            logger.debug(f"Cache entry {entry.cache_key[:12]} already stored")
            row = conn.execute(
                "SELECT * FROM audio_cache WHERE cache_key = ?", (entry.cache_key,)
            ).fetchone()
        return _row_to_entry(row)

    def touch(self, cache_key: str) -> CacheEntry | None:
        """Bump last access time and access count in one statement."""
        with transaction(self.db_path) as conn:
            row = conn.execute(
                """
                UPDATE audio_cache
                SET last_accessed_at = ?, access_count = access_count + 1
                WHERE cache_key = ?
                RETURNING *
            """,
                (datetime.now().isoformat(), cache_key),
            ).fetchone()
        return _row_to_entry(row) if row else None

    def stats(self) -> CacheStats:
        """Entry count, total bytes and total accesses."""
        conn = get_connection(self.db_path)
        try:
            row = conn.execute("""
                SELECT COUNT(*) AS entries,
                       COALESCE(SUM(byte_size), 0) AS total_bytes,
                       COALESCE(SUM(access_count), 0) AS total_accesses
                FROM audio_cache
            """).fetchone()
        finally:
            conn.close()
        return CacheStats(
            entries=row["entries"],
            total_bytes=row["total_bytes"],
            total_accesses=row["total_accesses"],
        )

    def least_recently_accessed(self, limit: int = 100) -> list[CacheEntry]:
        """Oldest-accessed entries first, for an external eviction process."""
        conn = get_connection(self.db_path)
        try:
            rows = conn.execute(
                """
                SELECT * FROM audio_cache
                ORDER BY last_accessed_at ASC, cache_key ASC
                LIMIT ?
            """,
                (limit,),
            ).fetchall()
        finally:
            conn.close()
        return [_row_to_entry(row) for row in rows]
