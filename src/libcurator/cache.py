"""SQLite cache for raw registry responses.

All cache operations catch ``aiosqlite.Error`` internally and degrade
gracefully: read failures return ``None`` (treated as cache miss by callers),
write failures are logged and ignored (the fetched body is still returned).
Infrastructure errors never cross the ResponseCache class boundary.

Only registry JSON bodies live here. The working set is never persisted.
"""

from __future__ import annotations

import hashlib
from datetime import UTC, datetime, timedelta

import aiosqlite
import structlog

log = structlog.get_logger()

_CREATE_RESPONSE_TABLE = """
CREATE TABLE IF NOT EXISTS response_cache (
    url_hash    TEXT PRIMARY KEY,
    url         TEXT NOT NULL UNIQUE,
    body        TEXT NOT NULL,
    fetched_at  TEXT NOT NULL,
    expires_at  TEXT NOT NULL
)
"""

_CREATE_RESPONSE_INDEX = (
    "CREATE INDEX IF NOT EXISTS idx_response_expires ON response_cache(expires_at)"
)


def url_hash(url: str) -> str:
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


class ResponseCache:
    """SQLite-backed TTL cache keyed by request URL."""

    def __init__(self, db: aiosqlite.Connection, ttl_minutes: int = 60) -> None:
        self._db = db
        self._ttl = timedelta(minutes=ttl_minutes)

    async def init_db(self) -> None:
        """Create tables. Called once at startup."""
        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute(_CREATE_RESPONSE_TABLE)
        await self._db.execute(_CREATE_RESPONSE_INDEX)
        await self._db.commit()

    async def get(self, url: str) -> str | None:
        """Return a fresh cached body. Expired entries and read failures are misses."""
        try:
            cursor = await self._db.execute(
                "SELECT body, expires_at FROM response_cache WHERE url_hash = ?",
                (url_hash(url),),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            if datetime.now(UTC) > datetime.fromisoformat(row[1]):
                return None
            return row[0]
        except aiosqlite.Error:
            log.warning("cache_read_error", url=url, exc_info=True)
            return None

    async def set(self, url: str, body: str) -> None:
        """Write a response body. Non-fatal on failure."""
        try:
            now = datetime.now(UTC)
            expires_at = now + self._ttl
            await self._db.execute(
                "INSERT OR REPLACE INTO response_cache "
                "(url_hash, url, body, fetched_at, expires_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (url_hash(url), url, body, now.isoformat(), expires_at.isoformat()),
            )
            await self._db.commit()
        except aiosqlite.Error:
            log.warning("cache_write_error", url=url, exc_info=True)

    async def cleanup_expired(self) -> int:
        """Delete expired entries. Returns the number removed; 0 on failure."""
        try:
            cursor = await self._db.execute(
                "DELETE FROM response_cache WHERE expires_at < ?",
                (datetime.now(UTC).isoformat(),),
            )
            deleted = cursor.rowcount
            await self._db.commit()
            log.info("cache_cleanup_complete", deleted=deleted)
            return deleted
        except aiosqlite.Error:
            log.warning("cache_cleanup_error", exc_info=True)
            return 0
