"""SQLite-backed key/value cache with per-entry expiry."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import aiosqlite

from cgt_engine.observability.logger import get_logger
from cgt_engine.storage.migrations import initialize_cache_db

logger = get_logger("kv_cache")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SQLiteKeyValueCache:
    """JSON values keyed by string. Expired entries read as misses and are purged by ``cleanup``."""

    def __init__(self, db_path: str, clock: Callable[[], datetime] = utc_now) -> None:
        self._db_path = db_path
        self._clock = clock
        self._hits = 0
        self._misses = 0

    async def initialize(self) -> None:
        await initialize_cache_db(self._db_path)

    async def get(self, key: str) -> Any | None:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute(
                "SELECT value, expires_at FROM kv_cache WHERE cache_key = ?", (key,)
            ) as cursor:
                row = await cursor.fetchone()

        if row is None or datetime.fromisoformat(row[1]) <= self._clock():
            self._misses += 1
            return None
        self._hits += 1
        return json.loads(row[0])

    async def set(self, key: str, value: Any, ttl_hours: float) -> None:
        now = self._clock()
        expires_at = now + timedelta(hours=ttl_hours)
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "INSERT OR REPLACE INTO kv_cache (cache_key, value, expires_at, created_at) "
                "VALUES (?, ?, ?, ?)",
                (key, json.dumps(value, ensure_ascii=False), expires_at.isoformat(), now.isoformat()),
            )
            await db.commit()

    async def delete(self, key: str) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("DELETE FROM kv_cache WHERE cache_key = ?", (key,))
            await db.commit()

    async def cleanup(self) -> int:
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute(
                "DELETE FROM kv_cache WHERE expires_at <= ?", (self._clock().isoformat(),)
            )
            removed = cursor.rowcount
            await db.commit()
        logger.info("cache_cleanup", removed=removed)
        return removed

    async def stats(self) -> dict:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute("SELECT COUNT(*) FROM kv_cache") as cursor:
                row = await cursor.fetchone()
                entries = row[0] if row else 0
        lookups = self._hits + self._misses
        return {
            "entries": entries,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / lookups if lookups else 0.0,
        }
