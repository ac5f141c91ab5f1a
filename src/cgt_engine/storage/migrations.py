"""Idempotent database schema creation."""

from __future__ import annotations

import aiosqlite

KV_CACHE_TABLE = """
CREATE TABLE IF NOT EXISTS kv_cache (
    cache_key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    expires_at TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""

KV_CACHE_EXPIRY_INDEX = """
CREATE INDEX IF NOT EXISTS idx_kv_cache_expires_at ON kv_cache(expires_at)
"""

SEARCH_METRICS_TABLE = """
CREATE TABLE IF NOT EXISTS search_metrics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    query TEXT NOT NULL,
    session_id TEXT,
    latency_ms REAL NOT NULL,
    tokens_used INTEGER NOT NULL,
    decision_mode TEXT NOT NULL,
    conflict_score REAL NOT NULL,
    evidence_count INTEGER NOT NULL,
    whitelist_coverage REAL NOT NULL,
    top_domain TEXT,
    created_at TEXT NOT NULL
)
"""

SEARCH_METRICS_CREATED_INDEX = """
CREATE INDEX IF NOT EXISTS idx_search_metrics_created_at ON search_metrics(created_at)
"""


async def initialize_cache_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(KV_CACHE_TABLE)
        await db.execute(KV_CACHE_EXPIRY_INDEX)
        await db.commit()


async def initialize_metrics_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(SEARCH_METRICS_TABLE)
        await db.execute(SEARCH_METRICS_CREATED_INDEX)
        await db.commit()
