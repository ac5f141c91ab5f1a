"""Integration tests for the SQLite cache and metrics stores."""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from cgt_engine.models.domain import MetricsRecord
from cgt_engine.storage.sqlite_cache import SQLiteKeyValueCache
from cgt_engine.storage.sqlite_metrics_store import SQLiteMetricsStore

T0 = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class Clock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
async def cache_and_clock():
    tmp = tempfile.mkdtemp()
    clock = Clock()
    cache = SQLiteKeyValueCache(str(Path(tmp) / "cache.db"), clock=clock)
    await cache.initialize()
    return cache, clock


@pytest.fixture
async def metrics_store():
    tmp = tempfile.mkdtemp()
    store = SQLiteMetricsStore(str(Path(tmp) / "metrics.db"), clock=Clock())
    await store.initialize()
    return store


def _record(score, mode, tokens=1000, latency=2000.0, created_at=T0, query="q"):
    return MetricsRecord(
        query=query,
        latency_ms=latency,
        tokens_used=tokens,
        decision_mode=mode,
        conflict_score=score,
        evidence_count=3,
        whitelist_coverage=100.0,
        session_id="s",
        top_domain="nts.go.kr",
        created_at=created_at,
    )


async def test_cache_round_trip_unicode(cache_and_clock):
    cache, _ = cache_and_clock
    await cache.set("k", {"query": "양도세", "scores": [0.5, 1.0]}, ttl_hours=6)
    assert await cache.get("k") == {"query": "양도세", "scores": [0.5, 1.0]}


async def test_cache_expiry(cache_and_clock):
    cache, clock = cache_and_clock
    await cache.set("k", "v", ttl_hours=6)
    clock.now = T0 + timedelta(hours=5, minutes=59)
    assert await cache.get("k") == "v"
    clock.now = T0 + timedelta(hours=6)
    assert await cache.get("k") is None


async def test_cache_overwrite_resets_ttl(cache_and_clock):
    cache, clock = cache_and_clock
    await cache.set("k", "old", ttl_hours=1)
    clock.now = T0 + timedelta(minutes=30)
    await cache.set("k", "new", ttl_hours=1)
    clock.now = T0 + timedelta(minutes=75)
    assert await cache.get("k") == "new"


async def test_cache_delete(cache_and_clock):
    cache, _ = cache_and_clock
    await cache.set("k", 1, ttl_hours=1)
    await cache.delete("k")
    assert await cache.get("k") is None


async def test_cache_cleanup_and_stats(cache_and_clock):
    cache, clock = cache_and_clock
    await cache.set("short", 1, ttl_hours=1)
    await cache.set("long", 2, ttl_hours=24)
    await cache.get("short")
    await cache.get("missing")

    clock.now = T0 + timedelta(hours=2)
    assert await cache.cleanup() == 1
    stats = await cache.stats()
    assert stats["entries"] == 1
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 0.5


async def test_metrics_record_and_recent(metrics_store):
    await metrics_store.record(_record(0.1, "gpt_draft", query="first", created_at=T0))
    await metrics_store.record(
        _record(0.9, "web_override", query="second", created_at=T0 + timedelta(minutes=1))
    )
    recent = await metrics_store.recent(limit=10)
    assert [r.query for r in recent] == ["second", "first"]
    assert recent[0].created_at == T0 + timedelta(minutes=1)
    assert recent[0].top_domain == "nts.go.kr"
    assert len(await metrics_store.recent(limit=1)) == 1


async def test_metrics_summary(metrics_store):
    for score, mode in [
        (0.1, "gpt_draft"),
        (0.4, "hybrid"),
        (0.65, "web_override"),
        (0.85, "web_override"),
    ]:
        await metrics_store.record(_record(score, mode))

    summary = await metrics_store.summary(T0 - timedelta(hours=1))
    assert summary["total_requests"] == 4
    assert summary["avg_latency_ms"] == 2000.0
    assert summary["total_tokens"] == 4000
    assert summary["estimated_cost"] == pytest.approx(0.016)
    assert summary["conflict_rate"] == 0.75
    assert summary["web_override_rate"] == 0.5
    assert summary["decision_modes"] == {"gpt_draft": 1, "web_override": 2, "hybrid": 1}
    assert summary["conflict_severity"] == {"high": 1, "medium": 1, "low": 1}


async def test_metrics_summary_window(metrics_store):
    await metrics_store.record(_record(0.1, "gpt_draft", created_at=T0 - timedelta(days=2)))
    await metrics_store.record(_record(0.1, "gpt_draft", created_at=T0))
    summary = await metrics_store.summary(T0 - timedelta(hours=24))
    assert summary["total_requests"] == 1


async def test_metrics_summary_empty(metrics_store):
    summary = await metrics_store.summary(T0)
    assert summary["total_requests"] == 0
    assert summary["conflict_rate"] == 0.0
    assert summary["decision_modes"] == {"gpt_draft": 0, "web_override": 0, "hybrid": 0}


async def test_metrics_alerts_quiet(metrics_store):
    await metrics_store.record(_record(0.1, "gpt_draft", created_at=T0 - timedelta(minutes=5)))
    assert await metrics_store.alerts(now=T0) == []


async def test_metrics_alerts_thresholds(metrics_store):
    await metrics_store.record(
        _record(0.9, "web_override", tokens=3_000_000, latency=12000.0, created_at=T0 - timedelta(minutes=30))
    )
    await metrics_store.record(_record(0.1, "gpt_draft", created_at=T0 - timedelta(hours=3)))

    alerts = await metrics_store.alerts(now=T0)
    assert [(a["type"], a["severity"]) for a in alerts] == [
        ("high_latency", "warning"),
        ("high_cost", "warning"),
        ("high_conflict_rate", "info"),
    ]
    assert alerts[0]["message"] == "평균 응답 시간이 12.0초로 높습니다."
    assert alerts[1]["message"] == "24시간 비용이 $12.00로 높습니다."
    assert alerts[2]["message"] == "충돌률이 50.0%로 높습니다."


async def test_metrics_latency_alert_uses_last_hour_only(metrics_store):
    await metrics_store.record(_record(0.1, "gpt_draft", latency=30000.0, created_at=T0 - timedelta(hours=3)))
    await metrics_store.record(_record(0.1, "gpt_draft", latency=1000.0, created_at=T0 - timedelta(minutes=10)))
    assert await metrics_store.alerts(now=T0) == []
