"""SQLite-backed per-request metrics log and aggregate summaries."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import aiosqlite

from cgt_engine.config.constants import (
    CONFLICT_RATE_ALERT,
    DAILY_COST_ALERT,
    HIGH_CONFLICT_SCORE,
    LATENCY_ALERT_MS,
    MEDIUM_CONFLICT_SCORE,
)
from cgt_engine.models.domain import DecisionMode, MetricsRecord
from cgt_engine.storage.migrations import initialize_metrics_db


class SQLiteMetricsStore:
    def __init__(
        self,
        db_path: str,
        conflict_threshold: float = 0.35,
        cost_per_1k_tokens: float = 0.004,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._db_path = db_path
        self._threshold = conflict_threshold
        self._cost_per_1k = cost_per_1k_tokens
        self._clock = clock

    async def initialize(self) -> None:
        await initialize_metrics_db(self._db_path)

    async def record(self, record: MetricsRecord) -> None:
        created_at = record.created_at or self._clock()
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "INSERT INTO search_metrics "
                "(query, session_id, latency_ms, tokens_used, decision_mode, conflict_score, "
                "evidence_count, whitelist_coverage, top_domain, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record.query,
                    record.session_id,
                    record.latency_ms,
                    record.tokens_used,
                    str(record.decision_mode),
                    record.conflict_score,
                    record.evidence_count,
                    record.whitelist_coverage,
                    record.top_domain,
                    created_at.isoformat(),
                ),
            )
            await db.commit()

    async def recent(self, limit: int = 50) -> list[MetricsRecord]:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM search_metrics ORDER BY created_at DESC, id DESC LIMIT ?",
                (limit,),
            ) as cursor:
                rows = await cursor.fetchall()
                return [self._row_to_record(row) for row in rows]

    async def summary(self, since: datetime) -> dict:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM search_metrics WHERE created_at >= ?", (since.isoformat(),)
            ) as cursor:
                rows = [self._row_to_record(row) for row in await cursor.fetchall()]

        total = len(rows)
        mode_counts = {str(m): 0 for m in DecisionMode}
        bands = {"high": 0, "medium": 0, "low": 0}
        conflicted = 0
        for r in rows:
            mode_counts[r.decision_mode] = mode_counts.get(r.decision_mode, 0) + 1
            if r.conflict_score >= self._threshold:
                conflicted += 1
                if r.conflict_score >= HIGH_CONFLICT_SCORE:
                    bands["high"] += 1
                elif r.conflict_score >= MEDIUM_CONFLICT_SCORE:
                    bands["medium"] += 1
                else:
                    bands["low"] += 1

        total_tokens = sum(r.tokens_used for r in rows)
        return {
            "total_requests": total,
            "avg_latency_ms": sum(r.latency_ms for r in rows) / total if total else 0.0,
            "avg_tokens": total_tokens / total if total else 0.0,
            "total_tokens": total_tokens,
            "estimated_cost": round(total_tokens / 1000 * self._cost_per_1k, 6),
            "conflict_rate": conflicted / total if total else 0.0,
            "web_override_rate": (
                mode_counts[str(DecisionMode.WEB_OVERRIDE)] / total if total else 0.0
            ),
            "decision_modes": mode_counts,
            "conflict_severity": bands,
        }

    async def alerts(self, now: datetime | None = None) -> list[dict]:
        """Threshold checks over the last hour of latency and the last day of cost and conflicts."""
        now = now or self._clock()
        hourly = await self.summary(now - timedelta(hours=1))
        daily = await self.summary(now - timedelta(hours=24))

        alerts = []
        if hourly["avg_latency_ms"] > LATENCY_ALERT_MS:
            alerts.append(
                {
                    "type": "high_latency",
                    "message": f"평균 응답 시간이 {hourly['avg_latency_ms'] / 1000:.1f}초로 높습니다.",
                    "severity": "warning",
                }
            )
        if daily["estimated_cost"] > DAILY_COST_ALERT:
            alerts.append(
                {
                    "type": "high_cost",
                    "message": f"24시간 비용이 ${daily['estimated_cost']:.2f}로 높습니다.",
                    "severity": "warning",
                }
            )
        if daily["conflict_rate"] > CONFLICT_RATE_ALERT:
            alerts.append(
                {
                    "type": "high_conflict_rate",
                    "message": f"충돌률이 {daily['conflict_rate'] * 100:.1f}%로 높습니다.",
                    "severity": "info",
                }
            )
        return alerts

    @staticmethod
    def _row_to_record(row: aiosqlite.Row) -> MetricsRecord:
        return MetricsRecord(
            query=row["query"],
            latency_ms=row["latency_ms"],
            tokens_used=row["tokens_used"],
            decision_mode=row["decision_mode"],
            conflict_score=row["conflict_score"],
            evidence_count=row["evidence_count"],
            whitelist_coverage=row["whitelist_coverage"],
            session_id=row["session_id"],
            top_domain=row["top_domain"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
