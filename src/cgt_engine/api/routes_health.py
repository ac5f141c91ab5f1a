"""Health check and metrics summary endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Query

from cgt_engine.api.dependencies import Services, get_services
from cgt_engine.exceptions import ConfigurationError
from cgt_engine.models.schemas import (
    Alert,
    ConflictSeverity,
    HealthResponse,
    MetricsSummaryResponse,
)

router = APIRouter()

VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse, response_model_by_alias=True)
async def health(services: Services = Depends(get_services)) -> HealthResponse:
    cache_entries = None
    if services.cache is not None:
        cache_entries = (await services.cache.stats())["entries"]
    return HealthResponse(
        status="ok",
        version=VERSION,
        whitelist_domains=len(services.policy.whitelist),
        cache_entries=cache_entries,
    )


@router.get(
    "/metrics/summary", response_model=MetricsSummaryResponse, response_model_by_alias=True
)
async def metrics_summary(
    hours: int = Query(24, ge=1, le=24 * 90),
    services: Services = Depends(get_services),
) -> MetricsSummaryResponse:
    if services.metrics_store is None:
        raise ConfigurationError("metrics store not configured")
    since = datetime.now(timezone.utc) - timedelta(hours=hours)
    summary = await services.metrics_store.summary(since)
    alerts = await services.metrics_store.alerts()
    return MetricsSummaryResponse(
        hours=hours,
        total_requests=summary["total_requests"],
        avg_latency_ms=summary["avg_latency_ms"],
        avg_tokens=summary["avg_tokens"],
        total_tokens=summary["total_tokens"],
        estimated_cost=summary["estimated_cost"],
        conflict_rate=summary["conflict_rate"],
        web_override_rate=summary["web_override_rate"],
        decision_modes=summary["decision_modes"],
        conflict_severity=ConflictSeverity(**summary["conflict_severity"]),
        alerts=[Alert(**a) for a in alerts],
    )
