"""Metric logging helpers for pipeline stages."""

from __future__ import annotations

from cgt_engine.observability.logger import get_logger

logger = get_logger("metrics")


def log_evidence_metrics(
    trace_id: str,
    query: str,
    evidence_count: int,
    whitelist_coverage: float,
    domain_diversity: float,
    top_scores: list[float],
    cache_hit: bool,
) -> None:
    logger.info(
        "evidence_metrics",
        trace_id=trace_id,
        query=query,
        evidence_count=evidence_count,
        whitelist_coverage=round(whitelist_coverage, 2),
        domain_diversity=round(domain_diversity, 2),
        top_scores=[round(s, 4) for s in top_scores[:5]],
        cache_hit=cache_hit,
    )


def log_conflict_metrics(
    trace_id: str,
    rule_score: float,
    nli_score: float,
    conflict_score: float,
    decision_mode: str,
) -> None:
    logger.info(
        "conflict_metrics",
        trace_id=trace_id,
        rule_score=round(rule_score, 4),
        nli_score=round(nli_score, 4),
        conflict_score=round(conflict_score, 4),
        decision_mode=decision_mode,
    )


def log_latency(trace_id: str, stages: dict[str, float], total_ms: float) -> None:
    logger.info(
        "latency",
        trace_id=trace_id,
        stages=stages,
        total_ms=round(total_ms, 2),
    )
