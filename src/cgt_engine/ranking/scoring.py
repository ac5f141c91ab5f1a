"""Pure per-axis scoring functions. Every axis lies in [0, 1]."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone

import numpy as np

from cgt_engine.config.constants import (
    DOMAIN_AXIS_WEIGHT,
    NON_WHITELIST_SCORE,
    NON_WHITELIST_TIER,
    RECENCY_AXIS_WEIGHT,
    RECENCY_OLD,
    RECENCY_RECENT,
    RECENCY_UNKNOWN,
    RECENCY_YEAR,
    RECENT_WINDOW_DAYS,
    WHITELIST_AXIS_WEIGHT,
    YEAR_WINDOW_DAYS,
)
from cgt_engine.config.policy import DomainPolicy
from cgt_engine.models.domain import AxisScores


def age_days(published_at: datetime, now: datetime) -> float:
    if published_at.tzinfo is None:
        published_at = published_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return (now - published_at).total_seconds() / 86400


def recency_score(published_at: datetime | None, now: datetime) -> float:
    if published_at is None:
        return RECENCY_UNKNOWN
    days = age_days(published_at, now)
    if days <= RECENT_WINDOW_DAYS:
        return RECENCY_RECENT
    if days <= YEAR_WINDOW_DAYS:
        return RECENCY_YEAR
    return RECENCY_OLD


def whitelist_score(tier: int, boost: float = 1.0) -> float:
    if tier >= NON_WHITELIST_TIER:
        return NON_WHITELIST_SCORE
    return min(1.0, boost / tier)


def domain_scores(domains: list[str]) -> list[float]:
    """1 / number of candidates in the batch sharing each domain."""
    counts = Counter(domains)
    return [1.0 / counts[d] for d in domains]


def cosine_scores(query_vec: list[float], doc_vecs: list[list[float]]) -> list[float]:
    """Cosine similarity of each document vector to the query, negatives clipped to 0."""
    if not doc_vecs:
        return []
    q = np.asarray(query_vec, dtype=np.float32)
    d = np.asarray(doc_vecs, dtype=np.float32)
    q_norm = np.linalg.norm(q)
    d_norms = np.linalg.norm(d, axis=1)
    denom = d_norms * q_norm
    sims = np.divide(d @ q, denom, out=np.zeros(len(doc_vecs), dtype=np.float32), where=denom > 0)
    return [float(s) for s in np.clip(sims, 0.0, 1.0)]


def combine(axes: AxisScores, policy: DomainPolicy) -> float:
    score = (
        policy.cosine_weight * axes.cosine
        + policy.bm25_weight * axes.lexical
        + DOMAIN_AXIS_WEIGHT * axes.domain
        + RECENCY_AXIS_WEIGHT * axes.recency
        + WHITELIST_AXIS_WEIGHT * axes.whitelist
    )
    return max(0.0, min(1.0, score))


def title_match(query: str, title: str) -> float:
    """1.0 when the normalized query and title contain one another, else 0.0."""
    q = " ".join(query.lower().split())
    t = " ".join(title.lower().split())
    if not q or not t:
        return 0.0
    return 1.0 if q in t or t in q else 0.0
