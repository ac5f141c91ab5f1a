"""Evidence item typing and relevance."""

from __future__ import annotations

from datetime import datetime

from cgt_engine.config.constants import RECENT_WINDOW_DAYS, YEAR_WINDOW_DAYS
from cgt_engine.models.domain import EvidenceType
from cgt_engine.ranking.scoring import age_days

_TYPE_RULES: tuple[tuple[EvidenceType, frozenset[str], tuple[str, ...]], ...] = (
    (EvidenceType.LAW, frozenset({"law.go.kr", "easylaw.go.kr"}), ("법령", "고시", "법률", "시행령")),
    (EvidenceType.PRECEDENT, frozenset({"scourt.go.kr"}), ("판례", "판결")),
    (EvidenceType.CALCULATION, frozenset({"hometax.go.kr"}), ("계산기", "자동계산")),
    (EvidenceType.GUIDE, frozenset({"nts.go.kr"}), ("가이드", "안내")),
)


def classify_evidence(domain: str, title: str) -> EvidenceType:
    for evidence_type, domains, keywords in _TYPE_RULES:
        if domain in domains or any(k in title for k in keywords):
            return evidence_type
    return EvidenceType.GENERAL


def relevance(score: float, priority: int, published_at: datetime | None, now: datetime) -> float:
    """Score weighted by tier (tier 1 = 1.0 ... tier 5 = 0.2) and freshness, clipped to [0, 1]."""
    value = score * (6 - priority) * 0.2
    if published_at is not None:
        days = age_days(published_at, now)
        if days <= RECENT_WINDOW_DAYS:
            value *= 1.2
        elif days <= YEAR_WINDOW_DAYS:
            value *= 1.1
    return max(0.0, min(1.0, value))
