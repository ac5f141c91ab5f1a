"""Pattern-based conflict detection between two drafts and the evidence pack.

Each extractor is a pure function over text; ``analyze_rules`` combines them
into a rule score in [0, 1].
"""

from __future__ import annotations

import re

from cgt_engine.config.constants import (
    EVIDENCE_OMISSION_WEIGHT,
    LEGAL_CONFLICT_WEIGHT,
    NUMERIC_CONFLICT_WEIGHT,
    TAX_KEYWORDS,
)
from cgt_engine.models.domain import EvidenceItem, RuleAnalysis

PERCENT_PATTERN = re.compile(r"\d+(?:\.\d+)?\s*%")
PERIOD_PATTERN = re.compile(r"\d+(?:\.\d+)?\s*(?:년|개월)")
ARTICLE_PATTERN = re.compile(r"제\s*\d+\s*조(?:의\s*\d+)?")
DATE_PATTERNS = (
    re.compile(r"\d{4}년\s*\d{1,2}월\s*\d{1,2}일"),
    re.compile(r"\d{4}[.-]\d{1,2}[.-]\d{1,2}"),
)


def _tokens(pattern: re.Pattern, text: str) -> set[str]:
    # Whitespace is dropped so "3 년" and "3년" compare equal
    return {re.sub(r"\s+", "", m) for m in pattern.findall(text)}


def extract_percentages(text: str) -> set[str]:
    return _tokens(PERCENT_PATTERN, text)


def extract_periods(text: str) -> set[str]:
    # Dates like 2024년 1월 1일 would otherwise count as a 2024년 period
    for pattern in DATE_PATTERNS:
        text = pattern.sub(" ", text)
    return _tokens(PERIOD_PATTERN, text)


def extract_articles(text: str) -> set[str]:
    return _tokens(ARTICLE_PATTERN, text)


def extract_effective_dates(text: str) -> set[str]:
    found: set[str] = set()
    for pattern in DATE_PATTERNS:
        found |= _tokens(pattern, text)
    return found


def extract_keywords(text: str) -> set[str]:
    return {k for k in TAX_KEYWORDS if k in text}


def _mismatch(label: str, a: set[str], b: set[str]) -> str | None:
    """Both drafts mention the category and disagree on its values."""
    if a and b and a != b:
        return f"{label}: DraftA({', '.join(sorted(a))}) vs DraftB({', '.join(sorted(b))})"
    return None


def detect_numeric_conflicts(draft_a: str, draft_b: str) -> list[str]:
    found = [
        _mismatch("세율 불일치", extract_percentages(draft_a), extract_percentages(draft_b)),
        _mismatch("기간 불일치", extract_periods(draft_a), extract_periods(draft_b)),
    ]
    return [c for c in found if c]


def detect_legal_conflicts(draft_a: str, draft_b: str) -> list[str]:
    found = [
        _mismatch("조문 불일치", extract_articles(draft_a), extract_articles(draft_b)),
        _mismatch("효력일 불일치", extract_effective_dates(draft_a), extract_effective_dates(draft_b)),
    ]
    return [c for c in found if c]


def detect_evidence_omissions(
    draft_a: str, draft_b: str, evidence: list[EvidenceItem]
) -> list[str]:
    """Flag evidence items whose tax terms a draft never mentions."""
    omissions: list[str] = []
    for label, draft in (("DraftA", draft_a), ("DraftB", draft_b)):
        draft_keywords = extract_keywords(draft)
        missing = [
            item.domain
            for item in evidence
            if (kw := extract_keywords(f"{item.title} {item.snippet}")) and not kw & draft_keywords
        ]
        if missing:
            omissions.append(f"{label} 웹증거 핵심 정보 누락: {', '.join(dict.fromkeys(missing))}")
    return omissions


def analyze_rules(draft_a: str, draft_b: str, evidence: list[EvidenceItem]) -> RuleAnalysis:
    numeric = detect_numeric_conflicts(draft_a, draft_b)
    legal = detect_legal_conflicts(draft_a, draft_b)
    omissions = detect_evidence_omissions(draft_a, draft_b, evidence)

    score = 0.0
    if numeric:
        score += NUMERIC_CONFLICT_WEIGHT
    if legal:
        score += LEGAL_CONFLICT_WEIGHT
    if omissions:
        score += EVIDENCE_OMISSION_WEIGHT

    return RuleAnalysis(
        rule_score=min(1.0, score),
        numeric_conflicts=numeric,
        legal_conflicts=legal,
        evidence_omissions=omissions,
    )
