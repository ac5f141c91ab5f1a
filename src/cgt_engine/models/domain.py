"""Core domain objects used throughout the system."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class DecisionMode(str, Enum):
    GPT_DRAFT = "gpt_draft"
    WEB_OVERRIDE = "web_override"
    HYBRID = "hybrid"

    def __str__(self) -> str:
        return self.value


class EvidenceType(str, Enum):
    LAW = "law"
    PRECEDENT = "precedent"
    GUIDE = "guide"
    CALCULATION = "calculation"
    GENERAL = "general"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ExtractedContent:
    title: str
    text_content: str
    excerpt: str
    domain: str
    url: str
    published_at: datetime | None = None
    metadata: dict = field(default_factory=dict)


@dataclass(frozen=True)
class SearchCandidate:
    title: str
    url: str
    snippet: str
    domain: str
    tier_priority: int  # 1-4 whitelisted, 5 = general web
    content: ExtractedContent | None = None

    @property
    def published_at(self) -> datetime | None:
        return self.content.published_at if self.content else None


@dataclass(frozen=True)
class AxisScores:
    cosine: float
    lexical: float
    domain: float
    recency: float
    whitelist: float


@dataclass(frozen=True)
class RankedResult:
    candidate: SearchCandidate
    axes: AxisScores
    score: float

    @property
    def domain(self) -> str:
        return self.candidate.domain


@dataclass(frozen=True)
class EvidenceItem:
    domain: str
    title: str
    snippet: str
    url: str
    priority: int
    score: float
    type: EvidenceType
    relevance: float
    published_at: datetime | None = None


@dataclass(frozen=True)
class EvidencePackMetadata:
    query: str
    latency_ms: float
    whitelist_coverage: float  # percent, 0-100
    domain_diversity: float  # percent, 0-100
    average_relevance: float
    cache_hit_rate: float


@dataclass(frozen=True)
class EvidencePack:
    evidence: list[EvidenceItem]
    metadata: EvidencePackMetadata


@dataclass(frozen=True)
class GenerationOutput:
    text: str
    tokens_used: int
    model: str


@dataclass(frozen=True)
class Draft:
    content: str
    tokens_used: int
    model: str


@dataclass(frozen=True)
class DraftPair:
    with_evidence: Draft
    without_evidence: Draft

    @property
    def tokens_used(self) -> int:
        return self.with_evidence.tokens_used + self.without_evidence.tokens_used


@dataclass(frozen=True)
class RuleAnalysis:
    rule_score: float
    numeric_conflicts: list[str]
    legal_conflicts: list[str]
    evidence_omissions: list[str]

    @property
    def conflicts(self) -> list[str]:
        return self.numeric_conflicts + self.legal_conflicts + self.evidence_omissions


@dataclass(frozen=True)
class NLIResult:
    conflict_score: float
    conflicts: list[str]
    decisive_web_sources: list[str]
    reasoning: str
    confidence: float
    parsed: bool = True


@dataclass(frozen=True)
class ConflictAnalysis:
    conflict_score: float
    conflicts: list[str]
    decisive_web_sources: list[str]
    decision_mode: DecisionMode
    rule_score: float = 0.0
    nli_score: float = 0.0
    reasoning: str = ""
    tokens_used: int = 0


@dataclass(frozen=True)
class AnswerSections:
    overview: str
    tax_rates: str
    considerations: str
    legal_basis: str
    conclusion: str


@dataclass(frozen=True)
class FinalAnswer:
    text: str
    sections: AnswerSections
    decision_mode: DecisionMode
    tokens_used: int = 0


@dataclass(frozen=True)
class AnswerResult:
    answer: FinalAnswer
    conflict: ConflictAnalysis
    evidence_pack: EvidencePack
    latency_ms: float
    tokens_used: int


@dataclass(frozen=True)
class MetricsRecord:
    query: str
    latency_ms: float
    tokens_used: int
    decision_mode: str
    conflict_score: float
    evidence_count: int
    whitelist_coverage: float
    session_id: str | None = None
    top_domain: str | None = None
    created_at: datetime | None = None
