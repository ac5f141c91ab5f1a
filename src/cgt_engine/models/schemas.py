"""Pydantic models for API request/response serialization.

JSON bodies use camelCase; Python code uses snake_case field names.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cgt_engine.models.domain import (
    AnswerSections,
    ConflictAnalysis,
    EvidenceItem,
    EvidencePack,
    EvidencePackMetadata,
    EvidenceType,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EvidenceItemModel(CamelModel):
    domain: str
    title: str
    snippet: str = ""
    url: str
    published_at: datetime | None = None
    priority: int = Field(ge=1, le=5)
    score: float = 0.0
    type: Literal["law", "precedent", "guide", "calculation", "general"] = "general"
    relevance: float = 0.0

    @classmethod
    def from_domain(cls, item: EvidenceItem) -> EvidenceItemModel:
        return cls(
            domain=item.domain,
            title=item.title,
            snippet=item.snippet,
            url=item.url,
            published_at=item.published_at,
            priority=item.priority,
            score=item.score,
            type=item.type.value,
            relevance=item.relevance,
        )

    def to_domain(self) -> EvidenceItem:
        return EvidenceItem(
            domain=self.domain,
            title=self.title,
            snippet=self.snippet,
            url=self.url,
            priority=self.priority,
            score=self.score,
            type=EvidenceType(self.type),
            relevance=self.relevance,
            published_at=self.published_at,
        )


class EvidencePackMetadataModel(CamelModel):
    query: str = ""
    latency: float = 0.0
    whitelist_coverage: float = 0.0
    domain_diversity: float = 0.0
    average_relevance: float = 0.0
    cache_hit_rate: float = 0.0


class EvidencePackModel(CamelModel):
    evidence: list[EvidenceItemModel] = Field(default_factory=list)
    metadata: EvidencePackMetadataModel = Field(default_factory=EvidencePackMetadataModel)

    @classmethod
    def from_domain(cls, pack: EvidencePack) -> EvidencePackModel:
        m = pack.metadata
        return cls(
            evidence=[EvidenceItemModel.from_domain(e) for e in pack.evidence],
            metadata=EvidencePackMetadataModel(
                query=m.query,
                latency=m.latency_ms,
                whitelist_coverage=m.whitelist_coverage,
                domain_diversity=m.domain_diversity,
                average_relevance=m.average_relevance,
                cache_hit_rate=m.cache_hit_rate,
            ),
        )

    def to_domain(self) -> EvidencePack:
        m = self.metadata
        return EvidencePack(
            evidence=[e.to_domain() for e in self.evidence],
            metadata=EvidencePackMetadata(
                query=m.query,
                latency_ms=m.latency,
                whitelist_coverage=m.whitelist_coverage,
                domain_diversity=m.domain_diversity,
                average_relevance=m.average_relevance,
                cache_hit_rate=m.cache_hit_rate,
            ),
        )


class EvidencePackRequest(CamelModel):
    query: str
    force_refresh: bool = False
    fast_mode: bool = False


class EvidenceSummary(CamelModel):
    query: str
    latency: float
    whitelist_coverage: float
    domain_diversity: float
    cache_hit_rate: float


class EvidencePackResponse(CamelModel):
    evidence_pack: EvidencePackModel
    metadata: EvidenceSummary


class AnswerRequest(CamelModel):
    query: str
    evidence_pack: EvidencePackModel | None = None
    session_id: str | None = None


class AnswerSectionsModel(CamelModel):
    overview: str
    tax_rates: str
    considerations: str
    legal_basis: str
    conclusion: str
    text: str = ""

    @classmethod
    def from_domain(cls, sections: AnswerSections, text: str = "") -> AnswerSectionsModel:
        return cls(
            overview=sections.overview,
            tax_rates=sections.tax_rates,
            considerations=sections.considerations,
            legal_basis=sections.legal_basis,
            conclusion=sections.conclusion,
            text=text,
        )


class AnswerMetadata(CamelModel):
    query: str
    latency: float
    conflict_score: float
    decision_mode: Literal["gpt_draft", "web_override", "hybrid"]
    evidence_count: int
    whitelist_coverage: float
    conflicts: list[str] = Field(default_factory=list)
    tokens_used: int = 0


class AnswerResponse(CamelModel):
    answer: AnswerSectionsModel
    metadata: AnswerMetadata


class ConflictRequest(CamelModel):
    draft_a: str
    draft_b: str
    evidence_pack: EvidencePackModel = Field(default_factory=EvidencePackModel)
    query: str | None = None


class ConflictResponse(CamelModel):
    conflict_score: float
    conflicts: list[str]
    decisive_web_sources: list[str]
    decision_mode: Literal["gpt_draft", "web_override", "hybrid"]
    rule_score: float = 0.0
    nli_score: float = 0.0
    reasoning: str = ""

    @classmethod
    def from_domain(cls, analysis: ConflictAnalysis) -> ConflictResponse:
        return cls(
            conflict_score=analysis.conflict_score,
            conflicts=analysis.conflicts,
            decisive_web_sources=analysis.decisive_web_sources,
            decision_mode=analysis.decision_mode.value,
            rule_score=analysis.rule_score,
            nli_score=analysis.nli_score,
            reasoning=analysis.reasoning,
        )


class ConflictSeverity(CamelModel):
    high: int = 0
    medium: int = 0
    low: int = 0


class Alert(CamelModel):
    type: str
    message: str
    severity: str


class MetricsSummaryResponse(CamelModel):
    hours: int
    total_requests: int
    avg_latency_ms: float
    avg_tokens: float
    total_tokens: int
    estimated_cost: float
    conflict_rate: float
    web_override_rate: float
    decision_modes: dict[str, int]
    conflict_severity: ConflictSeverity
    alerts: list[Alert] = Field(default_factory=list)


class HealthResponse(CamelModel):
    status: str
    version: str
    whitelist_domains: int
    cache_entries: int | None = None


class ErrorResponse(CamelModel):
    error: str
    details: str | list | dict | None = None
