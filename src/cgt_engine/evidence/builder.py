"""Evidence pack orchestration: retrieve, extract, rank, classify, cache."""

from __future__ import annotations

import asyncio
import hashlib
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable

from cgt_engine.config.constants import FAST_EXTRACTION_LIMIT, FAST_TEXT_LIMIT, FULL_TEXT_LIMIT
from cgt_engine.config.policy import DomainPolicy
from cgt_engine.evidence.classification import classify_evidence, relevance
from cgt_engine.exceptions import InputValidationError
from cgt_engine.keyword_search.tokenizer import normalize_text
from cgt_engine.models.domain import (
    EvidenceItem,
    EvidencePack,
    EvidencePackMetadata,
    ExtractedContent,
    RankedResult,
    SearchCandidate,
)
from cgt_engine.models.schemas import EvidencePackModel
from cgt_engine.observability.logger import get_logger
from cgt_engine.observability.metrics import log_evidence_metrics
from cgt_engine.observability.tracing import TraceContext
from cgt_engine.protocols.search import ContentExtractor
from cgt_engine.protocols.storage import KeyValueCache
from cgt_engine.ranking.ranker import EvidenceRanker
from cgt_engine.retrieval.retriever import WebRetriever, merge_by_url
from cgt_engine.utils.tasks import run_all

logger = get_logger("evidence_builder")


def cache_key(query: str, fast_mode: bool) -> str:
    mode = "fast" if fast_mode else "full"
    digest = hashlib.sha256(normalize_text(query).encode("utf-8")).hexdigest()
    return f"evidence_pack:{mode}:{digest}"


def whitelist_coverage(items: list[EvidenceItem]) -> float:
    """Percentage (0-100) of items from whitelisted domains."""
    if not items:
        return 0.0
    return sum(1 for e in items if e.priority < 5) / len(items) * 100


def domain_diversity(items: list[EvidenceItem]) -> float:
    """Unique domains as a percentage (0-100) of items."""
    if not items:
        return 0.0
    return len({e.domain for e in items}) / len(items) * 100


def cache_ttl_hours(coverage: float, policy: DomainPolicy) -> float:
    if coverage >= 100.0:
        return policy.cache.whitelist_hours
    if coverage >= 80.0:
        return policy.cache.high_coverage_hours
    return policy.cache.default_hours


class EvidencePackBuilder:
    def __init__(
        self,
        retriever: WebRetriever,
        extractor: ContentExtractor,
        ranker: EvidenceRanker,
        policy: DomainPolicy,
        cache: KeyValueCache | None = None,
        extraction_timeout_s: float = 10.0,
        fast_extraction_timeout_s: float = 5.0,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._retriever = retriever
        self._extractor = extractor
        self._ranker = ranker
        self._policy = policy
        self._cache = cache
        self._extraction_timeout_s = extraction_timeout_s
        self._fast_extraction_timeout_s = fast_extraction_timeout_s
        self._clock = clock

    async def build(
        self,
        query: str,
        force_refresh: bool = False,
        fast_mode: bool = False,
        trace: TraceContext | None = None,
    ) -> EvidencePack:
        if not query or not query.strip():
            raise InputValidationError("query must not be empty")
        trace = trace or TraceContext()
        start = time.monotonic()
        key = cache_key(query, fast_mode)

        if not force_refresh:
            cached = await self._read_cache(key)
            if cached is not None:
                pack = replace(
                    cached,
                    metadata=replace(
                        cached.metadata,
                        latency_ms=(time.monotonic() - start) * 1000,
                        cache_hit_rate=1.0,
                    ),
                )
                self._log(trace.trace_id, pack, cache_hit=True)
                return pack

        now = self._clock()
        with trace.span("retrieval", fast_mode=fast_mode):
            candidates = await self._retrieve(query, fast_mode, now, force_refresh)
        with trace.span("extraction", candidates=len(candidates)):
            candidates = await self._extract_all(candidates, fast_mode)
        with trace.span("ranking"):
            if fast_mode:
                ranked = self._ranker.fast_rank(query, candidates, now=now)
            else:
                ranked = await self._ranker.rank(query, candidates, now=now)

        evidence = [self._to_item(r, now) for r in ranked]
        coverage = whitelist_coverage(evidence)
        pack = EvidencePack(
            evidence=evidence,
            metadata=EvidencePackMetadata(
                query=query,
                latency_ms=(time.monotonic() - start) * 1000,
                whitelist_coverage=coverage,
                domain_diversity=domain_diversity(evidence),
                average_relevance=(
                    sum(e.relevance for e in evidence) / len(evidence) if evidence else 0.0
                ),
                cache_hit_rate=0.0,
            ),
        )
        await self._write_cache(key, pack, cache_ttl_hours(coverage, self._policy))
        self._log(trace.trace_id, pack, cache_hit=False)
        return pack

    async def _retrieve(
        self, query: str, fast_mode: bool, now: datetime, refresh: bool = False
    ) -> list[SearchCandidate]:
        if fast_mode:
            return await self._retriever.fast_search(query, refresh=refresh)
        primary, expanded = await run_all(
            self._retriever.search(query, refresh=refresh),
            self._retriever.search_expanded(query, now.year, refresh=refresh),
        )
        return merge_by_url(primary, expanded)

    async def _extract_one(
        self, candidate: SearchCandidate, timeout_s: float, max_chars: int
    ) -> ExtractedContent | None:
        try:
            return await self._extractor.extract(candidate.url, timeout_s=timeout_s, max_chars=max_chars)
        except Exception as e:
            logger.warning("extraction_isolated_failure", url=candidate.url, error=repr(e))
            return None

    async def _extract_all(
        self, candidates: list[SearchCandidate], fast_mode: bool
    ) -> list[SearchCandidate]:
        if fast_mode:
            limit, timeout_s, max_chars = (
                FAST_EXTRACTION_LIMIT,
                self._fast_extraction_timeout_s,
                FAST_TEXT_LIMIT,
            )
        else:
            limit, timeout_s, max_chars = (
                len(candidates),
                self._extraction_timeout_s,
                FULL_TEXT_LIMIT,
            )
        targets = candidates[:limit]
        contents = await asyncio.gather(
            *(self._extract_one(c, timeout_s, max_chars) for c in targets)
        )
        extracted = [replace(c, content=content) for c, content in zip(targets, contents)]
        logger.info(
            "extraction_completed",
            attempted=len(targets),
            succeeded=sum(1 for c in contents if c is not None),
        )
        return extracted + candidates[limit:]

    def _to_item(self, result: RankedResult, now: datetime) -> EvidenceItem:
        c = result.candidate
        snippet = c.snippet or (c.content.excerpt if c.content else "")
        return EvidenceItem(
            domain=c.domain,
            title=c.title or (c.content.title if c.content else ""),
            snippet=snippet,
            url=c.url,
            priority=c.tier_priority,
            score=result.score,
            type=classify_evidence(c.domain, c.title),
            relevance=relevance(result.score, c.tier_priority, c.published_at, now),
            published_at=c.published_at,
        )

    async def _read_cache(self, key: str) -> EvidencePack | None:
        if self._cache is None:
            return None
        try:
            data = await self._cache.get(key)
            if data is None:
                return None
            return EvidencePackModel.model_validate(data).to_domain()
        except Exception as e:
            logger.warning("evidence_cache_read_failed", key=key, error=repr(e))
            return None

    async def _write_cache(self, key: str, pack: EvidencePack, ttl_hours: float) -> None:
        if self._cache is None:
            return
        try:
            data = EvidencePackModel.from_domain(pack).model_dump(mode="json", by_alias=True)
            await self._cache.set(key, data, ttl_hours)
            logger.info("evidence_cache_stored", key=key, ttl_hours=ttl_hours)
        except Exception as e:
            logger.warning("evidence_cache_write_failed", key=key, error=repr(e))

    @staticmethod
    def _log(trace_id: str, pack: EvidencePack, cache_hit: bool) -> None:
        m = pack.metadata
        log_evidence_metrics(
            trace_id=trace_id,
            query=m.query,
            evidence_count=len(pack.evidence),
            whitelist_coverage=m.whitelist_coverage,
            domain_diversity=m.domain_diversity,
            top_scores=[e.score for e in pack.evidence],
            cache_hit=cache_hit,
        )
