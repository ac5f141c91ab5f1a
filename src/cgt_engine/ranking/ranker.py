"""Multi-axis evidence ranker: semantic, lexical, domain, recency and whitelist axes."""

from __future__ import annotations

from datetime import datetime, timezone

from cgt_engine.config.constants import (
    FAST_TIER_WEIGHT,
    FAST_TITLE_MATCH_WEIGHT,
    NEUTRAL_COSINE_SCORE,
    NON_WHITELIST_TIER,
)
from cgt_engine.config.policy import DomainPolicy
from cgt_engine.exceptions import EmbeddingError
from cgt_engine.keyword_search.bm25_scorer import bm25_scores
from cgt_engine.models.domain import AxisScores, RankedResult, SearchCandidate
from cgt_engine.observability.logger import get_logger
from cgt_engine.protocols.embedder import Embedder
from cgt_engine.ranking.diversity import enforce_diversity
from cgt_engine.ranking.scoring import (
    combine,
    cosine_scores,
    domain_scores,
    recency_score,
    title_match,
    whitelist_score,
)

logger = get_logger("ranker")


def _lexical_text(c: SearchCandidate) -> str:
    parts = [c.title, c.snippet]
    if c.content is not None:
        parts.append(c.content.text_content)
    return " ".join(p for p in parts if p)


class EvidenceRanker:
    def __init__(self, policy: DomainPolicy, embedder: Embedder | None = None) -> None:
        self._policy = policy
        self._embedder = embedder

    async def _semantic_axis(self, query: str, candidates: list[SearchCandidate]) -> list[float]:
        neutral = [NEUTRAL_COSINE_SCORE] * len(candidates)
        if self._embedder is None:
            return neutral
        try:
            query_vec = await self._embedder.embed_query(query)
            doc_vecs = await self._embedder.embed_texts(
                [f"{c.title} {c.snippet}".strip() for c in candidates]
            )
            if len(doc_vecs) != len(candidates):
                raise EmbeddingError(f"expected {len(candidates)} embeddings, got {len(doc_vecs)}")
            return cosine_scores(query_vec, doc_vecs)
        except Exception as e:
            logger.warning("embedding_fallback_neutral", count=len(candidates), error=repr(e))
            return neutral

    async def rank(
        self,
        query: str,
        candidates: list[SearchCandidate],
        now: datetime | None = None,
    ) -> list[RankedResult]:
        """Score every candidate, sort by combined score, then enforce domain diversity."""
        if not candidates:
            return []
        now = now or datetime.now(timezone.utc)

        cosine = await self._semantic_axis(query, candidates)
        lexical = bm25_scores(query, [_lexical_text(c) for c in candidates])
        domain = domain_scores([c.domain for c in candidates])

        scored: list[RankedResult] = []
        for i, c in enumerate(candidates):
            axes = AxisScores(
                cosine=cosine[i],
                lexical=lexical[i],
                domain=domain[i],
                recency=recency_score(c.published_at, now),
                whitelist=whitelist_score(c.tier_priority, self._policy.whitelist_boost),
            )
            scored.append(RankedResult(candidate=c, axes=axes, score=combine(axes, self._policy)))

        # sorted() is stable, so equal scores keep candidate order
        ordered = sorted(scored, key=lambda r: r.score, reverse=True)
        final = enforce_diversity(ordered, self._policy.final_k)
        logger.info(
            "ranking_completed",
            candidates=len(candidates),
            selected=len(final),
            top_score=round(final[0].score, 4) if final else 0.0,
        )
        return final

    def fast_rank(
        self,
        query: str,
        candidates: list[SearchCandidate],
        now: datetime | None = None,
    ) -> list[RankedResult]:
        """Cheap ranking on tier priority and title match only, then diversity."""
        if not candidates:
            return []
        now = now or datetime.now(timezone.utc)
        domain = domain_scores([c.domain for c in candidates])

        scored: list[RankedResult] = []
        for i, c in enumerate(candidates):
            tier = min(c.tier_priority, NON_WHITELIST_TIER)
            tier_component = (NON_WHITELIST_TIER - (tier - 1)) / NON_WHITELIST_TIER
            match = title_match(query, c.title)
            axes = AxisScores(
                cosine=0.0,
                lexical=match,
                domain=domain[i],
                recency=recency_score(c.published_at, now),
                whitelist=whitelist_score(c.tier_priority, self._policy.whitelist_boost),
            )
            score = FAST_TIER_WEIGHT * tier_component + FAST_TITLE_MATCH_WEIGHT * match
            scored.append(RankedResult(candidate=c, axes=axes, score=score))

        ordered = sorted(scored, key=lambda r: r.score, reverse=True)
        return enforce_diversity(ordered, self._policy.final_k)
