"""Answer pipeline orchestrator: evidence, dual drafts, conflict resolution, assembly."""

from __future__ import annotations

from cgt_engine.answer.assembler import AnswerAssembler
from cgt_engine.evidence.builder import EvidencePackBuilder
from cgt_engine.exceptions import InputValidationError
from cgt_engine.generation.dual_draft import DualDraftGenerator
from cgt_engine.models.domain import AnswerResult, ConflictAnalysis, EvidencePack, MetricsRecord
from cgt_engine.observability.logger import get_logger
from cgt_engine.observability.metrics import log_conflict_metrics, log_latency
from cgt_engine.observability.tracing import TraceContext
from cgt_engine.protocols.storage import MetricsSink
from cgt_engine.verification.conflict_resolver import ConflictResolver

logger = get_logger("answer_pipeline")


class AnswerPipeline:
    def __init__(
        self,
        evidence_builder: EvidencePackBuilder,
        drafter: DualDraftGenerator,
        resolver: ConflictResolver,
        assembler: AnswerAssembler,
        metrics_sink: MetricsSink | None = None,
    ) -> None:
        self._evidence = evidence_builder
        self._drafter = drafter
        self._resolver = resolver
        self._assembler = assembler
        self._metrics = metrics_sink

    async def build_evidence(
        self, query: str, force_refresh: bool = False, fast_mode: bool = False
    ) -> EvidencePack:
        trace = TraceContext()
        pack = await self._evidence.build(
            query, force_refresh=force_refresh, fast_mode=fast_mode, trace=trace
        )
        log_latency(trace.trace_id, trace.stage_latencies(), trace.elapsed_ms)
        return pack

    async def resolve_conflict(
        self, draft_a: str, draft_b: str, evidence_pack: EvidencePack
    ) -> ConflictAnalysis:
        trace = TraceContext()
        with trace.span("conflict"):
            analysis = await self._resolver.resolve(draft_a, draft_b, evidence_pack)
        log_conflict_metrics(
            trace.trace_id,
            analysis.rule_score,
            analysis.nli_score,
            analysis.conflict_score,
            str(analysis.decision_mode),
        )
        return analysis

    async def answer(
        self,
        query: str,
        evidence_pack: EvidencePack | None = None,
        session_id: str | None = None,
    ) -> AnswerResult:
        if not query or not query.strip():
            raise InputValidationError("query must not be empty")
        trace = TraceContext()
        logger.info("answer_started", trace_id=trace.trace_id, has_evidence=evidence_pack is not None)

        # STEP 1: Evidence (skipped when the caller already holds a pack)
        if evidence_pack is None:
            evidence_pack = await self._evidence.build(query, trace=trace)

        # STEP 2: Both drafts, concurrently
        with trace.span("drafting"):
            drafts = await self._drafter.generate(query, evidence_pack)

        # STEP 3: Conflict analysis
        with trace.span("conflict"):
            conflict = await self._resolver.resolve(
                drafts.with_evidence.content, drafts.without_evidence.content, evidence_pack
            )
        log_conflict_metrics(
            trace.trace_id,
            conflict.rule_score,
            conflict.nli_score,
            conflict.conflict_score,
            str(conflict.decision_mode),
        )

        # STEP 4: Assembly
        with trace.span("assembly"):
            final = await self._assembler.assemble(
                drafts.with_evidence, evidence_pack, conflict.decision_mode, query=query
            )

        latency_ms = trace.elapsed_ms
        tokens = drafts.tokens_used + conflict.tokens_used + final.tokens_used
        log_latency(trace.trace_id, trace.stage_latencies(), latency_ms)

        result = AnswerResult(
            answer=final,
            conflict=conflict,
            evidence_pack=evidence_pack,
            latency_ms=latency_ms,
            tokens_used=tokens,
        )
        await self._record(query, session_id, result)
        return result

    async def _record(self, query: str, session_id: str | None, result: AnswerResult) -> None:
        if self._metrics is None:
            return
        evidence = result.evidence_pack.evidence
        record = MetricsRecord(
            query=query,
            latency_ms=result.latency_ms,
            tokens_used=result.tokens_used,
            decision_mode=str(result.conflict.decision_mode),
            conflict_score=result.conflict.conflict_score,
            evidence_count=len(evidence),
            whitelist_coverage=result.evidence_pack.metadata.whitelist_coverage,
            session_id=session_id,
            top_domain=evidence[0].domain if evidence else None,
        )
        try:
            await self._metrics.record(record)
        except Exception as e:
            logger.warning("metrics_record_failed", error=repr(e))
