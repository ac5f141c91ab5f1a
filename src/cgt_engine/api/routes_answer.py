"""Answer assembly and conflict resolution endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from cgt_engine.api.dependencies import get_pipeline
from cgt_engine.models.schemas import (
    AnswerMetadata,
    AnswerRequest,
    AnswerResponse,
    AnswerSectionsModel,
    ConflictRequest,
    ConflictResponse,
)
from cgt_engine.pipeline.answer_pipeline import AnswerPipeline

router = APIRouter()


@router.post("/answer", response_model=AnswerResponse, response_model_by_alias=True)
async def assemble_answer(
    request: AnswerRequest,
    pipeline: AnswerPipeline = Depends(get_pipeline),
) -> AnswerResponse:
    pack = request.evidence_pack.to_domain() if request.evidence_pack is not None else None
    result = await pipeline.answer(request.query, evidence_pack=pack, session_id=request.session_id)
    return AnswerResponse(
        answer=AnswerSectionsModel.from_domain(result.answer.sections, result.answer.text),
        metadata=AnswerMetadata(
            query=request.query,
            latency=result.latency_ms,
            conflict_score=result.conflict.conflict_score,
            decision_mode=result.conflict.decision_mode.value,
            evidence_count=len(result.evidence_pack.evidence),
            whitelist_coverage=result.evidence_pack.metadata.whitelist_coverage,
            conflicts=result.conflict.conflicts,
            tokens_used=result.tokens_used,
        ),
    )


@router.post("/conflict", response_model=ConflictResponse, response_model_by_alias=True)
async def resolve_conflict(
    request: ConflictRequest,
    pipeline: AnswerPipeline = Depends(get_pipeline),
) -> ConflictResponse:
    analysis = await pipeline.resolve_conflict(
        request.draft_a, request.draft_b, request.evidence_pack.to_domain()
    )
    return ConflictResponse.from_domain(analysis)
