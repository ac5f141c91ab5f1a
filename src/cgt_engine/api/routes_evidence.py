"""Evidence pack endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from cgt_engine.api.dependencies import get_pipeline
from cgt_engine.models.schemas import (
    EvidencePackModel,
    EvidencePackRequest,
    EvidencePackResponse,
    EvidenceSummary,
)
from cgt_engine.pipeline.answer_pipeline import AnswerPipeline

router = APIRouter()


@router.post("/evidence-pack", response_model=EvidencePackResponse, response_model_by_alias=True)
async def build_evidence_pack(
    request: EvidencePackRequest,
    pipeline: AnswerPipeline = Depends(get_pipeline),
) -> EvidencePackResponse:
    pack = await pipeline.build_evidence(
        request.query, force_refresh=request.force_refresh, fast_mode=request.fast_mode
    )
    m = pack.metadata
    return EvidencePackResponse(
        evidence_pack=EvidencePackModel.from_domain(pack),
        metadata=EvidenceSummary(
            query=m.query,
            latency=m.latency_ms,
            whitelist_coverage=m.whitelist_coverage,
            domain_diversity=m.domain_diversity,
            cache_hit_rate=m.cache_hit_rate,
        ),
    )
