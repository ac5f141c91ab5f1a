"""LLM-judged conflict inference between the drafts and the web evidence."""

from __future__ import annotations

import json
import re

from pydantic import BaseModel, Field, ValidationError, field_validator

from cgt_engine.config.constants import NLI_TEMPERATURE
from cgt_engine.generation.prompt_templates import NLI_PROMPT, NLI_SYSTEM_PROMPT, format_nli_evidence
from cgt_engine.models.domain import EvidencePack, NLIResult
from cgt_engine.observability.logger import get_logger
from cgt_engine.protocols.llm import TextGenerator

logger = get_logger("nli")

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class NLIResponse(BaseModel):
    conflict_score: float = 0.0
    conflicts: list[str] = Field(default_factory=list)
    decisive_web_sources: list[str] = Field(default_factory=list)
    reasoning: str = ""
    confidence: float = 0.5

    @field_validator("conflict_score", "confidence")
    @classmethod
    def clip_unit(cls, v: float) -> float:
        return max(0.0, min(1.0, v))

    @field_validator("conflicts", "decisive_web_sources", mode="before")
    @classmethod
    def stringify(cls, v):
        if v is None:
            return []
        if not isinstance(v, list):
            v = [v]
        return [x if isinstance(x, str) else json.dumps(x, ensure_ascii=False) for x in v]


def neutral_result(reason: str) -> NLIResult:
    return NLIResult(
        conflict_score=0.0,
        conflicts=[],
        decisive_web_sources=[],
        reasoning=reason,
        confidence=0.0,
        parsed=False,
    )


def parse_nli_output(text: str) -> NLIResult:
    """Parse the model's JSON verdict. Malformed output yields a neutral zero-conflict result."""
    body = _FENCE.sub("", text.strip())
    if not body.startswith("{"):
        start, end = body.find("{"), body.rfind("}")
        if start == -1 or end <= start:
            logger.warning("nli_parse_failed", reason="no_json_object")
            return neutral_result("JSON 파싱 실패")
        body = body[start : end + 1]
    try:
        parsed = NLIResponse.model_validate(json.loads(body))
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        logger.warning("nli_parse_failed", error=repr(e))
        return neutral_result("JSON 파싱 실패")
    return NLIResult(
        conflict_score=parsed.conflict_score,
        conflicts=parsed.conflicts,
        decisive_web_sources=parsed.decisive_web_sources,
        reasoning=parsed.reasoning,
        confidence=parsed.confidence,
    )


class NLIConflictJudge:
    def __init__(self, llm: TextGenerator, threshold: float = 0.35, max_tokens: int = 800) -> None:
        self._llm = llm
        self._threshold = threshold
        self._max_tokens = max_tokens

    async def judge(self, draft_a: str, draft_b: str, evidence_pack: EvidencePack) -> tuple[NLIResult, int]:
        """Return the verdict and the tokens spent. Transport failures propagate."""
        prompt = NLI_PROMPT.format(
            draft_a=draft_a,
            draft_b=draft_b,
            evidence_block=format_nli_evidence(evidence_pack.evidence),
            threshold=self._threshold,
        )
        output = await self._llm.generate(
            NLI_SYSTEM_PROMPT, prompt, temperature=NLI_TEMPERATURE, max_tokens=self._max_tokens
        )
        result = parse_nli_output(output.text)
        logger.info(
            "nli_judged",
            conflict_score=round(result.conflict_score, 4),
            parsed=result.parsed,
            conflicts=len(result.conflicts),
        )
        return result, output.tokens_used
