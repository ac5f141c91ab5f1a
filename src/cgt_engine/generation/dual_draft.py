"""Concurrent generation of the evidence-conditioned and unconditioned drafts."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from cgt_engine.generation.prompt_templates import (
    DRAFT_WITH_EVIDENCE_PROMPT,
    DRAFT_WITHOUT_EVIDENCE_PROMPT,
    format_evidence_block,
    tax_system_prompt,
)
from cgt_engine.models.domain import Draft, DraftPair, EvidencePack, GenerationOutput
from cgt_engine.observability.logger import get_logger
from cgt_engine.protocols.llm import TextGenerator
from cgt_engine.utils.tasks import run_all

logger = get_logger("dual_draft")


def _to_draft(output: GenerationOutput) -> Draft:
    return Draft(content=output.text, tokens_used=output.tokens_used, model=output.model)


class DualDraftGenerator:
    def __init__(
        self,
        llm: TextGenerator,
        temperature: float = 0.1,
        max_tokens: int = 1200,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._llm = llm
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._clock = clock

    async def generate(self, query: str, evidence_pack: EvidencePack) -> DraftPair:
        """Both drafts must succeed; a failure in either cancels the other and propagates."""
        system = tax_system_prompt(self._clock().year)
        with_prompt = DRAFT_WITH_EVIDENCE_PROMPT.format(
            query=query, evidence_block=format_evidence_block(evidence_pack.evidence)
        )
        without_prompt = DRAFT_WITHOUT_EVIDENCE_PROMPT.format(query=query)

        with_out, without_out = await run_all(
            self._llm.generate(system, with_prompt, self._temperature, self._max_tokens),
            self._llm.generate(system, without_prompt, self._temperature, self._max_tokens),
        )
        pair = DraftPair(with_evidence=_to_draft(with_out), without_evidence=_to_draft(without_out))
        logger.info("drafts_generated", tokens=pair.tokens_used)
        return pair
