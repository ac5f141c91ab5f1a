"""Final answer assembly for each decision mode."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from cgt_engine.answer.sections import split_sections
from cgt_engine.generation.prompt_templates import (
    WEB_OVERRIDE_PROMPT,
    format_evidence_block,
    tax_system_prompt,
)
from cgt_engine.models.domain import DecisionMode, Draft, EvidencePack, FinalAnswer
from cgt_engine.observability.logger import get_logger
from cgt_engine.protocols.llm import TextGenerator

logger = get_logger("assembler")


class AnswerAssembler:
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

    async def assemble(
        self,
        draft_with_evidence: Draft,
        evidence_pack: EvidencePack,
        decision: DecisionMode,
        query: str = "",
    ) -> FinalAnswer:
        """gpt_draft and hybrid keep the evidence draft; web_override regenerates from evidence only."""
        if decision is DecisionMode.WEB_OVERRIDE:
            output = await self._llm.generate(
                tax_system_prompt(self._clock().year),
                WEB_OVERRIDE_PROMPT.format(
                    query=query, evidence_block=format_evidence_block(evidence_pack.evidence)
                ),
                self._temperature,
                self._max_tokens,
            )
            text, tokens = output.text, output.tokens_used
        else:
            text, tokens = draft_with_evidence.content, 0

        logger.info("answer_assembled", decision_mode=str(decision), tokens=tokens, chars=len(text))
        return FinalAnswer(
            text=text,
            sections=split_sections(text),
            decision_mode=decision,
            tokens_used=tokens,
        )
