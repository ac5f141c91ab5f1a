"""Protocol for text generation providers."""

from __future__ import annotations

from typing import Protocol

from cgt_engine.models.domain import GenerationOutput


class TextGenerator(Protocol):
    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.1,
        max_tokens: int = 1200,
    ) -> GenerationOutput: ...
