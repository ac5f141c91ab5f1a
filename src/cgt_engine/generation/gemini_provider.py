"""Google Gemini text generator using the google-genai SDK."""

from __future__ import annotations

import httpx
from google import genai
from google.genai import errors, types

from cgt_engine.config.settings import Settings
from cgt_engine.exceptions import ConfigurationError, GenerationError
from cgt_engine.models.domain import GenerationOutput
from cgt_engine.observability.logger import get_logger
from cgt_engine.utils.retry import retry_async

logger = get_logger("gemini")


def is_transient_genai_error(exc: BaseException) -> bool:
    if isinstance(exc, errors.ServerError):
        return True
    if isinstance(exc, errors.APIError):
        return exc.code == 429
    return isinstance(exc, (httpx.TransportError, TimeoutError))


class GeminiTextGenerator:
    def __init__(self, settings: Settings) -> None:
        if not settings.google_api_key:
            raise ConfigurationError("Gemini API key not configured")
        self._client = genai.Client(api_key=settings.google_api_key)
        self._settings = settings
        self._model = settings.gemini_model

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.1,
        max_tokens: int = 1200,
    ) -> GenerationOutput:
        config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
            system_instruction=system_prompt or None,
        )

        async def call():
            return await self._client.aio.models.generate_content(
                model=self._model,
                contents=user_prompt,
                config=config,
            )

        try:
            response = await retry_async(
                call,
                max_attempts=self._settings.retry_max_attempts,
                base_delay=self._settings.retry_base_delay_s,
                max_delay=self._settings.retry_max_delay_s,
                timeout=self._settings.generation_timeout_s,
                retry_if=is_transient_genai_error,
                operation="gemini_generate",
            )
        except Exception as e:
            raise GenerationError(f"Gemini generation failed: {e}") from e

        usage = response.usage_metadata
        tokens = (usage.total_token_count or 0) if usage else 0
        logger.info("generation_completed", model=self._model, tokens=tokens)
        return GenerationOutput(text=response.text or "", tokens_used=tokens, model=self._model)
