"""OpenAI embedding provider used for the semantic ranking axis."""

from __future__ import annotations

import openai
from openai import AsyncOpenAI

from cgt_engine.config.settings import Settings
from cgt_engine.exceptions import ConfigurationError, EmbeddingError
from cgt_engine.observability.logger import get_logger
from cgt_engine.utils.retry import retry_async

logger = get_logger("embeddings")


def is_transient_openai_error(exc: BaseException) -> bool:
    if isinstance(exc, (openai.APIConnectionError, openai.RateLimitError, openai.InternalServerError)):
        return True
    if isinstance(exc, openai.APIStatusError):
        return exc.status_code >= 500
    return isinstance(exc, TimeoutError)


class OpenAIEmbedder:
    def __init__(self, settings: Settings, batch_size: int = 100) -> None:
        if not settings.openai_api_key:
            raise ConfigurationError("OpenAI API key not configured")
        self._client = AsyncOpenAI(api_key=settings.openai_api_key)
        self._settings = settings
        self._model = settings.embedding_model
        self._batch_size = batch_size

    async def _create(self, batch: list[str]) -> list[list[float]]:
        async def call():
            return await self._client.embeddings.create(
                input=batch,
                model=self._model,
                dimensions=self._settings.embedding_dimensions,
            )

        response = await retry_async(
            call,
            max_attempts=self._settings.retry_max_attempts,
            base_delay=self._settings.retry_base_delay_s,
            max_delay=self._settings.retry_max_delay_s,
            timeout=self._settings.embedding_timeout_s,
            retry_if=is_transient_openai_error,
            operation="openai_embed",
        )
        return [item.embedding for item in response.data]

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        all_embeddings: list[list[float]] = []
        try:
            for i in range(0, len(texts), self._batch_size):
                all_embeddings.extend(await self._create(texts[i : i + self._batch_size]))
            logger.info("embedded_texts", count=len(texts), model=self._model)
        except Exception as e:
            raise EmbeddingError(f"Failed to embed {len(texts)} texts: {e}") from e
        return all_embeddings

    async def embed_query(self, query: str) -> list[float]:
        try:
            return (await self._create([query]))[0]
        except Exception as e:
            raise EmbeddingError(f"Failed to embed query: {e}") from e
