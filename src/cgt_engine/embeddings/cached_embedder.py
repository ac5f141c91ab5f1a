"""Caching wrapper around an Embedder backed by the key/value cache."""

from __future__ import annotations

import hashlib

from cgt_engine.observability.logger import get_logger
from cgt_engine.protocols.embedder import Embedder
from cgt_engine.protocols.storage import KeyValueCache

logger = get_logger("cached_embedder")


def embedding_key(text: str) -> str:
    return "embedding:" + hashlib.sha256(text.encode("utf-8")).hexdigest()


class CachedEmbedder:
    """Wraps any Embedder, checks the cache first, calls delegate for misses."""

    def __init__(self, delegate: Embedder, cache: KeyValueCache, ttl_hours: float = 720.0) -> None:
        self._delegate = delegate
        self._cache = cache
        self._ttl_hours = ttl_hours

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        result: list[list[float] | None] = [await self._cache.get(embedding_key(t)) for t in texts]
        miss_indices = [i for i, emb in enumerate(result) if emb is None]

        if not miss_indices:
            logger.info("embed_texts_all_cached", count=len(texts))
            return result  # type: ignore[return-value]

        miss_embeddings = await self._delegate.embed_texts([texts[i] for i in miss_indices])
        for idx, emb in zip(miss_indices, miss_embeddings):
            result[idx] = emb
            await self._cache.set(embedding_key(texts[idx]), emb, self._ttl_hours)

        logger.info(
            "embed_texts_with_cache",
            total=len(texts),
            hits=len(texts) - len(miss_indices),
            misses=len(miss_indices),
        )
        return result  # type: ignore[return-value]

    async def embed_query(self, query: str) -> list[float]:
        key = embedding_key(query)
        cached = await self._cache.get(key)
        if cached is not None:
            logger.debug("embed_query_cache_hit", query_len=len(query))
            return cached

        embedding = await self._delegate.embed_query(query)
        await self._cache.set(key, embedding, self._ttl_hours)
        logger.debug("embed_query_cache_miss", query_len=len(query))
        return embedding
