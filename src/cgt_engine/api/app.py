"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from cgt_engine.answer.assembler import AnswerAssembler
from cgt_engine.api.dependencies import Services
from cgt_engine.api.errors import register_exception_handlers
from cgt_engine.api.middleware import RequestTimingMiddleware
from cgt_engine.api.routes_answer import router as answer_router
from cgt_engine.api.routes_evidence import router as evidence_router
from cgt_engine.api.routes_health import VERSION
from cgt_engine.api.routes_health import router as health_router
from cgt_engine.config.policy import load_policy
from cgt_engine.config.settings import Settings
from cgt_engine.embeddings.cached_embedder import CachedEmbedder
from cgt_engine.embeddings.openai_embedder import OpenAIEmbedder
from cgt_engine.evidence.builder import EvidencePackBuilder
from cgt_engine.extraction.web_extractor import HttpContentExtractor
from cgt_engine.generation.dual_draft import DualDraftGenerator
from cgt_engine.generation.gemini_provider import GeminiTextGenerator
from cgt_engine.observability.logger import get_logger, setup_logging
from cgt_engine.pipeline.answer_pipeline import AnswerPipeline
from cgt_engine.ranking.ranker import EvidenceRanker
from cgt_engine.retrieval.retriever import WebRetriever
from cgt_engine.search.google_cse import GoogleSearchClient
from cgt_engine.storage.sqlite_cache import SQLiteKeyValueCache
from cgt_engine.storage.sqlite_metrics_store import SQLiteMetricsStore
from cgt_engine.verification.conflict_resolver import ConflictResolver
from cgt_engine.verification.nli import NLIConflictJudge

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()
    setup_logging(settings.log_level, settings.log_json)
    policy = load_policy(settings)

    for path in [settings.cache_db_path, settings.metrics_db_path]:
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    # Storage
    cache = SQLiteKeyValueCache(settings.cache_db_path)
    await cache.initialize()
    metrics_store = SQLiteMetricsStore(
        settings.metrics_db_path,
        conflict_threshold=policy.conflict_threshold,
        cost_per_1k_tokens=settings.cost_per_1k_tokens,
    )
    await metrics_store.initialize()

    # Collaborators
    search_client = GoogleSearchClient(settings)
    extractor = HttpContentExtractor(settings)
    embedder = CachedEmbedder(
        delegate=OpenAIEmbedder(settings), cache=cache, ttl_hours=policy.cache.embedding_hours
    )
    llm = GeminiTextGenerator(settings)

    # Evidence
    evidence_builder = EvidencePackBuilder(
        retriever=WebRetriever(search_client, policy, cache=cache),
        extractor=extractor,
        ranker=EvidenceRanker(policy, embedder=embedder),
        policy=policy,
        cache=cache,
        extraction_timeout_s=settings.extraction_timeout_s,
        fast_extraction_timeout_s=settings.fast_extraction_timeout_s,
    )

    # Drafting, verification, assembly
    pipeline = AnswerPipeline(
        evidence_builder=evidence_builder,
        drafter=DualDraftGenerator(
            llm, temperature=settings.generation_temperature, max_tokens=settings.draft_max_tokens
        ),
        resolver=ConflictResolver(
            NLIConflictJudge(
                llm, threshold=policy.conflict_threshold, max_tokens=settings.nli_max_tokens
            ),
            policy,
        ),
        assembler=AnswerAssembler(
            llm, temperature=settings.generation_temperature, max_tokens=settings.draft_max_tokens
        ),
        metrics_sink=metrics_store,
    )

    app.state.services = Services(
        pipeline=pipeline,
        settings=settings,
        policy=policy,
        cache=cache,
        metrics_store=metrics_store,
    )
    logger.info(
        "startup_complete",
        whitelist_domains=len(policy.whitelist),
        conflict_threshold=policy.conflict_threshold,
    )

    yield

    removed = await cache.cleanup()
    await search_client.aclose()
    await extractor.aclose()
    logger.info("shutdown_complete", expired_cache_entries=removed)


def create_app(services: Services | None = None) -> FastAPI:
    """Build the app. Injected *services* replace the lifespan wiring (used by tests)."""
    app = FastAPI(
        title="Capital Gains Tax Answer Engine",
        version=VERSION,
        description="Evidence-ranked, conflict-checked answers to Korean capital-gains-tax questions",
        lifespan=None if services is not None else lifespan,
    )
    if services is not None:
        app.state.services = services
    app.add_middleware(RequestTimingMiddleware)
    register_exception_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(evidence_router, tags=["evidence"])
    app.include_router(answer_router, tags=["answer"])
    return app
