"""FastAPI dependency injection helpers."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from cgt_engine.config.policy import DomainPolicy
from cgt_engine.config.settings import Settings
from cgt_engine.pipeline.answer_pipeline import AnswerPipeline
from cgt_engine.storage.sqlite_cache import SQLiteKeyValueCache
from cgt_engine.storage.sqlite_metrics_store import SQLiteMetricsStore


@dataclass
class Services:
    pipeline: AnswerPipeline
    settings: Settings
    policy: DomainPolicy
    cache: SQLiteKeyValueCache | None = None
    metrics_store: SQLiteMetricsStore | None = None


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_pipeline(request: Request) -> AnswerPipeline:
    return request.app.state.services.pipeline
