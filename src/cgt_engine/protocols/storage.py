"""Protocols for the key/value cache and the metrics sink."""

from __future__ import annotations

from typing import Any, Protocol

from cgt_engine.models.domain import MetricsRecord


class KeyValueCache(Protocol):
    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl_hours: float) -> None: ...


class MetricsSink(Protocol):
    async def record(self, record: MetricsRecord) -> None: ...
