"""Protocols for web search and page content extraction."""

from __future__ import annotations

from typing import Protocol

from cgt_engine.models.domain import ExtractedContent


class SearchClient(Protocol):
    async def search(
        self,
        query: str,
        num: int = 10,
        sites: list[str] | None = None,
        date_restrict: str | None = None,
    ) -> list[dict]:
        """Return raw hits as ``{"title", "link", "snippet"}`` dicts."""
        ...


class ContentExtractor(Protocol):
    async def extract(
        self, url: str, timeout_s: float | None = None, max_chars: int | None = None
    ) -> ExtractedContent | None: ...
