"""Google Custom Search JSON API client."""

from __future__ import annotations

import httpx

from cgt_engine.config.settings import Settings
from cgt_engine.exceptions import ConfigurationError, SearchError
from cgt_engine.observability.logger import get_logger
from cgt_engine.utils.retry import retry_async

logger = get_logger("google_cse")

# The API serves at most 10 results per request; more requires paging via ``start``.
PAGE_SIZE = 10
MAX_RESULTS = 100


def is_transient_http_error(exc: BaseException) -> bool:
    """Network faults, timeouts, 429 and 5xx are worth retrying; other 4xx are not."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return isinstance(exc, (httpx.TransportError, TimeoutError))


def build_site_query(query: str, sites: list[str] | None) -> str:
    if not sites:
        return query
    restriction = " OR ".join(f"site:{s}" for s in sites)
    return f"{query} ({restriction})"


class GoogleSearchClient:
    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._client = client or httpx.AsyncClient(
            timeout=settings.search_timeout_s,
            headers={"Accept": "application/json"},
        )

    async def search(
        self,
        query: str,
        num: int = 10,
        sites: list[str] | None = None,
        date_restrict: str | None = None,
    ) -> list[dict]:
        if not self._settings.search_api_key or not self._settings.search_engine_id:
            raise ConfigurationError("Google search API credentials not configured")

        wanted = max(1, min(num, MAX_RESULTS))
        q = build_site_query(query, sites)
        items: list[dict] = []
        start = 1
        while len(items) < wanted:
            page = await self._fetch_page(q, min(PAGE_SIZE, wanted - len(items)), start, date_restrict)
            items.extend(page)
            if len(page) < PAGE_SIZE:
                break
            start += PAGE_SIZE

        logger.info(
            "search_completed",
            query=query,
            restricted=bool(sites),
            results=len(items),
        )
        return [
            {
                "title": it.get("title", ""),
                "link": it.get("link", ""),
                "snippet": it.get("snippet", ""),
            }
            for it in items[:wanted]
            if it.get("link")
        ]

    async def _fetch_page(
        self, q: str, num: int, start: int, date_restrict: str | None
    ) -> list[dict]:
        params = {
            "key": self._settings.search_api_key,
            "cx": self._settings.search_engine_id,
            "q": q,
            "num": num,
            "start": start,
            "lr": "lang_ko",
            "gl": "kr",
            "filter": "1",
        }
        if date_restrict:
            params["dateRestrict"] = date_restrict

        async def call() -> dict:
            response = await self._client.get(self._settings.search_endpoint, params=params)
            response.raise_for_status()
            return response.json()

        try:
            data = await retry_async(
                call,
                max_attempts=self._settings.retry_max_attempts,
                base_delay=self._settings.retry_base_delay_s,
                max_delay=self._settings.retry_max_delay_s,
                timeout=self._settings.search_timeout_s,
                retry_if=is_transient_http_error,
                operation="google_search",
            )
        except (httpx.HTTPError, TimeoutError, ValueError) as e:
            raise SearchError(f"Google search failed: {e}") from e

        items = data.get("items")
        return items if isinstance(items, list) else []

    async def aclose(self) -> None:
        await self._client.aclose()
