"""Whitelist-first web retrieval with adaptive expansion to the open web."""

from __future__ import annotations

import asyncio
import hashlib
import json

from cgt_engine.config.policy import DomainPolicy, normalize_domain
from cgt_engine.models.domain import SearchCandidate
from cgt_engine.observability.logger import get_logger
from cgt_engine.protocols.search import SearchClient
from cgt_engine.protocols.storage import KeyValueCache
from cgt_engine.retrieval.query_expansion import ExpansionQuery, expand_queries

logger = get_logger("retriever")


def search_key(query: str, num: int, sites: list[str] | None, date_restrict: str | None) -> str:
    payload = json.dumps([query, num, sorted(sites) if sites else None, date_restrict], ensure_ascii=False)
    return "search:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def merge_by_url(*result_lists: list[SearchCandidate]) -> list[SearchCandidate]:
    """Concatenate in order, keeping the first occurrence of each URL."""
    seen: set[str] = set()
    merged: list[SearchCandidate] = []
    for results in result_lists:
        for c in results:
            if c.url in seen:
                continue
            seen.add(c.url)
            merged.append(c)
    return merged


class WebRetriever:
    def __init__(
        self,
        client: SearchClient,
        policy: DomainPolicy,
        cache: KeyValueCache | None = None,
    ) -> None:
        self._client = client
        self._policy = policy
        self._cache = cache

    async def _fetch(
        self,
        query: str,
        num: int,
        sites: list[str] | None = None,
        date_restrict: str | None = None,
        refresh: bool = False,
    ) -> list[dict]:
        """Raw search results, served from the cache for search_hours when one is set.

        *refresh* skips the lookup but still stores the fresh results.
        """
        if self._cache is None:
            return await self._client.search(query, num=num, sites=sites, date_restrict=date_restrict)
        key = search_key(query, num, sites, date_restrict)
        cached = None if refresh else await self._cache.get(key)
        if cached is not None:
            logger.debug("search_cache_hit", query=query, num=num)
            return cached
        raw = await self._client.search(query, num=num, sites=sites, date_restrict=date_restrict)
        await self._cache.set(key, raw, self._policy.cache.search_hours)
        return raw

    def _to_candidates(self, raw: list[dict]) -> list[SearchCandidate]:
        candidates = []
        for item in raw:
            url = item.get("link") or item.get("url") or ""
            if not url:
                continue
            candidates.append(
                SearchCandidate(
                    title=item.get("title", ""),
                    url=url,
                    snippet=item.get("snippet", ""),
                    domain=normalize_domain(url),
                    tier_priority=self._policy.tier_of(url),
                )
            )
        return candidates

    async def _search_whitelist(self, query: str, num: int, refresh: bool = False) -> list[SearchCandidate]:
        raw = await self._fetch(
            query,
            num=num,
            sites=list(self._policy.whitelist),
            date_restrict=self._policy.freshness,
            refresh=refresh,
        )
        return self._to_candidates(raw)

    async def search(self, query: str, expand: bool = False, refresh: bool = False) -> list[SearchCandidate]:
        """Whitelist-restricted search, widened to the open web when coverage is thin.

        Search failures propagate; an empty result is valid.
        """
        whitelist = await self._search_whitelist(query, self._policy.initial_n, refresh)
        if len(whitelist) >= self._policy.min_whitelist_results and not expand:
            logger.info("retrieval_whitelist_only", query=query, results=len(whitelist))
            return whitelist

        logger.info(
            "retrieval_expanding",
            query=query,
            whitelist_results=len(whitelist),
            minimum=self._policy.min_whitelist_results,
        )
        web = self._to_candidates(await self._fetch(query, num=self._policy.expand_n, refresh=refresh))
        merged = merge_by_url(whitelist, web)[: self._policy.final_k]
        logger.info("retrieval_merged", query=query, results=len(merged))
        return merged

    async def fast_search(self, query: str, refresh: bool = False) -> list[SearchCandidate]:
        """Single whitelist-restricted pass with a smaller result count."""
        return await self._search_whitelist(query, min(self._policy.initial_n, 5), refresh)

    async def _run_expansion(self, exp: ExpansionQuery, refresh: bool = False) -> list[SearchCandidate]:
        sites = list(exp.sites) if exp.sites else list(self._policy.whitelist)
        try:
            raw = await self._fetch(
                exp.query,
                num=self._policy.expand_n,
                sites=sites,
                date_restrict=self._policy.freshness,
                refresh=refresh,
            )
        except Exception as e:
            logger.warning("expansion_search_failed", kind=exp.kind, query=exp.query, error=repr(e))
            return []
        return self._to_candidates(raw)

    async def search_expanded(
        self,
        query: str,
        year: int,
        include_precedents: bool = True,
        include_calculations: bool = True,
        refresh: bool = False,
    ) -> list[SearchCandidate]:
        """Run the auxiliary queries concurrently. A failed one contributes nothing."""
        expansions = expand_queries(query, year, include_precedents, include_calculations)
        if not expansions:
            return []
        results = await asyncio.gather(*(self._run_expansion(e, refresh) for e in expansions))
        merged = merge_by_url(*results)
        logger.info("expansion_completed", query=query, queries=len(expansions), results=len(merged))
        return merged
