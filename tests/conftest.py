"""Shared test fixtures and in-test fakes for external collaborators."""

from __future__ import annotations

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from cgt_engine.config.policy import DomainPolicy
from cgt_engine.config.settings import Settings
from cgt_engine.models.domain import (
    EvidenceItem,
    EvidencePack,
    EvidencePackMetadata,
    EvidenceType,
    ExtractedContent,
    GenerationOutput,
    SearchCandidate,
)

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeSearchClient:
    """Returns canned hits per query; restricted and open searches can differ."""

    def __init__(self, restricted=None, open_web=None, fail_on=()) -> None:
        self.restricted = restricted or {}
        self.open_web = open_web or {}
        self.fail_on = set(fail_on)
        self.calls: list[dict] = []

    async def search(self, query, num=10, sites=None, date_restrict=None):
        self.calls.append({"query": query, "num": num, "sites": sites, "date_restrict": date_restrict})
        if query in self.fail_on:
            raise RuntimeError(f"search failed for {query}")
        source = self.restricted if sites else self.open_web
        return list(source.get(query, []))[:num]


class FakeExtractor:
    def __init__(self, contents=None, raise_for=()) -> None:
        self.contents = contents or {}
        self.raise_for = set(raise_for)
        self.calls: list[tuple[str, float | None, int | None]] = []

    async def extract(self, url, timeout_s=None, max_chars=None):
        self.calls.append((url, timeout_s, max_chars))
        if url in self.raise_for:
            raise RuntimeError("boom")
        return self.contents.get(url)


class FakeEmbedder:
    """Maps text to a vector via a lookup; unknown text gets a default vector."""

    def __init__(self, vectors=None, default=(0.0, 1.0), fail=False) -> None:
        self.vectors = vectors or {}
        self.default = list(default)
        self.fail = fail
        self.embed_texts_calls = 0
        self.embed_query_calls = 0

    async def embed_texts(self, texts):
        self.embed_texts_calls += 1
        if self.fail:
            raise RuntimeError("embedding backend down")
        return [list(self.vectors.get(t, self.default)) for t in texts]

    async def embed_query(self, query):
        self.embed_query_calls += 1
        if self.fail:
            raise RuntimeError("embedding backend down")
        return list(self.vectors.get(query, self.default))


class FakeTextGenerator:
    """Answers with *responder(system, user)* or pops scripted replies in order."""

    def __init__(self, replies=None, responder=None, tokens=100) -> None:
        self.replies = list(replies or [])
        self.responder = responder
        self.tokens = tokens
        self.calls: list[dict] = []

    async def generate(self, system_prompt, user_prompt, temperature=0.1, max_tokens=1200):
        self.calls.append(
            {
                "system": system_prompt,
                "user": user_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if self.responder is not None:
            text = self.responder(system_prompt, user_prompt)
        else:
            text = self.replies.pop(0)
        if isinstance(text, Exception):
            raise text
        return GenerationOutput(text=text, tokens_used=self.tokens, model="fake-model")


class MemoryCache:
    """Dict-backed KeyValueCache with a controllable clock."""

    def __init__(self, now=FIXED_NOW) -> None:
        self.now = now
        self.store: dict[str, tuple[object, datetime]] = {}
        self.set_calls: list[tuple[str, float]] = []

    async def get(self, key):
        entry = self.store.get(key)
        if entry is None or entry[1] <= self.now:
            return None
        return entry[0]

    async def set(self, key, value, ttl_hours):
        self.set_calls.append((key, ttl_hours))
        self.store[key] = (value, self.now + timedelta(hours=ttl_hours))


class FakeMetricsSink:
    def __init__(self, fail=False) -> None:
        self.records = []
        self.fail = fail

    async def record(self, record):
        if self.fail:
            raise RuntimeError("metrics db locked")
        self.records.append(record)


def make_hit(url: str, title: str = "", snippet: str = "") -> dict:
    return {"title": title or url, "link": url, "snippet": snippet}


def make_candidate(
    url: str,
    title: str = "",
    snippet: str = "",
    policy: DomainPolicy | None = None,
    published_at: datetime | None = None,
    text: str = "",
) -> SearchCandidate:
    from cgt_engine.config.policy import normalize_domain

    policy = policy or DomainPolicy()
    content = None
    if published_at is not None or text:
        content = ExtractedContent(
            title=title,
            text_content=text,
            excerpt=text[:200],
            domain=normalize_domain(url),
            url=url,
            published_at=published_at,
        )
    return SearchCandidate(
        title=title or url,
        url=url,
        snippet=snippet,
        domain=normalize_domain(url),
        tier_priority=policy.tier_of(url),
        content=content,
    )


def make_item(domain: str, priority: int, title: str = "", snippet: str = "") -> EvidenceItem:
    return EvidenceItem(
        domain=domain,
        title=title or domain,
        snippet=snippet,
        url=f"https://{domain}/doc",
        priority=priority,
        score=0.5,
        type=EvidenceType.GENERAL,
        relevance=0.5,
    )


def make_pack(items: list[EvidenceItem], query: str = "q") -> EvidencePack:
    return EvidencePack(
        evidence=items,
        metadata=EvidencePackMetadata(
            query=query,
            latency_ms=1.0,
            whitelist_coverage=0.0,
            domain_diversity=0.0,
            average_relevance=0.0,
            cache_hit_rate=0.0,
        ),
    )


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def policy():
    return DomainPolicy()


@pytest.fixture
def settings():
    """Test settings with temp paths and no real credentials."""
    tmp = tempfile.mkdtemp()
    return Settings(
        openai_api_key="test-key",
        google_api_key="test-key",
        search_api_key="test-key",
        search_engine_id="test-cx",
        cache_db_path=str(Path(tmp) / "cache.db"),
        metrics_db_path=str(Path(tmp) / "metrics.db"),
        retry_base_delay_s=0.0,
        retry_max_delay_s=0.0,
        _env_file=None,
    )


@pytest.fixture
def tmp_dir():
    return tempfile.mkdtemp()
