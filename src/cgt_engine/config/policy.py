"""Domain authority policy: whitelist tiers, ranking weights, thresholds, sizing.

Loaded once at startup and shared read-only by every component.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from cgt_engine.config.constants import NON_WHITELIST_TIER
from cgt_engine.config.settings import Settings
from cgt_engine.exceptions import ConfigurationError

DEFAULT_TIERS: tuple[tuple[str, ...], ...] = (
    ("nts.go.kr", "hometax.go.kr", "law.go.kr"),
    ("moef.go.kr", "easylaw.go.kr", "scourt.go.kr"),
    ("korea.kr", "molit.go.kr", "kacta.or.kr"),
    ("taxtimes.co.kr", "joseilbo.com", "samili.com"),
)


def normalize_domain(value: str) -> str:
    """Return the lowercase host of a URL or bare domain, without a leading www."""
    value = value.strip().lower()
    if "://" in value:
        value = urlparse(value).hostname or ""
    value = value.split("/")[0].split(":")[0]
    if value.startswith("www."):
        value = value[4:]
    return value


@dataclass(frozen=True)
class CacheTTLs:
    default_hours: float = 6.0
    high_coverage_hours: float = 24.0
    whitelist_hours: float = 168.0
    search_hours: float = 6.0
    embedding_hours: float = 720.0


@dataclass(frozen=True)
class DomainPolicy:
    tiers: tuple[tuple[str, ...], ...] = DEFAULT_TIERS
    conflict_threshold: float = 0.35
    cosine_weight: float = 0.4
    bm25_weight: float = 0.3
    whitelist_boost: float = 1.0
    final_k: int = 5
    initial_n: int = 10
    expand_n: int = 10
    min_whitelist_results: int = 3
    freshness: str = "y1"
    cache: CacheTTLs = field(default_factory=CacheTTLs)

    def __post_init__(self) -> None:
        if len(self.tiers) != 4:
            raise ConfigurationError(f"expected 4 whitelist tiers, got {len(self.tiers)}")
        if not 0.0 <= self.conflict_threshold <= 1.0:
            raise ConfigurationError("conflict_threshold must lie in [0, 1]")
        if self.final_k < 1:
            raise ConfigurationError("final_k must be positive")

    @property
    def whitelist(self) -> tuple[str, ...]:
        return tuple(d for tier in self.tiers for d in tier)

    def tier_of(self, domain_or_url: str) -> int:
        """Tier 1-4 for whitelisted domains (subdomains inherit), 5 otherwise."""
        domain = normalize_domain(domain_or_url)
        if not domain:
            return NON_WHITELIST_TIER
        for priority, tier in enumerate(self.tiers, start=1):
            if domain in tier:
                return priority
        for priority, tier in enumerate(self.tiers, start=1):
            if any(domain.endswith("." + d) for d in tier):
                return priority
        return NON_WHITELIST_TIER

    def is_whitelisted(self, domain_or_url: str) -> bool:
        return self.tier_of(domain_or_url) < NON_WHITELIST_TIER

    def is_authoritative(self, domain_or_url: str) -> bool:
        """Tier 1 or tier 2: strong enough to override model drafts."""
        return self.tier_of(domain_or_url) <= 2

    @classmethod
    def from_dict(cls, data: dict) -> DomainPolicy:
        whitelist = data.get("whitelist", {})
        tiers = tuple(
            tuple(normalize_domain(d) for d in whitelist.get(f"priority_{i}", DEFAULT_TIERS[i - 1]))
            for i in range(1, 5)
        )
        search = data.get("search_config", {})
        rerank = data.get("rerank", {})
        cache = data.get("cache", {})
        defaults = CacheTTLs()
        return cls(
            tiers=tiers,
            conflict_threshold=float(data.get("conflict_threshold", 0.35)),
            cosine_weight=float(rerank.get("cosine_weight", 0.4)),
            bm25_weight=float(rerank.get("bm25_weight", 0.3)),
            whitelist_boost=float(rerank.get("whitelist_boost", 1.0)),
            final_k=int(search.get("final_k", 5)),
            initial_n=int(search.get("initial_n", 10)),
            expand_n=int(search.get("expand_n", 10)),
            min_whitelist_results=int(search.get("min_whitelist_results", 3)),
            freshness=str(search.get("freshness", "y1")),
            cache=CacheTTLs(
                default_hours=float(cache.get("default_ttl_hours", defaults.default_hours)),
                high_coverage_hours=float(
                    cache.get("high_coverage_ttl_hours", defaults.high_coverage_hours)
                ),
                whitelist_hours=float(cache.get("whitelist_ttl_hours", defaults.whitelist_hours)),
                search_hours=float(cache.get("search_ttl_hours", defaults.search_hours)),
                embedding_hours=float(cache.get("embedding_ttl_hours", defaults.embedding_hours)),
            ),
        )


def load_policy(settings: Settings) -> DomainPolicy:
    if not settings.policy_path:
        return DomainPolicy()
    path = Path(settings.policy_path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot load domain policy from {path}: {e}") from e
    return DomainPolicy.from_dict(data)
