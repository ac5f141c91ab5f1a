"""Domain diversity enforcement over a score-sorted result list."""

from __future__ import annotations

from cgt_engine.config.constants import DIVERSITY_REPLACEMENT_MARGIN
from cgt_engine.models.domain import RankedResult


def enforce_diversity(
    ranked: list[RankedResult],
    final_k: int,
    margin: float = DIVERSITY_REPLACEMENT_MARGIN,
) -> list[RankedResult]:
    """Keep one result per domain unless a later one beats the kept one by *margin*.

    *ranked* should be sorted by descending score; the output is too.
    """
    accepted: list[RankedResult] = []
    by_domain: dict[str, int] = {}
    for result in ranked:
        if len(accepted) >= final_k:
            break
        idx = by_domain.get(result.domain)
        if idx is None:
            by_domain[result.domain] = len(accepted)
            accepted.append(result)
        elif result.score > accepted[idx].score * margin:
            accepted[idx] = result

    return sorted(accepted, key=lambda r: r.score, reverse=True)
