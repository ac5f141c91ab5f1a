"""Auxiliary capital-gains-tax queries issued alongside the primary search."""

from __future__ import annotations

from dataclasses import dataclass

PRECEDENT_SITES = ("scourt.go.kr", "taxnet.co.kr")
CALCULATION_SITES = ("hometax.go.kr", "nts.go.kr")
AMENDMENT_SITES = ("easylaw.go.kr", "korea.kr")

TAX_NAMES = ("양도소득세", "양도세")


@dataclass(frozen=True)
class ExpansionQuery:
    kind: str
    query: str
    sites: tuple[str, ...] | None = None  # None = whole whitelist


def expand_queries(
    query: str,
    year: int,
    include_precedents: bool = True,
    include_calculations: bool = True,
) -> list[ExpansionQuery]:
    q = query.strip()
    if not q:
        return []

    expansions: list[ExpansionQuery] = []
    if include_precedents:
        expansions.append(ExpansionQuery("precedent", f"{q} 판례 {year}", PRECEDENT_SITES))
    if include_calculations:
        expansions.append(ExpansionQuery("calculation", f"{q} 계산기 자동계산", CALCULATION_SITES))
    expansions.append(ExpansionQuery("amendment", f"{q} {year}년 개정", AMENDMENT_SITES))
    if not any(name in q for name in TAX_NAMES):
        expansions.append(ExpansionQuery("tax_term", f"{q} 양도소득세"))
    return expansions
