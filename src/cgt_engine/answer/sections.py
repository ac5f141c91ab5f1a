"""Split an answer into the five canonical sections."""

from __future__ import annotations

import re

from cgt_engine.config.constants import SECTION_HEADINGS
from cgt_engine.models.domain import AnswerSections

SECTION_FIELDS = ("overview", "tax_rates", "considerations", "legal_basis", "conclusion")

_PREFIX = r"^\s*(?:#{1,6}\s*)?(?:\*\*\s*)?"
_SUFFIX = r"\s*(?:\*\*)?\s*:?"

_HEADING_PATTERNS = tuple(
    (name, re.compile(_PREFIX + body + _SUFFIX))
    for name, body in (
        ("overview", r"1\.\s*개요(?:\s*/\s*기본\s*원칙)?"),
        (
            "tax_rates",
            r"2\.\s*(?:보유\s*[·ㆍ.]?\s*거주\s*기간(?:\s*/\s*세율(?:\s*표)?)?|세율(?:\s*표)?)",
        ),
        ("considerations", r"3\.\s*실무상\s*유의\s*사항"),
        ("legal_basis", r"4\.\s*관련\s*법령(?:\s*및\s*근거)?"),
        ("conclusion", r"5\.\s*결론"),
    )
)


def match_heading(line: str) -> tuple[str, str] | None:
    """Return (section, trailing text) when *line* opens a section."""
    for name, pattern in _HEADING_PATTERNS:
        m = pattern.match(line)
        if m:
            return name, line[m.end() :].strip()
    return None


def split_sections(text: str) -> AnswerSections:
    """Assign lines to the most recent heading; text before any heading goes to the overview."""
    buckets: dict[str, list[str]] = {name: [] for name in SECTION_FIELDS}
    current = "overview"
    for line in text.splitlines():
        heading = match_heading(line)
        if heading:
            current, rest = heading
            if rest:
                buckets[current].append(rest)
            continue
        if line.strip():
            buckets[current].append(line.rstrip())
    return AnswerSections(**{name: "\n".join(lines).strip() for name, lines in buckets.items()})


def render_sections(sections: AnswerSections) -> str:
    parts = []
    for heading, name in zip(SECTION_HEADINGS, SECTION_FIELDS):
        parts.append(f"{heading}\n{getattr(sections, name)}")
    return "\n\n".join(parts)
