"""Text preprocessing for BM25 keyword scoring."""

from __future__ import annotations

import re
import unicodedata

from cgt_engine.config.constants import STOPWORDS

# \w is Unicode-aware, so Hangul syllables survive punctuation stripping
_PUNCT = re.compile(r"[^\w\s]")


def normalize_text(text: str) -> str:
    """NFKC-normalize, lowercase and collapse whitespace."""
    return " ".join(unicodedata.normalize("NFKC", text).lower().split())


def tokenize(text: str) -> list[str]:
    """Tokenize text for BM25: lowercase, strip punctuation, remove stopwords."""
    text = _PUNCT.sub(" ", normalize_text(text))
    return [t for t in text.split() if t not in STOPWORDS]
