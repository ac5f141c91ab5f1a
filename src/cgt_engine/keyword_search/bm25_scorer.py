"""Per-batch BM25 scoring over a candidate pool using rank_bm25."""

from __future__ import annotations

import numpy as np
from rank_bm25 import BM25Okapi

from cgt_engine.config.constants import BM25_B, BM25_K1
from cgt_engine.keyword_search.tokenizer import tokenize


def bm25_scores(query: str, documents: list[str]) -> list[float]:
    """BM25 score of *query* against each document, normalized by the batch maximum.

    The corpus is the batch itself, so average document length and IDF are
    relative to the candidate pool. Scores lie in [0, 1].
    """
    if not documents:
        return []
    tokenized_query = tokenize(query)
    corpus = [tokenize(d) for d in documents]
    if not tokenized_query or not any(corpus):
        return [0.0] * len(documents)

    bm25 = BM25Okapi(corpus, k1=BM25_K1, b=BM25_B)
    scores = np.clip(np.asarray(bm25.get_scores(tokenized_query), dtype=float), 0.0, None)
    top = float(scores.max())
    if top <= 0:
        return [0.0] * len(documents)
    return [float(s) for s in scores / top]
