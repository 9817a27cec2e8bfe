"""
Sparse (BM25-weighted) vector encoding for chunks and queries.

Chunks and queries go through the same code path: a query is scored as a
tiny document against the current corpus statistics, but is never ingested.
"""

import logging
from collections import Counter

from ..models import SparseVector
from .corpus_stats import CorpusStatistics
from .scorer import bm25_term_score
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


class SparseEncoder:
    """Turns text into a SparseVector using shared corpus statistics"""

    def __init__(self, stats: CorpusStatistics):
        self.stats = stats

    def encode(self, text: str) -> SparseVector:
        """
        Encode text as BM25 term weights keyed by vocabulary index.

        - Terms not in the vocabulary are skipped
        - Terms with a non-positive weight are dropped
        - Empty text or empty vocabulary yields an empty vector

        Args:
            text: Chunk or query text

        Returns:
            SparseVector with distinct indices and strictly positive values
        """
        tokens = tokenize(text)
        if not tokens:
            return SparseVector()

        snapshot = self.stats.snapshot(tokens)
        if snapshot.vocabulary_size == 0:
            return SparseVector()

        term_frequency = Counter(tokens)
        doc_length = len(tokens)

        vector = SparseVector()
        for term, tf in term_frequency.items():
            entry = snapshot.terms.get(term)
            if entry is None:
                continue
            index, df = entry
            score = bm25_term_score(
                term_frequency=tf,
                document_frequency=df,
                doc_length=doc_length,
                total_documents=snapshot.total_documents,
                avg_doc_length=snapshot.average_doc_length,
            )
            if score > 0:
                vector.indices.append(index)
                vector.values.append(score)

        logger.debug(f"Encoded sparse vector: {len(vector)} terms (from {len(term_frequency)} distinct tokens)")
        return vector
