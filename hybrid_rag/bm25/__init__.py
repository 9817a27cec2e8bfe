"""
BM25 (Best Match 25) term weighting for hybrid search.

Components:
- tokenizer: Text normalization (lowercase, stopwords, Portuguese stemming)
- corpus_stats: Shared vocabulary / document frequency / length statistics
- scorer: BM25 term weight with corpus IDF
- sparse_encoder: Text → sparse vector keyed by vocabulary index
- fusion: Weighted blending of dense and sparse rankings

Unlike a classic inverted index, nothing here searches: sparse vectors are
handed to the vector index, which scores them with a dot product. The
statistics are process-local and append-only (see corpus_stats).
"""

from .tokenizer import tokenize
from .stemmer import stem
from .scorer import bm25_term_score, inverse_document_frequency
from .corpus_stats import CorpusStatistics, CorpusSnapshot
from .sparse_encoder import SparseEncoder
from .fusion import fuse_rankings

__all__ = [
    "tokenize",
    "stem",
    "bm25_term_score",
    "inverse_document_frequency",
    "CorpusStatistics",
    "CorpusSnapshot",
    "SparseEncoder",
    "fuse_rankings",
]
