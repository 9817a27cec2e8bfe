"""
Library boundary of the retrieval core.

RetrievalEngine bundles one CorpusStatistics instance with the encoder that
reads it, and exposes the operations the orchestration layer calls. Create
one engine per process (or per test) and pass it around; there is no
module-level singleton.
"""

import logging
from typing import Iterable, List, Optional

from . import config
from .bm25 import CorpusStatistics, SparseEncoder, fuse_rankings
from .chunking import chunk_text, chunk_text_smart
from .chunking.common import ChunkSource
from .models import RankedResult, SparseVector, TextChunk

logger = logging.getLogger(__name__)


class RetrievalEngine:
    """Chunking, corpus statistics, sparse encoding and fusion over shared state"""

    def __init__(self, stats: Optional[CorpusStatistics] = None):
        self.stats = stats if stats is not None else CorpusStatistics()
        self.encoder = SparseEncoder(self.stats)

    def chunk(
        self,
        source: ChunkSource,
        chunk_size: int = config.CHUNK_SIZE,
        chunk_overlap: int = config.CHUNK_OVERLAP,
    ) -> List[TextChunk]:
        """Generic sliding-window chunking"""
        return chunk_text(source, chunk_size, chunk_overlap)

    def chunk_smart(
        self,
        source: ChunkSource,
        chunk_size: int = config.CHUNK_SIZE,
        chunk_overlap: int = config.SMART_CHUNK_OVERLAP,
    ) -> List[TextChunk]:
        """Structure-aware chunking for legal documents"""
        return chunk_text_smart(source, chunk_size, chunk_overlap)

    def ingest_for_scoring(self, chunk_text: str) -> None:
        """Count one chunk in the corpus statistics"""
        self.stats.ingest(chunk_text)

    def rebuild_vocabulary(self, documents: Iterable[str]) -> None:
        """Reset statistics and re-ingest a corpus (invalidates all indices)"""
        self.stats.rebuild(documents)

    def vocabulary_size(self) -> int:
        return self.stats.vocabulary_size()

    def encode_sparse(self, text: str) -> SparseVector:
        """BM25 sparse vector for a chunk or a query (queries are not ingested)"""
        return self.encoder.encode(text)

    def fuse_rankings(
        self,
        dense: List[RankedResult],
        sparse: List[RankedResult],
        alpha: float = config.DEFAULT_ALPHA,
        limit: int = 5,
    ) -> List[RankedResult]:
        """Weighted fusion of dense and sparse results"""
        return fuse_rankings(dense, sparse, alpha=alpha, limit=limit)
