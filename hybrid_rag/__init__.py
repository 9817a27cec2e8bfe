"""
Hybrid (dense + BM25 sparse) retrieval core.

- chunking: sliding window and structure-aware legal chunkers
- bm25: tokenizer, corpus statistics, sparse encoder, fusion
- engine: RetrievalEngine (shared statistics + operations)
- pipeline: async ingestion and hybrid query orchestration
- answering: retrieval-augmented answers with cited sources
- providers: extraction, embeddings, object store, vector index adapters
"""

from .exceptions import DependencyError, HybridRagError, InputError
from .models import (
    AnswerSource,
    ChatAnswer,
    ChunkMetadata,
    ExtractedText,
    IngestionResult,
    InstrumentType,
    LegalDocumentSpan,
    RankedResult,
    SparseVector,
    TextChunk,
)
from .engine import RetrievalEngine
from .pipeline import HybridSearcher, IngestionPipeline, enhance_metadata_for_folder_search
from .answering import RagChat

__version__ = "0.1.0"

__all__ = [
    "DependencyError",
    "HybridRagError",
    "InputError",
    "AnswerSource",
    "ChatAnswer",
    "ChunkMetadata",
    "ExtractedText",
    "IngestionResult",
    "InstrumentType",
    "LegalDocumentSpan",
    "RankedResult",
    "SparseVector",
    "TextChunk",
    "RetrievalEngine",
    "HybridSearcher",
    "IngestionPipeline",
    "RagChat",
    "enhance_metadata_for_folder_search",
]
