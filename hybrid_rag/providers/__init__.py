"""
External collaborators of the retrieval core.

Interfaces (base) and concrete adapters:
- PlainTextExtractor: text/plain and text/markdown files
- VertexEmbeddingProvider / SentenceTransformerEmbeddingProvider: dense embeddings
- GCSObjectStore: original file storage
- QdrantVectorIndex: dense + sparse vector search
"""

from .base import EmbeddingProvider, ObjectStore, TextExtractor, VectorIndex
from .text_extraction import PlainTextExtractor
from .embeddings import SentenceTransformerEmbeddingProvider, VertexEmbeddingProvider
from .gcs_storage import GCSObjectStore
from .qdrant_index import QdrantVectorIndex
from .factory import EmbeddingBackend, create_embedding_provider

__all__ = [
    "EmbeddingProvider",
    "ObjectStore",
    "TextExtractor",
    "VectorIndex",
    "PlainTextExtractor",
    "SentenceTransformerEmbeddingProvider",
    "VertexEmbeddingProvider",
    "GCSObjectStore",
    "QdrantVectorIndex",
    "EmbeddingBackend",
    "create_embedding_provider",
]
