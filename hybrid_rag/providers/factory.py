"""
Factory to create the embedding provider based on configuration.
"""

import logging
from enum import Enum
from typing import Optional

from .. import config
from ..exceptions import InputError
from .base import EmbeddingProvider
from .embeddings import SentenceTransformerEmbeddingProvider, VertexEmbeddingProvider

logger = logging.getLogger(__name__)


class EmbeddingBackend(Enum):
    """Supported embedding providers"""
    VERTEX_AI = "vertex_ai"  # Google Vertex AI text-embedding-005
    SENTENCE_TRANSFORMERS = "sentence_transformers"  # Local open-source models


def create_embedding_provider(
    backend: Optional[str] = None,
    model: Optional[str] = None,
) -> EmbeddingProvider:
    """
    Create embedding provider from arguments or environment.

    Config (env vars):
        EMBEDDING_PROVIDER: "vertex_ai" | "sentence_transformers" (default: vertex_ai)
        EMBEDDING_MODEL: Model identifier (Vertex AI only, default: text-embedding-005)

    Raises:
        InputError: Unknown backend name
    """
    name = (backend or config.EMBEDDING_PROVIDER).lower()
    try:
        backend_enum = EmbeddingBackend(name)
    except ValueError:
        raise InputError(
            f"Unknown embedding provider: {name}. "
            f"Valid options: {', '.join(b.value for b in EmbeddingBackend)}"
        )

    if backend_enum == EmbeddingBackend.VERTEX_AI:
        logger.info(f"Creating Vertex AI embedding provider: {model or config.EMBEDDING_MODEL}")
        return VertexEmbeddingProvider(model_name=model or config.EMBEDDING_MODEL)

    logger.info("Creating local sentence-transformers embedding provider")
    if model:
        return SentenceTransformerEmbeddingProvider(model_name=model)
    return SentenceTransformerEmbeddingProvider()
