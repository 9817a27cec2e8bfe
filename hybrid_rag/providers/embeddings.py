"""
Dense embedding providers.

- VertexEmbeddingProvider: Google Vertex AI text-embedding-005 via the
  Google Gen AI SDK (default, 768 dimensions). A batch is sent as one or more
  requests, each under EMBEDDING_MAX_REQUEST_TOKENS (Vertex rejects requests
  over ~20k input tokens with a 400)
- SentenceTransformerEmbeddingProvider: local open-source model
  (lazy import, no API calls)

Both SDKs are synchronous; calls run in a worker thread so the event loop
stays free while batches are in flight.
"""

import asyncio
import logging
from typing import List, Optional

from google import genai
from google.genai.types import EmbedContentConfig

from .. import config
from ..exceptions import InputError
from .base import EmbeddingProvider

logger = logging.getLogger(__name__)


def estimate_tokens(text: str) -> int:
    return len(text) // 4  # Rough estimate: 4 chars per token


class VertexEmbeddingProvider(EmbeddingProvider):
    """Vertex AI embeddings through google-genai"""

    def __init__(
        self,
        genai_client: Optional[genai.Client] = None,
        model_name: str = config.EMBEDDING_MODEL,
        project_id: Optional[str] = config.PROJECT_ID,
        location: str = config.LOCATION,
        max_request_tokens: int = config.EMBEDDING_MAX_REQUEST_TOKENS,
    ):
        """
        Args:
            genai_client: Existing client (tests pass a mock); created from
                project_id/location when omitted
            model_name: Embedding model
            project_id: GCP project ID
            location: GCP region
            max_request_tokens: Estimated input tokens allowed per embed_content call
        """
        if genai_client is None:
            if not project_id:
                raise InputError("GCP project ID required. Set GCP_PROJECT_ID env var or pass genai_client.")
            genai_client = genai.Client(vertexai=True, project=project_id, location=location)
        self.genai_client = genai_client
        self.model_name = model_name
        self.max_request_tokens = max_request_tokens

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        return await asyncio.to_thread(self._embed, texts, "RETRIEVAL_DOCUMENT")

    async def embed_query(self, text: str) -> List[float]:
        vectors = await asyncio.to_thread(self._embed, [text], "RETRIEVAL_QUERY")
        return vectors[0]

    def _embed(self, texts: List[str], task_type: str) -> List[List[float]]:
        vectors: List[List[float]] = []
        requests = self._split_requests(texts)
        logger.debug(f"Embedding {len(texts)} texts with {self.model_name} ({task_type}) in {len(requests)} requests")
        for request in requests:
            response = self.genai_client.models.embed_content(
                model=self.model_name,
                contents=request,
                config=EmbedContentConfig(task_type=task_type),
            )
            vectors.extend(list(embedding.values) for embedding in response.embeddings)
        return vectors

    def _split_requests(self, texts: List[str]) -> List[List[str]]:
        """
        Group consecutive texts into requests under the token budget.

        A single text over the budget still gets a request of its own; the
        chunker keeps chunks far below the limit.
        """
        requests: List[List[str]] = []
        current: List[str] = []
        current_tokens = 0
        for text in texts:
            tokens = estimate_tokens(text)
            if current and current_tokens + tokens > self.max_request_tokens:
                requests.append(current)
                current, current_tokens = [], 0
            current.append(text)
            current_tokens += tokens
        if current:
            requests.append(current)
        return requests

    def get_model_info(self) -> dict:
        return {
            "name": self.model_name,
            "type": "vertex_ai",
            "provider": "google-genai",
        }


class SentenceTransformerEmbeddingProvider(EmbeddingProvider):
    """Local sentence-transformers model (loaded on first use)"""

    def __init__(self, model_name: str = "paraphrase-multilingual-MiniLM-L12-v2"):
        self.model_name = model_name
        self.model = None  # Lazy loading

    def _ensure_loaded(self):
        if self.model is None:
            logger.info(f"Loading embedding model: {self.model_name}")
            from sentence_transformers import SentenceTransformer
            self.model = SentenceTransformer(self.model_name)

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        self._ensure_loaded()
        embeddings = await asyncio.to_thread(self.model.encode, texts)
        return [emb.tolist() for emb in embeddings]

    def get_model_info(self) -> dict:
        return {
            "name": self.model_name,
            "type": "sentence_transformers",
            "provider": "sentence-transformers",
            "loaded": self.model is not None,
        }
