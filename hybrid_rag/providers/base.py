"""
Abstract interfaces for the external collaborators of the retrieval core.

The pipeline only talks to these interfaces; concrete adapters live next to
this module and are swappable (tests use mocks).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..models import ExtractedText, RankedResult, SparseVector


class TextExtractor(ABC):
    """Extraction subsystem: raw file bytes → text + metadata"""

    @abstractmethod
    def extract(self, content: bytes, filename: str, mime_type: str) -> ExtractedText:
        pass


class EmbeddingProvider(ABC):
    """Dense embedding model"""

    @abstractmethod
    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """
        Embed a batch of texts.

        Returns:
            One vector per input text, in input order
        """
        pass

    async def embed_query(self, text: str) -> List[float]:
        """Embed a single query (defaults to a one-item batch)"""
        vectors = await self.embed_documents([text])
        return vectors[0]

    @abstractmethod
    def get_model_info(self) -> dict:
        pass


class ObjectStore(ABC):
    """Durable storage for original files"""

    @abstractmethod
    async def put(self, content: bytes, filename: str, mime_type: str) -> str:
        """Store bytes, return an opaque handle"""
        pass

    @abstractmethod
    async def get(self, handle: str) -> bytes:
        pass

    @abstractmethod
    def url(self, handle: str, expiration: int = 3600) -> str:
        """Time-limited download URL for a stored file"""
        pass


class VectorIndex(ABC):
    """Nearest-neighbour search and persistence for dense + sparse vectors"""

    @abstractmethod
    async def upsert(self, points: List[Dict[str, Any]]) -> None:
        """
        Write points. Each point is a dict with keys:
            id, dense (List[float]), sparse (SparseVector), payload (dict)
        """
        pass

    @abstractmethod
    async def search_dense(
        self,
        vector: List[float],
        filter: Optional[Dict[str, Any]] = None,
        limit: int = 10,
    ) -> List[RankedResult]:
        pass

    @abstractmethod
    async def search_sparse(
        self,
        vector: SparseVector,
        filter: Optional[Dict[str, Any]] = None,
        limit: int = 10,
    ) -> List[RankedResult]:
        pass
