"""
Qdrant vector index with one named dense vector and one named sparse vector
per point.

Collection layout:
    vectors:         "dense"  - cosine, size = embedding dimension
    sparse_vectors:  "sparse" - BM25 weights keyed by vocabulary index

Filters are plain dicts of payload key → value (MatchValue) or list of
values (MatchAny), combined with AND, e.g.
    {"metadata.folder_paths": "/contracts/2024"}
"""

import logging
from typing import Any, Dict, List, Optional

from qdrant_client import AsyncQdrantClient
from qdrant_client import models as qmodels

from .. import config
from ..models import RankedResult, SparseVector
from .base import VectorIndex

logger = logging.getLogger(__name__)

DENSE_VECTOR_NAME = "dense"
SPARSE_VECTOR_NAME = "sparse"


def build_filter(filter: Optional[Dict[str, Any]]) -> Optional[qmodels.Filter]:
    """Translate a simple key/value dict into a Qdrant filter (None when empty)"""
    if not filter:
        return None

    conditions = []
    for key, value in filter.items():
        if isinstance(value, (list, tuple, set)):
            match = qmodels.MatchAny(any=list(value))
        else:
            match = qmodels.MatchValue(value=value)
        conditions.append(qmodels.FieldCondition(key=key, match=match))

    return qmodels.Filter(must=conditions)


class QdrantVectorIndex(VectorIndex):
    """Dense + sparse search over a single Qdrant collection"""

    def __init__(
        self,
        client: Optional[AsyncQdrantClient] = None,
        collection: str = config.QDRANT_COLLECTION,
        url: str = config.QDRANT_URL,
        api_key: Optional[str] = config.QDRANT_API_KEY,
    ):
        self.client = client or AsyncQdrantClient(url=url, api_key=api_key)
        self.collection = collection

    async def ensure_collection(self, dimension: int) -> None:
        """Create the collection if missing (dense size must match the embedding model)"""
        if await self.client.collection_exists(self.collection):
            logger.info(f"Collection '{self.collection}' already exists")
            return

        logger.info(f"Creating collection '{self.collection}' (dense dimension {dimension})")
        await self.client.create_collection(
            collection_name=self.collection,
            vectors_config={
                DENSE_VECTOR_NAME: qmodels.VectorParams(size=dimension, distance=qmodels.Distance.COSINE),
            },
            sparse_vectors_config={
                SPARSE_VECTOR_NAME: qmodels.SparseVectorParams(),
            },
        )

    async def upsert(self, points: List[Dict[str, Any]]) -> None:
        if not points:
            return

        structs = []
        for point in points:
            vector = {DENSE_VECTOR_NAME: point["dense"]}
            sparse: SparseVector = point.get("sparse")
            if sparse is not None and len(sparse):
                vector[SPARSE_VECTOR_NAME] = qmodels.SparseVector(
                    indices=sparse.indices,
                    values=sparse.values,
                )
            structs.append(qmodels.PointStruct(id=point["id"], vector=vector, payload=point.get("payload", {})))

        await self.client.upsert(collection_name=self.collection, points=structs, wait=True)
        logger.info(f"Upserted {len(structs)} points into '{self.collection}'")

    async def search_dense(
        self,
        vector: List[float],
        filter: Optional[Dict[str, Any]] = None,
        limit: int = 10,
    ) -> List[RankedResult]:
        response = await self.client.query_points(
            collection_name=self.collection,
            query=vector,
            using=DENSE_VECTOR_NAME,
            query_filter=build_filter(filter),
            limit=limit,
            with_payload=True,
            with_vectors=False,
        )
        return [self._to_result(point) for point in response.points]

    async def search_sparse(
        self,
        vector: SparseVector,
        filter: Optional[Dict[str, Any]] = None,
        limit: int = 10,
    ) -> List[RankedResult]:
        if not len(vector):
            return []

        response = await self.client.query_points(
            collection_name=self.collection,
            query=qmodels.SparseVector(indices=vector.indices, values=vector.values),
            using=SPARSE_VECTOR_NAME,
            query_filter=build_filter(filter),
            limit=limit,
            with_payload=True,
            with_vectors=False,
        )
        return [self._to_result(point) for point in response.points]

    @staticmethod
    def _to_result(point) -> RankedResult:
        return RankedResult(id=str(point.id), payload=point.payload or {}, score=point.score)
