"""
Ingestion and hybrid query orchestration.

Ingestion (one file):
1. Extract text (extraction subsystem)
2. Store original bytes (object store)
3. Chunk (generic sliding window or structure-aware)
4. Count every chunk in the corpus statistics
5. Embed chunks in batches of EMBEDDING_BATCH_SIZE, batches in parallel
6. Encode every chunk as a BM25 sparse vector
7. Upsert all points in one vector index call

Query:
1. Embed the query and encode its sparse vector (in parallel)
2. Dense and sparse searches, each over-fetching 2 × limit (in parallel)
3. Weighted fusion

Collaborator failures surface as DependencyError naming the collaborator;
nothing is retried here.
"""

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Dict, List, Optional, TypeVar

from . import config
from .engine import RetrievalEngine
from .exceptions import DependencyError, InputError
from .models import ChunkMetadata, ExtractedText, IngestionResult, RankedResult, TextChunk
from .providers.base import EmbeddingProvider, ObjectStore, TextExtractor, VectorIndex

logger = logging.getLogger(__name__)

T = TypeVar("T")

FOLDER_FILTER_KEY = "metadata.folder_paths"
PREVIEW_CHARS = 200

# Chunk provenance is owned by extraction and chunking, not by the caller
RESERVED_METADATA_KEYS = frozenset(ChunkMetadata.model_fields) | {"file_handle"}


async def _guard(dependency: str, awaitable: Awaitable[T]) -> T:
    """Await a collaborator call, converting any failure into DependencyError"""
    try:
        return await awaitable
    except DependencyError:
        raise
    except Exception as e:
        logger.error(f"{dependency} call failed: {e}")
        raise DependencyError(dependency, str(e)) from e


def enhance_metadata_for_folder_search(custom_metadata: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Add every ancestor folder of `path_file_external` as `folder_paths`.

    Example:
        {"path_file_external": "/legal/2024/portaria.txt"}
        → adds "folder_paths": ["/legal", "/legal/2024"]

    Lets the vector index filter a whole folder subtree with one equality match.
    """
    metadata = dict(custom_metadata or {})
    path = metadata.get("path_file_external")
    if not path:
        return metadata

    parts = [part for part in str(path).split("/") if part]
    folders = []
    current = ""
    for part in parts[:-1]:  # Last part is the file name
        current += "/" + part
        folders.append(current)

    metadata["folder_paths"] = folders
    return metadata


class IngestionPipeline:
    """Extract → store → chunk → statistics → embed → sparse encode → upsert"""

    def __init__(
        self,
        engine: RetrievalEngine,
        extractor: TextExtractor,
        embeddings: EmbeddingProvider,
        object_store: ObjectStore,
        vector_index: VectorIndex,
        chunk_size: int = config.CHUNK_SIZE,
        chunk_overlap: Optional[int] = None,
        batch_size: int = config.EMBEDDING_BATCH_SIZE,
    ):
        if batch_size <= 0:
            raise InputError(f"batch_size must be positive, got {batch_size}")
        self.engine = engine
        self.extractor = extractor
        self.embeddings = embeddings
        self.object_store = object_store
        self.vector_index = vector_index
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.batch_size = batch_size

    async def ingest_file(
        self,
        content: bytes,
        filename: str,
        mime_type: str,
        metadata: Optional[Dict[str, Any]] = None,
        smart: bool = False,
    ) -> IngestionResult:
        """
        Run the full ingestion pipeline for one file.

        Args:
            content: File bytes
            filename: Original filename
            mime_type: MIME type (passed to the extractor)
            metadata: Caller metadata copied into every chunk payload
            smart: Use the structure-aware chunker instead of the sliding window

        Returns:
            IngestionResult summary

        Raises:
            InputError: Extractor rejected the file or chunk configuration is invalid
            InputError: Caller metadata uses a reserved key (checked before any side effect)
            DependencyError: A collaborator call failed

        Warning:
            Corpus statistics are updated before embeddings are requested. If
            embedding or upsert fails, the statistics keep counting chunks that
            never reached the vector index. There is no rollback; callers that
            need strict consistency must retry the whole file as one unit.
        """
        reserved = sorted(RESERVED_METADATA_KEYS.intersection(metadata or {}))
        if reserved:
            raise InputError(f"metadata keys reserved for chunk provenance: {', '.join(reserved)}")

        try:
            extracted = self.extractor.extract(content, filename, mime_type)
        except InputError:
            raise
        except Exception as e:
            logger.error(f"extraction call failed for {filename}: {e}")
            raise DependencyError("extraction", str(e)) from e

        file_handle = await _guard("object store", self.object_store.put(content, filename, mime_type))

        custom_metadata = enhance_metadata_for_folder_search(metadata)
        source = ExtractedText(
            text=extracted.text,
            metadata={**extracted.metadata, **custom_metadata, "file_handle": file_handle},
        )

        logger.info(f"Chunking {filename} ({'smart' if smart else 'generic'})")
        if smart:
            overlap = self.chunk_overlap if self.chunk_overlap is not None else config.SMART_CHUNK_OVERLAP
            chunks = self.engine.chunk_smart(source, self.chunk_size, overlap)
        else:
            overlap = self.chunk_overlap if self.chunk_overlap is not None else config.CHUNK_OVERLAP
            chunks = self.engine.chunk(source, self.chunk_size, overlap)

        for chunk in chunks:
            self.engine.ingest_for_scoring(chunk.text)
        logger.debug(f"Added {len(chunks)} chunks to corpus statistics (vocabulary: {self.engine.vocabulary_size()} terms)")

        try:
            vectors = await self.embed_chunks([chunk.text for chunk in chunks])
        except DependencyError:
            logger.warning(
                f"Embedding failed after corpus statistics were updated with {len(chunks)} chunks "
                f"of {filename}; statistics now reference content missing from the index"
            )
            raise

        points = self.build_points(chunks, vectors)
        await _guard("vector index", self.vector_index.upsert(points))
        logger.info(f"Indexed {len(points)} chunks from {filename}")

        return IngestionResult(
            filename=filename,
            mime_type=mime_type,
            file_handle=file_handle,
            chunks=len(chunks),
            preview=extracted.text[:PREVIEW_CHARS] + ("..." if len(extracted.text) > PREVIEW_CHARS else ""),
            metadata={**extracted.metadata, **custom_metadata},
        )

    async def embed_chunks(self, texts: List[str]) -> List[List[float]]:
        """
        Embed texts in fixed-size batches, all batches in parallel.

        The first failing batch cancels the batches still in flight.

        Returns:
            One vector per text, in the same order as `texts`

        Raises:
            DependencyError: A batch failed or returned the wrong number of vectors
        """
        if not texts:
            return []

        batches = [texts[i:i + self.batch_size] for i in range(0, len(texts), self.batch_size)]
        logger.info(f"Generating embeddings for {len(texts)} chunks ({len(batches)} batches of up to {self.batch_size})")

        tasks = [
            asyncio.create_task(_guard("embedding provider", self.embeddings.embed_documents(batch)))
            for batch in batches
        ]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            # Cancel batches still in flight, then let them unwind
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        vectors = []
        for batch, batch_vectors in zip(batches, results):
            if len(batch_vectors) != len(batch):
                raise DependencyError(
                    "embedding provider",
                    f"returned {len(batch_vectors)} vectors for a batch of {len(batch)} texts",
                )
            vectors.extend(batch_vectors)

        return vectors

    def build_points(self, chunks: List[TextChunk], vectors: List[List[float]]) -> List[Dict[str, Any]]:
        """Pair chunks with their dense vector (by position) and a fresh sparse vector"""
        points = []
        for chunk, dense in zip(chunks, vectors):
            points.append({
                "id": str(uuid.uuid4()),
                "dense": dense,
                "sparse": self.engine.encode_sparse(chunk.text),
                "payload": {
                    "text": chunk.text,
                    "chunk_index": chunk.chunk_index,
                    "metadata": chunk.metadata.to_payload(),
                },
            })
        return points


class HybridSearcher:
    """Dense + sparse retrieval with weighted fusion"""

    def __init__(
        self,
        engine: RetrievalEngine,
        embeddings: EmbeddingProvider,
        vector_index: VectorIndex,
    ):
        self.engine = engine
        self.embeddings = embeddings
        self.vector_index = vector_index

    async def search(
        self,
        query: str,
        limit: int = 5,
        alpha: float = config.DEFAULT_ALPHA,
        filter: Optional[Dict[str, Any]] = None,
        path_file_external: Optional[str] = None,
    ) -> List[RankedResult]:
        """
        Hybrid search.

        Args:
            query: Natural language query
            limit: Number of fused results to return
            alpha: Dense weight in [0, 1] (1.0 = dense only, 0.0 = sparse only)
            filter: Payload filter passed to both searches
            path_file_external: Restrict to files under this folder

        Returns:
            Fused results (score = fused score)

        Raises:
            InputError: alpha outside [0, 1] or non-positive limit
            DependencyError: Embedding or vector index call failed
        """
        if not 0.0 <= alpha <= 1.0:
            raise InputError(f"alpha must be within [0, 1], got {alpha}")
        if limit <= 0:
            raise InputError(f"limit must be positive, got {limit}")
        if not query or not query.strip():
            return []

        search_filter = self._with_folder(filter, path_file_external)

        dense_vector, sparse_vector = await asyncio.gather(
            _guard("embedding provider", self.embeddings.embed_query(query)),
            asyncio.to_thread(self.engine.encode_sparse, query),
        )

        fetch = 2 * limit
        dense_results, sparse_results = await asyncio.gather(
            _guard("vector index", self.vector_index.search_dense(dense_vector, search_filter, fetch)),
            _guard("vector index", self.vector_index.search_sparse(sparse_vector, search_filter, fetch)),
        )
        logger.debug(f"Hybrid search: {len(dense_results)} dense, {len(sparse_results)} sparse candidates (sparse terms: {len(sparse_vector)})")

        return self.engine.fuse_rankings(dense_results, sparse_results, alpha=alpha, limit=limit)

    async def search_dense(
        self,
        query: str,
        limit: int = 5,
        filter: Optional[Dict[str, Any]] = None,
        path_file_external: Optional[str] = None,
    ) -> List[RankedResult]:
        """Semantic-only search (no sparse side, no fusion)"""
        if not query or not query.strip():
            return []
        vector = await _guard("embedding provider", self.embeddings.embed_query(query))
        search_filter = self._with_folder(filter, path_file_external)
        return await _guard("vector index", self.vector_index.search_dense(vector, search_filter, limit))

    @staticmethod
    def _with_folder(filter: Optional[Dict[str, Any]], path_file_external: Optional[str]) -> Optional[Dict[str, Any]]:
        if not path_file_external:
            return filter
        folder = "/" + path_file_external.strip("/")
        return {**(filter or {}), FOLDER_FILTER_KEY: folder}
