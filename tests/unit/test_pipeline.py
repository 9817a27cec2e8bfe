"""
Unit tests for ingestion and hybrid query orchestration.

Collaborators are mocks; the retrieval engine is real.
"""

import asyncio
import logging

import pytest
from unittest.mock import AsyncMock

from hybrid_rag.exceptions import DependencyError, InputError
from hybrid_rag.models import SparseVector
from hybrid_rag.pipeline import HybridSearcher, IngestionPipeline, enhance_metadata_for_folder_search
from hybrid_rag.providers.text_extraction import PlainTextExtractor


CONTENT = " ".join(f"termo{i}" for i in range(120)).encode("utf-8")


@pytest.fixture
def pipeline(engine, mock_extractor, mock_embeddings, mock_object_store, mock_vector_index):
    return IngestionPipeline(
        engine=engine,
        extractor=mock_extractor,
        embeddings=mock_embeddings,
        object_store=mock_object_store,
        vector_index=mock_vector_index,
        chunk_size=50,
        chunk_overlap=10,
    )


def upserted_points(mock_vector_index):
    return mock_vector_index.upsert.await_args.args[0]


class TestEnhanceMetadata:
    """Test folder path enrichment"""

    def test_folder_paths(self):
        metadata = enhance_metadata_for_folder_search({"path_file_external": "/legal/2024/portaria.txt"})
        assert metadata["folder_paths"] == ["/legal", "/legal/2024"]
        assert metadata["path_file_external"] == "/legal/2024/portaria.txt"

    def test_relative_path(self):
        metadata = enhance_metadata_for_folder_search({"path_file_external": "a/b/c/file.md"})
        assert metadata["folder_paths"] == ["/a", "/a/b", "/a/b/c"]

    def test_root_file(self):
        assert enhance_metadata_for_folder_search({"path_file_external": "file.txt"})["folder_paths"] == []

    def test_no_path(self):
        assert enhance_metadata_for_folder_search({"tag": "x"}) == {"tag": "x"}
        assert enhance_metadata_for_folder_search(None) == {}

    def test_input_not_mutated(self):
        original = {"path_file_external": "/a/b.txt"}
        enhance_metadata_for_folder_search(original)
        assert "folder_paths" not in original


class TestIngestFile:
    """Test the full ingestion flow"""

    @pytest.mark.asyncio
    async def test_happy_path(self, pipeline, engine, mock_object_store, mock_vector_index):
        result = await pipeline.ingest_file(CONTENT, "boletim.txt", "text/plain")

        assert result.filename == "boletim.txt"
        assert result.file_handle == "1234/boletim.txt"
        assert result.chunks == 3
        assert result.preview.startswith("termo0 termo1")
        assert result.preview.endswith("...")

        mock_object_store.put.assert_awaited_once_with(CONTENT, "boletim.txt", "text/plain")
        mock_vector_index.upsert.assert_awaited_once()
        assert len(upserted_points(mock_vector_index)) == 3
        assert engine.stats.total_documents == 3

    @pytest.mark.asyncio
    async def test_points_aligned_with_chunks(self, pipeline, engine, mock_embeddings, mock_vector_index):
        await pipeline.ingest_file(CONTENT, "boletim.txt", "text/plain")

        points = upserted_points(mock_vector_index)
        for point in points:
            text = point["payload"]["text"]
            assert point["dense"] == mock_embeddings.fake_vector(text)
            assert isinstance(point["sparse"], SparseVector)
            assert len(point["sparse"]) > 0
        assert len({point["id"] for point in points}) == 3
        assert [p["payload"]["chunk_index"] for p in points] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_payload_metadata(self, pipeline, mock_vector_index):
        await pipeline.ingest_file(
            CONTENT, "boletim.txt", "text/plain",
            metadata={"path_file_external": "/gazette/2024/boletim.txt", "source": "DOU"},
        )

        metadata = upserted_points(mock_vector_index)[0]["payload"]["metadata"]
        assert metadata["filename"] == "boletim.txt"
        assert metadata["file_handle"] == "1234/boletim.txt"
        assert metadata["source"] == "DOU"
        assert metadata["folder_paths"] == ["/gazette", "/gazette/2024"]
        assert metadata["start_word"] == 0
        assert "document_number" not in metadata  # None fields dropped

    @pytest.mark.asyncio
    async def test_smart_chunking(self, pipeline, mock_vector_index):
        content = "PORTARIA Nº 10/2024 nomeia servidor. PORTARIA Nº 11/2024 exonera servidor.".encode("utf-8")

        result = await pipeline.ingest_file(content, "dou.txt", "text/plain", smart=True)

        payloads = [p["payload"] for p in upserted_points(mock_vector_index)]
        numbers = [p["metadata"].get("document_number") for p in payloads]
        assert "PORTARIA Nº 10/2024" in numbers
        assert "PORTARIA Nº 11/2024" in numbers
        assert result.chunks == len(payloads)

    @pytest.mark.asyncio
    async def test_empty_document(self, pipeline, engine, mock_embeddings, mock_vector_index):
        result = await pipeline.ingest_file(b"   ", "vazio.txt", "text/plain")

        assert result.chunks == 0
        mock_embeddings.embed_documents.assert_not_awaited()
        assert upserted_points(mock_vector_index) == []
        assert engine.stats.total_documents == 0

    @pytest.mark.asyncio
    async def test_unsupported_type_is_input_error(self, engine, mock_embeddings, mock_object_store, mock_vector_index):
        pipeline = IngestionPipeline(engine, PlainTextExtractor(), mock_embeddings, mock_object_store, mock_vector_index)

        with pytest.raises(InputError):
            await pipeline.ingest_file(b"%PDF", "a.pdf", "application/pdf")

        mock_object_store.put.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("metadata", [{"document_type": 7}, {"chunk_index": 3, "tag": "x"}, {"file_handle": "other"}])
    async def test_reserved_metadata_rejected_before_store(self, pipeline, engine, mock_extractor, mock_object_store, metadata):
        with pytest.raises(InputError, match="reserved"):
            await pipeline.ingest_file(CONTENT, "boletim.txt", "text/plain", metadata=metadata)

        mock_extractor.extract.assert_not_called()
        mock_object_store.put.assert_not_awaited()
        assert engine.stats.total_documents == 0

    @pytest.mark.asyncio
    async def test_extraction_failure(self, pipeline, mock_extractor):
        mock_extractor.extract.side_effect = RuntimeError("corrupt file")

        with pytest.raises(DependencyError) as exc_info:
            await pipeline.ingest_file(CONTENT, "boletim.txt", "text/plain")

        assert exc_info.value.dependency == "extraction"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_object_store_failure(self, pipeline, engine, mock_object_store):
        mock_object_store.put.side_effect = ConnectionError("bucket unreachable")

        with pytest.raises(DependencyError) as exc_info:
            await pipeline.ingest_file(CONTENT, "boletim.txt", "text/plain")

        assert exc_info.value.dependency == "object store"
        assert "bucket unreachable" in str(exc_info.value)
        assert engine.stats.total_documents == 0

    @pytest.mark.asyncio
    async def test_embedding_failure_leaves_statistics(self, pipeline, engine, mock_embeddings, mock_vector_index, caplog):
        """Statistics are not rolled back when embedding fails (documented hazard)"""
        mock_embeddings.embed_documents.side_effect = TimeoutError("deadline exceeded")

        with caplog.at_level(logging.WARNING, logger="hybrid_rag.pipeline"):
            with pytest.raises(DependencyError) as exc_info:
                await pipeline.ingest_file(CONTENT, "boletim.txt", "text/plain")

        assert exc_info.value.dependency == "embedding provider"
        assert engine.stats.total_documents == 3
        mock_vector_index.upsert.assert_not_awaited()
        assert any("statistics" in record.message for record in caplog.records if record.levelno == logging.WARNING)

    @pytest.mark.asyncio
    async def test_vector_index_failure(self, pipeline, mock_vector_index):
        mock_vector_index.upsert.side_effect = RuntimeError("503")

        with pytest.raises(DependencyError) as exc_info:
            await pipeline.ingest_file(CONTENT, "boletim.txt", "text/plain")

        assert exc_info.value.dependency == "vector index"

    def test_invalid_batch_size(self, engine, mock_extractor, mock_embeddings, mock_object_store, mock_vector_index):
        with pytest.raises(InputError):
            IngestionPipeline(engine, mock_extractor, mock_embeddings, mock_object_store, mock_vector_index, batch_size=0)

    @pytest.mark.asyncio
    async def test_invalid_window(self, engine, mock_extractor, mock_embeddings, mock_object_store, mock_vector_index):
        pipeline = IngestionPipeline(
            engine, mock_extractor, mock_embeddings, mock_object_store, mock_vector_index,
            chunk_size=50, chunk_overlap=50,
        )
        with pytest.raises(InputError):
            await pipeline.ingest_file(CONTENT, "boletim.txt", "text/plain")


class TestEmbedChunks:
    """Test batched concurrent embedding"""

    @pytest.mark.asyncio
    async def test_batches_and_order(self, pipeline, mock_embeddings):
        """600 texts, batch 250 → 3 calls; output order survives out-of-order completion"""
        pipeline.batch_size = 250
        texts = [f"chunk {i}" for i in range(600)]

        async def slow_first_batch(batch):
            if batch[0] == "chunk 0":
                await asyncio.sleep(0.05)
            return [mock_embeddings.fake_vector(t) for t in batch]

        mock_embeddings.embed_documents.side_effect = slow_first_batch

        vectors = await pipeline.embed_chunks(texts)

        sizes = [len(call.args[0]) for call in mock_embeddings.embed_documents.await_args_list]
        assert sizes == [250, 250, 100]
        assert vectors == [mock_embeddings.fake_vector(t) for t in texts]

    @pytest.mark.asyncio
    async def test_wrong_vector_count(self, pipeline, mock_embeddings):
        mock_embeddings.embed_documents.side_effect = lambda batch: [[0.0]] * (len(batch) - 1)

        with pytest.raises(DependencyError) as exc_info:
            await pipeline.embed_chunks(["a", "b", "c"])

        assert exc_info.value.dependency == "embedding provider"

    @pytest.mark.asyncio
    async def test_failure_cancels_sibling_batches(self, pipeline, mock_embeddings):
        """A failing batch stops the slower batches still waiting on the provider"""
        pipeline.batch_size = 2
        finished, cancelled = [], []

        async def embed(batch):
            if batch[0] == "a":
                raise RuntimeError("quota exceeded")
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.append(batch[0])
                raise
            finished.append(batch[0])
            return [[0.0]] * len(batch)

        mock_embeddings.embed_documents.side_effect = embed

        with pytest.raises(DependencyError) as exc_info:
            await asyncio.wait_for(pipeline.embed_chunks(["a", "b", "c", "d", "e"]), timeout=2)

        assert exc_info.value.dependency == "embedding provider"
        assert "quota exceeded" in str(exc_info.value)
        assert sorted(cancelled) == ["c", "e"]
        assert finished == []

    @pytest.mark.asyncio
    async def test_empty(self, pipeline, mock_embeddings):
        assert await pipeline.embed_chunks([]) == []
        mock_embeddings.embed_documents.assert_not_awaited()


class TestHybridSearcher:
    """Test the query flow"""

    @pytest.fixture
    def searcher(self, seeded_engine, mock_embeddings, mock_vector_index):
        return HybridSearcher(seeded_engine, mock_embeddings, mock_vector_index)

    @pytest.mark.asyncio
    async def test_search_fuses(self, searcher):
        results = await searcher.search("portaria de nomeação", limit=2, alpha=0.5)

        assert [r.id for r in results] == ["b", "a"]
        assert results[0].score == pytest.approx(0.60)
        assert results[0].payload == {"text": "dense b"}

    @pytest.mark.asyncio
    async def test_over_fetch_and_vectors(self, searcher, seeded_engine, mock_embeddings, mock_vector_index):
        query = "portaria de nomeação"
        filter = {"metadata.source": "DOU"}

        await searcher.search(query, limit=3, filter=filter)

        mock_embeddings.embed_query.assert_awaited_once_with(query)
        mock_vector_index.search_dense.assert_awaited_once_with([0.1, 0.2], filter, 6)
        sparse_args = mock_vector_index.search_sparse.await_args.args
        assert sparse_args[0] == seeded_engine.encode_sparse(query)
        assert sparse_args[1:] == (filter, 6)

    @pytest.mark.asyncio
    async def test_query_not_ingested(self, searcher, seeded_engine):
        before = seeded_engine.stats.total_documents
        await searcher.search("orçamento anual")
        assert seeded_engine.stats.total_documents == before

    @pytest.mark.asyncio
    async def test_folder_filter(self, searcher, mock_vector_index):
        await searcher.search("lei", filter={"tag": "x"}, path_file_external="legal/2024/")

        expected = {"tag": "x", "metadata.folder_paths": "/legal/2024"}
        assert mock_vector_index.search_dense.await_args.args[1] == expected
        assert mock_vector_index.search_sparse.await_args.args[1] == expected

    @pytest.mark.asyncio
    @pytest.mark.parametrize("alpha", [-0.5, 1.01])
    async def test_invalid_alpha(self, searcher, mock_embeddings, alpha):
        with pytest.raises(InputError):
            await searcher.search("lei", alpha=alpha)
        mock_embeddings.embed_query.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_limit(self, searcher):
        with pytest.raises(InputError):
            await searcher.search("lei", limit=0)

    @pytest.mark.asyncio
    async def test_blank_query(self, searcher, mock_vector_index):
        assert await searcher.search("   ") == []
        mock_vector_index.search_dense.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_embedding_failure(self, searcher, mock_embeddings):
        mock_embeddings.embed_query.side_effect = RuntimeError("quota")

        with pytest.raises(DependencyError) as exc_info:
            await searcher.search("lei")

        assert exc_info.value.dependency == "embedding provider"

    @pytest.mark.asyncio
    async def test_vector_index_failure(self, searcher, mock_vector_index):
        mock_vector_index.search_sparse = AsyncMock(side_effect=RuntimeError("timeout"))

        with pytest.raises(DependencyError) as exc_info:
            await searcher.search("lei")

        assert exc_info.value.dependency == "vector index"

    @pytest.mark.asyncio
    async def test_search_dense(self, searcher, mock_vector_index):
        results = await searcher.search_dense("lei", limit=4, path_file_external="/legal")

        assert [r.id for r in results] == ["a", "b"]
        mock_vector_index.search_dense.assert_awaited_once_with([0.1, 0.2], {"metadata.folder_paths": "/legal"}, 4)
        mock_vector_index.search_sparse.assert_not_awaited()
