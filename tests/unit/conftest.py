"""Unit test configuration - shared fixtures, no network"""

import pytest
from unittest.mock import AsyncMock, Mock

from hybrid_rag.bm25 import CorpusStatistics
from hybrid_rag.engine import RetrievalEngine
from hybrid_rag.models import ExtractedText, RankedResult


SAMPLE_CORPUS = [
    "Portaria de nomeação de servidores do ministério",
    "Decreto regulamenta a lei de licitações e contratos",
    "Resolução sobre o orçamento anual do conselho",
]


@pytest.fixture
def stats():
    """Fresh corpus statistics (one per test)"""
    return CorpusStatistics()


@pytest.fixture
def engine():
    """Engine over fresh statistics"""
    return RetrievalEngine()


@pytest.fixture
def seeded_engine():
    """Engine with a small Portuguese corpus already ingested"""
    engine = RetrievalEngine()
    engine.rebuild_vocabulary(SAMPLE_CORPUS)
    return engine


@pytest.fixture
def extracted_text():
    """Extraction output with provenance metadata"""
    return ExtractedText(
        text=" ".join(f"word{i}" for i in range(120)),
        metadata={"filename": "boletim.txt", "file_type": "text/plain"},
    )


@pytest.fixture
def mock_extractor():
    extractor = Mock()
    extractor.extract.side_effect = lambda content, filename, mime_type: ExtractedText(
        text=content.decode("utf-8"),
        metadata={"filename": filename, "file_type": mime_type},
    )
    return extractor


@pytest.fixture
def mock_embeddings():
    """
    Embedding provider whose vectors are derived from the text they came from
    (provider.fake_vector), so tests can check vectors stay aligned with chunks.
    """
    def fake_vector(text):
        return [float(len(text)), float(sum(map(ord, text)) % 9973)]

    provider = Mock()
    provider.fake_vector = fake_vector
    provider.embed_documents = AsyncMock(side_effect=lambda texts: [fake_vector(t) for t in texts])
    provider.embed_query = AsyncMock(return_value=[0.1, 0.2])
    return provider


@pytest.fixture
def mock_object_store():
    store = Mock()
    store.put = AsyncMock(return_value="1234/boletim.txt")
    return store


@pytest.fixture
def mock_vector_index():
    index = Mock()
    index.upsert = AsyncMock(return_value=None)
    index.search_dense = AsyncMock(return_value=[
        RankedResult("a", {"text": "dense a"}, 0.9),
        RankedResult("b", {"text": "dense b"}, 0.4),
    ])
    index.search_sparse = AsyncMock(return_value=[
        RankedResult("b", {"text": "sparse b"}, 0.8),
        RankedResult("c", {"text": "sparse c"}, 0.5),
    ])
    return index
