"""
Unit tests for BM25 sparse vector encoding.
"""

import pytest

from hybrid_rag.bm25 import CorpusStatistics, SparseEncoder, bm25_term_score, tokenize
from hybrid_rag.bm25.stemmer import stem


@pytest.fixture
def encoder(seeded_engine):
    return seeded_engine.encoder


class TestSparseEncoder:
    """Test text → sparse vector"""

    def test_indices_distinct_and_values_positive(self, encoder):
        vector = encoder.encode("portaria portaria decreto lei orçamento servidores")

        assert len(vector) > 0
        assert len(set(vector.indices)) == len(vector.indices)
        assert all(value > 0 for value in vector.values)
        assert len(vector.indices) == len(vector.values)

    def test_indices_match_vocabulary(self, encoder):
        vector = encoder.encode("decreto")
        assert vector.indices == [encoder.stats.index_of(stem("decreto"))]

    def test_value_is_bm25_weight(self, encoder):
        """Query is scored as a tiny document against corpus statistics"""
        token = stem("decreto")
        stats = encoder.stats

        vector = encoder.encode("decreto decreto conselho")

        expected = bm25_term_score(
            term_frequency=2,
            document_frequency=stats.document_frequency(token),
            doc_length=len(tokenize("decreto decreto conselho")),
            total_documents=stats.total_documents,
            avg_doc_length=stats.average_doc_length,
        )
        position = vector.indices.index(stats.index_of(token))
        assert vector.values[position] == pytest.approx(expected)

    def test_unknown_terms_skipped(self, encoder):
        vector = encoder.encode("kubernetes decreto")
        assert vector.indices == [encoder.stats.index_of(stem("decreto"))]

    def test_only_unknown_terms(self, encoder):
        assert len(encoder.encode("kubernetes docker")) == 0

    def test_empty_text(self, encoder):
        assert len(encoder.encode("")) == 0
        assert len(encoder.encode("de que para")) == 0  # Stopwords only

    def test_empty_vocabulary(self):
        encoder = SparseEncoder(CorpusStatistics())
        vector = encoder.encode("portaria decreto")
        assert vector.indices == []
        assert vector.values == []

    def test_encoding_does_not_ingest(self, encoder):
        """Queries never change the statistics"""
        before = encoder.stats.to_dict()
        encoder.encode("portaria orçamento kubernetes")
        assert encoder.stats.to_dict() == before

    def test_to_dict(self, encoder):
        vector = encoder.encode("decreto")
        assert vector.to_dict() == {"indices": vector.indices, "values": vector.values}
