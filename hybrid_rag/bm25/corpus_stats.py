"""
Corpus statistics for BM25: vocabulary, document frequencies, chunk lengths.

One instance is shared by every ingestion and query of a process (the
RetrievalEngine owns it and hands it to the SparseEncoder). It is an
append-only structure:
- vocabulary indices are assigned in first-seen order and never reused
- no operation removes a term
- every ingest() counts as one more document, even for repeated text

Concurrency:
    Mutations are serialized by a lock. Readers take the same lock only to
    copy the few values they need (see snapshot()), so an encode never sees
    a half-applied ingest.

Persistence:
    Nothing is persisted automatically. save()/load() write and read a JSON
    snapshot so a restarted process can keep term indices aligned with the
    sparse vectors already stored in the vector index.
"""

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ..exceptions import InputError
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


@dataclass(frozen=True)
class CorpusSnapshot:
    """Consistent read view used by the sparse encoder"""
    total_documents: int
    average_doc_length: float
    vocabulary_size: int
    terms: Dict[str, Tuple[int, int]] = field(default_factory=dict)  # token -> (index, df)


class CorpusStatistics:
    """Vocabulary, document frequency table and chunk length statistics"""

    def __init__(self):
        self._lock = threading.Lock()
        self._vocabulary: Dict[str, int] = {}
        self._document_frequency: Dict[str, int] = {}
        self._document_lengths: List[int] = []
        self._length_sum = 0
        self._total_documents = 0
        self._average_doc_length = 0.0

    def ingest(self, text: str) -> None:
        """
        Add one chunk to the statistics.

        Tokenizes the text, records its length, recomputes the average length
        and increments the document frequency of each distinct token by one
        (assigning a fresh vocabulary index to unseen tokens).

        Args:
            text: Chunk text (empty text still counts as a zero-length document)
        """
        tokens = tokenize(text)
        with self._lock:
            self._add_tokens(tokens)

    def rebuild(self, documents: Iterable[str]) -> None:
        """
        Clear all state and re-ingest a corpus from scratch.

        Indices are reassigned in iteration order, so every previously
        assigned index is invalidated.

        Args:
            documents: Chunk texts
        """
        tokenized = [tokenize(doc) for doc in documents]
        with self._lock:
            self._clear()
            for tokens in tokenized:
                self._add_tokens(tokens)
            vocabulary_size = len(self._vocabulary)
        logger.info(f"Rebuilt vocabulary: {vocabulary_size} terms from {len(tokenized)} documents")

    def vocabulary_size(self) -> int:
        with self._lock:
            return len(self._vocabulary)

    @property
    def total_documents(self) -> int:
        with self._lock:
            return self._total_documents

    @property
    def average_doc_length(self) -> float:
        with self._lock:
            return self._average_doc_length

    @property
    def document_lengths(self) -> List[int]:
        with self._lock:
            return list(self._document_lengths)

    def document_frequency(self, token: str) -> int:
        """df of an already normalized token (0 if unseen)"""
        with self._lock:
            return self._document_frequency.get(token, 0)

    def index_of(self, token: str) -> Optional[int]:
        """Vocabulary index of an already normalized token (None if unseen)"""
        with self._lock:
            return self._vocabulary.get(token)

    def snapshot(self, tokens: Iterable[str]) -> CorpusSnapshot:
        """
        Copy everything needed to score the given tokens, atomically.

        Args:
            tokens: Normalized tokens of the text being encoded

        Returns:
            CorpusSnapshot with (index, df) for the tokens present in the vocabulary
        """
        with self._lock:
            terms = {}
            for token in set(tokens):
                index = self._vocabulary.get(token)
                if index is not None:
                    terms[token] = (index, self._document_frequency[token])
            return CorpusSnapshot(
                total_documents=self._total_documents,
                average_doc_length=self._average_doc_length,
                vocabulary_size=len(self._vocabulary),
                terms=terms,
            )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serializable copy of the full state"""
        with self._lock:
            return {
                "version": SNAPSHOT_VERSION,
                "vocabulary": dict(self._vocabulary),
                "document_frequency": dict(self._document_frequency),
                "document_lengths": list(self._document_lengths),
            }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CorpusStatistics":
        """
        Restore statistics produced by to_dict().

        Raises:
            InputError: If the snapshot is not internally consistent
        """
        if data.get("version") != SNAPSHOT_VERSION:
            raise InputError(f"Unsupported corpus snapshot version: {data.get('version')}")

        vocabulary = {str(k): int(v) for k, v in data.get("vocabulary", {}).items()}
        document_frequency = {str(k): int(v) for k, v in data.get("document_frequency", {}).items()}
        document_lengths = [int(n) for n in data.get("document_lengths", [])]

        if set(vocabulary) != set(document_frequency):
            raise InputError("Corpus snapshot vocabulary and document frequency table disagree")
        if sorted(vocabulary.values()) != list(range(len(vocabulary))):
            raise InputError("Corpus snapshot vocabulary indices are not contiguous")
        if any(df < 1 or df > len(document_lengths) for df in document_frequency.values()):
            raise InputError("Corpus snapshot document frequency out of range")

        stats = cls()
        stats._vocabulary = vocabulary
        stats._document_frequency = document_frequency
        stats._document_lengths = document_lengths
        stats._length_sum = sum(document_lengths)
        stats._total_documents = len(document_lengths)
        stats._average_doc_length = (
            stats._length_sum / stats._total_documents if stats._total_documents else 0.0
        )
        return stats

    def save(self, path: Union[str, Path]) -> None:
        """Write a JSON snapshot to disk"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = self.to_dict()
        path.write_text(json.dumps(data, ensure_ascii=False), encoding='utf-8')
        logger.info(f"Saved corpus statistics: {len(data['vocabulary'])} terms, {len(data['document_lengths'])} documents → {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> "CorpusStatistics":
        """Read a JSON snapshot written by save()"""
        path = Path(path)
        stats = cls.from_dict(json.loads(path.read_text(encoding='utf-8')))
        logger.info(f"Loaded corpus statistics from {path}: {stats.vocabulary_size()} terms")
        return stats

    # ------------------------------------------------------------------
    # Internal (caller holds the lock)
    # ------------------------------------------------------------------

    def _add_tokens(self, tokens: List[str]) -> None:
        self._document_lengths.append(len(tokens))
        self._length_sum += len(tokens)
        self._total_documents += 1
        self._average_doc_length = self._length_sum / self._total_documents

        for token in dict.fromkeys(tokens):  # Distinct, first-seen order
            if token not in self._vocabulary:
                self._vocabulary[token] = len(self._vocabulary)
            self._document_frequency[token] = self._document_frequency.get(token, 0) + 1

    def _clear(self) -> None:
        self._vocabulary.clear()
        self._document_frequency.clear()
        self._document_lengths = []
        self._length_sum = 0
        self._total_documents = 0
        self._average_doc_length = 0.0
