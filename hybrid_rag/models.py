"""
Shared data model for chunking, sparse encoding and fusion.

Plain dataclasses for values produced and consumed inside one call
(chunks, sparse vectors, ranked results). Chunk metadata is a pydantic model:
known provenance fields are explicit, anything else a caller attaches
(tags, external paths, ...) is kept as an extra field.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class InstrumentType(Enum):
    """Numbered legal/administrative instrument types recognized by the smart chunker"""
    ORDINANCE = "ordinance"  # Generic type (PORTARIA)
    DECREE = "decree"
    LAW = "law"
    RESOLUTION = "resolution"
    NORMATIVE_INSTRUCTION = "normative-instruction"
    NOTICE = "notice"
    OFFICIAL_LETTER = "official-letter"
    OPINION = "opinion"


class ChunkMetadata(BaseModel):
    """
    Provenance attached to every chunk.

    Unknown keyword arguments are accepted and kept in `model_extra`,
    so extraction metadata and caller metadata flow through untouched.
    """
    model_config = ConfigDict(extra="allow")

    filename: Optional[str] = None
    file_type: Optional[str] = None
    chunk_index: Optional[int] = None

    # Generic sliding window (word offsets)
    start_word: Optional[int] = None
    end_word: Optional[int] = None
    total_chunks: Optional[int] = None

    # Sentence-aware pass
    word_count: Optional[int] = None

    # Legal instrument spans (character offsets)
    is_legal_document: bool = False
    document_number: Optional[str] = None
    document_type: Optional[str] = None
    document_part: Optional[int] = None
    start_offset: Optional[int] = None
    end_offset: Optional[int] = None

    @property
    def extras(self) -> Dict[str, Any]:
        """Caller/extraction supplied fields that are not part of the known schema"""
        return dict(self.model_extra or {})

    def to_payload(self) -> Dict[str, Any]:
        """JSON-safe dict for vector index payloads (None fields dropped)"""
        return self.model_dump(mode="json", exclude_none=True)


@dataclass
class TextChunk:
    """A bounded span of document text - the unit of indexing and retrieval"""
    text: str
    chunk_index: int  # Ordering hint, not contiguous across strategies
    metadata: ChunkMetadata = field(default_factory=ChunkMetadata)


@dataclass
class LegalDocumentSpan:
    """Instrument span found while scanning a document (transient)"""
    text: str
    instrument_type: InstrumentType
    instrument_number: str  # Matched header, e.g. "PORTARIA Nº 123/2024"
    start_offset: int
    end_offset: int


@dataclass
class SparseVector:
    """Parallel index/value arrays - only non-zero (positive) BM25 weights are stored"""
    indices: List[int] = field(default_factory=list)
    values: List[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.indices)

    def to_dict(self) -> Dict[str, List]:
        return {"indices": list(self.indices), "values": list(self.values)}


@dataclass
class RankedResult:
    """Single search hit from the vector index, or a fused hit"""
    id: Union[str, int]
    payload: Dict[str, Any] = field(default_factory=dict)
    score: float = 0.0
    dense_score: Optional[float] = None   # Set by fusion
    sparse_score: Optional[float] = None  # Set by fusion


@dataclass
class ExtractedText:
    """Output of the extraction subsystem"""
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class IngestionResult:
    """Summary of one ingested file"""
    filename: str
    mime_type: str
    file_handle: str
    chunks: int
    preview: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AnswerSource:
    """A retrieved chunk cited by an answer"""
    filename: Optional[str]
    url: Optional[str]  # Signed download URL; None when the chunk has no stored file
    relevance: float
    excerpt: str


@dataclass
class ChatAnswer:
    """LLM answer grounded in retrieved chunks"""
    answer: str
    sources: List[AnswerSource] = field(default_factory=list)
