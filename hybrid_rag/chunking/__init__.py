"""
Chunking strategies.

- sliding_window: generic overlapping word windows
- smart: structure-aware chunking for legal documents (instrument spans +
  sentence windows, deduplicated)

Both accept ExtractedText or raw text and return TextChunk lists; outputs of
the two strategies can be pooled and passed through deduplicate_chunks().
"""

from .sliding_window import chunk_text
from .smart import (
    chunk_text_smart,
    deduplicate_chunks,
    extract_legal_spans,
    split_into_sentences,
)

__all__ = [
    "chunk_text",
    "chunk_text_smart",
    "deduplicate_chunks",
    "extract_legal_spans",
    "split_into_sentences",
]
