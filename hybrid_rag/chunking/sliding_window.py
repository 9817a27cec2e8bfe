"""
Generic sliding-window chunking over whitespace-separated words.

Words approximate tokens: a chunk holds `chunk_size` words and the next one
starts `chunk_size - chunk_overlap` words later, so consecutive chunks share
`chunk_overlap` words of context.
"""

import logging
import math
from typing import List

from .. import config
from ..models import TextChunk
from .common import ChunkSource, build_metadata, unpack_source, validate_window

logger = logging.getLogger(__name__)


def chunk_text(
    source: ChunkSource,
    chunk_size: int = config.CHUNK_SIZE,
    chunk_overlap: int = config.CHUNK_OVERLAP,
) -> List[TextChunk]:
    """
    Split text into overlapping word windows.

    Args:
        source: ExtractedText (its metadata is copied into every chunk) or raw text
        chunk_size: Words per chunk
        chunk_overlap: Words shared with the previous chunk

    Returns:
        Chunks in document order. Each chunk's metadata records the word span
        (start_word inclusive, end_word exclusive) and an estimate of the total
        chunk count: ceil(word_count / (chunk_size - chunk_overlap)).
        Empty or whitespace-only text yields [].

    Raises:
        InputError: If chunk_overlap >= chunk_size
    """
    validate_window(chunk_size, chunk_overlap)
    text, base_metadata = unpack_source(source)

    words = text.split()
    if not words:
        return []

    stride = chunk_size - chunk_overlap
    total_chunks = math.ceil(len(words) / stride)
    logger.info(f"Chunking text: {len(words)} words, chunk_size={chunk_size}, overlap={chunk_overlap}")

    chunks = []
    start = 0
    while start < len(words):
        end = min(start + chunk_size, len(words))
        chunk_index = len(chunks)

        chunks.append(TextChunk(
            text=" ".join(words[start:end]),
            chunk_index=chunk_index,
            metadata=build_metadata(
                base_metadata,
                chunk_index=chunk_index,
                start_word=start,
                end_word=end,
                total_chunks=total_chunks,
            ),
        ))
        logger.debug(f"Chunk #{chunk_index}: words {start}-{end}")

        if end == len(words):
            break
        start += stride

    logger.info(f"Created {len(chunks)} chunks")
    return chunks
