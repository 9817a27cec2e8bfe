"""
Structure-aware chunking for legal/administrative documents.

Official gazettes and bulletins pack many numbered instruments
("PORTARIA Nº 123/2024", "DECRETO Nº 45/2023", ...) into one file. Plain word
windows cut straight through them, so retrieval for "portaria 123/2024"
returns fragments of its neighbours. This chunker runs two passes over the
same text and pools the results:

1. Legal pass: every instrument header opens a span that ends at the next
   header (any type), at the first section marker after the operative clause
   ("RESOLVE:"), or after MAX_SPAN_CHARS - whichever comes first. Short spans
   become one chunk tagged with the instrument; long ones are split into
   labelled parts.
2. Sentence pass: sentence-aware windows over the whole text, never splitting
   a citation such as "Art. 5º" or "§ 2º" across chunks.

Pooled chunks are deduplicated on their first 100 normalized characters.

Chunk index ranges keep the origin visible:
- legal spans: span_index (single) or span_index * 100 + part (multi-part)
- sentence windows: 1000, 1001, ...
"""

import logging
import re
from typing import Any, Dict, List

from .. import config
from ..models import LegalDocumentSpan, TextChunk
from .common import ChunkSource, build_metadata, unpack_source, validate_window
from .legal_patterns import (
    CITATION_FRAGMENT,
    INSTRUMENT_PATTERNS,
    MAX_SPAN_CHARS,
    NUMBER_FRAGMENT,
    PART_STRIDE,
    PART_WORDS,
    RESOLVES_MARKER,
    SECTION_MARKERS,
    SINGLE_CHUNK_MAX_WORDS,
)

logger = logging.getLogger(__name__)

SENTENCE_CHUNK_INDEX_START = 1000
DEDUP_PREFIX_CHARS = 100

# Text up to terminal punctuation, or a trailing fragment without it
_SENTENCE_PATTERN = re.compile(r'[^.!?]+(?:[.!?]+|$)')
_WHITESPACE = re.compile(r'\s+')


def chunk_text_smart(
    source: ChunkSource,
    chunk_size: int = config.CHUNK_SIZE,
    chunk_overlap: int = config.SMART_CHUNK_OVERLAP,
) -> List[TextChunk]:
    """
    Chunk a document with the legal pass and the sentence pass, deduplicated.

    Args:
        source: ExtractedText (its metadata is copied into every chunk) or raw text
        chunk_size: Target words per sentence-pass chunk
        chunk_overlap: Trailing words carried into the next sentence-pass chunk

    Returns:
        Legal chunks first (document order), then sentence chunks, minus
        duplicates. Empty text yields [].

    Raises:
        InputError: If chunk_overlap >= chunk_size
    """
    validate_window(chunk_size, chunk_overlap)
    text, base_metadata = unpack_source(source)
    if not text.strip():
        return []

    spans = extract_legal_spans(text)
    chunks = chunk_legal_spans(spans, base_metadata)
    chunks.extend(create_sentence_chunks(text, base_metadata, chunk_size, chunk_overlap))

    unique = deduplicate_chunks(chunks)
    logger.info(
        f"Smart chunking: {len(spans)} legal spans, {len(chunks)} chunks pooled, "
        f"{len(unique)} after deduplication"
    )
    return unique


def extract_legal_spans(text: str) -> List[LegalDocumentSpan]:
    """
    Find every instrument header and delimit the span it introduces.

    Args:
        text: Full document text

    Returns:
        Spans ordered by start offset; spans never overlap
    """
    headers = []
    for instrument_type, pattern in INSTRUMENT_PATTERNS:
        for match in pattern.finditer(text):
            headers.append((match.start(), match.end(), instrument_type, match.group(0)))
    headers.sort(key=lambda h: (h[0], -h[1]))

    spans = []
    for position, (start, header_end, instrument_type, header) in enumerate(headers):
        end = len(text)
        for next_start, _, _, _ in headers[position + 1:]:
            if next_start >= header_end:
                end = next_start
                break

        resolves = RESOLVES_MARKER.search(text, start)
        if resolves and resolves.start() < end:
            section = _find_next_section(text, resolves.end())
            if section != -1 and section < end:
                end = section

        end = min(end, start + MAX_SPAN_CHARS)
        spans.append(LegalDocumentSpan(
            text=text[start:end],
            instrument_type=instrument_type,
            instrument_number=_WHITESPACE.sub(" ", header).strip(),
            start_offset=start,
            end_offset=end,
        ))

    logger.debug(f"Found {len(spans)} legal instrument spans")
    return spans


def _find_next_section(text: str, from_index: int) -> int:
    """Offset of the nearest section marker at or after from_index (-1 if none)"""
    nearest = -1
    for marker in SECTION_MARKERS:
        match = marker.search(text, from_index)
        if match and (nearest == -1 or match.start() < nearest):
            nearest = match.start()
    return nearest


def chunk_legal_spans(spans: List[LegalDocumentSpan], base_metadata: Dict[str, Any]) -> List[TextChunk]:
    """
    Turn instrument spans into chunks.

    Spans up to SINGLE_CHUNK_MAX_WORDS words stay whole; longer spans are
    split into PART_WORDS-word parts every PART_STRIDE words, each prefixed
    with "{instrument number} (Part n)" so the part is self-identifying.
    """
    chunks = []
    for span_index, span in enumerate(spans):
        words = span.text.split()
        if not words:
            continue

        span_fields = dict(
            is_legal_document=True,
            document_number=span.instrument_number,
            document_type=span.instrument_type.value,
            start_offset=span.start_offset,
            end_offset=span.end_offset,
        )

        if len(words) <= SINGLE_CHUNK_MAX_WORDS:
            chunks.append(TextChunk(
                text=span.text.strip(),
                chunk_index=span_index,
                metadata=build_metadata(base_metadata, chunk_index=span_index, **span_fields),
            ))
            continue

        start = 0
        part = 1
        while start < len(words):
            end = min(start + PART_WORDS, len(words))
            chunk_index = span_index * 100 + part - 1
            chunks.append(TextChunk(
                text=f"{span.instrument_number} (Part {part})\n\n" + " ".join(words[start:end]),
                chunk_index=chunk_index,
                metadata=build_metadata(
                    base_metadata,
                    chunk_index=chunk_index,
                    document_part=part,
                    **span_fields,
                ),
            ))
            if end == len(words):
                break
            start += PART_STRIDE
            part += 1

    return chunks


def split_into_sentences(text: str) -> List[str]:
    """
    Split on terminal punctuation, keeping citations intact.

    A sentence ending in a citation abbreviation ("Art.", "§ 2.", "nº.") is
    glued to the sentence that follows it.

    Example:
        >>> split_into_sentences("Conforme o Art. 5º da lei. Publique-se!")
        ['Conforme o Art. 5º da lei.', 'Publique-se!']
    """
    sentences = []
    pending = ""

    for match in _SENTENCE_PATTERN.finditer(text):
        sentence = match.group(0).strip()
        if not sentence:
            continue
        if _cites_forward(sentence, text[match.end():]):
            pending = f"{pending} {sentence}".strip()
            continue
        if pending:
            sentence = f"{pending} {sentence}"
            pending = ""
        sentences.append(sentence)

    if pending:
        sentences.append(pending)

    return sentences


def _cites_forward(sentence: str, rest: str) -> bool:
    """True when `sentence` ends in a citation that continues into `rest`"""
    if CITATION_FRAGMENT.search(sentence):
        return True
    number = NUMBER_FRAGMENT.search(sentence)
    if number is None:
        return False
    return any(ch.isdigit() for ch in number.group(0)) or rest.lstrip()[:1].isdigit()


def create_sentence_chunks(
    text: str,
    base_metadata: Dict[str, Any],
    chunk_size: int,
    chunk_overlap: int,
) -> List[TextChunk]:
    """
    Accumulate sentences into chunks of about chunk_size words.

    When the next sentence would overflow the budget the current chunk is
    flushed and its last chunk_overlap words seed the next one. A single
    sentence longer than chunk_size becomes an oversized chunk rather than
    being cut mid-sentence.
    """
    chunks = []
    current: List[str] = []
    chunk_index = SENTENCE_CHUNK_INDEX_START

    def flush():
        chunks.append(TextChunk(
            text=" ".join(current),
            chunk_index=chunk_index,
            metadata=build_metadata(base_metadata, chunk_index=chunk_index, word_count=len(current)),
        ))

    for sentence in split_into_sentences(text):
        words = sentence.split()
        if current and len(current) + len(words) > chunk_size:
            flush()
            chunk_index += 1
            current = current[-chunk_overlap:] if chunk_overlap else []
        current.extend(words)

    if current:
        flush()

    return chunks


def deduplicate_chunks(chunks: List[TextChunk]) -> List[TextChunk]:
    """
    Drop chunks whose first DEDUP_PREFIX_CHARS normalized characters were
    already seen (lowercase, collapsed whitespace). First occurrence wins.
    """
    seen = set()
    unique = []

    for chunk in chunks:
        normalized = _WHITESPACE.sub(" ", chunk.text.lower()).strip()
        key = normalized[:DEDUP_PREFIX_CHARS]
        if key in seen:
            continue
        seen.add(key)
        unique.append(chunk)

    return unique
