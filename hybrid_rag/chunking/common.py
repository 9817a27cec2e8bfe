"""Helpers shared by the chunking strategies"""

import logging
from typing import Any, Dict, Tuple, Union

from pydantic import ValidationError

from ..exceptions import InputError
from ..models import ChunkMetadata, ExtractedText

logger = logging.getLogger(__name__)

ChunkSource = Union[ExtractedText, str]


def unpack_source(source: ChunkSource) -> Tuple[str, Dict[str, Any]]:
    """
    Accept either extraction output or raw text.

    Returns:
        (text, base metadata); text is "" for anything that is not a string
    """
    if isinstance(source, ExtractedText):
        text, metadata = source.text, conforming_metadata(source.metadata or {})
    else:
        text, metadata = source, {}

    if not isinstance(text, str):
        return "", metadata
    return text, metadata


def conforming_metadata(metadata: Dict[str, Any]) -> Dict[str, Any]:
    """
    Copy of `metadata` without known chunk fields whose value has the wrong type.

    Unknown keys are kept as-is (they become ChunkMetadata extras).
    """
    kept = {}
    for key, value in metadata.items():
        if key in ChunkMetadata.model_fields:
            try:
                ChunkMetadata(**{key: value})
            except ValidationError:
                logger.warning(f"Dropping metadata field '{key}': {value!r} is not a valid {key}")
                continue
        kept[key] = value
    return kept


def build_metadata(base: Dict[str, Any], **fields: Any) -> ChunkMetadata:
    """Extraction/caller metadata overlaid with chunk-specific fields"""
    return ChunkMetadata(**{**base, **fields})


def validate_window(chunk_size: int, chunk_overlap: int) -> None:
    """
    Raises:
        InputError: If the window cannot advance (overlap >= size) or is malformed
    """
    if chunk_size <= 0:
        raise InputError(f"chunk_size must be positive, got {chunk_size}")
    if chunk_overlap < 0:
        raise InputError(f"chunk_overlap must be non-negative, got {chunk_overlap}")
    if chunk_overlap >= chunk_size:
        raise InputError(
            f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})"
        )
