"""
Plain-text extraction.

Only text formats are accepted (text/plain, text/markdown); binary formats
(PDF, Office, images) belong to a dedicated extraction service.
"""

import logging
from datetime import datetime, timezone

from ..exceptions import InputError
from ..models import ExtractedText
from .base import TextExtractor

logger = logging.getLogger(__name__)

SUPPORTED_MIME_TYPES = frozenset(["text/plain", "text/markdown"])


class PlainTextExtractor(TextExtractor):
    """Decode text files (UTF-8, latin-1 fallback)"""

    def extract(self, content: bytes, filename: str, mime_type: str) -> ExtractedText:
        """
        Args:
            content: File bytes
            filename: Original filename (recorded in metadata)
            mime_type: MIME type, must be text/plain or text/markdown

        Returns:
            ExtractedText with metadata: filename, file_type, extraction_date, total_words

        Raises:
            InputError: For unsupported MIME types
        """
        if mime_type not in SUPPORTED_MIME_TYPES:
            raise InputError(
                f"Unsupported file type: {mime_type}. Supported: {', '.join(sorted(SUPPORTED_MIME_TYPES))}"
            )

        try:
            text = content.decode('utf-8')
        except UnicodeDecodeError:
            # latin-1 never fails
            logger.warning(f"UTF-8 decode failed for {filename}, using latin-1")
            text = content.decode('latin-1', errors='replace')

        return ExtractedText(
            text=text,
            metadata={
                "filename": filename,
                "file_type": mime_type,
                "extraction_date": datetime.now(timezone.utc).isoformat(),
                "total_words": len(text.split()),
            },
        )
