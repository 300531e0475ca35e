"""
Text chunking for ingestion.
"""

from typing import List

from ...shared import get_logger
from ...shared.exceptions import ValidationError


class SimpleChunker:
    """
    Fixed-size, non-overlapping character chunker.

    Chunks may end mid-word or mid-sentence; concatenating them always
    reproduces the input.
    """

    def __init__(self, max_chars: int = 800):
        if max_chars < 1:
            raise ValidationError("max_chars must be positive")
        self.max_chars = max_chars
        self.logger = get_logger(__name__)

    def chunk(self, content: str) -> List[str]:
        """
        Split content into chunks of at most ``max_chars`` characters.

        Returns:
            Chunks in order; empty for blank content
        """
        if content is None:
            raise ValidationError("content must not be None")
        if not content.strip():
            return []

        chunks = [
            content[start:start + self.max_chars]
            for start in range(0, len(content), self.max_chars)
        ]
        self.logger.debug(f"Split {len(content)} characters into {len(chunks)} chunks")
        return chunks
