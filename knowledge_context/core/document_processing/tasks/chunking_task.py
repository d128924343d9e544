"""
Text chunking task using fixed positional windows.

Chunk i starts at i * (chunk_size - chunk_overlap) and holds at most
chunk_size characters; the last chunk ends exactly at len(text). No
sentence or word boundary snapping, so boundaries are reproducible.

Dependencies: pydantic
System role: First stage of document ingestion
"""

import logging

from knowledge_context.core.document_processing.models import TextChunk
from knowledge_context.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


class ChunkingTask:
    """Split text into overlapping fixed-size windows."""

    def __init__(
        self,
        chunk_size: int = 1500,
        chunk_overlap: int = 200,
    ) -> None:
        """
        Initialize chunking task with window configuration.

        Args:
            chunk_size: Maximum chunk size in characters
            chunk_overlap: Overlap between consecutive chunks (must be < chunk_size)

        Raises:
            ValidationError: When the window parameters are inconsistent
        """
        if chunk_size <= 0:
            raise ValidationError("chunk_size must be positive", field="chunk_size")
        if chunk_overlap < 0 or chunk_overlap >= chunk_size:
            raise ValidationError(
                "chunk_overlap must be >= 0 and smaller than chunk_size",
                field="chunk_overlap",
                details={"chunk_size": chunk_size, "chunk_overlap": chunk_overlap},
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    @property
    def step(self) -> int:
        return self.chunk_size - self.chunk_overlap

    def split_text(self, text: str) -> list[TextChunk]:
        """
        Split text into chunks.

        Args:
            text: Plain document text

        Returns:
            list[TextChunk]: Non-empty, ordered chunks covering the whole text

        Raises:
            ValidationError: When text is empty
        """
        if not text:
            raise ValidationError("No text to chunk", field="text")

        chunks: list[TextChunk] = []
        start = 0
        while True:
            end = min(start + self.chunk_size, len(text))
            chunks.append(
                TextChunk(index=len(chunks), content=text[start:end], start_char=start, end_char=end)
            )
            if end == len(text):
                break
            start += self.step

        logger.debug(
            f"{__name__}:split_text - {len(text)} chars -> {len(chunks)} chunks "
            f"(size={self.chunk_size}, overlap={self.chunk_overlap})"
        )
        return chunks
