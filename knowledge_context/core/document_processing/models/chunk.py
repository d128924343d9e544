"""
Chunk domain model for document processing.

Represents one positional window of a document's text before it is stored.

Dependencies: pydantic
System role: Data structure for chunker output
"""

from pydantic import BaseModel, Field


class TextChunk(BaseModel):
    """Positional text window produced by ChunkingTask."""

    index: int = Field(description="Zero-based chunk position within the document")
    content: str = Field(description="Chunk text content")
    start_char: int = Field(description="Offset of the first character in the source text")
    end_char: int = Field(description="Offset one past the last character in the source text")

    def metadata(self, title: str, total_chunks: int) -> dict:
        """Metadata stored alongside the chunk row."""
        return {
            "title": title,
            "chunk_number": self.index + 1,
            "total_chunks": total_chunks,
            "start_char": self.start_char,
            "end_char": self.end_char,
        }
