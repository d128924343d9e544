"""Tests for fixed-window chunking."""

import pytest

from knowledge_context.core.document_processing.tasks import ChunkingTask
from knowledge_context.core.exceptions import ValidationError


class TestChunkingTask:
    """Test ChunkingTask window arithmetic."""

    def test_three_thousand_two_hundred_chars_yield_three_windows(self) -> None:
        """Should produce chunks of 1500, 1500 and 600 characters."""
        text = "x" * 3200
        chunks = ChunkingTask(chunk_size=1500, chunk_overlap=200).split_text(text)

        assert [len(chunk.content) for chunk in chunks] == [1500, 1500, 600]
        assert [chunk.start_char for chunk in chunks] == [0, 1300, 2600]
        assert chunks[-1].end_char == 3200

    def test_short_text_is_single_chunk(self) -> None:
        """Text shorter than the window should come back whole."""
        chunks = ChunkingTask(chunk_size=1500, chunk_overlap=200).split_text("hello world")

        assert len(chunks) == 1
        assert chunks[0].content == "hello world"
        assert chunks[0].index == 0

    def test_text_of_exactly_one_window(self) -> None:
        """A text of exactly chunk_size characters should not produce a trailing chunk."""
        chunks = ChunkingTask(chunk_size=100, chunk_overlap=20).split_text("a" * 100)

        assert len(chunks) == 1

    def test_chunks_cover_text_with_exact_overlap(self) -> None:
        """Dropping each overlap should reconstruct the source text."""
        text = "".join(chr(ord("a") + i % 26) for i in range(1037))
        task = ChunkingTask(chunk_size=100, chunk_overlap=30)
        chunks = task.split_text(text)

        rebuilt = chunks[0].content + "".join(chunk.content[30:] for chunk in chunks[1:])
        assert rebuilt == text
        for previous, current in zip(chunks, chunks[1:]):
            assert previous.content[-30:] == current.content[:30]
            assert current.index == previous.index + 1

    def test_empty_text_rejected(self) -> None:
        """Should raise ValidationError on empty text."""
        with pytest.raises(ValidationError):
            ChunkingTask().split_text("")

    @pytest.mark.parametrize("size, overlap", [(0, 0), (100, 100), (100, 150), (100, -1)])
    def test_invalid_window_rejected(self, size: int, overlap: int) -> None:
        """Overlap must be non-negative and smaller than a positive size."""
        with pytest.raises(ValidationError):
            ChunkingTask(chunk_size=size, chunk_overlap=overlap)

    def test_chunk_metadata(self) -> None:
        """Metadata should carry title, 1-based number, total and offsets."""
        chunk = ChunkingTask(chunk_size=10, chunk_overlap=2).split_text("0123456789abcdef")[1]

        assert chunk.metadata("Doc", total_chunks=2) == {
            "title": "Doc",
            "chunk_number": 2,
            "total_chunks": 2,
            "start_char": 8,
            "end_char": 16,
        }
