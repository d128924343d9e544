"""Tests for batched embedding generation."""

import pytest
from langchain_core.embeddings import Embeddings

from knowledge_context.core.document_processing.models import EmbeddingRequest
from knowledge_context.core.document_processing.tasks import EmbeddingTask
from knowledge_context.core.exceptions import EmbeddingError


class ScriptedEmbeddings(Embeddings):
    """Fixed-length vectors; texts containing 'poison' break any call they are part of."""

    def __init__(self, dimension: int = 4, short_for: str | None = None) -> None:
        self.dimension = dimension
        self.short_for = short_for
        self.calls: list[list[str]] = []

    def _vector(self, text: str) -> list[float]:
        if self.short_for and self.short_for in text:
            return [1.0] * (self.dimension - 1)
        return [float(len(text))] + [1.0] * (self.dimension - 1)

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if any("poison" in text for text in texts):
            raise RuntimeError("bad input")
        return [self._vector(text) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        if "poison" in text:
            raise RuntimeError("bad input")
        return self._vector(text)


class DownEmbeddings(ScriptedEmbeddings):
    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        raise ConnectionError("unreachable")


class ShortBatchEmbeddings(ScriptedEmbeddings):
    """Drops the last vector when called with more than one text."""

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        vectors = super().embed_documents(texts)
        return vectors[:-1] if len(texts) > 1 else vectors


def requests(*texts: str) -> list[EmbeddingRequest]:
    return [EmbeddingRequest(id=f"id-{i}", text=text) for i, text in enumerate(texts)]


class TestEmbedBatch:
    """Test EmbeddingTask.embed_batch accounting."""

    async def test_all_items_embedded(self) -> None:
        task = EmbeddingTask(ScriptedEmbeddings(), dimension=4, batch_size=2, max_attempts=1)

        result = await task.embed_batch(requests("abcd", "abcdefgh", "xyz"))

        assert [item.id for item in result.results] == ["id-0", "id-1", "id-2"]
        assert result.errors == []
        assert result.tokens_used == 1 + 2 + 1

    async def test_sub_batches_respect_batch_size(self) -> None:
        provider = ScriptedEmbeddings()
        task = EmbeddingTask(provider, dimension=4, batch_size=2, max_attempts=1)

        await task.embed_batch(requests("a", "b", "c", "d", "e"))

        assert [len(call) for call in provider.calls] == [2, 2, 1]

    async def test_empty_text_fails_without_provider_call(self) -> None:
        provider = ScriptedEmbeddings()
        task = EmbeddingTask(provider, dimension=4, max_attempts=1)

        result = await task.embed_batch(requests("   ", "fine"))

        assert [failure.id for failure in result.errors] == ["id-0"]
        assert result.errors[0].error == "empty text"
        assert provider.calls == [["fine"]]

    async def test_bad_item_isolated_by_individual_fallback(self) -> None:
        task = EmbeddingTask(ScriptedEmbeddings(), dimension=4, batch_size=10, max_attempts=1)

        result = await task.embed_batch(requests("good one", "poison pill", "good two"))

        assert sorted(item.id for item in result.results) == ["id-0", "id-2"]
        assert [failure.id for failure in result.errors] == ["id-1"]
        assert "bad input" in result.errors[0].error

    async def test_wrong_dimension_reported_per_item(self) -> None:
        task = EmbeddingTask(ScriptedEmbeddings(short_for="short"), dimension=4, max_attempts=1)

        result = await task.embed_batch(requests("short text", "normal text"))

        assert [item.id for item in result.results] == ["id-1"]
        assert result.errors[0].id == "id-0"
        assert "wrong dimension" in result.errors[0].error

    async def test_outage_fails_remaining_without_calls(self) -> None:
        provider = DownEmbeddings()
        task = EmbeddingTask(provider, dimension=4, batch_size=2, max_attempts=1)

        result = await task.embed_batch(requests("a", "b", "c", "d", "e"))

        assert result.results == []
        assert len(result.errors) == 5
        # One batch call plus one call per item of the first sub-batch
        assert len(provider.calls) == 3
        assert all("provider unavailable" in failure.error for failure in result.errors[2:])

    async def test_vector_count_mismatch_falls_back(self) -> None:
        task = EmbeddingTask(ShortBatchEmbeddings(), dimension=4, max_attempts=1)

        result = await task.embed_batch(requests("one", "two", "three"))

        assert len(result.results) == 3
        assert result.errors == []


class TestEmbedQuery:
    """Test EmbeddingTask.embed_query."""

    async def test_returns_float_vector(self) -> None:
        task = EmbeddingTask(ScriptedEmbeddings(), dimension=4, max_attempts=1)

        vector = await task.embed_query("abc")

        assert vector == [3.0, 1.0, 1.0, 1.0]

    async def test_provider_error_wrapped(self) -> None:
        task = EmbeddingTask(ScriptedEmbeddings(), dimension=4, max_attempts=1)

        with pytest.raises(EmbeddingError):
            await task.embed_query("poison")

    async def test_wrong_dimension_rejected(self) -> None:
        task = EmbeddingTask(ScriptedEmbeddings(), dimension=8, max_attempts=1)

        with pytest.raises(EmbeddingError, match="wrong dimension"):
            await task.embed_query("abc")
