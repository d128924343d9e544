"""Tests for embedding provider selection."""

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding

from knowledge_context.configs.embedding import EmbeddingSettings
from knowledge_context.core.document_processing import build_embedding_task
from knowledge_context.core.document_processing.embeddings_factory import get_embeddings


def test_fake_provider() -> None:
    embeddings = get_embeddings(EmbeddingSettings(provider="fake", dimension=16))

    assert isinstance(embeddings, DeterministicFakeEmbedding)
    assert len(embeddings.embed_query("goal")) == 16


def test_unknown_provider() -> None:
    with pytest.raises(ValueError):
        get_embeddings(EmbeddingSettings(provider="openai"))


async def test_build_embedding_task_uses_settings() -> None:
    settings = EmbeddingSettings(provider="fake", dimension=8, batch_size=4, max_attempts=2)

    task = build_embedding_task(settings)
    vectors = await task.embed_query("Set a sleep goal")

    assert task.dimension == 8
    assert task.batch_size == 4
    assert len(vectors) == 8
