"""Tests for EmbeddingService target and scope resolution."""

import uuid

import pytest

from knowledge_context.application.services.embedding_service import EmbeddingService
from knowledge_context.boundary.db.models import NodeType
from knowledge_context.configs.backlog import BacklogSettings
from knowledge_context.core.exceptions import ValidationError


@pytest.fixture
def service(test_async_db, embedder) -> EmbeddingService:
    return EmbeddingService(test_async_db, embedder, settings=BacklogSettings())


class TestEmbeddingService:
    """Test EmbeddingService."""

    async def test_node_scope_by_user(self, service, add_node, user_id) -> None:
        await add_node(user_id, NodeType.GOAL, "Mine")
        await add_node(uuid.uuid4(), NodeType.GOAL, "Theirs")

        status = await service.get_status(user_id=user_id)
        result = await service.generate(user_id=user_id)

        assert status.total == 1
        assert result.processed == 1
        assert (await service.get_status()).total == 2

    async def test_chunk_scope_by_document(self, service, add_document) -> None:
        document = await add_document("coach", "Guide", "text", chunks=[("one", None), ("two", None)])
        await add_document("coach", "Other", "other", chunks=[("three", None)])

        result = await service.generate(target="chunks", document_id=document.id)
        status = await service.get_status(target="chunks")

        assert result.processed == 2
        assert status.total == 3
        assert status.without_embedding == 1

    async def test_wrong_scope_for_target(self, service, user_id) -> None:
        with pytest.raises(ValidationError):
            await service.get_status(target="chunks", user_id=user_id)
        with pytest.raises(ValidationError):
            await service.validate(target="nodes", document_id=uuid.uuid4())

    async def test_unknown_target(self, service) -> None:
        with pytest.raises(ValidationError):
            await service.process_queue(target="edges")

    async def test_clear_errors_for_chunks(self, service, add_document) -> None:
        document = await add_document("coach", "Guide", "text", chunks=[("one", None)])

        result = await service.clear_errors(target="chunks", document_id=document.id)

        assert result.cleared_count == 0
