"""
Knowledge chunk CRUD operations.

Chunk creation for ingestion plus the embedding backlog operations
inherited from EmbeddableCRUD, scoped by owning document.

Dependencies: sqlalchemy, knowledge_context.boundary.db.models
System role: Chunk persistence for ingestion and retrieval
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import case, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.boundary.db.base import EmbeddingStatus
from knowledge_context.boundary.db.CRUD.embeddable_crud import EmbeddableCRUD
from knowledge_context.boundary.db.models.chunk_model import KnowledgeChunkModel


class ChunkCRUD(EmbeddableCRUD[KnowledgeChunkModel]):
    """
    CRUD operations for KnowledgeChunkModel.

    Owner scope is the document; all chunks share one breakdown type.
    """

    type_label = "chunk"

    def __init__(self) -> None:
        """Initialize ChunkCRUD with KnowledgeChunkModel."""
        super().__init__(KnowledgeChunkModel, owner_column=KnowledgeChunkModel.document_id)

    async def create_many(
        self,
        session: AsyncSession,
        document_id: UUID,
        chunks: Sequence[dict],
    ) -> list[KnowledgeChunkModel]:
        """
        Insert chunk rows for a document.

        Args:
            session: Async database session
            document_id: Owning document UUID
            chunks: Dicts with chunk_index, content and chunk_metadata

        Returns:
            list[KnowledgeChunkModel]: Created rows in chunk_index order
        """
        instances = [KnowledgeChunkModel(document_id=document_id, **chunk) for chunk in chunks]
        session.add_all(instances)
        await session.flush()
        return sorted(instances, key=lambda c: c.chunk_index)

    async def get_by_document(
        self,
        session: AsyncSession,
        document_id: UUID,
    ) -> Sequence[KnowledgeChunkModel]:
        """
        Retrieve every chunk of a document ordered by chunk_index.

        Args:
            session: Async database session
            document_id: Owning document UUID

        Returns:
            Sequence of KnowledgeChunkModels
        """
        stmt = (
            select(KnowledgeChunkModel)
            .where(KnowledgeChunkModel.document_id == document_id)
            .order_by(KnowledgeChunkModel.chunk_index)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def delete_by_document(self, session: AsyncSession, document_id: UUID) -> int:
        """
        Delete every chunk of a document.

        Args:
            session: Async database session
            document_id: Owning document UUID

        Returns:
            int: Number of chunks deleted
        """
        stmt = (
            delete(KnowledgeChunkModel)
            .where(KnowledgeChunkModel.document_id == document_id)
            .returning(KnowledgeChunkModel.id)
            .execution_options(synchronize_session="fetch")
        )
        result = await session.execute(stmt)
        return len(result.all())

    async def count_by_status(
        self,
        session: AsyncSession,
        document_id: UUID,
    ) -> dict[EmbeddingStatus, int]:
        """
        Count a document's chunks per embedding status.

        Args:
            session: Async database session
            document_id: Owning document UUID

        Returns:
            dict mapping every EmbeddingStatus to its count (zeros included)
        """
        stmt = (
            select(KnowledgeChunkModel.embedding_status, func.count())
            .where(KnowledgeChunkModel.document_id == document_id)
            .group_by(KnowledgeChunkModel.embedding_status)
        )
        result = await session.execute(stmt)
        counts = {status: 0 for status in EmbeddingStatus}
        for status, count in result.all():
            counts[EmbeddingStatus(status)] = count
        return counts

    async def totals_for_documents(
        self,
        session: AsyncSession,
        document_ids: Sequence[UUID],
    ) -> tuple[int, int]:
        """
        Count chunks and chunks without a vector across documents.

        Args:
            session: Async database session
            document_ids: Documents to aggregate

        Returns:
            tuple: (total chunks, chunks lacking a vector)
        """
        if not document_ids:
            return 0, 0
        missing = func.sum(case((KnowledgeChunkModel.embedding.is_(None), 1), else_=0))
        stmt = select(func.count(), missing).where(
            KnowledgeChunkModel.document_id.in_(list(document_ids))
        )
        result = await session.execute(stmt)
        total, without_vector = result.one()
        return total or 0, without_vector or 0


chunk_crud = ChunkCRUD()
