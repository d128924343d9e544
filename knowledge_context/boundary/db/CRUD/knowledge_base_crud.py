"""
Knowledge base CRUD operations.

Resolves an agent's knowledge base and recomputes its cached aggregate
from the documents and chunks it owns.

Dependencies: sqlalchemy, knowledge_context.boundary.db.models
System role: Knowledge base persistence operations
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_context.boundary.db.CRUD.chunk_crud import chunk_crud
from knowledge_context.boundary.db.models.document_model import KnowledgeDocumentModel
from knowledge_context.boundary.db.models.knowledge_base_model import (
    IndexingStatus,
    KnowledgeBaseModel,
)


class KnowledgeBaseCRUD(BaseCRUD[KnowledgeBaseModel]):
    """CRUD operations for KnowledgeBaseModel."""

    def __init__(self) -> None:
        """Initialize KnowledgeBaseCRUD with KnowledgeBaseModel."""
        super().__init__(KnowledgeBaseModel)

    async def get_by_agent_id(
        self,
        session: AsyncSession,
        agent_id: str,
    ) -> KnowledgeBaseModel | None:
        """
        Retrieve the knowledge base owned by an agent.

        Args:
            session: Async database session
            agent_id: Agent identifier

        Returns:
            KnowledgeBaseModel if found, None otherwise
        """
        stmt = select(KnowledgeBaseModel).where(KnowledgeBaseModel.agent_id == agent_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(
        self,
        session: AsyncSession,
        agent_id: str,
        name: str | None = None,
    ) -> tuple[KnowledgeBaseModel, bool]:
        """
        Resolve an agent's knowledge base, creating an empty one if missing.

        Args:
            session: Async database session
            agent_id: Agent identifier
            name: Display name for a newly created knowledge base

        Returns:
            tuple: (knowledge base, True if it was created)
        """
        existing = await self.get_by_agent_id(session, agent_id)
        if existing is not None:
            return existing, False

        created = await self.create(
            session,
            agent_id=agent_id,
            name=name or f"Knowledge Base for {agent_id}",
            document_count=0,
            total_chunks=0,
            indexing_status=IndexingStatus.PENDING,
        )
        return created, True

    async def recompute_stats(
        self,
        session: AsyncSession,
        knowledge_base_id: UUID,
    ) -> KnowledgeBaseModel | None:
        """
        Rebuild document_count, total_chunks and indexing_status.

        The knowledge base is INDEXED only when it has at least one chunk and
        every chunk carries a vector.

        Args:
            session: Async database session
            knowledge_base_id: Knowledge base UUID

        Returns:
            Updated KnowledgeBaseModel if found, None otherwise
        """
        result = await session.execute(
            select(KnowledgeDocumentModel.id).where(
                KnowledgeDocumentModel.knowledge_base_id == knowledge_base_id
            )
        )
        document_ids = list(result.scalars().all())
        total_chunks, without_vector = await chunk_crud.totals_for_documents(session, document_ids)

        indexed = total_chunks > 0 and without_vector == 0
        return await self.update_by_id(
            session,
            knowledge_base_id,
            document_count=len(document_ids),
            total_chunks=total_chunks,
            indexing_status=IndexingStatus.INDEXED if indexed else IndexingStatus.PENDING,
        )


knowledge_base_crud = KnowledgeBaseCRUD()
