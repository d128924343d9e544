"""
Knowledge document CRUD operations.

Provides Create, Read, Update, Delete operations for KnowledgeDocumentModel
with keyword search and access analytics.

Dependencies: sqlalchemy, knowledge_context.boundary.db.models
System role: Document persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.boundary.db.base import utc_now
from knowledge_context.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_context.boundary.db.models.document_model import KnowledgeDocumentModel

TEXT_SEARCH_CONFIG = "english"


def _escape_like(term: str) -> str:
    """Escape LIKE wildcards so a term only matches itself."""
    for char in ("\\", "%", "_"):
        term = term.replace(char, f"\\{char}")
    return term


class DocumentCRUD(BaseCRUD[KnowledgeDocumentModel]):
    """
    CRUD operations for KnowledgeDocumentModel.

    Extends BaseCRUD with knowledge base scoping, keyword search and
    access counting.
    """

    def __init__(self) -> None:
        """Initialize DocumentCRUD with KnowledgeDocumentModel."""
        super().__init__(KnowledgeDocumentModel)

    async def get_by_knowledge_base(
        self,
        session: AsyncSession,
        knowledge_base_id: UUID,
    ) -> Sequence[KnowledgeDocumentModel]:
        """
        Retrieve every document in a knowledge base, oldest first.

        Args:
            session: Async database session
            knowledge_base_id: Parent knowledge base UUID

        Returns:
            Sequence of KnowledgeDocumentModels
        """
        stmt = (
            select(KnowledgeDocumentModel)
            .where(KnowledgeDocumentModel.knowledge_base_id == knowledge_base_id)
            .order_by(KnowledgeDocumentModel.created_at, KnowledgeDocumentModel.id)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def keyword_search(
        self,
        session: AsyncSession,
        knowledge_base_id: UUID,
        query: str,
        limit: int,
    ) -> Sequence[KnowledgeDocumentModel]:
        """
        Full-text match of the query against document content.

        PostgreSQL uses to_tsvector/plainto_tsquery; other dialects fall back
        to requiring every whitespace-separated term as a case-insensitive
        literal substring (LIKE wildcards in terms are escaped). Matches are
        unranked and returned oldest first.

        Args:
            session: Async database session
            knowledge_base_id: Knowledge base to search
            query: Raw query text
            limit: Maximum documents returned

        Returns:
            Sequence of matching KnowledgeDocumentModels
        """
        content = KnowledgeDocumentModel.content
        if session.get_bind().dialect.name == "postgresql":
            match = func.to_tsvector(TEXT_SEARCH_CONFIG, content).op("@@")(
                func.plainto_tsquery(TEXT_SEARCH_CONFIG, query)
            )
        else:
            terms = [term for term in query.split() if term]
            match = and_(*[content.ilike(f"%{_escape_like(term)}%", escape="\\") for term in terms])

        stmt = (
            select(KnowledgeDocumentModel)
            .where(KnowledgeDocumentModel.knowledge_base_id == knowledge_base_id, match)
            .order_by(KnowledgeDocumentModel.created_at, KnowledgeDocumentModel.id)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def increment_access(self, session: AsyncSession, id: UUID) -> bool:
        """
        Bump a document's access counter and last access time.

        Args:
            session: Async database session
            id: Document UUID

        Returns:
            True if the document exists
        """
        stmt = (
            update(KnowledgeDocumentModel)
            .where(KnowledgeDocumentModel.id == id)
            .values(
                access_count=KnowledgeDocumentModel.access_count + 1,
                last_accessed_at=utc_now(),
            )
            .returning(KnowledgeDocumentModel.id)
            .execution_options(synchronize_session="fetch")
        )
        result = await session.execute(stmt)
        return result.first() is not None


document_crud = DocumentCRUD()
