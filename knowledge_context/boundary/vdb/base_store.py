"""
Vector store interface.

Both implementations rank by cosine similarity, keep results at or above
the threshold, and break ties deterministically (document id then chunk
index for chunks, node id for nodes).

Dependencies: sqlalchemy, knowledge_context.boundary.db
System role: Similarity search contract for retrieval and context assembly
"""

import logging
from abc import ABC, abstractmethod
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.boundary.db.models import (
    GraphNodeModel,
    KnowledgeChunkModel,
    KnowledgeDocumentModel,
)
from knowledge_context.boundary.vdb.vector_schemas import ChunkMatch, NodeMatch
from knowledge_context.core.exceptions import VectorStoreError

logger = logging.getLogger(__name__)

CHUNK_COLUMNS = (
    KnowledgeChunkModel.id,
    KnowledgeChunkModel.document_id,
    KnowledgeDocumentModel.knowledge_base_id,
    KnowledgeDocumentModel.title,
    KnowledgeChunkModel.chunk_index,
    KnowledgeChunkModel.content,
    KnowledgeChunkModel.chunk_metadata,
)

NODE_COLUMNS = (
    GraphNodeModel.id,
    GraphNodeModel.user_id,
    GraphNodeModel.node_type,
    GraphNodeModel.label,
    GraphNodeModel.description,
    GraphNodeModel.properties,
    GraphNodeModel.created_at,
)


class VectorStore(ABC):
    """Similarity search over stored chunk and node vectors."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize with the request's database session.

        Args:
            session: Async database session
        """
        self.session = session

    def _chunk_query(self, knowledge_base_id: UUID | None, *extra_columns):
        stmt = (
            select(*CHUNK_COLUMNS, *extra_columns)
            .join(KnowledgeDocumentModel, KnowledgeDocumentModel.id == KnowledgeChunkModel.document_id)
            .where(KnowledgeChunkModel.embedding.is_not(None))
        )
        if knowledge_base_id is not None:
            stmt = stmt.where(KnowledgeDocumentModel.knowledge_base_id == knowledge_base_id)
        return stmt

    def _node_query(
        self,
        node_type: str | None,
        user_id: UUID | None,
        exclude_user_id: UUID | None,
        *extra_columns,
    ):
        stmt = select(*NODE_COLUMNS, *extra_columns).where(
            GraphNodeModel.embedding.is_not(None),
            GraphNodeModel.deleted_at.is_(None),
        )
        if node_type is not None:
            stmt = stmt.where(GraphNodeModel.node_type == node_type)
        if user_id is not None:
            stmt = stmt.where(GraphNodeModel.user_id == user_id)
        if exclude_user_id is not None:
            stmt = stmt.where(GraphNodeModel.user_id != exclude_user_id)
        return stmt

    @staticmethod
    def _to_chunk_match(row, similarity: float) -> ChunkMatch:
        return ChunkMatch(
            chunk_id=row[0],
            document_id=row[1],
            knowledge_base_id=row[2],
            document_title=row[3],
            chunk_index=row[4],
            content=row[5],
            metadata=row[6] or {},
            similarity=similarity,
        )

    @staticmethod
    def _to_node_match(row, similarity: float) -> NodeMatch:
        return NodeMatch(
            node_id=row[0],
            user_id=row[1],
            node_type=row[2],
            label=row[3],
            description=row[4],
            properties=row[5] or {},
            created_at=row[6],
            similarity=similarity,
        )

    async def _execute(self, stmt, operation: str):
        """Run a search statement, rolling back and wrapping driver errors."""
        try:
            result = await self.session.execute(stmt)
            return result.all()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise VectorStoreError(f"Similarity search failed: {e}", operation=operation) from e

    @abstractmethod
    async def search_chunks(
        self,
        query_embedding: Sequence[float],
        threshold: float,
        limit: int,
        knowledge_base_id: UUID | None = None,
        max_per_document: int | None = None,
    ) -> list[ChunkMatch]:
        """
        Find knowledge chunks similar to the query vector.

        Args:
            query_embedding: Query vector
            threshold: Minimum cosine similarity (inclusive)
            limit: Maximum matches returned
            knowledge_base_id: Restrict to one knowledge base (None for all)
            max_per_document: Keep only each document's best N chunks before
                applying the limit (None for no cap)

        Returns:
            list[ChunkMatch]: Descending similarity, ties by (document_id, chunk_index)

        Raises:
            VectorStoreError: When the underlying query fails
        """

    @abstractmethod
    async def search_nodes(
        self,
        query_embedding: Sequence[float],
        threshold: float,
        limit: int,
        node_type: str | None = None,
        user_id: UUID | None = None,
        exclude_user_id: UUID | None = None,
    ) -> list[NodeMatch]:
        """
        Find graph nodes similar to the query vector.

        Args:
            query_embedding: Query vector
            threshold: Minimum cosine similarity (inclusive)
            limit: Maximum matches returned
            node_type: Restrict to one node type
            user_id: Restrict to one user's nodes
            exclude_user_id: Exclude one user's nodes

        Returns:
            list[NodeMatch]: Descending similarity, ties by node_id

        Raises:
            VectorStoreError: When the underlying query fails
        """
