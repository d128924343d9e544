"""
pgvector-backed vector store.

Ranks inside PostgreSQL with the cosine distance operator (<=>).
Rows whose stored dimension differs from the query are filtered out with
vector_dims() so a single bad vector cannot fail the whole query.
A per-document cap ranks chunks within each document with ROW_NUMBER()
before the limit, so one long document cannot crowd out the others.

Dependencies: pgvector, sqlalchemy
System role: Production similarity search
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select

from knowledge_context.boundary.db.models import GraphNodeModel, KnowledgeChunkModel
from knowledge_context.boundary.vdb.base_store import VectorStore
from knowledge_context.boundary.vdb.vector_schemas import ChunkMatch, NodeMatch

logger = logging.getLogger(__name__)


class PgVectorStore(VectorStore):
    """SQL-side cosine similarity search with pgvector."""

    async def search_chunks(
        self,
        query_embedding: Sequence[float],
        threshold: float,
        limit: int,
        knowledge_base_id: UUID | None = None,
        max_per_document: int | None = None,
    ) -> list[ChunkMatch]:
        query = list(query_embedding)
        distance = KnowledgeChunkModel.embedding.cosine_distance(query)
        if max_per_document is None:
            stmt = (
                self._chunk_query(knowledge_base_id, distance.label("distance"))
                .where(func.vector_dims(KnowledgeChunkModel.embedding) == len(query))
                .where(distance <= 1 - threshold)
                .order_by(distance, KnowledgeChunkModel.document_id, KnowledgeChunkModel.chunk_index)
                .limit(limit)
            )
        else:
            document_rank = func.row_number().over(
                partition_by=KnowledgeChunkModel.document_id,
                order_by=(distance, KnowledgeChunkModel.chunk_index),
            )
            ranked = (
                self._chunk_query(knowledge_base_id, document_rank.label("document_rank"), distance.label("distance"))
                .where(func.vector_dims(KnowledgeChunkModel.embedding) == len(query))
                .where(distance <= 1 - threshold)
                .subquery()
            )
            stmt = (
                select(ranked)
                .where(ranked.c.document_rank <= max_per_document)
                .order_by(ranked.c.distance, ranked.c.document_id, ranked.c.chunk_index)
                .limit(limit)
            )
        rows = await self._execute(stmt, "search_chunks")
        logger.debug(f"{__name__}:search_chunks - {len(rows)} matches (threshold={threshold})")
        return [self._to_chunk_match(row, 1.0 - float(row[-1])) for row in rows]

    async def search_nodes(
        self,
        query_embedding: Sequence[float],
        threshold: float,
        limit: int,
        node_type: str | None = None,
        user_id: UUID | None = None,
        exclude_user_id: UUID | None = None,
    ) -> list[NodeMatch]:
        query = list(query_embedding)
        distance = GraphNodeModel.embedding.cosine_distance(query)
        stmt = (
            self._node_query(node_type, user_id, exclude_user_id, distance.label("distance"))
            .where(func.vector_dims(GraphNodeModel.embedding) == len(query))
            .where(distance <= 1 - threshold)
            .order_by(distance, GraphNodeModel.id)
            .limit(limit)
        )
        rows = await self._execute(stmt, "search_nodes")
        logger.debug(f"{__name__}:search_nodes - {len(rows)} matches (type={node_type})")
        return [self._to_node_match(row, 1.0 - float(row[-1])) for row in rows]
