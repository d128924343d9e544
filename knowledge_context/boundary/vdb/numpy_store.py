"""
In-process vector store using numpy.

Loads candidate rows through SQLAlchemy and scores them in Python. Works
on any database the ORM supports (SQLite in tests and local dev) at the
cost of reading every candidate vector.

Dependencies: numpy, sqlalchemy
System role: Portable similarity search for development and tests
"""

import logging
from collections import Counter
from typing import Sequence
from uuid import UUID

import numpy as np

from knowledge_context.boundary.db.models import GraphNodeModel, KnowledgeChunkModel
from knowledge_context.boundary.vdb.base_store import VectorStore
from knowledge_context.boundary.vdb.vector_schemas import ChunkMatch, NodeMatch

logger = logging.getLogger(__name__)


def cosine_similarity(query: np.ndarray, query_norm: float, vector) -> float | None:
    """
    Cosine similarity of a stored vector against a prepared query.

    Returns None when the vector has a different dimension.
    """
    array = np.asarray(vector, dtype=float)
    if array.shape != query.shape:
        return None
    norm = float(np.linalg.norm(array))
    if norm == 0.0 or query_norm == 0.0:
        return 0.0
    return float(np.dot(query, array) / (norm * query_norm))


class NumpyVectorStore(VectorStore):
    """Python-side cosine similarity search."""

    def _score(self, rows, query_embedding: Sequence[float], threshold: float, operation: str):
        query = np.asarray(query_embedding, dtype=float)
        query_norm = float(np.linalg.norm(query))
        scored = []
        skipped = 0
        for row in rows:
            similarity = cosine_similarity(query, query_norm, row[-1])
            if similarity is None:
                skipped += 1
                continue
            if similarity >= threshold:
                scored.append((row, similarity))
        if skipped:
            logger.warning(
                f"{__name__}:{operation} - Skipped {skipped} vectors with mismatched dimension"
            )
        return scored

    async def search_chunks(
        self,
        query_embedding: Sequence[float],
        threshold: float,
        limit: int,
        knowledge_base_id: UUID | None = None,
        max_per_document: int | None = None,
    ) -> list[ChunkMatch]:
        rows = await self._execute(
            self._chunk_query(knowledge_base_id, KnowledgeChunkModel.embedding),
            "search_chunks",
        )
        scored = self._score(rows, query_embedding, threshold, "search_chunks")
        scored.sort(key=lambda item: (-item[1], item[0][1], item[0][4]))
        if max_per_document is not None:
            kept = Counter()
            capped = []
            for row, similarity in scored:
                if kept[row[1]] < max_per_document:
                    kept[row[1]] += 1
                    capped.append((row, similarity))
            scored = capped
        return [self._to_chunk_match(row, similarity) for row, similarity in scored[:limit]]

    async def search_nodes(
        self,
        query_embedding: Sequence[float],
        threshold: float,
        limit: int,
        node_type: str | None = None,
        user_id: UUID | None = None,
        exclude_user_id: UUID | None = None,
    ) -> list[NodeMatch]:
        rows = await self._execute(
            self._node_query(node_type, user_id, exclude_user_id, GraphNodeModel.embedding),
            "search_nodes",
        )
        scored = self._score(rows, query_embedding, threshold, "search_nodes")
        scored.sort(key=lambda item: (-item[1], item[0][0]))
        return [self._to_node_match(row, similarity) for row, similarity in scored[:limit]]
