"""
Hybrid knowledge retriever.

Searches one knowledge base by keyword (full-text match, flat score 1.0)
or semantically (cosine similarity over chunk vectors). Semantic hits are
chunk-level and are folded into document-level results: a document scores
the best similarity among its matched chunks and its content is its first
few matched chunks in discovery order.

Dependencies: sqlalchemy, knowledge_context.boundary, knowledge_context.core
System role: Knowledge search for the search endpoint
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.boundary.db.CRUD.document_crud import document_crud
from knowledge_context.boundary.db.CRUD.knowledge_base_crud import knowledge_base_crud
from knowledge_context.boundary.db.models import KnowledgeBaseModel
from knowledge_context.boundary.vdb.base_store import VectorStore
from knowledge_context.boundary.vdb.vector_schemas import ChunkMatch
from knowledge_context.boundary.vdb.vector_store_factory import get_vector_store
from knowledge_context.configs.retrieval import RetrievalSettings
from knowledge_context.core.document_processing.tasks.embedding_task import EmbeddingTask
from knowledge_context.core.exceptions import KnowledgeBaseNotFoundError, ValidationError
from knowledge_context.core.retrieval.access_recorder import AccessRecorder
from knowledge_context.core.retrieval.excerpt import extract_excerpt
from knowledge_context.core.retrieval.models import SearchMode, SearchResponse, SearchResult

logger = logging.getLogger(__name__)

PARAGRAPH_SEPARATOR = "\n\n"


@dataclass
class DocumentHits:
    """Chunk matches collected for one document."""

    document_id: UUID
    title: str
    score: float
    chunks: list[ChunkMatch] = field(default_factory=list)


def aggregate_by_document(matches: list[ChunkMatch], max_chunks: int = 3) -> list[DocumentHits]:
    """
    Group chunk matches by owning document.

    Args:
        matches: Chunk matches in discovery order (descending similarity)
        max_chunks: Matched chunks kept per document

    Returns:
        list[DocumentHits]: Sorted by descending score; equal scores keep
        first-discovery order
    """
    grouped: dict[UUID, DocumentHits] = {}
    for match in matches:
        hits = grouped.get(match.document_id)
        if hits is None:
            hits = grouped[match.document_id] = DocumentHits(
                document_id=match.document_id,
                title=match.document_title,
                score=match.similarity,
            )
        hits.score = max(hits.score, match.similarity)
        if len(hits.chunks) < max_chunks:
            hits.chunks.append(match)

    return sorted(grouped.values(), key=lambda hits: -hits.score)


class HybridRetriever:
    """Keyword and semantic search over one knowledge base."""

    def __init__(
        self,
        session: AsyncSession,
        embedder: EmbeddingTask,
        vector_store: VectorStore | None = None,
        settings: RetrievalSettings | None = None,
        access_recorder: AccessRecorder | None = None,
    ) -> None:
        """
        Initialize retriever.

        Args:
            session: Async database session
            embedder: Embeds the query for semantic search
            vector_store: Similarity backend (defaults to the configured store)
            settings: Thresholds, limits and excerpt sizes
            access_recorder: Background access counter (None disables recording)
        """
        self.session = session
        self.embedder = embedder
        self.vector_store = vector_store or get_vector_store(session)
        self.settings = settings or RetrievalSettings()
        self.access_recorder = access_recorder

    async def resolve_knowledge_base(
        self,
        knowledge_base_id: UUID | None = None,
        agent_id: str | None = None,
    ) -> KnowledgeBaseModel:
        """
        Look up the search scope by id or by owning agent.

        Raises:
            ValidationError: If neither identifier is given
            KnowledgeBaseNotFoundError: If no knowledge base matches
        """
        if knowledge_base_id is not None:
            knowledge_base = await knowledge_base_crud.get_by_id(self.session, knowledge_base_id)
            if knowledge_base is None:
                raise KnowledgeBaseNotFoundError(knowledge_base_id)
            return knowledge_base

        if agent_id:
            knowledge_base = await knowledge_base_crud.get_by_agent_id(self.session, agent_id)
            if knowledge_base is None:
                raise KnowledgeBaseNotFoundError(agent_id, details={"agent_id": agent_id})
            return knowledge_base

        raise ValidationError("knowledge_base_id or agent_id is required", field="knowledge_base_id")

    def _excerpt(self, content: str, query: str) -> str:
        return extract_excerpt(
            content,
            query,
            max_length=self.settings.excerpt_length,
            lead=self.settings.excerpt_lead,
        )

    async def keyword_search(self, knowledge_base_id: UUID, query: str, limit: int) -> list[SearchResult]:
        """Full-text match; every hit scores 1.0."""
        documents = await document_crud.keyword_search(self.session, knowledge_base_id, query, limit)
        return [
            SearchResult(
                id=document.id,
                title=document.title,
                content=document.content,
                metadata=document.doc_metadata or {},
                score=1.0,
                excerpt=self._excerpt(document.content, query),
            )
            for document in documents
        ]

    async def semantic_search(self, knowledge_base_id: UUID, query: str, limit: int) -> list[SearchResult]:
        """
        Chunk similarity search aggregated to document results.

        Chunks are capped per document before the limit, so limit * cap
        chunks always span the best `limit` documents when that many match.
        """
        max_chunks = self.settings.max_chunks_per_document
        query_embedding = await self.embedder.embed_query(query)
        matches = await self.vector_store.search_chunks(
            query_embedding,
            threshold=self.settings.search_similarity_threshold,
            limit=limit * max_chunks,
            knowledge_base_id=knowledge_base_id,
            max_per_document=max_chunks,
        )

        results = []
        for hits in aggregate_by_document(matches, max_chunks)[:limit]:
            content = PARAGRAPH_SEPARATOR.join(chunk.content for chunk in hits.chunks)
            metadata: dict[str, Any] = {
                "matched_chunks": [chunk.chunk_index for chunk in hits.chunks],
                "chunk_scores": [round(chunk.similarity, 4) for chunk in hits.chunks],
            }
            results.append(
                SearchResult(
                    id=hits.document_id,
                    title=hits.title,
                    content=content,
                    metadata=metadata,
                    score=hits.score,
                    excerpt=self._excerpt(content, query),
                )
            )
        return results

    async def search(
        self,
        query: str,
        knowledge_base_id: UUID | None = None,
        agent_id: str | None = None,
        limit: int | None = None,
        mode: SearchMode = SearchMode.HYBRID,
    ) -> SearchResponse:
        """
        Search a knowledge base.

        Args:
            query: Search text
            knowledge_base_id: Scope by knowledge base id
            agent_id: Scope by owning agent (used when no id is given)
            limit: Maximum document results
            mode: keyword, semantic or hybrid (hybrid runs semantic)

        Returns:
            SearchResponse: Results ordered by descending score

        Raises:
            ValidationError: On an empty query or out-of-range limit
            KnowledgeBaseNotFoundError: If the scope does not exist
            EmbeddingError: If the query cannot be embedded
        """
        if not query or not query.strip():
            raise ValidationError("Query is required", field="query")
        limit = limit if limit is not None else self.settings.search_default_limit
        if limit < 1 or limit > self.settings.search_max_limit:
            raise ValidationError(
                f"limit must be between 1 and {self.settings.search_max_limit}",
                field="limit",
            )

        try:
            mode = SearchMode(mode)
        except ValueError as e:
            raise ValidationError(f"Unknown search mode: {mode}", field="mode") from e

        knowledge_base = await self.resolve_knowledge_base(knowledge_base_id, agent_id)
        started = time.perf_counter()

        if mode == SearchMode.KEYWORD:
            results = await self.keyword_search(knowledge_base.id, query, limit)
        else:
            results = await self.semantic_search(knowledge_base.id, query, limit)

        logger.info(
            f"{__name__}:search - {len(results)} results",
            extra={
                "knowledge_base_id": str(knowledge_base.id),
                "mode": mode.value,
                "limit": limit,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )

        if self.access_recorder is not None and results:
            self.access_recorder.record(result.id for result in results)

        return SearchResponse(
            query=query,
            results=results,
            count=len(results),
            search_type=mode,
            knowledge_base_id=knowledge_base.id,
        )
