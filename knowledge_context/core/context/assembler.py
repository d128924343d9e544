"""
Context assembler.

Produces the bounded context block handed to a conversational agent for
one user and query. The query is embedded once and the vector is shared by
every semantic source. Each source is independent: a failing source is
logged, reported in degraded_sources and treated as empty, so the agent is
never blocked by one outage. The rendered text is truncated from the tail to
the token budget; the structured lists are returned in full.

Dependencies: sqlalchemy, knowledge_context.boundary, knowledge_context.core
System role: Per-request retrieval orchestration and token budgeting
"""

import logging
import time
from typing import Any, Awaitable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.boundary.db.models import NodeType
from knowledge_context.boundary.vdb.base_store import VectorStore
from knowledge_context.boundary.vdb.vector_store_factory import get_vector_store
from knowledge_context.configs.retrieval import RetrievalSettings
from knowledge_context.core.context.models import (
    AssembledContext,
    KnowledgeChunkHit,
    RelevantInsight,
)
from knowledge_context.core.context.patterns import find_similar_patterns
from knowledge_context.core.context.renderer import render_context, summary_line
from knowledge_context.core.context.user_context import UserContextService, empty_summary
from knowledge_context.core.document_processing.tasks.embedding_task import EmbeddingTask
from knowledge_context.core.exceptions import ValidationError
from knowledge_context.core.tokens import estimate_tokens, truncate_to_token_limit

logger = logging.getLogger(__name__)


class ContextAssembler:
    """Merge user summary, insights, knowledge and patterns into one budgeted text."""

    def __init__(
        self,
        session: AsyncSession,
        embedder: EmbeddingTask,
        user_context: UserContextService,
        vector_store: VectorStore | None = None,
        settings: RetrievalSettings | None = None,
    ) -> None:
        """
        Initialize assembler.

        Args:
            session: Async database session shared by all sources
            embedder: Embeds the query
            user_context: Cached user summary source
            vector_store: Similarity backend (defaults to the configured store)
            settings: Thresholds, caps and token budget defaults
        """
        self.session = session
        self.embedder = embedder
        self.user_context = user_context
        self.vector_store = vector_store or get_vector_store(session)
        self.settings = settings or RetrievalSettings()

    async def _guarded(self, source: str, awaitable: Awaitable, default: Any, degraded: list[str]) -> Any:
        """Await one source; on failure log, roll back and return the default."""
        try:
            return await awaitable
        except Exception as e:
            logger.warning(
                f"{__name__}:_guarded - Source '{source}' failed, continuing without it: {e}",
                exc_info=True,
            )
            degraded.append(source)
            await self.session.rollback()
            return default

    async def _search_insights(self, user_id: UUID, query_embedding: list[float]) -> list[RelevantInsight]:
        matches = await self.vector_store.search_nodes(
            query_embedding,
            threshold=self.settings.insight_similarity_threshold,
            limit=self.settings.insight_limit,
            node_type=NodeType.INSIGHT,
            user_id=user_id,
        )
        return [
            RelevantInsight(
                id=match.node_id,
                label=match.label,
                description=match.description,
                similarity=match.similarity,
                created_at=match.created_at,
                properties=match.properties,
            )
            for match in matches
        ]

    async def _search_knowledge(self, query_embedding: list[float]) -> list[KnowledgeChunkHit]:
        matches = await self.vector_store.search_chunks(
            query_embedding,
            threshold=self.settings.knowledge_similarity_threshold,
            limit=self.settings.knowledge_limit,
        )
        return [
            KnowledgeChunkHit(
                id=match.chunk_id,
                document_id=match.document_id,
                document_title=match.document_title,
                content=match.content,
                metadata=match.metadata,
                similarity=match.similarity,
            )
            for match in matches
        ]

    async def assemble(
        self,
        user_id: UUID,
        query: str,
        agent_id: str | None = None,
        max_tokens: int | None = None,
        include_knowledge_base: bool = True,
        include_similar_patterns: bool = True,
    ) -> AssembledContext:
        """
        Assemble context for one user and query.

        Args:
            user_id: Requesting user
            query: Current user utterance or topic
            agent_id: Calling agent (logged only)
            max_tokens: Token budget for the rendered text
            include_knowledge_base: Search knowledge chunks across all knowledge bases
            include_similar_patterns: Look up other users' similar goals

        Returns:
            AssembledContext: Rendered text, token estimate, truncation flag
            and the structured source data

        Raises:
            ValidationError: On a missing user id or query, or a non-positive budget
        """
        if user_id is None:
            raise ValidationError("user_id is required", field="user_id")
        if not query or not query.strip():
            raise ValidationError("query is required", field="query")
        max_tokens = max_tokens if max_tokens is not None else self.settings.max_context_tokens
        if max_tokens < 1:
            raise ValidationError("max_tokens must be positive", field="max_tokens")

        started = time.perf_counter()
        degraded: list[str] = []

        query_embedding = await self._guarded(
            "query_embedding", self.embedder.embed_query(query), None, degraded
        )

        summary, cache_age = await self._guarded(
            "user_summary",
            self.user_context.get_summary(user_id),
            (empty_summary(user_id), None),
            degraded,
        )

        insights: list[RelevantInsight] = []
        chunks: list[KnowledgeChunkHit] = []
        patterns = None

        if query_embedding is not None:
            insights = await self._guarded(
                "insights", self._search_insights(user_id, query_embedding), [], degraded
            )
            if include_knowledge_base:
                chunks = await self._guarded(
                    "knowledge", self._search_knowledge(query_embedding), [], degraded
                )
            if include_similar_patterns and summary.goals:
                patterns = await self._guarded(
                    "similar_patterns",
                    find_similar_patterns(
                        self.vector_store,
                        query_embedding,
                        exclude_user_id=user_id,
                        threshold=self.settings.pattern_similarity_threshold,
                        candidate_limit=self.settings.pattern_candidate_limit,
                        strategy_limit=self.settings.pattern_strategy_limit,
                    ),
                    None,
                    degraded,
                )

        full_text = render_context(summary, insights, chunks, patterns, self.settings)
        context, truncated = truncate_to_token_limit(
            full_text, max_tokens, buffer=self.settings.truncation_buffer
        )
        token_count = estimate_tokens(context)

        logger.info(
            f"{__name__}:assemble - {token_count} tokens, truncated: {truncated}",
            extra={
                "user_id": str(user_id),
                "agent_id": agent_id,
                "insights": len(insights),
                "knowledge_chunks": len(chunks),
                "patterns": patterns is not None,
                "degraded_sources": degraded,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )

        return AssembledContext(
            context=context,
            user_summary=summary_line(summary),
            token_count=token_count,
            truncated=truncated,
            relevant_goals=summary.goals,
            relevant_insights=insights,
            knowledge_chunks=chunks,
            similar_patterns=patterns,
            degraded_sources=degraded,
            summary_cache_age_seconds=cache_age,
        )
