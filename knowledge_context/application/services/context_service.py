"""
Context service orchestrator.

Builds the per-request ContextAssembler and manages cached user summaries.

Dependencies: knowledge_context.core.context, knowledge_context.boundary.cache
System role: Agent context use case orchestration
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.boundary.cache.base_cache import CacheStore
from knowledge_context.boundary.vdb.base_store import VectorStore
from knowledge_context.configs import get_settings
from knowledge_context.core.context import AssembledContext, ContextAssembler, UserContextService
from knowledge_context.core.document_processing.tasks import EmbeddingTask


class ContextService:
    """Context assembly orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        embedder: EmbeddingTask,
        cache: CacheStore | None = None,
        vector_store: VectorStore | None = None,
    ) -> None:
        """
        Initialize context service.

        Args:
            db: Async database session
            embedder: Embedding task for the query
            cache: Shared cache for user summaries (None disables caching)
            vector_store: Optional similarity backend (configured store if None)
        """
        settings = get_settings()
        self.db = db
        self.user_context = UserContextService(
            db,
            cache=cache,
            ttl_seconds=settings.cache.user_context_ttl_seconds,
        )
        self.assembler = ContextAssembler(
            db,
            embedder,
            self.user_context,
            vector_store=vector_store,
            settings=settings.retrieval,
        )

    async def assemble_context(
        self,
        user_id: UUID,
        query: str,
        agent_id: str | None = None,
        max_tokens: int | None = None,
        include_knowledge_base: bool = True,
        include_similar_patterns: bool = True,
    ) -> AssembledContext:
        """
        Assemble bounded agent context for one user and query.

        Returns:
            AssembledContext: Rendered context plus structured sources

        Raises:
            ValidationError: Missing user id or query
        """
        return await self.assembler.assemble(
            user_id,
            query,
            agent_id=agent_id,
            max_tokens=max_tokens,
            include_knowledge_base=include_knowledge_base,
            include_similar_patterns=include_similar_patterns,
        )

    async def invalidate_user_context(self, user_id: UUID) -> int:
        """
        Drop a user's cached summary.

        Returns:
            int: Cache entries removed

        Raises:
            CacheError: Cache backend unreachable
        """
        return await self.user_context.invalidate(user_id)
