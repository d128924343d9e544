"""
Dependency injection container.

Factory functions for FastAPI dependencies. Expensive, stateless
collaborators (embedding provider, cache client, access recorder) live in
ServiceCache; services are built per request around the request's session.

Dependencies: knowledge_context.configs, knowledge_context.application, knowledge_context.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.application.services import (
    ContextService,
    EmbeddingService,
    KnowledgeService,
)
from knowledge_context.boundary.cache.base_cache import CacheStore
from knowledge_context.boundary.db import get_async_db
from knowledge_context.configs import Settings, get_settings
from knowledge_context.core.document_processing.tasks import EmbeddingTask
from knowledge_context.core.retrieval import AccessRecorder


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self):
        self._embedding_task = None
        self._cache_store = None
        self._access_recorder = None

    @property
    def embedding_task(self) -> EmbeddingTask:
        """Get cached embedding task."""
        if self._embedding_task is None:
            from knowledge_context.core.document_processing import build_embedding_task

            self._embedding_task = build_embedding_task(get_settings().embedding)
        return self._embedding_task

    @property
    def cache_store(self) -> CacheStore:
        """Get cached user-summary cache store."""
        if self._cache_store is None:
            from knowledge_context.boundary.cache.cache_factory import get_cache_store

            self._cache_store = get_cache_store()
        return self._cache_store

    @property
    def access_recorder(self) -> AccessRecorder:
        """Get cached document access recorder."""
        if self._access_recorder is None:
            self._access_recorder = AccessRecorder()
        return self._access_recorder

    async def shutdown(self) -> None:
        """Flush pending access writes and close the cache connection."""
        if self._access_recorder is not None:
            await self._access_recorder.drain()
        if self._cache_store is not None:
            await self._cache_store.close()
        self.clear()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._embedding_task = None
        self._cache_store = None
        self._access_recorder = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_cache_store_dependency() -> CacheStore:
    """Get the shared cache store."""
    return get_service_cache().cache_store


def get_knowledge_service(db: AsyncSession = Depends(get_async_db)) -> KnowledgeService:
    """
    Get knowledge service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        KnowledgeService: Service instance with injected dependencies
    """
    cache = get_service_cache()
    return KnowledgeService(
        db,
        cache.embedding_task,
        access_recorder=cache.access_recorder,
    )


def get_embedding_service(db: AsyncSession = Depends(get_async_db)) -> EmbeddingService:
    """
    Get embedding service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        EmbeddingService: Service instance with injected dependencies
    """
    return EmbeddingService(
        db,
        get_service_cache().embedding_task,
        settings=get_settings().backlog,
    )


def get_context_service(db: AsyncSession = Depends(get_async_db)) -> ContextService:
    """
    Get context service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        ContextService: Service instance with injected dependencies
    """
    cache = get_service_cache()
    return ContextService(db, cache.embedding_task, cache=cache.cache_store)
