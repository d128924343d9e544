"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from knowledge_context.configs.backlog import BacklogSettings
from knowledge_context.configs.base import BaseSettings
from knowledge_context.configs.cache import CacheSettings
from knowledge_context.configs.celery_config import CelerySettings
from knowledge_context.configs.chunking import ChunkingSettings
from knowledge_context.configs.database import DatabaseSettings
from knowledge_context.configs.embedding import EmbeddingSettings
from knowledge_context.configs.retrieval import RetrievalSettings
from knowledge_context.configs.vector_store import VectorStoreSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    database: DatabaseSettings = DatabaseSettings()
    embedding: EmbeddingSettings = EmbeddingSettings()
    chunking: ChunkingSettings = ChunkingSettings()
    retrieval: RetrievalSettings = RetrievalSettings()
    backlog: BacklogSettings = BacklogSettings()
    vector_store: VectorStoreSettings = VectorStoreSettings()
    cache: CacheSettings = CacheSettings()
    celery: CelerySettings = CelerySettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from knowledge_context.configs import get_settings
        settings = get_settings()
    """
    return Settings()
