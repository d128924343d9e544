"""
Cache store factory.

Depends on CACHE_BACKEND: 'redis' (shared, production) or 'memory'
(single process).

Dependencies: knowledge_context.boundary.cache, knowledge_context.configs
System role: Cache backend instantiation and selection
"""

import logging

from knowledge_context.boundary.cache.base_cache import CacheStore
from knowledge_context.boundary.cache.memory_cache import MemoryCacheStore
from knowledge_context.boundary.cache.redis_cache import RedisCacheStore
from knowledge_context.configs import get_settings

logger = logging.getLogger(__name__)


def get_cache_store() -> CacheStore:
    """
    Create the configured cache store.

    Returns:
        CacheStore: RedisCacheStore or MemoryCacheStore

    Raises:
        ValueError: If CACHE_BACKEND is invalid
    """
    cache_config = get_settings().cache
    backend = cache_config.backend.lower()

    if backend == "redis":
        logger.info(f"{__name__}:get_cache_store - Creating Redis cache store")
        return RedisCacheStore(
            url=cache_config.redis_url,
            key_prefix=cache_config.key_prefix,
            default_ttl=cache_config.user_context_ttl_seconds,
        )

    if backend == "memory":
        logger.info(f"{__name__}:get_cache_store - Creating in-memory cache store (single instance)")
        return MemoryCacheStore(default_ttl=cache_config.user_context_ttl_seconds)

    raise ValueError(f"Invalid CACHE_BACKEND: {backend}. Must be 'redis' or 'memory'.")
