"""
Shared cache boundary.

Exports: CacheStore, CacheHit, MemoryCacheStore, RedisCacheStore, get_cache_store
"""

from knowledge_context.boundary.cache.base_cache import CacheHit, CacheStore
from knowledge_context.boundary.cache.cache_factory import get_cache_store
from knowledge_context.boundary.cache.memory_cache import MemoryCacheStore
from knowledge_context.boundary.cache.redis_cache import RedisCacheStore

__all__ = [
    "CacheHit",
    "CacheStore",
    "MemoryCacheStore",
    "RedisCacheStore",
    "get_cache_store",
]
