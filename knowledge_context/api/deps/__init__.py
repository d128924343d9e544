"""
Dependency injection package.

Exports:
  - ServiceCache, get_service_cache(): Process-wide shared collaborators
  - get_*_service(): FastAPI dependency factories
"""

from knowledge_context.api.deps.dependencies import (
    ServiceCache,
    get_cache_store_dependency,
    get_context_service,
    get_embedding_service,
    get_knowledge_service,
    get_service_cache,
    get_settings_dependency,
)

__all__ = [
    "ServiceCache",
    "get_cache_store_dependency",
    "get_context_service",
    "get_embedding_service",
    "get_knowledge_service",
    "get_service_cache",
    "get_settings_dependency",
]
