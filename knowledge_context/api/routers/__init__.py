"""
API routers package.

Exports all routers for assembly in main.py.
"""

from knowledge_context.api.routers.context import router as context_router
from knowledge_context.api.routers.embeddings import router as embeddings_router
from knowledge_context.api.routers.health import router as health_router
from knowledge_context.api.routers.knowledge import router as knowledge_router

__all__ = [
    "context_router",
    "embeddings_router",
    "health_router",
    "knowledge_router",
]
