"""
Application services.

Exports: KnowledgeService, EmbeddingService, ContextService
"""

from knowledge_context.application.services.context_service import ContextService
from knowledge_context.application.services.embedding_service import EmbeddingService
from knowledge_context.application.services.knowledge_service import KnowledgeService

__all__ = ["ContextService", "EmbeddingService", "KnowledgeService"]
