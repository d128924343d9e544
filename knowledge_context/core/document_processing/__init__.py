"""
Document processing: positional chunking and batched embedding.

Exports: ChunkingTask, EmbeddingTask, build_embedding_task, get_embeddings
"""

from knowledge_context.core.document_processing.embeddings_factory import (
    build_embedding_task,
    get_embeddings,
)
from knowledge_context.core.document_processing.tasks import ChunkingTask, EmbeddingTask

__all__ = ["ChunkingTask", "EmbeddingTask", "build_embedding_task", "get_embeddings"]
