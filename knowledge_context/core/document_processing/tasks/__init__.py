"""
Document processing tasks.

Exports: ChunkingTask, EmbeddingTask
"""

from .chunking_task import ChunkingTask
from .embedding_task import EmbeddingTask

__all__ = ["ChunkingTask", "EmbeddingTask"]
