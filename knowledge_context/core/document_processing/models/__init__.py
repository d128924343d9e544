"""
Models for document processing.

Exports: TextChunk, PipelineResult, EmbeddingRequest, EmbeddedItem, EmbeddingFailure, EmbeddingBatchResult
"""

from .chunk import TextChunk
from .pipeline_result import PipelineResult
from .embedding_result import (
    EmbeddedItem,
    EmbeddingBatchResult,
    EmbeddingFailure,
    EmbeddingRequest,
)

__all__ = [
    "TextChunk",
    "EmbeddingRequest",
    "EmbeddedItem",
    "EmbeddingFailure",
    "EmbeddingBatchResult",
    "PipelineResult",
]
