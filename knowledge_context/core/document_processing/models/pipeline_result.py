"""
Pipeline result model for document processing.

Represents the outcome of chunking and embedding one stored document.

Dependencies: pydantic
System role: Return type for DocumentPipeline.process()
"""

import uuid

from pydantic import BaseModel, Field

from .embedding_result import EmbeddingFailure


class PipelineResult(BaseModel):
    """Result of document processing pipeline execution."""

    document_id: uuid.UUID = Field(description="Processed document")
    chunk_count: int = Field(description="Chunks stored for the document after processing")
    chunks_created: int = Field(default=0, description="Chunks written by this run")
    chunks_embedded: int = Field(default=0, description="Chunks embedded by this run")
    errors: list[EmbeddingFailure] = Field(default_factory=list, description="Per-chunk embedding failures")
    processing_time_ms: float = Field(description="Total processing time in milliseconds")
