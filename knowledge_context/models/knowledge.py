"""
Knowledge domain schemas.

Request/response schemas for document upload, processing and search.
Required-looking fields that the service validates itself are optional
here so that their absence maps to a 400 rather than a schema error.

Dependencies: pydantic
System role: Knowledge API contracts
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field

from knowledge_context.core.retrieval.models import SearchMode


class UploadDocumentRequest(BaseModel):
    """Request schema for uploading a text document."""

    agent_id: str | None = Field(default=None, description="Agent owning the knowledge base")
    title: str | None = Field(default=None, description="Document title")
    content: str | None = Field(default=None, description="Extracted plain text")
    source_type: str = Field(default="text", description="text, markdown, pdf or html")
    source_url: str | None = Field(default=None, description="Where the document came from")
    metadata: dict[str, Any] | None = Field(default=None, description="Free-form document metadata")
    knowledge_base_name: str | None = Field(
        default=None,
        description="Name for the knowledge base if this upload creates it",
    )
    process: bool = Field(default=True, description="Queue background ingestion")


class UploadDocumentResponse(BaseModel):
    """Response schema for an uploaded document."""

    document_id: uuid.UUID
    knowledge_base_id: uuid.UUID
    title: str
    content_hash: str
    processing: bool = Field(description="True when ingestion was queued")
    task_id: str | None = None
    message: str


class ProcessDocumentRequest(BaseModel):
    """Request schema for synchronous document processing."""

    force_regenerate: bool = Field(default=False, description="Replace existing chunks and vectors")


class ProcessingStatusResponse(BaseModel):
    """Chunk embedding progress for one document."""

    document_id: uuid.UUID
    title: str
    chunk_count: int
    chunks_pending: int
    chunks_in_progress: int
    chunks_embedded: int
    chunks_errored: int
    status: str = Field(description="pending, processing, completed or errored")


class SearchRequest(BaseModel):
    """Request schema for knowledge search."""

    query: str | None = Field(default=None, description="Search text")
    agent_id: str | None = Field(default=None, description="Scope by owning agent")
    knowledge_base_id: uuid.UUID | None = Field(default=None, description="Scope by knowledge base")
    limit: int | None = Field(default=None, description="Maximum results (default 10)")
    search_type: SearchMode = Field(default=SearchMode.HYBRID, description="keyword, semantic or hybrid")
