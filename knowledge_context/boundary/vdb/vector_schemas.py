"""
Vector search schemas.

Typed results for similarity search over chunks and graph nodes.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ChunkMatch(BaseModel):
    """Knowledge chunk whose vector is similar to the query."""

    chunk_id: uuid.UUID = Field(description="Chunk identifier")
    document_id: uuid.UUID = Field(description="Owning document")
    knowledge_base_id: uuid.UUID = Field(description="Knowledge base of the owning document")
    document_title: str = Field(description="Title of the owning document")
    chunk_index: int = Field(description="Chunk position within the document")
    content: str = Field(description="Chunk text content")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Chunk metadata")
    similarity: float = Field(description="Cosine similarity (1 - cosine distance)")


class NodeMatch(BaseModel):
    """Graph node whose vector is similar to the query."""

    node_id: uuid.UUID = Field(description="Node identifier")
    user_id: uuid.UUID = Field(description="Owning user")
    node_type: str = Field(description="Node type")
    label: str = Field(description="Node label")
    description: str | None = Field(default=None, description="Node description")
    properties: dict[str, Any] = Field(default_factory=dict, description="Type-specific properties")
    created_at: datetime | None = Field(default=None, description="Node creation time")
    similarity: float = Field(description="Cosine similarity (1 - cosine distance)")
