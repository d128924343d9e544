"""
Embedding management schemas.

Request schemas for backlog operations. Responses reuse the backlog
result models directly.

Dependencies: pydantic
System role: Embedding API contracts
"""

import uuid

from pydantic import BaseModel, Field


class BacklogScope(BaseModel):
    """Target table and optional owner scope."""

    target: str = Field(default="nodes", description="'nodes' (graph nodes) or 'chunks'")
    user_id: uuid.UUID | None = Field(default=None, description="Owner scope for nodes")
    document_id: uuid.UUID | None = Field(default=None, description="Owner scope for chunks")


class GenerateRequest(BacklogScope):
    """Request schema for Generate."""

    node_ids: list[str] | None = Field(default=None, description="Explicit record ids")
    batch_size: int | None = Field(default=None, description="Records per batch (default 10)")
    force_regenerate: bool = Field(default=False, description="Re-embed records that have a vector")


class ProcessQueueRequest(BaseModel):
    """Request schema for Process-queue."""

    target: str = Field(default="nodes", description="'nodes' or 'chunks'")
    max_nodes: int | None = Field(default=None, description="Maximum records (default 100)")
    batch_size: int | None = Field(default=None, description="Records per batch (default 20)")
    dry_run: bool = Field(default=False, description="Plan only; write nothing")
    time_budget_seconds: float | None = Field(
        default=None,
        description="Stop between batches once this many seconds have passed",
    )


class ValidateRequest(BacklogScope):
    """Request schema for Validate."""

    check_dimensions: bool = Field(default=True, description="Verify vector length")
    mark_invalid: bool = Field(default=False, description="Flag invalid records as errored")


class ClearErrorsRequest(BacklogScope):
    """Request schema for Clear-errors."""

    node_ids: list[str] | None = Field(default=None, description="Explicit record ids")
