"""
Backlog result models.

Structured results returned by every BacklogManager operation. Operations
never raise for provider failures; those are reported through these models.

Dependencies: pydantic
System role: Return types for backlog status, generation and validation
"""

from pydantic import BaseModel, Field


class RecordError(BaseModel):
    """Embedding failure for one record."""

    id: str
    error: str


class TypeBreakdown(BaseModel):
    """Backlog counts for one record type."""

    total: int = 0
    with_embedding: int = 0
    without_embedding: int = 0
    with_errors: int = 0


class BacklogStatus(BaseModel):
    """Backlog snapshot for all records or one owner."""

    total: int = 0
    with_embedding: int = 0
    without_embedding: int = 0
    with_errors: int = 0
    in_progress: int = 0
    oldest_pending_age_days: float | None = Field(
        default=None,
        description="Age of the oldest record still waiting for a vector",
    )
    by_type: dict[str, TypeBreakdown] = Field(default_factory=dict)


class GenerateResult(BaseModel):
    """Outcome of a Generate call."""

    message: str
    processed: int = 0
    total: int = 0
    errors: list[RecordError] = Field(default_factory=list)


class QueueStats(BaseModel):
    """Counters for one Process-queue run."""

    processed: int = 0
    errors: int = 0
    users_affected: int = 0
    tokens_used: int = 0
    elapsed_ms: float = 0.0
    batches: int = 0
    skipped: int = Field(default=0, description="Records claimed by another worker first")
    stopped_early: bool = Field(default=False, description="Deadline reached before all batches ran")


class QueueResult(BaseModel):
    """Outcome of a Process-queue call."""

    message: str
    dry_run: bool = False
    stats: QueueStats = Field(default_factory=QueueStats)
    error_details: list[RecordError] = Field(default_factory=list)


class ValidationIssue(BaseModel):
    """One category of stored-vector inconsistency."""

    issue: str
    description: str
    count: int
    sample_ids: list[str] = Field(default_factory=list)


class ValidationReport(BaseModel):
    """Outcome of a Validate call."""

    total_checked: int = 0
    valid: int = 0
    invalid: int = 0
    issues: list[ValidationIssue] = Field(default_factory=list)


class ClearErrorsResult(BaseModel):
    """Outcome of a Clear-errors call."""

    cleared_count: int
