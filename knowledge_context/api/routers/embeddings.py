"""
Embedding management API endpoints.

Routes:
  GET  /embeddings/status
  POST /embeddings/generate
  POST /embeddings/process-queue
  POST /embeddings/validate
  POST /embeddings/clear-errors

Every route accepts target='nodes' (graph nodes, scoped by user_id) or
target='chunks' (knowledge chunks, scoped by document_id).

Dependencies: knowledge_context.application.services.embedding_service
System role: Embedding backlog HTTP API
"""

import uuid

from fastapi import APIRouter, Depends, Query

from knowledge_context.api.deps import get_embedding_service
from knowledge_context.api.routers.error_handling import handle_pipeline_errors
from knowledge_context.application.services import EmbeddingService
from knowledge_context.core.backlog.models import (
    BacklogStatus,
    ClearErrorsResult,
    GenerateResult,
    QueueResult,
    ValidationReport,
)
from knowledge_context.models.embeddings import (
    ClearErrorsRequest,
    GenerateRequest,
    ProcessQueueRequest,
    ValidateRequest,
)

router = APIRouter(prefix="/embeddings", tags=["embeddings"])


@router.get("/status", response_model=BacklogStatus)
@handle_pipeline_errors
async def get_embedding_status(
    target: str = Query(default="nodes"),
    user_id: uuid.UUID | None = Query(default=None),
    document_id: uuid.UUID | None = Query(default=None),
    embedding_service: EmbeddingService = Depends(get_embedding_service),
) -> BacklogStatus:
    """
    Backlog counts for all records or one owner.

    Raises:
        HTTPException(400): Unknown target or mismatched scope
    """
    return await embedding_service.get_status(target=target, user_id=user_id, document_id=document_id)


@router.post("/generate", response_model=GenerateResult)
@handle_pipeline_errors
async def generate_embeddings(
    request: GenerateRequest,
    embedding_service: EmbeddingService = Depends(get_embedding_service),
) -> GenerateResult:
    """
    Embed explicit ids, one owner's records, or every pending record.

    Args:
        request: Ids or scope, batch size and force flag
        embedding_service: Injected embedding service

    Returns:
        GenerateResult: Processed count and per-record errors

    Raises:
        HTTPException(400): Empty or malformed id list
    """
    return await embedding_service.generate(
        target=request.target,
        node_ids=request.node_ids,
        user_id=request.user_id,
        document_id=request.document_id,
        batch_size=request.batch_size,
        force_regenerate=request.force_regenerate,
    )


@router.post("/process-queue", response_model=QueueResult)
@handle_pipeline_errors
async def process_queue(
    request: ProcessQueueRequest,
    embedding_service: EmbeddingService = Depends(get_embedding_service),
) -> QueueResult:
    """
    Embed up to max_nodes pending records, oldest first.

    Returns:
        QueueResult: Run statistics (estimates only when dry_run)
    """
    return await embedding_service.process_queue(
        target=request.target,
        max_nodes=request.max_nodes,
        batch_size=request.batch_size,
        dry_run=request.dry_run,
        time_budget_seconds=request.time_budget_seconds,
    )


@router.post("/validate", response_model=ValidationReport)
@handle_pipeline_errors
async def validate_embeddings(
    request: ValidateRequest,
    embedding_service: EmbeddingService = Depends(get_embedding_service),
) -> ValidationReport:
    """
    Re-check stored vectors for presence, dimension and finiteness.

    Returns:
        ValidationReport: Totals and grouped issues with sample ids
    """
    return await embedding_service.validate(
        target=request.target,
        user_id=request.user_id,
        document_id=request.document_id,
        check_dimensions=request.check_dimensions,
        mark_invalid=request.mark_invalid,
    )


@router.post("/clear-errors", response_model=ClearErrorsResult)
@handle_pipeline_errors
async def clear_errors(
    request: ClearErrorsRequest,
    embedding_service: EmbeddingService = Depends(get_embedding_service),
) -> ClearErrorsResult:
    """Reset errored records to pending."""
    return await embedding_service.clear_errors(
        target=request.target,
        user_id=request.user_id,
        document_id=request.document_id,
        node_ids=request.node_ids,
    )
