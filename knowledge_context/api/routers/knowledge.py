"""
Knowledge API endpoints.

Routes:
  POST /knowledge/documents
  POST /knowledge/documents/{document_id}/process
  GET  /knowledge/documents/{document_id}/status
  POST /knowledge/search

Dependencies: knowledge_context.application.services.knowledge_service
System role: Knowledge base ingestion and search HTTP API
"""

import uuid

from fastapi import APIRouter, Depends, status

from knowledge_context.api.deps import get_knowledge_service
from knowledge_context.api.routers.error_handling import handle_pipeline_errors
from knowledge_context.application.services import KnowledgeService
from knowledge_context.core.document_processing.models import PipelineResult
from knowledge_context.core.retrieval import SearchResponse
from knowledge_context.models.knowledge import (
    ProcessDocumentRequest,
    ProcessingStatusResponse,
    SearchRequest,
    UploadDocumentRequest,
    UploadDocumentResponse,
)

router = APIRouter(prefix="/knowledge", tags=["knowledge"])


@router.post("/documents", response_model=UploadDocumentResponse, status_code=status.HTTP_201_CREATED)
@handle_pipeline_errors
async def upload_document(
    request: UploadDocumentRequest,
    knowledge_service: KnowledgeService = Depends(get_knowledge_service),
) -> UploadDocumentResponse:
    """
    Store a text document and queue it for chunking and embedding.

    Args:
        request: Document fields and owning agent
        knowledge_service: Injected knowledge service

    Returns:
        UploadDocumentResponse: Stored document and whether ingestion was queued

    Raises:
        HTTPException(400): Missing agent, title or content, or unknown source type
    """
    result = await knowledge_service.upload_document(
        agent_id=request.agent_id,
        title=request.title,
        content=request.content,
        source_type=request.source_type,
        source_url=request.source_url,
        metadata=request.metadata,
        knowledge_base_name=request.knowledge_base_name,
        process=request.process,
    )
    message = (
        "Document uploaded successfully. Processing started in background."
        if result["processing"]
        else "Document uploaded successfully. Processing not started."
    )
    return UploadDocumentResponse(**result, message=message)


@router.post("/documents/{document_id}/process", response_model=PipelineResult)
@handle_pipeline_errors
async def process_document(
    document_id: uuid.UUID,
    request: ProcessDocumentRequest | None = None,
    knowledge_service: KnowledgeService = Depends(get_knowledge_service),
) -> PipelineResult:
    """
    Chunk and embed a document synchronously.

    Args:
        document_id: Document UUID
        request: Optional processing flags
        knowledge_service: Injected knowledge service

    Returns:
        PipelineResult: Chunk counts and per-chunk errors

    Raises:
        HTTPException(404): Unknown document
    """
    force = request.force_regenerate if request is not None else False
    return await knowledge_service.process_document(document_id, force_regenerate=force)


@router.get("/documents/{document_id}/status", response_model=ProcessingStatusResponse)
@handle_pipeline_errors
async def get_processing_status(
    document_id: uuid.UUID,
    knowledge_service: KnowledgeService = Depends(get_knowledge_service),
) -> ProcessingStatusResponse:
    """
    Report chunk embedding progress for a document.

    Raises:
        HTTPException(404): Unknown document
    """
    result = await knowledge_service.get_processing_status(document_id)
    return ProcessingStatusResponse(**result)


@router.post("/search", response_model=SearchResponse)
@handle_pipeline_errors
async def search_knowledge(
    request: SearchRequest,
    knowledge_service: KnowledgeService = Depends(get_knowledge_service),
) -> SearchResponse:
    """
    Search one knowledge base by keyword or meaning.

    Args:
        request: Query, scope, limit and search type
        knowledge_service: Injected knowledge service

    Returns:
        SearchResponse: Document-level results with excerpts

    Raises:
        HTTPException(400): Missing query or scope, or limit out of range
        HTTPException(404): Knowledge base not found
    """
    return await knowledge_service.search(
        request.query,
        knowledge_base_id=request.knowledge_base_id,
        agent_id=request.agent_id,
        limit=request.limit,
        mode=request.search_type,
    )
