"""
API request/response schemas.

Dependencies: pydantic
System role: HTTP contracts for knowledge, embedding and context endpoints
"""

from knowledge_context.models.context import CacheInvalidationResponse, ContextRequest
from knowledge_context.models.embeddings import (
    ClearErrorsRequest,
    GenerateRequest,
    ProcessQueueRequest,
    ValidateRequest,
)
from knowledge_context.models.knowledge import (
    ProcessDocumentRequest,
    ProcessingStatusResponse,
    SearchRequest,
    UploadDocumentRequest,
    UploadDocumentResponse,
)

__all__ = [
    "CacheInvalidationResponse",
    "ClearErrorsRequest",
    "ContextRequest",
    "GenerateRequest",
    "ProcessDocumentRequest",
    "ProcessQueueRequest",
    "ProcessingStatusResponse",
    "SearchRequest",
    "UploadDocumentRequest",
    "UploadDocumentResponse",
    "ValidateRequest",
]
