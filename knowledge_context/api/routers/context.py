"""
Context assembly API endpoints.

Routes:
  POST   /context
  DELETE /context/cache/{user_id}

Dependencies: knowledge_context.application.services.context_service
System role: Agent context HTTP API
"""

import logging
import uuid

from fastapi import APIRouter, Depends

from knowledge_context.api.deps import get_context_service
from knowledge_context.api.routers.error_handling import handle_pipeline_errors
from knowledge_context.application.services import ContextService
from knowledge_context.core.context import AssembledContext
from knowledge_context.models.context import CacheInvalidationResponse, ContextRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/context", tags=["context"])


@router.post("", response_model=AssembledContext)
@handle_pipeline_errors
async def assemble_context(
    request: ContextRequest,
    context_service: ContextService = Depends(get_context_service),
) -> AssembledContext:
    """
    Assemble bounded context for an agent turn.

    Sources that fail are reported in degraded_sources; the endpoint only
    fails on invalid input.

    Args:
        request: User, query and assembly options
        context_service: Injected context service

    Returns:
        AssembledContext: Rendered text plus structured sources

    Raises:
        HTTPException(400): Missing user_id or query, or max_tokens < 1
    """
    logger.info(
        f"{__name__}:assemble_context - Assembling context",
        extra={
            "user_id": str(request.user_id),
            "agent_id": request.agent_id,
            "conversation_id": request.conversation_id,
        },
    )
    return await context_service.assemble_context(
        request.user_id,
        request.query,
        agent_id=request.agent_id,
        max_tokens=request.max_tokens,
        include_knowledge_base=request.include_knowledge_base,
        include_similar_patterns=request.include_similar_patterns,
    )


@router.delete("/cache/{user_id}", response_model=CacheInvalidationResponse)
@handle_pipeline_errors
async def invalidate_user_context(
    user_id: uuid.UUID,
    context_service: ContextService = Depends(get_context_service),
) -> CacheInvalidationResponse:
    """
    Drop a user's cached summary so the next request rebuilds it.

    Raises:
        HTTPException(503): Cache unreachable
    """
    removed = await context_service.invalidate_user_context(user_id)
    return CacheInvalidationResponse(user_id=user_id, invalidated=removed)
