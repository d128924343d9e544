"""
Document ingestion Celery task.

Async task: ingest_document(document_id, force_regenerate)
Flow: chunk (if needed) -> embed pending chunks -> refresh knowledge base aggregate

Dependencies: celery, knowledge_context.core.document_processing, knowledge_context.workers
System role: Async document processing task
"""

import asyncio
import logging
import uuid

from knowledge_context.boundary.db.connection import isolated_session
from knowledge_context.configs import get_settings
from knowledge_context.core.document_processing import build_embedding_task
from knowledge_context.core.document_processing.entrypoint import DocumentPipeline
from knowledge_context.core.exceptions import ChunkingError, NotFoundError, ValidationError
from knowledge_context.observability.correlation import clear_correlation_id, set_correlation_id
from knowledge_context.observability.log_utils import log_exception_with_context
from knowledge_context.workers import celery_app

logger = logging.getLogger(__name__)


async def _ingest(document_id: uuid.UUID, force_regenerate: bool) -> dict:
    settings = get_settings()
    embedder = build_embedding_task(settings.embedding)
    async with isolated_session() as session:
        pipeline = DocumentPipeline(
            session,
            embedder,
            chunking=settings.chunking,
            backlog=settings.backlog,
        )
        result = await pipeline.process(document_id, force_regenerate=force_regenerate)
    return result.model_dump(mode="json")


@celery_app.task(
    bind=True,
    max_retries=3,
    autoretry_for=(Exception,),
    dont_autoretry_for=(NotFoundError, ChunkingError, ValidationError, ValueError),
    retry_backoff=60,
    retry_backoff_max=600,
)
def ingest_document(self, document_id: str, force_regenerate: bool = False):
    """
    Ingest document asynchronously.

    Args:
        document_id: Document UUID as string
        force_regenerate: Replace existing chunks and vectors

    Returns:
        dict: PipelineResult with chunk counts and per-chunk errors
    """
    set_correlation_id(self.request.id)
    try:
        logger.info(
            f"{__name__}:ingest_document - Starting",
            extra={"document_id": document_id, "attempt": self.request.retries + 1},
        )
        return asyncio.run(_ingest(uuid.UUID(document_id), force_regenerate))
    except Exception as e:
        log_exception_with_context(
            logger,
            f"{__name__}:ingest_document - Ingestion failed",
            e,
            document_id=document_id,
            attempt=self.request.retries + 1,
        )
        raise
    finally:
        clear_correlation_id()
