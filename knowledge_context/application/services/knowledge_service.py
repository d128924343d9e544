"""
Knowledge service orchestrator.

Coordinates document upload, background ingestion dispatch, synchronous
processing, processing status and search.

Dependencies: knowledge_context.boundary.db, knowledge_context.core, knowledge_context.workers
System role: Knowledge base use case orchestration
"""

import hashlib
import logging
from typing import Any, Callable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.boundary.db.base import EmbeddingStatus
from knowledge_context.boundary.db.CRUD.chunk_crud import chunk_crud
from knowledge_context.boundary.db.CRUD.document_crud import document_crud
from knowledge_context.boundary.db.CRUD.knowledge_base_crud import knowledge_base_crud
from knowledge_context.boundary.db.models import SourceType
from knowledge_context.configs import get_settings
from knowledge_context.core.document_processing.entrypoint import DocumentPipeline
from knowledge_context.core.document_processing.models import PipelineResult
from knowledge_context.core.document_processing.tasks import EmbeddingTask
from knowledge_context.core.exceptions import DocumentNotFoundError, TaskDispatchError, ValidationError
from knowledge_context.core.retrieval import AccessRecorder, HybridRetriever, SearchMode, SearchResponse
from knowledge_context.workers.tasks.ingestion import ingest_document

logger = logging.getLogger(__name__)


def _default_dispatcher(document_id: str) -> Any:
    return ingest_document.delay(document_id)


def content_hash(content: str) -> str:
    """SHA-256 hex digest of document text."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def derive_processing_status(counts: dict[EmbeddingStatus, int]) -> str:
    """
    Collapse per-status chunk counts into one document status.

    Returns:
        "errored" if any chunk failed, "completed" when every chunk is
        embedded, "processing" while chunks are claimed, else "pending"
    """
    total = sum(counts.values())
    if counts.get(EmbeddingStatus.ERRORED, 0):
        return "errored"
    if total and counts.get(EmbeddingStatus.EMBEDDED, 0) == total:
        return "completed"
    if counts.get(EmbeddingStatus.IN_PROGRESS, 0):
        return "processing"
    return "pending"


class KnowledgeService:
    """
    Knowledge service orchestrator.

    Upload stores the document and hands ingestion to Celery; the upload
    succeeds even when the broker is unreachable (processing is then False
    and the document can be processed later).
    """

    def __init__(
        self,
        db: AsyncSession,
        embedder: EmbeddingTask,
        dispatcher: Callable[[str], Any] | None = None,
        retriever: HybridRetriever | None = None,
        pipeline: DocumentPipeline | None = None,
        access_recorder: AccessRecorder | None = None,
    ) -> None:
        """
        Initialize knowledge service.

        Args:
            db: Async database session
            embedder: Embedding task shared by ingestion and search
            dispatcher: Submits a document id for background ingestion
                (defaults to the Celery ingest_document task)
            retriever: Optional HybridRetriever (created if None)
            pipeline: Optional DocumentPipeline (created if None)
            access_recorder: Records document access for search results
        """
        self.db = db
        self.embedder = embedder
        self._dispatch = dispatcher or _default_dispatcher
        self._retriever = retriever
        self._pipeline = pipeline
        self._access_recorder = access_recorder

    @property
    def retriever(self) -> HybridRetriever:
        """Lazy-load retriever to avoid initialization cost."""
        if self._retriever is None:
            self._retriever = HybridRetriever(
                self.db,
                self.embedder,
                settings=get_settings().retrieval,
                access_recorder=self._access_recorder,
            )
        return self._retriever

    @property
    def pipeline(self) -> DocumentPipeline:
        """Lazy-load pipeline to avoid initialization cost."""
        if self._pipeline is None:
            settings = get_settings()
            self._pipeline = DocumentPipeline(
                self.db,
                self.embedder,
                chunking=settings.chunking,
                backlog=settings.backlog,
            )
        return self._pipeline

    def _submit_ingestion(self, document_id: UUID) -> str | None:
        """
        Queue background ingestion for one document.

        Returns:
            Task id reported by the broker, if any

        Raises:
            TaskDispatchError: When the task cannot be submitted
        """
        try:
            async_result = self._dispatch(str(document_id))
        except Exception as e:
            raise TaskDispatchError(
                f"Failed to queue ingestion: {e}",
                {"document_id": str(document_id), "error_type": type(e).__name__},
            ) from e
        return getattr(async_result, "id", None)

    async def upload_document(
        self,
        agent_id: str,
        title: str,
        content: str,
        source_type: str = SourceType.TEXT.value,
        source_url: str | None = None,
        metadata: dict | None = None,
        knowledge_base_name: str | None = None,
        process: bool = True,
    ) -> dict:
        """
        Store a document in the agent's knowledge base and queue ingestion.

        Steps:
        1. Validate input
        2. Get or create the agent's knowledge base
        3. Create the document with its content hash
        4. Submit ingest_document to the task queue

        Args:
            agent_id: Owning agent
            title: Document title
            content: Plain text content
            source_type: text, markdown, pdf or html
            source_url: Optional origin URL
            metadata: Free-form document metadata
            knowledge_base_name: Name used if the knowledge base is created
            process: Submit background ingestion

        Returns:
            dict: document_id, knowledge_base_id, title, content_hash, processing, task_id

        Raises:
            ValidationError: Missing agent id, title or content, or unknown source type
        """
        if not agent_id or not agent_id.strip():
            raise ValidationError("agent_id is required", field="agent_id")
        if not title or not title.strip():
            raise ValidationError("title is required", field="title")
        if not content or not content.strip():
            raise ValidationError("content is required", field="content")
        try:
            source = SourceType(source_type)
        except ValueError as e:
            raise ValidationError(f"Unknown source type: {source_type}", field="source_type") from e

        knowledge_base, created = await knowledge_base_crud.get_or_create(
            self.db, agent_id, name=knowledge_base_name
        )
        document = await document_crud.create(
            self.db,
            knowledge_base_id=knowledge_base.id,
            title=title,
            content=content,
            source_type=source,
            source_url=source_url,
            content_hash=content_hash(content),
            doc_metadata=metadata or {},
            chunk_count=0,
        )
        await knowledge_base_crud.recompute_stats(self.db, knowledge_base.id)
        await self.db.commit()

        logger.info(
            f"{__name__}:upload_document - Stored document",
            extra={
                "document_id": str(document.id),
                "knowledge_base_id": str(knowledge_base.id),
                "knowledge_base_created": created,
                "content_length": len(content),
            },
        )

        processing = False
        task_id = None
        if process:
            try:
                task_id = self._submit_ingestion(document.id)
                processing = True
            except TaskDispatchError as e:
                logger.error(f"{__name__}:upload_document - {e.message}", extra=e.details)

        return {
            "document_id": document.id,
            "knowledge_base_id": knowledge_base.id,
            "title": document.title,
            "content_hash": document.content_hash,
            "processing": processing,
            "task_id": task_id,
        }

    async def process_document(self, document_id: UUID, force_regenerate: bool = False) -> PipelineResult:
        """
        Chunk and embed a document synchronously.

        Args:
            document_id: Document UUID
            force_regenerate: Replace existing chunks and vectors

        Returns:
            PipelineResult: Chunk counts and per-chunk errors

        Raises:
            DocumentNotFoundError: Unknown document
        """
        return await self.pipeline.process(document_id, force_regenerate=force_regenerate)

    async def get_processing_status(self, document_id: UUID) -> dict:
        """
        Report chunk embedding progress for a document.

        Args:
            document_id: Document UUID

        Returns:
            dict: document_id, title, chunk_count, per-status counts and derived status

        Raises:
            DocumentNotFoundError: Unknown document
        """
        document = await document_crud.get_by_id(self.db, document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)

        counts = await chunk_crud.count_by_status(self.db, document_id)
        return {
            "document_id": document.id,
            "title": document.title,
            "chunk_count": sum(counts.values()),
            "chunks_pending": counts[EmbeddingStatus.PENDING],
            "chunks_in_progress": counts[EmbeddingStatus.IN_PROGRESS],
            "chunks_embedded": counts[EmbeddingStatus.EMBEDDED],
            "chunks_errored": counts[EmbeddingStatus.ERRORED],
            "status": derive_processing_status(counts),
        }

    async def search(
        self,
        query: str,
        knowledge_base_id: UUID | None = None,
        agent_id: str | None = None,
        limit: int | None = None,
        mode: SearchMode | str = SearchMode.HYBRID,
    ) -> SearchResponse:
        """
        Search one knowledge base.

        Args:
            query: Search text
            knowledge_base_id: Scope by knowledge base id
            agent_id: Scope by owning agent
            limit: Maximum results
            mode: keyword, semantic or hybrid

        Returns:
            SearchResponse: Document-level results with excerpts
        """
        return await self.retriever.search(
            query,
            knowledge_base_id=knowledge_base_id,
            agent_id=agent_id,
            limit=limit,
            mode=mode,
        )
