"""
Document pipeline orchestrator.

Chunks a stored document and embeds its chunks. Chunking runs only when the
document has no chunks yet (or on force_regenerate, which replaces them);
embedding goes through the chunk backlog so claims protect against a
concurrent worker processing the same document. Re-running on a fully
embedded document changes nothing.

Dependencies: sqlalchemy, knowledge_context.boundary.db, knowledge_context.core.backlog
System role: Pipeline orchestration (coordinates only)
"""

import logging
import time
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.boundary.db.CRUD.chunk_crud import chunk_crud
from knowledge_context.boundary.db.CRUD.document_crud import document_crud
from knowledge_context.boundary.db.CRUD.knowledge_base_crud import knowledge_base_crud
from knowledge_context.configs.backlog import BacklogSettings
from knowledge_context.configs.chunking import ChunkingSettings
from knowledge_context.core.backlog.manager import CHUNK_TARGET, BacklogManager
from knowledge_context.core.document_processing.models import EmbeddingFailure, PipelineResult
from knowledge_context.core.document_processing.tasks import ChunkingTask, EmbeddingTask
from knowledge_context.core.exceptions import ChunkingError, DocumentNotFoundError, ValidationError

logger = logging.getLogger(__name__)


class DocumentPipeline:
    """Orchestrate document ingestion: chunk -> store chunks -> embed -> refresh aggregate."""

    def __init__(
        self,
        session: AsyncSession,
        embedder: EmbeddingTask,
        chunking: ChunkingSettings | None = None,
        backlog: BacklogSettings | None = None,
    ) -> None:
        """
        Initialize pipeline with configuration.

        Args:
            session: Async database session
            embedder: Embedding task for chunk vectors
            chunking: Chunk size and overlap (uses defaults if None)
            backlog: Claim timeout for chunk embedding (uses defaults if None)
        """
        chunking = chunking or ChunkingSettings()
        self.session = session
        self._chunking_task = ChunkingTask(
            chunk_size=chunking.chunk_size,
            chunk_overlap=chunking.chunk_overlap,
        )
        self._backlog = BacklogManager(session, embedder, settings=backlog, target=CHUNK_TARGET)
        self._batch_size = embedder.batch_size

    async def _store_chunks(self, document_id: UUID, title: str, content: str) -> int:
        try:
            chunks = self._chunking_task.split_text(content)
        except ValidationError as e:
            raise ChunkingError(f"Cannot chunk document: {e.message}", document_id=str(document_id)) from e

        await chunk_crud.create_many(
            self.session,
            document_id,
            [
                {
                    "chunk_index": chunk.index,
                    "content": chunk.content,
                    "chunk_metadata": chunk.metadata(title, len(chunks)),
                }
                for chunk in chunks
            ],
        )
        await document_crud.update_by_id(self.session, document_id, chunk_count=len(chunks))
        await self.session.commit()
        return len(chunks)

    async def process(self, document_id: UUID, force_regenerate: bool = False) -> PipelineResult:
        """
        Process document through full pipeline.

        Args:
            document_id: Stored document to process
            force_regenerate: Discard existing chunks and vectors and start over

        Returns:
            PipelineResult: Chunk counts, embedded count and per-chunk failures

        Raises:
            DocumentNotFoundError: Unknown document id
            ChunkingError: Document has no content to chunk
        """
        start_time = time.perf_counter()

        document = await document_crud.get_by_id(self.session, document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        knowledge_base_id = document.knowledge_base_id
        title = document.title
        content = document.content

        chunks_created = 0
        if force_regenerate:
            removed = await chunk_crud.delete_by_document(self.session, document_id)
            await self.session.commit()
            logger.info(f"{__name__}:process - Removed {removed} chunks for regeneration")

        existing = await chunk_crud.get_by_document(self.session, document_id)
        if not existing:
            chunks_created = await self._store_chunks(document_id, title, content)
            logger.info(
                f"{__name__}:process - Created {chunks_created} chunks",
                extra={"document_id": str(document_id)},
            )

        generated = await self._backlog.generate(owner_id=document_id, batch_size=self._batch_size)

        await knowledge_base_crud.recompute_stats(self.session, knowledge_base_id)
        await self.session.commit()

        chunk_count = chunks_created or len(existing)
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"{__name__}:process - {generated.message}",
            extra={
                "document_id": str(document_id),
                "chunk_count": chunk_count,
                "errors": len(generated.errors),
                "processing_time_ms": round(elapsed_ms, 2),
            },
        )

        return PipelineResult(
            document_id=document_id,
            chunk_count=chunk_count,
            chunks_created=chunks_created,
            chunks_embedded=generated.processed,
            errors=[EmbeddingFailure(id=error.id, error=error.error) for error in generated.errors],
            processing_time_ms=elapsed_ms,
        )
