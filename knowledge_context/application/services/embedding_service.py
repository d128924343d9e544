"""
Embedding service orchestrator.

Exposes the embedding backlog operations for graph nodes or document
chunks, resolving the caller's scope to the right owner column.

Dependencies: knowledge_context.core.backlog
System role: Embedding management use case orchestration
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.configs.backlog import BacklogSettings
from knowledge_context.core.backlog import CHUNK_TARGET, NODE_TARGET, BacklogManager
from knowledge_context.core.backlog.models import (
    BacklogStatus,
    ClearErrorsResult,
    GenerateResult,
    QueueResult,
    ValidationReport,
)
from knowledge_context.core.document_processing.tasks import EmbeddingTask
from knowledge_context.core.exceptions import ValidationError

TARGETS = {"nodes": NODE_TARGET, "chunks": CHUNK_TARGET}


class EmbeddingService:
    """Embedding backlog orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        embedder: EmbeddingTask,
        settings: BacklogSettings | None = None,
    ) -> None:
        """
        Initialize embedding service.

        Args:
            db: Async database session
            embedder: Embedding task
            settings: Backlog defaults (loads from env if None)
        """
        self.db = db
        self.embedder = embedder
        self.settings = settings or BacklogSettings()

    def manager(self, target: str = "nodes") -> BacklogManager:
        """
        Backlog manager for one target table.

        Raises:
            ValidationError: Unknown target
        """
        if target not in TARGETS:
            raise ValidationError(f"Unknown target: {target}. Use 'nodes' or 'chunks'.", field="target")
        return BacklogManager(self.db, self.embedder, settings=self.settings, target=TARGETS[target])

    @staticmethod
    def _owner(target: str, user_id: UUID | None, document_id: UUID | None) -> UUID | None:
        if target == "chunks":
            if user_id is not None:
                raise ValidationError("Chunk backlog is scoped by document_id, not user_id", field="user_id")
            return document_id
        if document_id is not None:
            raise ValidationError("Node backlog is scoped by user_id, not document_id", field="document_id")
        return user_id

    async def get_status(
        self,
        target: str = "nodes",
        user_id: UUID | None = None,
        document_id: UUID | None = None,
    ) -> BacklogStatus:
        """Backlog counts for all records or one owner."""
        owner = self._owner(target, user_id, document_id)
        return await self.manager(target).status(owner_id=owner)

    async def generate(
        self,
        target: str = "nodes",
        node_ids: Sequence[str] | None = None,
        user_id: UUID | None = None,
        document_id: UUID | None = None,
        batch_size: int | None = None,
        force_regenerate: bool = False,
    ) -> GenerateResult:
        """Embed explicit ids, one owner's records, or all pending records."""
        owner = self._owner(target, user_id, document_id)
        return await self.manager(target).generate(
            node_ids=node_ids,
            owner_id=owner,
            batch_size=batch_size,
            force_regenerate=force_regenerate,
        )

    async def process_queue(
        self,
        target: str = "nodes",
        max_nodes: int | None = None,
        batch_size: int | None = None,
        dry_run: bool = False,
        time_budget_seconds: float | None = None,
    ) -> QueueResult:
        """Embed up to max_nodes pending records."""
        return await self.manager(target).process_queue(
            max_nodes=max_nodes,
            batch_size=batch_size,
            dry_run=dry_run,
            time_budget_seconds=time_budget_seconds,
        )

    async def validate(
        self,
        target: str = "nodes",
        user_id: UUID | None = None,
        document_id: UUID | None = None,
        check_dimensions: bool = True,
        mark_invalid: bool = False,
    ) -> ValidationReport:
        """Re-check stored vectors."""
        owner = self._owner(target, user_id, document_id)
        return await self.manager(target).validate(
            owner_id=owner,
            check_dimensions=check_dimensions,
            mark_invalid=mark_invalid,
        )

    async def clear_errors(
        self,
        target: str = "nodes",
        user_id: UUID | None = None,
        document_id: UUID | None = None,
        node_ids: Sequence[str] | None = None,
    ) -> ClearErrorsResult:
        """Reset errored records to pending."""
        owner = self._owner(target, user_id, document_id)
        return await self.manager(target).clear_errors(owner_id=owner, node_ids=node_ids)
