"""
Embedding state CRUD operations.

Shared by every table carrying EmbeddingStateMixin (chunks, graph nodes).
Implements the backlog state machine as single-row, primary-key scoped
optimistic updates:

    pending --claim--> in_progress --complete--> embedded
                           |  +--fail--> errored --clear_errors--> pending
                           +-- claim timeout: reclaimable by another worker

A claim succeeds only if the row is still in a claimable state when the
UPDATE runs, so two workers racing for the same row cannot both win.

Dependencies: sqlalchemy, knowledge_context.boundary.db.base
System role: Backlog persistence for chunk and node embeddings
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import and_, case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.boundary.db.base import EmbeddingStatus, as_utc, utc_now
from knowledge_context.boundary.db.CRUD.base_crud import BaseCRUD, ModelT


MAX_ERROR_LENGTH = 2000


@dataclass(frozen=True)
class StatusBucket:
    """One group of the backlog status breakdown."""

    record_type: str
    status: EmbeddingStatus
    has_vector: bool
    count: int


@dataclass(frozen=True)
class StoredVector:
    """Stored vector state of one record, as read by validation."""

    id: UUID
    record_type: str
    status: EmbeddingStatus
    embedding: Any


class EmbeddableCRUD(BaseCRUD[ModelT]):
    """
    CRUD base for models with EmbeddingStateMixin.

    Subclasses set the owner column (scope for user/document filters) and
    optionally a type column used for per-type breakdowns.
    """

    type_label: str = "record"

    def __init__(self, model: type[ModelT], owner_column, type_column=None) -> None:
        """
        Initialize with model and scope columns.

        Args:
            model: SQLAlchemy model class with EmbeddingStateMixin
            owner_column: Column matched by owner_id scope filters
            type_column: Column grouped by in status breakdowns (None for a single type)
        """
        super().__init__(model)
        self.owner_column = owner_column
        self.type_column = type_column

    def _base_filters(self) -> list:
        """Filters applied to every backlog query (e.g. soft-delete)."""
        return []

    def _scoped(self, stmt, owner_id: UUID | None = None, ids: Sequence[UUID] | None = None):
        for clause in self._base_filters():
            stmt = stmt.where(clause)
        if owner_id is not None:
            stmt = stmt.where(self.owner_column == owner_id)
        if ids is not None:
            stmt = stmt.where(self.model.id.in_(list(ids)))
        return stmt

    def _claimable(self, claim_timeout_seconds: int, include_embedded: bool = False):
        model = self.model
        cutoff = utc_now() - timedelta(seconds=claim_timeout_seconds)
        conditions = [
            model.embedding_status == EmbeddingStatus.PENDING,
            and_(
                model.embedding_status == EmbeddingStatus.IN_PROGRESS,
                or_(model.embedding_claimed_at.is_(None), model.embedding_claimed_at < cutoff),
            ),
        ]
        if include_embedded:
            conditions.append(model.embedding_status == EmbeddingStatus.EMBEDDED)
        return or_(*conditions)

    async def status_breakdown(
        self,
        session: AsyncSession,
        owner_id: UUID | None = None,
    ) -> list[StatusBucket]:
        """
        Count records grouped by type, embedding status and vector presence.

        Args:
            session: Async database session
            owner_id: Restrict to one owner (None for all)

        Returns:
            list[StatusBucket]: One bucket per non-empty group
        """
        model = self.model
        has_vector = case((model.embedding.is_(None), 0), else_=1)
        group_cols = [model.embedding_status, has_vector]
        if self.type_column is not None:
            group_cols.insert(0, self.type_column)

        stmt = self._scoped(select(*group_cols, func.count()), owner_id=owner_id).group_by(*group_cols)
        result = await session.execute(stmt)

        buckets = []
        for row in result.all():
            if self.type_column is not None:
                record_type, status, vector_flag, count = row
            else:
                status, vector_flag, count = row
                record_type = self.type_label
            buckets.append(
                StatusBucket(
                    record_type=record_type,
                    status=EmbeddingStatus(status),
                    has_vector=bool(vector_flag),
                    count=count,
                )
            )
        return buckets

    async def oldest_pending_created_at(
        self,
        session: AsyncSession,
        owner_id: UUID | None = None,
    ) -> datetime | None:
        """
        Creation time of the oldest record still waiting for a vector.

        Args:
            session: Async database session
            owner_id: Restrict to one owner (None for all)

        Returns:
            UTC datetime, or None when nothing is pending
        """
        stmt = self._scoped(select(func.min(self.model.created_at)), owner_id=owner_id).where(
            self.model.embedding_status.in_([EmbeddingStatus.PENDING, EmbeddingStatus.IN_PROGRESS])
        )
        result = await session.execute(stmt)
        return as_utc(result.scalar_one_or_none())

    async def select_candidates(
        self,
        session: AsyncSession,
        claim_timeout_seconds: int,
        owner_id: UUID | None = None,
        ids: Sequence[UUID] | None = None,
        limit: int | None = None,
        include_embedded: bool = False,
    ) -> Sequence[ModelT]:
        """
        Select records eligible for embedding, oldest first.

        Errored records are never selected; they must go through clear_errors.

        Args:
            session: Async database session
            claim_timeout_seconds: Age after which an in-progress claim is stale
            owner_id: Restrict to one owner
            ids: Restrict to explicit record ids
            limit: Maximum records returned
            include_embedded: Also select records that already have a vector

        Returns:
            Sequence of model instances ordered by (created_at, id)
        """
        stmt = self._scoped(select(self.model), owner_id=owner_id, ids=ids).where(
            self._claimable(claim_timeout_seconds, include_embedded)
        )
        stmt = stmt.order_by(self.model.created_at, self.model.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def _transition(self, session: AsyncSession, id: UUID, condition, **values) -> bool:
        stmt = (
            update(self.model)
            .where(self.model.id == id, condition)
            .values(**values)
            .returning(self.model.id)
            .execution_options(synchronize_session="fetch")
        )
        result = await session.execute(stmt)
        return result.first() is not None

    async def claim(
        self,
        session: AsyncSession,
        id: UUID,
        claim_timeout_seconds: int,
        allow_embedded: bool = False,
    ) -> bool:
        """
        Move one record to IN_PROGRESS if it is still claimable.

        Args:
            session: Async database session
            id: Record primary key
            claim_timeout_seconds: Age after which another worker's claim is stale
            allow_embedded: Permit claiming an EMBEDDED record (force regenerate)

        Returns:
            True if this caller now owns the record
        """
        return await self._transition(
            session,
            id,
            self._claimable(claim_timeout_seconds, allow_embedded),
            embedding_status=EmbeddingStatus.IN_PROGRESS,
            embedding_claimed_at=utc_now(),
        )

    async def complete(self, session: AsyncSession, id: UUID, vector: list[float]) -> bool:
        """
        Write the vector and move a claimed record to EMBEDDED.

        Args:
            session: Async database session
            id: Record primary key
            vector: Embedding produced for the record

        Returns:
            True if the record was still claimed and is now embedded
        """
        return await self._transition(
            session,
            id,
            self.model.embedding_status == EmbeddingStatus.IN_PROGRESS,
            embedding=vector,
            embedding_status=EmbeddingStatus.EMBEDDED,
            embedding_error=None,
            embedding_claimed_at=None,
            embedded_at=utc_now(),
        )

    async def fail(self, session: AsyncSession, id: UUID, error: str) -> bool:
        """
        Move a claimed record to ERRORED, keeping any previous vector.

        Args:
            session: Async database session
            id: Record primary key
            error: Failure description

        Returns:
            True if the record was still claimed and is now errored
        """
        return await self._transition(
            session,
            id,
            self.model.embedding_status == EmbeddingStatus.IN_PROGRESS,
            embedding_status=EmbeddingStatus.ERRORED,
            embedding_error=error[:MAX_ERROR_LENGTH],
            embedding_claimed_at=None,
        )

    async def mark_errored(self, session: AsyncSession, id: UUID, error: str) -> bool:
        """
        Flag a record as ERRORED regardless of its current state.

        Used by validation to route inconsistent vectors through clear-errors
        and regeneration.

        Args:
            session: Async database session
            id: Record primary key
            error: Inconsistency description

        Returns:
            True if the record exists
        """
        return await self._transition(
            session,
            id,
            self.model.embedding_status != EmbeddingStatus.ERRORED,
            embedding_status=EmbeddingStatus.ERRORED,
            embedding_error=error[:MAX_ERROR_LENGTH],
            embedding_claimed_at=None,
        )

    async def clear_errors(
        self,
        session: AsyncSession,
        owner_id: UUID | None = None,
        ids: Sequence[UUID] | None = None,
    ) -> int:
        """
        Return ERRORED records to PENDING.

        Args:
            session: Async database session
            owner_id: Restrict to one owner
            ids: Restrict to explicit record ids

        Returns:
            int: Number of records cleared
        """
        stmt = self._scoped(update(self.model), owner_id=owner_id, ids=ids)
        stmt = (
            stmt.where(self.model.embedding_status == EmbeddingStatus.ERRORED)
            .values(embedding_status=EmbeddingStatus.PENDING, embedding_error=None)
            .returning(self.model.id)
            .execution_options(synchronize_session="fetch")
        )
        result = await session.execute(stmt)
        return len(result.all())

    async def stored_vectors(
        self,
        session: AsyncSession,
        owner_id: UUID | None = None,
    ) -> list[StoredVector]:
        """
        Read every record that has, or claims to have, a vector.

        Args:
            session: Async database session
            owner_id: Restrict to one owner

        Returns:
            list[StoredVector]: Records with a vector or with EMBEDDED status
        """
        model = self.model
        type_col = self.type_column if self.type_column is not None else model.id
        stmt = self._scoped(
            select(model.id, type_col, model.embedding_status, model.embedding),
            owner_id=owner_id,
        ).where(or_(model.embedding.is_not(None), model.embedding_status == EmbeddingStatus.EMBEDDED))
        result = await session.execute(stmt.order_by(model.id))
        return [
            StoredVector(
                id=row[0],
                record_type=row[1] if self.type_column is not None else self.type_label,
                status=EmbeddingStatus(row[2]),
                embedding=row[3],
            )
            for row in result.all()
        ]
