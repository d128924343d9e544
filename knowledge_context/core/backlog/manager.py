"""
Embedding backlog manager.

Tracks which records still need a vector and drives their (re)processing.
Works on any table carrying the embedding-state columns; graph nodes are the
default target, document chunks the other.

Every record is claimed (pending -> in_progress) with a single-row optimistic
update before it is embedded, and only the claimant may move it on to
embedded or errored, so concurrent runners never embed the same record twice.
A claim left behind by a crashed runner becomes reclaimable after
claim_timeout_seconds.

Dependencies: sqlalchemy, numpy, knowledge_context.boundary.db,
    knowledge_context.core.document_processing
System role: Status, generation, queue processing and validation of embeddings
"""

import asyncio
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence
from uuid import UUID

import numpy as np
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.boundary.db.base import EmbeddingStatus, utc_now
from knowledge_context.boundary.db.CRUD.chunk_crud import chunk_crud
from knowledge_context.boundary.db.CRUD.embeddable_crud import EmbeddableCRUD
from knowledge_context.boundary.db.CRUD.graph_node_crud import graph_node_crud
from knowledge_context.configs.backlog import BacklogSettings
from knowledge_context.core.backlog.models import (
    BacklogStatus,
    ClearErrorsResult,
    GenerateResult,
    QueueResult,
    QueueStats,
    RecordError,
    TypeBreakdown,
    ValidationIssue,
    ValidationReport,
)
from knowledge_context.core.backlog.node_text import prepare_chunk_text, prepare_node_text
from knowledge_context.core.document_processing.models import EmbeddingRequest
from knowledge_context.core.document_processing.tasks.embedding_task import EmbeddingTask
from knowledge_context.core.exceptions import ValidationError
from knowledge_context.core.tokens import estimate_tokens

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400
MAX_SAMPLE_IDS = 20


@dataclass(frozen=True)
class EmbeddingTarget:
    """A table whose records the backlog embeds."""

    name: str
    crud: EmbeddableCRUD
    prepare_text: Callable[[Any], str]


NODE_TARGET = EmbeddingTarget(name="nodes", crud=graph_node_crud, prepare_text=prepare_node_text)
CHUNK_TARGET = EmbeddingTarget(name="chunks", crud=chunk_crud, prepare_text=prepare_chunk_text)


def parse_record_ids(values: Sequence[str] | None, field: str = "node_ids") -> list[UUID] | None:
    """
    Parse an explicit id list.

    Args:
        values: Raw id strings, or None for "no explicit list"
        field: Request field name reported on failure

    Returns:
        list[UUID] or None

    Raises:
        ValidationError: If the list is empty or any id is malformed
    """
    if values is None:
        return None
    if len(values) == 0:
        raise ValidationError("Id list must not be empty", field=field)
    parsed = []
    for value in values:
        try:
            parsed.append(value if isinstance(value, UUID) else UUID(str(value)))
        except ValueError as e:
            raise ValidationError(f"Malformed id: {value!r}", field=field) from e
    return parsed


@dataclass
class _RunOutcome:
    processed: int = 0
    tokens_used: int = 0
    batches: int = 0
    skipped: int = 0
    stopped_early: bool = False
    owners: set = field(default_factory=set)
    errors: list[RecordError] = field(default_factory=list)


class BacklogManager:
    """Status, Generate, Process-queue, Validate and Clear-errors for one target."""

    def __init__(
        self,
        session: AsyncSession,
        embedder: EmbeddingTask,
        settings: BacklogSettings | None = None,
        target: EmbeddingTarget = NODE_TARGET,
    ) -> None:
        """
        Initialize backlog manager.

        Args:
            session: Async database session
            embedder: Embedding task producing fixed-dimension vectors
            settings: Batch sizes and claim timeout (defaults from environment)
            target: Table to manage (graph nodes by default)
        """
        self.session = session
        self.embedder = embedder
        self.settings = settings or BacklogSettings()
        self.target = target

    @property
    def crud(self) -> EmbeddableCRUD:
        return self.target.crud

    def _owner_of(self, record) -> Any:
        return getattr(record, self.crud.owner_column.key)

    async def status(self, owner_id: UUID | None = None) -> BacklogStatus:
        """
        Summarize the backlog.

        Args:
            owner_id: Restrict to one owner (None for all records)

        Returns:
            BacklogStatus: Totals, error count, oldest pending age and per-type breakdown
        """
        buckets = await self.crud.status_breakdown(self.session, owner_id=owner_id)
        status = BacklogStatus()

        for bucket in buckets:
            breakdown = status.by_type.setdefault(bucket.record_type, TypeBreakdown())
            breakdown.total += bucket.count
            status.total += bucket.count
            if bucket.has_vector:
                breakdown.with_embedding += bucket.count
                status.with_embedding += bucket.count
            else:
                breakdown.without_embedding += bucket.count
                status.without_embedding += bucket.count
            if bucket.status == EmbeddingStatus.ERRORED:
                breakdown.with_errors += bucket.count
                status.with_errors += bucket.count
            elif bucket.status == EmbeddingStatus.IN_PROGRESS:
                status.in_progress += bucket.count

        oldest = await self.crud.oldest_pending_created_at(self.session, owner_id=owner_id)
        if oldest is not None:
            age_seconds = (utc_now() - oldest).total_seconds()
            status.oldest_pending_age_days = round(max(age_seconds, 0.0) / SECONDS_PER_DAY, 2)

        logger.info(
            f"{__name__}:status - {self.target.name} backlog",
            extra={
                "total": status.total,
                "without_embedding": status.without_embedding,
                "with_errors": status.with_errors,
            },
        )
        return status

    async def _embed_records(
        self,
        records: Sequence,
        batch_size: int,
        allow_embedded: bool = False,
        deadline: float | None = None,
        pace_batches: bool = False,
    ) -> _RunOutcome:
        """
        Claim, embed and complete records batch by batch, committing per batch.

        With pace_batches, waits between batches (never after the last one)
        for a delay scaled by the previous batch's tokens.
        """
        outcome = _RunOutcome()
        timeout = self.settings.claim_timeout_seconds

        for start in range(0, len(records), batch_size):
            if deadline is not None and time.monotonic() >= deadline:
                outcome.stopped_early = True
                logger.warning(
                    f"{__name__}:_embed_records - Deadline reached after {outcome.batches} batches"
                )
                break
            if pace_batches and start > 0:
                await asyncio.sleep(self.settings.batch_delay_seconds(batch_tokens))
            batch_tokens = 0

            batch = records[start : start + batch_size]
            claimed = []
            for record in batch:
                if await self.crud.claim(self.session, record.id, timeout, allow_embedded=allow_embedded):
                    claimed.append(record)
                else:
                    outcome.skipped += 1
            await self.session.commit()
            outcome.batches += 1

            if not claimed:
                continue

            by_id = {str(record.id): record for record in claimed}
            requests = [
                EmbeddingRequest(id=key, text=self.target.prepare_text(record))
                for key, record in by_id.items()
            ]

            try:
                result = await self.embedder.embed_batch(requests)
                successes = [(item.id, item.vector) for item in result.results]
                failures = [(failure.id, failure.error) for failure in result.errors]
                batch_tokens = result.tokens_used
                outcome.tokens_used += result.tokens_used
            except Exception as e:
                logger.error(f"{__name__}:_embed_records - Embedding batch failed: {e}", exc_info=True)
                successes = []
                failures = [(key, f"{type(e).__name__}: {e}") for key in by_id]

            for key, vector in successes:
                record = by_id[key]
                if await self.crud.complete(self.session, record.id, vector):
                    outcome.processed += 1
                    outcome.owners.add(self._owner_of(record))
                else:
                    outcome.errors.append(RecordError(id=key, error="claim lost before completion"))

            for key, error in failures:
                await self.crud.fail(self.session, by_id[key].id, error)
                outcome.errors.append(RecordError(id=key, error=error))

            await self.session.commit()

        return outcome

    async def _explain_unselected(
        self,
        ids: list[UUID],
        selected: Sequence,
        force_regenerate: bool,
    ) -> list[RecordError]:
        """Describe why explicitly requested ids were not selected."""
        selected_ids = {record.id for record in selected}
        missing = [record_id for record_id in ids if record_id not in selected_ids]
        if not missing:
            return []

        found = {record.id: record for record in await self.crud.get_by_ids(self.session, missing)}
        errors = []
        for record_id in missing:
            record = found.get(record_id)
            if record is None:
                reason = "not found"
            elif record.embedding_status == EmbeddingStatus.ERRORED:
                reason = "errored; clear errors before regenerating"
            elif record.embedding_status == EmbeddingStatus.EMBEDDED and not force_regenerate:
                continue
            else:
                reason = "claimed by another worker"
            errors.append(RecordError(id=str(record_id), error=reason))
        return errors

    async def generate(
        self,
        node_ids: Sequence[str] | None = None,
        owner_id: UUID | None = None,
        batch_size: int | None = None,
        force_regenerate: bool = False,
    ) -> GenerateResult:
        """
        Embed an explicit id list, one owner's records, or every pending record.

        Args:
            node_ids: Explicit record ids (takes precedence over owner scope)
            owner_id: Restrict to one owner
            batch_size: Records per claim/embed/commit cycle
            force_regenerate: Also re-embed records that already have a vector

        Returns:
            GenerateResult: Summary message, counts and per-record errors

        Raises:
            ValidationError: On a malformed id list or non-positive batch size
        """
        ids = parse_record_ids(node_ids)
        batch_size = batch_size if batch_size is not None else self.settings.generate_batch_size
        if batch_size < 1:
            raise ValidationError("batch_size must be positive", field="batch_size")

        candidates = await self.crud.select_candidates(
            self.session,
            self.settings.claim_timeout_seconds,
            owner_id=owner_id,
            ids=ids,
            include_embedded=force_regenerate,
        )
        errors = await self._explain_unselected(ids, candidates, force_regenerate) if ids else []

        if not candidates:
            return GenerateResult(message=f"No {self.target.name} need embedding updates", errors=errors)

        logger.info(
            f"{__name__}:generate - Embedding {len(candidates)} {self.target.name}",
            extra={"force_regenerate": force_regenerate, "batch_size": batch_size},
        )
        outcome = await self._embed_records(candidates, batch_size, allow_embedded=force_regenerate)
        errors.extend(outcome.errors)

        return GenerateResult(
            message=f"Successfully processed {outcome.processed} of {len(candidates)} {self.target.name}",
            processed=outcome.processed,
            total=len(candidates),
            errors=errors,
        )

    async def process_queue(
        self,
        max_nodes: int | None = None,
        batch_size: int | None = None,
        dry_run: bool = False,
        time_budget_seconds: float | None = None,
    ) -> QueueResult:
        """
        Embed up to max_nodes pending records, oldest first.

        Args:
            max_nodes: Maximum records selected for this run
            batch_size: Records per claim/embed/commit cycle
            dry_run: Select and plan batches only; write nothing
            time_budget_seconds: Stop between batches once this much time has passed

        Returns:
            QueueResult: Message, run statistics and per-record errors

        Raises:
            ValidationError: On non-positive max_nodes or batch_size
        """
        started = time.perf_counter()
        max_nodes = max_nodes if max_nodes is not None else self.settings.queue_max_nodes
        batch_size = batch_size if batch_size is not None else self.settings.queue_batch_size
        if max_nodes < 1:
            raise ValidationError("max_nodes must be positive", field="max_nodes")
        if batch_size < 1:
            raise ValidationError("batch_size must be positive", field="batch_size")

        candidates = await self.crud.select_candidates(
            self.session,
            self.settings.claim_timeout_seconds,
            limit=max_nodes,
        )

        if not candidates:
            stats = QueueStats(elapsed_ms=round((time.perf_counter() - started) * 1000, 2))
            return QueueResult(
                message=f"No {self.target.name} need embedding updates",
                dry_run=dry_run,
                stats=stats,
            )

        if dry_run:
            stats = QueueStats(
                processed=len(candidates),
                users_affected=len({self._owner_of(record) for record in candidates}),
                tokens_used=sum(estimate_tokens(self.target.prepare_text(record)) for record in candidates),
                batches=math.ceil(len(candidates) / batch_size),
                elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            logger.info(
                f"{__name__}:process_queue - Dry run selected {len(candidates)} {self.target.name}",
                extra={"batches": stats.batches},
            )
            return QueueResult(
                message="Dry run completed - no embeddings generated",
                dry_run=True,
                stats=stats,
            )

        deadline = time.monotonic() + time_budget_seconds if time_budget_seconds else None
        outcome = await self._embed_records(candidates, batch_size, deadline=deadline, pace_batches=True)

        stats = QueueStats(
            processed=outcome.processed,
            errors=len(outcome.errors),
            users_affected=len(outcome.owners),
            tokens_used=outcome.tokens_used,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
            batches=outcome.batches,
            skipped=outcome.skipped,
            stopped_early=outcome.stopped_early,
        )
        logger.info(
            f"{__name__}:process_queue - Run complete",
            extra=stats.model_dump(),
        )
        return QueueResult(
            message=(
                f"Queue processing completed. Processed {stats.processed} "
                f"{self.target.name} with {stats.errors} errors."
            ),
            stats=stats,
            error_details=outcome.errors,
        )

    async def validate(
        self,
        owner_id: UUID | None = None,
        check_dimensions: bool = True,
        mark_invalid: bool = False,
    ) -> ValidationReport:
        """
        Re-check stored vectors for presence, dimension and finiteness.

        Args:
            owner_id: Restrict to one owner
            check_dimensions: Compare vector length against the embedder dimension
            mark_invalid: Flag invalid records as errored so that Clear-errors
                followed by Generate repairs them

        Returns:
            ValidationReport: Valid/invalid counts and categorized issues
        """
        rows = await self.crud.stored_vectors(self.session, owner_id=owner_id)
        dimension = self.embedder.dimension
        invalid: dict[str, list[UUID]] = {"missing_vector": [], "wrong_dimension": [], "non_finite_values": []}

        for row in rows:
            if row.embedding is None:
                invalid["missing_vector"].append(row.id)
                continue
            vector = np.asarray(row.embedding, dtype=float)
            if check_dimensions and vector.shape[0] != dimension:
                invalid["wrong_dimension"].append(row.id)
            elif not np.all(np.isfinite(vector)):
                invalid["non_finite_values"].append(row.id)

        descriptions = {
            "missing_vector": "embedded but vector is null: {n} records",
            "wrong_dimension": f"wrong dimension: {{n}} records (expected {dimension})",
            "non_finite_values": "non-finite values: {n} records",
        }
        issues = [
            ValidationIssue(
                issue=issue,
                description=descriptions[issue].format(n=len(ids)),
                count=len(ids),
                sample_ids=[str(record_id) for record_id in ids[:MAX_SAMPLE_IDS]],
            )
            for issue, ids in invalid.items()
            if ids
        ]
        invalid_count = sum(issue.count for issue in issues)

        if mark_invalid and invalid_count:
            for issue, ids in invalid.items():
                for record_id in ids:
                    await self.crud.mark_errored(self.session, record_id, f"validation: {issue}")
            await self.session.commit()

        if invalid_count:
            logger.warning(
                f"{__name__}:validate - {invalid_count} invalid vectors",
                extra={issue.issue: issue.count for issue in issues},
            )

        return ValidationReport(
            total_checked=len(rows),
            valid=len(rows) - invalid_count,
            invalid=invalid_count,
            issues=issues,
        )

    async def clear_errors(
        self,
        owner_id: UUID | None = None,
        node_ids: Sequence[str] | None = None,
    ) -> ClearErrorsResult:
        """
        Send errored records back to pending.

        Args:
            owner_id: Restrict to one owner
            node_ids: Restrict to explicit record ids

        Returns:
            ClearErrorsResult: Number of records cleared

        Raises:
            ValidationError: On a malformed id list
        """
        ids = parse_record_ids(node_ids)
        cleared = await self.crud.clear_errors(self.session, owner_id=owner_id, ids=ids)
        await self.session.commit()
        logger.info(f"{__name__}:clear_errors - Cleared {cleared} {self.target.name}")
        return ClearErrorsResult(cleared_count=cleared)
