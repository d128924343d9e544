"""
SQLAlchemy declarative base and common mixins.

Provides base class for all ORM models and reusable mixins
for common fields (timestamps, UUIDs, embedding state).

Dependencies: sqlalchemy, pgvector
System role: Foundation for all database models
"""

import enum
import uuid
from datetime import datetime, timezone

from pgvector.sqlalchemy import Vector
from sqlalchemy import DateTime, Enum, Text, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Timezone-aware current time used for every timestamp column."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes returned by drivers that drop tzinfo (sqlite)."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for ORM model registration.

    All database models inherit from this class to ensure they're
    registered with the metadata and included in table creation.
    """

    pass


class UUIDMixin:
    """
    Mixin providing UUID primary key to all models.

    Generates UUID v4 automatically on row creation. Uses the generic Uuid
    type: native UUID on PostgreSQL, CHAR(32) elsewhere.

    Attributes:
        id: UUID v4 primary key, auto-generated on insert
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )


class TimestampMixin:
    """
    Mixin providing automatic timestamp tracking to all models.

    created_at is set once on row creation and never changes.
    updated_at is refreshed on every update via onupdate hook.
    Both use UTC timezone for consistency across deployments.

    Attributes:
        created_at: Row creation timestamp (UTC, immutable)
        updated_at: Last modification timestamp (UTC, auto-updated)
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )


class EmbeddingStatus(str, enum.Enum):
    """
    Embedding lifecycle of a chunk or graph node.

    PENDING: No valid vector yet; eligible for Generate / Process-queue
    IN_PROGRESS: Claimed by one processor; reclaimable once the claim times out
    EMBEDDED: Vector present and written by a completed claim
    ERRORED: Last attempt failed; only clear-errors returns it to PENDING
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    EMBEDDED = "embedded"
    ERRORED = "errored"


class EmbeddingStateMixin:
    """
    Mixin carrying an embedding vector and its backlog state.

    The vector column is declared without a fixed dimension so a vector of
    the wrong size can be stored by a misconfigured provider and later
    reported by validation instead of failing the write.

    Attributes:
        embedding: Nullable vector
        embedding_status: EmbeddingStatus state machine position
        embedding_error: Message from the last failed attempt
        embedding_claimed_at: When the current IN_PROGRESS claim was taken
        embedded_at: When the current vector was written
    """

    embedding: Mapped[list[float] | None] = mapped_column(
        Vector(),
        nullable=True,
        default=None,
    )

    embedding_status: Mapped[EmbeddingStatus] = mapped_column(
        Enum(EmbeddingStatus, native_enum=False, length=20),
        nullable=False,
        default=EmbeddingStatus.PENDING,
        index=True,
    )

    embedding_error: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )

    embedding_claimed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    embedded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )
