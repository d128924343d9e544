"""
Knowledge base ORM model.

Aggregate row over one agent's knowledge documents. Counts and indexing
status are derived from the documents and chunks and recomputed after
ingestion; they are never the source of truth.

Dependencies: sqlalchemy, knowledge_context.boundary.db.base
System role: Knowledge base scope for document search
"""

import enum

from sqlalchemy import Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from knowledge_context.boundary.db.base import Base, TimestampMixin, UUIDMixin


class IndexingStatus(str, enum.Enum):
    """
    Knowledge base indexing states.

    PENDING: At least one chunk has no vector yet
    INDEXED: Every chunk of every document carries a vector
    """

    PENDING = "pending"
    INDEXED = "indexed"


class KnowledgeBaseModel(Base, UUIDMixin, TimestampMixin):
    """
    Knowledge base ORM model, one per agent.

    Attributes:
        id: UUID primary key (auto-generated)
        agent_id: Owning agent identifier (unique)
        name: Display name
        description: Optional description
        document_count: Cached number of documents
        total_chunks: Cached number of chunks across documents
        indexing_status: PENDING until all chunks are embedded
        documents: KnowledgeDocumentModel rows (cascade delete)
    """

    __tablename__ = "knowledge_bases"

    agent_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        doc="Agent that owns this knowledge base",
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    document_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    total_chunks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    indexing_status: Mapped[IndexingStatus] = mapped_column(
        Enum(IndexingStatus, native_enum=False, length=20),
        nullable=False,
        default=IndexingStatus.PENDING,
    )

    documents = relationship(
        "KnowledgeDocumentModel",
        back_populates="knowledge_base",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
