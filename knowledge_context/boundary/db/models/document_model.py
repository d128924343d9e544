"""
Knowledge document ORM model.

Stores the full plain text of an uploaded document. Format extraction
(PDF, HTML) happens before upload; this table only sees text.

Dependencies: sqlalchemy, knowledge_context.boundary.db.base
System role: Document persistence for chunking and keyword search
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from knowledge_context.boundary.db.base import Base, TimestampMixin, UUIDMixin


class SourceType(str, enum.Enum):
    """Original format of the uploaded document before text extraction."""

    TEXT = "text"
    MARKDOWN = "markdown"
    PDF = "pdf"
    HTML = "html"


class KnowledgeDocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Knowledge document ORM model.

    Documents are mutated when re-chunked and are never physically deleted
    by the pipeline. Deleting one cascades to its chunks.

    Attributes:
        id: UUID primary key (auto-generated)
        knowledge_base_id: Owning KnowledgeBaseModel (cascade delete)
        title: Document title, shown as the source of rendered chunks
        content: Full plain text
        source_type: SourceType of the original upload
        source_url: Optional origin URL
        content_hash: SHA-256 of content, hex encoded
        chunk_count: Number of chunks currently stored
        doc_metadata: Free-form metadata (stored in column "metadata")
        access_count: Times returned by search
        last_accessed_at: Last time returned by search
        chunks: KnowledgeChunkModel rows ordered by chunk_index
    """

    __tablename__ = "knowledge_documents"

    knowledge_base_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("knowledge_bases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(512), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    source_type: Mapped[SourceType] = mapped_column(
        Enum(SourceType, native_enum=False, length=20),
        nullable=False,
        default=SourceType.TEXT,
    )

    source_url: Mapped[str | None] = mapped_column(String(2048), nullable=True, default=None)

    content_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    chunk_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    doc_metadata: Mapped[dict] = mapped_column(
        "metadata",
        JSON,
        nullable=False,
        default=dict,
    )

    access_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    last_accessed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    knowledge_base = relationship("KnowledgeBaseModel", back_populates="documents")
    chunks = relationship(
        "KnowledgeChunkModel",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="KnowledgeChunkModel.chunk_index",
    )
