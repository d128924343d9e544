"""
Knowledge chunk ORM model.

One positional window of a document's text, the unit of embedding and
semantic retrieval.

Dependencies: sqlalchemy, pgvector, knowledge_context.boundary.db.base
System role: Chunk persistence with embedding state
"""

import uuid

from sqlalchemy import JSON, ForeignKey, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from knowledge_context.boundary.db.base import (
    Base,
    EmbeddingStateMixin,
    TimestampMixin,
    UUIDMixin,
)


class KnowledgeChunkModel(Base, UUIDMixin, TimestampMixin, EmbeddingStateMixin):
    """
    Knowledge chunk ORM model.

    Chunks ordered by chunk_index cover their document's text with the
    configured overlap and no gaps.

    Attributes:
        id: UUID primary key (auto-generated)
        document_id: Owning KnowledgeDocumentModel (cascade delete)
        chunk_index: Zero-based position, unique within the document
        content: Chunk text
        chunk_metadata: title, chunk_number, total_chunks, start_char, end_char
        embedding, embedding_status, ...: see EmbeddingStateMixin

    Constraints:
        (document_id, chunk_index): UNIQUE
    """

    __tablename__ = "knowledge_chunks"
    __table_args__ = (
        UniqueConstraint("document_id", "chunk_index", name="uq_knowledge_chunks_document_index"),
    )

    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("knowledge_documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    chunk_metadata: Mapped[dict] = mapped_column(
        "metadata",
        JSON,
        nullable=False,
        default=dict,
    )

    document = relationship("KnowledgeDocumentModel", back_populates="chunks")
