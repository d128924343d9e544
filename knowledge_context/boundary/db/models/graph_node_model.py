"""
Graph node ORM model.

Nodes of a user's personal knowledge graph (goals, insights, sessions,
emotions, ...). The graph itself is maintained elsewhere; this pipeline
reads the nodes and writes only their embedding state.

Dependencies: sqlalchemy, pgvector, knowledge_context.boundary.db.base
System role: Graph node persistence with embedding state
"""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from knowledge_context.boundary.db.base import (
    Base,
    EmbeddingStateMixin,
    TimestampMixin,
    UUIDMixin,
)


class NodeType:
    """Node type labels used by retrieval and text preparation."""

    GOAL = "goal"
    INSIGHT = "insight"
    SESSION = "session"
    EMOTION = "emotion"
    SKILL = "skill"
    ACCOMPLISHMENT = "accomplishment"


class GraphNodeModel(Base, UUIDMixin, TimestampMixin, EmbeddingStateMixin):
    """
    Graph node ORM model.

    Attributes:
        id: UUID primary key (auto-generated)
        user_id: Owning user
        node_type: One of NodeType (free-form string, other types allowed)
        label: Short node title
        description: Optional long text
        properties: Type-specific fields (status, progress, strategies, ...)
        deleted_at: Soft-delete marker; deleted nodes are never retrieved
        embedding, embedding_status, ...: see EmbeddingStateMixin
    """

    __tablename__ = "graph_nodes"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
    )

    node_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    label: Mapped[str] = mapped_column(String(512), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    properties: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )
