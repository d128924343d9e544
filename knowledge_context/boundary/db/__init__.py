"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin, EmbeddingStateMixin: Model building blocks
  - EmbeddingStatus: Backlog state machine positions
  - get_engine(), get_async_engine(), get_async_session_factory(), get_async_db(): Connections
  - create_tables(): Schema creation (pgvector extension + tables)
  - Knowledge and graph models, CRUD classes and singletons

Dependencies: sqlalchemy, pgvector, knowledge_context.configs
System role: Database adapter for knowledge documents, chunks and graph nodes
"""

from knowledge_context.boundary.db.base import (
    Base,
    EmbeddingStateMixin,
    EmbeddingStatus,
    TimestampMixin,
    UUIDMixin,
)
from knowledge_context.boundary.db.connection import (
    create_tables,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
    get_engine,
    isolated_session,
)
from knowledge_context.boundary.db.models import (
    GraphNodeModel,
    IndexingStatus,
    KnowledgeBaseModel,
    KnowledgeChunkModel,
    KnowledgeDocumentModel,
    NodeType,
    SourceType,
)
from knowledge_context.boundary.db.CRUD import (
    BaseCRUD,
    ChunkCRUD,
    DocumentCRUD,
    EmbeddableCRUD,
    GraphNodeCRUD,
    KnowledgeBaseCRUD,
    chunk_crud,
    document_crud,
    graph_node_crud,
    knowledge_base_crud,
)

__all__ = [
    # Base classes
    "Base",
    "EmbeddingStateMixin",
    "EmbeddingStatus",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "create_tables",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    "get_engine",
    "isolated_session",
    # Models
    "GraphNodeModel",
    "IndexingStatus",
    "KnowledgeBaseModel",
    "KnowledgeChunkModel",
    "KnowledgeDocumentModel",
    "NodeType",
    "SourceType",
    # CRUD classes
    "BaseCRUD",
    "ChunkCRUD",
    "DocumentCRUD",
    "EmbeddableCRUD",
    "GraphNodeCRUD",
    "KnowledgeBaseCRUD",
    # CRUD singletons
    "chunk_crud",
    "document_crud",
    "graph_node_crud",
    "knowledge_base_crud",
]
