"""
Database models package.

Exports:
  - KnowledgeBaseModel, IndexingStatus: Knowledge base aggregate
  - KnowledgeDocumentModel, SourceType: Uploaded documents
  - KnowledgeChunkModel: Embeddable document chunks
  - GraphNodeModel, NodeType: Embeddable user graph nodes

Dependencies: sqlalchemy, knowledge_context.boundary.db.base
System role: Database model definitions for domain entities
"""

from knowledge_context.boundary.db.models.knowledge_base_model import (
    IndexingStatus,
    KnowledgeBaseModel,
)
from knowledge_context.boundary.db.models.document_model import (
    KnowledgeDocumentModel,
    SourceType,
)
from knowledge_context.boundary.db.models.chunk_model import KnowledgeChunkModel
from knowledge_context.boundary.db.models.graph_node_model import GraphNodeModel, NodeType

__all__ = [
    "IndexingStatus",
    "KnowledgeBaseModel",
    "KnowledgeDocumentModel",
    "SourceType",
    "KnowledgeChunkModel",
    "GraphNodeModel",
    "NodeType",
]
