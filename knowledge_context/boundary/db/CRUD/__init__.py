"""
CRUD operations for database models.

Exports base CRUD classes and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from knowledge_context.boundary.db.CRUD import document_crud, graph_node_crud

    document = await document_crud.get_by_id(db, document_id)
    claimed = await graph_node_crud.claim(db, node_id, claim_timeout_seconds=600)
"""

from knowledge_context.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_context.boundary.db.CRUD.embeddable_crud import (
    EmbeddableCRUD,
    StatusBucket,
    StoredVector,
)
from knowledge_context.boundary.db.CRUD.chunk_crud import ChunkCRUD, chunk_crud
from knowledge_context.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from knowledge_context.boundary.db.CRUD.graph_node_crud import GraphNodeCRUD, graph_node_crud
from knowledge_context.boundary.db.CRUD.knowledge_base_crud import (
    KnowledgeBaseCRUD,
    knowledge_base_crud,
)

__all__ = [
    "BaseCRUD",
    "EmbeddableCRUD",
    "StatusBucket",
    "StoredVector",
    "ChunkCRUD",
    "chunk_crud",
    "DocumentCRUD",
    "document_crud",
    "GraphNodeCRUD",
    "graph_node_crud",
    "KnowledgeBaseCRUD",
    "knowledge_base_crud",
]
