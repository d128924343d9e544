"""
Vector search boundary.

Exports: VectorStore, PgVectorStore, NumpyVectorStore, get_vector_store, ChunkMatch, NodeMatch
"""

from knowledge_context.boundary.vdb.base_store import VectorStore
from knowledge_context.boundary.vdb.numpy_store import NumpyVectorStore
from knowledge_context.boundary.vdb.pgvector_store import PgVectorStore
from knowledge_context.boundary.vdb.vector_schemas import ChunkMatch, NodeMatch
from knowledge_context.boundary.vdb.vector_store_factory import get_vector_store

__all__ = [
    "VectorStore",
    "PgVectorStore",
    "NumpyVectorStore",
    "get_vector_store",
    "ChunkMatch",
    "NodeMatch",
]
