"""
Vector store factory for selecting between pgvector (prod) and numpy (dev/tests).

Depends on VECTOR_STORE_STORE_TYPE environment variable.
Provides consistent interface regardless of underlying implementation.

Dependencies: knowledge_context.boundary.vdb, knowledge_context.configs
System role: Vector store instantiation and selection
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.boundary.vdb.base_store import VectorStore
from knowledge_context.boundary.vdb.numpy_store import NumpyVectorStore
from knowledge_context.boundary.vdb.pgvector_store import PgVectorStore
from knowledge_context.configs import get_settings

logger = logging.getLogger(__name__)


def get_vector_store(session: AsyncSession, store_type: str | None = None) -> VectorStore:
    """
    Factory function to get vector store based on configuration.

    Args:
        session: Async database session the store queries through
        store_type: Override for settings.vector_store.store_type

    Returns:
        VectorStore: PgVectorStore or NumpyVectorStore

    Raises:
        ValueError: If the store type is invalid
    """
    store_type = (store_type or get_settings().vector_store.store_type).lower()

    if store_type == "pgvector":
        return PgVectorStore(session)

    if store_type == "numpy":
        logger.debug(f"{__name__}:get_vector_store - Using in-process numpy vector store")
        return NumpyVectorStore(session)

    raise ValueError(
        f"Invalid VECTOR_STORE_STORE_TYPE: {store_type}. Must be 'pgvector' or 'numpy'."
    )
