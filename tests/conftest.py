"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory SQLite database, bag-of-words embeddings, graph/knowledge seeding factories
Dependencies: pytest, sqlalchemy, aiosqlite, langchain_core
System role: Test infrastructure and fixture management
"""

import hashlib
import os
import re
import uuid
from datetime import timedelta

# Settings are cached on first use; point every backend at in-process implementations
os.environ.setdefault("VECTOR_STORE_STORE_TYPE", "numpy")
os.environ.setdefault("CACHE_BACKEND", "memory")
os.environ.setdefault("EMBEDDING_PROVIDER", "fake")

import pytest
from langchain_core.embeddings import Embeddings

VOCABULARY = ["goal", "habit", "sleep", "exercise", "budget", "career", "stress", "plan"]
DIMENSION = len(VOCABULARY) + 1


def bag_of_words(text: str) -> list[float]:
    """One axis per vocabulary stem plus a catch-all axis, so vectors are never zero."""
    vector = [0.0] * DIMENSION
    for word in re.findall(r"[a-z]+", text.lower()):
        for axis, stem in enumerate(VOCABULARY):
            if word.startswith(stem):
                vector[axis] += 1.0
                break
    vector[-1] = 0.1
    return vector


class BagOfWordsEmbeddings(Embeddings):
    """Deterministic embeddings where shared vocabulary means high cosine similarity."""

    def __init__(self) -> None:
        self.document_calls: list[list[str]] = []

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.document_calls.append(list(texts))
        return [bag_of_words(text) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        return bag_of_words(text)


class BrokenEmbeddings(Embeddings):
    """Provider that is always down."""

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        raise ConnectionError("provider down")

    def embed_query(self, text: str) -> list[float]:
        raise ConnectionError("provider down")


@pytest.fixture
def embeddings() -> BagOfWordsEmbeddings:
    return BagOfWordsEmbeddings()


@pytest.fixture
def embedder(embeddings):
    """EmbeddingTask over bag-of-words vectors, no retries."""
    from knowledge_context.core.document_processing.tasks import EmbeddingTask

    return EmbeddingTask(embeddings, dimension=DIMENSION, batch_size=10, max_attempts=1)


@pytest.fixture
def broken_embedder():
    from knowledge_context.core.document_processing.tasks import EmbeddingTask

    return EmbeddingTask(BrokenEmbeddings(), dimension=DIMENSION, batch_size=10, max_attempts=1)


@pytest.fixture
async def engine():
    """
    Create in-memory SQLite async engine with all tables.

    Yields:
        AsyncEngine: Engine on a single shared connection (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool

    import knowledge_context.boundary.db.models  # noqa: F401
    from knowledge_context.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    return async_sessionmaker(engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest.fixture
async def test_async_db(session_factory):
    """
    Session on the in-memory database.

    Yields:
        AsyncSession: Test database session
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def add_node(test_async_db):
    """
    Factory inserting a graph node and committing.

    Usage:
        node = await add_node(user_id, "goal", "Run a marathon", embedding=[...])
    """
    from knowledge_context.boundary.db.base import EmbeddingStatus, utc_now
    from knowledge_context.boundary.db.models import GraphNodeModel

    async def _add(
        user_id: uuid.UUID,
        node_type: str,
        label: str,
        description: str | None = None,
        properties: dict | None = None,
        embedding: list[float] | None = None,
        status: EmbeddingStatus | None = None,
        age: timedelta = timedelta(0),
        deleted: bool = False,
    ) -> GraphNodeModel:
        created = utc_now() - age
        if status is None:
            status = EmbeddingStatus.EMBEDDED if embedding is not None else EmbeddingStatus.PENDING
        node = GraphNodeModel(
            user_id=user_id,
            node_type=node_type,
            label=label,
            description=description,
            properties=properties or {},
            embedding=embedding,
            embedding_status=status,
            created_at=created,
            updated_at=created,
            deleted_at=utc_now() if deleted else None,
        )
        test_async_db.add(node)
        await test_async_db.commit()
        return node

    return _add


@pytest.fixture
def add_document(test_async_db):
    """
    Factory inserting a knowledge base (if needed), a document and optional chunks.

    Chunks are (content, embedding) pairs stored in order.
    """
    from knowledge_context.boundary.db.base import EmbeddingStatus
    from knowledge_context.boundary.db.CRUD import document_crud, knowledge_base_crud
    from knowledge_context.boundary.db.models import KnowledgeChunkModel

    async def _add(
        agent_id: str,
        title: str,
        content: str,
        chunks: list[tuple[str, list[float] | None]] | None = None,
        metadata: dict | None = None,
    ):
        knowledge_base, _ = await knowledge_base_crud.get_or_create(test_async_db, agent_id)
        document = await document_crud.create(
            test_async_db,
            knowledge_base_id=knowledge_base.id,
            title=title,
            content=content,
            content_hash=hashlib.sha256(content.encode("utf-8")).hexdigest(),
            doc_metadata=metadata or {},
            chunk_count=len(chunks or []),
        )
        for index, (chunk_text, vector) in enumerate(chunks or []):
            test_async_db.add(
                KnowledgeChunkModel(
                    document_id=document.id,
                    chunk_index=index,
                    content=chunk_text,
                    chunk_metadata={"title": title, "chunk_number": index + 1},
                    embedding=vector,
                    embedding_status=EmbeddingStatus.EMBEDDED if vector is not None else EmbeddingStatus.PENDING,
                )
            )
        await test_async_db.commit()
        return document

    return _add


@pytest.fixture
def memory_cache():
    from knowledge_context.boundary.cache.memory_cache import MemoryCacheStore

    return MemoryCacheStore(default_ttl=300)


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()



@pytest.fixture
def vectorize():
    """The bag-of-words embedding function, for seeding stored vectors."""
    return bag_of_words
