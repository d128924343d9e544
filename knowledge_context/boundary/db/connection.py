"""
Database connection management.

Provides SQLAlchemy engines, the async session factory, the FastAPI
dependency for session injection, and schema creation.

Dependencies: sqlalchemy, psycopg, asyncpg, knowledge_context.configs
System role: Database connection lifecycle management
"""

import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from knowledge_context.configs import get_settings

logger = logging.getLogger(__name__)


def get_engine() -> Engine:
    """
    Create sync SQLAlchemy engine (psycopg) for schema management.

    pool_pre_ping=True verifies connections before use to detect
    stale/broken connections early.

    Returns:
        Engine: Configured SQLAlchemy engine

    Raises:
        ArgumentError: If database URL is invalid or engine creation fails
    """
    db_config = get_settings().database

    return create_engine(
        db_config.database_url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


@lru_cache
def get_async_engine() -> AsyncEngine:
    """
    Create the process-wide async SQLAlchemy engine (asyncpg).

    Cached so every session shares one connection pool.

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Usage:
        engine = get_async_engine()
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
    """
    db_config = get_settings().database

    return create_async_engine(
        db_config.async_database_url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


@lru_cache
def get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Create async session factory for database operations.

    Returns async_sessionmaker bound to the shared engine with autoflush=False
    and expire_on_commit=False for explicit transaction control.

    Returns:
        async_sessionmaker: Async session factory

    Usage:
        SessionFactory = get_async_session_factory()
        async with SessionFactory() as session:
            session.add(obj)
            await session.commit()
    """
    return async_sessionmaker(
        bind=get_async_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for async database session injection with automatic cleanup.

    Yields:
        AsyncSession: Async SQLAlchemy database session (scoped to request lifetime)

    Usage:
        @router.get("/documents/{id}")
        async def get_document(id: UUID, db: AsyncSession = Depends(get_async_db)):
            return await document_crud.get_by_id(db, id)
    """
    SessionFactory = get_async_session_factory()
    async with SessionFactory() as session:
        yield session


@asynccontextmanager
async def isolated_session() -> AsyncIterator[AsyncSession]:
    """
    Session on a private, unpooled engine that is disposed on exit.

    For code that runs its own event loop (Celery tasks, CLI commands):
    asyncpg connections are bound to the loop that opened them, so the
    cached application engine cannot be shared across asyncio.run() calls.

    Yields:
        AsyncSession: Session with expire_on_commit=False
    """
    db_config = get_settings().database
    engine = create_async_engine(
        db_config.async_database_url,
        echo=db_config.echo_sql,
        poolclass=NullPool,
    )
    try:
        factory = async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
        async with factory() as session:
            yield session
    finally:
        await engine.dispose()


def create_tables() -> None:
    """
    Create the pgvector extension and every registered table.

    Safe to re-run; existing tables are left untouched.
    """
    from knowledge_context.boundary.db.base import Base
    import knowledge_context.boundary.db.models  # noqa: F401  registers models

    engine = get_engine()
    with engine.begin() as conn:
        conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        Base.metadata.create_all(conn)
    engine.dispose()
    logger.info(f"{__name__}:create_tables - Schema ready")
