"""
Document access recording.

Bumps access counters for documents returned by a search without holding
up the response. Each update runs in its own task and session; failures are
logged and discarded.

Dependencies: sqlalchemy, knowledge_context.boundary.db
System role: Best-effort search analytics
"""

import asyncio
import logging
from typing import Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_context.boundary.db.connection import get_async_session_factory
from knowledge_context.boundary.db.CRUD.document_crud import document_crud

logger = logging.getLogger(__name__)


class AccessRecorder:
    """Fire-and-forget document access counter updates."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        """
        Initialize recorder.

        Args:
            session_factory: Factory for the background sessions (defaults to
                the application factory, resolved on first use)
        """
        self._session_factory = session_factory
        self._pending: set[asyncio.Task] = set()

    def _factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = get_async_session_factory()
        return self._session_factory

    def record(self, document_ids: Iterable[UUID]) -> asyncio.Task | None:
        """
        Schedule access counter increments and return immediately.

        Args:
            document_ids: Documents returned to the caller

        Returns:
            The background task, or None when there is nothing to record
        """
        ids = list(dict.fromkeys(document_ids))
        if not ids:
            return None
        task = asyncio.create_task(self._increment(ids))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _increment(self, document_ids: list[UUID]) -> None:
        try:
            async with self._factory()() as session:
                for document_id in document_ids:
                    await document_crud.increment_access(session, document_id)
                await session.commit()
        except Exception as e:
            logger.warning(
                f"{__name__}:_increment - Failed to record access for {len(document_ids)} documents: {e}"
            )

    async def drain(self) -> None:
        """Wait for outstanding updates (shutdown and tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
