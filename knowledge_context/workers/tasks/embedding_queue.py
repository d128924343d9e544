"""
Embedding queue Celery task.

Runs Process-queue over graph nodes (and optionally chunks). Scheduled by
Celery beat; safe to run on several workers at once because every record is
claimed before it is embedded.

Dependencies: celery, knowledge_context.core.backlog, knowledge_context.workers
System role: Periodic backlog processing
"""

import asyncio
import logging

from knowledge_context.boundary.db.connection import isolated_session
from knowledge_context.configs import get_settings
from knowledge_context.core.backlog import CHUNK_TARGET, NODE_TARGET, BacklogManager
from knowledge_context.core.document_processing import build_embedding_task
from knowledge_context.observability.correlation import clear_correlation_id, set_correlation_id
from knowledge_context.observability.log_utils import log_with_context
from knowledge_context.workers import celery_app

logger = logging.getLogger(__name__)

TARGETS = {"nodes": NODE_TARGET, "chunks": CHUNK_TARGET}


async def _process_queue(
    target: str,
    max_nodes: int | None,
    batch_size: int | None,
    time_budget_seconds: float | None,
) -> dict:
    settings = get_settings()
    embedder = build_embedding_task(settings.embedding)
    async with isolated_session() as session:
        manager = BacklogManager(session, embedder, settings=settings.backlog, target=TARGETS[target])
        result = await manager.process_queue(
            max_nodes=max_nodes,
            batch_size=batch_size,
            time_budget_seconds=time_budget_seconds,
        )
    return result.model_dump(mode="json")


@celery_app.task(bind=True, max_retries=0)
def process_embedding_queue(
    self,
    target: str = "nodes",
    max_nodes: int | None = None,
    batch_size: int | None = None,
    time_budget_seconds: float | None = None,
):
    """
    Embed pending records.

    Args:
        target: "nodes" or "chunks"
        max_nodes: Maximum records this run (settings default if None)
        batch_size: Records per batch (settings default if None)
        time_budget_seconds: Stop between batches after this long

    Returns:
        dict: QueueResult
    """
    if target not in TARGETS:
        raise ValueError(f"Unknown backlog target: {target}")

    set_correlation_id(self.request.id)
    try:
        result = asyncio.run(_process_queue(target, max_nodes, batch_size, time_budget_seconds))
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:process_embedding_queue - {result['message']}",
            target=target,
            stats=result["stats"],
            errors=result["error_details"],
        )
        return result
    finally:
        clear_correlation_id()
