"""
Celery task modules.

Exports: ingest_document, process_embedding_queue
"""

from knowledge_context.workers.tasks.embedding_queue import process_embedding_queue
from knowledge_context.workers.tasks.ingestion import ingest_document

__all__ = ["ingest_document", "process_embedding_queue"]
