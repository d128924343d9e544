"""
Celery workers module.

Background document ingestion and periodic embedding queue processing.
Tasks are acknowledged only after they finish, so a task whose worker dies
is redelivered (at-least-once); every task is idempotent.

Dependencies: celery, knowledge_context.configs
System role: Background task processing
"""

from celery import Celery

from knowledge_context.configs import get_settings

settings = get_settings()
celery_config = settings.celery

celery_app = Celery(
    "knowledge_context",
    broker=celery_config.broker_url,
    backend=celery_config.result_backend_url,
    include=[
        "knowledge_context.workers.tasks.ingestion",
        "knowledge_context.workers.tasks.embedding_queue",
    ],
)

celery_app.conf.update(
    task_serializer=celery_config.task_serializer,
    result_serializer=celery_config.result_serializer,
    accept_content=celery_config.accept_content,
    timezone=celery_config.timezone,
    task_max_retries=celery_config.task_max_retries,
    task_acks_late=celery_config.task_acks_late,
    task_reject_on_worker_lost=celery_config.task_reject_on_worker_lost,
    broker_connection_timeout=celery_config.broker_publish_timeout,
    task_publish_retry_policy={"max_retries": 2, "interval_start": 0, "interval_step": 0.5, "interval_max": 2},
    beat_schedule={
        "process-embedding-queue": {
            "task": "knowledge_context.workers.tasks.embedding_queue.process_embedding_queue",
            "schedule": float(settings.backlog.queue_interval_seconds),
        },
    },
)
