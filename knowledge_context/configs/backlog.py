"""
Embedding backlog configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Batch sizing, pacing and claim timeout for backlog processing
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_context.configs.base import BaseSettings


class BacklogSettings(BaseSettings):
    """Backlog manager defaults."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BACKLOG_",
        case_sensitive=False,
        extra="ignore",
    )

    generate_batch_size: int = Field(default=10, description="Default Generate sub-batch size")
    queue_batch_size: int = Field(default=20, description="Default Process-queue sub-batch size")
    queue_max_nodes: int = Field(default=100, description="Default Process-queue node limit")
    claim_timeout_seconds: int = Field(
        default=600,
        description="Age after which an in-progress claim may be taken over",
    )
    queue_interval_seconds: int = Field(
        default=300,
        description="Celery beat interval for periodic queue processing",
    )
    queue_batch_delay_min_ms: int = Field(
        default=500,
        description="Shortest pause between Process-queue batches",
    )
    queue_batch_delay_max_ms: int = Field(
        default=2000,
        description="Longest pause between Process-queue batches",
    )
    queue_batch_delay_tokens_per_ms: int = Field(
        default=10,
        description="Tokens of the previous batch that add one millisecond of pause",
    )

    def batch_delay_seconds(self, tokens_used: int) -> float:
        """Pause before the next Process-queue batch, scaled by the tokens just spent."""
        delay_ms = tokens_used / max(self.queue_batch_delay_tokens_per_ms, 1)
        delay_ms = min(self.queue_batch_delay_max_ms, max(self.queue_batch_delay_min_ms, delay_ms))
        return delay_ms / 1000
