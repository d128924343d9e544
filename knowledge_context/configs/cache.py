"""
Shared cache configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Cache backend selection for user context summaries
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_context.configs.base import BaseSettings


class CacheSettings(BaseSettings):
    """Cache configuration (Redis for multi-instance deployments, memory for dev)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CACHE_",
        case_sensitive=False,
        extra="ignore",
    )

    backend: str = Field(default="redis", description="Cache backend: 'redis' or 'memory'")
    redis_url: str = Field(default="redis://localhost:6379/1", description="Redis connection URL")
    key_prefix: str = Field(default="kc:", description="Namespace prepended to every cache key")
    user_context_ttl_seconds: int = Field(
        default=300,
        description="Time-to-live for cached user context summaries",
    )
