"""
Embedding provider configuration settings.

Selects the embedding backend and fixes the pipeline-wide vector dimension.
Every stored vector is validated against `dimension`.

Dependencies: pydantic, pydantic_settings
System role: Embedding model configuration for chunk and node vectors
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_context.configs.base import BaseSettings


class EmbeddingSettings(BaseSettings):
    """Embedding provider configuration (Gemini by default, Bedrock or fake optional)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
    )

    provider: str = Field(
        default="google",
        description="Embedding provider: 'google', 'bedrock', or 'fake' for local dev",
    )
    model_id: str = Field(
        default="models/gemini-embedding-001",
        description="Provider model ID (gemini-embedding-001 supports reduced 1536-dim output)",
    )
    dimension: int = Field(
        default=1536,
        description="Pipeline-wide embedding dimension",
    )
    batch_size: int = Field(
        default=100,
        description="Maximum texts per provider call",
    )
    max_attempts: int = Field(
        default=3,
        description="Attempts per provider call before a sub-batch is treated as failed",
    )
    bedrock_model_id: str = Field(
        default="amazon.titan-embed-text-v1",
        description="Bedrock model ID (Titan v1 emits 1536-dim vectors)",
    )
    aws_region: str = Field(
        default="us-east-1",
        description="AWS region for Bedrock embeddings",
    )
