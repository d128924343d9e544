"""
Chunking configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Window size configuration for document chunking
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_context.configs.base import BaseSettings


class ChunkingSettings(BaseSettings):
    """Fixed-window chunking parameters."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CHUNKING_",
        case_sensitive=False,
        extra="ignore",
    )

    chunk_size: int = Field(default=1500, description="Maximum chunk size in characters")
    chunk_overlap: int = Field(default=200, description="Overlap between consecutive chunks")
