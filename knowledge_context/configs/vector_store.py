"""
Vector store configuration settings.

Selects how similarity search is executed against stored vectors.

Dependencies: pydantic, pydantic_settings
System role: Vector search backend configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_context.configs.base import BaseSettings


class VectorStoreSettings(BaseSettings):
    """Vector store configuration (pgvector for prod, numpy for dev/tests)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VECTOR_STORE_",
        case_sensitive=False,
        extra="ignore",
    )

    store_type: str = Field(
        default="pgvector",
        description="Vector store type: 'pgvector' for SQL-side search, 'numpy' for in-process scoring",
    )
