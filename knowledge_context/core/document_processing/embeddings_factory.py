"""
Embedding provider factory.

Returns the LangChain Embeddings implementation selected by
EMBEDDING_PROVIDER: 'google' (default), 'bedrock', or 'fake' for offline
development.

Dependencies: langchain_core, langchain_google_genai, langchain_aws
System role: Embedding provider selection
"""

import logging

from langchain_core.embeddings import Embeddings

from knowledge_context.configs.embedding import EmbeddingSettings
from knowledge_context.core.document_processing.tasks.embedding_task import EmbeddingTask

logger = logging.getLogger(__name__)


def get_embeddings(settings: EmbeddingSettings | None = None) -> Embeddings:
    """
    Create the configured embeddings provider.

    Args:
        settings: Embedding settings (loads from env if None)

    Returns:
        Embeddings: Provider emitting settings.dimension-length vectors

    Raises:
        ValueError: When the provider name is unknown
    """
    settings = settings or EmbeddingSettings()
    provider = settings.provider.lower()

    if provider == "google":
        from knowledge_context.core.document_processing.embeddings_wrapper import (
            FixedDimensionEmbeddings,
        )

        return FixedDimensionEmbeddings(
            model=settings.model_id,
            output_dimensionality=settings.dimension,
        )

    if provider == "bedrock":
        from langchain_aws import BedrockEmbeddings

        logger.info(f"{__name__}:get_embeddings - Using Bedrock model {settings.bedrock_model_id}")
        return BedrockEmbeddings(
            model_id=settings.bedrock_model_id,
            region_name=settings.aws_region,
        )

    if provider == "fake":
        from langchain_core.embeddings import DeterministicFakeEmbedding

        logger.warning(f"{__name__}:get_embeddings - Using deterministic fake embeddings")
        return DeterministicFakeEmbedding(size=settings.dimension)

    raise ValueError(f"Unknown embedding provider: {settings.provider}. Use 'google', 'bedrock' or 'fake'.")


def build_embedding_task(
    settings: EmbeddingSettings | None = None,
    embeddings: Embeddings | None = None,
) -> EmbeddingTask:
    """
    Wrap the configured provider in an EmbeddingTask.

    Args:
        settings: Embedding settings (loads from env if None)
        embeddings: Provider override (created from settings if None)

    Returns:
        EmbeddingTask: Batching, retrying embedder of settings.dimension
    """
    settings = settings or EmbeddingSettings()
    return EmbeddingTask(
        embeddings or get_embeddings(settings),
        dimension=settings.dimension,
        batch_size=settings.batch_size,
        max_attempts=settings.max_attempts,
    )
