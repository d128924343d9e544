"""
Google Generative AI Embeddings wrapper with fixed output dimensionality.

Wraps GoogleGenerativeAIEmbeddings so every call, sync or async, requests
the pipeline-wide dimension. The base class ignores output_dimensionality
passed to the constructor.

Dependencies: langchain_google_genai, python-dotenv
System role: Embedding dimension consistency for pgvector columns
"""

import asyncio
import logging
from typing import List

from dotenv import load_dotenv
from langchain_google_genai import GoogleGenerativeAIEmbeddings

logger = logging.getLogger(__name__)
load_dotenv()


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """
    GoogleGenerativeAIEmbeddings with a fixed output dimensionality.

    gemini-embedding-001 natively emits 3072 dimensions and supports
    reduced output sizes, which is how vectors stay at 1536.
    """

    _output_dimensionality: int = 1536

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        output_dimensionality: int = 1536,
        **kwargs,
    ) -> None:
        """
        Initialize embeddings with fixed output dimensionality.

        Args:
            model: Google embedding model ID
            output_dimensionality: Fixed dimension for all embeddings
            **kwargs: Additional arguments for GoogleGenerativeAIEmbeddings
        """
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(
            f"{__name__}:__init__ - Initialized with model={model}, "
            f"output_dimensionality={output_dimensionality}"
        )

    def embed_documents(
        self,
        texts: List[str],
        *,
        batch_size: int = 100,
        task_type: str | None = None,
        titles: List[str] | None = None,
        output_dimensionality: int | None = None,
    ) -> List[List[float]]:
        """
        Embed documents with fixed output dimensionality.

        Args:
            texts: List of texts to embed
            batch_size: Batch size for API calls
            task_type: Optional task type for embedding
            titles: Optional titles for documents
            output_dimensionality: Override dimension (uses configured if None)

        Returns:
            List of embedding vectors
        """
        return super().embed_documents(
            texts,
            batch_size=batch_size,
            task_type=task_type or "RETRIEVAL_DOCUMENT",
            titles=titles,
            output_dimensionality=output_dimensionality or self._output_dimensionality,
        )

    def embed_query(
        self,
        text: str,
        task_type: str | None = None,
        title: str | None = None,
        output_dimensionality: int | None = None,
    ) -> List[float]:
        """
        Embed query with fixed output dimensionality.

        Args:
            text: Query text to embed
            task_type: Optional task type for embedding
            title: Optional title
            output_dimensionality: Override dimension (uses configured if None)

        Returns:
            Embedding vector
        """
        return super().embed_query(
            text,
            task_type=task_type or "RETRIEVAL_QUERY",
            title=title,
            output_dimensionality=output_dimensionality or self._output_dimensionality,
        )

    async def aembed_documents(self, texts: List[str], **kwargs) -> List[List[float]]:
        """Async embed_documents; runs the fixed-dimension sync call in a worker thread."""
        return await asyncio.to_thread(self.embed_documents, texts, **kwargs)

    async def aembed_query(self, text: str, **kwargs) -> List[float]:
        """Async embed_query; runs the fixed-dimension sync call in a worker thread."""
        return await asyncio.to_thread(self.embed_query, text, **kwargs)
