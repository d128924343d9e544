"""
Embedding generation task.

Embeds record texts through any LangChain Embeddings provider in
provider-safe sub-batches. Failures are recorded per record id and never
abort the rest of the batch; every input ends up in exactly one of
results or errors.

Dependencies: langchain_core, tenacity, numpy
System role: Vector generation for chunks and graph nodes
"""

import logging
from typing import Sequence

import numpy as np
from langchain_core.embeddings import Embeddings
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential_jitter

from knowledge_context.core.document_processing.models import (
    EmbeddedItem,
    EmbeddingBatchResult,
    EmbeddingFailure,
    EmbeddingRequest,
)
from knowledge_context.core.exceptions import EmbeddingError
from knowledge_context.core.tokens import estimate_tokens

logger = logging.getLogger(__name__)


class EmbeddingTask:
    """Generate fixed-dimension embeddings in bounded batches."""

    def __init__(
        self,
        embeddings: Embeddings,
        dimension: int = 1536,
        batch_size: int = 100,
        max_attempts: int = 3,
    ) -> None:
        """
        Initialize embedding task.

        Args:
            embeddings: LangChain embeddings provider
            dimension: Required vector length
            batch_size: Maximum texts per provider call
            max_attempts: Attempts per provider call (exponential jitter between)
        """
        self._embeddings = embeddings
        self.dimension = dimension
        self.batch_size = max(1, batch_size)
        self.max_attempts = max(1, max_attempts)

    async def _call_provider(self, texts: list[str]) -> list[list[float]]:
        """Call the provider with retries; re-raises the last error."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(initial=1, max=20, jitter=2),
            before_sleep=lambda retry_state: logger.warning(
                f"{__name__}:_call_provider - Retry {retry_state.attempt_number}/"
                f"{self.max_attempts} for {len(texts)} texts"
            ),
            reraise=True,
        ):
            with attempt:
                return await self._embeddings.aembed_documents(texts)
        raise EmbeddingError("Embedding provider returned no result")

    def _check_vector(self, vector) -> str | None:
        """Return a failure reason for an unusable vector, None if it is valid."""
        if vector is None:
            return "provider returned no vector"
        array = np.asarray(vector, dtype=float)
        if array.ndim != 1 or array.shape[0] != self.dimension:
            length = array.shape[0] if array.ndim == 1 else array.size
            return f"wrong dimension: got {length}, expected {self.dimension}"
        if not np.all(np.isfinite(array)):
            return "vector contains non-finite values"
        return None

    def _accept(
        self,
        item: EmbeddingRequest,
        vector,
        result: EmbeddingBatchResult,
    ) -> None:
        reason = self._check_vector(vector)
        if reason is not None:
            result.errors.append(EmbeddingFailure(id=item.id, error=reason))
            return
        result.results.append(EmbeddedItem(id=item.id, vector=[float(v) for v in vector]))
        result.tokens_used += estimate_tokens(item.text)

    async def _embed_individually(
        self,
        items: Sequence[EmbeddingRequest],
        result: EmbeddingBatchResult,
    ) -> bool:
        """Embed items one call at a time; returns True if any call succeeded."""
        any_success = False
        for item in items:
            try:
                vectors = await self._embeddings.aembed_documents([item.text])
            except Exception as e:
                result.errors.append(EmbeddingFailure(id=item.id, error=f"{type(e).__name__}: {e}"))
                continue
            any_success = True
            self._accept(item, vectors[0] if vectors else None, result)
        return any_success

    async def embed_batch(self, items: Sequence[EmbeddingRequest]) -> EmbeddingBatchResult:
        """
        Embed a batch of record texts.

        Sub-batches that fail after retries fall back to one call per item so
        a single bad input cannot sink its neighbours. If every item of such a
        fallback also fails the provider is treated as down and the remaining
        sub-batches are failed without further calls.

        Args:
            items: Records to embed

        Returns:
            EmbeddingBatchResult: len(results) + len(errors) == len(items)
        """
        result = EmbeddingBatchResult()
        embeddable = []
        for item in items:
            if item.text.strip():
                embeddable.append(item)
            else:
                result.errors.append(EmbeddingFailure(id=item.id, error="empty text"))

        outage: str | None = None
        for start in range(0, len(embeddable), self.batch_size):
            sub_batch = embeddable[start : start + self.batch_size]

            if outage is not None:
                result.errors.extend(
                    EmbeddingFailure(id=item.id, error=f"provider unavailable: {outage}")
                    for item in sub_batch
                )
                continue

            try:
                vectors = await self._call_provider([item.text for item in sub_batch])
            except Exception as e:
                logger.warning(
                    f"{__name__}:embed_batch - Sub-batch of {len(sub_batch)} failed, "
                    f"retrying items individually: {e}"
                )
                if not await self._embed_individually(sub_batch, result):
                    outage = f"{type(e).__name__}: {e}"
                    logger.error(f"{__name__}:embed_batch - Provider outage detected: {outage}")
                continue

            if len(vectors) != len(sub_batch):
                logger.warning(
                    f"{__name__}:embed_batch - Provider returned {len(vectors)} vectors "
                    f"for {len(sub_batch)} texts, retrying items individually"
                )
                await self._embed_individually(sub_batch, result)
                continue

            for item, vector in zip(sub_batch, vectors):
                self._accept(item, vector, result)

        logger.info(
            f"{__name__}:embed_batch - {len(result.results)} embedded, {len(result.errors)} failed",
            extra={"tokens_used": result.tokens_used},
        )
        return result

    async def embed_query(self, text: str) -> list[float]:
        """
        Embed a search query.

        Args:
            text: Query text

        Returns:
            list[float]: Query vector of the configured dimension

        Raises:
            EmbeddingError: When the provider fails or returns an unusable vector
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential_jitter(initial=1, max=20, jitter=2),
                reraise=True,
            ):
                with attempt:
                    vector = await self._embeddings.aembed_query(text)
        except Exception as e:
            raise EmbeddingError(f"Failed to embed query: {e}") from e

        reason = self._check_vector(vector)
        if reason is not None:
            raise EmbeddingError(f"Unusable query embedding: {reason}")
        return [float(v) for v in vector]
