"""
Embedding batch models.

Dependencies: pydantic
System role: Input and return types for EmbeddingTask.embed_batch()
"""

from pydantic import BaseModel, Field


class EmbeddingRequest(BaseModel):
    """One text to embed, keyed by the id of the record it belongs to."""

    id: str = Field(description="Record identifier (chunk or node id)")
    text: str = Field(description="Text to embed")


class EmbeddedItem(BaseModel):
    """Successful embedding for one record."""

    id: str
    vector: list[float]


class EmbeddingFailure(BaseModel):
    """Failed embedding for one record."""

    id: str
    error: str


class EmbeddingBatchResult(BaseModel):
    """
    Outcome of a batch embed.

    Every input id appears exactly once, in either results or errors.
    """

    results: list[EmbeddedItem] = Field(default_factory=list)
    errors: list[EmbeddingFailure] = Field(default_factory=list)
    tokens_used: int = Field(default=0, description="Estimated tokens sent for successful items")

    @property
    def vectors_by_id(self) -> dict[str, list[float]]:
        return {item.id: item.vector for item in self.results}
