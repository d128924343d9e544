"""
Retrieval result models.

Dependencies: pydantic
System role: Typed search results shared by the retriever and the API
"""

import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SearchMode(str, Enum):
    """Search strategy; hybrid currently resolves to semantic."""

    KEYWORD = "keyword"
    SEMANTIC = "semantic"
    HYBRID = "hybrid"


class SearchResult(BaseModel):
    """One document-level search hit."""

    id: uuid.UUID = Field(description="Document identifier")
    title: str
    content: str = Field(description="Document text, or its matched chunks for semantic hits")
    metadata: dict[str, Any] = Field(default_factory=dict)
    score: float = Field(description="1.0 for keyword hits, max chunk similarity for semantic hits")
    excerpt: str = Field(description="Window of content around the first query term")


class SearchResponse(BaseModel):
    """Search outcome for one knowledge base."""

    success: bool = True
    query: str
    results: list[SearchResult] = Field(default_factory=list)
    count: int = 0
    search_type: SearchMode
    knowledge_base_id: uuid.UUID
