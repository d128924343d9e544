"""
Knowledge retrieval package.

Exports:
  - HybridRetriever: Keyword / semantic search with document aggregation
  - AccessRecorder: Fire-and-forget access counters
  - extract_excerpt: Query-centred result snippets
  - SearchMode, SearchResult, SearchResponse: Result types
"""

from knowledge_context.core.retrieval.access_recorder import AccessRecorder
from knowledge_context.core.retrieval.excerpt import extract_excerpt
from knowledge_context.core.retrieval.hybrid_retriever import (
    DocumentHits,
    HybridRetriever,
    aggregate_by_document,
)
from knowledge_context.core.retrieval.models import SearchMode, SearchResponse, SearchResult

__all__ = [
    "AccessRecorder",
    "DocumentHits",
    "HybridRetriever",
    "SearchMode",
    "SearchResponse",
    "SearchResult",
    "aggregate_by_document",
    "extract_excerpt",
]
