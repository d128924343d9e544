"""
Context assembly package.

Exports:
  - ContextAssembler: Budgeted multi-source context for one user and query
  - UserContextService: Cached per-user summaries
  - find_similar_patterns: Cross-user goal outcome patterns
  - render_context: Priority-ordered text rendering
"""

from knowledge_context.core.context.assembler import ContextAssembler
from knowledge_context.core.context.models import (
    AssembledContext,
    GoalSummary,
    KnowledgeChunkHit,
    RelevantInsight,
    SimilarPatterns,
    UserContextSummary,
)
from knowledge_context.core.context.patterns import find_similar_patterns
from knowledge_context.core.context.renderer import render_context, summary_line
from knowledge_context.core.context.user_context import (
    UserContextService,
    cache_key,
    empty_summary,
    is_goal_completed,
)

__all__ = [
    "AssembledContext",
    "ContextAssembler",
    "GoalSummary",
    "KnowledgeChunkHit",
    "RelevantInsight",
    "SimilarPatterns",
    "UserContextService",
    "UserContextSummary",
    "cache_key",
    "empty_summary",
    "find_similar_patterns",
    "is_goal_completed",
    "render_context",
    "summary_line",
]
