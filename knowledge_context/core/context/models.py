"""
Context assembly models.

Typed shapes for the cached user summary, the per-source retrieval results
and the assembled context returned to the conversational agent.

Dependencies: pydantic
System role: Context assembly data contracts
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class GoalSummary(BaseModel):
    """Goal node as seen by context assembly."""

    id: uuid.UUID
    label: str
    description: str | None = None
    progress: float = 0
    priority: str | None = None
    category: str | None = None
    target_date: str | None = None
    created_at: datetime | None = None


class InsightSummary(BaseModel):
    """Recent insight node."""

    id: uuid.UUID
    label: str
    description: str | None = None
    category: str = "uncategorized"
    created_at: datetime | None = None


class SessionSummary(BaseModel):
    """Recent coaching session node."""

    id: uuid.UUID
    created_at: datetime | None = None
    duration: float | None = None
    topics: list[str] = Field(default_factory=list)
    summary: str | None = None


class EmotionSummary(BaseModel):
    """Recorded emotional state."""

    emotion: str
    intensity: float = 0.5
    created_at: datetime | None = None


class UserContextSummary(BaseModel):
    """Precomputed per-user summary, cached between requests."""

    user_id: uuid.UUID
    goals: list[GoalSummary] = Field(default_factory=list, description="Active goals, newest first")
    completed_goal_count: int = 0
    goal_completion_rate: float = 0.0
    insights: list[InsightSummary] = Field(default_factory=list)
    recent_sessions: list[SessionSummary] = Field(default_factory=list)
    emotional_states: list[EmotionSummary] = Field(default_factory=list)
    summary_generated_at: datetime


class RelevantInsight(BaseModel):
    """Insight node similar to the query."""

    id: uuid.UUID
    label: str
    description: str | None = None
    similarity: float
    created_at: datetime | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


class KnowledgeChunkHit(BaseModel):
    """Knowledge chunk similar to the query."""

    id: uuid.UUID
    document_id: uuid.UUID
    document_title: str
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    similarity: float


class SimilarPatterns(BaseModel):
    """Outcome patterns across other users' similar goals."""

    pattern_summary: str
    similar_goals_count: int
    users_count: int
    avg_completion_rate: float
    common_strategies: list[str] = Field(default_factory=list)


class AssembledContext(BaseModel):
    """Bounded context block plus the structured data behind it."""

    context: str
    user_summary: str
    token_count: int
    truncated: bool
    relevant_goals: list[GoalSummary] = Field(default_factory=list)
    relevant_insights: list[RelevantInsight] = Field(default_factory=list)
    knowledge_chunks: list[KnowledgeChunkHit] = Field(default_factory=list)
    similar_patterns: SimilarPatterns | None = None
    degraded_sources: list[str] = Field(
        default_factory=list,
        description="Sources that failed and were treated as empty",
    )
    summary_cache_age_seconds: float | None = None
