"""
Retrieval and context assembly configuration settings.

Holds similarity thresholds and result caps for every semantic source,
plus the token budget and per-section rendering limits.

Dependencies: pydantic, pydantic_settings
System role: Tuning knobs for search and context assembly
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_context.configs.base import BaseSettings


class RetrievalSettings(BaseSettings):
    """Search thresholds, caps and context budget."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    # Knowledge search endpoint
    search_similarity_threshold: float = Field(
        default=0.7,
        description="Minimum cosine similarity for the search endpoint",
    )
    search_default_limit: int = Field(default=10, description="Default search result limit")
    search_max_limit: int = Field(default=50, description="Largest accepted search limit")
    max_chunks_per_document: int = Field(
        default=3,
        description="Matched chunks concatenated into a document result",
    )
    excerpt_length: int = Field(default=200, description="Excerpt window length in characters")
    excerpt_lead: int = Field(
        default=50,
        description="Characters kept before the first query-term match",
    )

    # Context assembly sources
    insight_similarity_threshold: float = Field(default=0.6, description="Insight search threshold")
    insight_limit: int = Field(default=15, description="Maximum insights fetched")
    knowledge_similarity_threshold: float = Field(
        default=0.5,
        description="Knowledge chunk search threshold for context assembly",
    )
    knowledge_limit: int = Field(default=8, description="Maximum knowledge chunks fetched")
    pattern_similarity_threshold: float = Field(
        default=0.6,
        description="Goal similarity threshold for cross-user patterns",
    )
    pattern_candidate_limit: int = Field(
        default=20,
        description="Maximum similar goals considered for patterns",
    )
    pattern_strategy_limit: int = Field(default=5, description="Common strategies reported")

    # Budget and rendering
    max_context_tokens: int = Field(default=12000, description="Default token budget")
    truncation_buffer: float = Field(
        default=0.9,
        description="Fraction of the character budget kept on truncation",
    )
    goal_render_limit: int = Field(default=8, description="Goals rendered into context")
    insight_render_limit: int = Field(default=10, description="Insights rendered into context")
    goal_text_limit: int = Field(default=200, description="Characters per rendered goal")
    insight_text_limit: int = Field(default=150, description="Characters per rendered insight")
    chunk_text_limit: int = Field(default=300, description="Characters per rendered knowledge chunk")
