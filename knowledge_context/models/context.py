"""
Context assembly schemas.

Dependencies: pydantic
System role: Context API contracts
"""

import uuid

from pydantic import BaseModel, Field


class ContextRequest(BaseModel):
    """Request schema for context assembly."""

    user_id: uuid.UUID | None = Field(default=None, description="Requesting user")
    query: str | None = Field(default=None, description="Current utterance or topic")
    agent_id: str | None = Field(default=None, description="Calling agent")
    conversation_id: str | None = Field(default=None, description="Conversation, for logging")
    max_tokens: int | None = Field(default=None, description="Token budget (default 12000)")
    include_knowledge_base: bool = Field(default=True)
    include_similar_patterns: bool = Field(default=True)


class CacheInvalidationResponse(BaseModel):
    """Response schema for user summary invalidation."""

    user_id: uuid.UUID
    invalidated: int
