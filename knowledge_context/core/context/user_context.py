"""
User context summary service.

Builds a compact picture of one user from their graph nodes: active and
completed goals, recent insights, recent sessions and emotional states.
Summaries are cached in the shared cache store for a few minutes; a cache
outage only costs a rebuild.

Dependencies: sqlalchemy, knowledge_context.boundary.db, knowledge_context.boundary.cache
System role: Per-user summary source for context assembly
"""

import logging
from datetime import timedelta
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.boundary.cache.base_cache import CacheStore
from knowledge_context.boundary.db.base import utc_now
from knowledge_context.boundary.db.CRUD.graph_node_crud import graph_node_crud
from knowledge_context.boundary.db.models import GraphNodeModel, NodeType
from knowledge_context.core.context.models import (
    EmotionSummary,
    GoalSummary,
    InsightSummary,
    SessionSummary,
    UserContextSummary,
)

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "user_context:"


def cache_key(user_id: UUID) -> str:
    return f"{CACHE_KEY_PREFIX}{user_id}"


def is_goal_completed(properties: dict[str, Any] | None) -> bool:
    """A goal counts as completed when marked so or at 100% progress."""
    properties = properties or {}
    return properties.get("status") == "completed" or properties.get("progress") == 100


def _number(value, default: float) -> float:
    return value if isinstance(value, (int, float)) and not isinstance(value, bool) else default


def _to_goal(node: GraphNodeModel) -> GoalSummary:
    props = node.properties or {}
    target_date = props.get("target_date")
    return GoalSummary(
        id=node.id,
        label=node.label,
        description=node.description,
        progress=_number(props.get("progress"), 0),
        priority=props.get("priority"),
        category=props.get("category"),
        target_date=str(target_date) if target_date is not None else None,
        created_at=node.created_at,
    )


def _to_session(node: GraphNodeModel) -> SessionSummary:
    props = node.properties or {}
    topics = props.get("topics")
    duration = props.get("duration")
    return SessionSummary(
        id=node.id,
        created_at=node.created_at,
        duration=_number(duration, None) if duration is not None else None,
        topics=[str(topic) for topic in topics] if isinstance(topics, list) else [],
        summary=props.get("summary"),
    )


class UserContextService:
    """Build and cache per-user context summaries."""

    def __init__(
        self,
        session: AsyncSession,
        cache: CacheStore | None = None,
        ttl_seconds: int = 300,
        insights_limit: int = 10,
        sessions_limit: int = 5,
        time_range_days: int = 30,
    ) -> None:
        """
        Initialize user context service.

        Args:
            session: Async database session
            cache: Shared cache store (None disables caching)
            ttl_seconds: Summary time-to-live in the cache
            insights_limit: Recent insights kept in a summary
            sessions_limit: Recent sessions kept in a summary
            time_range_days: Window for insights and emotional states
        """
        self.session = session
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.insights_limit = insights_limit
        self.sessions_limit = sessions_limit
        self.time_range_days = time_range_days

    async def build_summary(self, user_id: UUID) -> UserContextSummary:
        """
        Read a user's graph nodes and summarize them.

        Args:
            user_id: User to summarize

        Returns:
            UserContextSummary: Fresh summary (not cached)
        """
        since = utc_now() - timedelta(days=self.time_range_days)

        goal_nodes = await graph_node_crud.get_user_nodes(self.session, user_id, NodeType.GOAL)
        active = [_to_goal(node) for node in goal_nodes if not is_goal_completed(node.properties)]
        completed_count = len(goal_nodes) - len(active)

        insight_nodes = await graph_node_crud.get_user_nodes(
            self.session, user_id, NodeType.INSIGHT, limit=self.insights_limit, since=since
        )
        session_nodes = await graph_node_crud.get_user_nodes(
            self.session, user_id, NodeType.SESSION, limit=self.sessions_limit
        )
        emotion_nodes = await graph_node_crud.get_user_nodes(
            self.session, user_id, NodeType.EMOTION, since=since
        )

        return UserContextSummary(
            user_id=user_id,
            goals=active,
            completed_goal_count=completed_count,
            goal_completion_rate=completed_count / len(goal_nodes) if goal_nodes else 0.0,
            insights=[
                InsightSummary(
                    id=node.id,
                    label=node.label,
                    description=node.description,
                    category=(node.properties or {}).get("category") or "uncategorized",
                    created_at=node.created_at,
                )
                for node in insight_nodes
            ],
            recent_sessions=[_to_session(node) for node in session_nodes],
            emotional_states=[
                EmotionSummary(
                    emotion=node.label,
                    intensity=_number((node.properties or {}).get("intensity"), 0.5),
                    created_at=node.created_at,
                )
                for node in emotion_nodes
            ],
            summary_generated_at=utc_now(),
        )

    async def get_summary(self, user_id: UUID) -> tuple[UserContextSummary, float | None]:
        """
        Return the cached summary, building and caching it on a miss.

        Cache failures are logged and treated as misses.

        Args:
            user_id: User to summarize

        Returns:
            (summary, cache age in seconds or None when freshly built)
        """
        key = cache_key(user_id)

        if self.cache is not None:
            try:
                hit = await self.cache.get(key)
            except Exception as e:
                logger.warning(f"{__name__}:get_summary - Cache read failed, rebuilding: {e}")
                hit = None
            if hit is not None:
                try:
                    return UserContextSummary.model_validate(hit.value), hit.age_seconds
                except ValueError as e:
                    logger.warning(f"{__name__}:get_summary - Discarding malformed cache entry: {e}")

        summary = await self.build_summary(user_id)

        if self.cache is not None:
            try:
                await self.cache.set(key, summary.model_dump(mode="json"), ttl_seconds=self.ttl_seconds)
            except Exception as e:
                logger.warning(f"{__name__}:get_summary - Cache write failed: {e}")

        logger.info(
            f"{__name__}:get_summary - Built summary",
            extra={"user_id": str(user_id), "goals": len(summary.goals), "insights": len(summary.insights)},
        )
        return summary, None

    async def invalidate(self, user_id: UUID) -> int:
        """
        Drop a user's cached summary.

        Returns:
            int: Number of cache entries removed

        Raises:
            CacheError: When the cache backend cannot be reached
        """
        if self.cache is None:
            return 0
        return await self.cache.invalidate(cache_key(user_id))


def empty_summary(user_id: UUID) -> UserContextSummary:
    """Stand-in summary when the real one cannot be produced."""
    return UserContextSummary(user_id=user_id, summary_generated_at=utc_now())
