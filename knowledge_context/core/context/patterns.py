"""
Cross-user goal patterns.

Finds other users' goals whose vectors resemble the query and condenses
them into an outcome pattern: how many similar goals exist, how often they
were completed, and which strategies come up most.

Dependencies: knowledge_context.boundary.vdb
System role: "Similar user patterns" source for context assembly
"""

from collections import Counter
from typing import Sequence
from uuid import UUID

from knowledge_context.boundary.db.models import NodeType
from knowledge_context.boundary.vdb.base_store import VectorStore
from knowledge_context.core.context.models import SimilarPatterns
from knowledge_context.core.context.user_context import is_goal_completed


async def find_similar_patterns(
    vector_store: VectorStore,
    query_embedding: Sequence[float],
    exclude_user_id: UUID,
    threshold: float = 0.6,
    candidate_limit: int = 20,
    strategy_limit: int = 5,
) -> SimilarPatterns | None:
    """
    Aggregate similar goals from every other user.

    Args:
        vector_store: Similarity backend
        query_embedding: Query vector
        exclude_user_id: The requesting user, never included
        threshold: Minimum goal similarity
        candidate_limit: Maximum similar goals considered
        strategy_limit: Most common strategies reported

    Returns:
        SimilarPatterns, or None when no other user has a similar goal
    """
    goals = await vector_store.search_nodes(
        query_embedding,
        threshold=threshold,
        limit=candidate_limit,
        node_type=NodeType.GOAL,
        exclude_user_id=exclude_user_id,
    )
    if not goals:
        return None

    completed = sum(1 for goal in goals if is_goal_completed(goal.properties))
    strategies: Counter[str] = Counter()
    for goal in goals:
        raw = goal.properties.get("strategies")
        if isinstance(raw, list):
            strategies.update(str(strategy) for strategy in raw if strategy)

    users = len({goal.user_id for goal in goals})
    rate = completed / len(goals)
    return SimilarPatterns(
        pattern_summary=(
            f"{len(goals)} similar goals across {users} other users, "
            f"{completed} completed"
        ),
        similar_goals_count=len(goals),
        users_count=users,
        avg_completion_rate=rate,
        common_strategies=[strategy for strategy, _ in strategies.most_common(strategy_limit)],
    )
