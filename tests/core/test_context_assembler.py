"""Tests for context assembly, rendering and the user summary cache."""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from knowledge_context.boundary.db.base import utc_now
from knowledge_context.boundary.vdb.numpy_store import NumpyVectorStore
from knowledge_context.configs.retrieval import RetrievalSettings
from knowledge_context.core.context import (
    ContextAssembler,
    UserContextService,
    render_context,
    summary_line,
)
from knowledge_context.core.context.models import (
    GoalSummary,
    KnowledgeChunkHit,
    RelevantInsight,
    SimilarPatterns,
    UserContextSummary,
)
from knowledge_context.core.exceptions import ValidationError
from knowledge_context.core.tokens import TRUNCATION_MARKER, estimate_tokens

QUERY = "sleep habit"


@pytest.fixture
async def coached_user(add_node, add_document, vectorize, user_id):
    """One user with goals and an insight, plus other users and a knowledge base."""
    await add_node(
        user_id,
        "goal",
        "Sleep better",
        description="Eight hours a night",
        properties={"progress": 30, "priority": "high"},
        embedding=vectorize(QUERY),
    )
    await add_node(user_id, "goal", "Read more", properties={"status": "completed"})
    await add_node(
        user_id,
        "insight",
        "Screens",
        description="Late screens hurt your sleep habit",
        embedding=vectorize("Late screens hurt your sleep habit"),
    )

    first, second = uuid.uuid4(), uuid.uuid4()
    await add_node(
        first,
        "goal",
        "Fix my sleep habit",
        properties={"status": "completed", "strategies": ["no screens", "fixed bedtime"]},
        embedding=vectorize("fix my sleep habit"),
    )
    await add_node(
        second,
        "goal",
        "Sleep habit reset",
        properties={"progress": 40, "strategies": ["no screens"]},
        embedding=vectorize("sleep habit reset"),
    )

    text = "Sleep habit basics: keep a fixed sleep schedule."
    await add_document("coach", "Sleep Guide", text, chunks=[(text, vectorize(text))])
    return user_id


def make_assembler(session, embedder, cache=None) -> ContextAssembler:
    return ContextAssembler(
        session,
        embedder,
        UserContextService(session, cache=cache),
        vector_store=NumpyVectorStore(session),
        settings=RetrievalSettings(),
    )


class TestRenderContext:
    """Test section rendering."""

    def test_empty_summary(self) -> None:
        summary = UserContextSummary(user_id=uuid.uuid4(), summary_generated_at=utc_now())

        assert summary_line(summary) == "No recent activity found."
        assert render_context(summary, [], [], None, RetrievalSettings()) == (
            "USER CONTEXT:\nNo recent activity found.\n"
        )

    def test_sections_in_priority_order(self) -> None:
        summary = UserContextSummary(
            user_id=uuid.uuid4(),
            goals=[GoalSummary(id=uuid.uuid4(), label="Run 5k", description="Three runs a week")],
            summary_generated_at=utc_now(),
        )
        insights = [RelevantInsight(id=uuid.uuid4(), label="Mornings", description="Runs go better early", similarity=0.876)]
        chunks = [
            KnowledgeChunkHit(
                id=uuid.uuid4(),
                document_id=uuid.uuid4(),
                document_title="Running 101",
                content="Warm up first.",
                similarity=0.7,
            )
        ]
        patterns = SimilarPatterns(
            pattern_summary="",
            similar_goals_count=4,
            users_count=3,
            avg_completion_rate=0.25,
            common_strategies=["buddy runs"],
        )

        text = render_context(summary, insights, chunks, patterns, RetrievalSettings())

        headers = ["USER CONTEXT:", "ACTIVE GOALS:", "RELEVANT INSIGHTS:", "KNOWLEDGE BASE:", "SIMILAR USER PATTERNS:"]
        positions = [text.index(header) for header in headers]
        assert positions == sorted(positions)
        assert "User has 1 goals and 0 insights recorded." in text
        assert "1. Run 5k: Three runs a week" in text
        assert "1. [Mornings] Runs go better early (88% relevant)" in text
        assert '1. From "Running 101": Warm up first.' in text
        assert "Found 4 similar goals with 25% average completion rate." in text
        assert 'Common strategies: ["buddy runs"]' in text


class TestContextAssembler:
    """Test ContextAssembler.assemble."""

    async def test_all_sources_contribute(self, test_async_db, embedder, memory_cache, coached_user) -> None:
        assembler = make_assembler(test_async_db, embedder, memory_cache)

        result = await assembler.assemble(coached_user, QUERY, agent_id="coach")

        assert result.degraded_sources == []
        assert result.truncated is False
        assert result.token_count == estimate_tokens(result.context)
        assert result.user_summary == "User has 1 goals and 1 insights recorded."
        assert [goal.label for goal in result.relevant_goals] == ["Sleep better"]
        assert [insight.label for insight in result.relevant_insights] == ["Screens"]
        assert [chunk.document_title for chunk in result.knowledge_chunks] == ["Sleep Guide"]
        assert result.summary_cache_age_seconds is None

        patterns = result.similar_patterns
        assert patterns.similar_goals_count == 2
        assert patterns.users_count == 2
        assert patterns.avg_completion_rate == 0.5
        assert patterns.common_strategies == ["no screens", "fixed bedtime"]

        for header in ("ACTIVE GOALS:", "RELEVANT INSIGHTS:", "KNOWLEDGE BASE:", "SIMILAR USER PATTERNS:"):
            assert header in result.context
        assert "Read more" not in result.context

    async def test_second_call_reports_cache_age(
        self, test_async_db, embedder, memory_cache, coached_user
    ) -> None:
        assembler = make_assembler(test_async_db, embedder, memory_cache)

        await assembler.assemble(coached_user, QUERY)
        second = await assembler.assemble(coached_user, QUERY)

        assert second.summary_cache_age_seconds is not None
        assert second.summary_cache_age_seconds >= 0
        assert second.user_summary == "User has 1 goals and 1 insights recorded."

    async def test_embedding_outage_degrades(self, test_async_db, broken_embedder, coached_user) -> None:
        assembler = make_assembler(test_async_db, broken_embedder)

        result = await assembler.assemble(coached_user, QUERY)

        assert result.degraded_sources == ["query_embedding"]
        assert result.relevant_insights == []
        assert result.knowledge_chunks == []
        assert result.similar_patterns is None
        assert [goal.label for goal in result.relevant_goals] == ["Sleep better"]
        assert "ACTIVE GOALS:" in result.context

    async def test_cache_outage_is_not_degradation(self, test_async_db, embedder, coached_user) -> None:
        cache = MagicMock()
        cache.get = AsyncMock(side_effect=ConnectionError("redis down"))
        cache.set = AsyncMock(side_effect=ConnectionError("redis down"))
        assembler = make_assembler(test_async_db, embedder, cache)

        result = await assembler.assemble(coached_user, QUERY)

        assert result.degraded_sources == []
        assert result.user_summary == "User has 1 goals and 1 insights recorded."

    async def test_summary_failure_degrades(self, test_async_db, embedder, coached_user) -> None:
        user_context = MagicMock()
        user_context.get_summary = AsyncMock(side_effect=RuntimeError("boom"))
        assembler = ContextAssembler(
            test_async_db,
            embedder,
            user_context,
            vector_store=NumpyVectorStore(test_async_db),
        )

        result = await assembler.assemble(coached_user, QUERY)

        assert result.degraded_sources == ["user_summary"]
        assert result.user_summary == "No recent activity found."
        assert result.relevant_goals == []
        assert result.similar_patterns is None
        assert [insight.label for insight in result.relevant_insights] == ["Screens"]

    async def test_truncates_to_budget(self, test_async_db, embedder, coached_user) -> None:
        assembler = make_assembler(test_async_db, embedder)

        result = await assembler.assemble(coached_user, QUERY, max_tokens=20)

        assert result.truncated is True
        assert len(result.context) == 72
        assert result.context.startswith("USER CONTEXT:")
        assert result.context.endswith(TRUNCATION_MARKER)
        assert result.token_count == 18
        # structured data is not truncated
        assert len(result.knowledge_chunks) == 1

    async def test_knowledge_can_be_excluded(self, test_async_db, embedder, coached_user) -> None:
        assembler = make_assembler(test_async_db, embedder)

        result = await assembler.assemble(
            coached_user, QUERY, include_knowledge_base=False, include_similar_patterns=False
        )

        assert result.knowledge_chunks == []
        assert result.similar_patterns is None
        assert "KNOWLEDGE BASE:" not in result.context
        assert "SIMILAR USER PATTERNS:" not in result.context

    async def test_user_without_history(self, test_async_db, embedder, coached_user) -> None:
        assembler = make_assembler(test_async_db, embedder)

        result = await assembler.assemble(uuid.uuid4(), QUERY)

        assert result.user_summary == "No recent activity found."
        assert result.relevant_insights == []
        assert result.similar_patterns is None
        assert len(result.knowledge_chunks) == 1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"user_id": None, "query": QUERY},
            {"user_id": uuid.uuid4(), "query": "  "},
            {"user_id": uuid.uuid4(), "query": QUERY, "max_tokens": 0},
        ],
    )
    async def test_invalid_requests(self, test_async_db, embedder, kwargs) -> None:
        assembler = make_assembler(test_async_db, embedder)

        with pytest.raises(ValidationError):
            await assembler.assemble(**kwargs)


class TestUserContextService:
    """Test summary caching and invalidation."""

    async def test_invalidate_forces_rebuild(self, test_async_db, memory_cache, coached_user) -> None:
        service = UserContextService(test_async_db, cache=memory_cache)

        await service.get_summary(coached_user)
        _, cached_age = await service.get_summary(coached_user)
        removed = await service.invalidate(coached_user)
        summary, rebuilt_age = await service.get_summary(coached_user)

        assert cached_age is not None
        assert removed == 1
        assert rebuilt_age is None
        assert summary.completed_goal_count == 1
        assert summary.goal_completion_rate == 0.5

    async def test_no_cache_configured(self, test_async_db, coached_user) -> None:
        service = UserContextService(test_async_db)

        _, age = await service.get_summary(coached_user)

        assert age is None
        assert await service.invalidate(coached_user) == 0
