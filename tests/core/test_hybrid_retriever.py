"""Tests for knowledge search, excerpting and access recording."""

import uuid
from unittest.mock import MagicMock

import pytest

from knowledge_context.boundary.db.CRUD import document_crud
from knowledge_context.boundary.vdb.numpy_store import NumpyVectorStore
from knowledge_context.boundary.vdb.vector_schemas import ChunkMatch
from knowledge_context.configs.retrieval import RetrievalSettings
from knowledge_context.core.exceptions import KnowledgeBaseNotFoundError, ValidationError
from knowledge_context.core.retrieval import (
    AccessRecorder,
    HybridRetriever,
    SearchMode,
    aggregate_by_document,
    extract_excerpt,
)


def match(document_id: uuid.UUID, chunk_index: int, similarity: float, title: str = "Doc") -> ChunkMatch:
    return ChunkMatch(
        chunk_id=uuid.uuid4(),
        document_id=document_id,
        knowledge_base_id=uuid.uuid4(),
        document_title=title,
        chunk_index=chunk_index,
        content=f"chunk {chunk_index}",
        similarity=similarity,
    )


class TestAggregateByDocument:
    """Test chunk-to-document folding."""

    def test_document_scores_best_chunk_and_keeps_both(self) -> None:
        doc_d, doc_e = uuid.uuid4(), uuid.uuid4()
        matches = [match(doc_d, 0, 0.82), match(doc_e, 4, 0.80), match(doc_d, 2, 0.77)]

        hits = aggregate_by_document(matches)

        assert [h.document_id for h in hits] == [doc_d, doc_e]
        assert hits[0].score == 0.82
        assert [c.chunk_index for c in hits[0].chunks] == [0, 2]

    def test_chunk_cap_per_document(self) -> None:
        doc = uuid.uuid4()
        matches = [match(doc, i, 0.9 - i / 100) for i in range(5)]

        hits = aggregate_by_document(matches, max_chunks=3)

        assert [c.chunk_index for c in hits[0].chunks] == [0, 1, 2]

    def test_equal_scores_keep_discovery_order(self) -> None:
        first, second = uuid.uuid4(), uuid.uuid4()

        hits = aggregate_by_document([match(first, 0, 0.75), match(second, 0, 0.75)])

        assert [h.document_id for h in hits] == [first, second]


class TestExtractExcerpt:
    """Test excerpt windows."""

    def test_window_around_first_term(self) -> None:
        content = "a" * 100 + "Time-bound goals" + "b" * 300

        excerpt = extract_excerpt(content, "time-bound goal setting")

        assert excerpt.startswith("...")
        assert excerpt.endswith("...")
        assert "Time-bound" in excerpt
        assert len(excerpt) == 200 + 6
        assert excerpt[3:].index("Time-bound") == 50

    def test_earliest_of_several_terms_wins(self) -> None:
        content = "Budget first. " + "x" * 100 + " then sleep"

        excerpt = extract_excerpt(content, "sleep budget", max_length=20, lead=5)

        assert excerpt == "Budget first. x..."

    def test_no_match_returns_opening(self) -> None:
        content = "z" * 250

        assert extract_excerpt(content, "missing") == "z" * 200 + "..."
        assert extract_excerpt("short text", "missing") == "short text"

    def test_match_near_start_has_no_leading_ellipsis(self) -> None:
        excerpt = extract_excerpt("Sleep hygiene basics", "SLEEP")

        assert excerpt == "Sleep hygiene basics"


@pytest.fixture
def retrieval_settings() -> RetrievalSettings:
    return RetrievalSettings(search_similarity_threshold=0.7)


@pytest.fixture
def retriever(test_async_db, embedder, retrieval_settings) -> HybridRetriever:
    return HybridRetriever(
        test_async_db,
        embedder,
        vector_store=NumpyVectorStore(test_async_db),
        settings=retrieval_settings,
    )


@pytest.fixture
async def knowledge_base(add_document, embedder):
    """Coach knowledge base with a sleep guide and a budgeting guide."""
    sleep_text = "Sleep habit basics: keep a fixed sleep schedule."
    budget_text = "Budget planning: track every budget line."
    sleep = await add_document(
        "coach",
        "Sleep Guide",
        sleep_text,
        chunks=[(sleep_text, await embedder.embed_query(sleep_text))],
        metadata={"author": "coach"},
    )
    budget = await add_document(
        "coach",
        "Budget Guide",
        budget_text,
        chunks=[(budget_text, await embedder.embed_query(budget_text))],
    )
    return {"kb_id": sleep.knowledge_base_id, "sleep": sleep, "budget": budget}


class TestHybridRetriever:
    """Test HybridRetriever.search."""

    async def test_semantic_search_ranks_by_similarity(self, retriever, knowledge_base) -> None:
        response = await retriever.search("sleep habit", agent_id="coach", mode=SearchMode.SEMANTIC)

        assert response.success is True
        assert response.count == 1
        assert response.search_type == SearchMode.SEMANTIC
        assert response.knowledge_base_id == knowledge_base["kb_id"]
        result = response.results[0]
        assert result.id == knowledge_base["sleep"].id
        assert result.title == "Sleep Guide"
        assert 0.9 < result.score <= 1.0
        assert result.metadata["chunk_scores"] == [round(result.score, 4)]
        assert result.metadata["matched_chunks"] == [0]
        assert "Sleep habit" in result.excerpt

    async def test_hybrid_runs_semantic(self, retriever, knowledge_base) -> None:
        response = await retriever.search("budget", knowledge_base_id=knowledge_base["kb_id"])

        assert response.search_type == SearchMode.HYBRID
        assert [r.title for r in response.results] == ["Budget Guide"]

    async def test_keyword_search_scores_flat(self, retriever, knowledge_base) -> None:
        response = await retriever.search("fixed SCHEDULE", agent_id="coach", mode="keyword")

        assert response.count == 1
        result = response.results[0]
        assert result.score == 1.0
        assert result.content == knowledge_base["sleep"].content
        assert result.metadata == {"author": "coach"}

    async def test_no_results_below_threshold(self, retriever, knowledge_base) -> None:
        response = await retriever.search("career stress", agent_id="coach", mode=SearchMode.SEMANTIC)

        assert response.results == []
        assert response.count == 0

    @pytest.mark.parametrize("query", ["", "   "])
    async def test_empty_query_rejected(self, retriever, knowledge_base, query) -> None:
        with pytest.raises(ValidationError):
            await retriever.search(query, agent_id="coach")

    @pytest.mark.parametrize("limit", [0, 51])
    async def test_limit_out_of_range(self, retriever, knowledge_base, limit) -> None:
        with pytest.raises(ValidationError):
            await retriever.search("sleep", agent_id="coach", limit=limit)

    async def test_unknown_mode_rejected(self, retriever, knowledge_base) -> None:
        with pytest.raises(ValidationError):
            await retriever.search("sleep", agent_id="coach", mode="fuzzy")

    async def test_scope_required(self, retriever) -> None:
        with pytest.raises(ValidationError):
            await retriever.search("sleep")

    async def test_unknown_knowledge_base(self, retriever) -> None:
        with pytest.raises(KnowledgeBaseNotFoundError):
            await retriever.search("sleep", agent_id="nobody")
        with pytest.raises(KnowledgeBaseNotFoundError):
            await retriever.search("sleep", knowledge_base_id=uuid.uuid4())

    async def test_long_document_does_not_crowd_out_others(self, retriever, add_document, embedder) -> None:
        query_vector = await embedder.embed_query("sleep habit")
        await add_document("library", "Big", "sleep habit " * 7, chunks=[("sleep habit", query_vector)] * 7)
        small_text = "Sleep habit basics: keep a fixed sleep schedule."
        await add_document("library", "Small", small_text, chunks=[(small_text, await embedder.embed_query(small_text))])

        response = await retriever.search("sleep habit", agent_id="library", limit=2, mode=SearchMode.SEMANTIC)

        assert [r.title for r in response.results] == ["Big", "Small"]
        assert response.results[0].metadata["matched_chunks"] == [0, 1, 2]
        assert 0.7 < response.results[1].score < response.results[0].score

    async def test_access_recorded_for_results(
        self, test_async_db, embedder, retrieval_settings, knowledge_base
    ) -> None:
        recorder = MagicMock()
        retriever = HybridRetriever(
            test_async_db,
            embedder,
            vector_store=NumpyVectorStore(test_async_db),
            settings=retrieval_settings,
            access_recorder=recorder,
        )

        await retriever.search("sleep", agent_id="coach")

        recorder.record.assert_called_once()
        assert list(recorder.record.call_args[0][0]) == [knowledge_base["sleep"].id]


class TestAccessRecorder:
    """Test fire-and-forget access counting."""

    async def test_increments_counters(self, session_factory, test_async_db, knowledge_base) -> None:
        recorder = AccessRecorder(session_factory)
        document = knowledge_base["sleep"]

        recorder.record([document.id, document.id])
        await recorder.drain()

        await test_async_db.refresh(document)
        assert document.access_count == 1
        assert document.last_accessed_at is not None

    async def test_failures_are_swallowed(self) -> None:
        factory = MagicMock(side_effect=RuntimeError("database gone"))
        recorder = AccessRecorder(factory)

        task = recorder.record([uuid.uuid4()])
        await recorder.drain()

        assert task.done()
        assert task.exception() is None

    def test_nothing_to_record(self) -> None:
        assert AccessRecorder(MagicMock()).record([]) is None

    async def test_unknown_document_ignored(self, session_factory, test_async_db) -> None:
        recorder = AccessRecorder(session_factory)

        recorder.record([uuid.uuid4()])
        await recorder.drain()

        assert await document_crud.count(test_async_db) == 0
