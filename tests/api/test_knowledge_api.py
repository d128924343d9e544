"""
Test suite for knowledge API endpoints.

Tests upload, processing, status and search routes with FastAPI TestClient
and a mocked KnowledgeService. Covers success paths and error mapping.

System role: Verification of knowledge HTTP API
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from knowledge_context.api.deps import get_knowledge_service
from knowledge_context.api.routers.knowledge import router
from knowledge_context.core.document_processing.models import PipelineResult
from knowledge_context.core.exceptions import (
    DocumentNotFoundError,
    EmbeddingError,
    KnowledgeBaseNotFoundError,
    ValidationError,
)
from knowledge_context.core.retrieval import SearchMode, SearchResponse, SearchResult


@pytest.fixture
def knowledge_service() -> MagicMock:
    """Provide mocked knowledge service."""
    return MagicMock()


@pytest.fixture
def client(knowledge_service: MagicMock) -> TestClient:
    """Provide TestClient with the knowledge router and mocked service."""
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_knowledge_service] = lambda: knowledge_service
    return TestClient(app)


@pytest.fixture
def upload_result() -> dict:
    return {
        "document_id": uuid.uuid4(),
        "knowledge_base_id": uuid.uuid4(),
        "title": "SMART Goals",
        "content_hash": "ab" * 32,
        "processing": True,
        "task_id": "task-123",
    }


class TestUploadDocument:
    """Test POST /knowledge/documents."""

    def test_upload_queues_processing(self, client, knowledge_service, upload_result) -> None:
        knowledge_service.upload_document = AsyncMock(return_value=upload_result)

        response = client.post(
            "/knowledge/documents",
            json={"agent_id": "coach", "title": "SMART Goals", "content": "Specific goals..."},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["document_id"] == str(upload_result["document_id"])
        assert data["task_id"] == "task-123"
        assert data["message"] == "Document uploaded successfully. Processing started in background."
        kwargs = knowledge_service.upload_document.call_args.kwargs
        assert kwargs["agent_id"] == "coach"
        assert kwargs["source_type"] == "text"
        assert kwargs["process"] is True

    def test_upload_without_processing(self, client, knowledge_service, upload_result) -> None:
        upload_result.update(processing=False, task_id=None)
        knowledge_service.upload_document = AsyncMock(return_value=upload_result)

        response = client.post(
            "/knowledge/documents",
            json={"agent_id": "coach", "title": "T", "content": "C", "process": False},
        )

        assert response.status_code == 201
        assert response.json()["message"] == "Document uploaded successfully. Processing not started."

    def test_missing_fields_are_bad_requests(self, client, knowledge_service) -> None:
        knowledge_service.upload_document = AsyncMock(
            side_effect=ValidationError("title is required", field="title")
        )

        response = client.post("/knowledge/documents", json={"agent_id": "coach", "content": "C"})

        assert response.status_code == 400
        assert response.json()["detail"] == "title is required"
        assert knowledge_service.upload_document.call_args.kwargs["title"] is None


class TestProcessDocument:
    """Test processing and status routes."""

    def test_process_defaults_to_no_force(self, client, knowledge_service) -> None:
        document_id = uuid.uuid4()
        knowledge_service.process_document = AsyncMock(
            return_value=PipelineResult(
                document_id=document_id,
                chunk_count=3,
                chunks_created=3,
                chunks_embedded=3,
                processing_time_ms=12.5,
            )
        )

        response = client.post(f"/knowledge/documents/{document_id}/process")

        assert response.status_code == 200
        assert response.json()["chunks_embedded"] == 3
        knowledge_service.process_document.assert_awaited_once_with(document_id, force_regenerate=False)

    def test_process_force_regenerate(self, client, knowledge_service) -> None:
        document_id = uuid.uuid4()
        knowledge_service.process_document = AsyncMock(
            return_value=PipelineResult(document_id=document_id, chunk_count=1, processing_time_ms=1.0)
        )

        client.post(f"/knowledge/documents/{document_id}/process", json={"force_regenerate": True})

        knowledge_service.process_document.assert_awaited_once_with(document_id, force_regenerate=True)

    def test_unknown_document(self, client, knowledge_service) -> None:
        document_id = uuid.uuid4()
        knowledge_service.process_document = AsyncMock(side_effect=DocumentNotFoundError(document_id))

        response = client.post(f"/knowledge/documents/{document_id}/process")

        assert response.status_code == 404
        assert str(document_id) in response.json()["detail"]

    def test_malformed_document_id(self, client) -> None:
        response = client.get("/knowledge/documents/not-a-uuid/status")

        assert response.status_code == 422

    def test_status(self, client, knowledge_service) -> None:
        document_id = uuid.uuid4()
        knowledge_service.get_processing_status = AsyncMock(
            return_value={
                "document_id": document_id,
                "title": "SMART Goals",
                "chunk_count": 3,
                "chunks_pending": 1,
                "chunks_in_progress": 0,
                "chunks_embedded": 2,
                "chunks_errored": 0,
                "status": "pending",
            }
        )

        response = client.get(f"/knowledge/documents/{document_id}/status")

        assert response.status_code == 200
        assert response.json()["chunks_embedded"] == 2
        assert response.json()["status"] == "pending"


class TestSearch:
    """Test POST /knowledge/search."""

    def test_search_passes_mode(self, client, knowledge_service) -> None:
        knowledge_base_id = uuid.uuid4()
        document_id = uuid.uuid4()
        knowledge_service.search = AsyncMock(
            return_value=SearchResponse(
                query="time-bound",
                results=[
                    SearchResult(
                        id=document_id,
                        title="SMART Goals",
                        content="Time-bound goals...",
                        score=0.82,
                        excerpt="Time-bound goals...",
                    )
                ],
                count=1,
                search_type=SearchMode.SEMANTIC,
                knowledge_base_id=knowledge_base_id,
            )
        )

        response = client.post(
            "/knowledge/search",
            json={"query": "time-bound", "agent_id": "coach", "limit": 5, "search_type": "semantic"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["results"][0]["score"] == 0.82
        knowledge_service.search.assert_awaited_once_with(
            "time-bound",
            knowledge_base_id=None,
            agent_id="coach",
            limit=5,
            mode=SearchMode.SEMANTIC,
        )

    def test_unknown_search_type(self, client, knowledge_service) -> None:
        knowledge_service.search = AsyncMock()

        response = client.post("/knowledge/search", json={"query": "x", "search_type": "fuzzy"})

        assert response.status_code == 422
        knowledge_service.search.assert_not_awaited()

    @pytest.mark.parametrize(
        "error,status_code",
        [
            (ValidationError("limit must be between 1 and 50", field="limit"), 400),
            (KnowledgeBaseNotFoundError("coach"), 404),
            (EmbeddingError("Embedding provider unavailable"), 502),
            (RuntimeError("boom"), 500),
        ],
    )
    def test_error_mapping(self, client, knowledge_service, error, status_code) -> None:
        knowledge_service.search = AsyncMock(side_effect=error)

        response = client.post("/knowledge/search", json={"query": "goals", "agent_id": "coach"})

        assert response.status_code == status_code
