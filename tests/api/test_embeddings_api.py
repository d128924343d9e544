"""
Test suite for embedding management API endpoints.

System role: Verification of embedding backlog HTTP API
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from knowledge_context.api.deps import get_embedding_service
from knowledge_context.api.routers.embeddings import router
from knowledge_context.core.backlog.models import (
    BacklogStatus,
    ClearErrorsResult,
    GenerateResult,
    QueueResult,
    QueueStats,
    RecordError,
    ValidationIssue,
    ValidationReport,
)
from knowledge_context.core.exceptions import ValidationError


@pytest.fixture
def embedding_service() -> MagicMock:
    """Provide mocked embedding service."""
    return MagicMock()


@pytest.fixture
def client(embedding_service: MagicMock) -> TestClient:
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_embedding_service] = lambda: embedding_service
    return TestClient(app)


def test_status_with_scope(client, embedding_service) -> None:
    user_id = uuid.uuid4()
    embedding_service.get_status = AsyncMock(
        return_value=BacklogStatus(total=4, with_embedding=3, without_embedding=1)
    )

    response = client.get("/embeddings/status", params={"user_id": str(user_id)})

    assert response.status_code == 200
    assert response.json()["total"] == 4
    embedding_service.get_status.assert_awaited_once_with(target="nodes", user_id=user_id, document_id=None)


def test_status_rejects_mismatched_scope(client, embedding_service) -> None:
    embedding_service.get_status = AsyncMock(
        side_effect=ValidationError("Chunk backlog is scoped by document_id, not user_id", field="user_id")
    )

    response = client.get("/embeddings/status", params={"target": "chunks", "user_id": str(uuid.uuid4())})

    assert response.status_code == 400


def test_generate_reports_errors(client, embedding_service) -> None:
    failed = str(uuid.uuid4())
    embedding_service.generate = AsyncMock(
        return_value=GenerateResult(
            message="Generated 1 embeddings",
            processed=1,
            total=2,
            errors=[RecordError(id=failed, error="Embedding has 3 dimensions, expected 9")],
        )
    )

    response = client.post("/embeddings/generate", json={"node_ids": ["a", "b"], "batch_size": 5})

    assert response.status_code == 200
    assert response.json()["errors"][0]["id"] == failed
    kwargs = embedding_service.generate.call_args.kwargs
    assert kwargs["node_ids"] == ["a", "b"]
    assert kwargs["batch_size"] == 5
    assert kwargs["force_regenerate"] is False


def test_generate_malformed_ids(client, embedding_service) -> None:
    embedding_service.generate = AsyncMock(side_effect=ValidationError("Invalid id: 'x'", field="node_ids"))

    response = client.post("/embeddings/generate", json={"node_ids": ["x"]})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid id: 'x'"


def test_process_queue_dry_run(client, embedding_service) -> None:
    embedding_service.process_queue = AsyncMock(
        return_value=QueueResult(
            message="Dry run: would process 7 nodes",
            dry_run=True,
            stats=QueueStats(processed=7, tokens_used=120),
        )
    )

    response = client.post("/embeddings/process-queue", json={"dry_run": True, "max_nodes": 10})

    assert response.status_code == 200
    assert response.json()["stats"]["processed"] == 7
    embedding_service.process_queue.assert_awaited_once_with(
        target="nodes",
        max_nodes=10,
        batch_size=None,
        dry_run=True,
        time_budget_seconds=None,
    )


def test_validate(client, embedding_service) -> None:
    document_id = uuid.uuid4()
    embedding_service.validate = AsyncMock(
        return_value=ValidationReport(
            total_checked=2,
            valid=1,
            invalid=1,
            issues=[ValidationIssue(issue="dimension_mismatch", description="Wrong length", count=1)],
        )
    )

    response = client.post(
        "/embeddings/validate",
        json={"target": "chunks", "document_id": str(document_id), "mark_invalid": True},
    )

    assert response.status_code == 200
    assert response.json()["issues"][0]["issue"] == "dimension_mismatch"
    kwargs = embedding_service.validate.call_args.kwargs
    assert kwargs["document_id"] == document_id
    assert kwargs["check_dimensions"] is True
    assert kwargs["mark_invalid"] is True


def test_clear_errors(client, embedding_service) -> None:
    embedding_service.clear_errors = AsyncMock(return_value=ClearErrorsResult(cleared_count=3))

    response = client.post("/embeddings/clear-errors", json={})

    assert response.status_code == 200
    assert response.json() == {"cleared_count": 3}
