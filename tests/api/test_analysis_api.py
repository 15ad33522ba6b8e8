"""Endpoint tests for document analysis."""

from uuid import uuid4

import pytest

from audit_ai.core.config import settings
from audit_ai.core.exceptions import (
    AccessDeniedError,
    AnalysisFailedError,
    AnalysisInProgressError,
    DatabaseError,
    DocumentNotFoundError,
    NotFoundError,
    UpstreamServiceError,
)
from audit_ai.schemas.analysis import AnalysisRequestResult, AnalysisResponse


def _analysis(document_id) -> AnalysisResponse:
    return AnalysisResponse(
        id=uuid4(),
        document_id=document_id,
        extracted_data={"tables": [], "keyValuePairs": {"Invoice Number": "INV-0042"}, "content": "", "pages": 1},
        ai_summary="Invoice totals reconcile with the ledger.",
        red_flags=[],
        highlights=[],
        confidence_score=0.7,
        processing_time_ms=1840,
    )


def test_analyze_document(test_client, authenticated, lifecycle, db_user):
    document_id = uuid4()
    lifecycle.request_analysis.return_value = AnalysisRequestResult(analysis=_analysis(document_id), reused=False)

    response = test_client.post(f"/api/v1/analysis/{document_id}", headers=authenticated)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] is True
    assert body["message"] == "Document analyzed successfully"
    assert body["data"]["reused"] is False
    assert body["data"]["analysis"]["document_id"] == str(document_id)
    assert body["data"]["analysis"]["confidence_score"] == 0.7
    lifecycle.request_analysis.assert_awaited_once_with(document_id, db_user.id)


def test_analyze_document_reuses_existing(test_client, authenticated, lifecycle):
    document_id = uuid4()
    lifecycle.request_analysis.return_value = AnalysisRequestResult(analysis=_analysis(document_id), reused=True)

    response = test_client.post(f"/api/v1/analysis/{document_id}", headers=authenticated)

    assert response.status_code == 200
    assert response.json()["message"] == "Analysis already exists"
    assert response.json()["data"]["reused"] is True


def test_request_id_is_echoed(test_client, authenticated, lifecycle):
    document_id = uuid4()
    lifecycle.request_analysis.return_value = AnalysisRequestResult(analysis=_analysis(document_id))

    response = test_client.post(
        f"/api/v1/analysis/{document_id}",
        headers={**authenticated, "X-Request-ID": "req-123"},
    )

    assert response.headers["X-Request-ID"] == "req-123"
    assert response.json()["meta"]["request_id"] == "req-123"


@pytest.mark.parametrize(
    ("error", "status_code", "title"),
    [
        (DocumentNotFoundError("Document not found"), 404, "Document Not Found"),
        (AccessDeniedError("Access denied to this project"), 403, "Access Denied"),
        (AnalysisInProgressError("Analysis already in progress"), 409, "Analysis In Progress"),
        (AnalysisFailedError("Document analysis failed"), 502, "Analysis Failed"),
        (DatabaseError("Failed to store analysis"), 500, "Internal Server Error"),
    ],
)
def test_analyze_document_errors(test_client, authenticated, lifecycle, error, status_code, title):
    lifecycle.request_analysis.side_effect = error
    document_id = uuid4()

    response = test_client.post(f"/api/v1/analysis/{document_id}", headers=authenticated)

    assert response.status_code == status_code
    body = response.json()
    assert body["status"] == status_code
    assert body["title"] == title
    assert body["detail"] == error.message
    assert body["instance"] == f"/api/v1/analysis/{document_id}"


def test_production_hides_server_error_detail(test_client, authenticated, lifecycle, monkeypatch):
    monkeypatch.setattr(settings, "environment", "production")
    lifecycle.request_analysis.side_effect = AnalysisFailedError(
        "Document analysis failed",
        original_error=UpstreamServiceError("Document Intelligence error 401: key=abc"),
    )

    response = test_client.post(f"/api/v1/analysis/{uuid4()}", headers=authenticated)

    assert response.status_code == 502
    assert "key=abc" not in response.text
    assert response.json()["detail"] == "An internal error occurred while processing the request"


def test_production_keeps_client_error_detail(test_client, authenticated, lifecycle, monkeypatch):
    monkeypatch.setattr(settings, "environment", "production")
    lifecycle.request_analysis.side_effect = AnalysisInProgressError("Analysis already in progress")

    response = test_client.post(f"/api/v1/analysis/{uuid4()}", headers=authenticated)

    assert response.status_code == 409
    assert response.json()["detail"] == "Analysis already in progress"


def test_analyze_rejects_malformed_id(test_client, authenticated):
    response = test_client.post("/api/v1/analysis/not-a-uuid", headers=authenticated)
    assert response.status_code == 422


def test_analyze_requires_token(test_client):
    response = test_client.post(f"/api/v1/analysis/{uuid4()}")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_get_analysis(test_client, authenticated, lifecycle):
    document_id = uuid4()
    lifecycle.get_analysis.return_value = _analysis(document_id)

    response = test_client.get(f"/api/v1/analysis/{document_id}", headers=authenticated)

    assert response.status_code == 200
    assert response.json()["message"] == "Analysis retrieved successfully"
    assert response.json()["data"]["analysis"]["ai_summary"] == "Invoice totals reconcile with the ledger."


def test_get_analysis_not_found(test_client, authenticated, lifecycle):
    lifecycle.get_analysis.side_effect = NotFoundError("Analysis not found")

    response = test_client.get(f"/api/v1/analysis/{uuid4()}", headers=authenticated)

    assert response.status_code == 404
    assert response.json()["title"] == "Not Found"
