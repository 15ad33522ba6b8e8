"""Tests for the Document Intelligence REST client."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from audit_ai.core.config import DocumentIntelligenceSettings
from audit_ai.core.document_intelligence_client import DocumentIntelligenceClient
from audit_ai.core.exceptions import APIClientError, ConfigurationError
from audit_ai.services.storage_service import StorageService

ENDPOINT = "https://audit-di.cognitiveservices.azure.com"
OPERATION_URL = f"{ENDPOINT}/formrecognizer/documentModels/prebuilt-document/analyzeResults/op-1"

ANALYZE_RESULT = {
    "content": "Invoice INV-0042 issued to Contoso Ltd.",
    "pages": [{"pageNumber": 1}, {"pageNumber": 2}],
    "tables": [
        {
            "rowCount": 1,
            "columnCount": 2,
            "cells": [
                {"content": "Total", "rowIndex": 0, "columnIndex": 0},
                {"content": "1,250.00", "rowIndex": 0, "columnIndex": 1},
            ],
        }
    ],
    "keyValuePairs": [
        {"key": {"content": "Invoice Number"}, "value": {"content": "INV-0042"}},
        {"key": {"content": "PO Number"}},
    ],
}

_REAL_ASYNC_CLIENT = httpx.AsyncClient


def _patched_client(handler):
    factory = lambda **kwargs: _REAL_ASYNC_CLIENT(transport=httpx.MockTransport(handler), **kwargs)
    return patch("audit_ai.core.document_intelligence_client.httpx.AsyncClient", factory)


def _settings(**overrides) -> DocumentIntelligenceSettings:
    values = {"endpoint": ENDPOINT + "/", "api_key": "di-key", "poll_interval_seconds": 0}
    values.update(overrides)
    return DocumentIntelligenceSettings().model_copy(update=values)


class _Handler:
    """Accepts the submission, reports running once, then succeeds."""

    def __init__(self, final_status="succeeded", submit_status=202):
        self.final_status = final_status
        self.submit_status = submit_status
        self.submitted = []
        self.polls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            self.submitted.append(request)
            if self.submit_status != 202:
                return httpx.Response(self.submit_status, text="InvalidRequest")
            return httpx.Response(202, headers={"Operation-Location": OPERATION_URL})

        self.polls += 1
        if self.polls == 1:
            return httpx.Response(200, json={"status": "running"})
        if self.final_status == "succeeded":
            return httpx.Response(200, json={"status": "succeeded", "analyzeResult": ANALYZE_RESULT})
        return httpx.Response(200, json={"status": self.final_status, "error": {"message": "Corrupt file"}})


def test_to_extracted_data_maps_result():
    extracted = DocumentIntelligenceClient.to_extracted_data(ANALYZE_RESULT)

    assert extracted.pages == 2
    assert extracted.content.startswith("Invoice INV-0042")
    assert extracted.key_value_pairs == {"Invoice Number": "INV-0042"}
    assert extracted.tables[0].row_count == 1
    assert extracted.tables[0].cells[1].content == "1,250.00"
    assert extracted.tables[0].cells[1].column_index == 1


def test_to_extracted_data_with_empty_result():
    extracted = DocumentIntelligenceClient.to_extracted_data({})

    assert extracted.tables == []
    assert extracted.key_value_pairs == {}
    assert extracted.content == ""
    assert extracted.pages == 0


@pytest.mark.asyncio
async def test_analyze_submits_and_polls_until_succeeded():
    handler = _Handler()
    client = DocumentIntelligenceClient(_settings())

    with _patched_client(handler):
        extracted = await client.analyze("https://files.example.com/invoice.pdf")

    request = handler.submitted[0]
    assert request.url.path == "/formrecognizer/documentModels/prebuilt-document:analyze"
    assert request.url.params["api-version"] == "2023-07-31"
    assert request.headers["Ocp-Apim-Subscription-Key"] == "di-key"
    assert json.loads(request.content) == {"urlSource": "https://files.example.com/invoice.pdf"}
    assert handler.polls == 2
    assert extracted.key_value_pairs == {"Invoice Number": "INV-0042"}


@pytest.mark.asyncio
async def test_storage_path_is_signed_before_submission():
    storage = MagicMock(spec=StorageService)
    storage.bucket = "documents"
    storage.create_download_url = AsyncMock(return_value="https://signed.example.com/invoice.pdf?token=abc")
    handler = _Handler()
    client = DocumentIntelligenceClient(_settings(), storage_service=storage)

    with _patched_client(handler):
        await client.analyze("documents/projects/contoso/invoice.pdf")

    storage.create_download_url.assert_awaited_once_with("projects/contoso/invoice.pdf")
    body = json.loads(handler.submitted[0].content)
    assert body["urlSource"] == "https://signed.example.com/invoice.pdf?token=abc"


@pytest.mark.asyncio
async def test_storage_path_without_storage_service():
    client = DocumentIntelligenceClient(_settings())

    with pytest.raises(ConfigurationError):
        await client.analyze("projects/contoso/invoice.pdf")


@pytest.mark.asyncio
@pytest.mark.parametrize("final_status", ["failed", "canceled"])
async def test_failed_operation_raises(final_status):
    client = DocumentIntelligenceClient(_settings())

    with _patched_client(_Handler(final_status=final_status)):
        with pytest.raises(APIClientError, match="Corrupt file"):
            await client.analyze("https://files.example.com/invoice.pdf")


@pytest.mark.asyncio
async def test_rejected_submission_raises():
    handler = _Handler(submit_status=400)
    client = DocumentIntelligenceClient(_settings())

    with _patched_client(handler):
        with pytest.raises(APIClientError, match="400"):
            await client.analyze("https://files.example.com/invoice.pdf")

    assert handler.polls == 0


@pytest.mark.asyncio
async def test_unconfigured_client_raises():
    client = DocumentIntelligenceClient(_settings(endpoint="", api_key=""))

    with pytest.raises(ConfigurationError):
        await client.analyze("https://files.example.com/invoice.pdf")
