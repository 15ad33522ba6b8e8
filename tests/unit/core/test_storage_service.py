"""Tests for signed download URLs."""

import json
from unittest.mock import patch

import httpx
import pytest

from audit_ai.core.config import SupabaseSettings
from audit_ai.core.exceptions import APIClientError
from audit_ai.services.storage_service import StorageService

SUPABASE_URL = "https://test-project.supabase.co"

_REAL_ASYNC_CLIENT = httpx.AsyncClient


def _patched_client(handler):
    factory = lambda **kwargs: _REAL_ASYNC_CLIENT(transport=httpx.MockTransport(handler), **kwargs)
    return patch("audit_ai.services.storage_service.httpx.AsyncClient", factory)


@pytest.fixture
def storage() -> StorageService:
    supabase_settings = SupabaseSettings().model_copy(
        update={
            "url": SUPABASE_URL + "/",
            "service_role_key": "service-role",
            "storage_bucket": "documents",
            "signed_url_ttl": 600,
        }
    )
    return StorageService(supabase_settings)


@pytest.mark.asyncio
async def test_create_download_url_signs_relative_path(storage):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"signedURL": "/storage/v1/object/sign/documents/a.pdf?token=t"})

    with _patched_client(handler):
        url = await storage.create_download_url("projects/contoso/a.pdf")

    assert url == f"{SUPABASE_URL}/storage/v1/object/sign/documents/a.pdf?token=t"
    request = requests[0]
    assert request.url.path == "/storage/v1/object/sign/documents/projects/contoso/a.pdf"
    assert request.headers["apikey"] == "service-role"
    assert request.headers["Authorization"] == "Bearer service-role"
    assert json.loads(request.content) == {"expiresIn": 600}


@pytest.mark.asyncio
async def test_get_signed_url_keeps_absolute_url(storage):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"signedURL": "https://cdn.example.com/a.pdf?token=t"})

    with _patched_client(handler):
        result = await storage.get_signed_url("archive", "a.pdf", expires_in=60)

    assert result == {"signed_url": "https://cdn.example.com/a.pdf?token=t", "storage_path": "a.pdf"}


@pytest.mark.asyncio
async def test_error_status_raises(storage):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text='{"error":"Object not found"}')

    with _patched_client(handler):
        with pytest.raises(APIClientError, match="Object not found"):
            await storage.create_download_url("missing.pdf")


@pytest.mark.asyncio
async def test_missing_signed_url_raises(storage):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    with _patched_client(handler):
        with pytest.raises(APIClientError):
            await storage.create_download_url("a.pdf")


@pytest.mark.asyncio
async def test_transport_error_is_wrapped(storage):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with _patched_client(handler):
        with pytest.raises(APIClientError) as exc_info:
            await storage.create_download_url("a.pdf")

    assert isinstance(exc_info.value.original_error, httpx.ConnectError)
