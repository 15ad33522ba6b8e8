"""Azure Document Intelligence (Form Recognizer) REST client.

Submits a document URL to the ``:analyze`` endpoint, polls the returned
``Operation-Location`` until the operation settles, and maps the raw
``analyzeResult`` onto ``ExtractedData``.
"""

import asyncio
from typing import Any, Dict, Optional

import httpx

from audit_ai.core.config import DocumentIntelligenceSettings
from audit_ai.core.exceptions import APIClientError, ConfigurationError
from audit_ai.schemas.extraction import ExtractedData, ExtractedTable, TableCell
from audit_ai.services.storage_service import StorageService
from audit_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)

_TERMINAL_FAILURES = {"failed", "canceled"}


class DocumentIntelligenceClient:
    """Extracts tables, key-value pairs and text from stored documents."""

    def __init__(
        self,
        di_settings: DocumentIntelligenceSettings,
        storage_service: Optional[StorageService] = None,
        timeout: int = 60,
    ):
        self.endpoint = di_settings.endpoint.rstrip("/")
        self.api_key = di_settings.api_key
        self.api_version = di_settings.api_version
        self.poll_interval = di_settings.poll_interval_seconds
        self.storage_service = storage_service
        self.timeout = timeout

    async def analyze(self, storage_locator: str, model_id: str = "prebuilt-document") -> ExtractedData:
        """Run ``model_id`` over the document at ``storage_locator``.

        Args:
            storage_locator: Absolute URL, or a path inside the documents bucket
            model_id: Document Intelligence model to run

        Returns:
            Extracted document data

        Raises:
            ConfigurationError: If the endpoint or key is not configured
            APIClientError: If submission, polling or the operation itself fails
        """
        if not self.endpoint or not self.api_key:
            raise ConfigurationError("Document Intelligence endpoint and key must be configured")

        document_url = await self._resolve_url(storage_locator)
        analyze_url = (
            f"{self.endpoint}/formrecognizer/documentModels/{model_id}:analyze"
            f"?api-version={self.api_version}"
        )
        headers = {"Ocp-Apim-Subscription-Key": self.api_key}

        LOGGER.info("Submitting document for extraction", extra={"model_id": model_id})

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(analyze_url, headers=headers, json={"urlSource": document_url})
                if response.status_code != 202:
                    LOGGER.error(
                        "Document Intelligence rejected the request",
                        extra={"status_code": response.status_code, "error_body": response.text[:500]},
                    )
                    raise APIClientError(
                        f"Document Intelligence error {response.status_code}: {response.text}"
                    )

                operation_url = response.headers.get("Operation-Location")
                if not operation_url:
                    raise APIClientError("Document Intelligence response missing Operation-Location")

                analyze_result = await self._poll(client, operation_url, headers)
        except httpx.HTTPError as e:
            LOGGER.error(f"Document Intelligence request failed: {e}", exc_info=True)
            raise APIClientError(f"Document Intelligence request failed: {e}", original_error=e) from e

        extracted = self.to_extracted_data(analyze_result)
        LOGGER.info(
            "Document extraction completed",
            extra={
                "pages": extracted.pages,
                "tables": len(extracted.tables),
                "key_value_pairs": len(extracted.key_value_pairs),
            },
        )
        return extracted

    async def _resolve_url(self, storage_locator: str) -> str:
        if storage_locator.startswith(("http://", "https://")):
            return storage_locator
        if not self.storage_service:
            raise ConfigurationError("A storage service is required to resolve storage paths")

        path = storage_locator.lstrip("/")
        bucket_prefix = f"{self.storage_service.bucket}/"
        if path.startswith(bucket_prefix):
            path = path[len(bucket_prefix):]
        return await self.storage_service.create_download_url(path)

    async def _poll(self, client: httpx.AsyncClient, operation_url: str, headers: Dict[str, str]) -> Dict[str, Any]:
        """Poll until the operation succeeds; the caller bounds total time."""
        while True:
            response = await client.get(operation_url, headers=headers)
            response.raise_for_status()
            body = response.json()
            status = body.get("status")

            if status == "succeeded":
                return body.get("analyzeResult") or {}
            if status in _TERMINAL_FAILURES:
                error = body.get("error") or {}
                raise APIClientError(
                    f"Document analysis {status}: {error.get('message', 'no details')}"
                )

            await asyncio.sleep(self.poll_interval)

    @staticmethod
    def to_extracted_data(analyze_result: Dict[str, Any]) -> ExtractedData:
        """Map a raw ``analyzeResult`` onto ``ExtractedData``."""
        tables = [
            ExtractedTable(
                row_count=table.get("rowCount", 0),
                column_count=table.get("columnCount", 0),
                cells=[
                    TableCell(
                        content=cell.get("content", ""),
                        row_index=cell.get("rowIndex", 0),
                        column_index=cell.get("columnIndex", 0),
                    )
                    for cell in table.get("cells", [])
                ],
            )
            for table in analyze_result.get("tables") or []
        ]

        key_value_pairs: Dict[str, str] = {}
        for pair in analyze_result.get("keyValuePairs") or []:
            key, value = pair.get("key"), pair.get("value")
            # Pairs without a detected value are dropped
            if key and value:
                key_value_pairs[key.get("content", "")] = value.get("content", "")

        return ExtractedData(
            tables=tables,
            key_value_pairs=key_value_pairs,
            content=analyze_result.get("content") or "",
            pages=len(analyze_result.get("pages") or []),
        )
