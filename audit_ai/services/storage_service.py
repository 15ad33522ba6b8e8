"""Storage service for resolving Supabase storage paths to signed URLs."""

from typing import Any, Dict

import httpx

from audit_ai.core.config import SupabaseSettings
from audit_ai.core.exceptions import APIClientError
from audit_ai.utils.logging import get_logger

LOGGER = get_logger(__name__)


class StorageService:
    """Read-only access to documents in Supabase storage."""

    def __init__(self, supabase_settings: SupabaseSettings, timeout: int = 60):
        self.url = supabase_settings.url.rstrip("/")
        self.bucket = supabase_settings.storage_bucket
        self.default_ttl = supabase_settings.signed_url_ttl
        self.timeout = timeout
        self.base_api_url = f"{self.url}/storage/v1"
        self.headers = {
            "Authorization": f"Bearer {supabase_settings.service_role_key}",
            "apikey": supabase_settings.service_role_key,
        }

    async def get_signed_url(self, bucket: str, path: str, expires_in: int = 3600) -> Dict[str, Any]:
        """Generate a signed URL for an object.

        Args:
            bucket: Bucket name.
            path: Object path.
            expires_in: Expiration time in seconds.

        Returns:
            The signed URL and the storage path.

        Raises:
            APIClientError: If URL generation fails.
        """
        url = f"{self.base_api_url}/object/sign/{bucket}/{path}"

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url,
                    headers=self.headers,
                    json={"expiresIn": expires_in},
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error generating signed URL: {e}", exc_info=True, extra={"bucket": bucket, "path": path})
            raise APIClientError(f"Signed URL error: {e}", original_error=e) from e

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to generate signed URL: {response.text}",
                extra={"bucket": bucket, "path": path, "status_code": response.status_code},
            )
            raise APIClientError(f"Signed URL generation failed: {response.text}")

        signed_path = response.json().get("signedURL")
        if not signed_path:
            raise APIClientError("Supabase response did not contain signedURL")

        # Supabase answers with a path relative to the project URL
        signed_url = f"{self.url}{signed_path}" if signed_path.startswith("/") else signed_path

        return {"signed_url": signed_url, "storage_path": path}

    async def create_download_url(self, path: str, expires_in: int | None = None) -> str:
        """Signed download URL for ``path`` in the documents bucket."""
        result = await self.get_signed_url(self.bucket, path, expires_in or self.default_ttl)
        return result["signed_url"]
