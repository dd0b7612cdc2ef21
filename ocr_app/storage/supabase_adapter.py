from urllib.parse import quote

import httpx

from ocr_app.storage.base import BaseObjectStorage
from ocr_app.storage.exceptions import ObjectStorageError


class SupabaseStorageAdapter(BaseObjectStorage):
    """Object storage backed by the Supabase Storage REST API."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout_seconds: int = 30,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout_seconds)

    def upload(
        self,
        bucket: str,
        key: str,
        content: bytes,
        *,
        content_type: str,
        upsert: bool = True,
        cache_seconds: int = 3600,
    ) -> None:
        url = f"{self._base_url}/storage/v1/object/{bucket}/{quote(key)}"
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "apikey": self._api_key,
            "Content-Type": content_type,
            "cache-control": f"max-age={cache_seconds}",
            "x-upsert": "true" if upsert else "false",
        }
        try:
            response = self._client.post(url, content=content, headers=headers)
        except httpx.HTTPError as exc:
            raise ObjectStorageError(f"storage request failed: {exc}") from exc

        if response.is_error:
            raise ObjectStorageError(self._error_message(response))

    def get_public_url(self, bucket: str, key: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{bucket}/{quote(key)}"

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _error_message(self, response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
            if message:
                return str(message)
        return f"HTTP {response.status_code}"
