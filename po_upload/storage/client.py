from typing import Any
from urllib.parse import quote

import httpx

from po_upload.logging.logger import Log
from po_upload.storage.exceptions import StorageError


class SupabaseStorageClient:
    """Minimal client for the Supabase Storage REST API, scoped to one bucket."""

    def __init__(
        self,
        *,
        supabase_url: str,
        api_key: str,
        bucket: str,
        access_token: str | None = None,
        timeout_seconds: float = 60,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = supabase_url.rstrip("/")
        self.bucket = bucket
        self._client = httpx.Client(
            base_url=f"{self._base_url}/storage/v1",
            timeout=timeout_seconds,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {access_token or api_key}",
            },
            transport=transport,
        )

    def list_objects(self, prefix: str = "", limit: int = 100) -> list[dict[str, Any]]:
        """List objects under ``prefix``.

        Raises:
            StorageError: with the provider's message on any failure.
        """
        response = self._send(
            "POST",
            f"/object/list/{self.bucket}",
            json={"prefix": prefix, "limit": limit, "offset": 0},
        )
        body = response.json()
        return body if isinstance(body, list) else []

    def upload(
        self,
        name: str,
        content: bytes,
        content_type: str,
        *,
        cache_control: str = "3600",
        upsert: bool = False,
    ) -> None:
        """Create object ``name``; fails if it exists unless ``upsert``."""
        self._send(
            "POST",
            f"/object/{self.bucket}/{quote(name)}",
            content=content,
            headers={
                "Content-Type": content_type,
                "Cache-Control": f"max-age={cache_control}",
                "x-upsert": "true" if upsert else "false",
            },
        )

    def public_url(self, name: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{self.bucket}/{quote(name)}"

    def close(self) -> None:
        self._client.close()

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            Log.error(f"Storage {method} {path} failed: {exc}")
            raise StorageError(f"Storage request failed: {exc}") from exc
        if response.is_error:
            message = self._error_message(response)
            Log.warning(f"Storage {method} {path} -> {response.status_code}: {message}")
            raise StorageError(message)
        return response

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or body)
        return str(body)
