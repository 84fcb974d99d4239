from typing import Any

import httpx

from po_upload.logging.logger import Log
from po_upload.proxy.exceptions import ProviderTransportError
from po_upload.proxy.models import ProxyResponse


class ProviderForwarder:
    """Attaches a server-held secret to provider calls and relays the answer.

    Every proxy endpoint goes through :meth:`forward`, which only varies the
    target path and the request shape (query, JSON or multipart).
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout_seconds: float,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            transport=transport,
        )

    def forward(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: object | None = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> ProxyResponse:
        """Call the provider and relay status and body.

        Error statuses are relayed as ``{"error": <provider payload>}``.

        Raises:
            ProviderTransportError: if the provider could not be reached.
        """
        try:
            response = self._client.request(
                method, path, params=params, json=json, data=data, files=files
            )
        except httpx.HTTPError as exc:
            Log.error(f"{method} {path} failed before a response arrived: {exc}")
            raise ProviderTransportError(f"Provider unreachable: {exc}") from exc

        payload = self._decode(response)
        if response.is_error:
            Log.warning(f"{method} {path} -> {response.status_code}")
            return ProxyResponse(status_code=response.status_code, body={"error": payload})
        Log.info(f"{method} {path} -> {response.status_code}")
        return ProxyResponse(status_code=response.status_code, body=payload)

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _decode(response: httpx.Response) -> object:
        try:
            return response.json()
        except ValueError:
            return response.text
