from typing import Any

import httpx

from po_upload.extraction.exceptions import ExtractionValidationError
from po_upload.extraction.models import PurchaseOrderRecord
from po_upload.extraction.validator import validate_and_build
from po_upload.logging.logger import Log
from po_upload.orchestrator.exceptions import StageFailedError
from po_upload.orchestrator.models import SelectedFile


class ProxyClient:
    """Calls the credential-proxy endpoints on behalf of the orchestrator.

    Takes any ``httpx.Client``; a FastAPI ``TestClient`` works as well.
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    @classmethod
    def from_base_url(cls, base_url: str, timeout_seconds: float = 120) -> "ProxyClient":
        return cls(httpx.Client(base_url=base_url, timeout=timeout_seconds))

    def upload(self, file: SelectedFile) -> dict[str, Any]:
        return self._call(
            "Failed to upload file to Mistral",
            "POST",
            "/api/mistral/upload",
            files={"file": (file.name, file.content, file.content_type)},
        )

    def file_url(self, file_id: str, expiry_hours: int = 24) -> dict[str, Any]:
        return self._call(
            "Failed to get file URL from Mistral",
            "GET",
            "/api/mistral/file-url",
            params={"id": file_id, "expiry": str(expiry_hours)},
        )

    def ocr(self, document_url: str) -> dict[str, Any]:
        return self._call(
            "Failed to perform OCR",
            "POST",
            "/api/mistral/ocr",
            json={"documentUrl": document_url},
        )

    def extract_po(self, extracted_text: str) -> PurchaseOrderRecord:
        body = self._call(
            "Failed to process with AI",
            "POST",
            "/api/openai/extract-po",
            json={"extractedText": extracted_text},
        )
        try:
            return validate_and_build(body)
        except ExtractionValidationError as exc:
            raise StageFailedError(f"Failed to process with AI: {exc}") from exc

    def close(self) -> None:
        self._client.close()

    def _call(self, failure: str, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise StageFailedError(f"{failure}: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = response.text

        if response.is_error:
            detail = body.get("error") if isinstance(body, dict) else body
            Log.warning(f"{method} {url} -> {response.status_code}: {detail}")
            raise StageFailedError(
                f"{failure}: {detail}" if detail else failure,
                status_code=response.status_code,
                payload=body,
            )
        if not isinstance(body, dict):
            raise StageFailedError(f"{failure}: expected a JSON object")
        return body
