from po_upload.proxy.exceptions import MissingInputError
from po_upload.proxy.forwarder import ProviderForwarder
from po_upload.proxy.models import ProxyResponse


class MistralOcrProxy:
    """Mistral file and OCR calls expressed as request shapes for the forwarder."""

    def __init__(
        self,
        forwarder: ProviderForwarder,
        *,
        model: str = "mistral-ocr-latest",
        include_image_base64: bool = True,
    ) -> None:
        self._forwarder = forwarder
        self._model = model
        self._include_image_base64 = include_image_base64

    def upload_file(
        self, filename: str | None, content: bytes, content_type: str | None
    ) -> ProxyResponse:
        if not filename:
            raise MissingInputError("No file provided")
        return self._forwarder.forward(
            "POST",
            "/files",
            data={"purpose": "ocr"},
            files={"file": (filename, content, content_type or "application/octet-stream")},
        )

    def file_url(self, file_id: str | None, expiry: str | int = 24) -> ProxyResponse:
        if not file_id:
            raise MissingInputError("File ID is required")
        return self._forwarder.forward(
            "GET", f"/files/{file_id}/url", params={"expiry": str(expiry)}
        )

    def run_ocr(self, document_url: str | None) -> ProxyResponse:
        if not document_url:
            raise MissingInputError("Document URL is required")
        return self._forwarder.forward(
            "POST",
            "/ocr",
            json={
                "model": self._model,
                "document": {"type": "document_url", "document_url": document_url},
                "include_image_base64": self._include_image_base64,
            },
        )
