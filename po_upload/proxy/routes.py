"""Credential-proxy endpoints.

Each endpoint checks its one required input, forwards the call with a
server-held secret and relays the provider's status and body.
"""

from fastapi import APIRouter, Depends, FastAPI, File, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from po_upload.extraction.base import BasePurchaseOrderExtractor
from po_upload.extraction.exceptions import (
    ExtractionError,
    ExtractionNetworkError,
    ExtractionNotConfiguredError,
    ExtractionUpstreamError,
)
from po_upload.extraction.factory import ExtractorFactory
from po_upload.logging.logger import Log
from po_upload.proxy.exceptions import MissingInputError, ProviderTransportError
from po_upload.proxy.mistral import MistralOcrProxy
from po_upload.proxy.models import ProxyResponse

router = APIRouter(prefix="/api")

INTERNAL_ERROR = "Internal server error"


class OcrRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_url: str | None = Field(default=None, alias="documentUrl")


class ExtractRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    extracted_text: str | None = Field(default=None, alias="extractedText")


def get_ocr_proxy(request: Request) -> MistralOcrProxy:
    return request.app.state.ocr_proxy


def get_extractor(request: Request) -> BasePurchaseOrderExtractor:
    """Build the extractor on first use so a missing key fails per request, not at startup."""
    state = request.app.state
    if state.extractor is None:
        try:
            state.extractor = ExtractorFactory.create(state.settings)
        except ValueError as exc:
            raise ExtractionNotConfiguredError(str(exc)) from exc
    return state.extractor


def _relay(result: ProxyResponse) -> JSONResponse:
    return JSONResponse(content=result.body, status_code=result.status_code)


@router.post("/mistral/upload")
def upload_file(
    file: UploadFile | None = File(default=None),
    proxy: MistralOcrProxy = Depends(get_ocr_proxy),
) -> JSONResponse:
    if file is None:
        raise MissingInputError("No file provided")
    content = file.file.read()
    return _relay(proxy.upload_file(file.filename, content, file.content_type))


@router.get("/mistral/file-url")
def file_url(
    file_id: str | None = Query(default=None, alias="id"),
    expiry: str = Query(default="24"),
    proxy: MistralOcrProxy = Depends(get_ocr_proxy),
) -> JSONResponse:
    return _relay(proxy.file_url(file_id, expiry))


@router.post("/mistral/ocr")
def run_ocr(
    payload: OcrRequest,
    proxy: MistralOcrProxy = Depends(get_ocr_proxy),
) -> JSONResponse:
    return _relay(proxy.run_ocr(payload.document_url))


@router.post("/openai/extract-po")
def extract_po(
    payload: ExtractRequest,
    extractor: BasePurchaseOrderExtractor = Depends(get_extractor),
) -> JSONResponse:
    if not payload.extracted_text:
        raise MissingInputError("No text provided")
    record = extractor.extract(payload.extracted_text)
    return JSONResponse(content=record.to_dict())


def _error(status_code: int, error: object) -> JSONResponse:
    return JSONResponse(content={"error": error}, status_code=status_code)


def install_error_handlers(app: FastAPI) -> None:
    """Map proxy and extraction failures onto the ``{"error": ...}`` envelope."""

    @app.exception_handler(MissingInputError)
    def _missing_input(_request: Request, exc: MissingInputError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(RequestValidationError)
    def _invalid_request(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, "Invalid request body")

    @app.exception_handler(ProviderTransportError)
    def _transport(_request: Request, exc: ProviderTransportError) -> JSONResponse:
        return _error(500, INTERNAL_ERROR)

    @app.exception_handler(ExtractionUpstreamError)
    def _upstream(_request: Request, exc: ExtractionUpstreamError) -> JSONResponse:
        Log.warning(f"Extraction provider error: {exc}")
        return _error(exc.status_code, exc.payload)

    @app.exception_handler(ExtractionNetworkError)
    def _extraction_network(_request: Request, exc: ExtractionNetworkError) -> JSONResponse:
        Log.error(f"Extraction provider unreachable: {exc}")
        return _error(500, INTERNAL_ERROR)

    @app.exception_handler(ExtractionNotConfiguredError)
    def _not_configured(_request: Request, exc: ExtractionNotConfiguredError) -> JSONResponse:
        return _error(500, str(exc))

    @app.exception_handler(ExtractionError)
    def _extraction(_request: Request, exc: ExtractionError) -> JSONResponse:
        Log.error(f"Extraction failed: {exc}")
        return _error(500, str(exc))

    @app.exception_handler(Exception)
    def _unexpected(request: Request, exc: Exception) -> Response:
        Log.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
        if request.url.path.startswith("/api"):
            return _error(500, INTERNAL_ERROR)
        return PlainTextResponse("Internal Server Error", status_code=500)
