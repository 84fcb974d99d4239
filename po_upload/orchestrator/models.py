import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from po_upload.extraction.models import PurchaseOrderRecord
from po_upload.storage.models import StoredDocument


class Stage(str, Enum):
    IDLE = "idle"
    SELECTED = "selected"
    UPLOADING = "uploading"
    AWAITING_URL = "awaiting_url"
    OCR_RUNNING = "ocr_running"
    OCR_READY = "ocr_ready"
    AI_RUNNING = "ai_running"
    REVIEWABLE = "reviewable"
    CONFIRMED = "confirmed"
    ERRORED = "errored"


class ViewMode(str, Enum):
    OCR = "ocr"
    FORM = "form"


@dataclass(frozen=True)
class SelectedFile:
    """A local file chosen for upload."""

    name: str
    content: bytes
    content_type: str
    path: Path | None = None

    @classmethod
    def from_path(cls, path: Path) -> "SelectedFile":
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            content=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
            path=path,
        )

    @property
    def preview_reference(self) -> str | None:
        return self.path.resolve().as_uri() if self.path is not None else None


@dataclass(frozen=True)
class UploadJob:
    """State of one uploaded file as it moves from selection to confirmation.

    Values are immutable; every transition produces a new job.
    """

    stage: Stage = Stage.IDLE
    file: SelectedFile | None = None
    display_name: str = ""
    error: str | None = None
    failed_stage: Stage | None = None
    file_id: str | None = None
    signed_url: str | None = None
    ocr_pages: tuple[str, ...] = ()
    ocr_text: str = ""
    record: PurchaseOrderRecord | None = None
    form_visible: bool = False
    view_mode: ViewMode = ViewMode.OCR
    preview_url: str | None = None
    stored_document: StoredDocument | None = None
    status_message: str = ""
