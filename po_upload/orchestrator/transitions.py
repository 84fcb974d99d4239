"""Pure stage transitions for an UploadJob.

Each function takes the current job and returns the next one. A trigger
fired from a stage that does not allow it raises InvalidTransitionError and
produces nothing.
"""

from collections.abc import Mapping
from dataclasses import replace

from po_upload.extraction.models import PurchaseOrderRecord
from po_upload.orchestrator.exceptions import InvalidTransitionError, MissingOcrTextError
from po_upload.orchestrator.models import SelectedFile, Stage, UploadJob, ViewMode
from po_upload.orchestrator.ocr_text import assemble_ocr_text, page_texts
from po_upload.storage.models import StoredDocument

IN_FLIGHT = frozenset(
    {
        Stage.SELECTED,
        Stage.UPLOADING,
        Stage.AWAITING_URL,
        Stage.OCR_RUNNING,
        Stage.OCR_READY,
        Stage.AI_RUNNING,
    }
)

CONFIRMED_MESSAGE = "Purchase order data has been confirmed and saved!"


def _require(job: UploadJob, trigger: str, *allowed: Stage) -> None:
    if job.stage not in allowed:
        names = ", ".join(stage.value for stage in allowed)
        raise InvalidTransitionError(
            f"Cannot {trigger} while {job.stage.value}; expected one of: {names}"
        )


def select_file(file: SelectedFile) -> UploadJob:
    """Start over with a new file. Allowed from any stage.

    Nothing from the previous job survives: OCR text, record, form state and
    errors are gone before any network call for the new file.
    """
    return UploadJob(
        stage=Stage.SELECTED,
        file=file,
        display_name=file.name,
        preview_url=file.preview_reference,
        status_message=f"File selected: {file.name}",
    )


def start_upload(job: UploadJob) -> UploadJob:
    _require(job, "submit", Stage.SELECTED)
    return replace(job, stage=Stage.UPLOADING, error=None, status_message="")


def upload_succeeded(job: UploadJob, file_id: str) -> UploadJob:
    _require(job, "record the uploaded file id", Stage.UPLOADING)
    return replace(job, stage=Stage.AWAITING_URL, file_id=file_id)


def url_obtained(job: UploadJob, signed_url: str) -> UploadJob:
    _require(job, "record the signed URL", Stage.AWAITING_URL)
    return replace(job, stage=Stage.OCR_RUNNING, signed_url=signed_url)


def ocr_completed(job: UploadJob, response: Mapping[str, object]) -> UploadJob:
    _require(job, "record OCR output", Stage.OCR_RUNNING)
    return replace(
        job,
        stage=Stage.OCR_READY,
        ocr_pages=page_texts(response),
        ocr_text=assemble_ocr_text(response),
        view_mode=ViewMode.OCR,
    )


def document_stored(job: UploadJob, stored: StoredDocument) -> UploadJob:
    """Persistence side-step after OCR; the stage does not change."""
    _require(job, "record the stored document", Stage.OCR_READY)
    return replace(
        job,
        stored_document=stored,
        preview_url=stored.public_url,
        status_message=f"File uploaded successfully! File name: {job.display_name}",
    )


def start_extraction(job: UploadJob) -> UploadJob:
    """Allowed once OCR text exists, including after a later stage failed."""
    _require(job, "request AI extraction", Stage.OCR_READY, Stage.ERRORED)
    if not job.ocr_text:
        raise MissingOcrTextError("No OCR text available to process")
    return replace(job, stage=Stage.AI_RUNNING, error=None, failed_stage=None)


def extraction_completed(job: UploadJob, record: PurchaseOrderRecord) -> UploadJob:
    _require(job, "record the extracted purchase order", Stage.AI_RUNNING)
    return replace(
        job,
        stage=Stage.REVIEWABLE,
        record=record,
        form_visible=True,
        view_mode=ViewMode.FORM,
    )


def review_confirmed(job: UploadJob, record: PurchaseOrderRecord) -> UploadJob:
    _require(job, "confirm the review", Stage.REVIEWABLE)
    return replace(
        job,
        stage=Stage.CONFIRMED,
        record=record,
        form_visible=False,
        status_message=CONFIRMED_MESSAGE,
    )


def review_cancelled(job: UploadJob) -> UploadJob:
    """Back to the raw OCR text; the extracted record is kept as it was."""
    _require(job, "cancel the review", Stage.REVIEWABLE)
    return replace(job, stage=Stage.OCR_READY, view_mode=ViewMode.OCR)


def review_reopened(job: UploadJob) -> UploadJob:
    _require(job, "reopen the review", Stage.OCR_READY)
    if job.record is None:
        raise InvalidTransitionError("No extracted purchase order to review")
    return replace(job, stage=Stage.REVIEWABLE, form_visible=True, view_mode=ViewMode.FORM)


def failed(job: UploadJob, message: str, during: Stage | None = None) -> UploadJob:
    """Move an in-flight job to Errored, keeping whatever earlier stages produced."""
    _require(job, "fail", *IN_FLIGHT)
    return replace(
        job,
        stage=Stage.ERRORED,
        error=message,
        failed_stage=during or job.stage,
    )
