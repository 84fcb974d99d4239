from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import Protocol

from po_upload.extraction.models import PurchaseOrderRecord
from po_upload.logging.logger import Log
from po_upload.orchestrator import transitions
from po_upload.orchestrator.exceptions import (
    InvalidTransitionError,
    MissingOcrTextError,
    StageFailedError,
)
from po_upload.orchestrator.models import SelectedFile, Stage, UploadJob
from po_upload.orchestrator.proxy_client import ProxyClient
from po_upload.orchestrator.steps import (
    ExtractStep,
    OcrStep,
    PersistDocumentStep,
    PipelineStep,
    SignedUrlStep,
    UploadStep,
)
from po_upload.review.form import ReviewForm
from po_upload.storage.document_store import DocumentStore
from po_upload.storage.exceptions import StorageError
from po_upload.storage.models import StoredDocument


class ConfirmedRecordStore(Protocol):
    def save(self, record: PurchaseOrderRecord, document: StoredDocument | None) -> int: ...


class ExtractionOrchestrator:
    """Drives one upload job: select -> upload -> signed URL -> OCR -> store -> extract -> review.

    Stages run strictly one after another. The first failure moves the job to
    Errored and skips the remaining stages; nothing is retried.
    """

    def __init__(
        self,
        *,
        proxy_client: ProxyClient,
        document_store: DocumentStore,
        record_store: ConfirmedRecordStore | None = None,
        signed_url_expiry_hours: int = 24,
        on_change: Callable[[UploadJob], None] | None = None,
    ) -> None:
        self._submit_steps: list[PipelineStep] = [
            UploadStep(proxy_client),
            SignedUrlStep(proxy_client, signed_url_expiry_hours),
            OcrStep(proxy_client),
            PersistDocumentStep(document_store),
        ]
        self._extract_step = ExtractStep(proxy_client)
        self._record_store = record_store
        self._on_change = on_change
        self._job = UploadJob()
        self._form: ReviewForm | None = None

    @property
    def job(self) -> UploadJob:
        return self._job

    @property
    def form(self) -> ReviewForm | None:
        """The open review form, present only while the job is reviewable."""
        return self._form

    def select_file(self, file: SelectedFile) -> UploadJob:
        self._form = None
        return self._set(transitions.select_file(file))

    def submit(self) -> UploadJob:
        """Upload, fetch the signed URL, run OCR and store the original.

        An errored job with a file is resubmitted from a clean selection.
        """
        if self._job.stage is Stage.ERRORED and self._job.file is not None:
            self.select_file(self._job.file)
        return self._run(self._submit_steps)

    def request_extraction(self) -> UploadJob:
        try:
            job = self._run([self._extract_step])
        except MissingOcrTextError as exc:
            Log.warning(str(exc))
            return self._set(replace(self._job, error=str(exc)))
        if job.stage is Stage.REVIEWABLE and job.record is not None:
            self._form = ReviewForm(job.record)
        return job

    def confirm_review(self) -> UploadJob:
        """Replace the working record with the form's values and finish the job.

        Raises:
            InvalidTransitionError: if no review is open.
            InvalidDateError: if the edited PO date is not a real date.
        """
        if self._form is None:
            raise InvalidTransitionError("No review form is open")
        record = self._form.submit()
        job = self._set(transitions.review_confirmed(self._job, record))
        self._form = None
        Log.info(f"Confirmed PO {record.po_number!r} for {job.display_name}")
        if self._record_store is not None:
            row_id = self._record_store.save(record, job.stored_document)
            Log.info(f"Saved confirmed PO {record.po_number!r} as row {row_id}")
        return job

    def cancel_review(self) -> UploadJob:
        if self._form is None:
            raise InvalidTransitionError("No review form is open")
        self._form.cancel()
        job = self._set(transitions.review_cancelled(self._job))
        self._form = None
        return job

    def reopen_review(self) -> UploadJob:
        job = self._set(transitions.review_reopened(self._job))
        if job.record is not None:
            self._form = ReviewForm(job.record)
        return job

    def _run(self, steps: Sequence[PipelineStep]) -> UploadJob:
        for step in steps:
            self._set(step.begin(self._job))
            try:
                self._set(step.run(self._job))
            except (StageFailedError, StorageError) as exc:
                Log.error(f"{self._job.display_name}: {step.stage.value} failed: {exc}")
                return self._set(transitions.failed(self._job, str(exc), during=step.stage))
        return self._job

    def _set(self, job: UploadJob) -> UploadJob:
        if job is self._job:
            return job
        if job.stage is not self._job.stage:
            Log.info(f"{job.display_name or 'job'}: {self._job.stage.value} -> {job.stage.value}")
        self._job = job
        if self._on_change is not None:
            self._on_change(job)
        return job
