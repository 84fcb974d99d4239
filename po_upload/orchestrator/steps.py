from abc import ABC, abstractmethod
from typing import ClassVar

from po_upload.logging.logger import Log
from po_upload.orchestrator import transitions
from po_upload.orchestrator.exceptions import StageFailedError
from po_upload.orchestrator.models import Stage, UploadJob
from po_upload.orchestrator.proxy_client import ProxyClient
from po_upload.storage.document_store import DocumentStore


class PipelineStep(ABC):
    """One network-bound stage. Takes the job, returns the advanced job."""

    stage: ClassVar[Stage]

    def begin(self, job: UploadJob) -> UploadJob:
        """Enter this step's in-flight stage before any network call."""
        return job

    @abstractmethod
    def run(self, job: UploadJob) -> UploadJob:
        raise NotImplementedError


class UploadStep(PipelineStep):
    stage = Stage.UPLOADING

    def __init__(self, client: ProxyClient) -> None:
        self._client = client

    def begin(self, job: UploadJob) -> UploadJob:
        return transitions.start_upload(job)

    def run(self, job: UploadJob) -> UploadJob:
        if job.file is None:
            raise ValueError("UploadJob.file must be set before upload")
        descriptor = self._client.upload(job.file)
        file_id = descriptor.get("id")
        if not file_id:
            raise StageFailedError("Failed to upload file to Mistral: no file id returned")
        Log.info(f"Uploaded {job.display_name} as OCR file {file_id}")
        return transitions.upload_succeeded(job, str(file_id))


class SignedUrlStep(PipelineStep):
    stage = Stage.AWAITING_URL

    def __init__(self, client: ProxyClient, expiry_hours: int = 24) -> None:
        self._client = client
        self._expiry_hours = expiry_hours

    def run(self, job: UploadJob) -> UploadJob:
        if job.file_id is None:
            raise ValueError("UploadJob.file_id must be set before requesting a URL")
        body = self._client.file_url(job.file_id, self._expiry_hours)
        url = body.get("url")
        if not url:
            raise StageFailedError("Failed to get file URL from Mistral: no url returned")
        return transitions.url_obtained(job, str(url))


class OcrStep(PipelineStep):
    stage = Stage.OCR_RUNNING

    def __init__(self, client: ProxyClient) -> None:
        self._client = client

    def run(self, job: UploadJob) -> UploadJob:
        if job.signed_url is None:
            raise ValueError("UploadJob.signed_url must be set before OCR")
        job = transitions.ocr_completed(job, self._client.ocr(job.signed_url))
        Log.info(
            f"OCR for {job.display_name}: {len(job.ocr_pages)} pages, "
            f"{len(job.ocr_text)} chars"
        )
        return job


class PersistDocumentStep(PipelineStep):
    """Writes the original file to storage once OCR has succeeded."""

    stage = Stage.OCR_READY

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def run(self, job: UploadJob) -> UploadJob:
        if job.file is None:
            raise ValueError("UploadJob.file must be set before storing")
        stored = self._store.store(job.file.name, job.file.content, job.file.content_type)
        return transitions.document_stored(job, stored)


class ExtractStep(PipelineStep):
    stage = Stage.AI_RUNNING

    def __init__(self, client: ProxyClient) -> None:
        self._client = client

    def begin(self, job: UploadJob) -> UploadJob:
        return transitions.start_extraction(job)

    def run(self, job: UploadJob) -> UploadJob:
        record = self._client.extract_po(job.ocr_text)
        return transitions.extraction_completed(job, record)
