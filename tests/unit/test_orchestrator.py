from unittest.mock import MagicMock

import pytest

from po_upload.extraction.models import PurchaseOrderRecord
from po_upload.orchestrator.exceptions import InvalidTransitionError, StageFailedError
from po_upload.orchestrator.models import SelectedFile, Stage, UploadJob, ViewMode
from po_upload.orchestrator.orchestrator import ExtractionOrchestrator
from po_upload.storage.exceptions import StorageConfigurationError
from po_upload.storage.models import StoredDocument

STORED = StoredDocument(
    name="1700000000000-po.pdf",
    bucket="purchase-orders",
    public_url="https://example.supabase.co/storage/v1/object/public/purchase-orders/1700000000000-po.pdf",
)


def _file(name: str = "po.pdf") -> SelectedFile:
    return SelectedFile(name=name, content=b"%PDF-1.4", content_type="application/pdf")


def _proxy_client(record: PurchaseOrderRecord) -> MagicMock:
    client = MagicMock()
    client.upload.return_value = {"id": "file-1"}
    client.file_url.return_value = {"url": "https://signed.example/file-1"}
    client.ocr.return_value = {"pages": [{"markdown": "Page1"}, {"markdown": "Page2"}]}
    client.extract_po.return_value = record
    return client


def _orchestrator(
    client: MagicMock,
    store: MagicMock | None = None,
    record_store: MagicMock | None = None,
    on_change=None,
) -> ExtractionOrchestrator:
    if store is None:
        store = MagicMock()
        store.store.return_value = STORED
    return ExtractionOrchestrator(
        proxy_client=client,
        document_store=store,
        record_store=record_store,
        on_change=on_change,
    )


class TestSubmit:
    def test_runs_stages_in_order(self, acme_record: PurchaseOrderRecord) -> None:
        client = _proxy_client(acme_record)
        stages: list[Stage] = []
        orchestrator = _orchestrator(client, on_change=lambda job: stages.append(job.stage))

        orchestrator.select_file(_file())
        job = orchestrator.submit()

        assert job.stage is Stage.OCR_READY
        assert job.ocr_text == "Page1\n<<<>>>\nPage2"
        assert job.stored_document == STORED
        assert job.preview_url == STORED.public_url
        assert job.status_message == "File uploaded successfully! File name: po.pdf"
        assert stages[:5] == [
            Stage.SELECTED,
            Stage.UPLOADING,
            Stage.AWAITING_URL,
            Stage.OCR_RUNNING,
            Stage.OCR_READY,
        ]
        client.file_url.assert_called_once_with("file-1", 24)
        client.ocr.assert_called_once_with("https://signed.example/file-1")

    def test_first_failure_skips_remaining_stages(
        self, acme_record: PurchaseOrderRecord
    ) -> None:
        client = _proxy_client(acme_record)
        client.file_url.side_effect = StageFailedError(
            "Failed to get file URL from Mistral: expired", status_code=404
        )
        store = MagicMock()
        orchestrator = _orchestrator(client, store=store)

        orchestrator.select_file(_file())
        job = orchestrator.submit()

        assert job.stage is Stage.ERRORED
        assert job.failed_stage is Stage.AWAITING_URL
        assert job.error == "Failed to get file URL from Mistral: expired"
        client.ocr.assert_not_called()
        store.store.assert_not_called()

    def test_missing_file_id_fails_upload(self, acme_record: PurchaseOrderRecord) -> None:
        client = _proxy_client(acme_record)
        client.upload.return_value = {}
        orchestrator = _orchestrator(client)

        orchestrator.select_file(_file())
        job = orchestrator.submit()

        assert job.stage is Stage.ERRORED
        assert job.failed_stage is Stage.UPLOADING
        client.file_url.assert_not_called()

    def test_storage_failure_keeps_ocr_text(self, acme_record: PurchaseOrderRecord) -> None:
        client = _proxy_client(acme_record)
        store = MagicMock()
        store.store.side_effect = StorageConfigurationError('Storage bucket "purchase-orders" not found.')
        orchestrator = _orchestrator(client, store=store)

        orchestrator.select_file(_file())
        job = orchestrator.submit()

        assert job.stage is Stage.ERRORED
        assert job.failed_stage is Stage.OCR_READY
        assert "not found" in (job.error or "")
        assert job.ocr_text == "Page1\n<<<>>>\nPage2"

    def test_resubmit_after_error_starts_clean(self, acme_record: PurchaseOrderRecord) -> None:
        client = _proxy_client(acme_record)
        client.upload.side_effect = [StageFailedError("Failed to upload file to Mistral"), {"id": "file-2"}]
        orchestrator = _orchestrator(client)

        orchestrator.select_file(_file())
        assert orchestrator.submit().stage is Stage.ERRORED
        job = orchestrator.submit()

        assert job.stage is Stage.OCR_READY
        assert job.file_id == "file-2"
        assert job.error is None

    def test_submit_without_file_is_rejected(self, acme_record: PurchaseOrderRecord) -> None:
        orchestrator = _orchestrator(_proxy_client(acme_record))
        with pytest.raises(InvalidTransitionError):
            orchestrator.submit()


class TestSelectFile:
    def test_new_file_resets_state_before_any_call(
        self, acme_record: PurchaseOrderRecord
    ) -> None:
        client = _proxy_client(acme_record)
        orchestrator = _orchestrator(client)
        orchestrator.select_file(_file())
        orchestrator.submit()
        orchestrator.request_extraction()
        assert orchestrator.form is not None
        calls_before = client.upload.call_count

        job = orchestrator.select_file(_file("second.pdf"))

        assert job == UploadJob(
            stage=Stage.SELECTED,
            file=_file("second.pdf"),
            display_name="second.pdf",
            status_message="File selected: second.pdf",
        )
        assert orchestrator.form is None
        assert client.upload.call_count == calls_before


class TestRequestExtraction:
    def test_opens_review_form(self, acme_record: PurchaseOrderRecord) -> None:
        client = _proxy_client(acme_record)
        orchestrator = _orchestrator(client)
        orchestrator.select_file(_file())
        orchestrator.submit()

        job = orchestrator.request_extraction()

        assert job.stage is Stage.REVIEWABLE
        assert job.view_mode is ViewMode.FORM
        assert orchestrator.form is not None
        assert orchestrator.form.po_date == "2024-03-05"
        client.extract_po.assert_called_once_with("Page1\n<<<>>>\nPage2")

    def test_without_ocr_text_sets_error_and_keeps_stage(
        self, acme_record: PurchaseOrderRecord
    ) -> None:
        client = _proxy_client(acme_record)
        client.ocr.return_value = {"pages": []}
        orchestrator = _orchestrator(client)
        orchestrator.select_file(_file())
        orchestrator.submit()

        job = orchestrator.request_extraction()

        assert job.stage is Stage.OCR_READY
        assert job.error == "No OCR text available to process"
        client.extract_po.assert_not_called()

    def test_failure_then_retry(self, acme_record: PurchaseOrderRecord) -> None:
        client = _proxy_client(acme_record)
        client.extract_po.side_effect = [
            StageFailedError("Failed to process with AI: Internal server error", status_code=500),
            acme_record,
        ]
        orchestrator = _orchestrator(client)
        orchestrator.select_file(_file())
        orchestrator.submit()

        failed = orchestrator.request_extraction()
        assert failed.stage is Stage.ERRORED
        assert failed.failed_stage is Stage.AI_RUNNING
        assert orchestrator.form is None

        job = orchestrator.request_extraction()
        assert job.stage is Stage.REVIEWABLE


class TestReview:
    def _reviewable(self, record: PurchaseOrderRecord, **kwargs) -> ExtractionOrchestrator:
        orchestrator = _orchestrator(_proxy_client(record), **kwargs)
        orchestrator.select_file(_file())
        orchestrator.submit()
        orchestrator.request_extraction()
        return orchestrator

    def test_edit_quantity_and_confirm(self, acme_record: PurchaseOrderRecord) -> None:
        orchestrator = self._reviewable(acme_record)
        assert orchestrator.form is not None
        orchestrator.form.update_line_item(0, "quantity", "3")

        job = orchestrator.confirm_review()

        assert job.stage is Stage.CONFIRMED
        assert job.record is not None
        data = job.record.to_dict()
        assert data["lineItems"][0]["quantity"] == 3
        assert data["lineItems"][0]["unitPrice"] == 5.0
        assert data["poNumber"] == "1001"
        assert data["poDate"] == "03/05/2024"
        assert orchestrator.form is None

    def test_confirm_saves_when_record_store_configured(
        self, acme_record: PurchaseOrderRecord
    ) -> None:
        record_store = MagicMock()
        record_store.save.return_value = 7
        orchestrator = self._reviewable(acme_record, record_store=record_store)

        orchestrator.confirm_review()

        record_store.save.assert_called_once_with(acme_record, STORED)

    def test_cancel_keeps_record_and_shows_ocr(self, acme_record: PurchaseOrderRecord) -> None:
        orchestrator = self._reviewable(acme_record)
        assert orchestrator.form is not None
        orchestrator.form.set_field("customer_name", "Changed")

        job = orchestrator.cancel_review()

        assert job.stage is Stage.OCR_READY
        assert job.view_mode is ViewMode.OCR
        assert job.record == acme_record
        assert orchestrator.form is None

    def test_reopen_after_cancel_starts_from_record(
        self, acme_record: PurchaseOrderRecord
    ) -> None:
        orchestrator = self._reviewable(acme_record)
        orchestrator.cancel_review()

        job = orchestrator.reopen_review()

        assert job.stage is Stage.REVIEWABLE
        assert orchestrator.form is not None
        assert orchestrator.form.customer_name == "Acme Corp"

    def test_confirm_without_form_raises(self, acme_record: PurchaseOrderRecord) -> None:
        orchestrator = _orchestrator(_proxy_client(acme_record))
        with pytest.raises(InvalidTransitionError, match="No review form is open"):
            orchestrator.confirm_review()
