from unittest.mock import MagicMock

import pytest

from po_upload.storage.document_store import (
    BUCKET_MISSING_MESSAGE,
    UPLOAD_POLICY_MESSAGE,
    DocumentStore,
    object_name,
)
from po_upload.storage.exceptions import StorageConfigurationError, StorageError


def _storage_client() -> MagicMock:
    client = MagicMock()
    client.bucket = "purchase-orders"
    client.list_objects.return_value = []
    client.public_url.side_effect = lambda name: f"https://public/{name}"
    return client


class TestObjectName:
    def test_prefixes_epoch_millis(self) -> None:
        assert object_name("po.pdf", 1700000000123) == "1700000000123-po.pdf"


class TestStore:
    def test_uploads_with_timestamped_name(self) -> None:
        client = _storage_client()
        store = DocumentStore(client, cache_control="3600", clock=lambda: 1700000000.5)

        stored = store.store("po.pdf", b"%PDF", "application/pdf")

        assert stored.name == "1700000000500-po.pdf"
        assert stored.bucket == "purchase-orders"
        assert stored.public_url == "https://public/1700000000500-po.pdf"
        client.upload.assert_called_once_with(
            "1700000000500-po.pdf", b"%PDF", "application/pdf", cache_control="3600", upsert=False
        )

    def test_same_file_twice_creates_two_objects(self) -> None:
        client = _storage_client()
        ticks = iter([1.0, 2.0])
        store = DocumentStore(client, clock=lambda: next(ticks))

        first = store.store("po.pdf", b"x", "application/pdf")
        second = store.store("po.pdf", b"x", "application/pdf")

        assert first.name != second.name

    def test_missing_bucket_is_explained(self) -> None:
        client = _storage_client()
        client.list_objects.side_effect = StorageError("Bucket not found")

        with pytest.raises(StorageConfigurationError) as exc_info:
            DocumentStore(client).store("po.pdf", b"x", "application/pdf")

        assert str(exc_info.value) == BUCKET_MISSING_MESSAGE.format(bucket="purchase-orders")
        client.upload.assert_not_called()

    def test_list_policy_is_explained(self) -> None:
        client = _storage_client()
        client.list_objects.side_effect = StorageError("violates row-level security policy")

        with pytest.raises(StorageConfigurationError, match="RLS enabled but no policies"):
            DocumentStore(client).store("po.pdf", b"x", "application/pdf")

    def test_other_probe_errors_do_not_block_upload(self) -> None:
        client = _storage_client()
        client.list_objects.side_effect = StorageError("temporarily unavailable")

        stored = DocumentStore(client).store("po.pdf", b"x", "application/pdf")

        assert stored.bucket == "purchase-orders"
        client.upload.assert_called_once()

    def test_upload_policy_is_explained(self) -> None:
        client = _storage_client()
        client.upload.side_effect = StorageError("new row violates row-level security policy")

        with pytest.raises(StorageConfigurationError) as exc_info:
            DocumentStore(client).store("po.pdf", b"x", "application/pdf")

        assert str(exc_info.value) == UPLOAD_POLICY_MESSAGE.format(bucket="purchase-orders")

    def test_other_upload_errors_propagate(self) -> None:
        client = _storage_client()
        client.upload.side_effect = StorageError("The resource already exists")

        with pytest.raises(StorageError, match="already exists") as exc_info:
            DocumentStore(client).store("po.pdf", b"x", "application/pdf")

        assert not isinstance(exc_info.value, StorageConfigurationError)
