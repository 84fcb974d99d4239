from abc import ABC, abstractmethod

from po_upload.extraction.models import PurchaseOrderRecord


class BasePurchaseOrderExtractor(ABC):
    """Contract for all purchase-order extraction adapters."""

    @abstractmethod
    def extract(self, text: str) -> PurchaseOrderRecord:
        """Structure OCR text into a purchase order.

        Args:
            text: The assembled OCR text, passed whole.

        Returns:
            PurchaseOrderRecord with header fields and line items.

        Raises:
            ExtractionError: on any failure.
        """
