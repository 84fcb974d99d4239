from po_upload.extraction.base import BasePurchaseOrderExtractor
from po_upload.extraction.extractor import PurchaseOrderExtractor
from po_upload.extraction.factory import ExtractorFactory
from po_upload.extraction.models import LineItem, PurchaseOrderRecord

__all__ = [
    "BasePurchaseOrderExtractor",
    "ExtractorFactory",
    "LineItem",
    "PurchaseOrderExtractor",
    "PurchaseOrderRecord",
]
