from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class PurchaseOrderRow:
    """Represents a row from the purchase_orders table."""

    id: int
    customer_name: str | None
    po_number: str | None
    po_date: str | None
    line_items: list[dict[str, Any]]
    storage_object_name: str | None = None
    storage_public_url: str | None = None
    created_at: datetime | None = None
