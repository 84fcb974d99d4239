from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class LineItem:
    """One purchase-order line. Every field is optional; totals are not cross-checked."""

    item_number: str | None = None
    description: str | None = None
    quantity: float | None = None
    unit_price: float | None = None
    total_price: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "itemNumber": self.item_number,
            "description": self.description,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "totalPrice": self.total_price,
        }


@dataclass(frozen=True)
class PurchaseOrderRecord:
    """Structured purchase order. ``po_date`` is ``mm/dd/yyyy`` on the wire."""

    customer_name: str | None = None
    po_number: str | None = None
    po_date: str | None = None
    line_items: tuple[LineItem, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys used by the extraction endpoint."""
        return {
            "customerName": self.customer_name,
            "poNumber": self.po_number,
            "poDate": self.po_date,
            "lineItems": [item.to_dict() for item in self.line_items],
        }
