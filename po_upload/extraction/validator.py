"""Shapes the model's parsed JSON into a PurchaseOrderRecord.

Building is lenient: the form downstream is where a person corrects values,
so missing or odd fields become ``None`` rather than failing the request.
Only a payload that is structurally unusable is rejected.
"""

from typing import Any

from po_upload.extraction.exceptions import ExtractionValidationError
from po_upload.extraction.models import LineItem, PurchaseOrderRecord

_CURRENCY_CHARS = str.maketrans("", "", "$€£, ")


def validate_and_build(data: dict[str, Any]) -> PurchaseOrderRecord:
    """Build a PurchaseOrderRecord from the parsed model output.

    Raises:
        ExtractionValidationError: if ``data`` is not an object or
            ``lineItems`` is present but not a list.
    """
    if not isinstance(data, dict):
        raise ExtractionValidationError("Purchase order must be a JSON object")
    return PurchaseOrderRecord(
        customer_name=_text(data.get("customerName")),
        po_number=_text(data.get("poNumber")),
        po_date=_text(data.get("poDate")),
        line_items=_build_line_items(data.get("lineItems")),
    )


def _build_line_items(raw: Any) -> tuple[LineItem, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ExtractionValidationError("'lineItems' must be a list")
    items: list[LineItem] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ExtractionValidationError(f"lineItems[{i}] must be an object")
        items.append(
            LineItem(
                item_number=_text(item.get("itemNumber")),
                description=_text(item.get("description")),
                quantity=to_number(item.get("quantity")),
                unit_price=to_number(item.get("unitPrice")),
                total_price=to_number(item.get("totalPrice")),
            )
        )
    return tuple(items)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def to_number(value: Any) -> float | None:
    """Coerce a model-provided number; ``"$1,250.00"`` becomes ``1250.0``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        cleaned = value.translate(_CURRENCY_CHARS)
        if not cleaned:
            return None
        try:
            return float(cleaned)
        except ValueError:
            return None
    return None
