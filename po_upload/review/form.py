"""Editable draft of an extracted purchase order.

The form keeps ``po_date`` in the ``yyyy-mm-dd`` form used by date inputs and
converts to and from the canonical ``mm/dd/yyyy`` only at its boundary.
"""

import re
from dataclasses import replace
from datetime import date

from po_upload.extraction.models import LineItem, PurchaseOrderRecord
from po_upload.extraction.validator import to_number

_INPUT_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_CANONICAL_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

HEADER_FIELDS = ("customer_name", "po_number", "po_date")
LINE_ITEM_FIELDS = ("item_number", "description", "quantity", "unit_price", "total_price")
_NUMERIC_FIELDS = frozenset({"quantity", "unit_price", "total_price"})


class InvalidDateError(ValueError):
    """Raised when a ``yyyy-mm-dd`` value is not a real calendar date."""


def to_input_date(value: str | None) -> str | None:
    """``01/15/2024`` -> ``2024-01-15``; anything not shaped ``m/d/yyyy`` passes through."""
    if not value:
        return value
    match = _CANONICAL_DATE.match(value)
    if match is None:
        return value
    month, day, year = match.groups()
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def from_input_date(value: str | None) -> str | None:
    """``2024-01-15`` -> ``01/15/2024``; other values pass through unchanged.

    Raises:
        InvalidDateError: if the value looks like ``yyyy-mm-dd`` but is not a date.
    """
    if not value:
        return value
    match = _INPUT_DATE.match(value)
    if match is None:
        return value
    year, month, day = (int(part) for part in match.groups())
    try:
        parsed = date(year, month, day)
    except ValueError as exc:
        raise InvalidDateError(f"Invalid PO date: {value}") from exc
    return parsed.strftime("%m/%d/%Y")


class ReviewForm:
    """Holds edits to a purchase order until they are confirmed or discarded."""

    def __init__(self, initial: PurchaseOrderRecord) -> None:
        self._initial = initial
        self.customer_name = initial.customer_name
        self.po_number = initial.po_number
        self.po_date = to_input_date(initial.po_date)
        self.line_items: list[LineItem] = list(initial.line_items)

    @property
    def initial(self) -> PurchaseOrderRecord:
        return self._initial

    def set_field(self, name: str, value: str) -> None:
        if name not in HEADER_FIELDS:
            raise KeyError(f"Unknown field '{name}'. Choose from: {list(HEADER_FIELDS)}")
        setattr(self, name, value)

    def add_line_item(self) -> int:
        """Append an empty line item and return its index."""
        self.line_items.append(LineItem())
        return len(self.line_items) - 1

    def remove_line_item(self, index: int) -> None:
        del self.line_items[index]

    def update_line_item(self, index: int, field: str, value: object) -> None:
        """Set one line-item field. Numeric fields fall back to 0 when unparseable."""
        if field not in LINE_ITEM_FIELDS:
            raise KeyError(f"Unknown line item field '{field}'. Choose from: {list(LINE_ITEM_FIELDS)}")
        if field in _NUMERIC_FIELDS:
            value = to_number(value) or 0
        self.line_items[index] = replace(self.line_items[index], **{field: value})

    def submit(self) -> PurchaseOrderRecord:
        """Return the edited record with the date back in ``mm/dd/yyyy``."""
        return PurchaseOrderRecord(
            customer_name=self.customer_name,
            po_number=self.po_number,
            po_date=from_input_date(self.po_date),
            line_items=tuple(self.line_items),
        )

    def cancel(self) -> None:
        """Discard edits; the initial record is left as it was."""
        self.customer_name = self._initial.customer_name
        self.po_number = self._initial.po_number
        self.po_date = to_input_date(self._initial.po_date)
        self.line_items = list(self._initial.line_items)
