import io
from pathlib import Path

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from po_upload.extraction.models import LineItem, PurchaseOrderRecord


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a one-page purchase order PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Acme Corp")
    c.drawString(72, 700, "PO# 1001")
    c.drawString(72, 680, "Date: 03/05/2024")
    c.drawString(72, 640, "Widget  qty 2 @ $5.00")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page1")
    c.showPage()
    c.drawString(72, 720, "Page2")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_path(tmp_path: Path, sample_pdf_bytes: bytes) -> Path:
    path = tmp_path / "po.pdf"
    path.write_bytes(sample_pdf_bytes)
    return path


@pytest.fixture()
def acme_record() -> PurchaseOrderRecord:
    return PurchaseOrderRecord(
        customer_name="Acme Corp",
        po_number="1001",
        po_date="03/05/2024",
        line_items=(
            LineItem(
                item_number="1",
                description="Widget",
                quantity=2,
                unit_price=5.0,
                total_price=10.0,
            ),
        ),
    )


@pytest.fixture()
def acme_payload() -> dict:
    return {
        "customerName": "Acme Corp",
        "poNumber": "1001",
        "poDate": "03/05/2024",
        "lineItems": [
            {
                "itemNumber": "1",
                "description": "Widget",
                "quantity": 2,
                "unitPrice": 5.0,
                "totalPrice": 10.0,
            }
        ],
    }
