from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from po_upload.database.connection import get_connection
from po_upload.database.models import PurchaseOrderRow
from po_upload.extraction.models import PurchaseOrderRecord
from po_upload.storage.models import StoredDocument


class PurchaseOrderRepository:
    """Database operations for the purchase_orders table."""

    def save(self, record: PurchaseOrderRecord, document: StoredDocument | None) -> int:
        """Insert a confirmed record and return its row ID.

        Line items are stored as JSONB using the camelCase wire keys.
        """
        payload = record.to_dict()
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO purchase_orders
                    (customer_name, po_number, po_date, line_items,
                     storage_object_name, storage_public_url)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    RETURNING id
                    """,
                    (
                        record.customer_name,
                        record.po_number,
                        record.po_date,
                        Jsonb(payload["lineItems"]),
                        document.name if document else None,
                        document.public_url if document else None,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError("INSERT INTO purchase_orders returned no id")
        return int(row[0])

    def find_by_id(self, row_id: int) -> PurchaseOrderRow | None:
        """Find a stored purchase order by ID. Useful for tests."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, customer_name, po_number, po_date, line_items,
                           storage_object_name, storage_public_url, created_at
                    FROM purchase_orders
                    WHERE id = %s
                    """,
                    (row_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return PurchaseOrderRow(
            id=row["id"],
            customer_name=row["customer_name"],
            po_number=row["po_number"],
            po_date=row["po_date"],
            line_items=row["line_items"],
            storage_object_name=row["storage_object_name"],
            storage_public_url=row["storage_public_url"],
            created_at=row["created_at"],
        )
