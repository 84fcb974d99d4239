"""Offline extraction client.

Returns a fixed purchase order so the whole upload flow can be exercised
without an AI provider account. Select it with ``EXTRACTION_PROVIDER=example``.
"""

import json
from typing import ClassVar

from po_upload.extraction.client_base import BaseExtractionClient


class ExampleClientAdapter(BaseExtractionClient):
    """Adapter that ignores its input and answers with a fixed purchase order."""

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "customerName": "Example Customer",
        "poNumber": "PO-0001",
        "poDate": "01/15/2024",
        "lineItems": [
            {
                "itemNumber": "1",
                "description": "Sample item",
                "quantity": 1,
                "unitPrice": 10.0,
                "totalPrice": 10.0,
            }
        ],
    }

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object],
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt, json_schema
        return json.dumps(self.DEFAULT_RESPONSE)
