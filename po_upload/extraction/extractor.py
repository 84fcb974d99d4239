"""AI-backed purchase-order extractor."""

import json
from pathlib import Path

from po_upload.extraction.base import BasePurchaseOrderExtractor
from po_upload.extraction.client_base import BaseExtractionClient
from po_upload.extraction.exceptions import ExtractionError
from po_upload.extraction.models import PurchaseOrderRecord
from po_upload.extraction.prompt_loader import (
    load_json_schema,
    load_prompt_template,
    load_system_prompt,
)
from po_upload.extraction.validator import validate_and_build
from po_upload.logging.logger import Log


class PurchaseOrderExtractor(BasePurchaseOrderExtractor):
    """Turns assembled OCR text into a PurchaseOrderRecord using an AI provider."""

    def __init__(
        self,
        *,
        client: BaseExtractionClient,
        model: str,
        temperature: float = 0.1,
        prompt_template_path: Path | None = None,
        system_prompt_path: Path | None = None,
        json_schema_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._prompt_template = load_prompt_template(prompt_template_path)
        self._system_prompt = load_system_prompt(system_prompt_path)
        self._json_schema = json.loads(load_json_schema(json_schema_path))

    def extract(self, text: str) -> PurchaseOrderRecord:
        prompt = self._prompt_template.format(extracted_text=text)
        Log.debug(f"Extraction prompt ({len(text)} chars of OCR text)")

        raw_response = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._system_prompt,
            user_prompt=prompt,
            json_schema=self._json_schema,
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        record = validate_and_build(self._parse_json(raw_response))
        Log.info(
            f"Extraction complete: PO {record.po_number!r}, "
            f"{len(record.line_items)} line items"
        )
        return record

    @staticmethod
    def _parse_json(raw: str) -> dict[str, object]:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ExtractionError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise ExtractionError("JSON response must be an object")
        return parsed
