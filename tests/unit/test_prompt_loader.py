"""Tests for prompt template and JSON schema loading."""

import json
from pathlib import Path

import pytest

from po_upload.extraction.exceptions import ExtractionError
from po_upload.extraction.prompt_loader import (
    load_json_schema,
    load_prompt_template,
    load_system_prompt,
)


class TestLoadPromptTemplate:
    def test_loads_default_template(self) -> None:
        template = load_prompt_template()
        assert "{extracted_text}" in template
        assert "mm/dd/yyyy" in template

    def test_default_template_formats_with_text_only(self) -> None:
        prompt = load_prompt_template().format(extracted_text="Acme Corp")
        assert prompt.rstrip().endswith("Acme Corp")

    def test_loads_custom_template(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom.txt"
        custom.write_text("Hello {extracted_text}")
        assert load_prompt_template(custom) == "Hello {extracted_text}"

    def test_missing_file_raises_error(self) -> None:
        with pytest.raises(ExtractionError, match="Failed to load prompt template"):
            load_prompt_template(Path("/nonexistent/file.txt"))


class TestLoadSystemPrompt:
    def test_loads_default_and_strips(self) -> None:
        prompt = load_system_prompt()
        assert prompt == prompt.strip()
        assert "purchase order" in prompt

    def test_missing_file_raises_error(self) -> None:
        with pytest.raises(ExtractionError, match="Failed to load system prompt"):
            load_system_prompt(Path("/nonexistent/system.txt"))


class TestLoadJsonSchema:
    def test_loads_default_schema(self) -> None:
        schema = json.loads(load_json_schema())
        assert schema["required"] == ["customerName", "poNumber", "poDate", "lineItems"]
        assert schema["additionalProperties"] is False

    def test_loads_custom_schema(self, tmp_path: Path) -> None:
        custom = tmp_path / "schema.json"
        custom.write_text('{"type": "object"}')
        assert load_json_schema(custom) == '{"type": "object"}'

    def test_missing_file_raises_error(self) -> None:
        with pytest.raises(ExtractionError, match="Failed to load JSON schema"):
            load_json_schema(Path("/nonexistent/schema.json"))
