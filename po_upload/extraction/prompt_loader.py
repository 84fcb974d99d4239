from pathlib import Path

from po_upload.extraction.exceptions import ExtractionError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def _read(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ExtractionError(f"Failed to load {what}: {exc}") from exc


def load_prompt_template(path: Path | None = None) -> str:
    """Load the user prompt template.

    The template must contain an ``{extracted_text}`` placeholder.
    Defaults to the bundled extraction_prompt.txt.

    Raises:
        ExtractionError: if the file cannot be read.
    """
    return _read(path or _DEFAULT_PROMPT_DIR / "extraction_prompt.txt", "prompt template")


def load_system_prompt(path: Path | None = None) -> str:
    """Load the system prompt (used verbatim, no placeholders)."""
    text = _read(path or _DEFAULT_PROMPT_DIR / "system_prompt.txt", "system prompt")
    return text.strip()


def load_json_schema(path: Path | None = None) -> str:
    """Load the purchase-order JSON schema.

    Raises:
        ExtractionError: if the file cannot be read.
    """
    return _read(path or _DEFAULT_PROMPT_DIR / "purchase_order_schema.json", "JSON schema")
