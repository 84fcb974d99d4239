from collections.abc import Mapping

PAGE_SEPARATOR = "\n<<<>>>\n"


def page_texts(response: Mapping[str, object]) -> tuple[str, ...]:
    """Per-page OCR text in page order.

    A flattened ``markdown`` field counts as a single page.
    """
    markdown = response.get("markdown")
    if isinstance(markdown, str) and markdown:
        return (markdown,)
    pages = response.get("pages")
    if isinstance(pages, list):
        return tuple(
            (page.get("markdown") or "") if isinstance(page, Mapping) else ""
            for page in pages
        )
    return ()


def assemble_ocr_text(response: Mapping[str, object]) -> str:
    """Text sent to extraction: the flattened field verbatim, else pages joined by PAGE_SEPARATOR."""
    markdown = response.get("markdown")
    if isinstance(markdown, str) and markdown:
        return markdown
    return PAGE_SEPARATOR.join(page_texts(response))
