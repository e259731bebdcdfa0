"""Tag list extraction from track page HTML using lxml XPath."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from lxml import etree, html as lxml_html

logger = logging.getLogger(__name__)

DEFAULT_TAGS_XPATH = '//*[@id="mantle_skin"]/div[4]/div/div[1]/section[1]/ul/li'


@dataclass(slots=True)
class ExtractionResult:
    """Result of tag extraction from one page."""

    tags: list[str] = field(default_factory=list)
    is_success: bool = True
    error: str | None = None


def extract_tags(
    page_html: str,
    *,
    xpath: str = DEFAULT_TAGS_XPATH,
    url: str | None = None,
) -> ExtractionResult:
    """Return the text of every node matched by ``xpath``, in document order.

    A page without matching nodes is a success with no tags.
    """

    if not page_html or not page_html.strip():
        return ExtractionResult(is_success=False, error="empty HTML input")

    try:
        document = lxml_html.fromstring(page_html)
        nodes = document.xpath(xpath)
    except (etree.ParserError, etree.XPathError, ValueError) as exc:
        logger.debug("Tag extraction failed for %s: %s", url or "<unknown>", exc)
        return ExtractionResult(is_success=False, error=f"extraction failed: {exc}")

    if not isinstance(nodes, list):
        nodes = [nodes]

    tags: list[str] = []
    for node in nodes:
        text = node.text_content() if hasattr(node, "text_content") else str(node)
        text = " ".join(text.split())
        if text:
            tags.append(text)
    return ExtractionResult(tags=tags)
