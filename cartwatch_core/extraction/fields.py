"""
Field Extractors - title, image and quantity

Each field follows the same tiered shape: ordered selectors scoped to the
product container, then a page-level fallback, then a sentinel. Every
selector attempt is isolated; an unsupported selector is skipped.
"""

import logging
import re
from typing import Iterator, Optional, Sequence, Tuple

from ..catalog import (
    IMAGE_PLACEHOLDER_MARKERS,
    IMAGE_SELECTORS,
    QUANTITY_SELECTORS,
    TITLE_SELECTORS,
)
from ..exceptions import SelectorUnsupportedError
from ..models import DEFAULT_QUANTITY, UNKNOWN_TITLE
from ..page.base import Document, Node, collapse_whitespace

logger = logging.getLogger(__name__)

TITLE_MIN_LENGTH = 6
TITLE_MAX_LENGTH = 299

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def _first_matches(container: Node, selectors: Sequence[str]) -> Iterator[Tuple[str, Node]]:
    """Yield (selector, first match) per selector, skipping unsupported ones."""
    for selector in selectors:
        try:
            element = container.select_one(selector)
        except SelectorUnsupportedError as e:
            logger.debug(f"Skipping selector: {e}")
            continue
        if element is not None:
            yield selector, element


# =============================================================================
# TITLE
# =============================================================================

def is_acceptable_title(title: str) -> bool:
    return TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH


def clean_page_title(title: str) -> str:
    """Drop trailing ``| Store`` / ``- Store`` segments from a document title."""
    return (title or "").split("|")[0].split("-")[0].strip()


def extract_title(container: Node, document: Document, selectors: Optional[Sequence[str]] = None) -> str:
    for selector, element in _first_matches(container, selectors or TITLE_SELECTORS):
        title = collapse_whitespace(element.text())
        if title and is_acceptable_title(title):
            logger.debug(f"Title from {selector!r}: {title[:60]}")
            return title

    og_title = (document.meta_content("og:title") or "").strip()
    if og_title:
        return og_title

    page_title = clean_page_title(document.title)
    return page_title if page_title else UNKNOWN_TITLE


# =============================================================================
# IMAGE
# =============================================================================

def is_placeholder_image(url: str) -> bool:
    lowered = url.lower()
    return any(marker in lowered for marker in IMAGE_PLACEHOLDER_MARKERS)


def image_url(element: Node, document: Document) -> Optional[str]:
    """Absolute http(s) URL of an <img>, or None."""
    src = element.attribute("src") or element.attribute("data-src")
    if not src or not src.strip():
        return None
    resolved = document.resolve_url(src.strip())
    if not resolved.startswith("http"):
        return None
    return resolved


def extract_image(container: Node, document: Document, selectors: Optional[Sequence[str]] = None) -> str:
    for selector, element in _first_matches(container, selectors or IMAGE_SELECTORS):
        url = image_url(element, document)
        if url and not is_placeholder_image(url):
            logger.debug(f"Image from {selector!r}: {url[:80]}")
            return url

    og_image = (document.meta_content("og:image") or "").strip()
    if og_image:
        return document.resolve_url(og_image)
    return ""


# =============================================================================
# QUANTITY
# =============================================================================

def parse_quantity(raw: Optional[str]) -> Optional[int]:
    """Leading integer of ``raw`` if it lies in (0, 1000)."""
    m = _LEADING_INT_RE.match(raw or "")
    if not m:
        return None
    quantity = int(m.group(1))
    if 0 < quantity < 1000:
        return quantity
    return None


def extract_quantity(container: Node, selectors: Optional[Sequence[str]] = None) -> int:
    for selector, element in _first_matches(container, selectors or QUANTITY_SELECTORS):
        raw = element.value or element.text()
        quantity = parse_quantity(raw)
        if quantity is not None:
            logger.debug(f"Quantity from {selector!r}: {quantity}")
            return quantity
    return DEFAULT_QUANTITY
