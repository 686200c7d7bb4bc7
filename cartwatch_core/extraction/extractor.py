"""
Product Extractor - build a ProductRecord around a clicked action element.
"""

import logging
from typing import Optional

from ..detection.container import locate_container
from ..models import UNKNOWN_TITLE, ProductRecord, generate_product_id, now_ms
from ..page.base import Document, Node
from .fields import extract_image, extract_quantity, extract_title
from .price import PriceResolver

logger = logging.getLogger(__name__)


def is_valid_product(record: Optional[ProductRecord]) -> bool:
    """A record without a real title means the classifier hit a non-product control."""
    if record is None:
        return False
    title = (record.title or "").strip()
    return bool(title) and title != UNKNOWN_TITLE


class ProductExtractor:
    """
    Extract product fields for one detection on ``document``.

    The returned record is raw; call ``sanitize()`` before handing it
    to storage.
    """

    def __init__(self, document: Document, price_resolver: Optional[PriceResolver] = None):
        self.document = document
        self.price_resolver = price_resolver or PriceResolver(document)

    def extract(self, clicked: Node, timestamp: Optional[int] = None) -> ProductRecord:
        stamp = timestamp if timestamp is not None else now_ms()
        store = self.document.host
        container = locate_container(clicked)

        record = ProductRecord(
            title=extract_title(container, self.document),
            price=self.price_resolver.resolve(container),
            image=extract_image(container, self.document),
            quantity=extract_quantity(container),
            url=self.document.url,
            store=store,
            timestamp=stamp,
            id=generate_product_id(store, stamp),
        )
        logger.debug(f"Extracted {record.title[:60]!r} / {record.price!r} from {container!r}")
        return record
