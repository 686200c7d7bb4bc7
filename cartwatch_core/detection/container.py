"""
Container Locator - find the ancestor subtree that represents "the product".
"""

import logging
from typing import Optional, Sequence

from ..catalog import CONTAINER_KEYWORDS, CONTAINER_MAX_DEPTH
from ..page.base import Node

logger = logging.getLogger(__name__)


def is_product_container(element: Node, keywords: Optional[Sequence[str]] = None) -> bool:
    keywords = CONTAINER_KEYWORDS if keywords is None else keywords
    class_name = element.class_name.lower()
    element_id = element.element_id.lower()
    return any(k in class_name or k in element_id for k in keywords)


def locate_container(clicked: Node, max_depth: int = CONTAINER_MAX_DEPTH) -> Node:
    """
    Walk up from the clicked element, at most ``max_depth`` levels.

    Stops at the first ancestor whose class or id carries a container
    keyword; otherwise returns the highest ancestor reached. Never fails:
    an element without parent is its own container.
    """
    container = clicked
    for depth in range(max_depth):
        parent = container.parent()
        if parent is None:
            break
        container = parent
        if is_product_container(container):
            logger.debug(f"Container found at depth {depth + 1}: {container!r}")
            return container
    logger.debug(f"No keyword container, using {container!r}")
    return container
