"""
Action Classifier - is this element an "add to cart" control?

Two independent strategies, OR-combined:
1. Structural: element matches any catalog selector
2. Lexical: text / aria-label / title contains a catalog keyword

Only the given element is inspected; walking up from a click target is
the caller's job (see ``find_action_element``).
"""

import logging
from typing import Iterable, Optional, Sequence

from ..catalog import ACTION_SELECTORS, all_keywords
from ..dedup import DEFAULT_SIGNATURE_TTL, SignatureCache
from ..exceptions import SelectorUnsupportedError
from ..page.base import Node

logger = logging.getLogger(__name__)

# Click target plus its ancestors checked by find_action_element
ACTION_SEARCH_DEPTH = 5


class ActionClassifier:
    """Decides whether an element represents an add-to-cart action."""

    def __init__(
        self,
        selectors: Optional[Sequence[str]] = None,
        keywords: Optional[Iterable[str]] = None,
        signature_ttl: float = DEFAULT_SIGNATURE_TTL,
    ):
        self.selectors = list(selectors) if selectors is not None else list(ACTION_SELECTORS)
        self.keywords = tuple(k.casefold() for k in keywords) if keywords is not None else all_keywords()
        self.recent_signatures = SignatureCache(ttl=signature_ttl)

    def matches_structure(self, element: Node) -> bool:
        for selector in self.selectors:
            try:
                if element.matches(selector):
                    return True
            except SelectorUnsupportedError as e:
                logger.debug(f"Skipping action selector: {e}")
        return False

    def matches_keywords(self, element: Node) -> bool:
        text = (element.text() or "").casefold()
        aria_label = (element.attribute("aria-label") or "").casefold()
        title = (element.attribute("title") or "").casefold()
        combined = f"{text} {aria_label} {title}"
        return any(keyword in combined for keyword in self.keywords)

    def is_action_element(self, element: Optional[Node]) -> bool:
        if element is None:
            return False
        return self.matches_structure(element) or self.matches_keywords(element)

    def find_action_element(self, target: Optional[Node], max_depth: int = ACTION_SEARCH_DEPTH) -> Optional[Node]:
        """The click target or the nearest of its ancestors that is an action element."""
        element = target
        for _ in range(max_depth):
            if element is None:
                return None
            if self.is_action_element(element):
                return element
            element = element.parent()
        return None

    def seen_recently(self, signature: str) -> bool:
        """True if the same product signature was added within the TTL."""
        return signature in self.recent_signatures

    def remember(self, signature: str) -> None:
        """Start the debounce window for a product that was just added."""
        self.recent_signatures.check_and_add(signature)
