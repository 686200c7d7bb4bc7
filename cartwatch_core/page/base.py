"""
Page Tree - Abstract navigable tree used by the detection engine

The engine never touches a concrete DOM. Anything that can answer the
questions below (a parsed HTML snapshot, a live browser page, a test
fixture) can be fed to the classifier and the extractors.

Selector support differs between implementations: a node that cannot
evaluate a selector raises SelectorUnsupportedError and the caller skips
that selector.
"""

import re
from abc import ABC, abstractmethod
from typing import Dict, Iterator, List, Optional

_WS_RE = re.compile(r"\s+")


def collapse_whitespace(text: Optional[str]) -> str:
    """Trim and collapse runs of whitespace to single spaces."""
    return _WS_RE.sub(" ", text or "").strip()


class Node(ABC):
    """A single element of the page tree."""

    @property
    @abstractmethod
    def tag(self) -> str:
        """Lowercase tag name."""

    @abstractmethod
    def matches(self, selector: str) -> bool:
        """True if this element matches the CSS selector."""

    @abstractmethod
    def attribute(self, name: str) -> Optional[str]:
        """Attribute value, or None when absent."""

    @abstractmethod
    def text(self) -> str:
        """Concatenated text of the element and its descendants."""

    @abstractmethod
    def children(self) -> List['Node']:
        """Direct element children in document order."""

    @abstractmethod
    def parent(self) -> Optional['Node']:
        """Parent element, or None at the root."""

    @abstractmethod
    def computed_style(self) -> Dict[str, str]:
        """Resolved style properties (at least font-size, font-weight, display, visibility)."""

    # ------------------------------------------------------------------
    # Derived helpers
    # ------------------------------------------------------------------

    @property
    def class_name(self) -> str:
        return self.attribute("class") or ""

    @property
    def element_id(self) -> str:
        return self.attribute("id") or ""

    @property
    def value(self) -> Optional[str]:
        """Current value of a form control."""
        return self.attribute("value")

    def ancestors(self) -> Iterator['Node']:
        node = self.parent()
        while node is not None:
            yield node
            node = node.parent()

    def descendants(self) -> Iterator['Node']:
        for child in self.children():
            yield child
            yield from child.descendants()

    def is_visible(self) -> bool:
        for node in [self, *self.ancestors()]:
            if node.attribute("hidden") is not None:
                return False
        style = self.computed_style()
        if style.get("display") == "none" or style.get("visibility") == "hidden":
            return False
        return True

    def select(self, selector: str) -> List['Node']:
        """All descendants matching the selector, in document order."""
        return [node for node in self.descendants() if node.matches(selector)]

    def select_one(self, selector: str) -> Optional['Node']:
        for node in self.descendants():
            if node.matches(selector):
                return node
        return None


class Document(ABC):
    """Page-level view: URL, title, meta tags and structured data."""

    @property
    @abstractmethod
    def url(self) -> str:
        ...

    @property
    @abstractmethod
    def title(self) -> str:
        ...

    @abstractmethod
    def body(self) -> Node:
        ...

    @abstractmethod
    def meta_content(self, key: str) -> Optional[str]:
        """Content of <meta property=key> or <meta name=key>."""

    @abstractmethod
    def structured_data(self) -> List[str]:
        """Raw text of every application/ld+json block."""

    @property
    def host(self) -> str:
        from urllib.parse import urlparse
        return urlparse(self.url).hostname or ""

    def resolve_url(self, href: str) -> str:
        from urllib.parse import urljoin
        return urljoin(self.url, href) if self.url else href

    def select(self, selector: str) -> List[Node]:
        return self.body().select(selector)

    def select_one(self, selector: str) -> Optional[Node]:
        return self.body().select_one(selector)
