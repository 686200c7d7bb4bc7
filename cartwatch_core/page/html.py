"""
HTML snapshot implementation of the page tree.

Backed by BeautifulSoup (html.parser) with soupsieve for selector
matching, so case-insensitive attribute selectors ([class*="price" i])
and :not() work the same way they do in a browser.

Computed style is approximated from inline ``style`` attributes plus a
handful of user-agent defaults (headings, <b>, <strong>). That is enough
for the visual-prominence signals used by the price resolver.
"""

import logging
import re
from functools import lru_cache
from typing import Dict, List, Optional

import soupsieve
from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from ..exceptions import SelectorUnsupportedError
from .base import Document, Node

logger = logging.getLogger(__name__)

NON_RENDERED_TAGS = {"script", "style", "template", "noscript", "head", "title", "meta", "link"}

BASE_FONT_SIZE = 16.0

# User-agent defaults (px / weight)
DEFAULT_FONT_SIZES = {
    "h1": 32.0,
    "h2": 24.0,
    "h3": 18.72,
    "h4": 16.0,
    "h5": 13.28,
    "h6": 10.72,
    "small": 13.33,
}
BOLD_TAGS = {"b", "strong", "th", "h1", "h2", "h3", "h4", "h5", "h6"}

INHERITED_PROPERTIES = ("font-size", "font-weight", "visibility")

_FONT_SIZE_RE = re.compile(r"^\s*([\d.]+)\s*(px|pt|em|rem|%)?\s*$", re.I)


@lru_cache(maxsize=512)
def _compile(selector: str):
    try:
        return soupsieve.compile(selector)
    except soupsieve.SelectorSyntaxError as e:
        raise SelectorUnsupportedError(f"Unsupported selector {selector!r}: {e}") from e


def parse_inline_style(style: Optional[str]) -> Dict[str, str]:
    """Parse ``"font-size: 24px; color: red"`` into a dict."""
    declarations: Dict[str, str] = {}
    for part in (style or "").split(";"):
        if ":" not in part:
            continue
        prop, _, val = part.partition(":")
        prop = prop.strip().lower()
        val = val.replace("!important", "").strip()
        if prop and val:
            declarations[prop] = val
    return declarations


def _resolve_font_size(raw: str, parent_px: float) -> Optional[float]:
    m = _FONT_SIZE_RE.match(raw or "")
    if not m:
        return None
    amount = float(m.group(1))
    unit = (m.group(2) or "px").lower()
    if unit == "px":
        return amount
    if unit == "pt":
        return amount * 4 / 3
    if unit == "em":
        return amount * parent_px
    if unit == "rem":
        return amount * BASE_FONT_SIZE
    return amount * parent_px / 100


class HtmlNode(Node):
    """Element of an HtmlDocument."""

    __slots__ = ("_tag", "_document")

    def __init__(self, tag: Tag, document: 'HtmlDocument'):
        self._tag = tag
        self._document = document

    def __eq__(self, other):
        return isinstance(other, HtmlNode) and other._tag is self._tag

    def __hash__(self):
        return id(self._tag)

    def __repr__(self):
        cls = self.class_name
        return f"<HtmlNode {self.tag}{'.' + cls.replace(' ', '.') if cls else ''}>"

    @property
    def raw(self) -> Tag:
        return self._tag

    @property
    def tag(self) -> str:
        return (self._tag.name or "").lower()

    def matches(self, selector: str) -> bool:
        if self._is_document_root():
            return False
        return bool(_compile(selector).match(self._tag))

    def attribute(self, name: str) -> Optional[str]:
        val = self._tag.get(name)
        if val is None:
            return None
        if isinstance(val, list):
            return " ".join(val)
        return str(val)

    def text(self) -> str:
        parts: List[str] = []
        _collect_text(self._tag, parts)
        return "".join(parts)

    def children(self) -> List[Node]:
        return [self._document.wrap(c) for c in self._tag.children if isinstance(c, Tag)]

    def parent(self) -> Optional[Node]:
        parent = self._tag.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            return None
        return self._document.wrap(parent)

    @property
    def value(self) -> Optional[str]:
        if self.tag == "select":
            option = self._tag.find("option", selected=True) or self._tag.find("option")
            if option is None:
                return None
            val = option.get("value")
            return str(val) if val is not None else option.get_text(strip=True)
        if self.tag == "textarea":
            return self._tag.get_text()
        return self.attribute("value")

    def computed_style(self) -> Dict[str, str]:
        return self._document.style_of(self._tag)

    def is_visible(self) -> bool:
        if self.tag in NON_RENDERED_TAGS:
            return False
        if self.tag == "input" and (self.attribute("type") or "").lower() == "hidden":
            return False
        tag: Optional[Tag] = self._tag
        while tag is not None and not isinstance(tag, BeautifulSoup):
            if tag.get("hidden") is not None:
                return False
            if str(tag.get("aria-hidden", "")).lower() == "true":
                return False
            if (tag.name or "").lower() in NON_RENDERED_TAGS:
                return False
            inline = parse_inline_style(tag.get("style"))
            if inline.get("display", "").lower() == "none":
                return False
            tag = tag.parent
        return self.computed_style().get("visibility", "visible") != "hidden"

    def select(self, selector: str) -> List[Node]:
        return [self._document.wrap(t) for t in _compile(selector).select(self._tag)]

    def select_one(self, selector: str) -> Optional[Node]:
        found = _compile(selector).select_one(self._tag)
        return self._document.wrap(found) if found is not None else None

    def _is_document_root(self) -> bool:
        return isinstance(self._tag, BeautifulSoup)


def _collect_text(tag: Tag, out: List[str]) -> None:
    for child in tag.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            out.append(str(child))
        elif isinstance(child, Tag) and (child.name or "").lower() not in NON_RENDERED_TAGS:
            _collect_text(child, out)


class HtmlDocument(Document):
    """
    Parsed HTML snapshot of a page.

    Usage:
        doc = HtmlDocument.from_html(html, url="https://shop.example/p/1")
        button = doc.select_one(".add-to-cart-button")
    """

    def __init__(self, soup: BeautifulSoup, url: str = ""):
        self._soup = soup
        self._url = url or ""
        self._nodes: Dict[int, HtmlNode] = {}
        self._styles: Dict[int, Dict[str, str]] = {}

    @classmethod
    def from_html(cls, html: str, url: str = "") -> 'HtmlDocument':
        return cls(BeautifulSoup(html or "", "html.parser"), url=url)

    @property
    def soup(self) -> BeautifulSoup:
        return self._soup

    @property
    def url(self) -> str:
        return self._url

    @property
    def title(self) -> str:
        if self._soup.title is None:
            return ""
        return self._soup.title.get_text() or ""

    def wrap(self, tag: Tag) -> HtmlNode:
        node = self._nodes.get(id(tag))
        if node is None:
            node = HtmlNode(tag, self)
            self._nodes[id(tag)] = node
        return node

    def body(self) -> Node:
        root = self._soup.body or self._soup.find("html") or self._soup
        return self.wrap(root)

    def meta_content(self, key: str) -> Optional[str]:
        meta = self._soup.find("meta", attrs={"property": key}) or self._soup.find("meta", attrs={"name": key})
        if meta is None:
            meta = self._soup.find("meta", attrs={"itemprop": key})
        if meta is None:
            return None
        content = meta.get("content")
        return str(content) if content is not None else None

    def structured_data(self) -> List[str]:
        blocks = []
        for script in self._soup.find_all("script", attrs={"type": "application/ld+json"}):
            text = script.string if script.string is not None else script.get_text()
            if text and text.strip():
                blocks.append(text)
        return blocks

    def invalidate_styles(self) -> None:
        """Drop cached computed styles after the tree was modified."""
        self._styles.clear()

    def style_of(self, tag: Tag) -> Dict[str, str]:
        key = id(tag)
        cached = self._styles.get(key)
        if cached is not None:
            return cached

        parent = tag.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            inherited = {"font-size": f"{BASE_FONT_SIZE:g}px", "font-weight": "400", "visibility": "visible"}
        else:
            parent_style = self.style_of(parent)
            inherited = {prop: parent_style[prop] for prop in INHERITED_PROPERTIES if prop in parent_style}

        name = (tag.name or "").lower()
        style = dict(inherited)
        style["display"] = "block"
        if name in DEFAULT_FONT_SIZES:
            style["font-size"] = f"{DEFAULT_FONT_SIZES[name]:g}px"
        if name in BOLD_TAGS:
            style["font-weight"] = "700"

        parent_px = _resolve_font_size(inherited.get("font-size", ""), BASE_FONT_SIZE) or BASE_FONT_SIZE
        for prop, val in parse_inline_style(tag.get("style")).items():
            if prop == "font-size":
                px = _resolve_font_size(val, parent_px)
                if px is not None:
                    style["font-size"] = f"{px:g}px"
            else:
                style[prop] = val

        self._styles[key] = style
        return style
