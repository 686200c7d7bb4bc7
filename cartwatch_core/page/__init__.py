"""
Page tree abstraction and its implementations.
"""

from .base import Node, Document, collapse_whitespace
from .html import HtmlNode, HtmlDocument, parse_inline_style
from .browser import render_page, snapshot_page

__all__ = [
    'Node',
    'Document',
    'collapse_whitespace',
    'HtmlNode',
    'HtmlDocument',
    'parse_inline_style',
    'render_page',
    'snapshot_page',
]
