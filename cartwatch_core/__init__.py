"""
cartwatch_core: add-to-cart detection and product extraction on unknown storefronts

Usage:
    from cartwatch_core import HtmlDocument, CartDispatcher, MemoryCartStore

    doc = HtmlDocument.from_html(html, url="https://shop.example/p/1")
    dispatcher = CartDispatcher(store=MemoryCartStore(), document=doc)
    result = await dispatcher.handle_click(doc.select_one(".add-to-cart-button"))
"""
from .config import Config, Settings, config
from .exceptions import (
    CartwatchError,
    SelectorUnsupportedError,
    CatalogError,
    StorageError,
    PageLoadError,
)
from .models import ProductRecord, PriceCandidate, UNKNOWN_TITLE, PRICE_NOT_FOUND
from .page import Node, Document, HtmlNode, HtmlDocument, render_page
from .detection import ActionClassifier, locate_container
from .extraction import ProductExtractor, PriceResolver, resolve_price
from .dedup import InFlightGuard, SignatureCache, is_semantic_duplicate
from .observer import CartCountObserver, CartCountSubscription
from .storage import CartStore, MemoryCartStore, JsonCartStore, cart_stats
from .dispatcher import CartDispatcher, DetectionResult, DetectionStatus

__all__ = [
    # Configuration
    "Config",
    "Settings",
    "config",
    # Errors
    "CartwatchError",
    "SelectorUnsupportedError",
    "CatalogError",
    "StorageError",
    "PageLoadError",
    # Model
    "ProductRecord",
    "PriceCandidate",
    "UNKNOWN_TITLE",
    "PRICE_NOT_FOUND",
    # Page tree
    "Node",
    "Document",
    "HtmlNode",
    "HtmlDocument",
    "render_page",
    # Engine
    "ActionClassifier",
    "locate_container",
    "ProductExtractor",
    "PriceResolver",
    "resolve_price",
    "InFlightGuard",
    "SignatureCache",
    "is_semantic_duplicate",
    "CartCountObserver",
    "CartCountSubscription",
    # Collaborators and dispatch
    "CartStore",
    "MemoryCartStore",
    "JsonCartStore",
    "cart_stats",
    "CartDispatcher",
    "DetectionResult",
    "DetectionStatus",
]
