#!/usr/bin/env python3
"""
cartwatch command line.

    cartwatch detect --html page.html --page-url https://shop.example/p/1 --click ".add-to-cart"
    cartwatch detect --url https://shop.example/p/1 --click "#add-to-cart-button" --no-store
    cartwatch classify --html page.html "button"
    cartwatch cart --stats
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import config
from .detection.classifier import ActionClassifier
from .dispatcher import CartDispatcher, DetectionStatus
from .exceptions import CartwatchError
from .log_config import setup_logging
from .page.base import Document
from .page.browser import render_page
from .page.html import HtmlDocument
from .storage import JsonCartStore, MemoryCartStore, cart_stats

logger = logging.getLogger(__name__)

OK_STATUSES = (DetectionStatus.ADDED, DetectionStatus.DUPLICATE, DetectionStatus.DEBOUNCED)


def _print_json(data) -> None:
    sys.stdout.write(json.dumps(data, ensure_ascii=False, indent=2) + "\n")


async def load_document(args: argparse.Namespace) -> Document:
    if args.html:
        html = Path(args.html).read_text(encoding="utf-8")
        return HtmlDocument.from_html(html, url=args.page_url or "")
    return await render_page(args.url)


async def cmd_detect(args: argparse.Namespace) -> int:
    document = await load_document(args)
    target = document.select_one(args.click)
    if target is None:
        print(f"No element matches {args.click!r}", file=sys.stderr)
        return 1

    if args.no_store:
        store = MemoryCartStore()
    else:
        store = JsonCartStore(Path(args.store_file) if args.store_file else config.cart_file)

    dispatcher = CartDispatcher(store=store, document=document, release_delay=0)
    result = await dispatcher.handle_click(target)
    _print_json(result.to_dict())
    return 0 if result.status in OK_STATUSES else 2


async def cmd_classify(args: argparse.Namespace) -> int:
    document = await load_document(args)
    classifier = ActionClassifier()
    rows = []
    for element in document.select(args.selector):
        rows.append({
            "element": repr(element),
            "text": element.text().strip()[:80],
            "structural": classifier.matches_structure(element),
            "lexical": classifier.matches_keywords(element),
            "action": classifier.is_action_element(element),
        })
    _print_json(rows)
    return 0


async def cmd_cart(args: argparse.Namespace) -> int:
    store = JsonCartStore(Path(args.store_file) if args.store_file else config.cart_file)
    cart = store.load()
    if args.stats:
        _print_json(cart_stats(cart))
    else:
        _print_json([item.to_dict() for item in cart])
    return 0


def _add_source_args(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--html", help="Saved HTML file")
    source.add_argument("--url", help="Page URL, rendered with headless Chromium")
    parser.add_argument("--page-url", help="URL the saved HTML was served from")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cartwatch", description="Add-to-cart detection and product extraction")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING (default from CARTWATCH_LOG_LEVEL)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_detect = sub.add_parser("detect", help="Simulate a click and extract the product")
    _add_source_args(p_detect)
    p_detect.add_argument("--click", required=True, help="CSS selector of the clicked element")
    p_detect.add_argument("--store-file", help="Cart JSON file (default CARTWATCH_CART_FILE)")
    p_detect.add_argument("--no-store", action="store_true", help="Do not persist the record")
    p_detect.set_defaults(func=cmd_detect)

    p_classify = sub.add_parser("classify", help="Show which elements are add-to-cart actions")
    _add_source_args(p_classify)
    p_classify.add_argument("selector", help="CSS selector of elements to classify")
    p_classify.set_defaults(func=cmd_classify)

    p_cart = sub.add_parser("cart", help="Show the stored cart")
    p_cart.add_argument("--store-file", help="Cart JSON file (default CARTWATCH_CART_FILE)")
    p_cart.add_argument("--stats", action="store_true", help="Per-store totals only")
    p_cart.set_defaults(func=cmd_cart)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    try:
        return asyncio.run(args.func(args))
    except CartwatchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
