"""
Live Page Watcher - run detection on real clicks in a Playwright page

A capture-phase click listener is injected into the page. On every click
it tags the target with ``data-cartwatch-target``, snapshots the page
markup and hands it to Python through an exposed binding. Computed font
size/weight and visibility of price-like elements are copied into inline
styles of the snapshot so the price scorer sees what the browser rendered.

Cart counters are watched in the page with a MutationObserver; their new
texts come back through a second binding into a CartCountSubscription.

Usage:
    watcher = PageWatcher(page, dispatcher)
    await watcher.install()
    await watcher.watch_cart_count(lambda n: print("cart now", n))
    await page.click("#add-to-cart-button")
    print(watcher.results[-1].status)
"""

import json
import logging
from typing import Callable, List, Optional

from .catalog import CART_COUNT_SELECTORS
from .dispatcher import CartDispatcher, DetectionResult, DetectionStatus
from .observer import CartCountSubscription
from .page.html import HtmlDocument

logger = logging.getLogger(__name__)

BINDING_NAME = "__cartwatchClick"
CART_COUNT_BINDING = "__cartwatchCartCount"
TARGET_ATTRIBUTE = "data-cartwatch-target"

INSTALL_LISTENER_JS = """
(args) => {
    const [bindingName, targetAttr] = args;
    if (window.__cartwatchInstalled) return false;
    window.__cartwatchInstalled = true;

    const STYLED = '[class*="price" i], [data-price], [itemprop="price"], [id*="price" i]';

    const snapshot = () => {
        const clone = document.documentElement.cloneNode(true);
        const originals = document.documentElement.querySelectorAll(STYLED);
        const copies = clone.querySelectorAll(STYLED);
        for (let i = 0; i < originals.length && i < copies.length; i++) {
            const cs = window.getComputedStyle(originals[i]);
            let style = (copies[i].getAttribute('style') || '');
            style += `;font-size:${cs.fontSize};font-weight:${cs.fontWeight}`;
            if (originals[i].offsetParent === null) style += ';display:none';
            copies[i].setAttribute('style', style);
        }
        return clone.outerHTML;
    };

    document.addEventListener('click', (event) => {
        let target = event.target;
        if (target && !(target instanceof Element)) target = target.parentElement;
        if (!target) return;
        target.setAttribute(targetAttr, '1');
        let html;
        try {
            html = snapshot();
        } finally {
            target.removeAttribute(targetAttr);
        }
        window[bindingName](html, window.location.href);
    }, true);
    return true;
}
"""

WATCH_CART_COUNT_JS = """
(args) => {
    const [bindingName, selectors] = args;
    if (window.__cartwatchCountWatched) return false;
    window.__cartwatchCountWatched = true;

    const counters = () => {
        const found = [];
        for (const selector of selectors) {
            let matches = [];
            try {
                matches = document.querySelectorAll(selector);
            } catch (e) {
                continue;
            }
            for (const el of matches) {
                if (!found.includes(el)) found.push(el);
            }
        }
        return found;
    };

    const last = new Map();
    const read = () => {
        counters().forEach((el, index) => {
            const text = (el.textContent || '').trim();
            if (last.has(index) && last.get(index) === text) return;
            const known = last.has(index);
            last.set(index, text);
            if (known) window[bindingName](index, text);
        });
    };

    read();
    new MutationObserver(read).observe(document.documentElement, {
        childList: true,
        subtree: true,
        characterData: true,
    });
    return true;
}
"""


class PageWatcher:
    """Bridges clicks and cart counters of a Playwright page to a CartDispatcher."""

    def __init__(self, page, dispatcher: CartDispatcher):
        self.page = page
        self.dispatcher = dispatcher
        self.results: List[DetectionResult] = []
        self.cart_count: Optional[CartCountSubscription] = None
        self._installed = False

    async def install(self) -> None:
        if self._installed:
            return
        await self.page.expose_binding(BINDING_NAME, self._on_click)
        args = json.dumps([BINDING_NAME, TARGET_ATTRIBUTE])
        await self.page.add_init_script(script=f"({INSTALL_LISTENER_JS})({args});")
        await self.page.evaluate(INSTALL_LISTENER_JS, [BINDING_NAME, TARGET_ATTRIBUTE])
        self._installed = True
        logger.info("Click listener installed")

    async def watch_cart_count(self, on_change: Callable[[int], None]) -> Optional[CartCountSubscription]:
        """
        Report changes of the page's own cart counters to ``on_change``.

        Returns the subscription, or None when auto-detect is off. Calling
        again returns the existing subscription.
        """
        if not self.dispatcher.settings.auto_detect:
            logger.info("Auto-detect disabled, not observing cart count")
            return None
        if self.cart_count is not None:
            return self.cart_count

        self.cart_count = CartCountSubscription([], on_change)
        selectors = list(CART_COUNT_SELECTORS)
        await self.page.expose_binding(CART_COUNT_BINDING, self._on_cart_count)
        args = json.dumps([CART_COUNT_BINDING, selectors])
        await self.page.add_init_script(script=f"({WATCH_CART_COUNT_JS})({args});")
        await self.page.evaluate(WATCH_CART_COUNT_JS, [CART_COUNT_BINDING, selectors])
        logger.info("Cart count observer installed")
        return self.cart_count

    async def _on_click(self, source, html: str, url: str) -> str:
        document = HtmlDocument.from_html(html, url=url)
        target = document.select_one(f"[{TARGET_ATTRIBUTE}]")
        if target is None:
            logger.debug("Click snapshot without target marker")
            result = DetectionResult(DetectionStatus.NOT_ACTION)
        else:
            result = await self.dispatcher.handle_click(target, document)
        self.results.append(result)
        return result.status.value

    def _on_cart_count(self, source, index: int, text: str) -> Optional[int]:
        if self.cart_count is None:
            return None
        return self.cart_count.feed(index, text)
