"""
Cart-Count Observer - passive watcher on page cart counters

Diagnostics only: reports new counts shown by the storefront's own cart
badge. On a page tree, changes are found by polling (``check()`` or
``start()``); a live browser page pushes counter texts through ``feed()``
(see ``live.PageWatcher.watch_cart_count``).
"""

import asyncio
import logging
from typing import Callable, Dict, Hashable, List, Optional, Sequence

from .catalog import CART_COUNT_SELECTORS
from .exceptions import SelectorUnsupportedError
from .page.base import Document, Node

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.5


def parse_count(text: Optional[str]) -> Optional[int]:
    value = (text or "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class CartCountSubscription:
    """
    Disposable handle over watched cart counters.

    Counter texts arrive either from re-reading page tree nodes (``check()``)
    or pushed by a live page (``feed()``); both report through ``on_change``.
    """

    def __init__(self, elements: Sequence[Node], on_change: Callable[[int], None]):
        self.elements = list(elements)
        self.on_change = on_change
        self._last_text: Dict[Hashable, str] = {i: el.text() for i, el in enumerate(self.elements)}
        self._task: Optional[asyncio.Task] = None
        self.disposed = False

    def feed(self, key: Hashable, text: Optional[str]) -> Optional[int]:
        """Record the current text of counter ``key``; call back if it changed to an integer."""
        if self.disposed:
            return None
        text = text or ""
        if text == self._last_text.get(key):
            return None
        self._last_text[key] = text
        count = parse_count(text)
        if count is None:
            return None
        try:
            self.on_change(count)
        except Exception as e:
            logger.warning(f"Cart count listener failed: {e}")
        return count

    def check(self) -> List[int]:
        """Re-read every counter node; returns the counts reported."""
        emitted = []
        for index, element in enumerate(self.elements):
            count = self.feed(index, element.text())
            if count is not None:
                emitted.append(count)
        return emitted

    def start(self, interval: float = DEFAULT_POLL_INTERVAL) -> asyncio.Task:
        """Poll in the background on the running loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._poll(interval))
        return self._task

    async def _poll(self, interval: float):
        while not self.disposed:
            self.check()
            await asyncio.sleep(interval)

    def dispose(self) -> None:
        self.disposed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()
        return False


class CartCountObserver:
    """
    Usage:
        observer = CartCountObserver(document)
        sub = observer.observe(lambda n: print("cart now", n))
        if sub:
            sub.start()
    """

    def __init__(self, document: Document, selectors: Optional[Sequence[str]] = None):
        self.document = document
        self.selectors = list(selectors) if selectors is not None else list(CART_COUNT_SELECTORS)

    def find_counters(self) -> List[Node]:
        found: List[Node] = []
        for selector in self.selectors:
            try:
                matches = self.document.select(selector)
            except SelectorUnsupportedError as e:
                logger.debug(f"Skipping cart count selector: {e}")
                continue
            for element in matches:
                if element not in found:
                    found.append(element)
        return found

    def observe(self, on_change: Callable[[int], None]) -> Optional[CartCountSubscription]:
        """Subscription over all counters, or None when the page has none."""
        elements = self.find_counters()
        if not elements:
            logger.debug("No cart count elements on page")
            return None
        logger.info(f"Watching {len(elements)} cart count element(s)")
        return CartCountSubscription(elements, on_change)
