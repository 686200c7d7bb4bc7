"""
Deduplication - three independent filters on different timescales

1. InFlightGuard     - single-slot lock; triggers arriving while a detection
                       runs are ignored, release is deferred by a short delay
2. SignatureCache    - short TTL set of product signatures (rapid re-clicks)
3. is_semantic_duplicate - same url or title stored within the last minutes

Usage:
    guard = InFlightGuard(release_delay=1.0)
    async with guard.hold() as acquired:
        if not acquired:
            return  # busy
        ...
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Callable, Dict, Iterable, Optional

from .models import ProductRecord, now_ms
from .page.base import collapse_whitespace

logger = logging.getLogger(__name__)

DEFAULT_RELEASE_DELAY = 1.0
DEFAULT_SIGNATURE_TTL = 3.0
DEFAULT_DUPLICATE_WINDOW = 5 * 60


class InFlightGuard:
    """
    At most one detection per page context.

    Not a queue: a trigger that finds the guard held is dropped. Release
    happens ``release_delay`` seconds after the detection finishes so
    bubbling duplicates of the same click are absorbed as well.
    """

    def __init__(self, release_delay: float = DEFAULT_RELEASE_DELAY):
        self.release_delay = release_delay
        self._held = False
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def held(self) -> bool:
        return self._held

    def try_acquire(self) -> bool:
        if self._held:
            return False
        self._held = True
        return True

    def release(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._held = False

    def release_later(self, delay: Optional[float] = None) -> None:
        """Release after ``delay`` seconds on the running loop (immediately without one)."""
        delay = self.release_delay if delay is None else delay
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.release()
            return
        if delay <= 0:
            self.release()
            return
        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(delay, self.release)

    @asynccontextmanager
    async def hold(self, delay: Optional[float] = None):
        """Yield True when acquired; the deferred release runs on every exit path."""
        if not self.try_acquire():
            yield False
            return
        try:
            yield True
        finally:
            self.release_later(delay)


class SignatureCache:
    """Set of signatures whose entries expire after ``ttl`` seconds."""

    def __init__(self, ttl: float = DEFAULT_SIGNATURE_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, float] = {}

    def _purge(self) -> None:
        now = self._clock()
        expired = [sig for sig, expires in self._entries.items() if expires <= now]
        for sig in expired:
            del self._entries[sig]

    def __contains__(self, signature: str) -> bool:
        self._purge()
        return signature in self._entries

    def __len__(self) -> int:
        self._purge()
        return len(self._entries)

    def check_and_add(self, signature: str) -> bool:
        """True if the signature was seen within the TTL; otherwise record it."""
        self._purge()
        if signature in self._entries:
            return True
        self._entries[signature] = self._clock() + self.ttl
        return False

    def clear(self) -> None:
        self._entries.clear()


def normalize_title(title: str) -> str:
    return collapse_whitespace(title).casefold()


def make_signature(record: ProductRecord) -> str:
    """Signature of a detection: store + normalized title."""
    return f"{record.store}|{normalize_title(record.title)}"


def is_semantic_duplicate(
    record: ProductRecord,
    recent: Iterable[ProductRecord],
    now: Optional[int] = None,
    window_seconds: float = DEFAULT_DUPLICATE_WINDOW,
) -> bool:
    """
    True if a stored record shares the url or the title of ``record`` and
    was recorded less than ``window_seconds`` ago.

    Stored records without any timestamp cannot be placed in the window and
    never count as duplicates.
    """
    now = now_ms() if now is None else now
    window_ms = window_seconds * 1000
    for item in recent:
        same_url = bool(record.url) and item.url == record.url
        same_title = bool(record.title) and item.title == record.title
        if not (same_url or same_title):
            continue
        recorded = item.recorded_at
        if recorded is None:
            logger.debug(f"Stored item {item.id!r} has no timestamp, skipping duplicate check")
            continue
        if now - recorded < window_ms:
            return True
    return False
