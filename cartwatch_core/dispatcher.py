"""
Cart Dispatcher - one add-to-cart detection from click to storage

Flow per trigger:
    click target -> action element (walk up to 5 levels)
    -> in-flight guard -> extract -> validate -> sanitize
    -> semantic duplicate check -> signature debounce -> confirmation (optional)
    -> store.append -> remember signature -> notify / sync hook

Collaborators (storage, confirm, notify, sync) are injected. Their
failures are logged and reported here and never reach the page.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Set, Union

from .config import Settings, config
from .dedup import InFlightGuard, is_semantic_duplicate, make_signature
from .detection.classifier import ActionClassifier
from .error_handler import format_user_friendly_error
from .extraction.extractor import ProductExtractor, is_valid_product
from .models import ProductRecord
from .observer import CartCountObserver, CartCountSubscription
from .page.base import Document, Node
from .storage import CartStore

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "This item was recently added!"

ConfirmFn = Callable[[ProductRecord], Union[bool, Awaitable[bool]]]
NotifyFn = Callable[[str, str], Any]
SyncFn = Callable[[ProductRecord, str], Any]

# Strong references to scheduled collaborator calls until they finish
_pending_tasks: Set[asyncio.Future] = set()


class DetectionStatus(str, Enum):
    ADDED = "added"
    DUPLICATE = "duplicate"
    DEBOUNCED = "debounced"
    INVALID = "invalid"
    CANCELLED = "cancelled"
    BUSY = "busy"
    NOT_ACTION = "not_action"
    DISABLED = "disabled"
    FAILED = "failed"


@dataclass
class DetectionResult:
    """Outcome of one trigger"""
    status: DetectionStatus
    record: Optional[ProductRecord] = None
    message: Optional[str] = None

    @property
    def added(self) -> bool:
        return self.status == DetectionStatus.ADDED

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "record": self.record.to_dict() if self.record else None,
            "message": self.message,
        }


def success_message(title: str) -> str:
    if not title:
        return "Added to cart!"
    short = title[:30] + ("..." if len(title) > 30 else "")
    return f'Added "{short}" to cart!'


def _fire_and_forget(name: str, fn: Optional[Callable], *args) -> None:
    """Call a collaborator without awaiting or propagating its failures."""
    if fn is None:
        return
    try:
        result = fn(*args)
    except Exception as e:
        logger.warning(f"{name} collaborator failed: {e}")
        return
    if inspect.isawaitable(result):
        try:
            task = asyncio.ensure_future(result)
        except RuntimeError as e:
            logger.warning(f"{name} collaborator could not be scheduled: {e}")
            return
        _pending_tasks.add(task)
        task.add_done_callback(lambda t: _log_task_failure(name, t))


def _log_task_failure(name: str, task: asyncio.Future) -> None:
    _pending_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning(f"{name} collaborator failed: {exc}")


class CartDispatcher:
    """
    Usage:
        dispatcher = CartDispatcher(store=MemoryCartStore(), document=doc)
        result = await dispatcher.handle_click(doc.select_one(".add-to-cart"))
        if result.added:
            ...
    """

    def __init__(
        self,
        store: CartStore,
        document: Optional[Document] = None,
        settings: Optional[Settings] = None,
        classifier: Optional[ActionClassifier] = None,
        confirm: Optional[ConfirmFn] = None,
        notify: Optional[NotifyFn] = None,
        sync: Optional[SyncFn] = None,
        release_delay: Optional[float] = None,
        duplicate_window: Optional[float] = None,
    ):
        self.store = store
        self.document = document
        self.settings = settings or config.settings()
        self.classifier = classifier or ActionClassifier(signature_ttl=config.signature_ttl)
        self.confirm = confirm
        self.notify = notify
        self.sync = sync
        self.duplicate_window = config.duplicate_window if duplicate_window is None else duplicate_window
        self.guard = InFlightGuard(config.release_delay if release_delay is None else release_delay)

    def _document(self, document: Optional[Document]) -> Document:
        doc = document or self.document
        if doc is None:
            raise ValueError("No document given and dispatcher has no default document")
        return doc

    async def handle_click(self, target: Optional[Node], document: Optional[Document] = None) -> DetectionResult:
        """Entry point for a raw click: find the action element, then detect."""
        if not self.settings.auto_detect:
            return DetectionResult(DetectionStatus.DISABLED)
        element = self.classifier.find_action_element(target)
        if element is None:
            return DetectionResult(DetectionStatus.NOT_ACTION)
        return await self.handle_action(element, document)

    async def handle_action(self, element: Node, document: Optional[Document] = None) -> DetectionResult:
        doc = self._document(document)
        async with self.guard.hold() as acquired:
            if not acquired:
                logger.info("Detection already in flight, ignoring trigger")
                return DetectionResult(DetectionStatus.BUSY)
            logger.info(f"Cart addition detected on {doc.host or doc.url}")
            return await self._detect(element, doc)

    async def _detect(self, element: Node, document: Document) -> DetectionResult:
        record = ProductExtractor(document).extract(element)

        if not is_valid_product(record):
            logger.warning("Invalid product data (no title), skipping")
            return DetectionResult(DetectionStatus.INVALID, record)

        # compare in the stored form: titles are truncated on sanitize
        sanitized = record.sanitize()
        if await self.is_duplicate(sanitized):
            logger.info(f"Duplicate product (recently added): {sanitized.title[:60]!r}")
            _fire_and_forget("notify", self.notify, DUPLICATE_MESSAGE, "info")
            return DetectionResult(DetectionStatus.DUPLICATE, sanitized, DUPLICATE_MESSAGE)

        signature = make_signature(sanitized)
        if self.classifier.seen_recently(signature):
            logger.info(f"Same product triggered again within debounce window: {sanitized.title[:60]!r}")
            return DetectionResult(DetectionStatus.DEBOUNCED, sanitized)

        if self.settings.show_confirmation and self.confirm is not None:
            if not await self._confirmed(sanitized):
                logger.info("User cancelled addition")
                return DetectionResult(DetectionStatus.CANCELLED, sanitized)

        try:
            await self.store.append(sanitized)
        except Exception as e:
            logger.error(f"Error handling cart addition: {e}")
            info = format_user_friendly_error(e, context="storage")
            _fire_and_forget("notify", self.notify, info["message"], info["kind"])
            return DetectionResult(DetectionStatus.FAILED, sanitized, info["message"])

        self.classifier.remember(signature)
        message = success_message(sanitized.title)
        logger.info(f"Added to cart: {sanitized.title[:60]!r} ({sanitized.price})")
        _fire_and_forget("notify", self.notify, message, "success")
        if self.settings.sync_enabled and self.settings.api_endpoint:
            _fire_and_forget("sync", self.sync, sanitized, self.settings.api_endpoint)
        return DetectionResult(DetectionStatus.ADDED, sanitized, message)

    async def is_duplicate(self, record: ProductRecord) -> bool:
        try:
            recent = await self.store.get_recent()
        except Exception as e:
            logger.error(f"Error checking duplicates: {e}")
            return False
        return is_semantic_duplicate(record, recent, window_seconds=self.duplicate_window)

    async def _confirmed(self, record: ProductRecord) -> bool:
        try:
            answer = self.confirm(record)
            if inspect.isawaitable(answer):
                answer = await answer
        except Exception as e:
            logger.warning(f"Confirmation prompt failed: {e}")
            return False
        return bool(answer)

    def attach_observer(
        self,
        on_change: Callable[[int], None],
        document: Optional[Document] = None,
    ) -> Optional[CartCountSubscription]:
        """Cart-count subscription, or None when auto-detect is off or the page has no counter."""
        if not self.settings.auto_detect:
            logger.info("Auto-detect disabled, not observing cart count")
            return None
        return CartCountObserver(self._document(document)).observe(on_change)
