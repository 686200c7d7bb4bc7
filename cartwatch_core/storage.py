"""
Cart storage collaborators.

The engine only needs ``get_recent()`` (duplicate check) and ``append()``
(one record per successful detection). ``MemoryCartStore`` serves tests
and embedding; ``JsonCartStore`` keeps a local cart file for the CLI.
"""

import json
import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import StorageError
from .models import ProductRecord, now_ms

logger = logging.getLogger(__name__)


class CartStore(ABC):
    """Boundary contract of the persisted cart."""

    @abstractmethod
    async def get_recent(self) -> List[ProductRecord]:
        ...

    @abstractmethod
    async def append(self, record: ProductRecord) -> None:
        ...


def merge_into_cart(cart: List[ProductRecord], record: ProductRecord, stamp: Optional[int] = None) -> List[ProductRecord]:
    """
    Insert ``record`` newest-first, or update the item with the same url and
    title in place (keeping its ``addedAt``).
    """
    stamp = now_ms() if stamp is None else stamp
    for index, item in enumerate(cart):
        if item.url == record.url and item.title == record.title:
            updated = ProductRecord.from_dict({**item.to_dict(), **record.to_dict()})
            updated.added_at = item.added_at
            updated.updated_at = stamp
            cart[index] = updated
            return cart
    record.added_at = stamp
    cart.insert(0, record)
    return cart


class MemoryCartStore(CartStore):
    def __init__(self, items: Optional[List[ProductRecord]] = None):
        self.items: List[ProductRecord] = list(items or [])

    async def get_recent(self) -> List[ProductRecord]:
        return list(self.items)

    async def append(self, record: ProductRecord) -> None:
        merge_into_cart(self.items, record)


class JsonCartStore(CartStore):
    """Cart kept as a JSON array of records, newest first."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> List[ProductRecord]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read cart file {self.path}: {e}") from e
        if not isinstance(data, list):
            raise StorageError(f"Cart file {self.path} does not contain a list")
        return [ProductRecord.from_dict(item) for item in data if isinstance(item, dict)]

    def save(self, cart: List[ProductRecord]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump([item.to_dict() for item in cart], f, ensure_ascii=False, indent=2)
        except OSError as e:
            raise StorageError(f"Cannot write cart file {self.path}: {e}") from e

    async def get_recent(self) -> List[ProductRecord]:
        return self.load()

    async def append(self, record: ProductRecord) -> None:
        cart = merge_into_cart(self.load(), record)
        self.save(cart)
        logger.info(f"Cart saved ({len(cart)} items) -> {self.path}")

    def clear(self) -> None:
        self.save([])


def cart_stats(cart: List[ProductRecord]) -> Dict[str, Any]:
    """Totals grouped by store."""
    groups: "OrderedDict[str, int]" = OrderedDict()
    for item in cart:
        groups[item.store] = groups.get(item.store, 0) + 1
    return {
        "totalItems": len(cart),
        "stores": len(groups),
        "storeBreakdown": [{"store": store, "count": count} for store, count in groups.items()],
    }
