"""
Product data model.

``ProductRecord`` is the unit handed to the storage collaborator. Every
field is always present; unresolved fields carry sentinel values.
"""

import base64
import time
from dataclasses import dataclass, field, asdict, replace
from typing import Any, Dict, Optional

UNKNOWN_TITLE = "Unknown Product"
PRICE_NOT_FOUND = "Price not found"

DEFAULT_QUANTITY = 1
MIN_QUANTITY = 1
MAX_QUANTITY = 999

# Length caps applied by sanitize()
FIELD_LIMITS = {
    "title": 200,
    "price": 50,
    "image": 500,
    "url": 500,
    "store": 100,
}


def now_ms() -> int:
    return int(time.time() * 1000)


def generate_product_id(store: str, timestamp_ms: Optional[int] = None) -> str:
    """Short opaque id from store + detection time (not collision-proof)."""
    stamp = timestamp_ms if timestamp_ms is not None else now_ms()
    raw = f"{store}-{stamp}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")[:16]


def clamp_quantity(value: Any) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        return DEFAULT_QUANTITY
    if quantity < MIN_QUANTITY:
        return DEFAULT_QUANTITY
    return min(MAX_QUANTITY, quantity)


@dataclass
class ProductRecord:
    """Product detected on an add-to-cart interaction."""
    title: str = UNKNOWN_TITLE
    price: str = PRICE_NOT_FOUND
    image: str = ""
    quantity: int = DEFAULT_QUANTITY
    url: str = ""
    store: str = ""
    timestamp: int = field(default_factory=now_ms)
    id: str = ""
    added_at: Optional[int] = None
    updated_at: Optional[int] = None

    def __post_init__(self):
        if not self.id:
            self.id = generate_product_id(self.store, self.timestamp)

    @property
    def recorded_at(self) -> Optional[int]:
        """When the record was stored (``addedAt``), else when it was detected."""
        if self.added_at is not None:
            return self.added_at
        return self.timestamp or None

    def sanitize(self) -> 'ProductRecord':
        """Copy with every field present and within its length cap."""
        values = {
            "title": self.title or UNKNOWN_TITLE,
            "price": self.price or PRICE_NOT_FOUND,
            "image": self.image or "",
            "url": self.url or "",
            "store": self.store or "",
        }
        values = {name: str(val)[:FIELD_LIMITS[name]] for name, val in values.items()}
        return replace(self, quantity=clamp_quantity(self.quantity), **values)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["addedAt"] = data.pop("added_at")
        data["updatedAt"] = data.pop("updated_at")
        if data["addedAt"] is None:
            del data["addedAt"]
        if data["updatedAt"] is None:
            del data["updatedAt"]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProductRecord':
        """Build from a stored dict; tolerates missing fields and timestamps."""
        def pick(*keys):
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return None

        return cls(
            title=str(pick("title") or UNKNOWN_TITLE),
            price=str(pick("price") or PRICE_NOT_FOUND),
            image=str(pick("image") or ""),
            quantity=clamp_quantity(pick("quantity")),
            url=str(pick("url") or ""),
            store=str(pick("store") or ""),
            timestamp=_as_int(pick("timestamp")) or 0,
            id=str(pick("id") or ""),
            added_at=_as_int(pick("addedAt", "added_at")),
            updated_at=_as_int(pick("updatedAt", "updated_at")),
        )


def _as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class PriceCandidate:
    """Price text competing for selection during one resolution."""
    text: str
    element: Any
    pattern_rank: int
    score: float
