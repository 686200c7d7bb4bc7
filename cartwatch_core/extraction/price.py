"""
Price Resolver - Find "the" price of a product container

Tiers run in strict order and the first one that yields a value wins:

1. structured_data - JSON-LD Product.offers.price (absolute priority)
2. candidates      - price-like elements in the container, scored
3. container_text  - 4 strongest patterns over the container text
4. document_text   - 3 strongest patterns over the page, symbol required
5. meta            - product:price:amount / og:price:amount meta tags

Prices stay text (currency + number); parsing to a number is left to
consumers because separators and currencies are ambiguous.
"""

import json
import logging
import math
import re
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from ..catalog import (
    DOCUMENT_TEXT_SYMBOLS,
    PRICE_META_TAGS,
    PRICE_PATTERNS,
    PRICE_SELECTORS,
    PRICE_VALUE_ATTRIBUTES,
    PricePattern,
    strongest,
)
from ..exceptions import SelectorUnsupportedError
from ..models import PRICE_NOT_FOUND, PriceCandidate
from ..page.base import Document, Node, collapse_whitespace

logger = logging.getLogger(__name__)

CONTAINER_TEXT_PATTERNS = 4
DOCUMENT_TEXT_PATTERNS = 3

# Scoring weights
CURRENT_CLASS_BONUS = 5
FINAL_CLASS_BONUS = 5
REGULAR_CLASS_PENALTY = 2
STALE_CLASS_PENALTY = 10
LARGE_FONT_PX = 20
LARGE_FONT_BONUS = 3
HUGE_FONT_PX = 30
HUGE_FONT_BONUS = 5
BOLD_WEIGHT = 600
BOLD_BONUS = 2
MAX_PRICE_WORDS = 3
WORDY_PENALTY = 2

_CODE_AFTER_NUMBER_RE = re.compile(r"([\d.,]+)([A-Z]{3})")
_CODE_BEFORE_NUMBER_RE = re.compile(r"([A-Z]{3})([\d.,]+)")
_PX_RE = re.compile(r"([\d.]+)")


def clean_price_text(text: Optional[str]) -> str:
    """Collapse whitespace and separate 3-letter currency codes from numbers."""
    if not text or not text.strip():
        return PRICE_NOT_FOUND
    cleaned = collapse_whitespace(text)
    cleaned = _CODE_AFTER_NUMBER_RE.sub(r"\1 \2", cleaned)
    cleaned = _CODE_BEFORE_NUMBER_RE.sub(r"\1 \2", cleaned)
    return cleaned


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    try:
        return math.isfinite(float(str(value).strip().replace(",", "")))
    except ValueError:
        return False


def _iter_json_ld(data: Any) -> Iterator[dict]:
    if isinstance(data, list):
        for item in data:
            yield from _iter_json_ld(item)
    elif isinstance(data, dict):
        yield data
        graph = data.get("@graph")
        if isinstance(graph, list):
            yield from _iter_json_ld(graph)


def _is_product(obj: dict) -> bool:
    declared = obj.get("@type")
    if isinstance(declared, list):
        return "Product" in declared
    return declared == "Product"


def price_from_structured_data(blocks: Sequence[str]) -> Optional[str]:
    """``"CUR price"`` (or bare price) from the first JSON-LD Product with offers."""
    for raw in blocks:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.debug(f"Skipping unparseable JSON-LD block: {e}")
            continue
        for obj in _iter_json_ld(data):
            if not _is_product(obj) or not obj.get("offers"):
                continue
            offers = obj["offers"]
            if isinstance(offers, list):
                offers = offers[0] if offers else None
            if not isinstance(offers, dict):
                continue
            price = offers.get("price")
            if price is None or price == "" or not _is_numeric(price):
                continue
            currency = offers.get("priceCurrency")
            return f"{currency} {price}" if currency else str(price)
    return None


def _font_size_px(style: dict) -> float:
    m = _PX_RE.search(style.get("font-size") or "")
    return float(m.group(1)) if m else 0.0


def _is_bold(style: dict) -> bool:
    weight = (style.get("font-weight") or "").strip().lower()
    if weight in ("bold", "bolder"):
        return True
    try:
        return int(weight) >= BOLD_WEIGHT
    except ValueError:
        return False


def score_candidate(element: Node, price_text: str, pattern_rank: int) -> float:
    """
    Higher = more likely "the" displayed price.

    score = (6 - rank) + class bonus + font-size bonus + weight bonus
            - word-count penalty - stale (old/was) penalty
    """
    score = len(PRICE_PATTERNS) - pattern_rank

    class_name = element.class_name.lower()
    if "current" in class_name or "sale" in class_name:
        score += CURRENT_CLASS_BONUS
    if "final" in class_name:
        score += FINAL_CLASS_BONUS
    if "regular" in class_name:
        score -= REGULAR_CLASS_PENALTY
    if "old" in class_name or "was" in class_name:
        score -= STALE_CLASS_PENALTY

    style = element.computed_style()
    font_size = _font_size_px(style)
    if font_size > LARGE_FONT_PX:
        score += LARGE_FONT_BONUS
    if font_size > HUGE_FONT_PX:
        score += HUGE_FONT_BONUS
    if _is_bold(style):
        score += BOLD_BONUS

    if len(price_text.split()) > MAX_PRICE_WORDS:
        score -= WORDY_PENALTY

    return score


def first_pattern_match(text: str, patterns: Sequence[PricePattern]) -> Optional[Tuple[PricePattern, str]]:
    for pattern in patterns:
        m = pattern.search(text)
        if m:
            return pattern, m.group(0)
    return None


class PriceResolver:
    """
    Resolve the price of a product container.

    Usage:
        resolver = PriceResolver(document)
        price = resolver.resolve(container)   # never empty
    """

    def __init__(
        self,
        document: Document,
        selectors: Optional[Sequence[str]] = None,
        patterns: Optional[Sequence[PricePattern]] = None,
    ):
        self.document = document
        self.selectors = list(selectors) if selectors is not None else list(PRICE_SELECTORS)
        self.patterns = list(patterns) if patterns is not None else list(PRICE_PATTERNS)

    def resolve(self, container: Node) -> str:
        price, _ = self.resolve_with_tier(container)
        return price

    def resolve_with_tier(self, container: Node) -> Tuple[str, Optional[str]]:
        """Price text and the name of the tier that produced it (None for the sentinel)."""
        tiers = [
            ("structured_data", lambda: price_from_structured_data(self.document.structured_data())),
            ("candidates", lambda: self.best_candidate_price(container)),
            ("container_text", lambda: self.scan_container_text(container)),
            ("document_text", self.scan_document_text),
            ("meta", self.price_from_meta),
        ]
        for name, tier in tiers:
            price = tier()
            if price:
                cleaned = clean_price_text(price)
                logger.debug(f"Price {cleaned!r} from tier {name}")
                return cleaned, name
        logger.debug("No price tier produced a value")
        return PRICE_NOT_FOUND, None

    # ------------------------------------------------------------------
    # Tier 2
    # ------------------------------------------------------------------

    def collect_candidates(self, container: Node) -> Tuple[Optional[str], List[PriceCandidate]]:
        """
        Walk the price selectors over visible elements.

        Returns (direct value, candidates). A machine-readable value attribute
        (data-price / content) short-circuits the scan and is returned as the
        direct value.
        """
        candidates: List[PriceCandidate] = []
        seen = set()
        for selector in self.selectors:
            try:
                elements = container.select(selector)
            except SelectorUnsupportedError as e:
                logger.debug(f"Skipping price selector: {e}")
                continue
            for element in elements:
                if element in seen:
                    continue
                seen.add(element)
                if not element.is_visible():
                    continue

                direct = self._direct_value(element)
                if direct:
                    return direct, candidates

                text = element.text().strip()
                if not text:
                    continue
                match = first_pattern_match(text, self.patterns)
                if match is None:
                    continue
                pattern, price_text = match
                candidates.append(PriceCandidate(
                    text=price_text,
                    element=element,
                    pattern_rank=pattern.rank,
                    score=score_candidate(element, price_text, pattern.rank),
                ))
        return None, candidates

    def best_candidate_price(self, container: Node) -> Optional[str]:
        direct, candidates = self.collect_candidates(container)
        if direct:
            return direct
        best: Optional[PriceCandidate] = None
        for candidate in candidates:
            # strict ">" keeps the first candidate on ties
            if candidate.score > (best.score if best else 0):
                best = candidate
        if best is None:
            return None
        logger.debug(f"Best price candidate {best.text!r} (score {best.score}, rank {best.pattern_rank})")
        return best.text

    @staticmethod
    def _direct_value(element: Node) -> Optional[str]:
        for attr in PRICE_VALUE_ATTRIBUTES:
            raw = element.attribute(attr)
            if raw and raw.strip() and any(ch.isdigit() for ch in raw):
                return raw.strip()
        return None

    # ------------------------------------------------------------------
    # Tiers 3-5
    # ------------------------------------------------------------------

    def scan_container_text(self, container: Node) -> Optional[str]:
        match = first_pattern_match(container.text(), strongest(CONTAINER_TEXT_PATTERNS))
        return match[1] if match else None

    def scan_document_text(self) -> Optional[str]:
        text = self.document.body().text()
        for pattern in strongest(DOCUMENT_TEXT_PATTERNS):
            for raw in pattern.findall(text):
                cleaned = clean_price_text(raw)
                if any(symbol in cleaned for symbol in DOCUMENT_TEXT_SYMBOLS):
                    return cleaned
        return None

    def price_from_meta(self) -> Optional[str]:
        for amount_key, currency_key in PRICE_META_TAGS:
            amount = (self.document.meta_content(amount_key) or "").strip()
            if amount:
                currency = (self.document.meta_content(currency_key) or "").strip()
                return f"{currency} {amount}".strip()
        return None


def resolve_price(container: Node, document: Document) -> str:
    return PriceResolver(document).resolve(container)
