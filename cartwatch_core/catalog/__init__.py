"""
Pattern Catalog - static selectors, keywords and currency patterns.
"""

from .selectors import (
    ACTION_SELECTORS,
    CART_COUNT_SELECTORS,
    CONTAINER_KEYWORDS,
    CONTAINER_MAX_DEPTH,
    TITLE_SELECTORS,
    IMAGE_SELECTORS,
    IMAGE_PLACEHOLDER_MARKERS,
    QUANTITY_SELECTORS,
    PRICE_SELECTORS,
    PRICE_VALUE_ATTRIBUTES,
    PRICE_META_TAGS,
)
from .keywords import load_keywords, all_keywords, SUPPORTED_LOCALES
from .currency import (
    PricePattern,
    PRICE_PATTERNS,
    CURRENCY_SYMBOLS,
    CURRENCY_CODES,
    DOCUMENT_TEXT_SYMBOLS,
    strongest,
)

__all__ = [
    'ACTION_SELECTORS',
    'CART_COUNT_SELECTORS',
    'CONTAINER_KEYWORDS',
    'CONTAINER_MAX_DEPTH',
    'TITLE_SELECTORS',
    'IMAGE_SELECTORS',
    'IMAGE_PLACEHOLDER_MARKERS',
    'QUANTITY_SELECTORS',
    'PRICE_SELECTORS',
    'PRICE_VALUE_ATTRIBUTES',
    'PRICE_META_TAGS',
    'load_keywords',
    'all_keywords',
    'SUPPORTED_LOCALES',
    'PricePattern',
    'PRICE_PATTERNS',
    'CURRENCY_SYMBOLS',
    'CURRENCY_CODES',
    'DOCUMENT_TEXT_SYMBOLS',
    'strongest',
]
