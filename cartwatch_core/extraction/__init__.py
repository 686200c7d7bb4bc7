"""
Extraction - field extractors, price resolver and product extractor.
"""

from .fields import (
    extract_title,
    extract_image,
    extract_quantity,
    clean_page_title,
    parse_quantity,
    is_acceptable_title,
)
from .price import (
    PriceResolver,
    resolve_price,
    clean_price_text,
    score_candidate,
    price_from_structured_data,
)
from .extractor import ProductExtractor, is_valid_product

__all__ = [
    'extract_title',
    'extract_image',
    'extract_quantity',
    'clean_page_title',
    'parse_quantity',
    'is_acceptable_title',
    'PriceResolver',
    'resolve_price',
    'clean_price_text',
    'score_candidate',
    'price_from_structured_data',
    'ProductExtractor',
    'is_valid_product',
]
