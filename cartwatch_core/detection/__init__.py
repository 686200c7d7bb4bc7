"""
Detection - action classification and container localization.
"""

from .classifier import ActionClassifier, ACTION_SEARCH_DEPTH
from .container import locate_container, is_product_container

__all__ = [
    'ActionClassifier',
    'ACTION_SEARCH_DEPTH',
    'locate_container',
    'is_product_container',
]
