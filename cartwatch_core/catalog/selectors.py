"""
Selector Catalog - Centralized selector definitions for cart detection

Instead of hardcoding selectors throughout the codebase, import them from here.
Lists are ordered: extractors take the first selector that yields a usable
value, so more specific selectors come first.

Usage:
    from cartwatch_core.catalog.selectors import ACTION_SELECTORS, PRICE_SELECTORS
"""

from typing import List


# =============================================================================
# ADD-TO-CART ACTION SELECTORS
# =============================================================================

ACTION_SELECTORS: List[str] = [
    # Class-based selectors
    'button[class*="add-to-cart" i]',
    'button[class*="add-cart" i]',
    'button[class*="addtocart" i]',
    'button[class*="add-to-bag" i]',
    'button[class*="addtobag" i]',
    'button[class*="add-to-basket" i]',
    'button[class*="buy-now" i]',
    'button[class*="buynow" i]',
    'button[class*="purchase" i]',
    'button[class*="add-item" i]',

    # ID-based selectors
    'button[id*="add-to-cart" i]',
    'button[id*="addtocart" i]',
    'button[id*="add-cart" i]',
    'button[id*="buy-now" i]',

    # Data attribute selectors
    'button[data-action*="cart" i]',
    'button[data-action*="add" i]',
    'button[data-testid*="add-to-cart" i]',
    'button[data-testid*="add-cart" i]',
    '[data-add-to-cart]',
    '[data-cart-add]',

    # Input and link elements
    'input[type="submit"][value*="add to cart" i]',
    'input[type="button"][value*="add to cart" i]',
    'a[class*="add-to-cart" i]',
    'a[class*="add-cart" i]',

    # Role-based
    '[role="button"][class*="cart" i]',
    '[role="button"][class*="add" i]',

    # Amazon
    '#add-to-cart-button',
    '[name="submit.add-to-cart"]',

    # Shopify
    '[name="add"]',
    'button[type="submit"][name="add"]',
    '.product-form__submit',

    # WooCommerce
    '.single_add_to_cart_button',
    '.add_to_cart_button',

    # Magento
    '#product-addtocart-button',
    '.tocart',
]


# =============================================================================
# CART COUNT INDICATORS
# =============================================================================

CART_COUNT_SELECTORS: List[str] = [
    '[class*="cart-count" i]',
    '[class*="cart-quantity" i]',
    '[id*="cart-count" i]',
    '[data-cart-count]',
    '.minicart-quantity',
    '.cart-badge',
]


# =============================================================================
# PRODUCT CONTAINER
# =============================================================================

CONTAINER_KEYWORDS: List[str] = ["product", "item", "card", "listing", "detail"]

CONTAINER_MAX_DEPTH = 10


# =============================================================================
# FIELD SELECTORS
# =============================================================================

TITLE_SELECTORS: List[str] = [
    '[itemprop="name"]',
    '[class*="product-title" i]',
    '[class*="product-name" i]',
    '[class*="product_title" i]',
    '[id*="product-title" i]',
    '[data-testid*="product-title" i]',
    '[data-testid*="product-name" i]',
    'h1[class*="product" i]',
    'h1[class*="title" i]',
    'h1',
    'h2',
    '.product-name',
    '#product-name',
    '.title',
]

IMAGE_SELECTORS: List[str] = [
    'img[itemprop="image"]',
    'img[class*="product" i]',
    'img[class*="main" i]',
    'img[alt*="product" i]',
    '[class*="product-image" i] img',
    '[class*="product_image" i] img',
    '[data-testid*="product-image" i] img',
    '.product-image img',
    '#product-image img',
    'img',
]

IMAGE_PLACEHOLDER_MARKERS: List[str] = ["placeholder", "loading", "spinner"]

QUANTITY_SELECTORS: List[str] = [
    'input[name="quantity"]',
    'input[id="quantity"]',
    'input[class*="quantity" i]',
    'input[data-quantity]',
    'select[name="quantity"]',
    'select[class*="quantity" i]',
    '[class*="qty" i] input',
    'input[type="number"]',
]


# =============================================================================
# PRICE SELECTORS (ordered by reliability)
# =============================================================================

PRICE_SELECTORS: List[str] = [
    # Data attributes (most reliable)
    '[data-price]',
    '[data-product-price]',
    '[data-price-amount]',

    # Schema.org
    '[itemprop="price"]',
    '[itemprop="priceCurrency"]',

    # Current / sale prices
    '[class*="current-price" i]',
    '[class*="sale-price" i]',
    '[class*="final-price" i]',
    '[class*="special-price" i]',
    '[class*="offer-price" i]',

    # General price classes without old/was/original/regular modifiers
    '[class*="price" i]:not([class*="old" i]):not([class*="was" i])'
    ':not([class*="original" i]):not([class*="regular" i])',
    'span[class*="price" i]',
    'div[class*="price" i]',
    'p[class*="price" i]',
    'strong[class*="price" i]',

    # ID-based
    '#price',
    '[id*="price" i]',

    # Cost / amount
    '[class*="cost" i]',
    '[class*="amount" i]',
    '[class*="value" i]',

    # Platform-specific
    '.product-price',
    '.price-box',
    '.price-container',
    '.price__amount',
    '.product__price',
    '.gl-price',

    # Price-related attributes
    '[aria-label*="price" i]',
    '[title*="price" i]',
]

# Attributes carrying a machine-readable price on the element itself
PRICE_VALUE_ATTRIBUTES: List[str] = ["data-price", "content"]

# Page-level meta tags: (amount, currency)
PRICE_META_TAGS = [
    ("product:price:amount", "product:price:currency"),
    ("og:price:amount", "og:price:currency"),
]
