"""
Currency Patterns - ranked price regular expressions

The list index is the priority: rank 0 is the most specific pattern.
Tiers of the price resolver slice this list (``strongest(n)``) instead of
encoding the ranking in control flow.
"""

import re
from dataclasses import dataclass
from typing import List, Pattern

CURRENCY_SYMBOLS = "$£€¥₪₹₽¢"

CURRENCY_CODES = (
    "USD", "EUR", "GBP", "ILS", "JPY", "CNY", "INR", "RUB",
    "BRL", "CAD", "AUD", "CHF", "NZD", "ZAR",
)

# Symbols accepted by the whole-document scan
DOCUMENT_TEXT_SYMBOLS = ("$", "€", "£", "₪", "₹")

_CODES = "|".join(CURRENCY_CODES)


@dataclass(frozen=True)
class PricePattern:
    """One ranked price pattern."""
    rank: int
    name: str
    regex: Pattern

    def search(self, text: str):
        return self.regex.search(text or "")

    def findall(self, text: str) -> List[str]:
        return [m.group(0) for m in self.regex.finditer(text or "")]


PRICE_PATTERNS: List[PricePattern] = [
    # $99.99, €99,99, £99.99, ₪99.99
    PricePattern(0, "symbol_prefix", re.compile(r"[$£€¥₪₹₽¢]\s*[\d,]+\.?\d*")),
    # 99.99$, 99€, 99₪
    PricePattern(1, "symbol_suffix", re.compile(r"[\d,]+\.?\d*\s*[$£€¥₪₹₽]")),
    # 99.99 USD, 99 ILS
    PricePattern(2, "code_suffix", re.compile(rf"[\d,]+\.?\d*\s*(?:{_CODES})", re.I)),
    # USD 99.99, ILS 99
    PricePattern(3, "code_prefix", re.compile(rf"(?:{_CODES})\s*[\d,]+\.?\d*", re.I)),
    # 99.99, 99,99, 1,299.99
    PricePattern(4, "decimal_pair", re.compile(r"[\d,]+[.,]\d{2}(?!\d)")),
    # 99, 199, 1299
    PricePattern(5, "bare_number", re.compile(r"\b\d{2,5}\b")),
]


def strongest(n: int) -> List[PricePattern]:
    """The ``n`` highest-priority patterns."""
    return PRICE_PATTERNS[:n]
