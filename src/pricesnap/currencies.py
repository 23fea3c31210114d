# -*- coding: utf-8 -*-
"""
src/pricesnap/currencies.py

The currencies offered in the pickers, and the symbols the price pattern
recognizes.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Currency:
    code: str
    label: str


CURRENCIES: List[Currency] = [
    Currency("USD", "US Dollar"),
    Currency("EUR", "Euro"),
    Currency("GBP", "British Pound"),
    Currency("JPY", "Japanese Yen"),
    Currency("AUD", "Australian Dollar"),
    Currency("PHP", "Philippine Peso"),
]

DEFAULT_FROM_CURRENCY = "PHP"
DEFAULT_TO_CURRENCY = "USD"

# '$' is ambiguous (AUD also uses it); USD is the hint.
SYMBOL_TO_CODE: Dict[str, str] = {
    "$": "USD",
    "€": "EUR",
    "£": "GBP",
    "¥": "JPY",
    "₱": "PHP",
}


def find_currency(code: str) -> Optional[Currency]:
    code = code.upper()
    return next((c for c in CURRENCIES if c.code == code), None)


def is_supported(code: str) -> bool:
    return find_currency(code) is not None
