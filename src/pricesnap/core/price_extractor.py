# -*- coding: utf-8 -*-
"""
src/pricesnap/core/price_extractor.py

Finds a price in recognized text and traces it back to a token box.

Extraction is two-phase: first the price pattern is searched in the full
recognized text, then the match is associated with the token it came from.
A match that cannot be traced to a token is discarded, since the
confirmation overlay needs a box. The first match in scan order wins; there
is no scoring, so receipts with several numbers may pick the wrong one.
"""

import logging
import re
from typing import Optional

from ..currencies import SYMBOL_TO_CODE
from .types import DetectedPrice, RecognitionResult, Token

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS = "".join(SYMBOL_TO_CODE)

_NUMBER = r"\d{1,3}(?:,\d{3})*(?:\.\d{2})?"
_SYMBOL = f"[{re.escape(CURRENCY_SYMBOLS)}]"

# Symbol-then-number or number-then-symbol; symbol and grouping optional.
PRICE_PATTERN = re.compile(
    f"(?:{_SYMBOL}?\\s*{_NUMBER})|(?:{_NUMBER}\\s*{_SYMBOL}?)"
)

_SEPARATORS = re.compile(r"[,\s]")
_NON_NUMERIC = re.compile(r"[^\d.]")
_WELL_FORMED = re.compile(r"\d+(?:\.\d+)?")


def normalize_amount(raw: str) -> Optional[str]:
    """
    Strips everything but digits and the decimal point.

    Returns:
        The numeric string, or None if nothing numeric is left or it has more
        than one decimal point.
    """
    cleaned = _NON_NUMERIC.sub("", raw)
    if not _WELL_FORMED.fullmatch(cleaned):
        return None
    return cleaned


class PriceExtractor:
    """Picks the first price-like match and the token that carries it."""

    def __init__(self, pattern: re.Pattern = PRICE_PATTERN):
        self.pattern = pattern

    def extract(self, result: RecognitionResult) -> Optional[DetectedPrice]:
        """
        Extracts a DetectedPrice from a RecognitionResult.

        Args:
            result (RecognitionResult): OCR output for one frame.

        Returns:
            Optional[DetectedPrice]: The price, or None for a failed detection.
        """
        match = self.pattern.search(result.text)
        if match is None:
            logger.info("No price pattern in recognized text.")
            return None

        raw_match = match.group(0)
        token = self._find_token(raw_match, result)
        if token is None:
            logger.warning(f"Matched '{raw_match}' but could not trace it to any token.")
            return None

        amount = normalize_amount(raw_match)
        if amount is None:
            logger.warning(f"Matched '{raw_match}' but it does not normalize to a number.")
            return None

        hint = next((SYMBOL_TO_CODE[ch] for ch in raw_match if ch in SYMBOL_TO_CODE), None)
        logger.info(f"Detected price '{raw_match}' -> {amount} (hint: {hint})")
        return DetectedPrice(
            raw_match=raw_match,
            normalized_amount=amount,
            source_box=token.box,
            currency_hint=hint,
        )

    @staticmethod
    def _find_token(raw_match: str, result: RecognitionResult) -> Optional[Token]:
        # OCR may split or group a number differently in tokens than in the
        # joined text, hence the separator-insensitive second test.
        stripped_match = _SEPARATORS.sub("", raw_match)
        for token in result.tokens:
            if raw_match in token.text:
                return token
            if stripped_match and stripped_match in _SEPARATORS.sub("", token.text):
                return token
        return None
