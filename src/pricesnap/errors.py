# -*- coding: utf-8 -*-
"""
src/pricesnap/errors.py

Exception taxonomy for the capture-detect-convert pipeline.

Every stage raises one of these; the session controller catches them at its
boundary and turns them into a failed state with a readable reason.
`Cancelled` is the odd one out: it marks work that was abandoned on purpose
and is never shown to the user.
"""

from enum import Enum


class PriceSnapError(Exception):
    """Base application error."""
    pass


class MediaAcquisitionError(PriceSnapError):
    """The camera could not be opened or stopped delivering frames."""
    pass


class RecognitionError(PriceSnapError):
    """The OCR engine could not be initialised or failed mid-call."""
    pass


class NoPriceFoundError(PriceSnapError):
    """OCR ran, but nothing usable as a price could be traced to a token."""

    def __init__(self, message: str = "no price found"):
        super().__init__(message)


class ConversionErrorReason(Enum):
    NOT_FOUND = "not_found"
    NETWORK = "network"
    MALFORMED_RESPONSE = "malformed_response"


_CONVERSION_MESSAGES = {
    ConversionErrorReason.NOT_FOUND: "Currency not found in response",
    ConversionErrorReason.NETWORK: "Could not reach the conversion service",
    ConversionErrorReason.MALFORMED_RESPONSE: "Invalid API response format",
}


class ConversionError(PriceSnapError):
    """The rate service did not produce a usable converted amount."""

    def __init__(self, reason: ConversionErrorReason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        message = _CONVERSION_MESSAGES[reason]
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class Cancelled(PriceSnapError):
    """The operation was abandoned through its cancellation token."""
    pass
