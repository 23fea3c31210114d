# -*- coding: utf-8 -*-
"""
src/pricesnap/services/conversion_gateway.py

Client for the currency-rate service.

The service (Frankfurter-style API) performs the conversion itself: the
value under `rates[<to>]` is the converted total for the requested amount,
not a multiplier.
"""

import asyncio
import logging
import numbers
from typing import Any, Optional

import requests

from ..core.cancellation import CancellationToken
from ..core.types import ConversionRequest, ConversionResult
from ..errors import Cancelled, ConversionError, ConversionErrorReason

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.frankfurter.app/latest"
DEFAULT_TIMEOUT = 10.0


def format_display_amount(currency: str, value: float) -> str:
    return f"{currency} {value:.2f}"


class ConversionGateway:
    """Issues one rate-service request per conversion."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url
        self.timeout = timeout
        self.session = session

    async def convert(
        self,
        request: ConversionRequest,
        cancel: Optional[CancellationToken] = None,
    ) -> ConversionResult:
        """
        Converts `request.amount` from one currency to another.

        Args:
            request (ConversionRequest): Amount as a plain decimal string and
                                         three-letter currency codes.
            cancel (Optional[CancellationToken]): Abandons the call when fired.

        Returns:
            ConversionResult: The converted amount, rounded for display.

        Raises:
            ConversionError: NOT_FOUND, NETWORK or MALFORMED_RESPONSE.
            Cancelled: If `cancel` fires before the response arrives.
        """
        cancel = cancel or CancellationToken("convert")
        payload = await cancel.run(asyncio.to_thread(self._fetch, request))
        cancel.raise_if_cancelled()
        return self._parse(payload, request.to_currency)

    def _fetch(self, request: ConversionRequest) -> Any:
        params = {
            "from": request.from_currency.upper(),
            "to": request.to_currency.upper(),
            "amount": request.amount,
        }
        logger.info(f"Requesting conversion of {request.amount} {params['from']} -> {params['to']}")
        http = self.session or requests
        try:
            response = http.get(self.api_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Conversion request failed: {e}")
            raise ConversionError(ConversionErrorReason.NETWORK, str(e)) from e

        if response.status_code == 404:
            raise ConversionError(ConversionErrorReason.NOT_FOUND, f"HTTP 404 for {params['to']}")
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            logger.error(f"Conversion service returned an error: {e}")
            raise ConversionError(ConversionErrorReason.NETWORK, str(e)) from e

        try:
            return response.json()
        except ValueError as e:
            raise ConversionError(ConversionErrorReason.MALFORMED_RESPONSE, "response is not JSON") from e

    @staticmethod
    def _parse(payload: Any, to_currency: str) -> ConversionResult:
        to_currency = to_currency.upper()
        if not isinstance(payload, dict) or not isinstance(payload.get("rates"), dict):
            raise ConversionError(ConversionErrorReason.MALFORMED_RESPONSE, "missing 'rates' object")

        rates = payload["rates"]
        if to_currency not in rates:
            raise ConversionError(ConversionErrorReason.NOT_FOUND, to_currency)

        value = rates[to_currency]
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise ConversionError(
                ConversionErrorReason.MALFORMED_RESPONSE,
                f"rate for {to_currency} is not a number: {value!r}",
            )

        result = ConversionResult(
            display_amount=format_display_amount(to_currency, float(value)),
            currency=to_currency,
            value=round(float(value), 2),
        )
        logger.info(f"Converted amount: {result.display_amount}")
        return result
