# -*- coding: utf-8 -*-
"""
src/pricesnap/session.py

The capture session controller.

`CaptureSessionController` owns the camera and the session state machine and
runs one capture cycle at a time:

    Idle -> Capturing -> Detecting -> AwaitingConfirmation
         -> Converting -> ShowingResult -> Idle

with `Failed` reachable from detection and conversion, and `Disposed` as the
terminal state. Each cycle (and each conversion) gets its own cancellation
token; cancelling or resetting fires the token so a late OCR or HTTP
response is dropped instead of overwriting newer state. All stage errors stop
here and become a `Failed` state with a readable reason.

The display layer never touches pipeline internals: it calls the public
operations and renders the `SessionSnapshot` published after every
transition.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .core.cancellation import CancellationToken
from .core.coordinate_mapper import CoordinateMapper
from .core.image_processor import FramePreprocessor
from .core.price_extractor import PriceExtractor
from .core.text_recognizer import TextRecognizer
from .core.types import (
    ConversionRequest,
    ConversionResult,
    DetectedPrice,
    Dims,
    DisplayBox,
    Frame,
    PreprocessedFrame,
    RecognitionResult,
)
from .currencies import DEFAULT_FROM_CURRENCY, DEFAULT_TO_CURRENCY, is_supported
from .errors import (
    Cancelled,
    ConversionError,
    MediaAcquisitionError,
    NoPriceFoundError,
    RecognitionError,
)
from .services.conversion_gateway import ConversionGateway

logger = logging.getLogger(__name__)

NO_PRICE_FOUND = "no price found"
PROCESSING_ERROR = "Error processing image. Please try again."
CONVERSION_FAILED = "Conversion failed. Please try again."


class SessionState(Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    DETECTING = "detecting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONVERTING = "converting"
    SHOWING_RESULT = "showing_result"
    FAILED = "failed"
    DISPOSED = "disposed"


# States with pipeline work in flight.
BUSY_STATES = (SessionState.CAPTURING, SessionState.DETECTING, SessionState.CONVERTING)


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the controller handed to listeners."""
    state: SessionState
    reason: Optional[str] = None
    detected_price: Optional[DetectedPrice] = None
    source_dims: Optional[Dims] = None
    conversion_result: Optional[ConversionResult] = None
    from_currency: str = DEFAULT_FROM_CURRENCY
    to_currency: str = DEFAULT_TO_CURRENCY

    def display_box(self, target_dims: Dims) -> Optional[DisplayBox]:
        """Maps the detected box into `target_dims`; None if nothing is detected."""
        if self.detected_price is None or self.source_dims is None:
            return None
        return CoordinateMapper.map(self.detected_price.source_box, self.source_dims, target_dims)


SessionListener = Callable[[SessionSnapshot], None]


class CaptureSessionController:
    """
    Orchestrates capture, detection, confirmation and conversion.

    All methods must be called from the event loop thread the controller
    runs on.

    Args:
        media: Camera-like object with `open()`, `read_frame() -> Frame` and
               `release()`. Owned by the controller from `start()` until
               `dispose()`.
        preprocessor, recognizer, extractor, gateway: Pipeline stages;
               defaults are built when omitted.
        from_currency, to_currency: Initial currency pair.
    """

    def __init__(
        self,
        media,
        preprocessor: Optional[FramePreprocessor] = None,
        recognizer: Optional[TextRecognizer] = None,
        extractor: Optional[PriceExtractor] = None,
        gateway: Optional[ConversionGateway] = None,
        from_currency: str = DEFAULT_FROM_CURRENCY,
        to_currency: str = DEFAULT_TO_CURRENCY,
    ):
        self._media = media
        self._preprocessor = preprocessor or FramePreprocessor()
        self._recognizer = recognizer or TextRecognizer()
        self._extractor = extractor or PriceExtractor()
        self._gateway = gateway or ConversionGateway()
        self.from_currency = from_currency.upper()
        self.to_currency = to_currency.upper()

        self._state = SessionState.IDLE
        self._reason: Optional[str] = None
        self._token: Optional[CancellationToken] = None
        self._cycle_ids = itertools.count(1)
        self._listeners: List[SessionListener] = []
        self._media_acquired = False

        # Per-cycle data; cleared on every return to Idle or Failed.
        self._frame: Optional[Frame] = None
        self._preprocessed: Optional[PreprocessedFrame] = None
        self._recognition: Optional[RecognitionResult] = None
        self._detected: Optional[DetectedPrice] = None
        self._source_dims: Optional[Dims] = None
        self._result: Optional[ConversionResult] = None

    # --- Read-only accessors ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def failure_reason(self) -> Optional[str]:
        return self._reason

    @property
    def detected_price(self) -> Optional[DetectedPrice]:
        return self._detected

    @property
    def conversion_result(self) -> Optional[ConversionResult]:
        return self._result

    @property
    def has_cycle_data(self) -> bool:
        return any(
            item is not None
            for item in (
                self._frame,
                self._preprocessed,
                self._recognition,
                self._detected,
                self._source_dims,
                self._result,
            )
        )

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self._state,
            reason=self._reason,
            detected_price=self._detected,
            source_dims=self._source_dims,
            conversion_result=self._result,
            from_currency=self.from_currency,
            to_currency=self.to_currency,
        )

    def display_box(self, target_dims: Dims) -> Optional[DisplayBox]:
        return self.snapshot().display_box(target_dims)

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def set_currencies(self, from_currency: str, to_currency: str) -> None:
        """
        Selects the currency pair used by the next `confirm()`.

        Raises:
            ValueError: If either code is not offered.
        """
        for code in (from_currency, to_currency):
            if not is_supported(code):
                raise ValueError(f"Unsupported currency: {code}")
        self.from_currency = from_currency.upper()
        self.to_currency = to_currency.upper()
        logger.debug(f"Currency pair set to {self.from_currency} -> {self.to_currency}")

    # --- Lifecycle ---

    async def start(self) -> bool:
        """
        Acquires the camera. On failure the session moves to Failed.

        Returns:
            bool: True if the camera is ready.
        """
        if self._state is SessionState.DISPOSED:
            logger.warning("start() called on a disposed session.")
            return False
        if self._media_acquired:
            return True
        try:
            await asyncio.to_thread(self._media.open)
        except MediaAcquisitionError as e:
            logger.error(f"Error accessing camera: {e}")
            self._enter_failed(str(e))
            return False
        self._media_acquired = True
        return True

    def dispose(self) -> None:
        """Cancels outstanding work and releases the camera. Terminal."""
        if self._state is SessionState.DISPOSED:
            return
        self._cancel_outstanding("disposed")
        self._clear_cycle()
        self._reason = None
        try:
            self._media.release()
        finally:
            self._media_acquired = False
            self._transition(SessionState.DISPOSED)
            self._listeners.clear()

    async def __aenter__(self) -> "CaptureSessionController":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.dispose()
        return False

    # --- User actions ---

    async def capture(self) -> bool:
        """
        Runs one capture-and-detect cycle.

        A no-op unless the session is Idle, so two quick calls run the
        pipeline once.

        Returns:
            bool: False if the call was ignored.
        """
        if self._state is not SessionState.IDLE:
            logger.debug(f"capture() ignored in state {self._state.value}")
            return False

        self._cancel_outstanding("new capture")
        token = CancellationToken(f"capture-{next(self._cycle_ids)}")
        self._token = token
        self._transition(SessionState.CAPTURING)

        try:
            frame = await token.run(asyncio.to_thread(self._media.read_frame))
            self._ensure_current(token)
            self._frame = frame
            self._source_dims = frame.dims
            self._transition(SessionState.DETECTING)

            preprocessed = await token.run(asyncio.to_thread(self._preprocessor.preprocess, frame))
            self._ensure_current(token)
            self._preprocessed = preprocessed

            recognition = await self._recognizer.recognize(preprocessed, cancel=token)
            self._ensure_current(token)
            self._recognition = recognition

            detected = self._extractor.extract(recognition)
            if detected is None:
                raise NoPriceFoundError(NO_PRICE_FOUND)
            self._detected = detected
            self._transition(SessionState.AWAITING_CONFIRMATION)
        except Cancelled as e:
            logger.debug(f"Capture cycle {token.label} cancelled: {e}")
        except RecognitionError as e:
            logger.warning(f"Recognition failed, treating as no price: {e}")
            self._fail_cycle(token, NO_PRICE_FOUND)
        except (NoPriceFoundError, MediaAcquisitionError) as e:
            self._fail_cycle(token, str(e))
        except Exception as e:
            logger.exception(f"Error processing image: {e}")
            self._fail_cycle(token, PROCESSING_ERROR)
        return True

    async def confirm(self, from_currency: Optional[str] = None, to_currency: Optional[str] = None) -> bool:
        """
        Converts the detected amount. Only valid in AwaitingConfirmation.

        Args:
            from_currency, to_currency: Optional override of the selected pair.

        Returns:
            bool: False if the call was ignored.
        """
        if self._state is not SessionState.AWAITING_CONFIRMATION or self._detected is None:
            logger.warning(f"confirm() ignored in state {self._state.value}")
            return False
        if from_currency or to_currency:
            self.set_currencies(from_currency or self.from_currency, to_currency or self.to_currency)

        self._cancel_outstanding("confirm")
        token = CancellationToken(f"convert-{next(self._cycle_ids)}")
        self._token = token
        request = ConversionRequest(
            amount=self._detected.normalized_amount,
            from_currency=self.from_currency,
            to_currency=self.to_currency,
        )
        self._transition(SessionState.CONVERTING)

        try:
            result = await self._gateway.convert(request, cancel=token)
            self._ensure_current(token)
            self._result = result
            self._transition(SessionState.SHOWING_RESULT)
        except Cancelled as e:
            logger.debug(f"Conversion {token.label} cancelled: {e}")
        except ConversionError as e:
            logger.error(f"Error converting currency: {e}")
            self._fail_cycle(token, str(e))
        except Exception as e:
            logger.exception(f"Unexpected conversion error: {e}")
            self._fail_cycle(token, CONVERSION_FAILED)
        return True

    def cancel(self) -> bool:
        """Declines the detected price, or aborts work in flight, back to Idle."""
        if self._state is SessionState.AWAITING_CONFIRMATION or self._state in BUSY_STATES:
            self._enter_idle("cancelled")
            return True
        logger.warning(f"cancel() ignored in state {self._state.value}")
        return False

    def close(self) -> bool:
        """Dismisses the conversion result."""
        if self._state is SessionState.SHOWING_RESULT:
            self._enter_idle("closed")
            return True
        logger.warning(f"close() ignored in state {self._state.value}")
        return False

    def retry(self) -> bool:
        """Leaves the Failed state."""
        if self._state is SessionState.FAILED:
            self._enter_idle("retry")
            return True
        logger.warning(f"retry() ignored in state {self._state.value}")
        return False

    def reset(self) -> bool:
        """Returns to Idle from any live state, dropping everything in flight."""
        if self._state is SessionState.DISPOSED:
            logger.warning("reset() ignored on a disposed session.")
            return False
        self._enter_idle("reset")
        return True

    # --- Internals ---

    def _ensure_current(self, token: CancellationToken) -> None:
        if token is not self._token:
            raise Cancelled(f"{token.label} superseded")
        token.raise_if_cancelled()

    def _cancel_outstanding(self, reason: str) -> None:
        if self._token is not None:
            self._token.cancel(reason)
            self._token = None

    def _clear_cycle(self) -> None:
        self._frame = None
        self._preprocessed = None
        self._recognition = None
        self._detected = None
        self._source_dims = None
        self._result = None

    def _enter_idle(self, reason: str) -> None:
        self._cancel_outstanding(reason)
        self._clear_cycle()
        self._reason = None
        self._transition(SessionState.IDLE)

    def _enter_failed(self, reason: str) -> None:
        self._cancel_outstanding("failed")
        self._clear_cycle()
        self._reason = reason
        self._transition(SessionState.FAILED)

    def _fail_cycle(self, token: CancellationToken, reason: str) -> None:
        if token is not self._token or token.cancelled:
            logger.debug(f"Dropping failure from stale {token.label}: {reason}")
            return
        self._enter_failed(reason)

    def _transition(self, state: SessionState) -> None:
        previous = self._state
        self._state = state
        if state is SessionState.FAILED:
            logger.info(f"Session {previous.value} -> {state.value} ({self._reason})")
        else:
            logger.info(f"Session {previous.value} -> {state.value}")

        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Error in session listener: {e}", exc_info=True)
