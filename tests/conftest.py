"""Pytest configuration and shared fixtures for PriceSnap.

Provides synthetic frames and fake collaborators (camera, OCR engine,
recognizer, rate gateway) so the pipeline and the session controller can be
tested without hardware, Tesseract or network access.
"""
import asyncio
import logging
import threading
from typing import List, Optional, Sequence
from unittest.mock import Mock

import numpy as np
import pytest

from pricesnap.core.cancellation import CancellationToken
from pricesnap.core.types import (
    ConversionResult,
    Frame,
    PixelBox,
    RecognitionResult,
    Token,
)
from pricesnap.errors import MediaAcquisitionError


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)


def make_frame(width: int = 64, height: int = 48, rgb=(200, 200, 200), alpha: int = 255) -> Frame:
    """Builds a solid-color RGBA frame."""
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[:, :, 0] = rgb[0]
    pixels[:, :, 1] = rgb[1]
    pixels[:, :, 2] = rgb[2]
    pixels[:, :, 3] = alpha
    return Frame(pixels)


def price_result(text: str = "Total: $12.50 due") -> RecognitionResult:
    """A recognition result whose tokens are the whitespace-split words of `text`."""
    tokens = []
    x = 10
    for word in text.split():
        tokens.append(Token(text=word, box=PixelBox(x, 20, x + 10 * len(word), 36)))
        x += 10 * len(word) + 6
    return RecognitionResult(text=text, tokens=tuple(tokens))


class FakeMedia:
    """Camera stand-in counting opens, reads and releases."""

    def __init__(self, frame: Optional[Frame] = None, fail_open: bool = False):
        self.frame = frame or make_frame()
        self.fail_open = fail_open
        self.open_calls = 0
        self.read_calls = 0
        self.release_calls = 0

    def open(self):
        self.open_calls += 1
        if self.fail_open:
            raise MediaAcquisitionError("Failed to open camera 0")

    def read_frame(self) -> Frame:
        self.read_calls += 1
        return self.frame

    def release(self):
        self.release_calls += 1


class FakeRecognizer:
    """
    Async recognizer returning queued results.

    When `gate` is set, each call waits on it (through the cancellation
    token) before answering, which lets tests cancel mid-flight.
    """

    def __init__(self, results: Sequence[RecognitionResult] = (), gate: Optional[asyncio.Event] = None):
        self.results: List[RecognitionResult] = list(results) or [price_result()]
        self.gate = gate
        self.calls = 0
        self.started = asyncio.Event()

    async def recognize(self, frame, region_of_interest=None, cancel: Optional[CancellationToken] = None):
        self.calls += 1
        index = min(self.calls - 1, len(self.results) - 1)
        result = self.results[index]
        self.started.set()
        if self.gate is not None:
            cancel = cancel or CancellationToken()
            await cancel.run(self.gate.wait())
        return result


class FakeGateway:
    """Async gateway returning a fixed result or raising a fixed error."""

    def __init__(self, result: Optional[ConversionResult] = None, error: Optional[Exception] = None,
                 gate: Optional[asyncio.Event] = None):
        self.result = result or ConversionResult(display_amount="EUR 11.48", currency="EUR", value=11.48)
        self.error = error
        self.gate = gate
        self.requests = []
        self.started = asyncio.Event()

    async def convert(self, request, cancel: Optional[CancellationToken] = None):
        self.requests.append(request)
        self.started.set()
        if self.gate is not None:
            cancel = cancel or CancellationToken()
            await cancel.run(self.gate.wait())
        if self.error is not None:
            raise self.error
        return self.result


class FakeEngine:
    """OCR engine stand-in recording its lifecycle."""

    def __init__(self, text: str = "$12.50", tokens: Optional[List[Token]] = None,
                 fail_load: bool = False, fail_read: bool = False,
                 block: Optional[threading.Event] = None):
        self.text = text
        self.tokens = tokens if tokens is not None else [Token("$12.50", PixelBox(5, 4, 45, 16))]
        self.fail_load = fail_load
        self.fail_read = fail_read
        self.block = block
        self.loaded = False
        self.closed = False
        self.images = []

    def load(self):
        if self.fail_load:
            raise RuntimeError("tesseract is not installed")
        self.loaded = True

    def read(self, image):
        self.images.append(image)
        if self.block is not None:
            self.block.wait(5)
        if self.fail_read:
            raise RuntimeError("engine crashed")
        return self.text, list(self.tokens)

    def close(self):
        self.closed = True


@pytest.fixture
def frame():
    """A 64x48 light-gray RGBA frame."""
    return make_frame()


@pytest.fixture
def fake_media():
    return FakeMedia()


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def mock_http_session():
    """A requests.Session stand-in whose get() returns a 200 JSON response."""
    session = Mock()
    response = Mock()
    response.status_code = 200
    response.raise_for_status.return_value = None
    response.json.return_value = {"amount": 12.5, "base": "USD", "rates": {"EUR": 11.48}}
    session.get.return_value = response
    return session
