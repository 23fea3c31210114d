# -*- coding: utf-8 -*-
"""
src/pricesnap/core/types.py

Value types that flow through a single capture cycle.

A cycle produces, in order: a `Frame` from the camera, a `PreprocessedFrame`
for OCR, a `RecognitionResult` of tokens, and at most one `DetectedPrice`.
Boxes live in frame pixel space (`PixelBox`) until the display layer maps
them into widget space (`DisplayBox`).
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class Dims:
    """Width and height of a frame or of the rendered preview widget."""
    width: float
    height: float


@dataclass(frozen=True)
class PixelBox:
    """
    Axis-aligned rectangle in frame pixel coordinates.

    Raises:
        ValueError: If the corners are not ordered (x0 <= x1, y0 <= y1).
    """
    x0: float
    y0: float
    x1: float
    y1: float

    def __post_init__(self):
        if self.x0 > self.x1 or self.y0 > self.y1:
            raise ValueError(
                f"PixelBox corners out of order: ({self.x0}, {self.y0}, {self.x1}, {self.y1})"
            )

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    def offset(self, dx: float, dy: float) -> "PixelBox":
        return PixelBox(self.x0 + dx, self.y0 + dy, self.x1 + dx, self.y1 + dy)


@dataclass(frozen=True)
class DisplayBox:
    """A PixelBox rescaled into the coordinate space of the preview widget."""
    x: float
    y: float
    width: float
    height: float

    def as_pixel_box(self) -> PixelBox:
        return PixelBox(self.x, self.y, self.x + self.width, self.y + self.height)


@dataclass(frozen=True, eq=False)
class Frame:
    """
    An RGBA raster captured once per cycle.

    The pixel array has shape (height, width, 4) and dtype uint8. It is made
    read-only on construction so no stage can modify a frame another stage
    still holds.
    """
    pixels: np.ndarray

    def __post_init__(self):
        pixels = self.pixels
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected an RGBA array of shape (h, w, 4), got {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {pixels.dtype}")
        pixels.setflags(write=False)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def dims(self) -> Dims:
        return Dims(self.width, self.height)


class PreprocessedFrame(Frame):
    """A binarized frame with the same dimensions as its source."""


@dataclass(frozen=True)
class Token:
    text: str
    box: PixelBox
    confidence: Optional[float] = None


@dataclass(frozen=True)
class RecognitionResult:
    text: str
    tokens: Tuple[Token, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DetectedPrice:
    """
    The single price chosen from a RecognitionResult.

    Attributes:
        raw_match (str): The substring matched in the recognized text.
        normalized_amount (str): Digits with at most one decimal point.
        source_box (PixelBox): Box of the token the match was traced to.
        currency_hint (Optional[str]): ISO code for a symbol in the match.
    """
    raw_match: str
    normalized_amount: str
    source_box: PixelBox
    currency_hint: Optional[str] = None


@dataclass(frozen=True)
class ConversionRequest:
    amount: str
    from_currency: str
    to_currency: str


@dataclass(frozen=True)
class ConversionResult:
    display_amount: str
    currency: str
    value: float
