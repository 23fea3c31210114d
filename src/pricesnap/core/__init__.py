# -*- coding: utf-8 -*-
"""
The Core Processing Package for PriceSnap.

Display-free pipeline stages, in the order a capture cycle runs them:
- `image_processor`: grayscale, contrast and threshold (FramePreprocessor).
- `text_recognizer`: OCR over the region of interest (TextRecognizer).
- `price_extractor`: first price match traced to a token (PriceExtractor).
- `coordinate_mapper`: frame pixels to widget pixels (CoordinateMapper).
"""

from .cancellation import CancellationToken
from .coordinate_mapper import CoordinateMapper
from .image_processor import FramePreprocessor
from .price_extractor import PriceExtractor
from .text_recognizer import TextRecognizer

__all__ = [
    "CancellationToken",
    "CoordinateMapper",
    "FramePreprocessor",
    "PriceExtractor",
    "TextRecognizer",
]
