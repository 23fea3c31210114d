# -*- coding: utf-8 -*-
"""
src/pricesnap/core/text_recognizer.py

OCR over the central region of a preprocessed frame.

Two engines are supported: Tesseract (through pytesseract, the default) and
EasyOCR. Whichever is used, a fresh engine is built, loaded and closed for
every call so that no engine state crosses capture sessions. The blocking OCR
work runs in a worker thread and is raced against the cycle's cancellation
token.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
import pytesseract

from ..errors import Cancelled, RecognitionError
from .cancellation import CancellationToken
from .types import PixelBox, PreprocessedFrame, RecognitionResult, Token

logger = logging.getLogger(__name__)

# --- Module-level Configuration ---

# Characters the engine may emit: digits, separators and currency symbols.
CHAR_WHITELIST = "0123456789.,₱$€£¥"

# Tesseract page segmentation: a single uniform block of text.
PSM_SINGLE_BLOCK = 6

# Tesseract engine mode: LSTM neural net only.
OEM_LSTM_ONLY = 1

# Extra Tesseract variables tuned for short numeric labels.
TESSERACT_VARIABLES = {
    "preserve_interword_spaces": "1",
    "textord_heavy_nr": "1",
    "textord_min_linesize": "2.5",
}


@dataclass(frozen=True)
class RegionFractions:
    """Region of interest expressed as fractions of the frame size."""
    left: float = 0.2
    top: float = 0.3
    width: float = 0.6
    height: float = 0.4


def default_region_of_interest(
    frame_width: int,
    frame_height: int,
    fractions: RegionFractions = RegionFractions(),
) -> PixelBox:
    """
    Computes the centered region the user is expected to frame the price in.

    Args:
        frame_width (int): Width of the frame in pixels.
        frame_height (int): Height of the frame in pixels.
        fractions (RegionFractions): Placement of the region.

    Returns:
        PixelBox: The region in frame pixel coordinates.
    """
    left = int(frame_width * fractions.left)
    top = int(frame_height * fractions.top)
    width = int(frame_width * fractions.width)
    height = int(frame_height * fractions.height)
    return PixelBox(left, top, left + width, top + height)


def clamp_region(region: PixelBox, frame_width: int, frame_height: int) -> Optional[PixelBox]:
    x0 = max(int(region.x0), 0)
    y0 = max(int(region.y0), 0)
    x1 = min(int(region.x1), frame_width)
    y1 = min(int(region.y1), frame_height)
    if x1 <= x0 or y1 <= y0:
        return None
    return PixelBox(x0, y0, x1, y1)


# =============================================================================
# OCR engines
# =============================================================================
class OcrEngine:
    """
    Interface of a single-use OCR engine.

    `load` prepares the engine, `read` recognizes one grayscale image and
    returns the full text plus tokens with boxes relative to that image,
    `close` releases whatever `load` acquired. `close` must be safe to call
    even if `load` failed.
    """

    def load(self) -> None:
        raise NotImplementedError

    def read(self, image: np.ndarray) -> Tuple[str, List[Token]]:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class TesseractEngine(OcrEngine):
    """Tesseract through pytesseract, configured for price labels."""

    def __init__(self, languages: Sequence[str] = ("eng",), whitelist: str = CHAR_WHITELIST):
        self.lang = "+".join(languages)
        self.whitelist = whitelist
        self.config: Optional[str] = None

    def load(self) -> None:
        # Fails fast when the tesseract binary is missing.
        version = pytesseract.get_tesseract_version()
        logger.debug(f"Using Tesseract {version}")
        options = [f"--psm {PSM_SINGLE_BLOCK}", f"--oem {OEM_LSTM_ONLY}"]
        options.append(f"-c tessedit_char_whitelist={self.whitelist}")
        for name, value in TESSERACT_VARIABLES.items():
            options.append(f"-c {name}={value}")
        self.config = " ".join(options)

    def read(self, image: np.ndarray) -> Tuple[str, List[Token]]:
        if self.config is None:
            raise RecognitionError("Tesseract engine used before load().")
        data = pytesseract.image_to_data(
            image,
            lang=self.lang,
            config=self.config,
            output_type=pytesseract.Output.DICT,
        )

        tokens: List[Token] = []
        lines: dict = {}
        for i, text in enumerate(data["text"]):
            text = (text or "").strip()
            if not text:
                continue
            left, top = int(data["left"][i]), int(data["top"][i])
            box = PixelBox(left, top, left + int(data["width"][i]), top + int(data["height"][i]))
            conf = float(data["conf"][i])
            tokens.append(Token(text=text, box=box, confidence=conf if conf >= 0 else None))
            line_key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
            lines.setdefault(line_key, []).append(text)

        full_text = "\n".join(" ".join(words) for words in lines.values())
        return full_text, tokens

    def close(self) -> None:
        self.config = None


class EasyOcrEngine(OcrEngine):
    """EasyOCR reader restricted to the price character set."""

    def __init__(self, languages: Sequence[str] = ("en",), whitelist: str = CHAR_WHITELIST, gpu: bool = False):
        self.languages = list(languages)
        self.whitelist = whitelist
        self.gpu = gpu
        self.reader = None

    def load(self) -> None:
        # Imported here: loading torch is slow and only this engine needs it.
        import easyocr

        logger.info(f"Initializing EasyOCR Reader for languages: {self.languages}...")
        self.reader = easyocr.Reader(self.languages, gpu=self.gpu)

    def read(self, image: np.ndarray) -> Tuple[str, List[Token]]:
        if self.reader is None:
            raise RecognitionError("EasyOCR engine used before load().")
        # detail=1 returns (bbox, text, confidence); bbox is 4 corner points.
        ocr_results = self.reader.readtext(
            image,
            detail=1,
            paragraph=False,
            allowlist=self.whitelist,
        )
        tokens: List[Token] = []
        for bbox, text, conf in ocr_results:
            text = text.strip()
            if not text:
                continue
            xs = [point[0] for point in bbox]
            ys = [point[1] for point in bbox]
            box = PixelBox(min(xs), min(ys), max(xs), max(ys))
            tokens.append(Token(text=text, box=box, confidence=float(conf)))
        full_text = " ".join(token.text for token in tokens)
        return full_text, tokens

    def close(self) -> None:
        self.reader = None


ENGINES = {
    "tesseract": TesseractEngine,
    "easyocr": EasyOcrEngine,
}


def engine_factory(name: str, languages: Optional[Sequence[str]] = None) -> Callable[[], OcrEngine]:
    """
    Returns a zero-argument callable that builds a fresh engine.

    Args:
        name (str): 'tesseract' or 'easyocr'.
        languages: Engine language codes; engine defaults when omitted.
    """
    try:
        engine_cls = ENGINES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown OCR engine '{name}'. Choose one of: {', '.join(ENGINES)}")
    if languages:
        return lambda: engine_cls(languages=languages)
    return engine_cls


# =============================================================================
# Recognizer
# =============================================================================
class TextRecognizer:
    """
    Runs OCR on the region of interest of a preprocessed frame.

    Token boxes in the returned result are in full-frame coordinates, i.e.
    the same space as the frame passed in.
    """

    def __init__(
        self,
        make_engine: Callable[[], OcrEngine] = TesseractEngine,
        region: RegionFractions = RegionFractions(),
    ):
        self.make_engine = make_engine
        self.region = region

    async def recognize(
        self,
        frame: PreprocessedFrame,
        region_of_interest: Optional[PixelBox] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> RecognitionResult:
        """
        Recognizes text inside the region of interest.

        Args:
            frame (PreprocessedFrame): Binarized frame to read.
            region_of_interest (Optional[PixelBox]): Area to read; defaults to
                                                     the centered region.
            cancel (Optional[CancellationToken]): Token of the current cycle.

        Returns:
            RecognitionResult: Full text and tokens.

        Raises:
            RecognitionError: If the engine cannot start or fails.
            Cancelled: If `cancel` fires before the engine returns.
        """
        if region_of_interest is None:
            region_of_interest = default_region_of_interest(frame.width, frame.height, self.region)
        region = clamp_region(region_of_interest, frame.width, frame.height)
        if region is None:
            raise RecognitionError(f"Region of interest {region_of_interest} lies outside the frame.")

        cancel = cancel or CancellationToken("recognize")
        try:
            return await cancel.run(asyncio.to_thread(self._recognize_blocking, frame, region))
        except (Cancelled, RecognitionError):
            raise
        except Exception as e:
            logger.error(f"An error occurred during OCR processing: {e}")
            raise RecognitionError(str(e)) from e

    def _recognize_blocking(self, frame: PreprocessedFrame, region: PixelBox) -> RecognitionResult:
        x0, y0, x1, y1 = int(region.x0), int(region.y0), int(region.x1), int(region.y1)
        # Binarized channels are identical; one is enough for the engine.
        crop = np.ascontiguousarray(frame.pixels[y0:y1, x0:x1, 0])

        try:
            engine = self.make_engine()
        except Exception as e:
            raise RecognitionError(f"Could not create OCR engine: {e}") from e

        try:
            try:
                engine.load()
            except Exception as e:
                raise RecognitionError(f"Could not initialize OCR engine: {e}") from e
            text, tokens = engine.read(crop)
        finally:
            engine.close()

        tokens = tuple(token_in_frame(token, x0, y0) for token in tokens)
        logger.info(f"OCR found {len(tokens)} tokens: {text!r}")
        return RecognitionResult(text=text, tokens=tokens)


def token_in_frame(token: Token, dx: int, dy: int) -> Token:
    return Token(text=token.text, box=token.box.offset(dx, dy), confidence=token.confidence)
