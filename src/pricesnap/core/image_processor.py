# -*- coding: utf-8 -*-
"""
src/pricesnap/core/image_processor.py

Implements the preprocessing step of the capture pipeline. A raw RGBA camera
frame is turned into a high-contrast black and white image, which is what the
OCR engines read best. Only the shapes of digits and currency symbols matter,
so losing the gray levels is fine.
"""

import logging

import numpy as np

from .types import Frame, PreprocessedFrame

logger = logging.getLogger(__name__)

# --- Module-level Configuration ---

# Luma weights used for the grayscale conversion (ITU-R BT.601).
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)

# Contrast boost applied before thresholding.
DEFAULT_CONTRAST = 1.5

# Midpoint of the 8-bit range; both the contrast pivot and the threshold.
MIDPOINT = 128.0


def contrast_factor(contrast: float) -> float:
    """
    Returns the multiplier of the classic contrast-correction curve.

    Args:
        contrast (float): Contrast amount; must be below 259.
    """
    if contrast >= 259:
        raise ValueError(f"Contrast must be below 259, got {contrast}")
    return (259.0 * (contrast + 255.0)) / (255.0 * (259.0 - contrast))


class FramePreprocessor:
    """
    Converts a captured frame into a binarized frame for OCR.

    The pipeline is: grayscale -> contrast remap -> threshold at 128.
    Alpha is carried over untouched.
    """

    def __init__(self, contrast: float = DEFAULT_CONTRAST):
        self.contrast = contrast
        self._factor = contrast_factor(contrast)

    def preprocess(self, frame: Frame) -> PreprocessedFrame:
        """
        Executes the preprocessing pipeline on a captured frame.

        Args:
            frame (Frame): The RGBA frame from the camera. It is not modified.

        Returns:
            PreprocessedFrame: A new frame of the same size whose RGB channels
                               are all exactly 0 or 255.
        """
        pixels = frame.pixels
        if pixels.size == 0:
            raise ValueError("Cannot preprocess an empty frame.")

        # 1. Grayscale conversion
        rgb = pixels[:, :, :3].astype(np.float64)
        gray = rgb @ LUMA_WEIGHTS

        # 2. Contrast remap around the midpoint
        adjusted = self._factor * (gray - MIDPOINT) + MIDPOINT

        # 3. Binarization
        binary = np.where(adjusted > MIDPOINT, 255, 0).astype(np.uint8)

        output = np.empty_like(pixels)
        output[:, :, 0] = binary
        output[:, :, 1] = binary
        output[:, :, 2] = binary
        output[:, :, 3] = pixels[:, :, 3]

        logger.debug(
            f"Preprocessed {frame.width}x{frame.height} frame, "
            f"{int(np.count_nonzero(binary))} white pixels."
        )
        return PreprocessedFrame(output)
