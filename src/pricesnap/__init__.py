"""
PriceSnap Application Package.

Captures a still from the camera, finds a printed price with OCR, and
converts it to another currency after the user confirms.

The pipeline pieces live in `pricesnap.core` and `pricesnap.services`; the
state machine tying them together is `pricesnap.session`. The Qt shell in
`pricesnap.app` is imported on demand so the pipeline can be used without a
display.
"""

__version__ = "0.1.0"

from .session import CaptureSessionController, SessionSnapshot, SessionState

__all__ = ["CaptureSessionController", "SessionSnapshot", "SessionState"]
