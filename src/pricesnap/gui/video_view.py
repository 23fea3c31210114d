# -*- coding: utf-8 -*-
"""
src/pricesnap/gui/video_view.py

Defines the VideoView widget: the live camera preview with the detection
overlay painted on top.

The overlay box is mapped from frame pixels to widget pixels on every paint,
so it follows the widget when the window is resized.
"""

import logging
from typing import Optional

import numpy as np
from PyQt6.QtCore import QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QImage, QPainter, QPen
from PyQt6.QtWidgets import QSizePolicy, QWidget

from ..core.types import Dims
from ..session import SessionSnapshot

logger = logging.getLogger(__name__)

OVERLAY_BORDER = QColor(34, 197, 94)          # green
OVERLAY_FILL = QColor(34, 197, 94, 50)        # green, ~20% opacity
REGION_HINT = QColor(255, 255, 255, 90)


class VideoView(QWidget):
    """
    Paints the most recent frame stretched to the widget, plus the overlay.

    While the session is busy the preview is frozen on the captured still.
    """

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setMinimumSize(320, 240)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setAttribute(Qt.WidgetAttribute.WA_OpaquePaintEvent)

        self._image: Optional[QImage] = None
        self._snapshot: Optional[SessionSnapshot] = None
        self.frozen = False
        self.region_fractions = (0.2, 0.3, 0.6, 0.4)

    def set_frame(self, rgb: np.ndarray):
        """Shows an RGB frame unless the preview is frozen."""
        if self.frozen or rgb is None:
            return
        height, width, _ = rgb.shape
        rgb = np.ascontiguousarray(rgb)
        # copy() detaches the QImage from the numpy buffer.
        self._image = QImage(rgb.data, width, height, 3 * width, QImage.Format.Format_RGB888).copy()
        self.update()

    def set_snapshot(self, snapshot: SessionSnapshot):
        self._snapshot = snapshot
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor(0, 0, 0))

        if self._image is not None:
            painter.drawImage(QRectF(self.rect()), self._image)

        if not self.frozen:
            self._paint_region_hint(painter)

        if self._snapshot is not None:
            box = self._snapshot.display_box(Dims(self.width(), self.height()))
            if box is not None:
                painter.setPen(QPen(OVERLAY_BORDER, 2, Qt.PenStyle.SolidLine))
                painter.setBrush(QBrush(OVERLAY_FILL))
                painter.drawRect(QRectF(box.x, box.y, box.width, box.height))
        painter.end()

    def _paint_region_hint(self, painter: QPainter):
        # Dashed outline of the OCR region, to help the user frame the price.
        left, top, width, height = self.region_fractions
        rect = QRectF(
            self.width() * left,
            self.height() * top,
            self.width() * width,
            self.height() * height,
        )
        painter.setPen(QPen(REGION_HINT, 1, Qt.PenStyle.DashLine))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(rect)
