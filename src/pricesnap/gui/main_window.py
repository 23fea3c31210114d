# -*- coding: utf-8 -*-
"""
src/pricesnap/gui/main_window.py

The PriceSnap main window: currency pickers, live preview with overlay,
capture/reset buttons and the confirmation/result panel.

The window renders `SessionSnapshot`s and forwards user actions to the
session controller on the asyncio loop thread. Snapshots arrive from that
thread through the `snapshot_received` signal, which Qt queues onto the GUI
thread.
"""

import logging
from typing import Callable, Optional

from PyQt6.QtCore import Qt, QTimer, pyqtSignal
from PyQt6.QtWidgets import (
    QComboBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..currencies import CURRENCIES
from ..session import BUSY_STATES, NO_PRICE_FOUND, SessionSnapshot, SessionState
from ..utils.async_loop import AsyncLoopThread
from .result_panel import ResultPanel
from .video_view import VideoView

logger = logging.getLogger(__name__)

NO_PRICE_MESSAGE = "No price found. Please try again."


class MainWindow(QWidget):
    """
    Args:
        controller: The CaptureSessionController driving the session.
        runner (AsyncLoopThread): Loop the controller lives on.
        camera: Source of preview frames (`latest_rgb()`).
        preview_interval_ms (int): Preview refresh period.
        on_result (Optional[Callable[[str], bool]]): Called with the converted
            amount when a result is shown; returns True if it was copied.
    """
    snapshot_received = pyqtSignal(object)
    closing = pyqtSignal()

    def __init__(
        self,
        controller,
        runner: AsyncLoopThread,
        camera,
        preview_interval_ms: int = 33,
        on_result: Optional[Callable[[str], bool]] = None,
    ):
        super().__init__()
        self.controller = controller
        self.runner = runner
        self.camera = camera
        self.on_result = on_result
        self._snapshot: Optional[SessionSnapshot] = None

        self.setWindowTitle("PriceSnap")
        self.resize(480, 760)
        self._setup_ui()

        self.snapshot_received.connect(self.render_snapshot)

        self.preview_timer = QTimer(self)
        self.preview_timer.timeout.connect(self._refresh_preview)
        self.preview_timer.start(preview_interval_ms)

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(10)

        form = QFormLayout()
        self.from_combo = QComboBox()
        self.to_combo = QComboBox()
        for combo in (self.from_combo, self.to_combo):
            for currency in CURRENCIES:
                combo.addItem(currency.label, currency.code)
        self._select_code(self.from_combo, self.controller.from_currency)
        self._select_code(self.to_combo, self.controller.to_currency)
        form.addRow("From Currency", self.from_combo)
        form.addRow("To Currency", self.to_combo)
        layout.addLayout(form)

        self.video_view = VideoView()
        layout.addWidget(self.video_view, stretch=1)

        self.status_label = QLabel()
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.status_label)

        buttons = QHBoxLayout()
        self.capture_button = QPushButton("Capture && Convert")
        self.reset_button = QPushButton("Reset Camera")
        self.reset_button.hide()
        buttons.addWidget(self.capture_button, stretch=1)
        buttons.addWidget(self.reset_button)
        layout.addLayout(buttons)

        self.result_panel = ResultPanel()
        layout.addWidget(self.result_panel)

        self.capture_button.clicked.connect(self.request_capture)
        self.reset_button.clicked.connect(lambda: self.runner.call(self.controller.reset))
        self.from_combo.currentIndexChanged.connect(self._on_currency_changed)
        self.to_combo.currentIndexChanged.connect(self._on_currency_changed)
        self.result_panel.convert_clicked.connect(self._on_convert)
        self.result_panel.cancel_clicked.connect(lambda: self.runner.call(self.controller.cancel))
        self.result_panel.close_clicked.connect(lambda: self.runner.call(self.controller.close))
        self.result_panel.retry_clicked.connect(lambda: self.runner.call(self.controller.retry))

    @staticmethod
    def _select_code(combo: QComboBox, code: str):
        index = combo.findData(code)
        if index >= 0:
            combo.setCurrentIndex(index)

    # --- Actions ---

    def request_capture(self):
        """Starts a capture; the controller ignores it unless idle."""
        self.runner.submit(self.controller.capture())

    def _on_convert(self):
        self.runner.submit(self.controller.confirm(self.from_combo.currentData(), self.to_combo.currentData()))

    def _on_currency_changed(self):
        self.runner.call(self.controller.set_currencies, self.from_combo.currentData(), self.to_combo.currentData())

    def _refresh_preview(self):
        if self.video_view.frozen:
            return
        frame = self.camera.latest_rgb()
        if frame is not None:
            self.video_view.set_frame(frame)

    # --- Rendering ---

    def render_snapshot(self, snapshot: SessionSnapshot):
        """Updates every widget from a controller snapshot."""
        self._snapshot = snapshot
        state = snapshot.state
        self.video_view.set_snapshot(snapshot)
        self.video_view.frozen = state is not SessionState.IDLE

        self.capture_button.setEnabled(state is SessionState.IDLE)
        self.reset_button.setVisible(state not in (SessionState.IDLE, SessionState.DISPOSED))
        self.status_label.setText("Processing..." if state in BUSY_STATES else "")

        price = snapshot.detected_price
        if state is SessionState.AWAITING_CONFIRMATION and price is not None:
            if price.currency_hint:
                self._select_code(self.from_combo, price.currency_hint)
            self.result_panel.show_confirmation(
                price.raw_match,
                self.from_combo.currentData(),
                self.to_combo.currentData(),
            )
        elif state is SessionState.SHOWING_RESULT and snapshot.conversion_result is not None:
            converted = snapshot.conversion_result.display_amount
            copied = bool(self.on_result and self.on_result(converted))
            self.result_panel.show_result(
                price.raw_match if price else "",
                snapshot.from_currency,
                converted,
                copied=copied,
            )
        elif state is SessionState.FAILED:
            if snapshot.reason == NO_PRICE_FOUND:
                self.result_panel.show_failure(NO_PRICE_MESSAGE)
            else:
                self.result_panel.show_failure(snapshot.reason or "", title="Something Went Wrong")
        else:
            self.result_panel.hide()

    def closeEvent(self, event):
        self.preview_timer.stop()
        self.closing.emit()
        super().closeEvent(event)
