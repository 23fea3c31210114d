# -*- coding: utf-8 -*-
"""
src/pricesnap/app.py

Application shell for PriceSnap.

`PriceSnapApp` wires the configured camera, OCR engine and rate service into
a `CaptureSessionController`, runs that controller on a background asyncio
loop, and connects it to the Qt main window and the global capture hotkey.
"""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from .config import Config, get_config
from .core.image_processor import FramePreprocessor
from .core.price_extractor import PriceExtractor
from .core.text_recognizer import RegionFractions, TextRecognizer, engine_factory
from .gui.main_window import MainWindow
from .services.camera import CameraSource
from .services.conversion_gateway import ConversionGateway
from .session import CaptureSessionController
from .utils.async_loop import AsyncLoopThread
from .utils.clipboard_manager import copy_to_clipboard
from .utils.hotkey_manager import HotkeyManager

APP_NAME = "PriceSnap"

logger = logging.getLogger(__name__)


def build_controller(config: Config, camera: CameraSource) -> CaptureSessionController:
    """Assembles the pipeline stages described by `config`."""
    region = RegionFractions(*config.roi_fractions)
    recognizer = TextRecognizer(
        make_engine=engine_factory(config.ocr_engine, config.ocr_languages),
        region=region,
    )
    gateway = ConversionGateway(api_url=config.api_url, timeout=config.request_timeout)
    return CaptureSessionController(
        camera,
        preprocessor=FramePreprocessor(contrast=config.contrast),
        recognizer=recognizer,
        extractor=PriceExtractor(),
        gateway=gateway,
        from_currency=config.from_currency,
        to_currency=config.to_currency,
    )


class PriceSnapApp:
    """
    The main application object. Owns the loop thread, the controller, the
    window and the hotkey listener.
    """

    def __init__(self, config: Config = None):
        self.config = config or get_config()
        self.camera = CameraSource(
            device_index=self.config.camera_index,
            width=self.config.camera_width,
            height=self.config.camera_height,
        )
        self.controller = build_controller(self.config, self.camera)
        self.runner = AsyncLoopThread()

        self.window = MainWindow(
            self.controller,
            self.runner,
            self.camera,
            preview_interval_ms=self.config.preview_interval_ms,
            on_result=self._on_result,
        )
        self.window.video_view.region_fractions = self.config.roi_fractions
        self.window.closing.connect(self.shutdown)

        # Listener runs on the loop thread; the signal hops to the GUI thread.
        self.controller.add_listener(self.window.snapshot_received.emit)

        self.hotkey_manager = HotkeyManager(self.config.hotkey, self.window.request_capture)
        self._shut_down = False

    def _on_result(self, converted: str) -> bool:
        if not self.config.copy_result_to_clipboard:
            return False
        return copy_to_clipboard(converted)

    def start(self):
        logger.info(f"Starting {APP_NAME}...")
        self.runner.start()
        self.runner.submit(self.controller.start())
        self.hotkey_manager.start()
        self.window.render_snapshot(self.controller.snapshot())
        self.window.show()

    def shutdown(self):
        """Stops the hotkey, disposes the session (releasing the camera) and the loop."""
        if self._shut_down:
            return
        self._shut_down = True
        logger.info(f"Quitting {APP_NAME}...")
        self.hotkey_manager.stop()
        try:
            self.runner.run_sync(self.controller.dispose)
        except Exception as e:
            logger.error(f"Error disposing session: {e}", exc_info=True)
            self.camera.release()
        finally:
            self.runner.stop()


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    app = QApplication(sys.argv)
    price_snap = PriceSnapApp()
    app.aboutToQuit.connect(price_snap.shutdown)
    price_snap.start()
    return app.exec()
