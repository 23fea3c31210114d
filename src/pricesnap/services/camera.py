# -*- coding: utf-8 -*-
"""
src/pricesnap/services/camera.py

Camera access through OpenCV.

`CameraSource` keeps the device open for the lifetime of the session, reads
frames on a background thread, and hands out copies: the preview polls
`latest_rgb()`, while a capture takes one still with `read_frame()`. The
device is released exactly once, either through `release()` or by leaving
the `with` block.
"""

import logging
import threading
import time
from typing import Optional

import cv2
import numpy as np

from ..core.types import Frame
from ..errors import MediaAcquisitionError

logger = logging.getLogger(__name__)

FIRST_FRAME_TIMEOUT = 3.0


class CameraSource:
    """
    Continuous video stream from a local camera.

    Attributes:
        device_index (int): OpenCV device index. Phones and laptops with a
                            rear camera usually expose it as index 1; the
                            preference is expressed through configuration.
        width (int), height (int): Requested capture resolution.
        fps (int): Target read rate of the background thread.
    """

    def __init__(self, device_index: int = 0, width: int = 1280, height: int = 720, fps: int = 30):
        self.device_index = device_index
        self.width = width
        self.height = height
        self.fps = fps

        self._capture: Optional[cv2.VideoCapture] = None
        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._released = False
        self._frame_lock = threading.Lock()
        self._current_frame: Optional[np.ndarray] = None
        self._first_frame = threading.Event()

    def __enter__(self) -> "CameraSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    @property
    def is_open(self) -> bool:
        return self._running

    def open(self) -> None:
        """
        Opens the device and starts the reader thread.

        Raises:
            MediaAcquisitionError: If the device cannot be opened.
        """
        if self._released:
            raise MediaAcquisitionError("Camera source has already been released.")
        if self._running:
            logger.warning("Camera already open")
            return

        try:
            capture = cv2.VideoCapture(self.device_index)
        except Exception as e:
            raise MediaAcquisitionError(f"Error accessing camera {self.device_index}: {e}") from e

        if not capture.isOpened():
            capture.release()
            raise MediaAcquisitionError(f"Failed to open camera {self.device_index}")

        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        actual_width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        logger.info(f"Camera {self.device_index} opened: {actual_width}x{actual_height}")

        self._capture = capture
        self._running = True
        self._thread = threading.Thread(target=self._stream_loop, name="camera-reader", daemon=True)
        self._thread.start()

    def _stream_loop(self):
        frame_delay = 1.0 / self.fps if self.fps > 0 else 0.0
        while self._running:
            loop_start = time.time()
            try:
                ok, frame = self._capture.read()
            except Exception as e:
                logger.error(f"Error reading from camera: {e}")
                ok, frame = False, None

            if ok and frame is not None:
                with self._frame_lock:
                    self._current_frame = frame
                self._first_frame.set()
            else:
                time.sleep(0.1)

            sleep_time = frame_delay - (time.time() - loop_start)
            if sleep_time > 0:
                time.sleep(sleep_time)

    def _latest_bgr(self) -> Optional[np.ndarray]:
        with self._frame_lock:
            return None if self._current_frame is None else self._current_frame.copy()

    def latest_rgb(self) -> Optional[np.ndarray]:
        """Most recent frame as an RGB array for the preview, or None."""
        frame = self._latest_bgr()
        if frame is None:
            return None
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    def read_frame(self) -> Frame:
        """
        Takes one still from the stream.

        Blocks until the first frame arrives (up to a few seconds).

        Returns:
            Frame: The RGBA still.

        Raises:
            MediaAcquisitionError: If the camera is closed or silent.
        """
        if not self._running:
            raise MediaAcquisitionError("Camera is not open.")
        if not self._first_frame.wait(FIRST_FRAME_TIMEOUT):
            raise MediaAcquisitionError("Camera did not deliver a frame.")
        frame = self._latest_bgr()
        if frame is None:
            raise MediaAcquisitionError("Camera did not deliver a frame.")
        return Frame(cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA))

    def release(self) -> None:
        """Stops the reader thread and releases the device. Runs once."""
        if self._released:
            return
        self._released = True
        self._running = False

        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=2.0)
        self._thread = None

        if self._capture is not None:
            self._capture.release()
            self._capture = None
        with self._frame_lock:
            self._current_frame = None
        logger.info("Camera released")
