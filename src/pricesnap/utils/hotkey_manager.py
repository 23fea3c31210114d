# -*- coding: utf-8 -*-
"""
src/pricesnap/utils/hotkey_manager.py

Global capture hotkey using the 'pynput' library.

The listener runs on its own thread; the callback is invoked there, so it
must only hand the event over (PriceSnap emits a Qt signal).
"""

import logging
from typing import Callable, Optional

from pynput import keyboard

logger = logging.getLogger(__name__)


class HotkeyManager:
    """
    Manages a global hotkey listener in a separate thread.

    Attributes:
        hotkey_str (str): The hotkey in pynput syntax, e.g. '<ctrl>+<alt>+c'.
        callback (Callable[[], None]): Called when the hotkey is pressed.
        listener (Optional[keyboard.GlobalHotKeys]): The pynput listener.
    """

    def __init__(self, hotkey_str: str, callback: Callable[[], None]):
        self.hotkey_str = hotkey_str
        self.callback = callback
        self.listener: Optional[keyboard.GlobalHotKeys] = None

    def _on_activate(self):
        logger.debug(f"Hotkey '{self.hotkey_str}' activated.")
        try:
            self.callback()
        except Exception as e:
            logger.error(f"Error executing hotkey callback: {e}", exc_info=True)

    def start(self) -> bool:
        """
        Starts the listener thread, replacing a running one.

        Returns:
            bool: False if pynput rejected the hotkey or has no backend.
        """
        if self.listener and self.listener.is_alive():
            self.stop()

        try:
            self.listener = keyboard.GlobalHotKeys({self.hotkey_str: self._on_activate})
            self.listener.start()
        except Exception as e:
            # ValueError for a bad hotkey string, backend errors on Wayland etc.
            logger.error(f"Failed to start hotkey listener for '{self.hotkey_str}': {e}", exc_info=True)
            self.listener = None
            return False
        logger.info(f"Global hotkey listener started for '{self.hotkey_str}'.")
        return True

    def stop(self):
        if self.listener and self.listener.is_alive():
            logger.info("Stopping global hotkey listener.")
            self.listener.stop()
        self.listener = None
