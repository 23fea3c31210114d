# -*- coding: utf-8 -*-
"""
src/pricesnap/config.py

Module for handling application configuration.

This module defines default settings for PriceSnap, such as the global hotkey,
the camera device, the OCR engine and region of interest, and the rate
service. User overrides are read from a config.ini in the per-user
application directory, which is created with default values on first run.
"""

import configparser
import logging
import platform
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from .currencies import DEFAULT_FROM_CURRENCY, DEFAULT_TO_CURRENCY

logger = logging.getLogger(__name__)

# --- Constants ---
APP_NAME = "PriceSnap"
DEFAULT_CONFIG_FILENAME = "config.ini"
DEFAULT_HOTKEY = "<ctrl>+<alt>+c"
DEFAULT_API_URL = "https://api.frankfurter.app/latest"


def get_app_dir() -> Path:
    """
    Gets the application's data directory in a cross-platform way.

    - Windows: %APPDATA%/PriceSnap
    - macOS: ~/Library/Application Support/PriceSnap
    - Linux: ~/.config/PriceSnap

    Returns:
        Path: A Path object to the application's data directory.
    """
    if platform.system() == "Windows":
        app_dir = Path.home() / "AppData" / "Roaming" / APP_NAME
    elif platform.system() == "Darwin":
        app_dir = Path.home() / "Library" / "Application Support" / APP_NAME
    else:
        app_dir = Path.home() / ".config" / APP_NAME
    return app_dir


class Config:
    """
    Manages application configuration by loading defaults and overriding
    them with settings from a user-specific config file.

    Args:
        config_file_path (Optional[Path]): Explicit location of config.ini.
                                           Defaults to the app directory.
    """

    def __init__(self, config_file_path: Optional[Path] = None):
        self.parser = configparser.ConfigParser()
        if config_file_path is None:
            config_file_path = get_app_dir() / DEFAULT_CONFIG_FILENAME
        self.config_file_path = Path(config_file_path)

        self._load_defaults()
        self._load_from_file()

    def _load_defaults(self):
        """Sets the default configuration values in the parser object."""
        self.parser["General"] = {
            "hotkey": DEFAULT_HOTKEY,
        }
        self.parser["Camera"] = {
            "device_index": "0",
            "width": "1280",
            "height": "720",
            "preview_interval_ms": "33",
        }
        self.parser["Recognition"] = {
            "engine": "tesseract",
            "languages": "",
            "contrast": "1.5",
            "roi_left": "0.2",
            "roi_top": "0.3",
            "roi_width": "0.6",
            "roi_height": "0.4",
        }
        self.parser["Conversion"] = {
            "api_url": DEFAULT_API_URL,
            "timeout": "10",
            "from_currency": DEFAULT_FROM_CURRENCY,
            "to_currency": DEFAULT_TO_CURRENCY,
        }
        self.parser["Display"] = {
            "copy_result_to_clipboard": "True",
        }

    def _load_from_file(self):
        """
        Loads settings from the config file, overriding defaults.
        If the file doesn't exist, it will be created with default values.
        """
        if not self.config_file_path.exists():
            self._save_defaults()
        else:
            self.parser.read(self.config_file_path, encoding="utf-8")

    def _save_defaults(self):
        """Saves the current (default) configuration to the config file."""
        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                configfile.write(f"# {APP_NAME} Configuration File\n")
                configfile.write("# You can edit these values. Restart the app for changes to take effect.\n\n")
                self.parser.write(configfile)
        except OSError as e:
            # Non-critical: the defaults stay in effect.
            logger.error(f"Could not write to config file at {self.config_file_path}: {e}")

    # --- Properties to access settings easily and with correct types ---

    @property
    def hotkey(self) -> str:
        """The global hotkey combination that triggers a capture."""
        return self.parser.get("General", "hotkey", fallback=DEFAULT_HOTKEY)

    @property
    def camera_index(self) -> int:
        """OpenCV device index; point it at the rear camera where there is one."""
        return self.parser.getint("Camera", "device_index", fallback=0)

    @property
    def camera_width(self) -> int:
        return self.parser.getint("Camera", "width", fallback=1280)

    @property
    def camera_height(self) -> int:
        return self.parser.getint("Camera", "height", fallback=720)

    @property
    def preview_interval_ms(self) -> int:
        """Refresh period of the live preview."""
        return self.parser.getint("Camera", "preview_interval_ms", fallback=33)

    @property
    def ocr_engine(self) -> str:
        """'tesseract' or 'easyocr'."""
        return self.parser.get("Recognition", "engine", fallback="tesseract").strip().lower()

    @property
    def ocr_languages(self) -> List[str]:
        """Engine language codes; empty means the engine's default."""
        raw = self.parser.get("Recognition", "languages", fallback="")
        return [lang.strip() for lang in raw.split(",") if lang.strip()]

    @property
    def contrast(self) -> float:
        return self.parser.getfloat("Recognition", "contrast", fallback=1.5)

    @property
    def roi_fractions(self) -> tuple:
        """(left, top, width, height) of the OCR region as frame fractions."""
        return (
            self.parser.getfloat("Recognition", "roi_left", fallback=0.2),
            self.parser.getfloat("Recognition", "roi_top", fallback=0.3),
            self.parser.getfloat("Recognition", "roi_width", fallback=0.6),
            self.parser.getfloat("Recognition", "roi_height", fallback=0.4),
        )

    @property
    def api_url(self) -> str:
        return self.parser.get("Conversion", "api_url", fallback=DEFAULT_API_URL)

    @property
    def request_timeout(self) -> float:
        return self.parser.getfloat("Conversion", "timeout", fallback=10.0)

    @property
    def from_currency(self) -> str:
        return self.parser.get("Conversion", "from_currency", fallback=DEFAULT_FROM_CURRENCY).upper()

    @property
    def to_currency(self) -> str:
        return self.parser.get("Conversion", "to_currency", fallback=DEFAULT_TO_CURRENCY).upper()

    @property
    def copy_result_to_clipboard(self) -> bool:
        return self.parser.getboolean("Display", "copy_result_to_clipboard", fallback=True)


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Returns the shared Config instance, loading it on first use."""
    return Config()


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    config = get_config()
    print(f"--- {APP_NAME} Configuration ---")
    print(f"Config file path: {config.config_file_path}")
    print(f"Hotkey: {config.hotkey}")
    print(f"Camera: #{config.camera_index} {config.camera_width}x{config.camera_height}")
    print(f"OCR engine: {config.ocr_engine} languages={config.ocr_languages or 'default'}")
    print(f"Region of interest: {config.roi_fractions}")
    print(f"Rates: {config.api_url} ({config.from_currency} -> {config.to_currency})")
