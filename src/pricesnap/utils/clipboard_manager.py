# -*- coding: utf-8 -*-
"""
src/pricesnap/utils/clipboard_manager.py

Copies the converted amount to the system clipboard with 'pyperclip',
tolerating systems that have no clipboard.
"""

import logging

import pyperclip

logger = logging.getLogger(__name__)


def copy_to_clipboard(text: str) -> bool:
    """
    Copies the given text to the system clipboard.

    Args:
        text (str): The string to be copied, e.g. "USD 12.34".

    Returns:
        bool: True if the text was copied successfully, False otherwise.
    """
    try:
        pyperclip.copy(text)
        logger.info(f"Copied to clipboard: '{text}'")
        return True
    except pyperclip.PyperclipException as e:
        # Happens on headless Linux without xclip/xsel.
        logger.error(f"Failed to copy text to clipboard: {e}")
        logger.warning(
            "Clipboard functionality may not be available on this system. "
            "If on Linux, please ensure 'xclip' or 'xsel' is installed."
        )
        return False
