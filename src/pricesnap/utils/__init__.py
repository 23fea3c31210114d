# -*- coding: utf-8 -*-
"""
Helpers for the desktop shell: the global hotkey (`hotkey_manager`), the
clipboard (`clipboard_manager`) and the background asyncio loop
(`async_loop`).
"""
