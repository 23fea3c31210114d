# -*- coding: utf-8 -*-
"""
The GUI Package for PriceSnap, built with PyQt6.

- `main_window`: pickers, preview, buttons; renders session snapshots.
- `video_view`: live preview with the detection overlay.
- `result_panel`: confirmation, result and failure panel.
"""
