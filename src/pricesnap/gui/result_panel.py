# -*- coding: utf-8 -*-
"""
src/pricesnap/gui/result_panel.py

Defines the ResultPanel widget, the bottom sheet that asks the user to
confirm a detected price, shows the converted amount, or reports a failure.
"""

from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import QFrame, QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget


class ResultPanel(QFrame):
    """
    A panel with three modes: confirmation, result and failure.

    The panel only emits signals; the main window forwards them to the
    session controller.
    """
    convert_clicked = pyqtSignal()
    cancel_clicked = pyqtSignal()
    close_clicked = pyqtSignal()
    retry_clicked = pyqtSignal()

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setObjectName("ResultPanel")
        self.setStyleSheet("""
            QFrame#ResultPanel {
                background-color: #FFFFFF;
                border: 1px solid #D1D5DB;
                border-radius: 10px;
            }
            QLabel { color: #4B5563; }
        """)
        self._setup_ui()
        self.hide()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 12, 16, 16)
        layout.setSpacing(6)

        self.title_label = QLabel()
        title_font = QFont()
        title_font.setBold(True)
        title_font.setPointSize(12)
        self.title_label.setFont(title_font)
        self.title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.title_label)

        self.detail_label = QLabel()
        self.detail_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.detail_label.setWordWrap(True)
        layout.addWidget(self.detail_label)

        # Large converted amount
        self.amount_label = QLabel()
        amount_font = QFont()
        amount_font.setBold(True)
        amount_font.setPointSize(22)
        self.amount_label.setFont(amount_font)
        self.amount_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.amount_label.setStyleSheet("color: #2563EB;")
        self.amount_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        layout.addWidget(self.amount_label)

        buttons = QHBoxLayout()
        buttons.addStretch()
        self.convert_button = QPushButton("Convert")
        self.cancel_button = QPushButton("Cancel")
        self.close_button = QPushButton("Close")
        self.retry_button = QPushButton("Try Again")
        for button in (self.convert_button, self.cancel_button, self.close_button, self.retry_button):
            buttons.addWidget(button)
        buttons.addStretch()
        layout.addLayout(buttons)

        self.convert_button.clicked.connect(self.convert_clicked)
        self.cancel_button.clicked.connect(self.cancel_clicked)
        self.close_button.clicked.connect(self.close_clicked)
        self.retry_button.clicked.connect(self.retry_clicked)

    def _show_buttons(self, *visible: QPushButton):
        for button in (self.convert_button, self.cancel_button, self.close_button, self.retry_button):
            button.setVisible(button in visible)

    def show_confirmation(self, detected_text: str, from_currency: str, to_currency: str):
        self.title_label.setText("Confirm Conversion")
        self.title_label.setStyleSheet("")
        self.detail_label.setText(
            f"Detected amount: {detected_text}\nConvert from {from_currency} to {to_currency}?"
        )
        self.amount_label.hide()
        self._show_buttons(self.convert_button, self.cancel_button)
        self.show()

    def show_result(self, detected_text: str, from_currency: str, converted: str, copied: bool = False):
        self.title_label.setText("Converted Amount")
        self.title_label.setStyleSheet("")
        detail = f"{detected_text} {from_currency} ="
        if copied:
            detail += "\n(Copied to clipboard)"
        self.detail_label.setText(detail)
        self.amount_label.setText(converted)
        self.amount_label.show()
        self._show_buttons(self.close_button)
        self.show()

    def show_failure(self, message: str, title: str = "Detection Failed"):
        self.title_label.setText(title)
        self.title_label.setStyleSheet("color: #DC2626;")
        self.detail_label.setText(message)
        self.amount_label.hide()
        self._show_buttons(self.retry_button)
        self.show()
