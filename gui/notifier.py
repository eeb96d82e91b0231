"""
Toast notifications for the PocketDesk window.

`ToastNotifier` implements the engine `Notifier` protocol. Messages appear as a
small banner in the bottom-right corner of the host widget and fade out on
their own; a newer message replaces an older one.
"""

from __future__ import annotations

import logging

from PySide6.QtCore import QEvent, QObject, Qt, QTimer
from PySide6.QtWidgets import QLabel, QWidget

logger = logging.getLogger(__name__)

TOAST_MS = 3500
_MARGIN = 16

_SUCCESS_STYLE = "background:#1f5130; border:1px solid #3c8c57; color:#e9f7ee; padding:8px 12px; border-radius:6px;"
_ERROR_STYLE = "background:#5a1f1f; border:1px solid #a34545; color:#fbeaea; padding:8px 12px; border-radius:6px;"


class ToastNotifier(QObject):
    """Notifier that shows transient banners over `host`."""

    def __init__(self, host: QWidget) -> None:
        super().__init__(host)
        self._host = host
        self._label = QLabel(host)
        self._label.setWordWrap(True)
        self._label.setMaximumWidth(420)
        self._label.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self._label.hide()

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._label.hide)

        host.installEventFilter(self)

    def notify_success(self, text: str) -> None:
        logger.info("toast success: %s", text)
        self._show(text, _SUCCESS_STYLE)

    def notify_error(self, text: str) -> None:
        logger.info("toast error: %s", text)
        self._show(text, _ERROR_STYLE)

    def _show(self, text: str, style: str) -> None:
        self._label.setStyleSheet(style)
        self._label.setText(text)
        self._label.adjustSize()
        self._place()
        self._label.show()
        self._label.raise_()
        self._timer.start(TOAST_MS)

    def _place(self) -> None:
        x = self._host.width() - self._label.width() - _MARGIN
        y = self._host.height() - self._label.height() - _MARGIN
        self._label.move(max(x, _MARGIN), max(y, _MARGIN))

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # noqa: N802
        if watched is self._host and event.type() == QEvent.Type.Resize and self._label.isVisible():
            self._place()
        return False
