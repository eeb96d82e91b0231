"""
User notification surface.

Notifications are fire-and-forget: callers never wait for them and nothing is
returned. The GUI shows them as transient toasts; the CLI prints them.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Protocol, TextIO

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Receiver of user-facing success and error messages."""

    def notify_success(self, text: str) -> None:
        ...

    def notify_error(self, text: str) -> None:
        ...


@dataclass(slots=True)
class ConsoleNotifier:
    """Notifier that writes one line per message to a text stream."""

    stream: TextIO = field(default_factory=lambda: sys.stdout)

    def notify_success(self, text: str) -> None:
        logger.info("notify success: %s", text)
        print(text, file=self.stream)

    def notify_error(self, text: str) -> None:
        logger.info("notify error: %s", text)
        print(f"ERROR: {text}", file=self.stream)
