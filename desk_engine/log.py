"""Logging configuration for PocketDesk entry points."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
LOG_FILE_NAME = "pocketdesk.log"

_OWNED_ATTR = "_pocketdesk_handler"


def _owned(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _OWNED_ATTR, False))


def configure_logging(logs_root: Path | None, level: str = "INFO") -> None:
    """
    Install stderr and rotating-file handlers on the root logger.

    Parameters
    ----------
    logs_root:
        Directory for the rotating log file. If None, only stderr is used.
    level:
        Logging level name applied to the root logger.

    Notes
    -----
    Calling this more than once replaces the handlers installed by the previous
    call. Handlers installed by anything else are left alone.
    """
    reset_logging()
    root = logging.getLogger()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = []

    stream = logging.StreamHandler()
    stream.setLevel(logging.WARNING)
    handlers.append(stream)

    if logs_root is not None:
        logs_root.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                logs_root / LOG_FILE_NAME,
                maxBytes=1_000_000,
                backupCount=3,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _OWNED_ATTR, True)
        root.addHandler(handler)

    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def reset_logging() -> None:
    """Remove and close the handlers installed by `configure_logging`."""
    root = logging.getLogger()
    for handler in [h for h in root.handlers if _owned(h)]:
        root.removeHandler(handler)
        handler.close()
