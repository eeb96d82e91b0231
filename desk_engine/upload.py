"""
Upload validation and progress tracking.

`UploadProgress` is the explicit state machine behind every upload control:

    IDLE -> UPLOADING(progress) -> DONE | FAILED

Progress is driven by the byte counts the gateway reports while writing. When
the total size is unknown the fraction stays None (indeterminate).
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Final

from .errors import UploadRejectedError

MAX_IMAGE_BYTES: Final[int] = 10 * 1024 * 1024
ALLOWED_IMAGE_TYPES: Final[frozenset[str]] = frozenset(
    {"image/jpeg", "image/png", "image/gif", "image/webp"}
)


def guess_mime_type(file_name: str) -> str:
    """Return the MIME type implied by a file name, or ``application/octet-stream``."""
    mime, _encoding = mimetypes.guess_type(file_name)
    if mime is None and PurePath(file_name).suffix.lower() == ".webp":
        return "image/webp"
    return mime or "application/octet-stream"


def file_extension(file_name: str) -> str:
    """Return the lower-cased extension without the dot (``"bin"`` if absent)."""
    suffix = PurePath(file_name).suffix.lower().lstrip(".")
    return suffix or "bin"


def validate_image(file_name: str, size: int, mime_type: str | None = None) -> str:
    """
    Check that a candidate upload is an accepted image.

    Parameters
    ----------
    file_name:
        Original file name.
    size:
        Size in bytes.
    mime_type:
        Declared MIME type; guessed from the name when omitted.

    Returns
    -------
    str
        The effective MIME type.

    Raises
    ------
    UploadRejectedError
        If the type is not JPEG/PNG/GIF/WEBP or the file exceeds 10 MiB.
    """
    mime = mime_type or guess_mime_type(file_name)
    if mime not in ALLOWED_IMAGE_TYPES:
        raise UploadRejectedError("Please upload an image file (JPEG, PNG, GIF, or WEBP)")
    if size > MAX_IMAGE_BYTES:
        raise UploadRejectedError("File size must be less than 10MB")
    return mime


class UploadPhase(str, Enum):
    """Upload lifecycle."""

    IDLE = "idle"
    UPLOADING = "uploading"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class UploadSnapshot:
    """Immutable view of an upload's state for rendering."""

    phase: UploadPhase
    sent: int = 0
    total: int | None = None
    error: str | None = None

    @property
    def fraction(self) -> float | None:
        """Completed fraction in [0, 1], or None while indeterminate."""
        if self.phase is UploadPhase.DONE:
            return 1.0
        if self.phase is not UploadPhase.UPLOADING or not self.total:
            return None
        return min(self.sent / self.total, 1.0)

    @property
    def percent(self) -> int | None:
        frac = self.fraction
        return None if frac is None else int(frac * 100)


class UploadProgress:
    """
    Mutable upload state machine.

    Illegal transitions (e.g. `advance` while IDLE) are ignored rather than
    raised, because progress events may arrive after a failure was recorded.
    """

    def __init__(self) -> None:
        self._snapshot = UploadSnapshot(UploadPhase.IDLE)

    @property
    def snapshot(self) -> UploadSnapshot:
        return self._snapshot

    @property
    def phase(self) -> UploadPhase:
        return self._snapshot.phase

    def start(self, total: int | None) -> None:
        """Enter UPLOADING from IDLE, DONE or FAILED."""
        if self.phase is UploadPhase.UPLOADING:
            return
        self._snapshot = UploadSnapshot(UploadPhase.UPLOADING, sent=0, total=total)

    def advance(self, sent: int, total: int | None = None) -> None:
        """Record bytes transferred so far; `total` refines an unknown size."""
        if self.phase is not UploadPhase.UPLOADING:
            return
        current = self._snapshot
        self._snapshot = UploadSnapshot(
            UploadPhase.UPLOADING,
            sent=max(current.sent, sent),
            total=total if total is not None else current.total,
        )

    def finish(self) -> None:
        if self.phase is not UploadPhase.UPLOADING:
            return
        current = self._snapshot
        self._snapshot = UploadSnapshot(UploadPhase.DONE, sent=current.sent, total=current.total)

    def fail(self, message: str) -> None:
        if self.phase is not UploadPhase.UPLOADING:
            return
        current = self._snapshot
        self._snapshot = UploadSnapshot(
            UploadPhase.FAILED, sent=current.sent, total=current.total, error=message
        )

    def reset(self) -> None:
        self._snapshot = UploadSnapshot(UploadPhase.IDLE)
