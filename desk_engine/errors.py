"""
Domain exceptions for PocketDesk.

Notes
-----
Engine code raises these for expected failure modes. User-facing layers (the
orchestrator, CLI and GUI) translate them into notifications or exit codes.
"""

from __future__ import annotations


class DeskError(RuntimeError):
    """Base exception for all PocketDesk domain failures."""


class PreconditionError(DeskError):
    """Raised when an action is attempted without a required identifier."""


class UploadRejectedError(DeskError):
    """Raised when a candidate upload fails type or size validation."""


class SettingsError(DeskError):
    """Raised when settings cannot be persisted."""
