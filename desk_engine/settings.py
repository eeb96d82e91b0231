"""
Persisted user settings.

Settings are a small JSON document in the workspace. They identify the acting
user and hold view defaults shared by the CLI and the GUI.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path

from .derive import SortKey
from .errors import SettingsError

logger = logging.getLogger(__name__)

VIEW_MODES = frozenset({"grid", "list"})
LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR"})


@dataclass(frozen=True, slots=True)
class DeskSettings:
    """
    Persisted PocketDesk settings.

    Notes
    -----
    `user_id` is the acting identity for every owned entity. Actions that need
    it abort with a precondition failure while it is unset.
    """

    user_id: str | None
    display_name: str
    email: str
    default_sort: SortKey
    view_mode: str  # "grid" | "list"
    log_level: str

    @staticmethod
    def defaults() -> "DeskSettings":
        return DeskSettings(
            user_id=None,
            display_name="",
            email="",
            default_sort=SortKey.DATE_NEWEST,
            view_mode="grid",
            log_level="INFO",
        )

    def with_user(self, user_id: str, display_name: str, email: str) -> "DeskSettings":
        """Return a copy with the identity fields replaced."""
        return replace(self, user_id=user_id, display_name=display_name, email=email)


def load_settings(path: Path) -> DeskSettings:
    """
    Load settings from disk.

    Parameters
    ----------
    path:
        Location of ``settings.json``.

    Returns
    -------
    DeskSettings
        Loaded settings, or defaults if missing/unreadable. Individual invalid
        values fall back to their defaults.
    """
    defaults = DeskSettings.defaults()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return defaults
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return defaults

    if not isinstance(payload, dict):
        return defaults

    user_id = payload.get("user_id")
    if not isinstance(user_id, str) or not user_id.strip():
        user_id = None

    sort_key = SortKey.parse(payload.get("default_sort")) or defaults.default_sort

    view_mode = payload.get("view_mode", defaults.view_mode)
    if view_mode not in VIEW_MODES:
        view_mode = defaults.view_mode

    log_level = str(payload.get("log_level", defaults.log_level)).upper()
    if log_level not in LOG_LEVELS:
        log_level = defaults.log_level

    return DeskSettings(
        user_id=user_id,
        display_name=str(payload.get("display_name") or ""),
        email=str(payload.get("email") or ""),
        default_sort=sort_key,
        view_mode=str(view_mode),
        log_level=log_level,
    )


def save_settings(path: Path, settings: DeskSettings) -> None:
    """
    Save settings to disk.

    Raises
    ------
    SettingsError
        If the file cannot be written.
    """
    payload = {
        "user_id": settings.user_id,
        "display_name": settings.display_name,
        "email": settings.email,
        "default_sort": settings.default_sort.value,
        "view_mode": settings.view_mode,
        "log_level": settings.log_level,
    }
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    except OSError as exc:
        raise SettingsError(f"Could not write settings to {path}: {exc}") from exc
