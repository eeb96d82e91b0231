"""
Filesystem path policy for PocketDesk workspaces.

This module is the single place that decides where PocketDesk reads and writes
local state:

- Runtime data lives under a PocketDesk "data root".
- The relational store, blob buckets and logs are laid out beneath it.
- Blob object paths are validated so they can never escape their bucket.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from .errors import DeskError

APP_DIR_NAME = "pocketdesk"
DATA_ROOT_ENV = "POCKETDESK_HOME"


class UnsafePathError(DeskError):
    """Raised when a path would escape the workspace or a bucket."""


@dataclass(frozen=True, slots=True)
class WorkspacePaths:
    """
    Concrete resolved paths for a PocketDesk workspace.

    Attributes
    ----------
    data_root:
        Root directory for all PocketDesk runtime data.
    db_path:
        SQLite database holding every table.
    blobs_root:
        Parent directory of all blob buckets.
    logs_root:
        Rotating log files.
    settings_path:
        JSON settings file.
    """

    data_root: Path
    db_path: Path
    blobs_root: Path
    logs_root: Path
    settings_path: Path


def default_data_root() -> Path:
    """
    Resolve the default data root.

    Preference order:
    1) $POCKETDESK_HOME if set
    2) %LOCALAPPDATA%\\pocketdesk
    3) %APPDATA%\\pocketdesk
    4) ~/.local/share/pocketdesk
    """
    explicit = os.environ.get(DATA_ROOT_ENV)
    if explicit:
        return Path(explicit)

    local = os.environ.get("LOCALAPPDATA")
    if local:
        return Path(local) / APP_DIR_NAME

    roaming = os.environ.get("APPDATA")
    if roaming:
        return Path(roaming) / APP_DIR_NAME

    return Path.home() / ".local" / "share" / APP_DIR_NAME


def resolve_workspace_paths(data_root: Path | None = None) -> WorkspacePaths:
    """
    Resolve every workspace path beneath the data root.

    Parameters
    ----------
    data_root:
        Optional override for the data root.

    Returns
    -------
    WorkspacePaths
        Resolved (not yet created) paths.
    """
    root = (data_root or default_data_root()).expanduser().resolve()
    return WorkspacePaths(
        data_root=root,
        db_path=root / "pocketdesk.sqlite",
        blobs_root=root / "blobs",
        logs_root=root / "logs",
        settings_path=root / "settings.json",
    )


def ensure_workspace_directories(paths: WorkspacePaths) -> None:
    """Create the workspace directory structure if it does not already exist."""
    for directory in (paths.data_root, paths.blobs_root, paths.logs_root):
        directory.mkdir(parents=True, exist_ok=True)


def validate_bucket_name(bucket: str) -> str:
    """
    Return `bucket` if it is a simple folder name.

    Raises
    ------
    UnsafePathError
        If the name is empty, a dot entry, or contains separators.
    """
    name = bucket.strip()
    if not name or name in {".", ".."}:
        raise UnsafePathError("Bucket name must be a simple non-empty folder name.")
    if any(ch in name for ch in r'\/:*?"<>|'):
        raise UnsafePathError(f"Bucket name contains invalid characters: {bucket!r}")
    return name


def resolve_blob_path(blobs_root: Path, bucket: str, object_path: str) -> Path:
    """
    Map a bucket-relative object path onto the filesystem.

    Parameters
    ----------
    blobs_root:
        Parent directory of all buckets.
    bucket:
        Bucket name, for example ``"drive"``.
    object_path:
        Bucket-relative object key using '/' separators, for example
        ``"<user_id>/<uuid>.png"``.

    Returns
    -------
    pathlib.Path
        Absolute filesystem path of the object.

    Raises
    ------
    UnsafePathError
        If the key is absolute, contains a drive hint or dot segments, or
        resolves outside the bucket.
    """
    cleaned = object_path.strip().replace("\\", "/")
    if not cleaned:
        raise UnsafePathError("Object path must not be empty.")
    if cleaned.startswith("/") or ":" in cleaned:
        raise UnsafePathError(f"Object path must be bucket-relative: {object_path!r}")

    parts = PurePosixPath(cleaned).parts
    if any(part in {".", ".."} for part in parts):
        raise UnsafePathError(f"Object path must not contain dot segments: {object_path!r}")

    bucket_root = (blobs_root / validate_bucket_name(bucket)).resolve()
    candidate = bucket_root.joinpath(*parts).resolve()
    try:
        candidate.relative_to(bucket_root)
    except ValueError as exc:
        raise UnsafePathError(
            f"Unsafe object path: {candidate} is not within {bucket_root}"
        ) from exc
    return candidate
