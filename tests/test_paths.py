from __future__ import annotations

from pathlib import Path

import pytest

from desk_engine.paths import (
    UnsafePathError,
    default_data_root,
    ensure_workspace_directories,
    resolve_blob_path,
    resolve_workspace_paths,
    validate_bucket_name,
)


def test_default_data_root_prefers_explicit_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("POCKETDESK_HOME", str(tmp_path / "explicit"))
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "local"))
    assert default_data_root() == tmp_path / "explicit"


def test_default_data_root_falls_back_to_localappdata_then_appdata(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("POCKETDESK_HOME", raising=False)
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "local"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "roaming"))
    assert default_data_root() == tmp_path / "local" / "pocketdesk"

    monkeypatch.delenv("LOCALAPPDATA")
    assert default_data_root() == tmp_path / "roaming" / "pocketdesk"


def test_default_data_root_uses_home_last(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ("POCKETDESK_HOME", "LOCALAPPDATA", "APPDATA"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    assert default_data_root() == tmp_path / ".local" / "share" / "pocketdesk"


def test_workspace_layout(tmp_path: Path) -> None:
    paths = resolve_workspace_paths(tmp_path / "root")
    assert paths.db_path == paths.data_root / "pocketdesk.sqlite"
    assert paths.settings_path == paths.data_root / "settings.json"
    assert not paths.data_root.exists()

    ensure_workspace_directories(paths)
    assert paths.blobs_root.is_dir()
    assert paths.logs_root.is_dir()


@pytest.mark.parametrize("bucket", ["", "..", "a/b", "c:"])
def test_bad_bucket_names(bucket: str) -> None:
    with pytest.raises(UnsafePathError):
        validate_bucket_name(bucket)


def test_blob_path_resolves_inside_bucket(tmp_path: Path) -> None:
    path = resolve_blob_path(tmp_path, "drive", "u1/photo.png")
    assert path == (tmp_path / "drive" / "u1" / "photo.png").resolve()

    windows_style = resolve_blob_path(tmp_path, "drive", "u1\\photo.png")
    assert windows_style == path


@pytest.mark.parametrize("object_path", ["", "/etc/passwd", "C:/x.png", "../x.png", "u1/../../x.png"])
def test_blob_path_rejects_escapes(tmp_path: Path, object_path: str) -> None:
    with pytest.raises(UnsafePathError):
        resolve_blob_path(tmp_path, "drive", object_path)
