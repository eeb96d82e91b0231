from __future__ import annotations

import json
from pathlib import Path

import pytest

from desk_engine.derive import SortKey
from desk_engine.errors import SettingsError
from desk_engine.settings import DeskSettings, load_settings, save_settings


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    assert load_settings(tmp_path / "settings.json") == DeskSettings.defaults()


def test_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    settings = DeskSettings.defaults().with_user("u1", "Ada", "ada@example.com")
    save_settings(path, settings)

    loaded = load_settings(path)
    assert loaded.user_id == "u1"
    assert loaded.display_name == "Ada"
    assert loaded.default_sort is SortKey.DATE_NEWEST


def test_invalid_values_fall_back_individually(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "user_id": "   ",
                "display_name": "Grace",
                "default_sort": "size-desc",
                "view_mode": "carousel",
                "log_level": "debug",
            }
        ),
        encoding="utf-8",
    )
    loaded = load_settings(path)
    assert loaded.user_id is None
    assert loaded.display_name == "Grace"
    assert loaded.default_sort is SortKey.DATE_NEWEST
    assert loaded.view_mode == "grid"
    assert loaded.log_level == "DEBUG"


def test_unreadable_file_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_settings(path) == DeskSettings.defaults()

    path.write_text("[1, 2]", encoding="utf-8")
    assert load_settings(path) == DeskSettings.defaults()


def test_save_failure_raises_settings_error(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(SettingsError):
        save_settings(blocker / "settings.json", DeskSettings.defaults())
