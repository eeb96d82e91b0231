from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from types import SimpleNamespace

import pytest

from desk_engine.log import LOG_FILE_NAME, configure_logging, reset_logging


def _owned_handlers() -> list[logging.Handler]:
    return [h for h in logging.getLogger().handlers if getattr(h, "_pocketdesk_handler", False)]


def test_configure_writes_rotating_file(tmp_path: Path) -> None:
    configure_logging(tmp_path / "logs", "debug")
    logging.getLogger("desk_engine.test").debug("hello from the engine")
    for handler in _owned_handlers():
        handler.flush()

    text = (tmp_path / "logs" / LOG_FILE_NAME).read_text(encoding="utf-8")
    assert "DEBUG" in text
    assert "desk_engine.test: hello from the engine" in text


def test_reconfigure_replaces_own_handlers_only(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    configure_logging(tmp_path / "logs")
    configure_logging(tmp_path / "logs")
    assert len(_owned_handlers()) == 2

    with caplog.at_level(logging.INFO):
        logging.getLogger("desk_engine.test").info("still captured")
    assert "still captured" in caplog.text

    reset_logging()
    assert _owned_handlers() == []


def test_stderr_only_without_logs_root(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(None)
    (handler,) = _owned_handlers()
    assert handler.level == logging.WARNING
    logging.getLogger("desk_engine.test").info("quiet")
    assert "quiet" not in capsys.readouterr().err


def test_gui_entry_point_writes_to_workspace_log(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    pytest.importorskip("PySide6.QtWidgets")
    import gui.app as gui_app

    class _App:
        def exec(self) -> int:
            return 0

    monkeypatch.setattr(gui_app, "QApplication", SimpleNamespace(instance=_App))
    monkeypatch.setattr(gui_app, "AppWindow", lambda data_root: SimpleNamespace(show=lambda: None))

    assert gui_app.run_gui(tmp_path) == 0

    files = [Path(h.baseFilename) for h in _owned_handlers() if isinstance(h, RotatingFileHandler)]
    assert files == [(tmp_path / "logs" / LOG_FILE_NAME).resolve()]
