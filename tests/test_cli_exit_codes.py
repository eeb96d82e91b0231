from __future__ import annotations

from pathlib import Path

import pytest

from pocketdesk.cli import main


def _run(capsys: pytest.CaptureFixture[str], root: Path, *argv: str) -> tuple[int, str]:
    rc = main([*argv, "--data-root", str(root)])
    return rc, capsys.readouterr().out


def test_blank_user_is_rejected(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc, out = _run(capsys, tmp_path, "init", "--user", "  ")
    assert rc == 2
    assert "ERROR: --user must not be blank." in out


def test_owned_list_without_user_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc, out = _run(capsys, tmp_path, "tasks", "list")
    assert rc == 1
    assert "ERROR: Please log in first" in out


def test_public_lists_work_without_user(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc, out = _run(capsys, tmp_path, "food", "list")
    assert rc == 0
    assert "No food posts." in out


def test_unknown_id_is_an_input_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _run(capsys, tmp_path, "init", "--user", "u1")
    rc, out = _run(capsys, tmp_path, "tasks", "rm", "42")
    assert rc == 2
    assert "ERROR: No task with id 42" in out


def test_rejected_upload_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _run(capsys, tmp_path, "init", "--user", "u1")
    doc = tmp_path / "doc.pdf"
    doc.write_bytes(b"%PDF-1.7")
    rc, out = _run(capsys, tmp_path, "files", "upload", str(doc))
    assert rc == 1
    assert "ERROR: Please upload an image file (JPEG, PNG, GIF, or WEBP)" in out


def test_missing_upload_file_is_an_input_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _run(capsys, tmp_path, "init", "--user", "u1")
    rc, out = _run(capsys, tmp_path, "files", "upload", str(tmp_path / "missing.png"))
    assert rc == 2
    assert out.startswith("ERROR: Cannot read")


def test_empty_task_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _run(capsys, tmp_path, "init", "--user", "u1")
    rc, out = _run(capsys, tmp_path, "tasks", "add", "   ")
    assert rc == 1
    assert "ERROR: Task cannot be empty." in out


def test_bad_seed_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    seed = tmp_path / "seed.json"
    seed.write_text("{not json", encoding="utf-8")
    rc, out = _run(capsys, tmp_path, "pokemon", "seed", "--file", str(seed))
    assert rc == 2
    assert "Invalid JSON" in out


def test_missing_subcommand_exits_with_usage() -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["tasks"])
    assert exc_info.value.code == 2
