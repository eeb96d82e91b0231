from __future__ import annotations

import json
from pathlib import Path

import pytest

from pocketdesk.cli import main

from conftest import PNG_BYTES


def _run(capsys: pytest.CaptureFixture[str], root: Path, *argv: str) -> tuple[int, str]:
    rc = main([*argv, "--data-root", str(root)])
    return rc, capsys.readouterr().out


@pytest.fixture()
def root(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> Path:
    data_root = tmp_path / "desk"
    rc = main(["init", "--user", "u1", "--name", "Ada Lovelace", "--data-root", str(data_root)])
    assert rc == 0
    capsys.readouterr()
    return data_root


def test_init_prints_paths(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["init", "--user", "u1", "--print-paths", "--data-root", str(tmp_path / "desk")])
    out = capsys.readouterr().out
    assert rc == 0
    assert "Workspace ready for u1 (u1)" in out
    assert "settings_path:" in out
    settings = json.loads((tmp_path / "desk" / "settings.json").read_text(encoding="utf-8"))
    assert settings["user_id"] == "u1"


def test_tasks_add_list_done(root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc, out = _run(capsys, root, "tasks", "add", "water plants", "--priority", "high")
    assert rc == 0
    assert "Task has been added!" in out

    _run(capsys, root, "tasks", "add", "read book")
    rc, out = _run(capsys, root, "tasks", "list", "--sort", "name-asc")
    lines = out.splitlines()
    assert rc == 0
    assert "read book" in lines[0]
    assert "water plants" in lines[1] and "high" in lines[1]
    assert lines[-1] == "0/2 done (0%)"

    rc, out = _run(capsys, root, "tasks", "done", "1")
    assert rc == 0
    assert "Task status has been updated" in out

    rc, out = _run(capsys, root, "tasks", "done", "1")
    assert rc == 0
    assert "Task 1 is already done." in out

    rc, out = _run(capsys, root, "tasks", "list", "--status", "completed")
    assert "water plants" in out
    assert "read book" not in out


def test_tasks_edit_and_rm(root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _run(capsys, root, "tasks", "add", "draft")
    rc, out = _run(capsys, root, "tasks", "edit", "1", "--content", "final")
    assert rc == 0
    assert "Task has been updated successfully." in out

    rc, out = _run(capsys, root, "tasks", "rm", "1")
    assert rc == 0
    rc, out = _run(capsys, root, "tasks", "list")
    assert out.startswith("No tasks.")


def test_files_upload_list_rm(root: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    image = tmp_path / "cat.png"
    image.write_bytes(PNG_BYTES)

    rc, out = _run(capsys, root, "files", "upload", str(image))
    assert rc == 0
    assert "File uploaded successfully!" in out

    rc, out = _run(capsys, root, "files", "list")
    assert "cat.png" in out
    assert "72 Bytes" in out

    rc, out = _run(capsys, root, "files", "rm", "1")
    assert rc == 0
    assert "File has been deleted successfully" in out
    assert not [p for p in (root / "blobs" / "drive").rglob("*") if p.is_file()]


def test_notes_flow(root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _run(capsys, root, "notes", "new")
    rc, out = _run(capsys, root, "notes", "edit", "1", "--title", "Groceries", "--body", "eggs")
    assert rc == 0
    rc, out = _run(capsys, root, "notes", "list", "--search", "groc")
    assert "Groceries" in out


def test_food_post_and_review(root: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    image = tmp_path / "ramen.png"
    image.write_bytes(PNG_BYTES)
    rc, out = _run(capsys, root, "food", "post", "--name", "ramen", "--image", str(image))
    assert rc == 0

    rc, out = _run(capsys, root, "food", "list")
    assert "ramen  by Ada Lovelace [AL]" in out

    rc, out = _run(capsys, root, "food", "review", "1", "so good")
    assert rc == 0
    assert "Food review created successfully" in out

    rc, out = _run(capsys, root, "food", "review", "1")
    assert "Ada Lovelace [AL]" in out and "so good" in out


def test_pokemon_seed_list_review(root: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc, out = _run(capsys, root, "pokemon", "seed")
    assert rc == 0
    assert "Added 9 pokemon" in out

    extra = tmp_path / "extra.json"
    extra.write_text(json.dumps([{"name": "mew", "types": ["psychic"]}, {"name": "eevee"}]), encoding="utf-8")
    rc, out = _run(capsys, root, "pokemon", "seed", "--file", str(extra))
    assert "Added 1 pokemon" in out

    rc, out = _run(capsys, root, "pokemon", "list", "--search", "psychic")
    assert "mew" in out

    rc, out = _run(capsys, root, "pokemon", "review", "4", "pika!")
    assert rc == 0
