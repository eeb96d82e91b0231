"""
Command-line interface for PocketDesk.

Notes
-----
The CLI is thin. It parses arguments, opens a workspace and drives the same
feature controllers as the GUI, synchronously. Notifications print to stdout.

Exit codes
----------
- 0: success.
- 1: the action ran and reported a failure (already printed as ``ERROR: ...``).
- 2: invalid input or a workspace error.
"""

from __future__ import annotations

import argparse
import json
import locale
import logging
from pathlib import Path
from typing import Callable, Sequence, TypeVar

from desk_engine.derive import SortKey
from desk_engine.entities import FileItem, FoodPost, Note, Pokemon, Review, Task
from desk_engine.errors import DeskError, PreconditionError
from desk_engine.features.common import FeatureController, OnDone
from desk_engine.features.pokemon import DEFAULT_ROSTER, PokemonSeed, seed_pokemons
from desk_engine.features.profiles import ensure_profile
from desk_engine.features.reviews import ReviewBoard
from desk_engine.features.tasks import TaskFilter
from desk_engine.formatting import format_display_date, format_file_size
from desk_engine.gateway.sqlite_gateway import SqliteGateway
from desk_engine.log import configure_logging
from desk_engine.notify import ConsoleNotifier
from desk_engine.orchestrator import Outcome, Settled
from desk_engine.paths import WorkspacePaths
from desk_engine.results import Failure
from desk_engine.settings import load_settings, save_settings
from desk_engine.workspace import Workspace, workspace_paths

logger = logging.getLogger(__name__)

T = TypeVar("T")

SORT_CHOICES = [k.value for k in SortKey]


def _add_data_root(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--data-root",
        default=None,
        help="Override PocketDesk data root (primarily for testing). If omitted, defaults are used.",
    )


def _add_list_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--search", default="", help="Case-insensitive search text")
    p.add_argument("--sort", choices=SORT_CHOICES, default=None, help="Sort order (default from settings)")


def build_parser() -> argparse.ArgumentParser:
    """
    Build and return the top-level argument parser.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser.
    """
    parser = argparse.ArgumentParser(prog="pocketdesk", description="PocketDesk personal dashboard")
    sub = parser.add_subparsers(dest="command", required=True)

    init_p = sub.add_parser("init", help="Create the workspace and set the acting user")
    _add_data_root(init_p)
    init_p.add_argument("--user", required=True, help="User id to act as")
    init_p.add_argument("--name", default="", help="Display name shown on posts and reviews")
    init_p.add_argument("--email", default="", help="Contact email")
    init_p.add_argument("--print-paths", action="store_true", help="Print resolved paths after initialization")

    # tasks
    tasks_p = sub.add_parser("tasks", help="Manage the to-do list")
    tasks_sub = tasks_p.add_subparsers(dest="action", required=True)
    p = tasks_sub.add_parser("list", help="List tasks")
    _add_data_root(p)
    _add_list_options(p)
    p.add_argument("--status", choices=[f.value for f in TaskFilter], default="all")
    p = tasks_sub.add_parser("add", help="Add a task")
    _add_data_root(p)
    p.add_argument("content")
    p.add_argument("--priority", default="medium", help="low, medium or high")
    p = tasks_sub.add_parser("done", help="Mark a task done")
    _add_data_root(p)
    p.add_argument("id", type=int)
    p.add_argument("--undo", action="store_true", help="Mark the task as not done instead")
    p = tasks_sub.add_parser("edit", help="Edit a task")
    _add_data_root(p)
    p.add_argument("id", type=int)
    p.add_argument("--content", default=None)
    p.add_argument("--priority", default=None)
    p = tasks_sub.add_parser("rm", help="Delete a task")
    _add_data_root(p)
    p.add_argument("id", type=int)

    # files
    files_p = sub.add_parser("files", help="Manage the image drive")
    files_sub = files_p.add_subparsers(dest="action", required=True)
    p = files_sub.add_parser("list", help="List files")
    _add_data_root(p)
    _add_list_options(p)
    p = files_sub.add_parser("upload", help="Upload an image")
    _add_data_root(p)
    p.add_argument("path", type=Path)
    p = files_sub.add_parser("replace", help="Replace the contents of a file")
    _add_data_root(p)
    p.add_argument("id", type=int)
    p.add_argument("path", type=Path)
    p = files_sub.add_parser("rm", help="Delete a file")
    _add_data_root(p)
    p.add_argument("id", type=int)

    # notes
    notes_p = sub.add_parser("notes", help="Manage notes")
    notes_sub = notes_p.add_subparsers(dest="action", required=True)
    p = notes_sub.add_parser("list", help="List notes")
    _add_data_root(p)
    _add_list_options(p)
    p = notes_sub.add_parser("new", help="Add an empty note")
    _add_data_root(p)
    p = notes_sub.add_parser("edit", help="Edit a note")
    _add_data_root(p)
    p.add_argument("id", type=int)
    p.add_argument("--title", default=None)
    p.add_argument("--body", default=None)
    p = notes_sub.add_parser("rm", help="Delete a note")
    _add_data_root(p)
    p.add_argument("id", type=int)

    # food
    food_p = sub.add_parser("food", help="Browse and post food photos")
    food_sub = food_p.add_subparsers(dest="action", required=True)
    p = food_sub.add_parser("list", help="List food posts")
    _add_data_root(p)
    _add_list_options(p)
    p = food_sub.add_parser("post", help="Post a food photo")
    _add_data_root(p)
    p.add_argument("--name", required=True)
    p.add_argument("--description", default="")
    p.add_argument("--image", required=True, type=Path)
    p = food_sub.add_parser("review", help="Show reviews of a post, or add one")
    _add_data_root(p)
    p.add_argument("id", type=int)
    p.add_argument("comment", nargs="?", default=None)

    # pokemon
    poke_p = sub.add_parser("pokemon", help="Browse and review pokemon")
    poke_sub = poke_p.add_subparsers(dest="action", required=True)
    p = poke_sub.add_parser("list", help="List pokemon")
    _add_data_root(p)
    _add_list_options(p)
    p = poke_sub.add_parser("review", help="Show reviews of a pokemon, or add one")
    _add_data_root(p)
    p.add_argument("id", type=int)
    p.add_argument("comment", nargs="?", default=None)
    p = poke_sub.add_parser("seed", help="Populate the catalogue")
    _add_data_root(p)
    p.add_argument("--file", type=Path, default=None, help="JSON list of entries (default: starter roster)")

    gui_p = sub.add_parser("gui", help="Open the desktop window")
    _add_data_root(gui_p)

    return parser


# ---------- Helpers ----------
def _data_root(args: argparse.Namespace) -> Path | None:
    return Path(args.data_root) if args.data_root else None


def _settle(start: Callable[[OnDone], bool]) -> Settled | None:
    """Run a synchronous controller call and return its final report."""
    box: list[Settled] = []
    start(box.append)
    return box[0] if box else None


def _exit_code(settled: Settled | None) -> int:
    return 0 if settled is not None and settled.outcome is Outcome.SUCCEEDED else 1


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise DeskError(f"Cannot read {path}: {exc}") from exc


def _find(controller: FeatureController[T], item_id: int, noun: str) -> T:
    for item in controller.store.items:
        if getattr(item, "id", None) == item_id:
            return item
    raise PreconditionError(f"No {noun} with id {item_id}")


def _load(controller: FeatureController[T], args: argparse.Namespace) -> list[T] | None:
    """Fetch and return the visible items, or None if the fetch failed."""
    if _exit_code(_settle(controller.refresh)) != 0:
        return None
    if getattr(args, "search", None):
        controller.query = args.search
    if getattr(args, "sort", None):
        controller.sort_key = SortKey(args.sort)
    return controller.visible()


def _print_rows(rows: Sequence[str], empty: str) -> None:
    if not rows:
        print(empty)
        return
    for row in rows:
        print(row)


def paths_as_text(paths: WorkspacePaths) -> str:
    return "\n".join(
        [
            f"data_root:     {paths.data_root}",
            f"database:      {paths.db_path}",
            f"blobs_root:    {paths.blobs_root}",
            f"logs_root:     {paths.logs_root}",
            f"settings_path: {paths.settings_path}",
        ]
    )


def _task_line(t: Task) -> str:
    mark = "x" if t.is_done else " "
    return f"[{mark}] {t.id:>4}  {t.priority_level.value:<6}  {t.content}  ({format_display_date(t.created_at)})"


def _file_line(f: FileItem) -> str:
    return f"{f.id:>4}  {f.name}  {format_file_size(f.size)}  {format_display_date(f.created_at)}  {f.url}"


def _note_line(n: Note) -> str:
    return f"{n.id:>4}  {n.title}  ({format_display_date(n.created_at)})"


def _food_line(f: FoodPost) -> str:
    return f"{f.id:>4}  {f.name}  by {f.profile.name} [{f.profile.initials}]  {format_display_date(f.created_at)}"


def _pokemon_line(p: Pokemon) -> str:
    s = p.stats
    return (
        f"{p.id:>4}  {p.name:<12} {'/'.join(p.types):<16} "
        f"HP {s.hp}  ATK {s.attack}  DEF {s.defense}  SPD {s.speed}"
    )


def _review_line(r: Review) -> str:
    return f"{r.id:>4}  {r.profile.name} [{r.profile.initials}]  {format_display_date(r.created_at)}: {r.comment}"


# ---------- Commands ----------
def _cmd_init(args: argparse.Namespace) -> int:
    paths = workspace_paths(_data_root(args))
    settings = load_settings(paths.settings_path).with_user(args.user.strip(), args.name.strip(), args.email.strip())
    if not settings.user_id:
        print("ERROR: --user must not be blank.")
        return 2
    save_settings(paths.settings_path, settings)
    gateway = SqliteGateway(db_path=paths.db_path, blobs_root=paths.blobs_root)
    saved = ensure_profile(gateway, user_id=settings.user_id, name=settings.display_name, email=settings.email)
    if isinstance(saved, Failure):
        print(f"ERROR: {saved.message}")
        return 1
    print(f"Workspace ready for {saved.data.name} ({settings.user_id})")
    if args.print_paths:
        print(paths_as_text(paths))
    return 0


def _cmd_tasks(ws: Workspace, args: argparse.Namespace) -> int:
    ctl = ws.tasks
    if args.action == "list":
        ctl.status_filter = TaskFilter(args.status)
        items = _load(ctl, args)
        if items is None:
            return 1
        _print_rows([_task_line(t) for t in items], "No tasks.")
        progress = ctl.progress()
        print(f"{progress.completed}/{progress.total} done ({progress.percent:.0f}%)")
        return 0

    if args.action == "add":
        return _exit_code(_settle(lambda done: ctl.create(args.content, args.priority, done)))

    if _exit_code(_settle(ctl.refresh)) != 0:
        return 1
    task = _find(ctl, args.id, "task")

    if args.action == "done":
        if task.is_done != args.undo:
            print(f"Task {task.id} is already {'done' if task.is_done else 'open'}.")
            return 0
        return _exit_code(_settle(lambda done: ctl.toggle(task, done)))

    ctl.store.select(task)
    if args.action == "edit":
        content = args.content if args.content is not None else task.content
        priority = args.priority if args.priority is not None else task.priority_level
        return _exit_code(_settle(lambda done: ctl.update(content, priority, done)))
    return _exit_code(_settle(ctl.delete_selected))


def _cmd_files(ws: Workspace, args: argparse.Namespace) -> int:
    ctl = ws.drive
    if args.action == "list":
        items = _load(ctl, args)
        if items is None:
            return 1
        _print_rows([_file_line(f) for f in items], "No files.")
        return 0

    if args.action == "upload":
        data = _read_bytes(args.path)
        return _exit_code(_settle(lambda done: ctl.upload(args.path.name, data, on_done=done)))

    if _exit_code(_settle(ctl.refresh)) != 0:
        return 1
    ctl.store.select(_find(ctl, args.id, "file"))
    if args.action == "replace":
        data = _read_bytes(args.path)
        return _exit_code(_settle(lambda done: ctl.replace_selected(args.path.name, data, on_done=done)))
    return _exit_code(_settle(ctl.delete_selected))


def _cmd_notes(ws: Workspace, args: argparse.Namespace) -> int:
    ctl = ws.notes
    if args.action == "list":
        items = _load(ctl, args)
        if items is None:
            return 1
        _print_rows([_note_line(n) for n in items], "No notes.")
        return 0

    if args.action == "new":
        return _exit_code(_settle(ctl.create))

    if _exit_code(_settle(ctl.refresh)) != 0:
        return 1
    note = _find(ctl, args.id, "note")
    ctl.store.select(note)
    if args.action == "edit":
        title = args.title if args.title is not None else note.title
        body = args.body if args.body is not None else note.note
        return _exit_code(_settle(lambda done: ctl.save_selected(title, body, done)))
    return _exit_code(_settle(ctl.delete_selected))


def _show_or_review(board: ReviewBoard, parent_id: int, comment: str | None) -> int:
    if comment is not None:
        board.parent_id = parent_id
        return _exit_code(_settle(lambda done: board.create(comment, done)))
    if _exit_code(_settle(lambda done: board.show(parent_id, done))) != 0:
        return 1
    _print_rows([_review_line(r) for r in board.visible()], "No reviews yet.")
    return 0


def _cmd_food(ws: Workspace, args: argparse.Namespace) -> int:
    ctl = ws.food
    if args.action == "list":
        items = _load(ctl, args)
        if items is None:
            return 1
        _print_rows([_food_line(f) for f in items], "No food posts.")
        return 0

    if args.action == "post":
        data = _read_bytes(args.image)
        return _exit_code(
            _settle(lambda done: ctl.upload(args.name, args.description, args.image.name, data, on_done=done))
        )

    if _exit_code(_settle(ctl.refresh)) != 0:
        return 1
    post = _find(ctl, args.id, "food post")
    return _show_or_review(ctl.reviews, post.id, args.comment)


def _cmd_pokemon(ws: Workspace, args: argparse.Namespace, notifier: ConsoleNotifier) -> int:
    ctl = ws.pokemon
    if args.action == "list":
        items = _load(ctl, args)
        if items is None:
            return 1
        _print_rows([_pokemon_line(p) for p in items], "No pokemon. Run 'pocketdesk pokemon seed'.")
        return 0

    if args.action == "seed":
        entries = DEFAULT_ROSTER
        if args.file is not None:
            try:
                payload = json.loads(_read_bytes(args.file).decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                raise DeskError(f"Invalid JSON in {args.file}: {exc}") from exc
            if not isinstance(payload, list):
                raise DeskError(f"{args.file} must contain a JSON list")
            entries = tuple(PokemonSeed.from_mapping(e) for e in payload if isinstance(e, dict))
        result = seed_pokemons(ws.gateway, entries)
        if isinstance(result, Failure):
            notifier.notify_error(result.message)
            return 1
        notifier.notify_success(result.message or "Done")
        return 0

    if _exit_code(_settle(ctl.refresh)) != 0:
        return 1
    pokemon = _find(ctl, args.id, "pokemon")
    return _show_or_review(ctl.reviews, pokemon.id, args.comment)


def _cmd_gui(args: argparse.Namespace) -> int:
    from gui.app import run_gui

    return run_gui(_data_root(args))


def _use_user_collation() -> None:
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        logger.debug("User locale unavailable; using default collation")


def main(argv: list[str] | None = None) -> int:
    """
    CLI entry point.

    Parameters
    ----------
    argv:
        Optional argument vector. If None, argparse uses sys.argv.

    Returns
    -------
    int
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _use_user_collation()

    try:
        if args.command == "init":
            return _cmd_init(args)

        paths = workspace_paths(_data_root(args))
        settings = load_settings(paths.settings_path)
        configure_logging(paths.logs_root, settings.log_level)

        if args.command == "gui":
            return _cmd_gui(args)

        notifier = ConsoleNotifier()
        ws = Workspace.open(notifier, data_root=paths.data_root, settings=settings)
        try:
            if args.command == "tasks":
                return _cmd_tasks(ws, args)
            if args.command == "files":
                return _cmd_files(ws, args)
            if args.command == "notes":
                return _cmd_notes(ws, args)
            if args.command == "food":
                return _cmd_food(ws, args)
            if args.command == "pokemon":
                return _cmd_pokemon(ws, args, notifier)
        finally:
            ws.close()
    except (DeskError, ValueError) as exc:
        print(f"ERROR: {exc}")
        return 2

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
