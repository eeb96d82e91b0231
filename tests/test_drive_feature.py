from __future__ import annotations

from desk_engine.features.drive import (
    BUCKET,
    MODAL_DELETE,
    MODAL_UPLOAD,
    DriveController,
    delete_file,
    upload_file,
)
from desk_engine.orchestrator import Outcome, Settled
from desk_engine.results import Failure, Success
from desk_engine.session import Session

from conftest import PNG_BYTES, RecordingGateway, RecordingNotifier


def _bucket_files(gateway: RecordingGateway) -> list[str]:
    root = gateway.blobs_root / BUCKET
    if not root.exists():
        return []
    return sorted(p.name for p in root.rglob("*") if p.is_file())


def test_upload_stores_blob_then_row(
    gateway: RecordingGateway, notifier: RecordingNotifier, session: Session
) -> None:
    drive = DriveController(gateway, notifier, session)
    progress: list[int] = []
    reports: list[Settled] = []

    drive.open_modal(MODAL_UPLOAD)
    drive.upload("cat.png", PNG_BYTES, on_progress=lambda sent, total: progress.append(sent), on_done=reports.append)

    assert [c for c in gateway.calls if c[0] in {"upload_blob", "insert"}] == [
        ("upload_blob", BUCKET),
        ("insert", "files"),
    ]
    (item,) = drive.store.items
    assert item.name == "cat.png"
    assert item.type == "image/png"
    assert item.size == len(PNG_BYTES)
    assert item.path.startswith("u1/") and item.path.endswith(".png")
    assert progress[-1] == len(PNG_BYTES)
    assert reports[0].data == {"url": item.url, "name": "cat.png"}
    assert notifier.successes == ["File uploaded successfully!"]
    assert not drive.store.is_open(MODAL_UPLOAD)


def test_rejected_file_never_reaches_the_gateway(
    gateway: RecordingGateway, notifier: RecordingNotifier, session: Session
) -> None:
    drive = DriveController(gateway, notifier, session)
    assert drive.upload("report.pdf", b"%PDF") is False
    assert drive.upload("huge.png", b"\0" * (10 * 1024 * 1024 + 1)) is False
    assert notifier.errors == [
        "Please upload an image file (JPEG, PNG, GIF, or WEBP)",
        "File size must be less than 10MB",
    ]
    assert gateway.calls == []


def test_upload_requires_login(
    gateway: RecordingGateway, notifier: RecordingNotifier, anonymous: Session
) -> None:
    drive = DriveController(gateway, notifier, anonymous)
    assert drive.upload("cat.png", PNG_BYTES) is False
    assert notifier.errors == ["Please login to manage files"]


def test_failed_metadata_insert_removes_the_blob(gateway: RecordingGateway) -> None:
    gateway.failures["insert:files"] = Failure("disk full")

    result = upload_file(gateway, user_id="u1", file_name="cat.png", data=PNG_BYTES, mime_type="image/png")

    assert isinstance(result, Failure)
    assert result.message == "Failed to save file metadata"
    assert gateway.count("delete_blob", BUCKET) == 1
    assert _bucket_files(gateway) == []


def test_failed_blob_upload_writes_no_row(gateway: RecordingGateway) -> None:
    gateway.failures["upload_blob"] = Failure("offline")
    result = upload_file(gateway, user_id="u1", file_name="cat.png", data=PNG_BYTES, mime_type="image/png")
    assert result.message == "Failed to upload file"
    assert gateway.count("insert") == 0


def test_delete_removes_blob_before_row(
    gateway: RecordingGateway, notifier: RecordingNotifier, session: Session
) -> None:
    drive = DriveController(gateway, notifier, session)
    drive.upload("cat.png", PNG_BYTES)
    item = drive.store.items[0]

    drive.open_modal(MODAL_DELETE, item)
    drive.delete_selected()

    deletes = [c for c in gateway.calls if c[0] in {"delete_blob", "delete"}]
    assert deletes == [("delete_blob", BUCKET), ("delete", "files")]
    assert drive.store.items == ()
    assert _bucket_files(gateway) == []
    assert notifier.successes[-1] == "File has been deleted successfully"


def test_blob_delete_failure_keeps_the_row(
    gateway: RecordingGateway, notifier: RecordingNotifier, session: Session
) -> None:
    drive = DriveController(gateway, notifier, session)
    drive.upload("cat.png", PNG_BYTES)
    item = drive.store.items[0]
    gateway.failures["delete_blob"] = Failure("locked")

    drive.open_modal(MODAL_DELETE, item)
    reports: list[Settled] = []
    drive.delete_selected(on_done=reports.append)

    assert reports[0].outcome is Outcome.FAILED
    assert notifier.errors == ["Failed to delete file from storage"]
    assert gateway.count("delete", "files") == 0
    assert drive.store.items == (item,)
    assert not drive.store.is_open(MODAL_DELETE)


def test_row_delete_failure_after_blob_is_reported(gateway: RecordingGateway) -> None:
    uploaded = upload_file(gateway, user_id="u1", file_name="cat.png", data=PNG_BYTES, mime_type="image/png")
    assert isinstance(uploaded, Success)
    row = gateway.list("files").data[0]
    gateway.failures["delete:files"] = Failure("locked")

    result = delete_file(gateway, file_id=row["id"], user_id="u1", path=row["path"])

    assert result.message == "Failed to delete file metadata"
    assert len(gateway.list("files").data) == 1


def test_delete_by_another_user_leaves_blob_and_row(gateway: RecordingGateway) -> None:
    uploaded = upload_file(gateway, user_id="u1", file_name="cat.png", data=PNG_BYTES, mime_type="image/png")
    assert isinstance(uploaded, Success)
    row = gateway.list("files").data[0]

    result = delete_file(gateway, file_id=row["id"], user_id="someone-else", path=row["path"])

    assert isinstance(result, Failure)
    assert result.message == "Failed to delete file"
    assert gateway.count("delete_blob") == 0
    assert gateway.count("delete", "files") == 0
    assert len(gateway.list("files").data) == 1
    assert _bucket_files(gateway) != []


def test_delete_with_mismatched_path_is_refused(gateway: RecordingGateway) -> None:
    first = upload_file(gateway, user_id="u1", file_name="a.png", data=PNG_BYTES, mime_type="image/png")
    second = upload_file(gateway, user_id="u1", file_name="b.png", data=PNG_BYTES, mime_type="image/png")
    assert isinstance(first, Success) and isinstance(second, Success)
    rows = {r["name"]: r for r in gateway.list("files").data}

    result = delete_file(gateway, file_id=rows["a.png"]["id"], user_id="u1", path=rows["b.png"]["path"])

    assert isinstance(result, Failure)
    assert gateway.count("delete_blob") == 0
    assert len(_bucket_files(gateway)) == 2


def test_delete_of_already_removed_row_fails(gateway: RecordingGateway) -> None:
    uploaded = upload_file(gateway, user_id="u1", file_name="cat.png", data=PNG_BYTES, mime_type="image/png")
    assert isinstance(uploaded, Success)
    row = gateway.list("files").data[0]
    gateway.delete("files", {"id": row["id"]})

    result = delete_file(gateway, file_id=row["id"], user_id="u1", path=row["path"])

    assert isinstance(result, Failure)
    assert result.detail == "no matching row"


def test_replace_keeps_path_and_updates_metadata(
    gateway: RecordingGateway, notifier: RecordingNotifier, session: Session
) -> None:
    drive = DriveController(gateway, notifier, session)
    drive.upload("cat.png", PNG_BYTES)
    original = drive.store.items[0]

    drive.open_modal("update", original)
    drive.replace_selected("dog.gif", b"GIF89a" + b"\0" * 10)

    (item,) = drive.store.items
    assert item.id == original.id
    assert item.path == original.path
    assert item.name == "dog.gif"
    assert item.type == "image/gif"
    assert notifier.successes[-1] == "File updated successfully!"


def test_replace_without_selection_is_refused(
    gateway: RecordingGateway, notifier: RecordingNotifier, session: Session
) -> None:
    drive = DriveController(gateway, notifier, session)
    assert drive.replace_selected("dog.gif", b"GIF89a") is False
    assert notifier.errors == ["Select a file first"]
    assert gateway.calls == []
