from __future__ import annotations

import io

from desk_engine.gateway.api import NEWEST_FIRST, OrderBy
from desk_engine.gateway.sqlite_gateway import SqliteGateway
from desk_engine.results import Failure, Success

from conftest import PNG_BYTES


def _task(gateway: SqliteGateway, content: str, user_id: str = "u1") -> dict:
    result = gateway.insert(
        "tasks", {"user_id": user_id, "content": content, "priority_level": "low", "is_done": False}
    )
    assert isinstance(result, Success)
    return result.data


def test_insert_assigns_id_and_created_at(gateway: SqliteGateway) -> None:
    row = _task(gateway, "write tests")
    assert row["id"] == 1
    assert row["created_at"] == "2024-01-02T09:30:00.000000Z"
    assert row["is_done"] == 0


def test_list_filters_and_orders(gateway: SqliteGateway) -> None:
    _task(gateway, "first")
    _task(gateway, "second")
    _task(gateway, "other user", user_id="u2")

    result = gateway.list("tasks", {"user_id": "u1"}, NEWEST_FIRST)
    assert isinstance(result, Success)
    assert [r["content"] for r in result.data] == ["second", "first"]

    ascending = gateway.list("tasks", order_by=(OrderBy("id"),))
    assert [r["content"] for r in ascending.data] == ["first", "second", "other user"]


def test_update_and_delete_report_affected_rows(gateway: SqliteGateway) -> None:
    row = _task(gateway, "first")

    updated = gateway.update("tasks", {"id": row["id"], "user_id": "u1"}, {"is_done": True})
    assert updated == Success(data={"count": 1})
    stored = gateway.list("tasks").data[0]
    assert stored["is_done"] == 1
    assert stored["updated_at"] is not None

    not_owner = gateway.update("tasks", {"id": row["id"], "user_id": "u2"}, {"content": "stolen"})
    assert not_owner == Success(data={"count": 0})

    assert gateway.delete("tasks", {"id": row["id"], "user_id": "u1"}) == Success(data={"count": 1})
    assert gateway.list("tasks").data == []


def test_unknown_table_and_column_are_failures(gateway: SqliteGateway) -> None:
    assert isinstance(gateway.list("nope"), Failure)
    bad_column = gateway.list("tasks", {"owner": "u1"})
    assert isinstance(bad_column, Failure)
    assert "owner" in (bad_column.detail or "")
    assert isinstance(gateway.insert("tasks", {"user_id": "u1", "colour": "red"}), Failure)
    assert isinstance(gateway.list("tasks", order_by=(OrderBy("colour"),)), Failure)


def test_empty_match_is_refused(gateway: SqliteGateway) -> None:
    _task(gateway, "keep me")
    assert isinstance(gateway.delete("tasks", {}), Failure)
    assert isinstance(gateway.update("tasks", {}, {"content": "x"}), Failure)
    assert len(gateway.list("tasks").data) == 1


def test_constraint_violation_is_a_failure(gateway: SqliteGateway) -> None:
    result = gateway.insert("tasks", {"user_id": "u1", "content": "x", "priority_level": "urgent"})
    assert isinstance(result, Failure)
    assert result.message == "Failed to insert into tasks"


def test_json_fields_are_stored_as_text(gateway: SqliteGateway) -> None:
    gateway.insert("pokemons", {"name": "pikachu", "image": "", "types": ["electric"], "stats": {"hp": 35}})
    row = gateway.list("pokemons").data[0]
    assert row["types"] == '["electric"]'
    assert row["stats"] == '{"hp": 35}'


def test_upload_blob_writes_file_and_reports_progress(gateway: SqliteGateway) -> None:
    seen: list[tuple[int, int | None]] = []
    result = gateway.upload_blob("drive", "u1/a.png", PNG_BYTES, progress=lambda s, t: seen.append((s, t)))

    assert isinstance(result, Success)
    target = gateway.blobs_root / "drive" / "u1" / "a.png"
    assert target.read_bytes() == PNG_BYTES
    assert result.data["url"] == target.resolve().as_uri()
    assert seen[-1] == (len(PNG_BYTES), len(PNG_BYTES))
    assert gateway.public_url("drive", "u1/a.png") == result.data["url"]


def test_upload_blob_from_stream_in_chunks(gateway: SqliteGateway) -> None:
    payload = b"x" * (64 * 1024 * 2 + 10)
    seen: list[int] = []
    result = gateway.upload_blob("drive", "u1/big.png", io.BytesIO(payload), progress=lambda s, t: seen.append(s))
    assert isinstance(result, Success)
    assert seen == [64 * 1024, 128 * 1024, len(payload)]


def test_upload_blob_refuses_existing_without_upsert(gateway: SqliteGateway) -> None:
    gateway.upload_blob("drive", "u1/a.png", b"one")
    again = gateway.upload_blob("drive", "u1/a.png", b"two")
    assert isinstance(again, Failure)
    assert (gateway.blobs_root / "drive" / "u1" / "a.png").read_bytes() == b"one"

    replaced = gateway.upload_blob("drive", "u1/a.png", b"two", upsert=True)
    assert isinstance(replaced, Success)
    assert (gateway.blobs_root / "drive" / "u1" / "a.png").read_bytes() == b"two"
    assert not list((gateway.blobs_root / "drive" / "u1").glob("*.part"))


def test_blob_paths_cannot_escape_the_bucket(gateway: SqliteGateway) -> None:
    assert isinstance(gateway.upload_blob("drive", "../outside.png", b"x"), Failure)
    assert isinstance(gateway.upload_blob("drive", "/abs.png", b"x"), Failure)
    assert isinstance(gateway.delete_blob("drive", "u1/../../x"), Failure)
    assert not (gateway.blobs_root / "outside.png").exists()


def test_delete_missing_blob_succeeds(gateway: SqliteGateway) -> None:
    assert isinstance(gateway.delete_blob("drive", "u1/missing.png"), Success)


def test_review_rows_cascade_with_parent(gateway: SqliteGateway) -> None:
    food = gateway.insert("foods", {"user_id": "u1", "name": "ramen", "url": "file:///x"}).data
    gateway.insert("food_reviews", {"food_id": food["id"], "user_id": "u2", "comment": "yum"})
    gateway.delete("foods", {"id": food["id"]})
    assert gateway.list("food_reviews").data == []
