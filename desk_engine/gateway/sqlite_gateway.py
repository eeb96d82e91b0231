"""
SQLite + filesystem implementation of DataGateway.

Tables live in a single SQLite database; blobs live as plain files under
``<blobs_root>/<bucket>/<object path>``. This stands in for a hosted database
and object store with the same call surface.

Threading
---------
Each call opens and closes its own sqlite3 connection, so a gateway instance may
be used from a worker thread. Connections are never shared across threads.
"""

from __future__ import annotations

import io
import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Final, Iterable, Iterator, Mapping, Sequence

from ..clock import Clock, SystemClock
from ..entities import datetime_to_iso_utc
from ..paths import UnsafePathError, resolve_blob_path
from ..results import Failure, GatewayResult, Success
from .api import DataGateway, OrderBy, ProgressCallback, Row
from .errors import BlobExistsError, GatewayError, UnknownColumnError, UnknownTableError
from .schema import SCHEMA_V1, TABLES

logger = logging.getLogger(__name__)

CHUNK_SIZE: Final[int] = 64 * 1024


def _encode(value: object) -> object:
    """Convert a Python value into something sqlite3 can bind."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, datetime):
        return datetime_to_iso_utc(value)
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, sort_keys=True)
    return value


def _stream_size(stream: BinaryIO) -> int | None:
    try:
        start = stream.tell()
        end = stream.seek(0, io.SEEK_END)
        stream.seek(start)
    except (AttributeError, OSError, ValueError):
        return None
    return end - start


class SqliteGateway(DataGateway):
    """
    SQLite-backed DataGateway.

    Parameters
    ----------
    db_path:
        Path to the SQLite database. Created if absent.
    blobs_root:
        Parent directory of all buckets. Created if absent.
    clock:
        Source of ``created_at`` / ``updated_at`` timestamps.
    """

    def __init__(self, db_path: Path, blobs_root: Path, clock: Clock | None = None) -> None:
        self.db_path = db_path
        self.blobs_root = blobs_root
        self._clock: Clock = clock or SystemClock()
        self._columns: dict[str, frozenset[str]] = {}

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.blobs_root.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(SCHEMA_V1)
            for table in TABLES:
                cols = conn.execute(f"PRAGMA table_info({table})").fetchall()
                self._columns[table] = frozenset(str(r["name"]) for r in cols)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    # ---------- Validation ----------
    def _table_columns(self, table: str) -> frozenset[str]:
        try:
            return self._columns[table]
        except KeyError:
            raise UnknownTableError(f"Unknown table: {table!r}") from None

    @staticmethod
    def _check_columns(table: str, columns: frozenset[str], names: Iterable[str]) -> None:
        unknown = sorted(n for n in names if n not in columns)
        if unknown:
            raise UnknownColumnError(f"Unknown column(s) for {table}: {', '.join(unknown)}")

    def _where(
        self, table: str, columns: frozenset[str], match: Mapping[str, object]
    ) -> tuple[str, list[object]]:
        self._check_columns(table, columns, match.keys())
        terms: list[str] = []
        params: list[object] = []
        for col, value in match.items():
            if value is None:
                terms.append(f"{col} IS NULL")
            else:
                terms.append(f"{col} = ?")
                params.append(_encode(value))
        if not terms:
            return "", params
        return " WHERE " + " AND ".join(terms), params

    @staticmethod
    def _failure(message: str, exc: Exception) -> Failure:
        logger.warning("%s: %s", message, exc)
        return Failure(message, detail=str(exc))

    def _now(self) -> str:
        return datetime_to_iso_utc(self._clock.now())

    # ---------- Tables ----------
    def list(
        self,
        table: str,
        filters: Mapping[str, object] | None = None,
        order_by: Sequence[OrderBy] | None = None,
    ) -> GatewayResult:
        """See DataGateway.list."""
        try:
            columns = self._table_columns(table)
            where, params = self._where(table, columns, filters or {})
            order_terms = list(order_by or ())
            self._check_columns(table, columns, [o.column for o in order_terms])
            order = ""
            if order_terms:
                order = " ORDER BY " + ", ".join(
                    f"{o.column} {'ASC' if o.ascending else 'DESC'}" for o in order_terms
                )
            with self._connect() as conn:
                rows = conn.execute(f"SELECT * FROM {table}{where}{order}", params).fetchall()
        except (GatewayError, sqlite3.Error) as exc:
            return self._failure(f"Failed to fetch {table}", exc)
        return Success(data=[dict(r) for r in rows])

    def insert(self, table: str, fields: Mapping[str, object]) -> GatewayResult:
        """See DataGateway.insert."""
        try:
            columns = self._table_columns(table)
            values: dict[str, object] = {k: _encode(v) for k, v in fields.items()}
            if "created_at" in columns and "created_at" not in values:
                values["created_at"] = self._now()
            self._check_columns(table, columns, values.keys())
            names = ", ".join(values)
            marks = ", ".join("?" for _ in values)
            with self._connect() as conn:
                cur = conn.execute(
                    f"INSERT INTO {table}({names}) VALUES({marks})", list(values.values())
                )
                row = conn.execute(
                    f"SELECT * FROM {table} WHERE rowid = ?", (cur.lastrowid,)
                ).fetchone()
        except (GatewayError, sqlite3.Error) as exc:
            return self._failure(f"Failed to insert into {table}", exc)
        stored: Row = dict(row) if row is not None else dict(values)
        return Success(data=stored)

    def update(
        self, table: str, match: Mapping[str, object], fields: Mapping[str, object]
    ) -> GatewayResult:
        """See DataGateway.update."""
        try:
            columns = self._table_columns(table)
            if not match:
                raise GatewayError("Refusing to update without a match.")
            values: dict[str, Any] = {k: _encode(v) for k, v in fields.items()}
            if "updated_at" in columns and "updated_at" not in values:
                values["updated_at"] = self._now()
            self._check_columns(table, columns, values.keys())
            if not values:
                raise GatewayError("Nothing to update.")
            where, params = self._where(table, columns, match)
            assignments = ", ".join(f"{col} = ?" for col in values)
            with self._connect() as conn:
                cur = conn.execute(
                    f"UPDATE {table} SET {assignments}{where}", [*values.values(), *params]
                )
        except (GatewayError, sqlite3.Error) as exc:
            return self._failure(f"Failed to update {table}", exc)
        return Success(data={"count": cur.rowcount})

    def delete(self, table: str, match: Mapping[str, object]) -> GatewayResult:
        """See DataGateway.delete."""
        try:
            columns = self._table_columns(table)
            if not match:
                raise GatewayError("Refusing to delete without a match.")
            where, params = self._where(table, columns, match)
            with self._connect() as conn:
                cur = conn.execute(f"DELETE FROM {table}{where}", params)
        except (GatewayError, sqlite3.Error) as exc:
            return self._failure(f"Failed to delete from {table}", exc)
        return Success(data={"count": cur.rowcount})

    # ---------- Blobs ----------
    def upload_blob(
        self,
        bucket: str,
        path: str,
        data: bytes | BinaryIO,
        *,
        upsert: bool = False,
        progress: ProgressCallback | None = None,
    ) -> GatewayResult:
        """See DataGateway.upload_blob."""
        part: Path | None = None
        try:
            target = resolve_blob_path(self.blobs_root, bucket, path)
            if target.exists() and not upsert:
                raise BlobExistsError(f"The resource already exists: {bucket}/{path}")

            if isinstance(data, (bytes, bytearray)):
                stream: BinaryIO = io.BytesIO(data)
                total: int | None = len(data)
            else:
                stream = data
                total = _stream_size(stream)

            target.parent.mkdir(parents=True, exist_ok=True)
            part = target.with_name(target.name + ".part")
            sent = 0
            with part.open("wb") as fh:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    fh.write(chunk)
                    sent += len(chunk)
                    if progress is not None:
                        progress(sent, total)
            os.replace(part, target)
            part = None
        except (GatewayError, UnsafePathError, OSError) as exc:
            return self._failure("Failed to upload object", exc)
        finally:
            if part is not None:
                part.unlink(missing_ok=True)

        return Success(data={"url": target.as_uri(), "path": path})

    def delete_blob(self, bucket: str, path: str) -> GatewayResult:
        """See DataGateway.delete_blob."""
        try:
            target = resolve_blob_path(self.blobs_root, bucket, path)
            target.unlink(missing_ok=True)
        except (GatewayError, UnsafePathError, OSError) as exc:
            return self._failure("Failed to delete object", exc)
        return Success()

    def public_url(self, bucket: str, path: str) -> str:
        """
        See DataGateway.public_url.

        Raises
        ------
        UnsafePathError
            If `path` escapes the bucket.
        """
        return resolve_blob_path(self.blobs_root, bucket, path).as_uri()
