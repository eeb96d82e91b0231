from __future__ import annotations

import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Sequence

import pytest

from desk_engine.clock import SteppingClock
from desk_engine.gateway.api import OrderBy
from desk_engine.gateway.sqlite_gateway import SqliteGateway
from desk_engine.log import reset_logging
from desk_engine.orchestrator import Call, Settle
from desk_engine.results import Failure, GatewayResult
from desk_engine.session import Session


class RecordingNotifier:
    def __init__(self) -> None:
        self.successes: list[str] = []
        self.errors: list[str] = []

    def notify_success(self, text: str) -> None:
        self.successes.append(text)

    def notify_error(self, text: str) -> None:
        self.errors.append(text)


class DeferredRunner:
    """Runner that holds calls until `flush`, like a worker thread would."""

    def __init__(self) -> None:
        self.pending: list[tuple[Call, Settle]] = []

    def run(self, call: Call, on_settled: Settle) -> None:
        self.pending.append((call, on_settled))

    def flush(self) -> None:
        while self.pending:
            call, on_settled = self.pending.pop(0)
            try:
                outcome: object = call()
            except Exception as exc:
                outcome = exc
            on_settled(outcome)


class RecordingGateway(SqliteGateway):
    """
    SqliteGateway that records calls and can be told to fail.

    `failures` maps ``"<method>"`` or ``"<method>:<table or bucket>"`` to the
    Failure to return instead of doing the work.
    """

    def __init__(self, db_path: Path, blobs_root: Path, clock: SteppingClock) -> None:
        super().__init__(db_path=db_path, blobs_root=blobs_root, clock=clock)
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[str, Failure] = {}

    def _scripted(self, method: str, target: str) -> Failure | None:
        self.calls.append((method, target))
        return self.failures.get(f"{method}:{target}") or self.failures.get(method)

    def count(self, method: str, target: str | None = None) -> int:
        return sum(1 for m, t in self.calls if m == method and (target is None or t == target))

    def list(
        self,
        table: str,
        filters: Mapping[str, object] | None = None,
        order_by: Sequence[OrderBy] | None = None,
    ) -> GatewayResult:
        scripted = self._scripted("list", table)
        if scripted is not None:
            return scripted
        return super().list(table, filters, order_by)

    def insert(self, table: str, fields: Mapping[str, object]) -> GatewayResult:
        scripted = self._scripted("insert", table)
        if scripted is not None:
            return scripted
        return super().insert(table, fields)

    def update(self, table: str, match: Mapping[str, object], fields: Mapping[str, object]) -> GatewayResult:
        scripted = self._scripted("update", table)
        if scripted is not None:
            return scripted
        return super().update(table, match, fields)

    def delete(self, table: str, match: Mapping[str, object]) -> GatewayResult:
        scripted = self._scripted("delete", table)
        if scripted is not None:
            return scripted
        return super().delete(table, match)

    def upload_blob(self, bucket: str, path: str, data: Any, **kwargs: Any) -> GatewayResult:
        scripted = self._scripted("upload_blob", bucket)
        if scripted is not None:
            return scripted
        return super().upload_blob(bucket, path, data, **kwargs)

    def delete_blob(self, bucket: str, path: str) -> GatewayResult:
        scripted = self._scripted("delete_blob", bucket)
        if scripted is not None:
            return scripted
        return super().delete_blob(bucket, path)


START = datetime(2024, 1, 2, 9, 30, tzinfo=timezone.utc)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture(autouse=True)
def _utc_local_time(monkeypatch: pytest.MonkeyPatch) -> Any:
    """Pin the local zone so display dates do not depend on the host."""
    if not hasattr(time, "tzset"):
        yield
        return
    monkeypatch.setenv("TZ", "UTC0")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.fixture(autouse=True)
def _reset_logging() -> Any:
    yield
    reset_logging()


@pytest.fixture()
def clock() -> SteppingClock:
    return SteppingClock(start=START)


@pytest.fixture()
def gateway(tmp_path: Path, clock: SteppingClock) -> RecordingGateway:
    return RecordingGateway(tmp_path / "pocketdesk.sqlite", tmp_path / "blobs", clock)


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def session() -> Session:
    return Session(user_id="u1", display_name="Ada Lovelace", email="ada@example.com")


@pytest.fixture()
def anonymous() -> Session:
    return Session(user_id=None)


@pytest.fixture()
def runner() -> DeferredRunner:
    return DeferredRunner()
