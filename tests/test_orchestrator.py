from __future__ import annotations

from desk_engine.orchestrator import GENERIC_FAILURE, ActionOrchestrator, Mutation, Outcome, Settled
from desk_engine.results import Failure, GatewayResult, Success
from desk_engine.state import EntityStore

from conftest import DeferredRunner, RecordingNotifier


class _Fetcher:
    def __init__(self, items: list[str]) -> None:
        self.items = items
        self.calls = 0
        self.result: GatewayResult | None = None

    def __call__(self) -> GatewayResult:
        self.calls += 1
        if self.result is not None:
            return self.result
        return Success(data=list(self.items))


def _setup(
    runner: DeferredRunner | None = None, user_id: str | None = "u1"
) -> tuple[EntityStore[str], _Fetcher, RecordingNotifier, ActionOrchestrator[str]]:
    store: EntityStore[str] = EntityStore("things")
    fetch = _Fetcher(["a", "b"])
    notifier = RecordingNotifier()
    orch = ActionOrchestrator(
        store, fetch, notifier, runner=runner, fetch_required=lambda: {"user_id": user_id}
    )
    return store, fetch, notifier, orch


def test_refresh_replaces_items() -> None:
    store, fetch, notifier, orch = _setup()
    reports: list[Settled] = []
    assert orch.refresh(reports.append) is True
    assert store.items == ("a", "b")
    assert reports[0].outcome is Outcome.SUCCEEDED
    assert notifier.errors == []


def test_refresh_failure_keeps_items_and_notifies() -> None:
    store, fetch, notifier, orch = _setup()
    orch.refresh()
    fetch.result = Failure("Failed to fetch things", detail="db locked")
    orch.refresh()
    assert store.items == ("a", "b")
    assert notifier.errors == ["Failed to fetch things"]


def test_refresh_without_user_is_a_precondition_failure() -> None:
    store, fetch, notifier, orch = _setup(user_id=None)
    assert orch.refresh() is False
    assert fetch.calls == 0
    assert notifier.errors == ["Please log in first"]


def test_delete_failure_leaves_store_closes_modal_and_notifies_once() -> None:
    store, fetch, notifier, orch = _setup()
    orch.refresh()
    store.select("a")
    store.set_modal("delete", True)
    calls_before = fetch.calls

    orch.submit(
        Mutation(
            key="delete",
            call=lambda: Failure("x"),
            modal="delete",
            required={"user_id": "u1", "item": "a"},
            close_modal_on_error=True,
        )
    )

    assert store.items == ("a", "b")
    assert notifier.errors == ["x"]
    assert notifier.successes == []
    assert not store.is_open("delete")
    assert fetch.calls == calls_before


def test_create_success_refetches_once_notifies_and_closes_modal() -> None:
    store, fetch, notifier, orch = _setup()
    store.set_modal("create", True)
    fetch.items = ["a", "b", "c"]

    reports: list[Settled] = []
    orch.submit(
        Mutation(key="create", call=lambda: Success(message="Task has been added!"), modal="create"),
        reports.append,
    )

    assert fetch.calls == 1
    assert store.items == ("a", "b", "c")
    assert notifier.successes == ["Task has been added!"]
    assert not store.is_open("create")
    assert reports[0].outcome is Outcome.SUCCEEDED


def test_failure_without_close_returns_modal_to_open_with_error() -> None:
    store, fetch, notifier, orch = _setup()
    store.set_modal("update", True)
    orch.submit(Mutation(key="update", call=lambda: Failure("Task cannot be empty."), modal="update"))
    assert store.modal("update").can_submit
    assert store.modal("update").error == "Task cannot be empty."


def test_missing_identifier_aborts_before_calling() -> None:
    store, fetch, notifier, orch = _setup()
    called: list[bool] = []

    def _call() -> GatewayResult:
        called.append(True)
        return Success()

    started = orch.submit(
        Mutation(key="upload", call=_call, required={"user_id": "  "}, precondition_message="Please login")
    )
    assert started is False
    assert called == []
    assert notifier.errors == ["Please login"]


def test_duplicate_submission_is_refused_while_in_flight() -> None:
    runner = DeferredRunner()
    store, fetch, notifier, orch = _setup(runner)
    mutation = Mutation(key="create", call=lambda: Success(message="ok"), modal="create")

    assert orch.submit(mutation) is True
    assert orch.is_busy("create")
    assert store.modal("create").phase.value == "submitting"
    assert orch.submit(mutation) is False

    runner.flush()
    assert not orch.is_busy("create")
    assert notifier.successes == ["ok"]


def test_raised_exception_maps_to_generic_failure() -> None:
    store, fetch, notifier, orch = _setup()

    def _boom() -> GatewayResult:
        raise RuntimeError("network down")

    reports: list[Settled] = []
    orch.submit(Mutation(key="boom", call=_boom), reports.append)
    assert notifier.errors == [GENERIC_FAILURE]
    assert reports[0].outcome is Outcome.FAILED


def test_unexpected_return_value_maps_to_generic_failure() -> None:
    store, fetch, notifier, orch = _setup()
    orch.submit(Mutation(key="odd", call=lambda: "not a result"))  # type: ignore[arg-type, return-value]
    assert notifier.errors == [GENERIC_FAILURE]


def test_results_arriving_after_dispose_are_dropped() -> None:
    runner = DeferredRunner()
    store, fetch, notifier, orch = _setup(runner)
    reports: list[Settled] = []
    orch.submit(Mutation(key="create", call=lambda: Success(message="ok"), modal="create"), reports.append)

    store.dispose()
    runner.flush()

    assert reports[0].outcome is Outcome.DISCARDED
    assert notifier.successes == []
    assert fetch.calls == 0
