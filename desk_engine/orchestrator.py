"""
Action orchestration: gateway call -> store update -> user notification.

Each feature owns one `ActionOrchestrator` bound to its `EntityStore`, a fetch
call that reloads the collection, and a `Notifier`.

Workflow for a mutation
-----------------------
1. Required identifiers are checked; a missing one aborts with an error
   notification and no gateway call.
2. A second submission of the same action while one is in flight is refused.
3. The call runs through a `CallRunner`. The runner may be synchronous
   (`ImmediateRunner`) or hand the call to a worker thread and deliver the
   outcome later on the owning thread (see ``gui.adapters.call_runner``).
4. A `Failure` is shown via `notify_error`; the collection is left untouched.
5. A `Success` triggers exactly one re-fetch, a success notification and closes
   the action's modal.
6. Exceptions raised by the call are logged and reported as a generic failure.

Stores are never patched locally after a mutation; the re-fetch is the only way
items change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Generic, Mapping, Protocol, Sequence, TypeVar

from .notify import Notifier
from .results import Failure, GatewayResult, Success
from .state import EntityStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

GENERIC_FAILURE = "Something went wrong"

Call = Callable[[], GatewayResult]
Settle = Callable[[object], None]


class CallRunner(Protocol):
    """Executes a gateway call and hands its outcome to a continuation."""

    def run(self, call: Call, on_settled: Settle) -> None:
        """
        Run `call` and invoke `on_settled` with either its result or the
        exception it raised.
        """
        ...


class ImmediateRunner:
    """Runs calls inline on the caller's thread."""

    def run(self, call: Call, on_settled: Settle) -> None:
        try:
            outcome: object = call()
        except Exception as exc:
            outcome = exc
        on_settled(outcome)


class Outcome(str, Enum):
    """How an orchestrated action ended."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PRECONDITION_FAILED = "precondition_failed"
    BUSY = "busy"
    DISCARDED = "discarded"


@dataclass(frozen=True, slots=True)
class Mutation:
    """
    Description of one mutating user action.

    Attributes
    ----------
    key:
        Stable action name used for duplicate-submission detection, e.g.
        ``"delete-file"``.
    call:
        Zero-argument gateway call.
    modal:
        Name of the modal driving this action, if any.
    required:
        Identifiers that must be present (not None/blank) before calling.
    precondition_message:
        Error shown when a required identifier is missing.
    success_message:
        Fallback text when the Success carries no message.
    close_modal_on_error:
        Close the modal on failure instead of returning to OPEN with an error
        (confirmation dialogs behave this way).
    """

    key: str
    call: Call
    modal: str | None = None
    required: Mapping[str, object] = field(default_factory=dict)
    precondition_message: str = "Please log in first"
    success_message: str = "Done"
    close_modal_on_error: bool = False


@dataclass(frozen=True, slots=True)
class Settled:
    """Final report for an orchestrated action, delivered to `on_done` callbacks."""

    outcome: Outcome
    message: str | None = None
    data: Any = None


def _missing(required: Mapping[str, object]) -> list[str]:
    out: list[str] = []
    for name, value in required.items():
        if value is None or (isinstance(value, str) and not value.strip()):
            out.append(name)
    return out


class ActionOrchestrator(Generic[T]):
    """
    Coordinates gateway calls for one feature.

    Parameters
    ----------
    store:
        Store updated by fetches and whose modals follow the workflow.
    fetch:
        Zero-argument call returning ``Success[Sequence[T]]`` or ``Failure``.
    notifier:
        Receiver of user-facing messages.
    runner:
        Call runner; defaults to `ImmediateRunner`.
    fetch_required:
        Identifiers required before fetching (e.g. the acting user id).
    on_fetched:
        Optional hook run after items are replaced (e.g. to pick a default
        selection).
    """

    def __init__(
        self,
        store: EntityStore[T],
        fetch: Callable[[], GatewayResult],
        notifier: Notifier,
        *,
        runner: CallRunner | None = None,
        fetch_required: Callable[[], Mapping[str, object]] | None = None,
        on_fetched: Callable[[EntityStore[T]], None] | None = None,
    ) -> None:
        self._store = store
        self._fetch = fetch
        self._notifier = notifier
        self._runner: CallRunner = runner or ImmediateRunner()
        self._fetch_required = fetch_required or (lambda: {})
        self._on_fetched = on_fetched
        self._in_flight: set[str] = set()

    @property
    def store(self) -> EntityStore[T]:
        return self._store

    def is_busy(self, key: str) -> bool:
        return key in self._in_flight

    # ---------- Fetch ----------
    def refresh(self, on_done: Callable[[Settled], None] | None = None, *, quiet: bool = False) -> bool:
        """
        Reload the collection.

        Parameters
        ----------
        on_done:
            Optional callback receiving the `Settled` report.
        quiet:
            Skip without notifying when a required identifier is missing. The
            follow-up fetch after a successful mutation is always quiet.

        Returns
        -------
        bool
            True if a fetch was started; False on a precondition failure.
        """
        missing = _missing(self._fetch_required())
        if missing:
            logger.debug("Fetch for %s skipped; missing %s", self._store.name, missing)
            if not quiet:
                self._notifier.notify_error("Please log in first")
            self._report(on_done, Settled(Outcome.PRECONDITION_FAILED))
            return False

        self._runner.run(self._fetch, lambda raw: self._finish_fetch(raw, on_done))
        return True

    def _finish_fetch(self, raw: object, on_done: Callable[[Settled], None] | None) -> None:
        if self._store.disposed:
            self._report(on_done, Settled(Outcome.DISCARDED))
            return

        result = self._coerce(raw, context=f"fetch {self._store.name}")
        if isinstance(result, Failure):
            self._notifier.notify_error(result.message)
            self._report(on_done, Settled(Outcome.FAILED, result.message))
            return

        items: Sequence[T] = result.data or ()
        self._store.replace_all(items)
        if self._on_fetched is not None:
            self._on_fetched(self._store)
        self._report(on_done, Settled(Outcome.SUCCEEDED, result.message, result.data))

    # ---------- Mutations ----------
    def submit(self, mutation: Mutation, on_done: Callable[[Settled], None] | None = None) -> bool:
        """
        Run a mutating action through the full workflow.

        Returns
        -------
        bool
            True if the gateway call was started; False if it was refused for a
            missing identifier or a duplicate in-flight submission.
        """
        missing = _missing(mutation.required)
        if missing:
            logger.info("Action %s aborted; missing %s", mutation.key, ", ".join(missing))
            self._notifier.notify_error(mutation.precondition_message)
            self._report(on_done, Settled(Outcome.PRECONDITION_FAILED, mutation.precondition_message))
            return False

        if mutation.key in self._in_flight:
            logger.debug("Action %s already in flight; ignoring resubmission", mutation.key)
            self._report(on_done, Settled(Outcome.BUSY))
            return False

        if mutation.modal is not None:
            if not self._store.is_open(mutation.modal):
                self._store.set_modal(mutation.modal, True)
            self._store.begin_submit(mutation.modal)

        self._in_flight.add(mutation.key)
        self._runner.run(mutation.call, lambda raw: self._finish_mutation(mutation, raw, on_done))
        return True

    def _finish_mutation(
        self,
        mutation: Mutation,
        raw: object,
        on_done: Callable[[Settled], None] | None,
    ) -> None:
        self._in_flight.discard(mutation.key)

        if self._store.disposed:
            logger.debug("Dropping result of %s; store %s disposed", mutation.key, self._store.name)
            self._report(on_done, Settled(Outcome.DISCARDED))
            return

        result = self._coerce(raw, context=mutation.key)
        if isinstance(result, Failure):
            if mutation.modal is not None:
                self._store.fail_submit(
                    mutation.modal, result.message, close=mutation.close_modal_on_error
                )
            self._notifier.notify_error(result.message)
            self._report(on_done, Settled(Outcome.FAILED, result.message))
            return

        message = result.message or mutation.success_message
        self.refresh(quiet=True)
        self._notifier.notify_success(message)
        if mutation.modal is not None:
            self._store.set_modal(mutation.modal, False)
        self._report(on_done, Settled(Outcome.SUCCEEDED, message, result.data))

    # ---------- Helpers ----------
    def _coerce(self, raw: object, *, context: str) -> GatewayResult:
        if isinstance(raw, (Success, Failure)):
            if isinstance(raw, Failure) and raw.detail:
                logger.warning("%s failed: %s (%s)", context, raw.message, raw.detail)
            return raw
        if isinstance(raw, BaseException):
            logger.error("%s raised", context, exc_info=raw)
            return Failure(GENERIC_FAILURE, detail=repr(raw))
        logger.error("%s returned an unexpected value: %r", context, raw)
        return Failure(GENERIC_FAILURE, detail=f"unexpected result {type(raw).__name__}")

    @staticmethod
    def _report(on_done: Callable[[Settled], None] | None, settled: Settled) -> None:
        if on_done is not None:
            on_done(settled)
