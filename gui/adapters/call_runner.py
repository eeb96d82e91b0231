"""Qt call runner for engine orchestrators.

Feature controllers hand gateway calls to a `CallRunner`. In the GUI that runner
is `QtCallRunner`: calls execute on a worker thread and their outcomes come back
to the UI thread, where stores are updated.

Threading model
--------------
- A single worker QObject lives on a dedicated QThread.
- The GUI queues calls to the worker with a ticket number.
- The worker emits each outcome (result or raised exception) with its ticket;
  the runner, living on the UI thread, receives it through a queued connection
  and runs the matching continuation there.
"""

from __future__ import annotations

import itertools
import logging

from PySide6.QtCore import QObject, Qt, QThread, Signal, Slot

from desk_engine.orchestrator import Call, Settle

logger = logging.getLogger(__name__)


class CallWorker(QObject):
    """Worker that executes gateway calls on a background thread."""

    settled = Signal(int, object)  # ticket, GatewayResult | Exception

    @Slot(int, object)
    def run_call(self, ticket: int, call: object) -> None:
        """Run `call` and emit its outcome."""
        try:
            assert callable(call)
            outcome: object = call()
        except Exception as e:
            outcome = e
        self.settled.emit(ticket, outcome)


class QtCallRunner(QObject):
    """CallRunner that marshals calls onto a worker thread and results back."""

    request_run = Signal(int, object)  # ticket, call

    def __init__(self) -> None:
        super().__init__()
        self._tickets = itertools.count(1)
        self._pending: dict[int, Settle] = {}

        self._thread = QThread()
        self._worker = CallWorker()
        self._worker.moveToThread(self._thread)

        # Queue calls onto worker thread; deliver outcomes on this object's thread.
        self.request_run.connect(self._worker.run_call, type=Qt.ConnectionType.QueuedConnection)
        self._worker.settled.connect(self._on_settled, type=Qt.ConnectionType.QueuedConnection)

        self._thread.start()

    def run(self, call: Call, on_settled: Settle) -> None:
        ticket = next(self._tickets)
        self._pending[ticket] = on_settled
        self.request_run.emit(ticket, call)

    @Slot(int, object)
    def _on_settled(self, ticket: int, outcome: object) -> None:
        on_settled = self._pending.pop(ticket, None)
        if on_settled is None:
            logger.debug("Dropping outcome for ticket %d after shutdown", ticket)
            return
        on_settled(outcome)

    def shutdown(self) -> None:
        """Stop the worker thread; outcomes still pending are dropped."""
        self._pending.clear()
        self._thread.quit()
        self._thread.wait()


class ProgressRelay(QObject):
    """
    Forwards upload progress from the worker thread to the UI thread.

    Pass `report` as the gateway progress callback and connect `progressed`
    to a UI slot.
    """

    progressed = Signal(int, object)  # sent, total | None

    def report(self, sent: int, total: int | None) -> None:
        self.progressed.emit(sent, total)
