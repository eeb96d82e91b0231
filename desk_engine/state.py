"""
Per-feature entity state.

An `EntityStore` holds the cached collection for one feature, the currently
selected entity and the state of that feature's modals. Stores are created per
session by the `Workspace` and handed to the views that use them.

Threading
---------
Stores are not thread-safe. All mutation happens on the thread that owns the
views (the Qt UI thread in the GUI); background results are marshalled back
before they touch a store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Generic, Iterable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[], None]


class ModalPhase(str, Enum):
    """Lifecycle of a modal-driven workflow."""

    CLOSED = "closed"
    OPEN = "open"
    SUBMITTING = "submitting"


@dataclass(frozen=True, slots=True)
class ModalState:
    """
    Snapshot of one named modal.

    Attributes
    ----------
    phase:
        Current lifecycle phase.
    error:
        Message from the last failed submission, cleared when the modal is
        (re)opened.
    """

    phase: ModalPhase = ModalPhase.CLOSED
    error: str | None = None

    @property
    def is_open(self) -> bool:
        return self.phase is not ModalPhase.CLOSED

    @property
    def can_submit(self) -> bool:
        return self.phase is ModalPhase.OPEN


_CLOSED = ModalState()


class EntityStore(Generic[T]):
    """
    In-memory cache of one feature's entities.

    Notes
    -----
    - Items are held as a tuple and replaced wholesale on each fetch.
    - The selection is a detached snapshot. It is not checked against `items`
      and may outlive the entity it was taken from.
    - No public operation raises. After `dispose()` every mutation is ignored.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._items: tuple[T, ...] = ()
        self._selected: T | None = None
        self._modals: dict[str, ModalState] = {}
        self._listeners: list[Listener] = []
        self._disposed = False

    # ---------- Reads ----------
    @property
    def items(self) -> tuple[T, ...]:
        return self._items

    @property
    def selected(self) -> T | None:
        return self._selected

    @property
    def disposed(self) -> bool:
        return self._disposed

    def modal(self, name: str) -> ModalState:
        return self._modals.get(name, _CLOSED)

    def is_open(self, name: str) -> bool:
        return self.modal(name).is_open

    # ---------- Mutations ----------
    def replace_all(self, items: Iterable[T]) -> None:
        if self._disposed:
            return
        self._items = tuple(items)
        self._notify()

    def select(self, entity: T | None) -> None:
        if self._disposed:
            return
        self._selected = entity
        self._notify()

    def clear_selection(self) -> None:
        self.select(None)

    def set_modal(self, name: str, is_open: bool) -> None:
        """Open (clearing any previous error) or close the named modal."""
        if self._disposed:
            return
        self._modals[name] = ModalState(phase=ModalPhase.OPEN) if is_open else _CLOSED
        self._notify()

    def begin_submit(self, name: str) -> bool:
        """
        Move an open modal to SUBMITTING.

        Returns
        -------
        bool
            False if the modal is already submitting, so a duplicate submission
            can be refused.
        """
        if self._disposed:
            return False
        current = self.modal(name)
        if current.phase is ModalPhase.SUBMITTING:
            return False
        self._modals[name] = ModalState(phase=ModalPhase.SUBMITTING)
        self._notify()
        return True

    def fail_submit(self, name: str, message: str, *, close: bool = False) -> None:
        """Return a submitting modal to OPEN with an error, or close it."""
        if self._disposed:
            return
        if close:
            self._modals[name] = _CLOSED
        else:
            self._modals[name] = replace(self.modal(name), phase=ModalPhase.OPEN, error=message)
        self._notify()

    # ---------- Observation ----------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener` for change notifications and return an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def dispose(self) -> None:
        """Tear the store down; later updates (e.g. late call results) are dropped."""
        self._disposed = True
        self._listeners.clear()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Listener failed for store %s", self.name)
