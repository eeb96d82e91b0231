"""
Dialogs bound to an engine modal.

Purpose
-------
- Mirror one named modal of an `EntityStore` as a Qt dialog.
- Keep the dialog open while the action is submitting, show the error of a
  failed submission, and close once the store closes the modal.

Notes
-----
- The owning tab opens the modal on the controller before showing the dialog.
- Cancelling is ignored while a submission is in flight.
"""

from __future__ import annotations

from typing import Callable

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QLabel,
    QVBoxLayout,
    QWidget,
)

from desk_engine.state import EntityStore, ModalPhase


class ModalDialog(QDialog):
    """
    Base dialog driven by ``store.modal(modal)``.

    Subclasses add their fields to `body` and implement `submit`.
    """

    def __init__(
        self,
        parent: QWidget | None,
        *,
        store: EntityStore,
        modal: str,
        title: str,
        ok_text: str = "Save",
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setModal(True)

        self._store = store
        self._modal = modal
        self._finished = False

        root = QVBoxLayout(self)
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(10)

        self.body = QVBoxLayout()
        root.addLayout(self.body, 1)

        self.error_label = QLabel("")
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet("color: #c0392b;")
        self.error_label.hide()
        root.addWidget(self.error_label)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.button(QDialogButtonBox.Ok).setText(ok_text)
        self.buttons.accepted.connect(self.submit)
        self.buttons.rejected.connect(self.reject)
        root.addWidget(self.buttons)

        self._unsubscribe = store.subscribe(self._sync)
        self._sync()

    def submit(self) -> None:
        raise NotImplementedError

    def _sync(self) -> None:
        if self._finished:
            return
        state = self._store.modal(self._modal)
        if not state.is_open:
            self._finish()
            self.accept()
            return
        self.buttons.button(QDialogButtonBox.Ok).setEnabled(state.can_submit)
        self.error_label.setText(state.error or "")
        self.error_label.setVisible(bool(state.error))

    def _finish(self) -> None:
        self._finished = True
        self._unsubscribe()

    def reject(self) -> None:
        if self._store.modal(self._modal).phase is ModalPhase.SUBMITTING:
            return
        self._finish()
        self._store.set_modal(self._modal, False)
        super().reject()


class ConfirmDialog(ModalDialog):
    """Yes/no confirmation for destructive actions."""

    def __init__(
        self,
        parent: QWidget | None,
        *,
        store: EntityStore,
        modal: str,
        title: str,
        message: str,
        on_confirm: Callable[[], bool],
    ) -> None:
        super().__init__(parent, store=store, modal=modal, title=title, ok_text="Delete")
        self._on_confirm = on_confirm
        text = QLabel(message)
        text.setWordWrap(True)
        self.body.addWidget(text)

    def submit(self) -> None:
        self._on_confirm()
