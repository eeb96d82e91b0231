"""Create/update dialogs for tasks and reviews."""

from __future__ import annotations

from typing import Callable

from PySide6.QtWidgets import QComboBox, QHBoxLayout, QLabel, QLineEdit, QPlainTextEdit, QWidget

from desk_engine.entities import PriorityLevel
from desk_engine.state import EntityStore
from gui.dialogs.modal_dialog import ModalDialog


class TaskEditorDialog(ModalDialog):
    """
    Dialog for adding or editing a task.

    `on_submit` receives the content and priority and returns whether the call
    was started.
    """

    def __init__(
        self,
        parent: QWidget | None,
        *,
        store: EntityStore,
        modal: str,
        title: str,
        on_submit: Callable[[str, PriorityLevel], bool],
        content: str = "",
        priority: PriorityLevel = PriorityLevel.MEDIUM,
    ) -> None:
        super().__init__(parent, store=store, modal=modal, title=title)
        self.resize(460, 160)
        self._on_submit = on_submit

        self.content_edit = QLineEdit(content)
        self.content_edit.setPlaceholderText("What needs doing?")
        self.body.addWidget(QLabel("Task:"))
        self.body.addWidget(self.content_edit)

        self.priority_combo = QComboBox()
        for level in PriorityLevel:
            self.priority_combo.addItem(level.value.capitalize(), level)
        self.priority_combo.setCurrentIndex(list(PriorityLevel).index(priority))

        row = QHBoxLayout()
        row.addWidget(QLabel("Priority:"))
        row.addWidget(self.priority_combo, 1)
        self.body.addLayout(row)

    def submit(self) -> None:
        self._on_submit(self.content_edit.text(), self.priority_combo.currentData())


class CommentDialog(ModalDialog):
    """Dialog for editing a review comment."""

    def __init__(
        self,
        parent: QWidget | None,
        *,
        store: EntityStore,
        modal: str,
        title: str,
        on_submit: Callable[[str], bool],
        comment: str = "",
    ) -> None:
        super().__init__(parent, store=store, modal=modal, title=title)
        self.resize(480, 240)
        self._on_submit = on_submit

        self.comment_edit = QPlainTextEdit()
        self.comment_edit.setPlainText(comment)
        self.body.addWidget(QLabel("Review:"))
        self.body.addWidget(self.comment_edit, 1)

    def submit(self) -> None:
        self._on_submit(self.comment_edit.toPlainText())
