"""Tasks tab: to-do list with status filter and completion progress."""

from __future__ import annotations

from PySide6.QtWidgets import QComboBox, QHBoxLayout, QLabel, QListWidgetItem, QMessageBox, QProgressBar

from desk_engine.entities import PriorityLevel, Task
from desk_engine.features.tasks import (
    MODAL_CREATE,
    MODAL_DELETE,
    MODAL_UPDATE,
    TaskFilter,
    TasksController,
)
from desk_engine.formatting import format_display_date
from gui.dialogs.editor_dialogs import TaskEditorDialog
from gui.dialogs.modal_dialog import ConfirmDialog
from gui.tabs.base_list_tab import ListTab, bold

_PRIORITY_MARK = {PriorityLevel.HIGH: "!!!", PriorityLevel.MEDIUM: "!!", PriorityLevel.LOW: "!"}


class TasksTab(ListTab):
    TITLE = "Tasks"
    BUTTONS = (("Add", "add"), ("Edit", "edit"), ("Done / Undo", "toggle"), ("Delete", "delete"))

    controller: TasksController

    def __init__(self, controller: TasksController) -> None:
        super().__init__(controller)
        self.layout().addWidget(self._create_progress_row())
        self.after_render()

    def add_header_widgets(self, row: QHBoxLayout) -> None:
        self.status_combo = QComboBox()
        for f in TaskFilter:
            self.status_combo.addItem(f.value.capitalize(), f)
        self.status_combo.currentIndexChanged.connect(self._on_status)
        row.addWidget(self.status_combo)

    def _create_progress_row(self) -> QProgressBar:
        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 100)
        return self.progress_bar

    def row_text(self, item: Task) -> str:
        mark = "✔" if item.is_done else "○"
        return f"{mark}  {item.content}   {_PRIORITY_MARK[item.priority_level]}   {format_display_date(item.created_at)}"

    def decorate(self, list_item: QListWidgetItem, item: Task) -> None:
        if item.priority_level is PriorityLevel.HIGH and not item.is_done:
            list_item.setFont(bold(list_item.font()))
        list_item.setToolTip(f"Priority: {item.priority_level.value}")

    def after_render(self) -> None:
        if not hasattr(self, "progress_bar"):
            return
        progress = self.controller.progress()
        self.progress_bar.setValue(round(progress.percent))
        self.progress_bar.setFormat(f"{progress.completed}/{progress.total} done (%p%)")

    def on_item_activated(self) -> None:
        self.action_toggle()

    def _on_status(self, _index: int) -> None:
        self.controller.status_filter = self.status_combo.currentData()
        self._render()

    # ---------- Actions ----------
    def action_add(self) -> None:
        self.controller.open_modal(MODAL_CREATE)
        TaskEditorDialog(
            self,
            store=self.controller.store,
            modal=MODAL_CREATE,
            title="Add task",
            on_submit=lambda content, priority: self.controller.create(content, priority),
        ).exec()

    def action_edit(self) -> None:
        task = self._require_selection()
        if task is None:
            return
        self.controller.open_modal(MODAL_UPDATE, task)
        TaskEditorDialog(
            self,
            store=self.controller.store,
            modal=MODAL_UPDATE,
            title="Edit task",
            on_submit=lambda content, priority: self.controller.update(content, priority),
            content=task.content,
            priority=task.priority_level,
        ).exec()

    def action_toggle(self) -> None:
        task = self._require_selection()
        if task is not None:
            self.controller.toggle(task)

    def action_delete(self) -> None:
        task = self._require_selection()
        if task is None:
            return
        self.controller.open_modal(MODAL_DELETE, task)
        ConfirmDialog(
            self,
            store=self.controller.store,
            modal=MODAL_DELETE,
            title="Delete task",
            message=f"Delete “{task.content}”? This cannot be undone.",
            on_confirm=self.controller.delete_selected,
        ).exec()

    def _require_selection(self) -> Task | None:
        task = self.selected_item()
        if task is None:
            QMessageBox.information(self, self.TITLE, "Select a task first.")
        return task
