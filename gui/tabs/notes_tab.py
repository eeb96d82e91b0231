"""Notes tab: note list with an editor for the selected note."""

from __future__ import annotations

from PySide6.QtWidgets import QGroupBox, QLabel, QLineEdit, QPlainTextEdit, QVBoxLayout, QWidget

from desk_engine.entities import Note
from desk_engine.features.notes import MODAL_DELETE, NotesController
from desk_engine.formatting import format_display_date
from gui.dialogs.modal_dialog import ConfirmDialog
from gui.tabs.base_list_tab import ListTab


class NotesTab(ListTab):
    TITLE = "Notes"
    BUTTONS = (("New", "new"), ("Save", "save"), ("Delete", "delete"))

    controller: NotesController

    def create_side_panel(self) -> QWidget:
        self._loaded: Note | None = None

        box = QGroupBox("Editor")
        layout = QVBoxLayout(box)
        self.title_edit = QLineEdit()
        self.title_edit.setPlaceholderText("Untitled")
        self.body_edit = QPlainTextEdit()
        self.meta_label = QLabel("")
        self.meta_label.setStyleSheet("color: #666;")
        layout.addWidget(self.title_edit)
        layout.addWidget(self.body_edit, 1)
        layout.addWidget(self.meta_label)
        self.title_edit.setEnabled(False)
        self.body_edit.setEnabled(False)
        return box

    def row_text(self, item: Note) -> str:
        return f"{item.title}   {format_display_date(item.created_at)}"

    def after_render(self) -> None:
        selected = self.controller.store.selected
        if selected == self._loaded:
            return
        self._loaded = selected
        enabled = selected is not None
        self.title_edit.setEnabled(enabled)
        self.body_edit.setEnabled(enabled)
        self.title_edit.setText(selected.title if selected else "")
        self.body_edit.setPlainText(selected.note if selected else "")
        if selected is None:
            self.meta_label.setText("")
            return
        edited = selected.updated_at or selected.created_at
        self.meta_label.setText(f"Last edited {format_display_date(edited)}")

    # ---------- Actions ----------
    def action_new(self) -> None:
        self.controller.create()

    def action_save(self) -> None:
        self.controller.save_selected(self.title_edit.text(), self.body_edit.toPlainText())

    def action_delete(self) -> None:
        note = self.controller.store.selected
        if note is None:
            return
        self.controller.open_modal(MODAL_DELETE, note)
        ConfirmDialog(
            self,
            store=self.controller.store,
            modal=MODAL_DELETE,
            title="Delete note",
            message=f"Delete “{note.title}”?",
            on_confirm=self.controller.delete_selected,
        ).exec()
