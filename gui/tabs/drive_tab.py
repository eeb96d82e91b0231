"""Drive tab: image gallery with grid/list views and upload progress."""

from __future__ import annotations

from PySide6.QtCore import QSize, QUrl
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QComboBox, QHBoxLayout, QListView, QListWidgetItem, QMessageBox

from desk_engine.entities import FileItem
from desk_engine.features.drive import MODAL_DELETE, MODAL_UPDATE, MODAL_UPLOAD, DriveController
from desk_engine.formatting import format_display_date, format_file_size
from gui.dialogs.modal_dialog import ConfirmDialog
from gui.dialogs.upload_dialog import UploadDialog
from gui.tabs.base_list_tab import ListTab


class DriveTab(ListTab):
    TITLE = "Drive"
    BUTTONS = (("Upload", "upload"), ("Replace", "replace"), ("Delete", "delete"))

    controller: DriveController

    def __init__(self, controller: DriveController) -> None:
        super().__init__(controller)
        self._apply_view_mode()

    def add_header_widgets(self, row: QHBoxLayout) -> None:
        self.view_combo = QComboBox()
        self.view_combo.addItem("Grid", "grid")
        self.view_combo.addItem("List", "list")
        self.view_combo.setCurrentIndex(max(self.view_combo.findData(self.controller.view_mode), 0))
        self.view_combo.currentIndexChanged.connect(self._on_view_mode)
        row.addWidget(self.view_combo)

    def row_text(self, item: FileItem) -> str:
        if self.controller.view_mode == "grid":
            return item.name
        return f"{item.name}   {format_file_size(item.size)}   {format_display_date(item.created_at)}"

    def decorate(self, list_item: QListWidgetItem, item: FileItem) -> None:
        local = QUrl(item.url).toLocalFile()
        if local:
            list_item.setIcon(QIcon(local))
        list_item.setToolTip(f"{item.type}, {format_file_size(item.size)}")

    def _on_view_mode(self, _index: int) -> None:
        self.controller.view_mode = str(self.view_combo.currentData())
        self._apply_view_mode()
        self._render()

    def _apply_view_mode(self) -> None:
        grid = self.controller.view_mode == "grid"
        self.list_widget.setViewMode(QListView.IconMode if grid else QListView.ListMode)
        self.list_widget.setIconSize(QSize(128, 128) if grid else QSize(32, 32))
        self.list_widget.setResizeMode(QListView.Adjust)
        self.list_widget.setWordWrap(grid)

    # ---------- Actions ----------
    def action_upload(self) -> None:
        self.controller.open_modal(MODAL_UPLOAD)
        UploadDialog(
            self,
            store=self.controller.store,
            modal=MODAL_UPLOAD,
            title="Upload image",
            on_upload=lambda name, data, progress, done: self.controller.upload(
                name, data, on_progress=progress, on_done=done
            ),
        ).exec()

    def action_replace(self) -> None:
        item = self._require_selection()
        if item is None:
            return
        self.controller.open_modal(MODAL_UPDATE, item)
        UploadDialog(
            self,
            store=self.controller.store,
            modal=MODAL_UPDATE,
            title=f"Replace {item.name}",
            on_upload=lambda name, data, progress, done: self.controller.replace_selected(
                name, data, on_progress=progress, on_done=done
            ),
        ).exec()

    def action_delete(self) -> None:
        item = self._require_selection()
        if item is None:
            return
        self.controller.open_modal(MODAL_DELETE, item)
        ConfirmDialog(
            self,
            store=self.controller.store,
            modal=MODAL_DELETE,
            title="Delete file",
            message=f"Delete {item.name}? The image and its details will be removed.",
            on_confirm=self.controller.delete_selected,
        ).exec()

    def _require_selection(self) -> FileItem | None:
        item = self.selected_item()
        if item is None:
            QMessageBox.information(self, self.TITLE, "Select a file first.")
        return item
