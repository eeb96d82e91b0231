"""Side panel showing a record's details and its review thread."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from desk_engine.entities import Review
from desk_engine.features.reviews import MODAL_DELETE_REVIEW, MODAL_UPDATE_REVIEW, ReviewBoard
from desk_engine.formatting import format_display_date
from desk_engine.orchestrator import Outcome, Settled
from gui.dialogs.editor_dialogs import CommentDialog
from gui.dialogs.modal_dialog import ConfirmDialog


class ReviewPanel(QWidget):
    """
    Details header plus the reviews of the record shown in it.

    Call `show_details` with the header text; the owning tab loads the thread
    through its controller.
    """

    def __init__(self, board: ReviewBoard) -> None:
        super().__init__()
        self.board = board

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        self.details = QLabel("Select an item to see its details.")
        self.details.setWordWrap(True)
        self.details.setTextFormat(Qt.RichText)
        self.details.setAlignment(Qt.AlignTop | Qt.AlignLeft)
        root.addWidget(self.details)

        box = QGroupBox("Reviews")
        box_layout = QVBoxLayout(box)
        self.review_list = QListWidget()
        self.review_list.itemSelectionChanged.connect(self._on_selection_changed)
        box_layout.addWidget(self.review_list, 1)

        row = QHBoxLayout()
        self.btn_edit = QPushButton("Edit")
        self.btn_edit.clicked.connect(self._edit)
        self.btn_delete = QPushButton("Delete")
        self.btn_delete.clicked.connect(self._delete)
        row.addStretch(1)
        row.addWidget(self.btn_edit)
        row.addWidget(self.btn_delete)
        box_layout.addLayout(row)

        self.comment_edit = QPlainTextEdit()
        self.comment_edit.setPlaceholderText("Write a review…")
        self.comment_edit.setFixedHeight(70)
        box_layout.addWidget(self.comment_edit)
        self.btn_post = QPushButton("Post review")
        self.btn_post.clicked.connect(self._post)
        box_layout.addWidget(self.btn_post)

        root.addWidget(box, 1)

        self._unsubscribe: Callable[[], None] = board.store.subscribe(self._render)
        self._render()

    def show_details(self, html: str) -> None:
        self.details.setText(html)

    def clear(self) -> None:
        self.details.setText("Select an item to see its details.")

    def _render(self) -> None:
        selected = self.board.store.selected
        self.review_list.blockSignals(True)
        self.review_list.clear()
        for review in self.board.visible():
            row = QListWidgetItem(
                f"{review.profile.initials}  {review.profile.name} · {format_display_date(review.created_at)}\n{review.comment}"
            )
            row.setData(Qt.UserRole, review)
            self.review_list.addItem(row)
            if selected is not None and review.id == selected.id:
                self.review_list.setCurrentItem(row)
        self.review_list.blockSignals(False)

        has_parent = self.board.parent_id is not None
        self.comment_edit.setEnabled(has_parent)
        self.btn_post.setEnabled(has_parent and not self.board.orchestrator.is_busy(f"create-{self.board.kind.table}"))
        self._sync_buttons()

    def _selected(self) -> Review | None:
        current = self.review_list.currentItem()
        return None if current is None else current.data(Qt.UserRole)

    def _on_selection_changed(self) -> None:
        review = self._selected()
        if review is not None:
            self.board.store.select(review)
        self._sync_buttons()

    def _sync_buttons(self) -> None:
        review = self._selected()
        own = review is not None and self.board.can_edit(review)
        self.btn_edit.setEnabled(own)
        self.btn_delete.setEnabled(own)

    def _post(self) -> None:
        text = self.comment_edit.toPlainText()
        self.board.create(text, on_done=self._after_post)

    def _after_post(self, settled: Settled) -> None:
        if settled.outcome is Outcome.SUCCEEDED:
            self.comment_edit.clear()

    def _edit(self) -> None:
        review = self._selected()
        if review is None:
            return
        self.board.open_modal(MODAL_UPDATE_REVIEW, review)
        CommentDialog(
            self,
            store=self.board.store,
            modal=MODAL_UPDATE_REVIEW,
            title="Edit review",
            on_submit=lambda text: self.board.update_selected(text),
            comment=review.comment,
        ).exec()

    def _delete(self) -> None:
        review = self._selected()
        if review is None:
            return
        self.board.open_modal(MODAL_DELETE_REVIEW, review)
        ConfirmDialog(
            self,
            store=self.board.store,
            modal=MODAL_DELETE_REVIEW,
            title="Delete review",
            message="Delete this review?",
            on_confirm=self.board.delete_selected,
        ).exec()

    def shutdown(self) -> None:
        self._unsubscribe()
