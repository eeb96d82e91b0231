"""Food tab: shared food feed, post details and reviews."""

from __future__ import annotations

from html import escape

from PySide6.QtCore import QUrl
from PySide6.QtWidgets import QListWidgetItem, QWidget

from desk_engine.entities import FoodPost
from desk_engine.features.food import MODAL_UPLOAD, FoodController
from desk_engine.formatting import format_display_date
from gui.dialogs.upload_dialog import UploadDialog
from gui.tabs.base_list_tab import ListTab
from gui.tabs.review_panel import ReviewPanel


class FoodTab(ListTab):
    TITLE = "Food"
    BUTTONS = (("Post food", "post"), ("Open", "open"), ("Close", "close"))

    controller: FoodController

    def create_side_panel(self) -> QWidget:
        self.review_panel = ReviewPanel(self.controller.reviews)
        return self.review_panel

    def row_text(self, item: FoodPost) -> str:
        return f"{item.name}   by {item.profile.name}   {format_display_date(item.created_at)}"

    def decorate(self, list_item: QListWidgetItem, item: FoodPost) -> None:
        list_item.setToolTip(item.description)

    def on_item_activated(self) -> None:
        self.action_open()

    # ---------- Actions ----------
    def action_post(self) -> None:
        self.controller.open_modal(MODAL_UPLOAD)
        dialog: UploadDialog | None = None

        def start(name, data, progress, done) -> bool:
            assert dialog is not None
            return self.controller.upload(
                dialog.name, dialog.description, name, data, on_progress=progress, on_done=done
            )

        dialog = UploadDialog(
            self,
            store=self.controller.store,
            modal=MODAL_UPLOAD,
            title="Post food",
            on_upload=start,
            with_details=True,
        )
        dialog.exec()

    def action_open(self) -> None:
        post = self.selected_item()
        if post is None:
            return
        image = QUrl(post.url).toLocalFile() or post.url
        self.review_panel.show_details(
            f"<h3>{escape(post.name)}</h3>"
            f"<p><img src='{escape(image)}' width='280'></p>"
            f"<p>{escape(post.description)}</p>"
            f"<p style='color:#666'>{escape(post.profile.initials)} · {escape(post.profile.name)}"
            f" · {format_display_date(post.created_at)}</p>"
        )
        self.controller.open_post(post)

    def action_close(self) -> None:
        self.controller.close_post()
        self.review_panel.clear()

    def shutdown(self) -> None:
        self.review_panel.shutdown()
        super().shutdown()
