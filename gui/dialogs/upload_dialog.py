"""
Image upload dialog with a progress bar.

The bar renders an `UploadProgress` state machine fed by byte counts that the
gateway reports from the worker thread (via `ProgressRelay`). While the total
size is unknown the bar is indeterminate.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPlainTextEdit,
    QProgressBar,
    QPushButton,
    QWidget,
)

from desk_engine.formatting import format_file_size
from desk_engine.gateway.api import ProgressCallback
from desk_engine.orchestrator import Outcome, Settled
from desk_engine.state import EntityStore
from desk_engine.upload import MAX_IMAGE_BYTES, UploadPhase, UploadProgress
from gui.adapters.call_runner import ProgressRelay
from gui.dialogs.modal_dialog import ModalDialog

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.webp)"

# (file_name, data, on_progress, on_done) -> started
UploadStarter = Callable[[str, bytes, ProgressCallback, Callable[[Settled], None]], bool]


class UploadDialog(ModalDialog):
    """
    Pick an image and upload it.

    Parameters
    ----------
    on_upload:
        Starts the upload through a controller.
    with_details:
        Also ask for a name and description (food posts).
    """

    def __init__(
        self,
        parent: QWidget | None,
        *,
        store: EntityStore,
        modal: str,
        title: str,
        on_upload: UploadStarter,
        with_details: bool = False,
    ) -> None:
        super().__init__(parent, store=store, modal=modal, title=title, ok_text="Upload")
        self.resize(520, 420)
        self._on_upload = on_upload
        self._path: Path | None = None
        self._progress = UploadProgress()

        self._relay = ProgressRelay(self)
        self._relay.progressed.connect(self._on_progress)

        self.name_edit: QLineEdit | None = None
        self.description_edit: QPlainTextEdit | None = None
        if with_details:
            self.name_edit = QLineEdit()
            self.name_edit.setPlaceholderText("Food name")
            self.description_edit = QPlainTextEdit()
            self.description_edit.setPlaceholderText("Description")
            self.description_edit.setFixedHeight(80)
            self.body.addWidget(self.name_edit)
            self.body.addWidget(self.description_edit)

        row = QHBoxLayout()
        self.file_label = QLabel("No file selected")
        btn_browse = QPushButton("Choose image…")
        btn_browse.clicked.connect(self._browse)
        row.addWidget(self.file_label, 1)
        row.addWidget(btn_browse)
        self.body.addLayout(row)

        self.preview = QLabel()
        self.preview.setAlignment(Qt.AlignCenter)
        self.preview.setMinimumHeight(180)
        self.body.addWidget(self.preview, 1)

        hint = QLabel(f"JPEG, PNG, GIF or WEBP up to {format_file_size(MAX_IMAGE_BYTES)}")
        hint.setStyleSheet("color: #666;")
        self.body.addWidget(hint)

        self.progress_bar = QProgressBar()
        self.progress_bar.hide()
        self.body.addWidget(self.progress_bar)

    def _browse(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Select image", str(Path.home()), IMAGE_FILTER)
        if not path:
            return
        self._path = Path(path)
        try:
            size = self._path.stat().st_size
        except OSError:
            size = 0
        self.file_label.setText(f"{self._path.name} ({format_file_size(size)})")
        pixmap = QPixmap(str(self._path))
        if not pixmap.isNull():
            self.preview.setPixmap(pixmap.scaled(320, 180, Qt.KeepAspectRatio, Qt.SmoothTransformation))

    @property
    def name(self) -> str:
        return self.name_edit.text() if self.name_edit is not None else ""

    @property
    def description(self) -> str:
        return self.description_edit.toPlainText() if self.description_edit is not None else ""

    def submit(self) -> None:
        if self._path is None:
            QMessageBox.information(self, self.windowTitle(), "Choose an image first.")
            return
        try:
            data = self._path.read_bytes()
        except OSError as exc:
            QMessageBox.critical(self, self.windowTitle(), f"Cannot read {self._path.name}: {exc}")
            return

        self._progress.reset()
        self._progress.start(len(data))
        self._render()
        if not self._on_upload(self._path.name, data, self._relay.report, self._on_done):
            self._progress.reset()
            self._render()

    def _on_progress(self, sent: int, total: object) -> None:
        self._progress.advance(sent, total if isinstance(total, int) else None)
        self._render()

    def _on_done(self, settled: Settled) -> None:
        if settled.outcome is Outcome.SUCCEEDED:
            self._progress.finish()
        else:
            self._progress.fail(settled.message or "Upload failed")
        self._render()

    def _render(self) -> None:
        snap = self._progress.snapshot
        if snap.phase is UploadPhase.IDLE:
            self.progress_bar.hide()
            return
        self.progress_bar.show()
        percent = snap.percent
        if percent is None and snap.phase is UploadPhase.UPLOADING:
            self.progress_bar.setRange(0, 0)
            return
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(percent or 0)
        self.progress_bar.setFormat("Failed" if snap.phase is UploadPhase.FAILED else "%p%")
