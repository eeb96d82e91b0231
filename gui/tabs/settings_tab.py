from __future__ import annotations

from pathlib import Path

from PySide6.QtWidgets import (
    QComboBox,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from desk_engine.derive import SortKey
from desk_engine.errors import SettingsError
from desk_engine.settings import LOG_LEVELS, DeskSettings, load_settings, save_settings


class SettingsTab(QWidget):
    """
    Settings tab for the PocketDesk window.

    Responsibilities
    ----------------
    - Edit the acting user and view defaults.
    - Persist them to ``settings.json`` in the workspace.

    Notes
    -----
    Changes apply the next time the window is opened.
    """

    def __init__(self, settings_path: Path) -> None:
        super().__init__()

        self._path = settings_path
        self._settings = load_settings(settings_path)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)

        box = QGroupBox("Account")
        box_layout = QVBoxLayout(box)
        self.user_edit = QLineEdit()
        self.user_edit.setPlaceholderText("User id (required to add your own items)")
        self.name_edit = QLineEdit()
        self.name_edit.setPlaceholderText("Display name")
        self.email_edit = QLineEdit()
        self.email_edit.setPlaceholderText("Email")
        for label, edit in (("User id:", self.user_edit), ("Name:", self.name_edit), ("Email:", self.email_edit)):
            row = QHBoxLayout()
            row.addWidget(QLabel(label))
            row.addWidget(edit, 1)
            box_layout.addLayout(row)
        layout.addWidget(box)

        box2 = QGroupBox("Defaults")
        box2_layout = QVBoxLayout(box2)

        self.sort_combo = QComboBox()
        for key in SortKey:
            self.sort_combo.addItem(key.label, key)
        self.view_combo = QComboBox()
        self.view_combo.addItem("Grid", "grid")
        self.view_combo.addItem("List", "list")
        self.log_combo = QComboBox()
        for level in sorted(LOG_LEVELS):
            self.log_combo.addItem(level, level)
        for label, combo in (
            ("Default sort:", self.sort_combo),
            ("Drive view:", self.view_combo),
            ("Log level:", self.log_combo),
        ):
            row = QHBoxLayout()
            row.addWidget(QLabel(label))
            row.addWidget(combo, 1)
            box2_layout.addLayout(row)

        btn_save = QPushButton("Save Settings")
        btn_save.clicked.connect(self._save)
        box2_layout.addWidget(btn_save)

        layout.addWidget(box2)
        layout.addStretch(1)

        self._load_into_widgets()

    def _load_into_widgets(self) -> None:
        s = self._settings
        self.user_edit.setText(s.user_id or "")
        self.name_edit.setText(s.display_name)
        self.email_edit.setText(s.email)
        self._select_combo_by_data(self.sort_combo, s.default_sort)
        self._select_combo_by_data(self.view_combo, s.view_mode)
        self._select_combo_by_data(self.log_combo, s.log_level)

    @staticmethod
    def _select_combo_by_data(combo: QComboBox, value: object) -> None:
        index = combo.findData(value)
        if index >= 0:
            combo.setCurrentIndex(index)

    def _save(self) -> None:
        user_id = self.user_edit.text().strip()
        settings = DeskSettings(
            user_id=user_id or None,
            display_name=self.name_edit.text().strip(),
            email=self.email_edit.text().strip(),
            default_sort=self.sort_combo.currentData(),
            view_mode=str(self.view_combo.currentData()),
            log_level=str(self.log_combo.currentData()),
        )

        try:
            save_settings(self._path, settings)
        except SettingsError as exc:
            QMessageBox.critical(self, "Settings", str(exc))
            return

        self._settings = settings
        QMessageBox.information(self, "Settings", "Saved. Reopen PocketDesk to apply.")
