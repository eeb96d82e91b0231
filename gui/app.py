"""
PocketDesk GUI app.

Tabbed window backed by one engine `Workspace`. Gateway calls run on a worker
thread through `QtCallRunner`; notifications appear as toasts.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication, QHBoxLayout, QLabel, QTabWidget, QVBoxLayout, QWidget

from desk_engine.log import configure_logging
from desk_engine.settings import load_settings
from desk_engine.workspace import Workspace, workspace_paths
from gui.adapters.call_runner import QtCallRunner
from gui.notifier import ToastNotifier
from gui.tabs.drive_tab import DriveTab
from gui.tabs.food_tab import FoodTab
from gui.tabs.notes_tab import NotesTab
from gui.tabs.pokemon_tab import PokemonTab
from gui.tabs.settings_tab import SettingsTab
from gui.tabs.tasks_tab import TasksTab

logger = logging.getLogger(__name__)


class AppWindow(QWidget):
    """
    Main window for the PocketDesk GUI.

    Responsibilities
    ----------------
    - Host the tabbed interface (Tasks, Drive, Food, Pokemon, Notes, Settings)
    - Own the session workspace and the call runner
    - Shut both down cleanly on close
    """

    def __init__(self, data_root: Path | None = None) -> None:
        super().__init__()
        self.setWindowTitle("PocketDesk")
        self.setMinimumSize(960, 600)
        self.resize(1240, 760)

        paths = workspace_paths(data_root)
        self._runner = QtCallRunner()
        self._notifier = ToastNotifier(self)
        self.workspace = Workspace.open(self._notifier, data_root=paths.data_root, runner=self._runner)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.addWidget(self._build_banner())

        tabs = QTabWidget()
        ws = self.workspace
        self._tabs = [
            (TasksTab(ws.tasks), "Tasks"),
            (DriveTab(ws.drive), "Drive"),
            (FoodTab(ws.food), "Food"),
            (PokemonTab(ws.pokemon), "Pokemon"),
            (NotesTab(ws.notes), "Notes"),
        ]
        for tab, label in self._tabs:
            tabs.addTab(tab, label)
        tabs.addTab(SettingsTab(paths.settings_path), "Settings")

        layout.addWidget(tabs, 1)

        ws.refresh_all()

    def _build_banner(self) -> QWidget:
        session = self.workspace.session
        if session.signed_in:
            who = f"Signed in as {session.display_name or session.user_id}"
        else:
            who = "Not signed in (see Settings)"

        banner = QWidget()
        row = QHBoxLayout(banner)
        row.setContentsMargins(10, 6, 10, 6)

        name = QLabel("PocketDesk")
        font = name.font()
        font.setPointSize(15)
        font.setBold(True)
        name.setFont(font)
        row.addWidget(name)
        row.addSpacing(14)

        status = QLabel(who)
        status.setStyleSheet("color: #777;")
        row.addWidget(status)
        row.addStretch(1)
        return banner

    def closeEvent(self, event) -> None:  # type: ignore[override]
        """
        Handle window close by disposing stores and stopping the worker thread.

        Parameters
        ----------
        event:
            Qt close event.
        """
        logger.info("Closing window; disposing %d tabs", len(self._tabs))
        try:
            for tab, _label in self._tabs:
                tab.shutdown()
            self.workspace.close()
            self._runner.shutdown()
        finally:
            super().closeEvent(event)


def run_gui(data_root: Path | None = None) -> int:
    """
    Run the PocketDesk GUI application.

    Logging is configured from the workspace settings before the window opens.

    Returns
    -------
    int
        Qt application exit code.
    """
    paths = workspace_paths(data_root)
    configure_logging(paths.logs_root, load_settings(paths.settings_path).log_level)

    app = QApplication.instance() or QApplication(sys.argv)
    w = AppWindow(paths.data_root)
    w.show()
    return app.exec()


def main() -> int:
    return run_gui()


if __name__ == "__main__":
    raise SystemExit(main())
