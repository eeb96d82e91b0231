"""
Base class for tabs that show one feature's searchable, sortable list.

Subclasses declare `TITLE` and `BUTTONS`, implement `row_text` and provide an
``action_<name>`` method per button. The list re-renders whenever the
controller's store changes or the search/sort inputs change.
"""

from __future__ import annotations

from typing import Any, Callable

from PySide6.QtCore import Qt
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from desk_engine.derive import SortKey
from desk_engine.features.common import FeatureController


class ListTab(QWidget):
    """
    Searchable list bound to a `FeatureController`.

    Attributes
    ----------
    TITLE:
        Header text.
    BUTTONS:
        ``(label, action)`` pairs; clicking calls ``action_<action>``.
    """

    TITLE = ""
    BUTTONS: tuple[tuple[str, str], ...] = ()

    def __init__(self, controller: FeatureController[Any]) -> None:
        super().__init__()
        self.controller = controller
        self._buttons: dict[str, QPushButton] = {}
        self._unsubscribers: list[Callable[[], None]] = []

        self.setup_ui()
        self.watch(controller.store.subscribe(self._render))
        self._render()

    # ---------- Layout ----------
    def setup_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(12, 12, 12, 12)
        root.addWidget(self._create_header())

        body = QHBoxLayout()
        left = QVBoxLayout()
        self.list_widget = self._create_list_widget()
        left.addWidget(self.list_widget, 1)
        left.addWidget(self._create_button_panel())
        body.addLayout(left, 3)

        side = self.create_side_panel()
        if side is not None:
            body.addWidget(side, 2)
        root.addLayout(body, 1)

    def _create_header(self) -> QWidget:
        header = QWidget()
        row = QHBoxLayout(header)
        row.setContentsMargins(0, 0, 0, 0)

        title = QLabel(self.TITLE)
        f = title.font()
        f.setPointSize(13)
        f.setBold(True)
        title.setFont(f)
        row.addWidget(title)
        row.addSpacing(12)

        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText("Search…")
        self.search_edit.setClearButtonEnabled(True)
        self.search_edit.textChanged.connect(self._on_search)
        row.addWidget(self.search_edit, 1)

        self.sort_combo = QComboBox()
        for key in SortKey:
            self.sort_combo.addItem(key.label, key)
        index = self.sort_combo.findData(SortKey.parse(self.controller.sort_key))
        self.sort_combo.setCurrentIndex(max(index, 0))
        self.sort_combo.currentIndexChanged.connect(self._on_sort)
        row.addWidget(self.sort_combo)

        self.add_header_widgets(row)

        btn_refresh = QPushButton("Refresh")
        btn_refresh.clicked.connect(lambda: self.controller.refresh())
        row.addWidget(btn_refresh)
        return header

    def _create_list_widget(self) -> QListWidget:
        widget = QListWidget()
        widget.itemSelectionChanged.connect(self._on_selection_changed)
        widget.itemDoubleClicked.connect(lambda _item: self.on_item_activated())
        return widget

    def _create_button_panel(self) -> QWidget:
        panel = QWidget()
        row = QHBoxLayout(panel)
        row.setContentsMargins(0, 0, 0, 0)
        for label, action in self.BUTTONS:
            btn = QPushButton(label)
            btn.clicked.connect(lambda _checked=False, a=action: self.handle_button_action(a))
            row.addWidget(btn)
            self._buttons[action] = btn
        row.addStretch(1)
        return panel

    # ---------- Hooks ----------
    def row_text(self, item: Any) -> str:
        raise NotImplementedError

    def decorate(self, list_item: QListWidgetItem, item: Any) -> None:
        """Adjust a rendered row (icon, font, tooltip)."""

    def add_header_widgets(self, row: QHBoxLayout) -> None:
        """Add extra filter widgets before the refresh button."""

    def create_side_panel(self) -> QWidget | None:
        return None

    def on_item_activated(self) -> None:
        """Called on double click."""

    def after_render(self) -> None:
        """Called after the list was rebuilt."""

    # ---------- Behaviour ----------
    def watch(self, unsubscribe: Callable[[], None]) -> None:
        """Remember a store subscription so `shutdown` can drop it."""
        self._unsubscribers.append(unsubscribe)

    def handle_button_action(self, action: str) -> None:
        handler = getattr(self, f"action_{action}", None)
        if handler is not None:
            handler()

    def selected_item(self) -> Any | None:
        current = self.list_widget.currentItem()
        return None if current is None else current.data(Qt.UserRole)

    def _on_search(self, text: str) -> None:
        self.controller.query = text
        self._render()

    def _on_sort(self, _index: int) -> None:
        self.controller.sort_key = self.sort_combo.currentData()
        self._render()

    def _on_selection_changed(self) -> None:
        item = self.selected_item()
        if item is not None and item != self.controller.store.selected:
            self.controller.store.select(item)

    def _render(self) -> None:
        previous = self.controller.store.selected
        self.list_widget.blockSignals(True)
        self.list_widget.clear()
        for item in self.controller.visible():
            row = QListWidgetItem(self.row_text(item))
            row.setData(Qt.UserRole, item)
            self.decorate(row, item)
            self.list_widget.addItem(row)
            if previous is not None and getattr(item, "id", None) == getattr(previous, "id", object()):
                self.list_widget.setCurrentItem(row)
        self.list_widget.blockSignals(False)
        self.after_render()

    def shutdown(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()


def bold(font: QFont) -> QFont:
    f = QFont(font)
    f.setBold(True)
    return f
