"""Pokemon tab: catalogue, stats and reviews."""

from __future__ import annotations

from html import escape

from PySide6.QtWidgets import QWidget

from desk_engine.entities import Pokemon
from desk_engine.features.pokemon import PokemonController
from gui.tabs.base_list_tab import ListTab
from gui.tabs.review_panel import ReviewPanel


class PokemonTab(ListTab):
    TITLE = "Pokemon"
    BUTTONS = (("Details", "open"), ("Close", "close"))

    controller: PokemonController

    def create_side_panel(self) -> QWidget:
        self.review_panel = ReviewPanel(self.controller.reviews)
        return self.review_panel

    def row_text(self, item: Pokemon) -> str:
        return f"#{item.id:03d}  {item.name.capitalize()}   {' / '.join(item.types)}"

    def on_item_activated(self) -> None:
        self.action_open()

    def action_open(self) -> None:
        pokemon = self.selected_item()
        if pokemon is None:
            return
        s = pokemon.stats
        rows = "".join(
            f"<tr><td>{label}</td><td><b>{value}</b></td></tr>"
            for label, value in (("HP", s.hp), ("Attack", s.attack), ("Defense", s.defense), ("Speed", s.speed))
        )
        self.review_panel.show_details(
            f"<h3>{escape(pokemon.name.capitalize())}</h3>"
            f"<p>{escape(', '.join(pokemon.types))}</p>"
            f"<table>{rows}</table>"
        )
        self.controller.open_details(pokemon)

    def action_close(self) -> None:
        self.controller.close_details()
        self.review_panel.clear()

    def shutdown(self) -> None:
        self.review_panel.shutdown()
        super().shutdown()
