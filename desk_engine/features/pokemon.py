"""
Pokemon feature: a read-only catalogue with review threads.

The catalogue is not edited from the application. `seed_pokemons` fills a fresh
workspace with a starter roster.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from ..derive import Projection
from ..entities import Pokemon, PokemonStats
from ..gateway.api import DataGateway, OrderBy
from ..notify import Notifier
from ..orchestrator import CallRunner
from ..results import Failure, GatewayResult, Success
from ..session import Session
from .common import FeatureController, OnDone, parse_rows, relabel
from .reviews import POKEMON_REVIEWS, ReviewBoard

logger = logging.getLogger(__name__)

TABLE = "pokemons"

MODAL_DETAILS = "details"

SPRITE_URL = "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/other/official-artwork/{}.png"

POKEMON_PROJECTION: Projection[Pokemon] = Projection(
    name=lambda p: p.name,
    created_at=lambda p: p.created_at,
    text=(lambda p: " ".join(p.types),),
)


@dataclass(frozen=True, slots=True)
class PokemonSeed:
    """One catalogue entry to insert."""

    name: str
    image: str
    types: tuple[str, ...]
    stats: PokemonStats = field(default_factory=PokemonStats)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object]) -> "PokemonSeed":
        """Build a seed from a JSON-like mapping (``name``, ``image``, ``types``, ``stats``)."""
        name = str(payload.get("name") or "").strip()
        if not name:
            raise ValueError("Pokemon entry is missing a name.")
        raw_types = payload.get("types") or ()
        if isinstance(raw_types, str) or not isinstance(raw_types, Iterable):
            raise ValueError(f"Pokemon {name!r}: types must be a list.")
        return cls(
            name=name,
            image=str(payload.get("image") or ""),
            types=tuple(str(t) for t in raw_types),
            stats=PokemonStats.from_value(payload.get("stats") or {}),
        )


def _starter(number: int, name: str, types: tuple[str, ...], hp: int, atk: int, dfn: int, spd: int) -> PokemonSeed:
    return PokemonSeed(
        name=name,
        image=SPRITE_URL.format(number),
        types=types,
        stats=PokemonStats(hp=hp, attack=atk, defense=dfn, speed=spd),
    )


DEFAULT_ROSTER: tuple[PokemonSeed, ...] = (
    _starter(1, "bulbasaur", ("grass", "poison"), 45, 49, 49, 45),
    _starter(4, "charmander", ("fire",), 39, 52, 43, 65),
    _starter(7, "squirtle", ("water",), 44, 48, 65, 43),
    _starter(25, "pikachu", ("electric",), 35, 55, 40, 90),
    _starter(39, "jigglypuff", ("normal", "fairy"), 115, 45, 20, 20),
    _starter(52, "meowth", ("normal",), 40, 45, 35, 90),
    _starter(54, "psyduck", ("water",), 50, 52, 48, 55),
    _starter(133, "eevee", ("normal",), 55, 55, 50, 55),
    _starter(143, "snorlax", ("normal",), 160, 110, 65, 30),
)


# ---------- Actions ----------
def list_pokemons(gateway: DataGateway) -> GatewayResult:
    result = gateway.list(TABLE, order_by=(OrderBy("id"),))
    if isinstance(result, Failure):
        return relabel(result, "Failed to fetch pokemons")
    return parse_rows(result.data or (), Pokemon.from_row, "Failed to fetch pokemons")


def seed_pokemons(gateway: DataGateway, entries: Iterable[PokemonSeed] = DEFAULT_ROSTER) -> GatewayResult:
    """
    Insert catalogue entries whose name is not present yet.

    Returns
    -------
    GatewayResult
        ``Success(data={"added": n, "skipped": m})`` or the first Failure.
    """
    existing = gateway.list(TABLE)
    if isinstance(existing, Failure):
        return relabel(existing, "Failed to fetch pokemons")
    known = {str(row.get("name", "")).lower() for row in existing.data or ()}

    added = 0
    skipped = 0
    for entry in entries:
        if entry.name.lower() in known:
            skipped += 1
            continue
        inserted = gateway.insert(
            TABLE,
            {
                "name": entry.name,
                "image": entry.image,
                "types": list(entry.types),
                "stats": entry.stats.to_dict(),
            },
        )
        if isinstance(inserted, Failure):
            return relabel(inserted, f"Failed to add pokemon {entry.name}")
        known.add(entry.name.lower())
        added += 1

    logger.info("Seeded %d pokemon (%d already present)", added, skipped)
    return Success(data={"added": added, "skipped": skipped}, message=f"Added {added} pokemon")


# ---------- Controller ----------
class PokemonController(FeatureController[Pokemon]):
    """Pokemon catalogue plus the review thread of the pokemon being viewed."""

    name = "pokemon"
    projection = POKEMON_PROJECTION

    def __init__(
        self,
        gateway: DataGateway,
        notifier: Notifier,
        session: Session,
        *,
        runner: CallRunner | None = None,
    ) -> None:
        super().__init__(gateway, notifier, session, runner=runner)
        self.reviews = ReviewBoard(gateway, notifier, session, POKEMON_REVIEWS, runner=runner)

    def fetch(self) -> GatewayResult:
        return list_pokemons(self.gateway)

    def fetch_requirements(self) -> Mapping[str, object]:
        return {}

    def open_details(self, pokemon: Pokemon, on_done: OnDone = None) -> bool:
        self.open_modal(MODAL_DETAILS, pokemon)
        return self.reviews.show(pokemon.id, on_done)

    def close_details(self) -> None:
        self.close_modal(MODAL_DETAILS)
        self.store.clear_selection()
        self.reviews.hide()

    def dispose(self) -> None:
        self.reviews.dispose()
        super().dispose()
