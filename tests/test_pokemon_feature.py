from __future__ import annotations

import pytest

from desk_engine.features.pokemon import (
    DEFAULT_ROSTER,
    PokemonController,
    PokemonSeed,
    seed_pokemons,
)
from desk_engine.results import Success
from desk_engine.session import Session

from conftest import RecordingGateway, RecordingNotifier


def test_seed_inserts_roster_once(gateway: RecordingGateway) -> None:
    first = seed_pokemons(gateway)
    assert isinstance(first, Success)
    assert first.data == {"added": len(DEFAULT_ROSTER), "skipped": 0}

    again = seed_pokemons(gateway, [PokemonSeed("PIKACHU", "", ("electric",)), PokemonSeed("mew", "", ("psychic",))])
    assert again.data == {"added": 1, "skipped": 1}
    assert again.message == "Added 1 pokemon"


def test_catalogue_is_public_and_ordered_by_id(
    gateway: RecordingGateway, notifier: RecordingNotifier, anonymous: Session
) -> None:
    seed_pokemons(gateway)
    pokemon = PokemonController(gateway, notifier, anonymous)
    pokemon.refresh()

    assert pokemon.store.items[0].name == "bulbasaur"
    assert pokemon.store.items[0].types == ("grass", "poison")
    assert pokemon.store.items[-1].stats.hp == 160

    pokemon.query = "fire"
    assert [p.name for p in pokemon.visible()] == ["charmander"]


def test_details_load_reviews_and_anonymous_cannot_review(
    gateway: RecordingGateway, notifier: RecordingNotifier, anonymous: Session
) -> None:
    seed_pokemons(gateway)
    pokemon = PokemonController(gateway, notifier, anonymous)
    pokemon.refresh()
    pikachu = next(p for p in pokemon.store.items if p.name == "pikachu")

    pokemon.open_details(pikachu)
    assert pokemon.store.selected == pikachu
    assert pokemon.reviews.parent_id == pikachu.id

    assert pokemon.reviews.create("electric!") is False
    assert notifier.errors == ["Please login to leave a review"]

    pokemon.close_details()
    assert pokemon.store.selected is None


def test_signed_in_review(gateway: RecordingGateway, notifier: RecordingNotifier, session: Session) -> None:
    seed_pokemons(gateway)
    pokemon = PokemonController(gateway, notifier, session)
    pokemon.refresh()
    pokemon.open_details(pokemon.store.items[0])
    pokemon.reviews.create("a classic")
    assert notifier.successes == ["Pokemon review created successfully"]
    assert pokemon.reviews.store.items[0].parent_id == pokemon.store.items[0].id


@pytest.mark.parametrize(
    "payload",
    [{"types": ["fire"]}, {"name": "x", "types": "fire"}],
)
def test_seed_entry_validation(payload: dict) -> None:
    with pytest.raises(ValueError):
        PokemonSeed.from_mapping(payload)


def test_seed_entry_from_mapping() -> None:
    seed = PokemonSeed.from_mapping({"name": " mew ", "types": ["psychic"], "stats": {"hp": 100}})
    assert seed.name == "mew"
    assert seed.stats.hp == 100
