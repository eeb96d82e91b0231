"""
List derivation: search, filter and sort over an in-memory entity collection.

Every list in the application is displayed through `derive`, which is pure: it
reads the input sequence, never mutates it, and returns a new list. Its result
depends only on ``(items, query, sort_key)`` so it can be memoized on those
inputs; `DerivedView` does exactly that for views that re-render often.

Notes
-----
- Matching is a case-insensitive substring test over several text projections
  of an entity (name, description-like fields and the formatted creation date).
- Sorting is stable. Python's ``sorted`` keeps equal elements in input order,
  including with ``reverse=True``.
- An unrecognised sort key leaves the filtered items in input order.
"""

from __future__ import annotations

import locale
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Generic, Sequence, TypeVar

from .formatting import format_display_date

T = TypeVar("T")


class SortKey(str, Enum):
    """Closed set of list orderings."""

    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    DATE_NEWEST = "date-newest"
    DATE_OLDEST = "date-oldest"

    @property
    def label(self) -> str:
        return _SORT_LABELS[self]

    @classmethod
    def parse(cls, value: object) -> "SortKey | None":
        """Return the matching key, or None for anything unrecognised."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            return None


_SORT_LABELS = {
    SortKey.NAME_ASC: "Name (A to Z)",
    SortKey.NAME_DESC: "Name (Z to A)",
    SortKey.DATE_NEWEST: "Newest First",
    SortKey.DATE_OLDEST: "Oldest First",
}


@dataclass(frozen=True, slots=True)
class Projection(Generic[T]):
    """
    How an entity type is seen by search and sort.

    Attributes
    ----------
    name:
        Primary display text; used for name sorting and searched.
    created_at:
        Creation timestamp; used for date sorting and searched in its
        formatted form.
    text:
        Additional searchable fields (description, note body, ...).
    """

    name: Callable[[T], str]
    created_at: Callable[[T], datetime]
    text: tuple[Callable[[T], str], ...] = ()

    def searchable(self, item: T) -> tuple[str, ...]:
        """Return every text projection of `item`, lower-cased."""
        values = [self.name(item), *(fn(item) for fn in self.text)]
        values.append(format_display_date(self.created_at(item)))
        return tuple(v.lower() for v in values)


def normalize_query(query: str) -> str:
    """Return the canonical form of a search query (trimmed, lower-cased)."""
    return query.strip().lower()


def matches(item: T, query: str, projection: Projection[T]) -> bool:
    """Return True if the normalized `query` occurs in any projection of `item`."""
    needle = normalize_query(query)
    if not needle:
        return True
    return any(needle in text for text in projection.searchable(item))


def _collation_key(text: str) -> str:
    return locale.strxfrm(text.lower())


def sort_items(items: Sequence[T], sort_key: SortKey | str, projection: Projection[T]) -> list[T]:
    """
    Return a stably sorted copy of `items`.

    Unknown keys return the items in their original order.
    """
    key = SortKey.parse(sort_key)
    if key is SortKey.NAME_ASC:
        return sorted(items, key=lambda it: _collation_key(projection.name(it)))
    if key is SortKey.NAME_DESC:
        return sorted(items, key=lambda it: _collation_key(projection.name(it)), reverse=True)
    if key is SortKey.DATE_NEWEST:
        return sorted(items, key=lambda it: projection.created_at(it).timestamp(), reverse=True)
    if key is SortKey.DATE_OLDEST:
        return sorted(items, key=lambda it: projection.created_at(it).timestamp())
    return list(items)


def derive(
    items: Sequence[T],
    query: str,
    sort_key: SortKey | str,
    projection: Projection[T],
) -> list[T]:
    """
    Filter `items` by `query`, then sort by `sort_key`.

    Parameters
    ----------
    items:
        Source collection. Not modified.
    query:
        Free-text search; blank matches everything.
    sort_key:
        One of the `SortKey` values (or its string form). Unknown values keep
        input order.
    projection:
        Text/timestamp accessors for the entity type.

    Returns
    -------
    list
        A new list; empty input yields an empty list.
    """
    filtered = [it for it in items if matches(it, query, projection)]
    return sort_items(filtered, sort_key, projection)


class DerivedView(Generic[T]):
    """
    Memoized `derive` for a single list view.

    The cached result is reused while the same items object (by identity), the
    same query and the same sort key are supplied. Stores replace their item
    tuple on every fetch, so identity is a sufficient change signal.
    """

    def __init__(self, projection: Projection[T]) -> None:
        self._projection = projection
        self._inputs: tuple[object, str, str] | None = None
        self._items_ref: Sequence[T] | None = None
        self._result: list[T] = []

    def compute(self, items: Sequence[T], query: str, sort_key: SortKey | str) -> list[T]:
        key_text = sort_key.value if isinstance(sort_key, SortKey) else str(sort_key)
        inputs = (id(items), query, key_text)
        if self._inputs == inputs and self._items_ref is items:
            return list(self._result)
        self._result = derive(items, query, sort_key, self._projection)
        self._inputs = inputs
        self._items_ref = items
        return list(self._result)
