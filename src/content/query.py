"""Derive filtered, searched and sorted views of a content collection.

Everything here is a pure function of its inputs: the collection passed
in is never modified and a new list is returned.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Sequence
from typing import TYPE_CHECKING

from randpick.content.models import (
    ALL_CATEGORIES,
    ContentItem,
    QuerySpec,
    SortDirection,
    SortKey,
)

if TYPE_CHECKING:
    from randpick.content.store import ContentStore


def collation_key(text: str) -> tuple[str, str, str]:
    """Sort key approximating locale-aware string comparison.

    Compares base letters first (accents and case ignored), then case-
    folded text, then the raw text so the order stays total.
    """
    folded = text.casefold()
    decomposed = unicodedata.normalize("NFKD", folded)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base, folded, text)


def _sort_key(spec: QuerySpec):
    if spec.sort_key is SortKey.ALPHABETICAL:
        return lambda item: collation_key(item.text)
    return lambda item: item.created_at


def run_query(items: Sequence[ContentItem], spec: QuerySpec | None = None) -> list[ContentItem]:
    """Apply ``spec`` to ``items`` and return the resulting view.

    Filtering keeps insertion order; sorting is stable, and descending
    order inverts the comparison rather than the sorted list, so items
    with equal keys stay in insertion order in both directions.
    """
    spec = spec or QuerySpec()
    results = list(items)

    if spec.category != ALL_CATEGORIES:
        results = [item for item in results if item.category == spec.category]

    if spec.search:
        term = spec.search.casefold()
        results = [item for item in results if term in item.text.casefold()]

    return sorted(
        results,
        key=_sort_key(spec),
        reverse=spec.direction is SortDirection.DESC,
    )


class QueryEngine:
    """Runs queries against the current snapshot of a ContentStore."""

    def __init__(self, store: ContentStore) -> None:
        self._store = store

    def run(self, spec: QuerySpec | None = None) -> list[ContentItem]:
        return run_query(self._store.all(), spec)

    def count(self, spec: QuerySpec | None = None) -> int:
        """Number of items the view for ``spec`` would contain."""
        return len(self.run(spec))
