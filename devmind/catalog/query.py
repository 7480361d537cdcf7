"""Facet and search derivations over a catalog snapshot."""

from __future__ import annotations

from typing import Iterable, Sequence

from .entry import BookmarkEntry

ALL_FACET = "All"
UNCATEGORIZED_FACET = "Uncategorized"


def category_facets(entries: Iterable[BookmarkEntry]) -> list[str]:
    """Return "All", the sorted distinct categories, then "Uncategorized"."""

    categories = {entry.category for entry in entries if entry.category}
    return [ALL_FACET, *sorted(categories), UNCATEGORIZED_FACET]


def matches_facet(entry: BookmarkEntry, facet: str) -> bool:
    if facet == ALL_FACET:
        return True
    if facet == UNCATEGORIZED_FACET:
        return not entry.category
    return entry.category == facet


def matches_query(entry: BookmarkEntry, query: str) -> bool:
    if not query:
        return True
    needle = query.casefold()
    if needle in entry.title.casefold():
        return True
    if entry.description and needle in entry.description.casefold():
        return True
    return any(needle in tag.casefold() for tag in entry.tags or ())


def filter_entries(
    entries: Iterable[BookmarkEntry], query: str = "", facet: str = ALL_FACET
) -> list[BookmarkEntry]:
    """Entries matching both the facet and the free-text query, in catalog order."""

    return [entry for entry in entries if matches_facet(entry, facet) and matches_query(entry, query)]


def facet_counts(entries: Sequence[BookmarkEntry]) -> list[tuple[str, int]]:
    return [
        (facet, sum(1 for entry in entries if matches_facet(entry, facet)))
        for facet in category_facets(entries)
    ]


def unprocessed_count(entries: Iterable[BookmarkEntry]) -> int:
    return sum(1 for entry in entries if not entry.processed)


__all__ = [
    "ALL_FACET",
    "UNCATEGORIZED_FACET",
    "category_facets",
    "facet_counts",
    "filter_entries",
    "matches_facet",
    "matches_query",
    "unprocessed_count",
]
