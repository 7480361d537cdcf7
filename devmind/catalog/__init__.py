"""Catalog model, store and query layer."""

from .entry import BookmarkEntry, Category
from .query import (
    ALL_FACET,
    UNCATEGORIZED_FACET,
    category_facets,
    facet_counts,
    filter_entries,
    unprocessed_count,
)
from .store import CatalogStore

__all__ = [
    "ALL_FACET",
    "BookmarkEntry",
    "CatalogStore",
    "Category",
    "UNCATEGORIZED_FACET",
    "category_facets",
    "facet_counts",
    "filter_entries",
    "unprocessed_count",
]
