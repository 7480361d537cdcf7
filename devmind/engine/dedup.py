"""URL based deduplication of imported bookmarks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable

from ..catalog.entry import BookmarkEntry, generate_id, utc_now
from .parser import RawBookmark


@dataclass(slots=True)
class DeduplicationResult:
    new_entries: list[BookmarkEntry]
    catalog_duplicates: int
    import_duplicates: int

    @property
    def duplicates(self) -> int:
        return self.catalog_duplicates + self.import_duplicates


class Deduplicator:
    """Turn candidates into fresh entries, dropping urls already known.

    A url repeated inside one import is kept once, at its first position.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = generate_id,
    ) -> None:
        self.clock = clock
        self.id_factory = id_factory

    def deduplicate(
        self, existing: Iterable[BookmarkEntry], candidates: Iterable[RawBookmark]
    ) -> DeduplicationResult:
        known_urls = {entry.url for entry in existing}
        seen: set[str] = set()
        new_entries: list[BookmarkEntry] = []
        catalog_dups = 0
        import_dups = 0
        for candidate in candidates:
            if candidate.url in known_urls:
                catalog_dups += 1
                continue
            if candidate.url in seen:
                import_dups += 1
                continue
            seen.add(candidate.url)
            new_entries.append(
                BookmarkEntry(
                    id=self.id_factory(),
                    title=candidate.title,
                    url=candidate.url,
                    processed=False,
                    added_at=self.clock(),
                )
            )
        return DeduplicationResult(new_entries, catalog_dups, import_dups)


__all__ = ["DeduplicationResult", "Deduplicator"]
