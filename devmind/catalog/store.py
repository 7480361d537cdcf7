"""Authoritative in-memory catalog persisted on every mutation."""

from __future__ import annotations

from typing import Iterable

import structlog
from pydantic import TypeAdapter, ValidationError

from ..exceptions import CatalogLoadError, PersistenceError
from ..infra.storage import BlobStore
from .entry import BookmarkEntry

_ENTRIES = TypeAdapter(list[BookmarkEntry])


class CatalogStore:
    """Own every BookmarkEntry and mirror the collection into a blob store.

    Mutations update memory first and then persist the full snapshot. A failed
    write is logged and remembered in ``last_persist_error`` but never undoes
    the in-memory change: memory is authoritative for the running process.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        key: str,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.blob_store = blob_store
        self.key = key
        self.logger = logger or structlog.get_logger("devmind.catalog")
        self.last_persist_error: str | None = None
        self._entries: list[BookmarkEntry] = self._load()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    def snapshot(self) -> tuple[BookmarkEntry, ...]:
        return tuple(self._entries)

    def get(self, entry_id: str) -> BookmarkEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def urls(self) -> set[str]:
        return {entry.url for entry in self._entries}

    def unprocessed(self) -> list[BookmarkEntry]:
        return [entry for entry in self._entries if not entry.processed]

    @property
    def unprocessed_count(self) -> int:
        return sum(1 for entry in self._entries if not entry.processed)

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def append(self, entries: Iterable[BookmarkEntry]) -> list[BookmarkEntry]:
        """Append entries whose url and id are new; return the ones kept."""

        known_urls = self.urls()
        known_ids = {entry.id for entry in self._entries}
        appended: list[BookmarkEntry] = []
        for entry in entries:
            if entry.url in known_urls or entry.id in known_ids:
                self.logger.warning("catalog_duplicate_rejected", url=entry.url, entry_id=entry.id)
                continue
            known_urls.add(entry.url)
            known_ids.add(entry.id)
            appended.append(entry)
        if appended:
            self._entries.extend(appended)
            self._persist()
        return appended

    def replace_all(self, entries: Iterable[BookmarkEntry]) -> None:
        new_entries = list(entries)
        urls = [entry.url for entry in new_entries]
        ids = [entry.id for entry in new_entries]
        if len(set(urls)) != len(urls):
            raise ValueError("replace_all would store duplicate urls")
        if len(set(ids)) != len(ids):
            raise ValueError("replace_all would store duplicate ids")
        self._entries = new_entries
        self._persist()

    def delete(self, entry_id: str) -> bool:
        remaining = [entry for entry in self._entries if entry.id != entry_id]
        if len(remaining) == len(self._entries):
            return False
        self._entries = remaining
        self._persist()
        return True

    # ------------------------------------------------------------------
    def _load(self) -> list[BookmarkEntry]:
        raw = self.blob_store.read(self.key)
        if raw is None:
            self.logger.info("catalog_empty", key=self.key)
            return []
        try:
            loaded = _ENTRIES.validate_json(raw)
        except ValidationError as exc:
            raise CatalogLoadError(self.key, f"{exc.error_count()} validation error(s)") from exc
        entries: list[BookmarkEntry] = []
        seen_urls: set[str] = set()
        for entry in loaded:
            if entry.url in seen_urls:
                self.logger.warning("catalog_duplicate_dropped", url=entry.url, entry_id=entry.id)
                continue
            seen_urls.add(entry.url)
            entries.append(entry)
        self.logger.info("catalog_loaded", key=self.key, entries=len(entries))
        return entries

    def _persist(self) -> None:
        payload = _ENTRIES.dump_json(self._entries).decode("utf-8")
        try:
            self.blob_store.write(self.key, payload)
        except PersistenceError as exc:
            self.last_persist_error = str(exc)
            self.logger.error("catalog_persist_failed", key=self.key, error=str(exc))
            return
        self.last_persist_error = None
        self.logger.debug("catalog_persisted", key=self.key, entries=len(self._entries))


__all__ = ["CatalogStore"]
