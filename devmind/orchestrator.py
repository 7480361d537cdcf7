"""Process-wide coordinator wiring config, catalog, import and enrichment."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .catalog import (
    ALL_FACET,
    BookmarkEntry,
    CatalogStore,
    category_facets,
    facet_counts,
    filter_entries,
)
from .config import ConfigRepository, GlobalConfig
from .engine import (
    BookmarkParser,
    Classifier,
    Deduplicator,
    EnrichmentPipeline,
    HttpClassifier,
    ParseResult,
    RunSummary,
)
from .engine.merger import BatchCallback
from .infra import BlobStore, FileBlobStore, SQLiteBlobStore, SQLiteManager
from .logging_conf import configure_logging


@dataclass(slots=True)
class ImportSummary:
    anchors: int
    accepted: int
    skipped: int
    truncated: int
    duplicates: int
    added: int


class Orchestrator:
    """Central coordinator owning the catalog for the lifetime of the process."""

    def __init__(
        self,
        config_repository: ConfigRepository,
        storage: SQLiteManager | None = None,
        classifier: Classifier | None = None,
        blob_store: BlobStore | None = None,
        deduplicator: Deduplicator | None = None,
    ) -> None:
        self.config_repository = config_repository
        self.global_config: GlobalConfig = config_repository.load_global_config()
        self.storage = storage or SQLiteManager()
        self.logger = configure_logging().bind(component="orchestrator")
        self.blob_store = blob_store or self._create_blob_store()
        self.catalog = CatalogStore(
            self.blob_store,
            key=self.global_config.storage.key,
            logger=self.logger.bind(component="catalog"),
        )
        self.parser = BookmarkParser()
        self.deduplicator = deduplicator or Deduplicator()
        self.classifier = classifier or HttpClassifier(
            self.global_config.classifier, logger=self.logger.bind(component="classifier")
        )
        self.pipeline = EnrichmentPipeline(
            self.catalog,
            self.classifier,
            batch_size=self.global_config.enrichment.batch_size,
            logger=self.logger.bind(component="pipeline"),
        )

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------
    def import_file(self, path: Path, limit: int | None = None) -> ImportSummary:
        effective_limit = limit or self.global_config.enrichment.import_limit
        parsed = self.parser.parse_file(path, limit=effective_limit)
        return self._ingest(parsed, origin=str(path))

    def import_html(self, html: str, limit: int | None = None) -> ImportSummary:
        effective_limit = limit or self.global_config.enrichment.import_limit
        parsed = self.parser.parse(html, limit=effective_limit)
        return self._ingest(parsed, origin="<memory>")

    def _ingest(self, parsed: ParseResult, origin: str) -> ImportSummary:
        if parsed.truncated:
            self.logger.warning(
                "import_truncated",
                origin=origin,
                accepted=len(parsed.records),
                truncated=parsed.truncated,
            )
        result = self.deduplicator.deduplicate(self.catalog.snapshot(), parsed.records)
        appended = self.catalog.append(result.new_entries)
        summary = ImportSummary(
            anchors=parsed.anchors,
            accepted=len(parsed.records),
            skipped=parsed.skipped,
            truncated=parsed.truncated,
            duplicates=result.duplicates,
            added=len(appended),
        )
        self.logger.info(
            "import_finished",
            origin=origin,
            added=summary.added,
            duplicates=summary.duplicates,
            skipped=summary.skipped,
        )
        return summary

    # ------------------------------------------------------------------
    # Enrichment
    # ------------------------------------------------------------------
    def pending_batches(self) -> int:
        return len(self.pipeline.plan())

    async def process(self, on_batch: BatchCallback | None = None) -> RunSummary:
        return await self.pipeline.run(on_batch=on_batch)

    @property
    def is_processing(self) -> bool:
        return self.pipeline.is_running

    # ------------------------------------------------------------------
    # Catalog access
    # ------------------------------------------------------------------
    def delete(self, entry_id: str) -> bool:
        removed = self.catalog.delete(entry_id)
        if removed:
            self.logger.info("entry_deleted", entry_id=entry_id)
        return removed

    def search(self, query: str = "", facet: str = ALL_FACET) -> list[BookmarkEntry]:
        return filter_entries(self.catalog.snapshot(), query, facet)

    def facets(self) -> list[str]:
        return category_facets(self.catalog.snapshot())

    def facet_counts(self) -> list[tuple[str, int]]:
        return facet_counts(self.catalog.snapshot())

    def close(self) -> None:
        self.blob_store.close()
        self.storage.close_all()

    def _create_blob_store(self) -> BlobStore:
        storage_cfg = self.global_config.storage
        path = storage_cfg.resolved_path(self.config_repository.locator.project_root)
        if storage_cfg.backend == "sqlite":
            return SQLiteBlobStore(self.storage, path)
        if storage_cfg.backend == "json":
            # <key>.json lives next to where the SQLite file would be
            return FileBlobStore(path.parent)
        raise ValueError(f"Unsupported storage backend: {storage_cfg.backend}")


__all__ = ["ImportSummary", "Orchestrator"]
