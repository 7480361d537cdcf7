"""Enrichment pipeline: batch dispatch, merge by url, commit per batch."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Callable, Sequence

import structlog

from ..catalog.entry import BookmarkEntry
from ..catalog.store import CatalogStore
from ..exceptions import PipelineAbortedError, PipelineBusyError, ServiceError
from .batching import DEFAULT_BATCH_SIZE, partition
from .classifier import ClassificationRequest, ClassificationResponse, Classifier


@dataclass(slots=True)
class BatchOutcome:
    """What one committed batch changed."""

    index: int
    total: int
    requested: int
    enriched: int
    missed_urls: list[str] = field(default_factory=list)
    unmatched_urls: list[str] = field(default_factory=list)


@dataclass(slots=True)
class RunSummary:
    run_id: str
    batches_total: int = 0
    batches_completed: int = 0
    enriched: int = 0
    missed: int = 0
    correlation_misses: int = 0
    error: str | None = None

    @property
    def aborted(self) -> bool:
        return self.error is not None


BatchCallback = Callable[[BatchOutcome, Sequence[BookmarkEntry]], None]


def merge_batch(
    batch: Sequence[BookmarkEntry], response: ClassificationResponse
) -> tuple[dict[str, BookmarkEntry], list[str], list[str]]:
    """Correlate response items with batch entries by exact url.

    Returns the enriched entries keyed by id, the batch urls the response did
    not cover, and the response urls that matched nothing in the batch.
    """

    by_url = {entry.url: entry for entry in batch}
    updates: dict[str, BookmarkEntry] = {}
    unmatched: list[str] = []
    for item in response.items:
        original = by_url.get(item.url)
        if original is None:
            unmatched.append(item.url)
            continue
        if original.id in updates:
            continue
        updates[original.id] = original.enriched(item.category.value, item.description, item.tags)
    missed = [entry.url for entry in batch if entry.id not in updates]
    return updates, missed, unmatched


class EnrichmentPipeline:
    """Run unprocessed entries through the classifier, one batch at a time.

    Each batch is committed to the catalog before the next request goes out,
    so an aborted run keeps everything merged so far. Only one run may be
    active per pipeline.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        classifier: Classifier,
        batch_size: int = DEFAULT_BATCH_SIZE,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.catalog = catalog
        self.classifier = classifier
        self.batch_size = batch_size
        self.logger = logger or structlog.get_logger("devmind.pipeline")
        self._busy = False

    @property
    def is_running(self) -> bool:
        return self._busy

    def plan(self) -> list[list[BookmarkEntry]]:
        return partition(self.catalog.unprocessed(), self.batch_size)

    async def run(self, on_batch: BatchCallback | None = None) -> RunSummary:
        if self._busy:
            raise PipelineBusyError()
        self._busy = True
        try:
            return await self._run(on_batch)
        finally:
            self._busy = False

    async def _run(self, on_batch: BatchCallback | None) -> RunSummary:
        batches = self.plan()
        summary = RunSummary(run_id=uuid.uuid4().hex[:12], batches_total=len(batches))
        log = self.logger.bind(run_id=summary.run_id)
        if not batches:
            log.info("enrichment_nothing_to_do")
            return summary
        log.info("enrichment_started", batches=len(batches), batch_size=self.batch_size)
        for index, batch in enumerate(batches, start=1):
            request = ClassificationRequest.from_entries(batch)
            try:
                response = await self.classifier.classify(request)
            except ServiceError as exc:
                summary.error = str(exc)
                log.error(
                    "enrichment_aborted",
                    batch_index=index,
                    batches_completed=summary.batches_completed,
                    error=str(exc),
                )
                raise PipelineAbortedError(summary, str(exc)) from exc

            updates, missed, unmatched = merge_batch(batch, response)
            snapshot, applied = self._commit(updates)
            outcome = BatchOutcome(
                index=index,
                total=len(batches),
                requested=len(batch),
                enriched=applied,
                missed_urls=missed,
                unmatched_urls=unmatched,
            )
            summary.batches_completed += 1
            summary.enriched += outcome.enriched
            summary.missed += len(missed)
            summary.correlation_misses += len(unmatched)
            for url in unmatched:
                log.debug("correlation_miss", batch_index=index, url=url)
            log.info(
                "batch_committed",
                batch_index=index,
                requested=outcome.requested,
                enriched=outcome.enriched,
                missed=len(missed),
            )
            if on_batch is not None:
                on_batch(outcome, snapshot)
        log.info("enrichment_finished", enriched=summary.enriched, missed=summary.missed)
        return summary

    def _commit(self, updates: dict[str, BookmarkEntry]) -> tuple[tuple[BookmarkEntry, ...], int]:
        """Merge ``updates`` into the live catalog; return the snapshot and how many landed."""

        # Rebuilt from the live snapshot: ids deleted mid-run are not brought back
        current = self.catalog.snapshot()
        applied = sum(1 for entry in current if entry.id in updates)
        if applied:
            self.catalog.replace_all(updates.get(entry.id, entry) for entry in current)
        return self.catalog.snapshot(), applied


__all__ = ["BatchCallback", "BatchOutcome", "EnrichmentPipeline", "RunSummary", "merge_batch"]
