"""Error taxonomy shared by the catalog, pipeline and CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .engine.merger import RunSummary


class DevMindError(Exception):
    """Base class for every error DevMind raises on purpose."""


class BookmarkImportError(DevMindError):
    """Raised when an import document cannot be read at all."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot import bookmarks from {source}: {reason}")


class ServiceError(DevMindError):
    """Raised when the classification service call fails or answers off-schema."""


class PipelineAbortedError(ServiceError):
    """
    Terminal failure of an enrichment run.

    Batches committed before the failure stay committed; ``summary`` describes
    how far the run got. The underlying ``ServiceError`` is chained as
    ``__cause__``.
    """

    def __init__(self, summary: "RunSummary", reason: str) -> None:
        self.summary = summary
        self.reason = reason
        super().__init__(
            f"Enrichment aborted after {summary.batches_completed}/{summary.batches_total} batches: {reason}"
        )


class PipelineBusyError(DevMindError):
    """Raised when a run is requested while another one is in progress."""

    def __init__(self) -> None:
        super().__init__("An enrichment run is already in progress")


class PersistenceError(DevMindError):
    """Raised by blob stores when the catalog cannot be written."""


class CatalogLoadError(DevMindError):
    """Raised when the stored catalog blob cannot be decoded."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Stored catalog under {key!r} is unreadable: {reason}")


__all__ = [
    "BookmarkImportError",
    "CatalogLoadError",
    "DevMindError",
    "PersistenceError",
    "PipelineAbortedError",
    "PipelineBusyError",
    "ServiceError",
]
