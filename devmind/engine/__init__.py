"""Engine components orchestrating parse → dedup → batch → classify → merge."""

from .batching import partition
from .classifier import (
    ClassificationRequest,
    ClassificationResponse,
    ClassifiedItem,
    Classifier,
    HttpClassifier,
)
from .dedup import DeduplicationResult, Deduplicator
from .merger import BatchOutcome, EnrichmentPipeline, RunSummary, merge_batch
from .parser import BookmarkParser, ParseResult, RawBookmark

__all__ = [
    "BatchOutcome",
    "BookmarkParser",
    "ClassificationRequest",
    "ClassificationResponse",
    "ClassifiedItem",
    "Classifier",
    "DeduplicationResult",
    "Deduplicator",
    "EnrichmentPipeline",
    "HttpClassifier",
    "ParseResult",
    "RawBookmark",
    "RunSummary",
    "merge_batch",
    "partition",
]
