"""User interaction helpers."""

from .progress import BatchCountColumn, BatchProgress, ProgressState

__all__ = ["BatchCountColumn", "BatchProgress", "ProgressState"]
