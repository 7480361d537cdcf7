"""Fixed-size partitioning of unprocessed entries."""

from __future__ import annotations

from typing import Sequence, TypeVar

T = TypeVar("T")

DEFAULT_BATCH_SIZE = 10


def partition(items: Sequence[T], batch_size: int = DEFAULT_BATCH_SIZE) -> list[list[T]]:
    """Split ``items`` into consecutive batches of at most ``batch_size``."""

    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")
    return [list(items[start : start + batch_size]) for start in range(0, len(items), batch_size)]


__all__ = ["DEFAULT_BATCH_SIZE", "partition"]
