from __future__ import annotations

import io

import pytest
from rich.console import Console

from devmind.engine import BatchOutcome
from devmind.ui import BatchProgress


def _outcome(index: int, enriched: int, missed: int = 0) -> BatchOutcome:
    return BatchOutcome(
        index=index,
        total=2,
        requested=enriched + missed,
        enriched=enriched,
        missed_urls=[f"https://missed/{n}" for n in range(missed)],
    )


def test_counters_kept_when_output_is_not_a_terminal() -> None:
    console = Console(file=io.StringIO(), force_terminal=False)
    progress = BatchProgress(enabled=True, console=console)
    progress.start(2)
    progress(_outcome(1, 10), ())
    progress(_outcome(2, 3, missed=2), ())
    progress.close()

    assert progress.enabled is False
    assert progress.state.batches == 2
    assert progress.state.enriched == 13
    assert progress.state.missed == 2
    assert console.file.getvalue() == ""


def test_renders_on_terminal() -> None:
    console = Console(file=io.StringIO(), force_terminal=True, width=120)
    progress = BatchProgress(enabled=True, console=console)
    progress.start(2)
    progress.advance(_outcome(1, 4))
    assert progress.enabled is True
    progress.close()
    assert progress.state.batches == 1


def test_advance_requires_start() -> None:
    with pytest.raises(RuntimeError):
        BatchProgress(enabled=False).advance(_outcome(1, 1))
