"""Rich progress bar fed by enrichment batch notifications."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from rich.console import Console
from rich.errors import LiveError
from rich.progress import (
    BarColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

from ..catalog.entry import BookmarkEntry
from ..engine.merger import BatchOutcome


@dataclass
class ProgressState:
    total: int
    batches: int = 0
    enriched: int = 0
    missed: int = 0


class BatchCountColumn(ProgressColumn):
    """Render ``batch 3/7`` instead of a percentage."""

    def render(self, task: Task) -> Text:
        total = int(task.total or 0)
        return Text(f"batch {int(task.completed)}/{total}", style="progress.percentage")


class BatchProgress:
    """One bar advancing per committed batch.

    Instances are callables with the pipeline's ``on_batch`` signature, so the
    CLI hands them to ``EnrichmentPipeline.run`` directly. Counters are kept
    even when rendering is disabled.
    """

    def __init__(self, enabled: bool = True, console: Console | None = None) -> None:
        self.enabled = enabled
        self._console = console
        self._progress: Progress | None = None
        self._task_id: TaskID | None = None
        self.state: ProgressState | None = None

    def start(self, total_batches: int) -> None:
        self.state = ProgressState(total=total_batches)
        console = self._console or Console()
        if not self.enabled or total_batches == 0 or not console.is_terminal:
            self.enabled = False
            return
        progress = Progress(
            SpinnerColumn(style="cyan"),
            TextColumn("[bold blue]Enriching"),
            BarColumn(bar_width=None, complete_style="green", finished_style="green"),
            BatchCountColumn(),
            TimeElapsedColumn(),
            TextColumn("[green]✓{task.fields[enriched]:>4}", justify="right"),
            TextColumn("[yellow]↺{task.fields[missed]:>4}", justify="right"),
            console=console,
            transient=True,
            expand=True,
        )
        try:
            progress.start()
        except LiveError:
            # Another live display owns this console
            self.enabled = False
            return
        self._progress = progress
        self._task_id = progress.add_task("enrich", total=total_batches, enriched=0, missed=0)

    def __call__(self, outcome: BatchOutcome, snapshot: Sequence[BookmarkEntry]) -> None:
        self.advance(outcome)

    def advance(self, outcome: BatchOutcome) -> None:
        if self.state is None:
            raise RuntimeError("BatchProgress.start must be called before advance")
        self.state.batches += 1
        self.state.enriched += outcome.enriched
        self.state.missed += len(outcome.missed_urls)
        if self._progress is None or self._task_id is None:
            return
        self._progress.update(
            self._task_id,
            completed=self.state.batches,
            enriched=self.state.enriched,
            missed=self.state.missed,
        )

    def close(self) -> None:
        if self._progress is not None:
            self._progress.stop()
        self._progress = None
        self._task_id = None


__all__ = ["BatchCountColumn", "BatchProgress", "ProgressState"]
