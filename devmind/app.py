"""Typer CLI entrypoint for DevMind."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import typer
import yaml
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .catalog import ALL_FACET, BookmarkEntry
from .config import ConfigRepository
from .engine import RunSummary
from .exceptions import DevMindError, PipelineAbortedError
from .logging_conf import configure_logging, log_file, tail_log
from .orchestrator import ImportSummary, Orchestrator
from .ui import BatchProgress

app = typer.Typer(
    help="DevMind: AI-categorised bookmark catalog.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(name="config", help="Configuration commands.", no_args_is_help=True)
log_app = typer.Typer(name="log", help="Log viewing commands.", no_args_is_help=True)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    orchestrator: Orchestrator


def build_state(verbose: bool) -> AppState:
    configure_logging(verbose=verbose)
    repository = ConfigRepository()
    orchestrator = Orchestrator(config_repository=repository)
    return AppState(repository=repository, orchestrator=orchestrator)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _progress_default_enabled() -> bool:
    return console.is_terminal


def _render_import_table(summary: ImportSummary) -> Table:
    table = Table(title="Import result", box=box.SIMPLE_HEAD, show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Links found", str(summary.anchors))
    table.add_row("Skipped (not a bookmark URL)", str(summary.skipped))
    table.add_row("Over import limit", str(summary.truncated))
    table.add_row("Duplicates", str(summary.duplicates))
    table.add_row("Added", f"[green]{summary.added}[/green]")
    return table


def _render_run_table(summary: RunSummary) -> Table:
    table = Table(title="Enrichment result", box=box.SIMPLE_HEAD, show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Batches", f"{summary.batches_completed}/{summary.batches_total}")
    table.add_row("Enriched", f"[green]{summary.enriched}[/green]")
    table.add_row("Left unprocessed", f"[yellow]{summary.missed}[/yellow]")
    table.add_row("Unmatched answers", str(summary.correlation_misses))
    return table


def _render_entries_table(entries: Sequence[BookmarkEntry], title: str) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAD)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Category", style="magenta")
    table.add_column("Tags", style="cyan")
    table.add_column("URL", overflow="fold")
    for entry in entries:
        title_cell = escape(entry.title)
        if entry.description:
            title_cell += f"\n[dim]{escape(entry.description)}[/dim]"
        table.add_row(
            entry.id,
            title_cell,
            entry.category or ("-" if entry.processed else "[yellow]pending[/yellow]"),
            escape(", ".join(entry.tags or ())),
            escape(entry.url),
        )
    return table


app.add_typer(config_app, name="config")
app.add_typer(log_app, name="log")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
) -> None:
    try:
        ctx.obj = build_state(verbose)
    except DevMindError as exc:
        console.print(str(exc), style="red")
        raise typer.Exit(code=1)
    except (ValidationError, yaml.YAMLError, ValueError) as exc:
        console.print(f"Invalid configuration: {exc}", style="red", markup=False)
        raise typer.Exit(code=1)


@app.command("import", help="Import a browser bookmark export (HTML).")
def import_bookmarks(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Exported bookmarks file."),
    limit: Optional[int] = typer.Option(
        None, "--limit", min=1, help="Maximum records accepted from this file."
    ),
) -> None:
    state = _get_state(ctx)
    try:
        summary = state.orchestrator.import_file(path, limit=limit)
    except DevMindError as exc:
        console.print(str(exc), style="red")
        raise typer.Exit(code=1)
    console.print(_render_import_table(summary))
    pending = state.orchestrator.catalog.unprocessed_count
    if pending:
        console.print(f"{pending} bookmark(s) waiting for `devmind process`.", style="dim")


@app.command("process", help="Categorise unprocessed bookmarks with the classification service.")
def process(
    ctx: typer.Context,
    quiet: bool = typer.Option(False, "--quiet", help="Hide the progress bar."),
) -> None:
    state = _get_state(ctx)
    orchestrator = state.orchestrator
    pending_batches = orchestrator.pending_batches()
    if pending_batches == 0:
        console.print("All bookmarks are already categorised.", style="dim")
        raise typer.Exit(code=0)
    show_progress = (
        not quiet and orchestrator.global_config.enable_progress_bar and _progress_default_enabled()
    )
    progress = BatchProgress(enabled=show_progress, console=console)
    progress.start(pending_batches)
    failure: PipelineAbortedError | None = None
    try:
        summary = asyncio.run(orchestrator.process(on_batch=progress))
    except PipelineAbortedError as exc:
        failure = exc
        summary = exc.summary
    finally:
        progress.close()
    console.print(_render_run_table(summary))
    if failure is not None:
        console.print(f"Enrichment aborted: {failure.reason}", style="red")
        console.print("Completed batches were saved; run `devmind process` again to resume.", style="dim")
        raise typer.Exit(code=1)
    remaining = orchestrator.catalog.unprocessed_count
    if remaining:
        console.print(f"{remaining} bookmark(s) still unprocessed.", style="yellow")


@app.command("list", help="List bookmarks, optionally filtered.")
def list_bookmarks(
    ctx: typer.Context,
    query: str = typer.Option("", "--query", "-q", help="Text matched against title, description and tags."),
    category: str = typer.Option(ALL_FACET, "--category", "-c", help="Category facet to show."),
) -> None:
    state = _get_state(ctx)
    entries = state.orchestrator.search(query, category)
    if not entries:
        console.print("No bookmarks match.", style="dim")
        raise typer.Exit(code=0)
    console.print(_render_entries_table(entries, title=f"{category} · {len(entries)} bookmark(s)"))


@app.command("categories", help="Show category facets with counts.")
def categories(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    table = Table(title="Categories", box=box.SIMPLE_HEAD)
    table.add_column("Category", style="magenta")
    table.add_column("Bookmarks", justify="right")
    for facet, count in state.orchestrator.facet_counts():
        table.add_row(facet, str(count))
    console.print(table)


@app.command("delete", help="Delete a bookmark by id.")
def delete(
    ctx: typer.Context,
    entry_id: str = typer.Argument(..., help="Bookmark id as shown by `devmind list`."),
    yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt."),
) -> None:
    state = _get_state(ctx)
    entry = state.orchestrator.catalog.get(entry_id)
    if entry is None:
        console.print(f"No bookmark with id `{entry_id}`.", style="red")
        raise typer.Exit(code=1)
    if not yes and not typer.confirm(f"Delete `{entry.title}` ({entry.url})?", default=False):
        console.print("Cancelled.", style="yellow")
        raise typer.Exit(code=0)
    state.orchestrator.delete(entry_id)
    console.print(f"Deleted `{entry.title}`.", style="green")


@app.command("status", help="Summarise the catalog.")
def status(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    catalog = state.orchestrator.catalog
    table = Table(title="Catalog", box=box.SIMPLE_HEAD, show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Bookmarks", str(len(catalog)))
    table.add_row("Unprocessed", str(catalog.unprocessed_count))
    table.add_row("Storage", str(state.repository.storage_path()))
    console.print(table)
    if catalog.last_persist_error:
        console.print(f"Last save failed: {catalog.last_persist_error}", style="red")


@config_app.command("show", help="Print the effective configuration.")
def config_show(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = state.repository.load_global_config()
    console.print(f"# {state.repository.locator.global_config_path()}", style="dim")
    console.print(yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False), markup=False)


@log_app.command("show", help="Show the last lines of the application log.")
def log_show(
    tail: int = typer.Option(100, "--tail", min=1, help="Number of lines to show."),
    errors: bool = typer.Option(False, "--errors", help="Show error.log instead."),
) -> None:
    path = log_file(errors=errors)
    lines = tail_log(path, tail)
    if not lines:
        console.print("No log lines yet.", style="dim")
        return
    console.print(f"{path.name} · last {len(lines)} line(s)", style="cyan")
    console.print("".join(lines), markup=False, highlight=False)


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
