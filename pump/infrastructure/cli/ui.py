"""Rich output and error handling shared by the Pump commands."""

from collections.abc import Callable
import functools
from typing import ParamSpec, TypeVar

from rich.console import Console
from rich.markup import escape
from rich.table import Table
import typer

from pump.config import get_logger
from pump.domain.entities import ImportCheckpoint, ImportListensResult

console = Console()
logger = get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def command_error_handler(func: Callable[P, R]) -> Callable[P, R]:
    """Turn an unexpected exception in a command into exit code 1.

    The traceback goes to the log; the console gets a one-line message.
    ``typer.Exit`` and ``typer.Abort`` pass through untouched.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        operation = func.__name__.strip("_").replace("_", " ")

        with logger.contextualize(operation=operation):
            try:
                return func(*args, **kwargs)

            except (typer.Exit, typer.Abort):
                raise

            except Exception as e:
                logger.exception(f"{operation} command failed")
                console.print(
                    f"\n[bold red]✗ Error during {operation}:[/bold red] {escape(str(e))}"
                )
                raise typer.Exit(code=1) from e

    return wrapper


def _format_checkpoint(checkpoint: ImportCheckpoint | None) -> str:
    if checkpoint is None:
        return "none"
    return f"{checkpoint.timestamp.isoformat()} ({checkpoint.count} tracks)"


def display_import_result(result: ImportListensResult, show_tracks: bool = True) -> None:
    """Print a summary of an import run, optionally with the imported tracks."""
    console.print("\n[bold blue]Last.fm Import[/bold blue]")

    summary_table = Table(show_header=False, box=None, padding=(0, 2))
    summary_table.add_column(style="cyan")
    summary_table.add_column(style="green bold")

    for metric, value in [
        ("Pages Fetched", str(result.pages_fetched)),
        ("Listens Fetched", str(result.records_fetched)),
        ("Tracks Imported", str(result.imported_count)),
        ("Previous Checkpoint", _format_checkpoint(result.previous_checkpoint)),
        ("New Checkpoint", _format_checkpoint(result.checkpoint)),
        ("Duration", f"{result.execution_time_ms / 1000:.1f}s"),
    ]:
        summary_table.add_row(metric, value)

    console.print(summary_table)

    if show_tracks and result.tracks:
        console.print()
        details_table = Table(title="Imported Tracks")
        details_table.add_column("#", style="dim", justify="right")
        details_table.add_column("Listened At", style="yellow")
        details_table.add_column("Artist", style="cyan")
        details_table.add_column("Track", style="green")
        details_table.add_column("Album", style="dim")

        for i, track in enumerate(result.tracks, 1):
            details_table.add_row(
                str(i),
                track.listened_at.strftime("%Y-%m-%d %H:%M"),
                track.artist,
                track.title,
                track.album,
            )

        console.print(details_table)

    if not result.checkpoint_advanced:
        console.print("\n[yellow]Already up to date.[/yellow]")

    console.print()


def display_status(checkpoint: ImportCheckpoint | None, track_count: int) -> None:
    """Print the latest checkpoint and the number of stored tracks."""
    table = Table(title="Pump Import Status")
    table.add_column("Item", style="cyan")
    table.add_column("Value", style="bold")

    table.add_row("Stored Tracks", str(track_count))
    table.add_row("Latest Checkpoint", _format_checkpoint(checkpoint))
    if checkpoint is not None and checkpoint.created_at is not None:
        table.add_row("Last Import", checkpoint.created_at.strftime("%Y-%m-%d %H:%M"))

    console.print(table)

    if checkpoint is None:
        console.print(
            "\n[yellow]No imports yet. Run [bold]pump import[/bold] to start.[/yellow]"
        )
