"""Pump CLI - Main application entry point and app structure."""

import asyncio
from importlib.metadata import version
from typing import Annotated

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
import typer

from pump.config import (
    Settings,
    get_logger,
    load_settings,
    log_startup_info,
    setup_loguru_logger,
)
from pump.infrastructure.cli.async_helpers import read_status, run_import
from pump.infrastructure.cli.ui import (
    command_error_handler,
    display_import_result,
    display_status,
)

VERSION = version("pump")

console = Console(width=80)
logger = get_logger(__name__)

app = typer.Typer(
    help=f"Pump v{VERSION} - Incremental Last.fm listening history importer",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
)


@app.callback()
def init_cli(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """Initialize Pump CLI."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    try:
        settings = load_settings()
    except ValidationError as e:
        console.print(f"[bold red]✗ Invalid configuration:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1) from e

    setup_loguru_logger(settings.logging, verbose)
    ctx.obj["settings"] = settings


@app.command(name="import", rich_help_panel="📥 Import")
def import_command(
    ctx: typer.Context,
    show_tracks: Annotated[
        bool,
        typer.Option("--show-tracks/--no-tracks", help="List imported tracks"),
    ] = True,
) -> None:
    """Import listens newer than the latest checkpoint from Last.fm."""
    _import_listens(ctx.obj["settings"], show_tracks)


@command_error_handler
def _import_listens(settings: Settings, show_tracks: bool) -> None:
    log_startup_info(settings)
    result = asyncio.run(run_import(settings))
    display_import_result(result, show_tracks=show_tracks)


@app.command(name="status", rich_help_panel="⚙️ System")
def status_command(ctx: typer.Context) -> None:
    """Show the latest import checkpoint and the stored track count."""
    _show_status(ctx.obj["settings"])


@command_error_handler
def _show_status(settings: Settings) -> None:
    checkpoint, track_count = asyncio.run(read_status(settings))
    display_status(checkpoint, track_count)


@app.command(name="version", rich_help_panel="⚙️ System")
def version_command() -> None:
    """Show version information."""
    console.print(f"[bold bright_blue]Pump[/bold bright_blue] [dim]v{VERSION}[/dim]")


def main() -> int:
    """Application entry point."""
    try:
        return app() or 0
    except Exception:
        logger.exception("Unhandled exception")
        return 1
