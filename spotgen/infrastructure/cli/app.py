"""spotgen CLI - Main application entry point."""

from importlib.metadata import version
from pathlib import Path
import sys
from typing import Annotated

import typer

from spotgen.application.use_cases import (
    GeneratePlaylistCommand,
    GeneratePlaylistUseCase,
)
from spotgen.config import get_logger, settings, setup_loguru_logger
from spotgen.domain.entities.playlist import Grouping, Ordering
from spotgen.infrastructure.cli.async_helpers import async_operation
from spotgen.infrastructure.cli.formatters import OutputFormat, format_tracks
from spotgen.infrastructure.cli.ui import console, display_generation_summary
from spotgen.infrastructure.connectors import create_resolution_context

VERSION = version("spotgen")

logger = get_logger(__name__)

app = typer.Typer(
    help=f"🎵 spotgen v{VERSION} - Generate Spotify playlists from directive text",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
)


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


@app.command(rich_help_panel="🎵 Playlists")
@async_operation()
async def generate(
    source: Annotated[
        str,
        typer.Argument(help="Playlist file, or - to read from stdin"),
    ],
    group_by: Annotated[
        Grouping | None,
        typer.Option("--group-by", "-g", help="Group tracks; overrides #GROUP BY"),
    ] = None,
    order_by: Annotated[
        Ordering | None,
        typer.Option("--order-by", "-o", help="Order tracks; overrides #ORDER BY"),
    ] = None,
    unique: Annotated[
        bool,
        typer.Option("--unique/--no-unique", help="Remove duplicate tracks"),
    ] = True,
    lastfm_user: Annotated[
        str | None,
        typer.Option("--lastfm-user", "-u", help="Last.fm user for play counts"),
    ] = None,
    max_passes: Annotated[
        int,
        typer.Option("--max-passes", min=1, help="Upper bound on resolve passes"),
    ] = settings.resolution.max_passes,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.URIS,
    output: Annotated[
        Path | None,
        typer.Option("--output", help="Write to a file instead of stdout"),
    ] = None,
    summary: Annotated[
        bool,
        typer.Option("--summary/--no-summary", help="Show a summary on stderr"),
    ] = True,
) -> None:
    """Generate a playlist from directive text."""
    text = _read_source(source)
    context = create_resolution_context(lastfm_user)
    command = GeneratePlaylistCommand(
        text=text,
        grouping=group_by.value if group_by else None,
        ordering=order_by.value if order_by else None,
        unique=unique,
        lastfm_user=lastfm_user,
        max_passes=max_passes,
    )

    result = await GeneratePlaylistUseCase(context).execute(command)
    rendered = format_tracks(result.tracks, output_format)

    if output:
        output.write_text(rendered, encoding="utf-8")
        console.print(f"[green]✓[/green] Wrote {len(result.uris)} tracks to {output}")
    else:
        typer.echo(rendered, nl=False)

    if summary:
        display_generation_summary(result)


@app.command(name="version", rich_help_panel="⚙️ System")
def version_command() -> None:
    """Show version information."""
    typer.echo(f"spotgen v{VERSION}")


@app.callback()
def init_cli(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """Initialize spotgen CLI."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    setup_loguru_logger(verbose)


def main() -> int:
    """Application entry point."""
    try:
        return app() or 0
    except Exception:
        logger.exception("Unhandled exception")
        return 1
