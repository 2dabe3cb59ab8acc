"""UI helpers for CLI interaction.

stdout carries the generated playlist and nothing else, so every human-facing
message goes through the stderr console defined here.
"""

from collections.abc import Callable
import functools

from rich.console import Console
from rich.table import Table
import typer

from spotgen.application.use_cases import GeneratePlaylistResult
from spotgen.config import get_logger
from spotgen.domain.errors import BatchResolutionError

# Initialize console and logger
console = Console(stderr=True)
logger = get_logger(__name__)


def command_error_handler[**P, R](func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to standardize error handling for CLI commands.

    Errors are logged with their traceback, shown as a one-line message and
    turned into exit code 1.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        operation = func.__name__.replace("_", " ")

        with logger.contextualize(operation=operation):
            try:
                logger.debug(f"Executing {operation}")
                return func(*args, **kwargs)

            except typer.Exit:
                raise

            except typer.Abort:
                logger.info(f"Operation {operation} aborted by user")
                raise

            except BatchResolutionError as e:
                logger.exception(f"Error during {operation}")
                console.print(f"\n[bold red]✗ Error during {operation}:[/bold red] {e}")
                for failure in e.failures:
                    console.print(f"  [red]•[/red] {failure}")
                raise typer.Exit(code=1) from e

            except Exception as e:
                logger.exception(f"Error during {operation}")
                console.print(f"\n[bold red]✗ Error during {operation}:[/bold red] {e}")
                raise typer.Exit(code=1) from e

    return wrapper


def display_generation_summary(result: GeneratePlaylistResult) -> None:
    """Summary table of a generated playlist."""
    table = Table(title="Playlist", show_header=False, expand=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    unresolved = sum(1 for track in result.tracks if not track.uri)
    table.add_row("Entries", str(result.entry_count))
    table.add_row("Tracks", str(len(result.tracks)))
    if unresolved:
        table.add_row("Not found", f"[yellow]{unresolved}[/yellow]")
    table.add_row("Time", f"{result.execution_time_ms} ms")

    console.print(table)
