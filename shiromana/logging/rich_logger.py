"""Rich-based reporter implementation."""
from __future__ import annotations

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.filesize import decimal
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from ..core.models import IngestionStats, LibrarySummary, Media


def configure_logging(verbose: bool = False) -> None:
    """Route the ``shiromana`` loggers to stderr through Rich."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=True,
    )
    root = logging.getLogger("shiromana")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


def media_fields(media: Media) -> list[tuple[str, str]]:
    """Field name/value pairs shown by the detailed media view."""
    fields = [
        ("Media ID", str(media.id)),
        ("Library UUID", str(media.library_uuid)),
        ("Hash", media.hash),
        ("File Name", media.filename),
        ("File Path", media.filepath),
        ("File Size", f"{media.filesize // 1024} KB"),
        ("Media Type", str(media.kind)),
        ("Add Time", media.time_add.isoformat(sep=" ")),
    ]
    optional = [
        ("Caption", media.caption),
        ("Sub Type", media.sub_kind),
        ("Type Addition", media.kind_addition),
    ]
    fields.extend((name, value) for name, value in optional if value)
    if media.series_uuid:
        fields.append(("Series UUID", "\n".join(str(u) for u in media.series_uuid)))
    if media.comment:
        fields.append(("Comment", media.comment))
    if media.detail:
        fields.append(("Details", media.detail))
    return fields


class RichProgressReporter:
    """Reporter using Rich for terminal output.

    Implements the ProgressReporter protocol with Rich console output.
    """

    def __init__(
        self,
        verbose: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
    ):
        """Initialize the reporter.

        Args:
            verbose: Enable verbose output.
            quiet: Suppress all non-essential output.
            console: Console to print to (stdout by default).
        """
        self._console = console or Console()
        self._verbose = verbose
        self._quiet = quiet

    # --- Logging Methods ---

    def info(self, message: str) -> None:
        """Log an info message."""
        if not self._quiet:
            self._console.print(f"[blue]ℹ[/blue] {message}")

    def success(self, message: str) -> None:
        """Log a success message."""
        if not self._quiet:
            self._console.print(f"[green]✓[/green] {message}")

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self._console.print(f"[yellow]⚠[/yellow] {message}")

    def error(self, message: str) -> None:
        """Log an error message."""
        self._console.print(f"[red]✗[/red] {message}", style="red")

    # --- Specialized Output ---

    def print_line(self, message: str) -> None:
        """Print plain output that must survive quiet mode (e.g. a uuid)."""
        self._console.print(message, markup=False, highlight=False)

    def print_media(self, media: Media, detailed: bool = False) -> None:
        """Print a media record as one line or as a field table."""
        if not detailed:
            line = Text.assemble(
                ("[", "bright_cyan"),
                (str(media.id), "blue"),
                ("] [", "bright_cyan"),
                (str(media.kind), "blue"),
                ("] ", "bright_cyan"),
                (media.filename, "yellow"),
                (f" - {media.filesize // 1024} KB", "blue"),
            )
            self._console.print(line)
            return

        table = Table(show_header=False, box=None)
        table.add_column("Field", style="yellow")
        table.add_column("Value", style="bright_blue")
        for name, value in media_fields(media):
            table.add_row(name, Text(value))
        self._console.print(table)

    def print_library_info(
        self,
        name: str,
        master_name: Optional[str],
        library_uuid: str,
        path: str,
        schema: str,
        summary: LibrarySummary,
    ) -> None:
        """Print library metadata and summary counters."""
        table = Table(title="Library", show_header=False)
        table.add_column("Setting", style="yellow")
        table.add_column("Value", style="bright_blue")

        table.add_row("Library name", Text(name))
        if master_name:
            table.add_row("Master name", master_name)
        table.add_row("UUID", library_uuid)
        table.add_row("Path", Text(path))
        table.add_row("Schema", schema)
        table.add_row("Media count", str(summary.media_count))
        table.add_row("Series count", str(summary.series_count))
        table.add_row("Media size", decimal(summary.media_size))

        self._console.print(table)

    def print_stats(self, stats: IngestionStats) -> None:
        """Print totals of an add run."""
        if self._quiet:
            return

        table = Table(title="Add Complete", show_header=False)
        table.add_column("Metric", style="cyan")
        table.add_column("Count", style="green", justify="right")

        table.add_row("Files", str(stats.total))
        table.add_row("Added", str(stats.registered))
        table.add_row("Already Existing", str(stats.duplicates))
        table.add_row("Errors", str(stats.failed))

        self._console.print(table)


class QuietProgressReporter:
    """Minimal reporter that only shows warnings, errors and requested data."""

    def info(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        print(f"WARNING: {Text.from_markup(message).plain}", file=sys.stderr)

    def error(self, message: str) -> None:
        print(f"ERROR: {Text.from_markup(message).plain}", file=sys.stderr)

    def print_line(self, message: str) -> None:
        print(message)

    def print_media(self, media: Media, detailed: bool = False) -> None:
        if detailed:
            for name, value in media_fields(media):
                print(f"{name}: {value}")
        else:
            print(f"[{media.id}] [{media.kind}] {media.filename}")

    def print_library_info(
        self,
        name: str,
        master_name: Optional[str],
        library_uuid: str,
        path: str,
        schema: str,
        summary: LibrarySummary,
    ) -> None:
        print(f"{name} {library_uuid} {summary.media_count} media")

    def print_stats(self, stats: IngestionStats) -> None:
        pass


__all__ = [
    "RichProgressReporter",
    "QuietProgressReporter",
    "configure_logging",
]
