"""CLI with subcommands: info, add, create."""
from __future__ import annotations

import argparse
import logging
import sys
import uuid
from pathlib import Path
from typing import Optional

from rich.markup import escape

from . import __version__
from .core.config import AppConfig, default_config_path, load_config, store_config
from .core.errors import ShiromanaError
from .core.models import (
    ExistingSeries,
    MediaType,
    NewSeries,
    NoSeries,
    SeriesBindingPolicy,
    SeriesIntent,
)
from .logging.rich_logger import (
    QuietProgressReporter,
    RichProgressReporter,
    configure_logging,
)
from .persistence.library import SQLiteLibrary
from .prompter import RichPrompter

logger = logging.getLogger(__name__)


def parse_media_type(value: str) -> MediaType:
    """argparse type for ``--kind``."""
    try:
        return MediaType.parse(value)
    except ValueError:
        choices = ", ".join(m.value for m in MediaType)
        raise argparse.ArgumentTypeError(f"Unsupported Media Type: {value} (choose from {choices})")


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="shiromana",
        description="Media library front end: add files, group them into series, look them up.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Global options
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Configuration file (default: ~/.config/shiromana-cli/config.json)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ============ INFO command ============
    info_parser = subparsers.add_parser(
        "info",
        help="Show library information, or media found by id, hash or file name",
    )
    info_parser.add_argument(
        "media",
        nargs="?",
        default=None,
        help="Media id, content hash or file name",
    )
    info_parser.add_argument(
        "-d", "--detail",
        action="store_true",
        help="Show all fields of each media",
    )

    # ============ ADD command ============
    add_parser = subparsers.add_parser(
        "add",
        help="Add files to the library",
    )
    add_parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        metavar="FILE",
        help="Files to add",
    )
    add_parser.add_argument(
        "-i", "--input",
        type=Path,
        default=None,
        help="Text file listing one path or file:// URI per line (instead of FILE)",
    )
    add_parser.add_argument(
        "-k", "--kind",
        type=parse_media_type,
        default=None,
        help="Media type (Image, Audio, Video, Text, Other); detected from content if omitted",
    )
    add_parser.add_argument(
        "-t", "--title",
        default=None,
        help="Title (only used when adding a single file)",
    )
    add_parser.add_argument(
        "-c", "--comment",
        default=None,
        help="Comment (only used when adding a single file)",
    )
    series_group = add_parser.add_mutually_exclusive_group()
    series_group.add_argument(
        "-s", "--series",
        type=uuid.UUID,
        default=None,
        help="UUID of an existing series to add the files to",
    )
    series_group.add_argument(
        "-n", "--new-series",
        default=None,
        metavar="NAME",
        help="Create a new series with this name and add the files to it",
    )
    add_parser.add_argument(
        "--sorted",
        action="store_true",
        help="Keep the input order as series order (skip the series if any file fails)",
    )
    add_parser.add_argument(
        "--no-input",
        action="store_true",
        help="Never prompt; on a series name collision create the series anyway",
    )

    # ============ CREATE command ============
    create_parser_ = subparsers.add_parser(
        "create",
        help="Create a series",
    )
    create_parser_.add_argument(
        "kind",
        type=str.lower,
        choices=["series", "s"],
        help="What to create",
    )
    create_parser_.add_argument(
        "title",
        help="Series name",
    )
    create_parser_.add_argument(
        "-c", "--comment",
        default=None,
        help="Series comment",
    )
    create_parser_.add_argument(
        "-u", "--uuid-only",
        action="store_true",
        help="Print only the new series UUID",
    )

    return parser


# ============ Library setup ============

def open_library(
    config_path: Path,
    reporter,
    prompter: Optional[RichPrompter] = None,
) -> tuple[AppConfig, SQLiteLibrary]:
    """Open the configured library, running first-time setup if needed."""
    if config_path.exists():
        config = load_config(config_path)
        return config, SQLiteLibrary.open(config.library_dir)

    prompter = prompter or RichPrompter()
    defaults = AppConfig()
    reporter.info(f"No configuration found at {escape(str(config_path))}, setting up a library.")
    config = AppConfig(
        library_path=prompter.ask_for_location(str(defaults.library_path)),
        library_name=prompter.ask_for_library_name(defaults.library_name),
    )
    store_config(config, config_path)

    if config.library_dir.exists():
        library = SQLiteLibrary.open(config.library_dir)
    else:
        reporter.info("I am now creating Path and Library for you.")
        config.library_path.mkdir(parents=True, exist_ok=True)
        library = SQLiteLibrary.create(config.library_path, config.library_name)
    return config, library


def build_series_intent(args: argparse.Namespace) -> SeriesIntent:
    if args.series is not None:
        return ExistingSeries(uuid=args.series)
    if args.new_series is not None:
        allow_prompt = not args.no_input and sys.stdin.isatty()
        return NewSeries(name=args.new_series, allow_prompt=allow_prompt)
    return NoSeries()


# ============ Command Handlers ============

def cmd_info(args: argparse.Namespace, reporter, library: SQLiteLibrary) -> int:
    """Handle the info command."""
    from .services.resolver import MediaResolver

    if args.media is None:
        reporter.print_library_info(
            name=library.get_library_name(),
            master_name=library.get_master_name(),
            library_uuid=str(library.uuid),
            path=library.get_path(),
            schema=library.get_schema(),
            summary=library.get_summary(),
        )
        return 0

    resolution = MediaResolver(library).resolve(args.media)
    if resolution.is_empty:
        reporter.warning(f"Cannot acquire any media via: {escape(resolution.query)}")
        return 0

    for media in resolution.media:
        reporter.print_media(media, args.detail)
    return 0


def cmd_add(
    args: argparse.Namespace,
    reporter,
    library: SQLiteLibrary,
    prompter: Optional[RichPrompter] = None,
) -> int:
    """Handle the add command."""
    from .services.file_list import resolve_files
    from .services.ingestion import IngestionPipeline
    from .services.series import SeriesBinder

    # Everything here may fail before the library is touched
    files = resolve_files(files=args.files, manifest=args.input)
    intent = build_series_intent(args)
    policy = SeriesBindingPolicy(sorted=args.sorted)

    pipeline = IngestionPipeline(library, reporter)
    outcomes = pipeline.ingest(files, hint=args.kind, title=args.title, comment=args.comment)

    if isinstance(intent, NewSeries) and intent.allow_prompt and prompter is None:
        prompter = RichPrompter()
    SeriesBinder(library, reporter, prompter).bind(outcomes, intent, policy)

    reporter.print_stats(pipeline.stats)
    return 0


def cmd_create(args: argparse.Namespace, reporter, library: SQLiteLibrary) -> int:
    """Handle the create command."""
    series_uuid = library.create_series(args.title, args.comment)
    if args.uuid_only:
        reporter.print_line(str(series_uuid))
    else:
        reporter.success(
            f"Successfully created series: \\[{escape(args.title)}] \\[{series_uuid}]"
        )
    return 0


COMMANDS = {
    "info": cmd_info,
    "add": cmd_add,
    "create": cmd_create,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose)

    # Create reporter
    if args.quiet:
        reporter = QuietProgressReporter()
    else:
        reporter = RichProgressReporter(verbose=args.verbose)

    # No command specified - show help
    if not args.command:
        parser.print_help()
        return 0

    config_path = args.config or default_config_path()

    try:
        _config, library = open_library(config_path, reporter)
        with library:
            return COMMANDS[args.command](args, reporter, library)

    except KeyboardInterrupt:
        # Clean exit on Ctrl+C - no stack trace
        return 130
    except ShiromanaError as e:
        reporter.error(escape(str(e)))
        return 1
    except Exception as e:
        reporter.error(f"Error: {escape(str(e))}")
        if args.verbose:
            logger.exception("Unhandled error")
        return 1


if __name__ == "__main__":
    sys.exit(main())
