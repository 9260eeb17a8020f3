"""Expansion of `add` file arguments into an ordered list of existing files."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence
from urllib.parse import unquote, urlparse

from ..core.errors import MissingFilesError, PreconditionError

logger = logging.getLogger(__name__)

FILE_SCHEME = "file://"


def manifest_line_to_path(line: str) -> Path:
    """Turn a manifest line (bare path or ``file://`` URI) into a path."""
    if line.startswith(FILE_SCHEME):
        return Path(unquote(urlparse(line).path))
    return Path(line)


def parse_manifest(manifest: Path) -> list[Path]:
    """Read a manifest: one path or ``file://`` URI per non-empty line."""
    try:
        text = manifest.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PreconditionError(f"Cannot read input file {manifest}: {e}") from e
    return [manifest_line_to_path(line) for line in text.splitlines() if line.strip()]


def check_files_exist(paths: Sequence[Path]) -> None:
    """Raise one aggregate error naming every path that is not a regular file."""
    missing = [p for p in paths if not p.is_file()]
    if missing:
        raise MissingFilesError(missing)


def resolve_files(
    files: Optional[Sequence[Path]] = None,
    manifest: Optional[Path] = None,
) -> list[Path]:
    """Produce the ordered files of one `add` invocation.

    Exactly one of ``files`` and ``manifest`` must be given. Input order is
    preserved since it later becomes the series sort order.

    Raises:
        PreconditionError: Both or neither input given, or unreadable manifest.
        MissingFilesError: Some referenced path is not an existing file.
    """
    if bool(files) == (manifest is not None):
        raise PreconditionError("Provide either a file list or an input file, not both")

    if manifest is not None:
        paths = parse_manifest(manifest)
        if not paths:
            raise PreconditionError(f"Input file {manifest} lists no files")
    else:
        paths = [Path(p) for p in files or ()]

    check_files_exist(paths)
    logger.debug("Resolved %d files", len(paths))
    return paths
