"""Exception hierarchy shared by the CLI, services and library engine."""
from __future__ import annotations

from pathlib import Path
from typing import Sequence


class ShiromanaError(Exception):
    """Base class for all errors raised by shiromana."""


class PreconditionError(ShiromanaError):
    """A command cannot start because its inputs are invalid."""


class MissingFilesError(PreconditionError):
    """One or more referenced files do not exist as regular files."""

    def __init__(self, paths: Sequence[Path | str]):
        self.paths = [str(p) for p in paths]
        super().__init__(f"{','.join(self.paths)} are not existed or not a file.")


class ConfigError(ShiromanaError):
    """Configuration file cannot be read or written."""


class LibraryError(ShiromanaError):
    """Generic failure reported by the library engine."""


class MediaExistsError(LibraryError):
    """Content with the same hash is already stored in the library."""

    def __init__(self, hash_value: str):
        self.hash = hash_value
        super().__init__(f"Media with hash {hash_value} already exists")


class MediaNotFoundError(LibraryError):
    """No media with the requested id."""


class SeriesNotFoundError(LibraryError):
    """No series with the requested uuid or name."""


class InvalidQueryError(LibraryError):
    """A query predicate could not be understood."""
