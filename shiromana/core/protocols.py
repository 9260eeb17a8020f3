"""Protocol definitions (interfaces) for dependency injection."""
from __future__ import annotations

import uuid
from abc import abstractmethod
from typing import Callable, Optional, Protocol

from .models import LibrarySummary, Media, MediaType


class LibraryEngine(Protocol):
    """Interface of the media library store.

    Implementations:
    - SQLiteLibrary: content-addressed store backed by SQLite
    """

    @abstractmethod
    def add_media(
        self,
        path: str,
        kind: MediaType,
        sub_kind: Optional[str] = None,
        kind_addition: Optional[str] = None,
        title: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> int:
        """Store a file and return its new id.

        Raises:
            MediaExistsError: Content with the same hash is already stored.
            LibraryError: Any other failure.
        """
        ...

    @abstractmethod
    def get_media(self, media_id: int) -> Media:
        """Get a media record. Raises MediaNotFoundError."""
        ...

    @abstractmethod
    def get_media_by_filename(self, filename: str) -> list[int]:
        """Get ids of all media stored under a filename."""
        ...

    @abstractmethod
    def query_media(self, predicate: str) -> list[int]:
        """Get ids of media matching an equality predicate like ``hash = 'ab'``."""
        ...

    @abstractmethod
    def get_hash_size(self) -> int:
        """Byte length of the content hash."""
        ...

    @abstractmethod
    def create_series(self, name: str, comment: Optional[str] = None) -> uuid.UUID:
        """Create a series and return its uuid."""
        ...

    @abstractmethod
    def get_series_by_name(self, name: str) -> uuid.UUID:
        """Get a series uuid by name. Raises SeriesNotFoundError."""
        ...

    @abstractmethod
    def add_to_series(
        self,
        media_id: int,
        series_uuid: uuid.UUID,
        sort_index: Optional[int] = None,
        use_default_order: bool = True,
    ) -> None:
        """Add a media to a series, optionally at an explicit position."""
        ...

    @abstractmethod
    def get_summary(self) -> LibrarySummary:
        """Get library counters."""
        ...


class ProgressReporter(Protocol):
    """Interface for user-facing output."""

    @abstractmethod
    def info(self, message: str) -> None:
        """Log an info message."""
        ...

    @abstractmethod
    def success(self, message: str) -> None:
        """Log a success message."""
        ...

    @abstractmethod
    def warning(self, message: str) -> None:
        """Log a warning message."""
        ...

    @abstractmethod
    def error(self, message: str) -> None:
        """Log an error message."""
        ...


class Prompter(Protocol):
    """Interface for interactive questions."""

    @abstractmethod
    def ask_for_series_name(self, is_taken: Callable[[str], bool]) -> str:
        """Ask until a name for which ``is_taken`` is false is entered."""
        ...
