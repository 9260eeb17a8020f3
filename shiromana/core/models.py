"""Domain models - immutable data classes."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Union


class MediaType(str, Enum):
    """Closed set of media classifications."""
    IMAGE = "Image"
    AUDIO = "Audio"
    VIDEO = "Video"
    TEXT = "Text"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: str) -> "MediaType":
        """Parse a type name case-insensitively.

        Raises:
            ValueError: If the name is not one of the known types.
        """
        wanted = value.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        raise ValueError(f"Unsupported media type: {value!r}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Media:
    """A media record as stored by the library engine."""
    id: int
    library_uuid: uuid.UUID
    hash: str
    filename: str
    filepath: str
    filesize: int
    kind: MediaType
    time_add: datetime
    caption: Optional[str] = None
    sub_kind: Optional[str] = None
    kind_addition: Optional[str] = None
    comment: Optional[str] = None
    series_uuid: tuple[uuid.UUID, ...] = field(default_factory=tuple)
    detail: Optional[str] = None


@dataclass(frozen=True, slots=True)
class LibrarySummary:
    """Aggregate counters of a library."""
    media_count: int = 0
    series_count: int = 0
    media_size: int = 0


# ============ Ingestion outcomes ============

@dataclass(frozen=True, slots=True)
class Registered:
    """File stored as new media under a fresh id."""
    path: Path
    media_id: int
    kind: MediaType


@dataclass(frozen=True, slots=True)
class Duplicate:
    """File content was already stored; the existing id was recovered."""
    path: Path
    media_id: int
    hash: str


@dataclass(frozen=True, slots=True)
class Failed:
    """File could not be registered and has no id."""
    path: Path
    cause: str

    @property
    def media_id(self) -> None:
        return None


IngestionOutcome = Union[Registered, Duplicate, Failed]


@dataclass(slots=True)
class IngestionStats:
    """Mutable counters for one ingestion run."""
    registered: int = 0
    duplicates: int = 0
    failed: int = 0

    def record(self, outcome: IngestionOutcome) -> None:
        match outcome:
            case Registered():
                self.registered += 1
            case Duplicate():
                self.duplicates += 1
            case Failed():
                self.failed += 1

    @property
    def total(self) -> int:
        return self.registered + self.duplicates + self.failed


# ============ Series binding ============

@dataclass(frozen=True, slots=True)
class NoSeries:
    """No series binding requested."""


@dataclass(frozen=True, slots=True)
class ExistingSeries:
    """Bind into a series that already exists."""
    uuid: uuid.UUID


@dataclass(frozen=True, slots=True)
class NewSeries:
    """Create a series under this name, asking for another on collision."""
    name: str
    allow_prompt: bool = True


SeriesIntent = Union[NoSeries, ExistingSeries, NewSeries]


@dataclass(frozen=True, slots=True)
class SeriesBindingPolicy:
    """Whether series positions follow the input order."""
    sorted: bool = False


@dataclass(frozen=True, slots=True)
class BindResult:
    """Result of binding ingested media into a series."""
    series_uuid: uuid.UUID
    bound: int


# ============ Query resolution ============

class ResolutionMethod(Enum):
    """Which lookup produced a query result."""
    ID = "id"
    HASH = "hash"
    FILENAME = "filename"


@dataclass(frozen=True, slots=True)
class QueryResolution:
    """Media matched by a query string."""
    query: str
    method: Optional[ResolutionMethod] = None
    media: tuple[Media, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.media
