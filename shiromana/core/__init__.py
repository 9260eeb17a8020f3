"""Core domain models, protocols, configuration and errors."""
from .protocols import LibraryEngine, ProgressReporter, Prompter
from .models import (
    Media,
    MediaType,
    LibrarySummary,
    Registered,
    Duplicate,
    Failed,
    IngestionOutcome,
    IngestionStats,
    NoSeries,
    ExistingSeries,
    NewSeries,
    SeriesIntent,
    SeriesBindingPolicy,
    BindResult,
    QueryResolution,
    ResolutionMethod,
)
from .config import AppConfig
from .errors import (
    ShiromanaError,
    PreconditionError,
    MissingFilesError,
    ConfigError,
    LibraryError,
    MediaExistsError,
    MediaNotFoundError,
    SeriesNotFoundError,
    InvalidQueryError,
)

__all__ = [
    # Protocols
    "LibraryEngine",
    "ProgressReporter",
    "Prompter",
    # Models
    "Media",
    "MediaType",
    "LibrarySummary",
    "Registered",
    "Duplicate",
    "Failed",
    "IngestionOutcome",
    "IngestionStats",
    "NoSeries",
    "ExistingSeries",
    "NewSeries",
    "SeriesIntent",
    "SeriesBindingPolicy",
    "BindResult",
    "QueryResolution",
    "ResolutionMethod",
    # Config
    "AppConfig",
    # Errors
    "ShiromanaError",
    "PreconditionError",
    "MissingFilesError",
    "ConfigError",
    "LibraryError",
    "MediaExistsError",
    "MediaNotFoundError",
    "SeriesNotFoundError",
    "InvalidQueryError",
]
