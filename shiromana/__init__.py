"""Command-line front end for a local media library.

Add files to the library, group them into series and look them up by id,
content hash or file name.
"""

__version__ = "0.1.0"

# Core exports
from .core.config import AppConfig
from .core.models import Media, MediaType, LibrarySummary, QueryResolution
from .core.protocols import LibraryEngine, ProgressReporter, Prompter

# Engine exports
from .engines.classifier import MediaClassifier

# Service exports
from .services.file_list import resolve_files
from .services.ingestion import IngestionPipeline
from .services.series import SeriesBinder
from .services.resolver import MediaResolver

# Persistence exports
from .persistence.library import SQLiteLibrary

# Logging exports
from .logging.rich_logger import RichProgressReporter

__all__ = [
    # Core
    "AppConfig",
    "Media",
    "MediaType",
    "LibrarySummary",
    "QueryResolution",
    "LibraryEngine",
    "ProgressReporter",
    "Prompter",
    # Engines
    "MediaClassifier",
    # Services
    "resolve_files",
    "IngestionPipeline",
    "SeriesBinder",
    "MediaResolver",
    # Persistence
    "SQLiteLibrary",
    # Logging
    "RichProgressReporter",
]
