"""Registration of a batch of files into the library."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from rich.markup import escape

from ..core.errors import MediaExistsError
from ..core.models import (
    Duplicate,
    Failed,
    IngestionOutcome,
    IngestionStats,
    MediaType,
    Registered,
)
from ..core.protocols import LibraryEngine, ProgressReporter
from ..engines.classifier import MediaClassifier

logger = logging.getLogger(__name__)


def hash_predicate(hash_val: str) -> str:
    """Equality predicate on the hash column."""
    return f"hash = '{hash_val}'"


def add_one_media(
    engine: LibraryEngine,
    path: Path,
    kind: MediaType,
    title: Optional[str],
    comment: Optional[str],
) -> int:
    """Register a single file. Engine errors propagate."""
    return engine.add_media(str(path), kind, None, None, title, comment)


def recover_duplicate(
    engine: LibraryEngine,
    path: Path,
    hash_val: str,
    reporter: ProgressReporter,
) -> IngestionOutcome:
    """Find the media already stored under ``hash_val``."""
    try:
        ids = engine.query_media(hash_predicate(hash_val))
    except Exception as e:
        reporter.error(
            f"Error at querying media via Hash should exists: {hash_val}, Due to: {escape(str(e))}"
        )
        return Failed(path=path, cause=str(e))

    if not ids:
        reporter.error(f"Media with hash {hash_val} reported as existing but not found")
        return Failed(path=path, cause=f"no media with hash {hash_val}")
    if len(ids) > 1:
        logger.warning("Hash %s matches %d media, using %d", hash_val, len(ids), ids[0])

    media_id = ids[0]
    try:
        media = engine.get_media(media_id)
    except Exception as e:
        logger.debug("Cannot load existing media %d: %s", media_id, e)
        reporter.info(f"Existed Media Found: \\[{media_id}]")
    else:
        reporter.info(
            f"Existed Media Found: {escape(media.filename)} \\[{media_id}] \\[{media.kind}]"
        )
    return Duplicate(path=path, media_id=media_id, hash=hash_val)


class IngestionPipeline:
    """Classifies and registers files one by one, in input order.

    Each file yields exactly one outcome; a failing file never stops the
    rest of the batch.
    """

    def __init__(
        self,
        engine: LibraryEngine,
        reporter: ProgressReporter,
        classifier: Optional[MediaClassifier] = None,
    ):
        self._engine = engine
        self._reporter = reporter
        self._classifier = classifier or MediaClassifier()
        self.stats = IngestionStats()

    def ingest(
        self,
        files: Sequence[Path],
        hint: Optional[MediaType] = None,
        title: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> list[IngestionOutcome]:
        """Register every file and return one outcome per file."""
        # Title and comment only make sense for a single file
        if len(files) != 1:
            title = comment = None

        outcomes = []
        for path in files:
            outcome = self._ingest_one(path, hint, title, comment)
            self.stats.record(outcome)
            outcomes.append(outcome)
        return outcomes

    def _ingest_one(
        self,
        path: Path,
        hint: Optional[MediaType],
        title: Optional[str],
        comment: Optional[str],
    ) -> IngestionOutcome:
        try:
            kind = self._classifier.classify(path, hint)
            media_id = add_one_media(self._engine, path, kind, title, comment)
        except MediaExistsError as e:
            logger.debug("%s already stored as %s", path, e.hash)
            return recover_duplicate(self._engine, path, e.hash, self._reporter)
        except Exception as e:
            self._reporter.error(f"Error when trying add media: {escape(str(e))}")
            return Failed(path=path, cause=str(e))

        self._reporter.success(
            f"Successfully Added Media: {escape(path.name)} \\[{media_id}] \\[{kind}]"
        )
        return Registered(path=path, media_id=media_id, kind=kind)
