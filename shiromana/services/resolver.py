"""Resolution of a free-form query string into media records.

Lookups are tried in a fixed order and the first one that matches wins:
id, then content hash, then filename.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from ..core.errors import LibraryError
from ..core.models import Media, QueryResolution, ResolutionMethod
from ..core.protocols import LibraryEngine
from .ingestion import hash_predicate

logger = logging.getLogger(__name__)

# Largest id SQLite can store in an INTEGER PRIMARY KEY
MAX_MEDIA_ID = 2**63 - 1

# A strategy returns the matches, or None when it does not apply or finds nothing
Strategy = Callable[[LibraryEngine, str], Optional[list[Media]]]


def parse_media_id(query: str) -> Optional[int]:
    """Parse an unsigned decimal id with an optional leading ``+``.

    Values beyond the largest storable id do not parse.
    """
    digits = query[1:] if query.startswith("+") else query
    if not (digits.isascii() and digits.isdigit()):
        return None
    media_id = int(digits)
    if media_id > MAX_MEDIA_ID:
        return None
    return media_id


def by_id(engine: LibraryEngine, query: str) -> Optional[list[Media]]:
    """Match the query as a numeric media id."""
    media_id = parse_media_id(query)
    if media_id is None:
        return None
    try:
        return [engine.get_media(media_id)]
    except LibraryError:
        return None


def by_hash(engine: LibraryEngine, query: str) -> Optional[list[Media]]:
    """Match the query as a hex content hash; only the first hit is kept."""
    if len(query) != engine.get_hash_size() * 2:
        return None
    try:
        ids = engine.query_media(hash_predicate(query))
        if not ids:
            return None
        return [engine.get_media(ids[0])]
    except LibraryError as e:
        logger.debug("Hash lookup for %s failed: %s", query, e)
        return None


def by_filename(engine: LibraryEngine, query: str) -> Optional[list[Media]]:
    """Match every media stored under the query as filename."""
    try:
        ids = engine.get_media_by_filename(query)
        media = [engine.get_media(media_id) for media_id in ids]
    except LibraryError as e:
        logger.debug("Filename lookup for %s failed: %s", query, e)
        return None
    return media or None


DEFAULT_STRATEGIES: tuple[tuple[ResolutionMethod, Strategy], ...] = (
    (ResolutionMethod.ID, by_id),
    (ResolutionMethod.HASH, by_hash),
    (ResolutionMethod.FILENAME, by_filename),
)


def first_match(
    engine: LibraryEngine,
    query: str,
    strategies: Sequence[tuple[ResolutionMethod, Strategy]],
) -> QueryResolution:
    """Run strategies in order and stop at the first non-empty result."""
    trimmed = query.strip()
    for method, strategy in strategies:
        media = strategy(engine, trimmed)
        if media:
            logger.debug("Resolved %r by %s: %d media", query, method.value, len(media))
            return QueryResolution(query=query, method=method, media=tuple(media))
    return QueryResolution(query=query)


class MediaResolver:
    """Resolves queries against one library."""

    def __init__(
        self,
        engine: LibraryEngine,
        strategies: Sequence[tuple[ResolutionMethod, Strategy]] = DEFAULT_STRATEGIES,
    ):
        self._engine = engine
        self._strategies = strategies

    def resolve(self, query: str) -> QueryResolution:
        return first_match(self._engine, query, self._strategies)
