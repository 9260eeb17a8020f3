"""Binding of ingested media into a series."""
from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence

from ..core.errors import SeriesNotFoundError
from ..core.models import (
    BindResult,
    ExistingSeries,
    Failed,
    IngestionOutcome,
    NewSeries,
    NoSeries,
    SeriesBindingPolicy,
    SeriesIntent,
)
from ..core.protocols import LibraryEngine, ProgressReporter, Prompter

logger = logging.getLogger(__name__)


def series_name_taken(engine: LibraryEngine, name: str) -> bool:
    try:
        engine.get_series_by_name(name)
    except SeriesNotFoundError:
        return False
    return True


def resolve_series(
    engine: LibraryEngine,
    intent: SeriesIntent,
    prompter: Optional[Prompter] = None,
) -> Optional[uuid.UUID]:
    """Turn a series intent into a series uuid, creating the series if asked.

    A name collision triggers a prompt for another name when the intent
    allows it and a prompter is available; otherwise the series is created
    under the given name anyway.
    """
    match intent:
        case NoSeries():
            return None
        case ExistingSeries(uuid=series_uuid):
            return series_uuid
        case NewSeries(name=name, allow_prompt=allow_prompt):
            if allow_prompt and prompter is not None and series_name_taken(engine, name):
                logger.debug("Series name %r is taken, asking for another", name)
                name = prompter.ask_for_series_name(
                    lambda candidate: series_name_taken(engine, candidate)
                )
            return engine.create_series(name, None)
    raise TypeError(f"Unknown series intent: {intent!r}")


class SeriesBinder:
    """Adds the ids of successful ingestions to the requested series."""

    def __init__(
        self,
        engine: LibraryEngine,
        reporter: ProgressReporter,
        prompter: Optional[Prompter] = None,
    ):
        self._engine = engine
        self._reporter = reporter
        self._prompter = prompter

    def bind(
        self,
        outcomes: Sequence[IngestionOutcome],
        intent: SeriesIntent,
        policy: SeriesBindingPolicy,
    ) -> Optional[BindResult]:
        """Bind outcomes to a series.

        Returns:
            The series and the number of bound media, or None when no
            binding happened.
        """
        if isinstance(intent, NoSeries):
            return None

        # A sorted series with holes would silently shift positions
        if policy.sorted and any(isinstance(o, Failed) for o in outcomes):
            self._reporter.warning(
                "There is some media cannot be added while trying to add it to sorted series. "
                "This may break the sort, so no media was added to the series."
            )
            return None

        series_uuid = resolve_series(self._engine, intent, self._prompter)
        if series_uuid is None:
            return None

        ids = [o.media_id for o in outcomes if not isinstance(o, Failed)]
        for position, media_id in enumerate(ids):
            if policy.sorted:
                self._engine.add_to_series(media_id, series_uuid, position, False)
            else:
                self._engine.add_to_series(media_id, series_uuid, None, True)

        self._reporter.success(f"Successfully Added {len(ids)} Medias to Series {series_uuid}.")
        return BindResult(series_uuid=series_uuid, bound=len(ids))
