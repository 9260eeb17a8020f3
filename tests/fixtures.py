"""Test doubles shared by the service tests.

``FakeLibrary`` keeps media and series in memory and records every call
made to it, so tests can assert on what the services asked the engine to do.
"""
from __future__ import annotations

import hashlib
import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from shiromana.core.errors import (
    LibraryError,
    MediaExistsError,
    MediaNotFoundError,
    SeriesNotFoundError,
)
from shiromana.core.models import LibrarySummary, Media, MediaType
from shiromana.persistence.library import parse_predicate

LIBRARY_UUID = uuid.UUID("00000000-0000-4000-8000-000000000001")


def content_hash(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


class FakeLibrary:
    """In-memory implementation of the LibraryEngine protocol."""

    def __init__(self):
        self.media: dict[int, Media] = {}
        self.series: dict[uuid.UUID, str] = {}
        self.members: dict[uuid.UUID, list[tuple[int, Optional[int], bool]]] = {}
        self.calls: list[tuple] = []
        self.fail_paths: set[str] = set()
        self.query_error: Optional[Exception] = None
        self._next_id = 1

    # --- Seeding helpers (not recorded) ---

    def store(
        self,
        filename: str,
        content: bytes = b"",
        kind: MediaType = MediaType.IMAGE,
        media_id: Optional[int] = None,
        hash_value: Optional[str] = None,
    ) -> Media:
        if media_id is None:
            media_id = self._next_id
        self._next_id = max(self._next_id, media_id + 1)
        media = Media(
            id=media_id,
            library_uuid=LIBRARY_UUID,
            hash=hash_value or content_hash(content + str(media_id).encode()),
            filename=filename,
            filepath=f"/library/{filename}",
            filesize=len(content),
            kind=kind,
            time_add=datetime(2024, 1, 1),
        )
        self.media[media_id] = media
        return media

    def store_file(self, path: Path, kind: MediaType = MediaType.IMAGE) -> Media:
        content = path.read_bytes()
        return self.store(path.name, content, kind, hash_value=content_hash(content))

    @property
    def mutating_calls(self) -> list[tuple]:
        names = {"add_media", "create_series", "add_to_series"}
        return [c for c in self.calls if c[0] in names]

    def calls_named(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]

    # --- LibraryEngine ---

    def add_media(
        self,
        path: str,
        kind: MediaType,
        sub_kind: Optional[str] = None,
        kind_addition: Optional[str] = None,
        title: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> int:
        self.calls.append(("add_media", path, kind, title, comment))
        if path in self.fail_paths:
            raise LibraryError(f"cannot store {path}")
        content = Path(path).read_bytes()
        hash_value = content_hash(content)
        if any(m.hash == hash_value for m in self.media.values()):
            raise MediaExistsError(hash_value)
        return self.store(Path(path).name, content, kind, hash_value=hash_value).id

    def get_media(self, media_id: int) -> Media:
        self.calls.append(("get_media", media_id))
        try:
            return self.media[media_id]
        except KeyError:
            raise MediaNotFoundError(f"No media with id {media_id}") from None

    def get_media_by_filename(self, filename: str) -> list[int]:
        self.calls.append(("get_media_by_filename", filename))
        return [m.id for m in self.media.values() if m.filename == filename]

    def query_media(self, predicate: str) -> list[int]:
        self.calls.append(("query_media", predicate))
        if self.query_error is not None:
            raise self.query_error
        column, value = parse_predicate(predicate)
        assert column == "hash"
        return sorted(m.id for m in self.media.values() if m.hash == value)

    def get_hash_size(self) -> int:
        return 32

    def create_series(self, name: str, comment: Optional[str] = None) -> uuid.UUID:
        self.calls.append(("create_series", name, comment))
        series_uuid = uuid.uuid4()
        self.series[series_uuid] = name
        self.members[series_uuid] = []
        return series_uuid

    def get_series_by_name(self, name: str) -> uuid.UUID:
        self.calls.append(("get_series_by_name", name))
        for series_uuid, series_name in self.series.items():
            if series_name == name:
                return series_uuid
        raise SeriesNotFoundError(f"No series named {name}")

    def add_to_series(
        self,
        media_id: int,
        series_uuid: uuid.UUID,
        sort_index: Optional[int] = None,
        use_default_order: bool = True,
    ) -> None:
        self.calls.append(("add_to_series", media_id, series_uuid, sort_index, use_default_order))
        if series_uuid not in self.series:
            raise SeriesNotFoundError(f"No series with uuid {series_uuid}")
        self.members[series_uuid].append((media_id, sort_index, use_default_order))

    def get_summary(self) -> LibrarySummary:
        return LibrarySummary(
            media_count=len(self.media),
            series_count=len(self.series),
            media_size=sum(m.filesize for m in self.media.values()),
        )


class FakePrompter:
    """Answers prompts from a fixed list."""

    def __init__(self, answers: list[str]):
        self._answers = list(answers)
        self.asked = 0

    def ask_for_series_name(self, is_taken: Callable[[str], bool]) -> str:
        while True:
            self.asked += 1
            answer = self._answers.pop(0)
            if not is_taken(answer):
                return answer


def write_files(base: Path, contents: dict[str, bytes]) -> list[Path]:
    """Write files in order and return their paths."""
    paths = []
    for name, content in contents.items():
        path = base / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        paths.append(path)
    return paths
