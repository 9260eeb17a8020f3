"""SQLite-backed, content-addressed media library."""
from __future__ import annotations

import logging
import re
import shutil
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..core.errors import (
    InvalidQueryError,
    LibraryError,
    MediaExistsError,
    MediaNotFoundError,
    SeriesNotFoundError,
)
from ..core.models import LibrarySummary, Media, MediaType
from ..engines.hash_engine import HASH_SIZE, hash_file


logger = logging.getLogger(__name__)

SCHEMA = "shiromana-sqlite-1"
DB_FILENAME = "library.sqlite"
MEDIA_DIRNAME = "media"

# Columns that may appear in query_media predicates
QUERYABLE_COLUMNS = frozenset({"hash", "filename", "kind", "title"})

_PREDICATE_RE = re.compile(r"^\s*(\w+)\s*=\s*'((?:[^']|'')*)'\s*$")


def parse_predicate(predicate: str) -> tuple[str, str]:
    """Split ``column = 'value'`` into its parts.

    Raises:
        InvalidQueryError: On any other shape or an unknown column.
    """
    match = _PREDICATE_RE.match(predicate)
    if not match:
        raise InvalidQueryError(f"Unsupported query: {predicate}")
    column, value = match.group(1).lower(), match.group(2).replace("''", "'")
    if column not in QUERYABLE_COLUMNS:
        raise InvalidQueryError(f"Cannot query on column: {column}")
    return column, value


class SQLiteLibrary:
    """A media library stored in ``<path>/<name>.mlib``.

    Files are copied into ``media/<hash[:2]>/<hash><suffix>`` and indexed
    in SQLite. Each content hash is stored at most once.
    """

    def __init__(self, lib_dir: Path):
        """Open the database of an existing library directory.

        Use ``create`` or ``open`` instead of calling this directly.
        """
        self._lib_dir = lib_dir
        self._conn: Optional[sqlite3.Connection] = None
        self._init_database()
        meta = self._read_meta()
        self.uuid = uuid.UUID(meta["uuid"])
        self._name = meta["name"]
        self._master_name = meta.get("master_name") or None
        self._schema = meta["schema"]

    @classmethod
    def create(
        cls,
        library_path: Path,
        name: str,
        master_name: Optional[str] = None,
    ) -> "SQLiteLibrary":
        """Create a new library below ``library_path``.

        Raises:
            LibraryError: If the library already exists.
        """
        lib_dir = library_path / f"{name}.mlib"
        if lib_dir.exists():
            raise LibraryError(f"Library already exists at {lib_dir}")
        lib_dir.mkdir(parents=True)
        (lib_dir / MEDIA_DIRNAME).mkdir()

        conn = sqlite3.connect(str(lib_dir / DB_FILENAME))
        try:
            conn.execute("CREATE TABLE library_meta (key TEXT PRIMARY KEY, value TEXT)")
            conn.executemany(
                "INSERT INTO library_meta (key, value) VALUES (?, ?)",
                [
                    ("uuid", str(uuid.uuid4())),
                    ("name", name),
                    ("master_name", master_name or ""),
                    ("schema", SCHEMA),
                ],
            )
            conn.commit()
        finally:
            conn.close()

        logger.info("Created library %s at %s", name, lib_dir)
        return cls(lib_dir)

    @classmethod
    def open(cls, lib_dir: Path) -> "SQLiteLibrary":
        """Open an existing library directory.

        Raises:
            LibraryError: If the directory is not a library.
        """
        if not (lib_dir / DB_FILENAME).is_file():
            raise LibraryError(f"No library found at {lib_dir}")
        return cls(lib_dir)

    def _init_database(self) -> None:
        """Create tables if they don't exist."""
        self._conn = sqlite3.connect(str(self._lib_dir / DB_FILENAME))
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")

        cursor = self._conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS library_meta (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS media (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                hash TEXT UNIQUE NOT NULL,
                filename TEXT NOT NULL,
                filepath TEXT NOT NULL,
                filesize INTEGER NOT NULL,
                kind TEXT NOT NULL,
                sub_kind TEXT,
                kind_addition TEXT,
                title TEXT,
                comment TEXT,
                detail TEXT,
                time_add TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_media_filename
            ON media(filename)
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS series (
                uuid TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                comment TEXT,
                created_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS series_media (
                series_uuid TEXT NOT NULL REFERENCES series(uuid),
                media_id INTEGER NOT NULL REFERENCES media(id),
                sort_index INTEGER,
                PRIMARY KEY (series_uuid, media_id)
            )
        """)

        self._conn.commit()

    def _read_meta(self) -> dict[str, str]:
        assert self._conn is not None
        rows = self._conn.execute("SELECT key, value FROM library_meta").fetchall()
        meta = {row["key"]: row["value"] for row in rows}
        if "uuid" not in meta:
            raise LibraryError(f"Library metadata missing in {self._lib_dir}")
        return meta

    # --- Library info ---

    def get_library_name(self) -> str:
        return self._name

    def get_master_name(self) -> Optional[str]:
        return self._master_name

    def get_path(self) -> str:
        return str(self._lib_dir)

    def get_schema(self) -> str:
        return self._schema

    def get_hash_size(self) -> int:
        return HASH_SIZE

    def get_summary(self) -> LibrarySummary:
        """Count media, series and stored bytes."""
        assert self._conn is not None
        media_count, media_size = self._conn.execute(
            "SELECT COUNT(*), COALESCE(SUM(filesize), 0) FROM media"
        ).fetchone()
        series_count = self._conn.execute("SELECT COUNT(*) FROM series").fetchone()[0]
        return LibrarySummary(
            media_count=media_count,
            series_count=series_count,
            media_size=media_size,
        )

    # --- Media ---

    def add_media(
        self,
        path: str,
        kind: MediaType,
        sub_kind: Optional[str] = None,
        kind_addition: Optional[str] = None,
        title: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> int:
        """Copy a file into the store and index it.

        Returns:
            The id of the new media.

        Raises:
            MediaExistsError: If the same content is already stored.
            LibraryError: If the file cannot be read or copied.
        """
        assert self._conn is not None
        source = Path(path)
        if not source.is_file():
            raise LibraryError(f"{path} is not a file")

        try:
            hash_val = hash_file(source)
        except OSError as e:
            raise LibraryError(f"Cannot read {path}: {e}") from e

        if self._conn.execute("SELECT 1 FROM media WHERE hash = ?", (hash_val,)).fetchone():
            raise MediaExistsError(hash_val)

        rel_path = Path(MEDIA_DIRNAME) / hash_val[:2] / f"{hash_val}{source.suffix.lower()}"
        target = self._lib_dir / rel_path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        except OSError as e:
            raise LibraryError(f"Cannot copy {path} into library: {e}") from e

        cursor = self._conn.cursor()
        cursor.execute("""
            INSERT INTO media (
                hash, filename, filepath, filesize, kind,
                sub_kind, kind_addition, title, comment, time_add
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            hash_val,
            source.name,
            str(rel_path),
            target.stat().st_size,
            kind.value,
            sub_kind,
            kind_addition,
            title,
            comment,
            datetime.now().isoformat(timespec="seconds"),
        ))
        self._conn.commit()
        media_id = cursor.lastrowid
        assert media_id is not None
        logger.debug("Stored %s as media %d (%s)", source, media_id, hash_val)
        return media_id

    def get_media(self, media_id: int) -> Media:
        """Get a media record by id.

        Raises:
            MediaNotFoundError: If there is no such media.
        """
        assert self._conn is not None
        row = self._conn.execute("SELECT * FROM media WHERE id = ?", (media_id,)).fetchone()
        if row is None:
            raise MediaNotFoundError(f"No media with id {media_id}")
        series = self._conn.execute(
            "SELECT series_uuid FROM series_media WHERE media_id = ? ORDER BY series_uuid",
            (media_id,),
        ).fetchall()
        return self._row_to_media(row, tuple(uuid.UUID(r[0]) for r in series))

    def get_media_by_filename(self, filename: str) -> list[int]:
        assert self._conn is not None
        rows = self._conn.execute(
            "SELECT id FROM media WHERE filename = ? ORDER BY id", (filename,)
        ).fetchall()
        return [row[0] for row in rows]

    def query_media(self, predicate: str) -> list[int]:
        """Get ids matching an equality predicate such as ``hash = 'abc'``."""
        assert self._conn is not None
        column, value = parse_predicate(predicate)
        # column is whitelisted by parse_predicate
        rows = self._conn.execute(
            f"SELECT id FROM media WHERE {column} = ? ORDER BY id", (value,)
        ).fetchall()
        return [row[0] for row in rows]

    # --- Series ---

    def create_series(self, name: str, comment: Optional[str] = None) -> uuid.UUID:
        assert self._conn is not None
        series_uuid = uuid.uuid4()
        self._conn.execute(
            "INSERT INTO series (uuid, name, comment) VALUES (?, ?, ?)",
            (str(series_uuid), name, comment),
        )
        self._conn.commit()
        logger.debug("Created series %s (%s)", name, series_uuid)
        return series_uuid

    def get_series_by_name(self, name: str) -> uuid.UUID:
        """Get the uuid of the oldest series with this name.

        Raises:
            SeriesNotFoundError: If no series has this name.
        """
        assert self._conn is not None
        row = self._conn.execute(
            "SELECT uuid FROM series WHERE name = ? ORDER BY created_at, rowid LIMIT 1",
            (name,),
        ).fetchone()
        if row is None:
            raise SeriesNotFoundError(f"No series named {name}")
        return uuid.UUID(row[0])

    def get_series_members(self, series_uuid: uuid.UUID) -> list[tuple[int, Optional[int]]]:
        """Get ``(media_id, sort_index)`` pairs of a series in order."""
        assert self._conn is not None
        self._require_series(series_uuid)
        rows = self._conn.execute("""
            SELECT media_id, sort_index FROM series_media
            WHERE series_uuid = ?
            ORDER BY sort_index IS NULL, sort_index, rowid
        """, (str(series_uuid),)).fetchall()
        return [(row[0], row[1]) for row in rows]

    def add_to_series(
        self,
        media_id: int,
        series_uuid: uuid.UUID,
        sort_index: Optional[int] = None,
        use_default_order: bool = True,
    ) -> None:
        """Add a media to a series.

        Without an explicit ``sort_index`` the media is appended after the
        current last position when ``use_default_order`` is set, and left
        unpositioned otherwise. Re-adding a member updates its position.
        """
        assert self._conn is not None
        self._require_series(series_uuid)
        if not self._conn.execute("SELECT 1 FROM media WHERE id = ?", (media_id,)).fetchone():
            raise MediaNotFoundError(f"No media with id {media_id}")

        if sort_index is None and use_default_order:
            sort_index = self._conn.execute(
                "SELECT COALESCE(MAX(sort_index) + 1, 0) FROM series_media WHERE series_uuid = ?",
                (str(series_uuid),),
            ).fetchone()[0]

        self._conn.execute("""
            INSERT INTO series_media (series_uuid, media_id, sort_index)
            VALUES (?, ?, ?)
            ON CONFLICT(series_uuid, media_id) DO UPDATE SET
                sort_index = excluded.sort_index
        """, (str(series_uuid), media_id, sort_index))
        self._conn.commit()

    def _require_series(self, series_uuid: uuid.UUID) -> None:
        assert self._conn is not None
        row = self._conn.execute(
            "SELECT 1 FROM series WHERE uuid = ?", (str(series_uuid),)
        ).fetchone()
        if row is None:
            raise SeriesNotFoundError(f"No series with uuid {series_uuid}")

    # --- Lifecycle ---

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def _row_to_media(self, row: sqlite3.Row, series: tuple[uuid.UUID, ...]) -> Media:
        """Convert database row to Media."""
        try:
            time_add = datetime.fromisoformat(row["time_add"])
        except (TypeError, ValueError):
            time_add = datetime.fromtimestamp(0)

        return Media(
            id=row["id"],
            library_uuid=self.uuid,
            hash=row["hash"],
            filename=row["filename"],
            filepath=str(self._lib_dir / row["filepath"]),
            filesize=row["filesize"],
            kind=MediaType.parse(row["kind"]),
            time_add=time_add,
            caption=row["title"],
            sub_kind=row["sub_kind"],
            kind_addition=row["kind_addition"],
            comment=row["comment"],
            series_uuid=series,
            detail=row["detail"],
        )

    def __enter__(self) -> "SQLiteLibrary":
        return self

    def __exit__(self, *args) -> None:
        self.close()
