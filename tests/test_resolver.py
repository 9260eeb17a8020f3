"""Tests for query resolution."""
import pytest
from pathlib import Path

from shiromana.core.models import MediaType, ResolutionMethod
from shiromana.persistence.library import SQLiteLibrary
from shiromana.services.resolver import (
    DEFAULT_STRATEGIES,
    MAX_MEDIA_ID,
    MediaResolver,
    by_filename,
    by_hash,
    by_id,
    first_match,
    parse_media_id,
)

from fixtures import FakeLibrary, content_hash, write_files


@pytest.fixture
def library():
    return FakeLibrary()


@pytest.fixture
def resolver(library):
    return MediaResolver(library)


class TestStrategies:
    """Tests for the individual lookups."""

    @pytest.mark.parametrize("query, expected", [
        ("42", 42),
        ("+42", 42),
        ("0", 0),
        (str(MAX_MEDIA_ID), MAX_MEDIA_ID),
        (str(MAX_MEDIA_ID + 1), None),
        ("12345678901234567890123", None),
        ("+", None),
        ("++1", None),
        ("-1", None),
        ("\u0662", None),
    ])
    def test_parse_media_id(self, query: str, expected):
        """Test which strings count as media ids."""
        assert parse_media_id(query) == expected

    def test_by_id_plus_sign(self, library):
        """Test a leading plus sign still finds the media."""
        media = library.store("a.png", media_id=42)

        assert by_id(library, "+42") == [media]

    def test_by_id_out_of_range_not_looked_up(self, library):
        """Test ids too large to store never reach the engine."""
        assert by_id(library, "9" * 30) is None
        assert library.calls_named("get_media") == []

    def test_by_id_ignores_non_numbers(self, library):
        """Test non-numeric strings are not ids."""
        library.store("a.png", media_id=1)

        assert by_id(library, "abc") is None
        assert by_id(library, "-1") is None
        assert by_id(library, "1.0") is None
        assert library.calls_named("get_media") == []

    def test_by_id_unknown(self, library):
        """Test an unknown id yields nothing."""
        assert by_id(library, "99") is None

    def test_by_hash_requires_exact_length(self, library):
        """Test strings of the wrong length are not looked up as hashes."""
        assert by_hash(library, "ab" * 31) is None
        assert library.calls_named("query_media") == []

    def test_by_hash_returns_first(self, library):
        """Test only the first hash match is kept."""
        media = library.store("a.png", b"x", hash_value=content_hash(b"x"))

        assert by_hash(library, media.hash) == [media]

    def test_by_filename_empty(self, library):
        """Test no filename matches yields None."""
        assert by_filename(library, "nothing.png") is None


class TestMediaResolver:
    """Tests for the prioritized lookup chain."""

    def test_id_wins_over_filename(self, resolver, library):
        """Test an existing id beats a media literally named like it."""
        by_number = library.store("holiday.png", media_id=42)
        library.store("42", media_id=7)

        resolution = resolver.resolve("42")

        assert resolution.method == ResolutionMethod.ID
        assert resolution.media == (by_number,)

    def test_filename_used_when_id_missing(self, resolver, library):
        """Test a numeric string falls through to the filename lookup."""
        named = library.store("42", media_id=7)

        resolution = resolver.resolve("42")

        assert resolution.method == ResolutionMethod.FILENAME
        assert resolution.media == (named,)

    def test_hash_match(self, resolver, library):
        """Test a 64 hex char string finds media by hash."""
        library.store("other.png", b"other")
        target = library.store("target.png", b"target", hash_value=content_hash(b"target"))

        resolution = resolver.resolve(target.hash)

        assert resolution.method == ResolutionMethod.HASH
        assert resolution.media == (target,)

    def test_filename_returns_all_in_engine_order(self, resolver, library):
        """Test every media with the name is returned."""
        first = library.store("photo.png", b"1")
        library.store("other.png", b"2")
        second = library.store("photo.png", b"3")

        resolution = resolver.resolve("photo.png")

        assert resolution.method == ResolutionMethod.FILENAME
        assert resolution.media == (first, second)

    def test_query_is_trimmed(self, resolver, library):
        """Test surrounding whitespace is ignored for lookups."""
        media = library.store("photo.png")

        resolution = resolver.resolve("  photo.png \n")

        assert resolution.media == (media,)
        assert resolution.query == "  photo.png \n"

    def test_nothing_found(self, resolver, library):
        """Test an empty resolution echoes the untrimmed query."""
        library.store("photo.png")

        resolution = resolver.resolve(" missing ")

        assert resolution.is_empty
        assert resolution.method is None
        assert resolution.query == " missing "

    def test_short_circuits(self, resolver, library):
        """Test later lookups are not run after a match."""
        library.store("a.png", media_id=5)

        resolver.resolve("5")

        assert library.calls_named("query_media") == []
        assert library.calls_named("get_media_by_filename") == []

    def test_custom_strategy_order(self, library):
        """Test strategies run in the order given."""
        by_number = library.store("x.png", media_id=3, kind=MediaType.AUDIO)
        named = library.store("3", media_id=9)

        resolution = first_match(library, "3", tuple(reversed(DEFAULT_STRATEGIES)))

        assert resolution.method == ResolutionMethod.FILENAME
        assert resolution.media == (named,)
        assert by_number not in resolution.media


class TestSQLiteResolution:
    """Resolution against a real library."""

    @pytest.fixture
    def sqlite_library(self, tmp_path: Path):
        lib = SQLiteLibrary.create(tmp_path, "lib")
        yield lib
        lib.close()

    def test_huge_number_falls_back_to_filename(self, sqlite_library, tmp_path: Path):
        """Test an all-digit name beyond the id range is found by filename."""
        name = "12345678901234567890123"
        source = write_files(tmp_path / "in", {name: b"digits"})[0]
        media_id = sqlite_library.add_media(str(source), MediaType.OTHER)

        resolution = MediaResolver(sqlite_library).resolve(name)

        assert resolution.method == ResolutionMethod.FILENAME
        assert [m.id for m in resolution.media] == [media_id]

    def test_largest_id_is_a_miss(self, sqlite_library):
        """Test the largest storable id is looked up without error."""
        resolution = MediaResolver(sqlite_library).resolve(str(MAX_MEDIA_ID))

        assert resolution.is_empty

    def test_plus_sign_id(self, sqlite_library, tmp_path: Path):
        """Test a signed id resolves by id."""
        source = write_files(tmp_path / "in", {"a.txt": b"alpha"})[0]
        media_id = sqlite_library.add_media(str(source), MediaType.TEXT)

        resolution = MediaResolver(sqlite_library).resolve(f"+{media_id}")

        assert resolution.method == ResolutionMethod.ID
        assert [m.id for m in resolution.media] == [media_id]
