"""Media type detection.

Detection order:
1. Magic number signatures (content)
2. Pillow identification for image formats without a listed signature
3. UTF-8 text heuristic
4. File extension via ``mimetypes``

The mapping to ``MediaType`` is total: anything unrecognized is ``Other``.
"""
from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from ..core.models import MediaType

logger = logging.getLogger(__name__)

OCTET_STREAM = "application/octet-stream"
EMPTY = "application/x-empty"

_HEADER_SIZE = 64
_TEXT_SAMPLE_SIZE = 8192

# Prefix signatures; checked in order.
MAGIC_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"II*\x00", "image/tiff"),
    (b"MM\x00*", "image/tiff"),
    (b"\x00\x00\x01\x00", "image/vnd.microsoft.icon"),
    (b"ID3", "audio/mpeg"),
    (b"fLaC", "audio/flac"),
    (b"OggS", "audio/ogg"),
    (b"MThd", "audio/midi"),
    (b"\x1a\x45\xdf\xa3", "video/x-matroska"),
    (b"FLV\x01", "video/x-flv"),
    (b"\x00\x00\x01\xba", "video/mpeg"),
    (b"\x00\x00\x01\xb3", "video/mpeg"),
    (b"%PDF-", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b", "application/gzip"),
)

# MP3 frame sync without an ID3 tag
_MPEG_AUDIO_FRAMES = (b"\xff\xfb", b"\xff\xf3", b"\xff\xf2")

_RIFF_TYPES = {
    b"WAVE": "audio/wav",
    b"AVI ": "video/x-msvideo",
    b"WEBP": "image/webp",
}

_FTYP_IMAGE_BRANDS = {b"heic", b"heix", b"mif1", b"msf1", b"avif"}
_FTYP_AUDIO_BRANDS = {b"M4A ", b"M4B ", b"M4P "}


def _detect_by_magic(header: bytes) -> Optional[str]:
    """Detect MIME type from the first bytes of a file."""
    if header.startswith(b"RIFF") and len(header) >= 12:
        return _RIFF_TYPES.get(header[8:12], OCTET_STREAM)

    # ISO base media: size(4) + 'ftyp' + brand(4)
    if len(header) >= 12 and header[4:8] == b"ftyp":
        brand = header[8:12]
        if brand in _FTYP_IMAGE_BRANDS:
            return "image/heic" if brand != b"avif" else "image/avif"
        if brand in _FTYP_AUDIO_BRANDS:
            return "audio/mp4"
        if brand.startswith(b"qt"):
            return "video/quicktime"
        return "video/mp4"

    for signature, mime in MAGIC_SIGNATURES:
        if header.startswith(signature):
            return mime

    # BMP: reserved header fields are zero
    if header.startswith(b"BM") and len(header) >= 14 and header[6:10] == b"\x00\x00\x00\x00":
        return "image/bmp"

    if header[:2] in _MPEG_AUDIO_FRAMES:
        return "audio/mpeg"

    stripped = header.lstrip()
    if stripped.startswith(b"<svg") or (stripped.startswith(b"<?xml") and b"<svg" in header):
        return "image/svg+xml"

    return None


def _detect_by_pillow(path: Path) -> Optional[str]:
    """Let Pillow identify image formats not covered by signatures."""
    try:
        with Image.open(path) as img:
            fmt = img.format
    except Image.DecompressionBombError:
        return "image/x-unknown"
    except (UnidentifiedImageError, OSError, ValueError):
        return None
    if not fmt:
        return None
    return Image.MIME.get(fmt.upper(), f"image/x-{fmt.lower()}")


def _looks_like_text(sample: bytes) -> bool:
    if b"\x00" in sample:
        return False
    try:
        sample.decode("utf-8")
    except UnicodeDecodeError as e:
        # A multibyte sequence may be cut at the sample boundary
        return e.start >= len(sample) - 3 and e.reason == "unexpected end of data"
    return True


def sniff_mime(path: Path) -> str:
    """Guess the MIME type of a file, mainly from its content.

    Never raises; unreadable or unknown content yields
    ``application/octet-stream``.
    """
    try:
        with path.open("rb") as f:
            sample = f.read(_TEXT_SAMPLE_SIZE)
    except OSError as e:
        logger.debug("Cannot read %s for sniffing: %s", path, e)
        guessed, _ = mimetypes.guess_type(path.name)
        return guessed or OCTET_STREAM

    if not sample:
        return EMPTY

    mime = _detect_by_magic(sample[:_HEADER_SIZE])
    if mime is None:
        mime = _detect_by_pillow(path)
    if mime is None and _looks_like_text(sample):
        guessed, _ = mimetypes.guess_type(path.name)
        mime = guessed if guessed and guessed.startswith("text/") else "text/plain"
    if mime is None:
        guessed, _ = mimetypes.guess_type(path.name)
        mime = guessed or OCTET_STREAM

    logger.debug("Sniffed %s as %s", path, mime)
    return mime


def media_type_from_mime(mime: str) -> MediaType:
    """Map a MIME type's top-level component to a ``MediaType``."""
    top = mime.split("/", 1)[0].strip().lower()
    return {
        "image": MediaType.IMAGE,
        "audio": MediaType.AUDIO,
        "video": MediaType.VIDEO,
        "text": MediaType.TEXT,
    }.get(top, MediaType.OTHER)


class MediaClassifier:
    """Determines the media type of a file.

    An explicit hint always wins; otherwise the content is sniffed.
    """

    def classify(self, path: Path, hint: Optional[MediaType] = None) -> MediaType:
        if hint is not None:
            return hint
        return media_type_from_mime(sniff_mime(path))
