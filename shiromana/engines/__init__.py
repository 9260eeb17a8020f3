"""Hashing and classification engines."""
from .classifier import MediaClassifier, sniff_mime, media_type_from_mime
from .hash_engine import HASH_SIZE, hash_file

__all__ = [
    "MediaClassifier",
    "sniff_mime",
    "media_type_from_mime",
    "HASH_SIZE",
    "hash_file",
]
