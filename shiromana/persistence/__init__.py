"""Persistence layer."""

from .library import SQLiteLibrary

__all__ = ["SQLiteLibrary"]
