"""Service layer: the add and info pipelines."""
from .file_list import resolve_files, parse_manifest
from .ingestion import IngestionPipeline, add_one_media
from .series import SeriesBinder, resolve_series
from .resolver import MediaResolver

__all__ = [
    "resolve_files",
    "parse_manifest",
    "IngestionPipeline",
    "add_one_media",
    "SeriesBinder",
    "resolve_series",
    "MediaResolver",
]
