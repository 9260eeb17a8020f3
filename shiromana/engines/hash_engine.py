"""Content hashing for the library store."""
from __future__ import annotations

import hashlib
from pathlib import Path

HASH_ALGORITHM = "sha256"
HASH_SIZE = hashlib.new(HASH_ALGORITHM).digest_size


def hash_file(path: Path, chunk_size: int = 1024 * 1024) -> str:
    """Compute the hex content hash of a file."""
    digest = hashlib.new(HASH_ALGORITHM)
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()

