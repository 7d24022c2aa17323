"""Streaming content digests."""
from pathlib import Path
import hashlib

DEFAULT_ALGO = "sha256"
CHUNK_SIZE = 8192
SUPPORTED_ALGOS = ("md5", "sha1", "sha256")


def hash_file(path: Path, algo: str = DEFAULT_ALGO, chunk_size: int = CHUNK_SIZE) -> str:
    """Return the hex digest of `path`, read `chunk_size` bytes at a time.

    Raises OSError when the file cannot be opened or read, and ValueError
    for an unknown algorithm or a non-positive `chunk_size`.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    h = hashlib.new(algo)
    with Path(path).open("rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            h.update(chunk)
    return h.hexdigest()

