"""Utility helpers"""
from pathlib import Path
from typing import Iterable, Optional, Set


def unique_dest(dest: Path, reserved: Optional[Set[Path]] = None) -> Path:
    """Return a non-colliding destination by appending an index suffix.

    E.g. file.txt -> file_1.txt, file_2.txt, ... Paths in `reserved` count as
    taken even if they do not exist yet.
    """
    reserved = reserved or set()
    if not dest.exists() and dest not in reserved:
        return dest
    base = dest.stem
    suffix = dest.suffix
    parent = dest.parent
    i = 1
    while True:
        candidate = parent / f"{base}_{i}{suffix}"
        if not candidate.exists() and candidate not in reserved:
            return candidate
        i += 1


def human_size(n: float) -> str:
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if n < 1024:
            return f"{n:.1f}{unit}"
        n /= 1024
    return f"{n:.1f}PB"


def estimate_size(items: Iterable) -> int:
    """Estimate total size in bytes of the files behind `items`.

    `items` may hold paths, FileItems (`.path`) or PlannedOperations
    (`.source`). Missing files are ignored and contribute 0.
    """
    total = 0
    for it in items or []:
        p = getattr(it, "source", None) or getattr(it, "path", None) or it
        try:
            path = Path(p)
            if path.is_file():
                total += path.stat().st_size
        except (OSError, TypeError):
            continue
    return int(total)
