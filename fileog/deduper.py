"""Duplicate detection by content digest, and delete plans for duplicates."""
from pathlib import Path
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Union
import logging
import os

from .hashing import hash_file, DEFAULT_ALGO, CHUNK_SIZE
from .models import DuplicateGroup, FileItem, OperationKind, PlannedOperation
from .progress import ProgressReporter, ProgressSink, HASHING

_LOG = logging.getLogger(__name__)

STRATEGIES = ("keep-first", "keep-largest", "keep-newest")


def _as_item(f: Union[FileItem, str, Path]) -> FileItem:
    if isinstance(f, FileItem):
        return f
    p = Path(f)
    try:
        size = p.stat().st_size
    except OSError:
        size = 0
    return FileItem(path=p, name=p.name, size=size)


def _group_size(item: FileItem) -> int:
    try:
        return os.stat(item.path).st_size
    except OSError:
        return item.size


def find_duplicates(
    files: Iterable[Union[FileItem, str, Path]],
    algo: str = DEFAULT_ALGO,
    chunk_size: int = CHUNK_SIZE,
    on_progress: Optional[ProgressSink] = None,
) -> List[DuplicateGroup]:
    """Group files with identical content.

    Every file is hashed in order; a `hashing` event precedes each one and a
    `completed` event follows the last. A path given more than once is hashed
    once. Files that cannot be read are left out of every group. Only digests
    shared by two or more files are returned.
    """
    items: List[FileItem] = []
    seen = set()
    for f in files:
        item = _as_item(f)
        key = Path(item.path).resolve()
        if key in seen:
            continue
        seen.add(key)
        items.append(item)
    total = len(items)
    progress = ProgressReporter(on_progress)
    by_hash: Dict[str, List[FileItem]] = defaultdict(list)
    for index, item in enumerate(items):
        progress.step(HASHING, item.name, index, total)
        try:
            digest = hash_file(item.path, algo=algo, chunk_size=chunk_size)
        except OSError as e:
            _LOG.debug("Skipping %s: %s", item.path, e)
            continue
        item.hash = digest
        by_hash[digest].append(item)
    progress.completed(total)

    groups = [
        DuplicateGroup(hash=digest, files=[Path(i.path) for i in members], size=_group_size(members[0]))
        for digest, members in by_hash.items()
        if len(members) > 1
    ]
    _LOG.info("Hashed %d files, found %d duplicate groups", total, len(groups))
    return groups


def choose_to_delete(group: List[Path], strategy: str = "keep-first") -> List[Path]:
    """Return the members of `group` to remove, keeping one file."""
    if not group:
        return []
    if strategy == "keep-first":
        return list(group[1:])
    if strategy == "keep-largest":
        sizes = [(Path(p).stat().st_size, str(p)) for p in group]
        sizes.sort(reverse=True)
        keep = sizes[0][1]
        return [Path(p) for _, p in sizes if p != keep]
    if strategy == "keep-newest":
        times = [(Path(p).stat().st_mtime, str(p)) for p in group]
        times.sort(reverse=True)
        keep = times[0][1]
        return [Path(p) for _, p in times if p != keep]
    raise ValueError(f"unknown strategy: {strategy!r}")


def plan_deletions_for(paths: Iterable[Path], category: str = "duplicate") -> List[PlannedOperation]:
    """DELETE operations for the given paths, in order."""
    planned: List[PlannedOperation] = []
    for p in paths:
        p = Path(p)
        planned.append(PlannedOperation(
            file_id=str(p),
            file_name=p.name,
            kind=OperationKind.DELETE,
            source=p,
            category=category,
        ))
    return planned


def plan_deletions(groups: Iterable[DuplicateGroup], strategy: str = "keep-first") -> List[PlannedOperation]:
    """Turn duplicate groups into DELETE operations for the executor."""
    doomed: List[Path] = []
    for group in groups:
        doomed.extend(choose_to_delete(group.files, strategy=strategy))
    return plan_deletions_for(doomed)
