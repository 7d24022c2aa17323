"""Build move/copy plans that sort files into folders.

Planning never touches the filesystem beyond existence checks; hand the
result to `OperationExecutor.execute` to apply it.

Functions:
- plan_by_type(files, target_root, kind=MOVE)
- plan_by_extension(files, target_root, kind=MOVE)
- plan_by_date(files, target_root, kind=MOVE, date_source="created")
"""
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Set
import time

from .models import FileItem, OperationKind, PlannedOperation
from .utils import unique_dest

TYPE_FOLDERS = {
    "document": "Documents",
    "image": "Images",
    "video": "Videos",
    "audio": "Audio",
    "archive": "Archives",
    "code": "Code",
    "other": "Others",
}


def _plan(
    files: Iterable[FileItem],
    target_root: Path,
    kind: OperationKind,
    folder_for: Callable[[FileItem], Optional[str]],
) -> List[PlannedOperation]:
    if kind not in (OperationKind.MOVE, OperationKind.COPY):
        raise ValueError(f"organizing supports move or copy, not {kind.value}")
    target_root = Path(target_root)
    reserved: Set[Path] = set()
    planned: List[PlannedOperation] = []
    for f in files:
        folder = folder_for(f)
        if folder is None:
            continue
        src = Path(f.path)
        natural = target_root / folder / src.name
        # already sorted
        if natural.resolve() == src.resolve():
            continue
        dest = unique_dest(natural, reserved)
        reserved.add(dest)
        planned.append(PlannedOperation(
            file_id=f.id or str(src),
            file_name=f.name,
            kind=kind,
            source=src,
            destination=dest,
            category=folder,
        ))
    return planned


def plan_by_type(files: Iterable[FileItem], target_root: Path, kind: OperationKind = OperationKind.MOVE) -> List[PlannedOperation]:
    """Sort files into Documents/, Images/, ... by detected file type."""
    return _plan(files, target_root, kind, lambda f: f.category or TYPE_FOLDERS[f.file_type.value])


def plan_by_extension(
    files: Iterable[FileItem],
    target_root: Path,
    kind: OperationKind = OperationKind.MOVE,
    extensions: Optional[List[str]] = None,
) -> List[PlannedOperation]:
    """Sort files into one folder per extension, optionally only some extensions."""
    ext_filter = None
    if extensions:
        ext_filter = {e.lower().lstrip(".") for e in extensions}

    def folder_for(f: FileItem) -> Optional[str]:
        ext = (f.extension or "").lower() or "unknown"
        if ext_filter is not None and ext not in ext_filter:
            return None
        return ext

    return _plan(files, target_root, kind, folder_for)


def plan_by_date(
    files: Iterable[FileItem],
    target_root: Path,
    kind: OperationKind = OperationKind.MOVE,
    date_source: str = "created",
) -> List[PlannedOperation]:
    """Sort files into year/month folders using creation or modification time."""
    if date_source not in ("created", "modified"):
        raise ValueError(f"unknown date source: {date_source!r}")

    def folder_for(f: FileItem) -> str:
        stamp = f.created_at if date_source == "created" else f.modified_at
        t = time.localtime(stamp)
        return f"{t.tm_year}/{t.tm_mon:02d}"

    return _plan(files, target_root, kind, folder_for)
