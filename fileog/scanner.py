"""Scanning utilities producing FileItem descriptors with light metadata."""
from pathlib import Path
import logging
import mimetypes
import os
import uuid
from typing import Iterable, Iterator, Optional, Tuple

import mutagen
from PIL import Image

from .models import FileItem, FileMetadata, FileType
from .progress import ProgressReporter, ProgressSink, SCANNING

_LOG = logging.getLogger(__name__)

PROGRESS_EVERY = 10


def _is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def _walk(p: Path, recursive: bool, include_hidden: bool) -> Iterator[Path]:
    if p.is_file():
        yield p
        return
    if not p.is_dir():
        return
    if recursive:
        for root, dirs, files in os.walk(p):
            if not include_hidden:
                dirs[:] = [d for d in dirs if not d.startswith(".")]
            for fn in sorted(files):
                fp = Path(root) / fn
                if include_hidden or not _is_hidden(fp):
                    yield fp
    else:
        for fp in sorted(p.iterdir()):
            if fp.is_file() and (include_hidden or not _is_hidden(fp)):
                yield fp


def scan_paths(
    paths: Iterable[Path],
    recursive: bool = True,
    include_hidden: bool = False,
    on_progress: Optional[ProgressSink] = None,
) -> Iterator[FileItem]:
    """Yield a FileItem for every file under the given paths.

    Emits `started`, a `scanning` event every ten files and `completed`.
    Files reached through more than one path are yielded once. Files that
    vanish or cannot be stat'ed while walking are skipped.
    """
    progress = ProgressReporter(on_progress)
    progress.started()
    count = 0
    seen = set()
    for p in paths:
        for fp in _walk(Path(p), recursive, include_hidden):
            key = fp.resolve()
            if key in seen:
                continue
            seen.add(key)
            try:
                item = _file_info(fp)
            except OSError as e:
                _LOG.debug("Skipping %s: %s", fp, e)
                continue
            count += 1
            if count % PROGRESS_EVERY == 0:
                progress.emit(SCANNING, str(fp), count, None, 0.0)
            yield item
    progress.completed(count)


def _image_dimensions(path: Path) -> Optional[Tuple[int, int]]:
    """Width and height via Pillow, or None for unreadable images."""
    try:
        with Image.open(path) as img:
            return img.size
    except Exception:
        return None


def _audio_duration(path: Path) -> Optional[float]:
    try:
        af = mutagen.File(str(path))
    except Exception:
        return None
    if af is None or getattr(af, "info", None) is None:
        return None
    length = getattr(af.info, "length", None)
    return float(length) if length else None


def _file_info(path: Path) -> FileItem:
    stat = path.stat()
    mime, _ = mimetypes.guess_type(str(path))
    ext = path.suffix.lower().lstrip(".") or None
    file_type = FileType.from_extension(ext)
    meta = FileMetadata(mime_type=mime)
    if file_type is FileType.IMAGE:
        meta.dimensions = _image_dimensions(path)
    elif file_type in (FileType.AUDIO, FileType.VIDEO):
        meta.duration = _audio_duration(path)
    ctime = getattr(stat, "st_birthtime", stat.st_ctime)
    return FileItem(
        id=str(uuid.uuid4()),
        path=path,
        name=path.name,
        extension=ext,
        size=stat.st_size,
        file_type=file_type,
        created_at=int(ctime),
        modified_at=int(stat.st_mtime),
        metadata=meta,
    )
