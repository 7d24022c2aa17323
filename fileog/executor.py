"""Apply planned operations to the filesystem and record every outcome.

Items run one at a time in submission order. A failing item is recorded as
failed and the batch moves on; deletes are always backed up first so they can
be undone.
"""
from pathlib import Path
from typing import Iterable, List, Optional
import logging
import shutil
import time
import uuid

from .errors import StoreError
from .history import OperationLogStore
from .models import Operation, OperationKind, OperationStatus, PlannedOperation
from .progress import ProgressReporter, ProgressSink, PROCESSING

_LOG = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _do_move(src: Path, dst: Path) -> None:
    if dst.exists():
        raise FileExistsError(f"destination already exists: {dst}")
    if not src.exists():
        raise FileNotFoundError(f"source not found: {src}")
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(src), str(dst))


def _do_copy(src: Path, dst: Path) -> None:
    if dst.exists():
        raise FileExistsError(f"destination already exists: {dst}")
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(str(src), str(dst))


class OperationExecutor:
    """Runs batches of planned operations against the filesystem.

    The history store is injected; every attempted item is appended to it.
    """

    def __init__(self, store: OperationLogStore, backup_dir: Path):
        self.store = store
        self.backup_dir = Path(backup_dir)

    def _backup_path(self, batch_id: str, op_id: str, src: Path) -> Path:
        return self.backup_dir / batch_id / f"{op_id}_{src.name}"

    def _do_delete(self, src: Path, backup: Path) -> None:
        """Move `src` into the backup area; the backup is the only delete."""
        if not src.exists():
            raise FileNotFoundError(f"source not found: {src}")
        if src.is_dir():
            raise IsADirectoryError(f"refusing to delete a directory: {src}")
        backup.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(src), str(backup))

    def _apply(self, planned: PlannedOperation, op_id: str, batch_id: str) -> Optional[Path]:
        """Perform one mutation. Returns the backup path for deletes."""
        kind = planned.kind
        if kind in (OperationKind.MOVE, OperationKind.RENAME):
            _do_move(planned.source, planned.destination)
        elif kind is OperationKind.COPY:
            _do_copy(planned.source, planned.destination)
        elif kind is OperationKind.DELETE:
            backup = self._backup_path(batch_id, op_id, planned.source)
            self._do_delete(planned.source, backup)
            return backup
        else:
            raise ValueError(f"unsupported operation: {kind}")
        return None

    def _record(self, op: Operation) -> None:
        try:
            self.store.append(op)
        except StoreError as e:
            _LOG.warning("Failed to save operation %s to history: %s", op.id, e)

    def execute(self, planned: Iterable[PlannedOperation], on_progress: Optional[ProgressSink] = None) -> List[Operation]:
        """Apply `planned` in order and return one Operation per item."""
        items = list(planned)
        total = len(items)
        batch_id = _new_id()
        progress = ProgressReporter(on_progress)
        results: List[Operation] = []

        for index, item in enumerate(items):
            progress.step(PROCESSING, item.file_name, index, total)
            op_id = _new_id()
            backup = None
            try:
                backup = self._apply(item, op_id, batch_id)
                status = OperationStatus.completed()
            except Exception as e:
                _LOG.debug("%s of %s failed: %s", item.kind.value, item.source, e)
                status = OperationStatus.from_error(e)

            is_delete = item.kind is OperationKind.DELETE
            destination = None if is_delete else item.destination
            op = Operation(
                id=op_id,
                kind=item.kind,
                source_path=item.source,
                destination_path=destination,
                original_name=item.file_name,
                new_name=destination.name if destination is not None and status.is_completed else None,
                timestamp=int(time.time()),
                status=status,
                batch_id=batch_id,
                backup_path=backup,
            )
            self._record(op)
            results.append(op)

        progress.completed(total)
        failed = sum(1 for op in results if op.status.is_failed)
        _LOG.info("Batch %s: %d operations, %d failed", batch_id, total, failed)
        return results
