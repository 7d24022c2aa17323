"""Reverse recently completed operations recorded in the history store."""
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple
import logging
import shutil

from .history import OperationLogStore
from .models import Operation, OperationKind, OperationStatus

_LOG = logging.getLogger(__name__)


class _Skip(Exception):
    """A path needed to reverse an operation is gone; leave it for later."""


@dataclass
class UndoPreview:
    operation: Operation
    reversible: bool
    reason: str = ""

    def to_dict(self) -> dict:
        d = self.operation.to_dict()
        d.update({"reversible": self.reversible, "reason": self.reason})
        return d


def _restore_target(op: Operation) -> Tuple[Path, Path]:
    """Return (from, to) for moving a file back, or raise _Skip."""
    if op.kind in (OperationKind.MOVE, OperationKind.RENAME):
        if op.destination_path is None or not op.destination_path.exists():
            raise _Skip(f"destination missing: {op.destination_path}")
        return op.destination_path, op.source_path
    if op.kind is OperationKind.DELETE:
        if op.backup_path is None or not op.backup_path.exists():
            raise _Skip(f"backup missing: {op.backup_path}")
        return op.backup_path, op.source_path
    raise ValueError(f"{op.kind.value} is not restored by moving")


def _check(op: Operation) -> None:
    """Raise _Skip or OSError when `op` cannot be reversed right now."""
    if op.kind is OperationKind.COPY:
        if op.destination_path is None or not op.destination_path.exists():
            raise _Skip(f"copy missing: {op.destination_path}")
        return
    _, target = _restore_target(op)
    if target.exists():
        raise FileExistsError(f"restore target already exists: {target}")


def _reverse(op: Operation) -> None:
    _check(op)
    if op.kind is OperationKind.COPY:
        op.destination_path.unlink()
        return
    src, target = _restore_target(op)
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(src), str(target))


class UndoEngine:
    """Undoes the most recent completed operations, newest first.

    Each operation is reversed independently. Items whose files are gone are
    skipped and stay completed so a later call can retry them.
    """

    def __init__(self, store: OperationLogStore):
        self.store = store

    def preview(self, steps: int) -> List[UndoPreview]:
        """Report what `undo(steps)` would do without touching anything."""
        previews = []
        for op in self.store.recent_operations(steps, completed_only=True):
            try:
                _check(op)
                previews.append(UndoPreview(op, True))
            except (_Skip, OSError) as e:
                previews.append(UndoPreview(op, False, str(e)))
        return previews

    def undo(self, steps: int) -> List[Operation]:
        """Reverse up to `steps` operations; return the ones actually undone."""
        undone: List[Operation] = []
        candidates = self.store.recent_operations(steps, completed_only=True)
        for op in candidates:
            try:
                _reverse(op)
            except _Skip as e:
                _LOG.debug("Skipping undo of %s: %s", op.id, e)
                continue
            except OSError as e:
                _LOG.warning("Undo of %s %s failed: %s", op.kind.value, op.source_path, e)
                continue
            self.store.mark_undone(op.id)
            op.status = OperationStatus.undone()
            undone.append(op)
        _LOG.info("Undid %d of %d requested operations", len(undone), len(candidates))
        return undone
