"""SQLite-backed operation history.

The store owns a single connection guarded by a lock. Reads against a store
file that does not exist yet return empty results and do not create it.
"""
from pathlib import Path
from typing import Dict, List, Optional
import logging
import sqlite3
import threading

from .errors import StoreError
from .models import Operation, OperationBatch, OperationKind, OperationStatus, StatusKind

_LOG = logging.getLogger(__name__)

DEFAULT_LIMIT = 50

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS operations (
        id TEXT PRIMARY KEY,
        batch_id TEXT,
        operation_type TEXT NOT NULL,
        source_path TEXT NOT NULL,
        destination_path TEXT,
        original_name TEXT,
        new_name TEXT,
        timestamp INTEGER NOT NULL,
        status TEXT NOT NULL,
        backup_path TEXT
    )
"""

_COLUMNS = (
    "id, batch_id, operation_type, source_path, destination_path, "
    "original_name, new_name, timestamp, status, backup_path"
)


def _opt_path(value: Optional[str]) -> Optional[Path]:
    return Path(value) if value else None


def _row_to_operation(row: sqlite3.Row) -> Operation:
    return Operation(
        id=row["id"],
        kind=OperationKind.from_string(row["operation_type"]),
        source_path=Path(row["source_path"]),
        destination_path=_opt_path(row["destination_path"]),
        original_name=row["original_name"],
        new_name=row["new_name"],
        timestamp=int(row["timestamp"]),
        status=OperationStatus.from_db(row["status"]),
        batch_id=row["batch_id"],
        backup_path=_opt_path(row["backup_path"]),
    )


def group_batches(operations: List[Operation]) -> List[OperationBatch]:
    """Group operations by batch id, keeping their relative order."""
    grouped: Dict[str, List[Operation]] = {}
    for op in operations:
        grouped.setdefault(op.group_id, []).append(op)
    return [OperationBatch.from_operations(batch_id, ops) for batch_id, ops in grouped.items()]


class OperationLogStore:
    """Durable ledger of attempted operations."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None

    def __enter__(self) -> "OperationLogStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            conn = sqlite3.connect(str(self.db_path), timeout=10, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            self._conn = conn
        return self._conn

    def _readable(self) -> bool:
        return self._conn is not None or self.db_path.exists()

    def initialize(self) -> None:
        """Create the data directory and schema. Safe to call repeatedly."""
        with self._lock:
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                conn = self._connection()
                conn.execute(_SCHEMA)
                conn.commit()
            except (sqlite3.Error, OSError) as e:
                raise StoreError(f"cannot initialize history at {self.db_path}: {e}") from e

    def append(self, op: Operation) -> None:
        row = op.to_dict()
        with self._lock:
            try:
                conn = self._connection()
                conn.execute(
                    f"INSERT INTO operations ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        row["id"], row["batch_id"], row["operation_type"], row["source_path"],
                        row["destination_path"], row["original_name"], row["new_name"],
                        row["timestamp"], row["status"], row["backup_path"],
                    ),
                )
                conn.commit()
            except sqlite3.IntegrityError as e:
                raise StoreError(f"operation {op.id} already recorded: {e}") from e
            except (sqlite3.Error, OSError) as e:
                raise StoreError(f"cannot record operation {op.id}: {e}") from e

    def recent_operations(self, limit: int = DEFAULT_LIMIT, completed_only: bool = False) -> List[Operation]:
        """Most recent operations first. Same-second ties go to the later insert."""
        if limit <= 0:
            return []
        where = "WHERE status = ? " if completed_only else ""
        params = (StatusKind.COMPLETED.value, limit) if completed_only else (limit,)
        with self._lock:
            if not self._readable():
                return []
            try:
                rows = self._connection().execute(
                    f"SELECT {_COLUMNS} FROM operations {where}"
                    "ORDER BY timestamp DESC, rowid DESC LIMIT ?",
                    params,
                ).fetchall()
            except (sqlite3.Error, OSError) as e:
                raise StoreError(f"cannot read history: {e}") from e
        operations = []
        for row in rows:
            try:
                operations.append(_row_to_operation(row))
            except ValueError as e:
                _LOG.warning("Skipping unreadable history row %s: %s", row["id"], e)
        return operations

    def list_recent(self, limit: int = DEFAULT_LIMIT) -> List[OperationBatch]:
        return group_batches(self.recent_operations(limit))

    def list_recent_completed(self, limit: int = DEFAULT_LIMIT) -> List[OperationBatch]:
        return group_batches(self.recent_operations(limit, completed_only=True))

    def get(self, op_id: str) -> Optional[Operation]:
        with self._lock:
            if not self._readable():
                return None
            try:
                row = self._connection().execute(
                    f"SELECT {_COLUMNS} FROM operations WHERE id = ?", (op_id,)
                ).fetchone()
            except (sqlite3.Error, OSError) as e:
                raise StoreError(f"cannot read operation {op_id}: {e}") from e
        return _row_to_operation(row) if row else None

    def mark_undone(self, op_id: str) -> None:
        """Set a completed record to undone. Repeating the call changes nothing."""
        with self._lock:
            try:
                conn = self._connection()
                conn.execute(
                    "UPDATE operations SET status = ? WHERE id = ? AND status = ?",
                    (StatusKind.UNDONE.value, op_id, StatusKind.COMPLETED.value),
                )
                conn.commit()
            except (sqlite3.Error, OSError) as e:
                raise StoreError(f"cannot mark operation {op_id} undone: {e}") from e

    def clear(self) -> None:
        """Delete every record."""
        with self._lock:
            if not self._readable():
                return
            try:
                conn = self._connection()
                conn.execute("DELETE FROM operations")
                conn.commit()
            except (sqlite3.Error, OSError) as e:
                raise StoreError(f"cannot clear history: {e}") from e

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
