"""Data types shared by the executor, history store, undo engine and deduper."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple


class OperationKind(Enum):
    """Kind of filesystem mutation. Values are the stored `operation_type`."""
    MOVE = "move"
    COPY = "copy"
    RENAME = "rename"
    DELETE = "delete"

    @classmethod
    def from_string(cls, value: str) -> "OperationKind":
        try:
            return cls(value.lower())
        except (ValueError, AttributeError):
            raise ValueError(f"unknown operation type: {value!r}")


class StatusKind(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    UNDONE = "undone"


_FAILED_PREFIX = "failed:"


@dataclass(frozen=True)
class OperationStatus:
    """Lifecycle state of an operation.

    `reason` is only set for FAILED. The flat `failed:<msg>` encoding exists
    only at the storage boundary, see `to_db` / `from_db`.
    """
    kind: StatusKind
    reason: Optional[str] = None

    @classmethod
    def pending(cls) -> "OperationStatus":
        return cls(StatusKind.PENDING)

    @classmethod
    def in_progress(cls) -> "OperationStatus":
        return cls(StatusKind.IN_PROGRESS)

    @classmethod
    def completed(cls) -> "OperationStatus":
        return cls(StatusKind.COMPLETED)

    @classmethod
    def undone(cls) -> "OperationStatus":
        return cls(StatusKind.UNDONE)

    @classmethod
    def failed(cls, reason: str) -> "OperationStatus":
        if not reason:
            raise ValueError("a failed status needs a reason")
        return cls(StatusKind.FAILED, reason)

    @classmethod
    def from_error(cls, error: BaseException) -> "OperationStatus":
        """Failed status carrying the stringified error (class name if empty)."""
        return cls.failed(str(error) or type(error).__name__)

    @property
    def is_completed(self) -> bool:
        return self.kind is StatusKind.COMPLETED

    @property
    def is_failed(self) -> bool:
        return self.kind is StatusKind.FAILED

    @property
    def is_terminal(self) -> bool:
        return self.kind in (StatusKind.FAILED, StatusKind.UNDONE)

    def can_transition_to(self, other: "OperationStatus") -> bool:
        allowed = {
            StatusKind.PENDING: (StatusKind.IN_PROGRESS,),
            StatusKind.IN_PROGRESS: (StatusKind.COMPLETED, StatusKind.FAILED),
            StatusKind.COMPLETED: (StatusKind.UNDONE,),
        }
        return other.kind in allowed.get(self.kind, ())

    def to_db(self) -> str:
        if self.kind is StatusKind.FAILED:
            return f"{_FAILED_PREFIX}{self.reason}"
        return self.kind.value

    @classmethod
    def from_db(cls, value: str) -> "OperationStatus":
        if value.startswith(_FAILED_PREFIX):
            reason = value[len(_FAILED_PREFIX):]
            return cls(StatusKind.FAILED, reason or "unknown error")
        try:
            kind = StatusKind(value)
        except ValueError:
            raise ValueError(f"unknown operation status: {value!r}")
        if kind is StatusKind.FAILED:
            return cls(StatusKind.FAILED, "unknown error")
        return cls(kind)

    def __str__(self) -> str:
        return self.to_db()


@dataclass(frozen=True)
class PlannedOperation:
    """A proposed mutation. `destination` is ignored for DELETE."""
    file_id: str
    file_name: str
    kind: OperationKind
    source: Path
    destination: Optional[Path] = None
    category: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "source", Path(self.source))
        if self.destination is not None:
            object.__setattr__(self, "destination", Path(self.destination))
        if self.kind is not OperationKind.DELETE and self.destination is None:
            raise ValueError(f"{self.kind.value} of {self.source} needs a destination")


@dataclass
class Operation:
    """Durable record of one attempted mutation."""
    id: str
    kind: OperationKind
    source_path: Path
    destination_path: Optional[Path]
    timestamp: int
    status: OperationStatus
    batch_id: Optional[str] = None
    original_name: Optional[str] = None
    new_name: Optional[str] = None
    backup_path: Optional[Path] = None

    @property
    def group_id(self) -> str:
        return self.batch_id or self.id

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "batch_id": self.batch_id,
            "operation_type": self.kind.value,
            "source_path": str(self.source_path),
            "destination_path": str(self.destination_path) if self.destination_path else None,
            "original_name": self.original_name,
            "new_name": self.new_name,
            "timestamp": self.timestamp,
            "status": self.status.to_db(),
            "backup_path": str(self.backup_path) if self.backup_path else None,
        }


@dataclass
class OperationBatch:
    id: str
    operations: List[Operation]
    created_at: int
    description: str = ""

    @classmethod
    def from_operations(cls, batch_id: str, operations: List[Operation]) -> "OperationBatch":
        counts = {}
        for op in operations:
            counts[op.kind.value] = counts.get(op.kind.value, 0) + 1
        description = ", ".join(f"{n} {kind}" for kind, n in counts.items())
        created_at = operations[0].timestamp if operations else 0
        return cls(id=batch_id, operations=list(operations), created_at=created_at, description=description)


@dataclass
class DuplicateGroup:
    """Paths sharing one content digest. Always holds two or more files."""
    hash: str
    files: List[Path]
    size: int

    def to_dict(self) -> dict:
        return {"hash": self.hash, "files": [str(p) for p in self.files], "size": self.size}


class FileType(Enum):
    DOCUMENT = "document"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    ARCHIVE = "archive"
    CODE = "code"
    OTHER = "other"

    @classmethod
    def from_extension(cls, ext: Optional[str]) -> "FileType":
        ext = (ext or "").lower().lstrip(".")
        for file_type, extensions in _EXTENSIONS.items():
            if ext in extensions:
                return file_type
        return cls.OTHER


_EXTENSIONS = {
    FileType.DOCUMENT: {"pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "txt", "rtf", "odt", "ods", "odp"},
    FileType.IMAGE: {"jpg", "jpeg", "png", "gif", "webp", "svg", "bmp", "ico", "tiff", "heic"},
    FileType.VIDEO: {"mp4", "mkv", "avi", "mov", "wmv", "flv", "webm", "m4v"},
    FileType.AUDIO: {"mp3", "flac", "wav", "aac", "ogg", "wma", "m4a"},
    FileType.ARCHIVE: {"zip", "rar", "7z", "tar", "gz", "bz2", "xz"},
    FileType.CODE: {
        "js", "ts", "jsx", "tsx", "py", "rs", "go", "java", "c", "cpp", "h", "hpp", "cs", "rb",
        "php", "swift", "kt", "scala", "html", "css", "scss", "json", "yaml", "yml", "xml", "md", "sql",
    },
}


@dataclass
class FileMetadata:
    mime_type: Optional[str] = None
    dimensions: Optional[Tuple[int, int]] = None
    duration: Optional[float] = None


@dataclass
class FileItem:
    """File descriptor produced by the scanner and consumed by the deduper."""
    path: Path
    name: str
    size: int
    id: str = ""
    extension: Optional[str] = None
    file_type: FileType = FileType.OTHER
    created_at: int = 0
    modified_at: int = 0
    category: Optional[str] = None
    hash: Optional[str] = None
    metadata: FileMetadata = field(default_factory=FileMetadata)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "path": str(self.path),
            "name": self.name,
            "extension": self.extension,
            "size": self.size,
            "file_type": self.file_type.value,
            "created_at": self.created_at,
            "modified_at": self.modified_at,
            "category": self.category,
            "hash": self.hash,
            "metadata": {
                "mime_type": self.metadata.mime_type,
                "dimensions": list(self.metadata.dimensions) if self.metadata.dimensions else None,
                "duration": self.metadata.duration,
            },
        }
