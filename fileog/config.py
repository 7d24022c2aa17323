"""Application configuration: where history and delete backups live."""
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional
import json
import logging
import os

from .hashing import SUPPORTED_ALGOS

_LOG = logging.getLogger(__name__)

APP_NAME = "fileog"
DB_FILENAME = "fileog.db"
CONFIG_FILENAME = "config.json"
ENV_DATA_DIR = "FILEOG_DATA_DIR"


def default_data_dir() -> Path:
    """Per-user application data directory.

    `FILEOG_DATA_DIR` wins; otherwise %APPDATA% on Windows and
    $XDG_DATA_HOME (~/.local/share) elsewhere.
    """
    override = os.environ.get(ENV_DATA_DIR)
    if override:
        return Path(override).expanduser()
    if os.name == "nt":
        app_data = os.environ.get("APPDATA", os.path.expanduser("~"))
        return Path(app_data) / APP_NAME
    data_home = os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share"))
    return Path(data_home) / APP_NAME


@dataclass
class AppConfig:
    data_dir: Path = field(default_factory=default_data_dir)
    db_path: Optional[Path] = None
    backup_dir: Optional[Path] = None
    hash_algorithm: str = "sha256"
    chunk_size: int = 8192
    history_limit: int = 50

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        if self.db_path is None:
            self.db_path = self.data_dir / DB_FILENAME
        self.db_path = Path(self.db_path)
        if self.backup_dir is None:
            self.backup_dir = self.data_dir / "trash"
        self.backup_dir = Path(self.backup_dir)
        for name in ("chunk_size", "history_limit"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if self.hash_algorithm not in SUPPORTED_ALGOS:
            raise ValueError(f"unsupported hash_algorithm {self.hash_algorithm!r}")

    @classmethod
    def load(cls, data_dir: Optional[Path] = None, path: Optional[Path] = None) -> "AppConfig":
        """Build a config from defaults plus an optional JSON file.

        The file defaults to `<data_dir>/config.json`. Unknown keys are ignored;
        an unreadable or invalid file falls back to defaults.
        """
        data_dir = Path(data_dir) if data_dir else default_data_dir()
        path = Path(path) if path else data_dir / CONFIG_FILENAME
        values = {}
        if path.exists():
            try:
                with path.open("r", encoding="utf-8") as f:
                    raw = json.load(f)
                if not isinstance(raw, dict):
                    raise ValueError("top-level value must be an object")
                known = {f.name for f in fields(cls)}
                values = {k: v for k, v in raw.items() if k in known}
            except (OSError, ValueError) as e:
                _LOG.warning("Ignoring config file %s: %s", path, e)
                values = {}
        values.setdefault("data_dir", data_dir)
        try:
            return cls(**values)
        except (TypeError, ValueError) as e:
            _LOG.warning("Ignoring config file %s: %s", path, e)
            return cls(data_dir=data_dir)

    def ensure_dirs(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.backup_dir.mkdir(parents=True, exist_ok=True)
