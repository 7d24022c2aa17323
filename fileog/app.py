"""Wiring of store, executor and undo engine for the front-ends."""
from pathlib import Path
from typing import Optional

from .config import AppConfig
from .executor import OperationExecutor
from .history import OperationLogStore
from .undo import UndoEngine


class App:
    """One history store shared by the executor and the undo engine."""

    def __init__(self, config: AppConfig):
        self.config = config
        self.store = OperationLogStore(config.db_path)
        self.executor = OperationExecutor(self.store, config.backup_dir)
        self.undo = UndoEngine(self.store)

    def start(self) -> "App":
        """Create directories and schema. Raises StoreError on failure."""
        self.config.ensure_dirs()
        self.store.initialize()
        return self

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> "App":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.close()


def open_app(data_dir: Optional[Path] = None) -> App:
    return App(AppConfig.load(data_dir)).start()
