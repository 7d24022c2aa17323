"""fileog package init"""
from . import app, config, deduper, executor, hashing, history, models, organizer, progress, reporter, scanner, undo, utils

__all__ = [
    "app", "config", "deduper", "executor", "hashing", "history", "models",
    "organizer", "progress", "reporter", "scanner", "undo", "utils",
]
