# storage/__init__.py
from typing import Optional

import config as _cfg
from .base import KeyValueStorage, StorageUnavailable
from .file import FileStorage
from .memory import MemoryStorage


def make_storage(path: Optional[str] = None) -> KeyValueStorage:
    """File-backed slots when a history path is configured, memory otherwise."""
    path = path if path is not None else getattr(_cfg, "HISTORY_PATH", None)
    if path:
        return FileStorage(path)
    return MemoryStorage()


__all__ = [
    "KeyValueStorage",
    "StorageUnavailable",
    "FileStorage",
    "MemoryStorage",
    "make_storage",
]
