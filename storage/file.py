# storage/file.py
from __future__ import annotations
import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from utils.logger import get_logger
from .base import KeyValueStorage, StorageUnavailable

log = get_logger(__name__)


class FileStorage(KeyValueStorage):
    """
    Named string slots kept in one JSON document on disk.

    Every call re-reads the document so several sessions can share a file.
    Writes go through a temp file + os.replace so a crash never leaves a
    half-written document behind.
    """

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path).expanduser()

    def _read(self) -> Dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageUnavailable(f"cannot read {self.path}: {e}") from e

        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError:
            log.warning("Ignoring unreadable storage document %s", self.path)
            return {}
        if not isinstance(data, dict):
            log.warning("Storage document %s is not an object; ignoring it", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, items: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".tmp-", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(items, fh, ensure_ascii=False, indent=2, sort_keys=True)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            raise StorageUnavailable(f"cannot write {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        items = self._read()
        if key not in items:
            return
        del items[key]
        self._write(items)
