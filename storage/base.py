# storage/base.py
from __future__ import annotations
from typing import Optional, Protocol


class StorageUnavailable(Exception):
    """Raised by a backend that cannot read or write its slots at all."""


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...
