# storage/memory.py
from __future__ import annotations
from typing import Dict, Optional

from .base import KeyValueStorage


class MemoryStorage(KeyValueStorage):
    """Process-local slots; nothing survives the session."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
