# core/history_store.py
from __future__ import annotations

import json
from typing import List, Optional, Sequence

import config as _cfg
from storage import KeyValueStorage, MemoryStorage
from utils.logger import get_logger
from .records import CommandRecord

log = get_logger(__name__)

HISTORY_KEY = getattr(_cfg, "HISTORY_KEY", "commandHistory")


class HistoryStore:
    """
    Owns the one persisted history slot.

    Nothing here raises to the caller: a broken or missing slot loads as an
    empty history, and a backend that fails is swapped for an in-memory slot
    for the rest of the session so the editor keeps working.
    """

    def __init__(self, storage: KeyValueStorage, key: str = HISTORY_KEY) -> None:
        self.storage = storage
        self.key = key
        self.degraded = False

    def _degrade(self, action: str, exc: Exception) -> None:
        log.warning("History %s failed (%s); keeping history in memory only", action, exc)
        if not self.degraded:
            self.storage = MemoryStorage()
            self.degraded = True

    def load(self) -> List[CommandRecord]:
        try:
            raw: Optional[str] = self.storage.get_item(self.key)
        except Exception as e:
            self._degrade("load", e)
            return []
        if not raw:
            return []

        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            log.warning("Discarding corrupt command history: %s", e)
            return []
        if not isinstance(items, list):
            log.warning("Discarding command history: expected a list, got %s", type(items).__name__)
            return []

        records: List[CommandRecord] = []
        for item in items:
            try:
                records.append(CommandRecord.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                log.warning("Skipping malformed history entry: %s", e)
        return records

    def save(self, records: Sequence[CommandRecord]) -> None:
        payload = json.dumps([r.to_dict() for r in records], ensure_ascii=False)
        try:
            self.storage.set_item(self.key, payload)
        except Exception as e:
            self._degrade("save", e)
            self.storage.set_item(self.key, payload)

    def clear(self) -> None:
        try:
            self.storage.remove_item(self.key)
        except Exception as e:
            self._degrade("clear", e)
