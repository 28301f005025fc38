# core/ledger.py
from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional

import config as _cfg
from utils.logger import get_logger
from .history_store import HistoryStore
from .records import CommandRecord

log = get_logger(__name__)

HISTORY_LIMIT = getattr(_cfg, "HISTORY_LIMIT", 50)

STATUS_FILTERS = ("all", "success", "error")
SEARCH_FIELDS = ("command", "input", "output", "all")


class CommandLedger:
    """
    Most-recent-first command history, capped at `limit` records.

    Records are only ever prepended or dropped off the end; they are never
    merged, reordered or edited. Every mutation is written through to the
    store.
    """

    def __init__(self, store: HistoryStore, limit: int = HISTORY_LIMIT) -> None:
        self.store = store
        self.limit = limit
        self._records: List[CommandRecord] = store.load()[:limit]
        self._listeners: List[Callable[[CommandRecord], None]] = []

    def __len__(self) -> int:
        return len(self._records)

    def subscribe(self, callback: Callable[[CommandRecord], None]) -> None:
        self._listeners.append(callback)

    def append(self, record: CommandRecord) -> None:
        self._records = [record, *self._records][: self.limit]
        self.store.save(self._records)
        for callback in list(self._listeners):
            callback(record)

    def list_all(self) -> List[CommandRecord]:
        return list(self._records)

    def latest(self) -> Optional[CommandRecord]:
        return self._records[0] if self._records else None

    def clear(self) -> None:
        self._records = []
        self.store.clear()
        log.info("Command history cleared")

    def find(self, predicate: Callable[[CommandRecord], bool]) -> List[CommandRecord]:
        return [r for r in self._records if predicate(r)]

    def search(
        self,
        query: str = "",
        status: str = "all",
        search_in: str = "all",
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[CommandRecord]:
        return self.find(history_filter(query, status, search_in, start, end))


def _fields(record: CommandRecord, search_in: str) -> List[str]:
    if search_in == "command":
        return [record.command]
    if search_in == "input":
        return [record.original_text]
    if search_in == "output":
        return [record.result or ""]
    return [record.command, record.original_text, record.result or ""]


def history_filter(
    query: str = "",
    status: str = "all",
    search_in: str = "all",
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> Callable[[CommandRecord], bool]:
    """Build the predicate behind the history panel's search box and filters."""
    if status not in STATUS_FILTERS:
        raise ValueError(f"status must be one of {STATUS_FILTERS}, got {status!r}")
    if search_in not in SEARCH_FIELDS:
        raise ValueError(f"search_in must be one of {SEARCH_FIELDS}, got {search_in!r}")
    needle = (query or "").strip().lower()

    def matches(record: CommandRecord) -> bool:
        if status == "success" and not record.success:
            return False
        if status == "error" and record.success:
            return False
        if start is not None and record.timestamp < start:
            return False
        if end is not None and record.timestamp > end:
            return False
        if needle:
            return any(needle in text.lower() for text in _fields(record, search_in))
        return True

    return matches
