# core/scroll_sync.py
"""
Keep the source editor and the diff view scrolled to the same offset.

Each direction owns one pending-timer slot. A scroll event replaces whatever
is pending for its direction, so a burst of events collapses into a single
mirrored write once the burst settles. Writes the synchronizer makes itself
come back as scroll events on the target pane; those echoes are dropped so
the two panes never chase each other.
"""
from __future__ import annotations

import threading
from typing import Callable, Dict, Optional, Protocol

import config as _cfg
from utils.logger import get_logger

log = get_logger(__name__)

SYNC_DELAY_MS = getattr(_cfg, "SCROLL_SYNC_DELAY_MS", 50)

SOURCE = "source"
DIFF = "diff"


class ScrollPane(Protocol):
    @property
    def scroll_top(self) -> float: ...
    def scroll_to(self, top: float, smooth: bool = True) -> None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle: ...


class ThreadingScheduler:
    """Default scheduler: one daemon threading.Timer per call."""

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay_s, callback)
        timer.daemon = True
        timer.start()
        return timer


class ScrollSynchronizer:
    def __init__(
        self,
        source: ScrollPane,
        diff: ScrollPane,
        delay_ms: int = SYNC_DELAY_MS,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.panes: Dict[str, ScrollPane] = {SOURCE: source, DIFF: diff}
        self.delay_s = delay_ms / 1000.0
        self.scheduler = scheduler or ThreadingScheduler()
        self._pending: Dict[str, Optional[TimerHandle]] = {SOURCE: None, DIFF: None}
        # offset we last wrote to each pane, to recognise its echo event
        self._written: Dict[str, Optional[float]] = {SOURCE: None, DIFF: None}
        self._lock = threading.RLock()

    def on_source_scroll(self) -> None:
        self._on_scroll(SOURCE, DIFF)

    def on_diff_scroll(self) -> None:
        self._on_scroll(DIFF, SOURCE)

    def is_pending(self, pane: str) -> bool:
        """True while a mirrored write *from* `pane` is waiting to fire."""
        return self._pending[pane] is not None

    def cancel(self) -> None:
        with self._lock:
            for name, handle in self._pending.items():
                if handle is not None:
                    handle.cancel()
                self._pending[name] = None

    def _on_scroll(self, origin: str, target: str) -> None:
        offset = self.panes[origin].scroll_top
        with self._lock:
            if self._written[origin] is not None and self._written[origin] == offset:
                # echo of our own write; it also settles anything queued from this pane
                self._written[origin] = None
                if self._pending[origin] is not None:
                    self._pending[origin].cancel()
                    self._pending[origin] = None
                return
            self._written[origin] = None

            previous = self._pending[origin]
            if previous is not None:
                previous.cancel()

            handle_box: Dict[str, TimerHandle] = {}

            def fire() -> None:
                self._apply(origin, target, offset, handle_box.get("handle"))

            handle_box["handle"] = self.scheduler.call_later(self.delay_s, fire)
            self._pending[origin] = handle_box["handle"]

    def _apply(self, origin: str, target: str, offset: float, handle: Optional[TimerHandle]) -> None:
        with self._lock:
            # a newer event replaced this timer after it already started firing
            if handle is not None and self._pending[origin] is not handle:
                return
            self._pending[origin] = None
            self._written[target] = offset
        log.debug("Mirroring %s scroll %.0f -> %s", origin, offset, target)
        self.panes[target].scroll_to(offset, smooth=True)
