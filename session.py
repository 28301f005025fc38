# session.py
from __future__ import annotations

from typing import Callable, List, Optional

from api_client import ApiClient
from core.dispatcher import CommandDispatcher, Outcome
from core.history_store import HistoryStore
from core.ledger import CommandLedger
from core.records import CommandRecord
from core.stats import CommandStats, compute_stats
from state import EditorState
from storage import KeyValueStorage, make_storage
from utils.logger import get_logger

log = get_logger(__name__)


class EditorSession:
    """
    Everything one editor window needs: the pane/command state, the command
    history and the dispatcher that writes to both.

    The presentation layer calls these methods and re-renders from
    `state` and `history()`; nothing here knows about widgets.
    """

    def __init__(
        self,
        ledger: CommandLedger,
        dispatcher: CommandDispatcher,
        state: Optional[EditorState] = None,
    ) -> None:
        self.ledger = ledger
        self.dispatcher = dispatcher
        self.state = state if state is not None else dispatcher.state
        self.dispatcher.state = self.state
        self.history_visible = False
        self.on_scroll_to_latest: Optional[Callable[[CommandRecord], None]] = None
        self.ledger.subscribe(self._record_added)

    # ---- panes -------------------------------------------------------------

    def set_original_text(self, text: str) -> None:
        self.state.set_original_text(text)

    def edit_result(self, text: str) -> None:
        self.state.edit_result(text)

    def set_command(self, text: str) -> None:
        self.state.command = text or ""

    # ---- commands ----------------------------------------------------------

    def submit(self, command: Optional[str] = None) -> Outcome:
        """Run `command` (or whatever is in the command box) on the source pane."""
        if command is not None:
            self.set_command(command)
        outcome = self.dispatcher.submit(self.state.command, self.state.original_text)
        if outcome.ok:
            self.state.command = ""
        return outcome

    def retry(self) -> Outcome:
        return self.dispatcher.retry()

    def dismiss_error(self) -> None:
        self.state.clear_error()

    @property
    def can_retry(self) -> bool:
        error = self.state.error
        return bool(error and error.retryable and self.dispatcher.retries_left > 0)

    # ---- history -----------------------------------------------------------

    def history(self) -> List[CommandRecord]:
        return self.ledger.list_all()

    def reuse(self, record: CommandRecord) -> None:
        """Put a past command back in the editor exactly as it was issued."""
        self.state.command = record.command
        self.state.original_text = record.original_text
        if record.success and record.result is not None:
            self.state.apply_result(record.result)
        self.state.clear_error()

    def clear_history(self) -> None:
        self.ledger.clear()

    def show_history(self, visible: bool = True) -> None:
        self.history_visible = visible

    def stats(self, time_range: str = "7d") -> CommandStats:
        return compute_stats(self.ledger.list_all(), time_range)

    def _record_added(self, record: CommandRecord) -> None:
        if self.history_visible and self.on_scroll_to_latest is not None:
            self.on_scroll_to_latest(record)


def build_session(
    storage: Optional[KeyValueStorage] = None,
    client: Optional[ApiClient] = None,
) -> EditorSession:
    """Wire a session from configuration; pass storage/client to override."""
    store = HistoryStore(storage if storage is not None else make_storage())
    ledger = CommandLedger(store)
    state = EditorState()
    dispatcher = CommandDispatcher(client or ApiClient(), ledger, state)
    log.debug("Session ready with %d history records", len(ledger))
    return EditorSession(ledger, dispatcher, state)
