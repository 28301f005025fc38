from dataclasses import dataclass, field
from typing import Optional

from core.errors import ErrorState


@dataclass
class EditorState:
    """
    What the two editor panes and the command box currently show.

    Not persisted. `edited_text` is seeded from `original_text` once, the
    first time there is source text and the result pane is still empty;
    after the user or a transformation writes the result pane it is left
    alone.
    """
    original_text: str = ""
    edited_text: str = ""
    command: str = ""
    error: Optional[ErrorState] = None
    _result_touched: bool = field(default=False, repr=False)

    def set_original_text(self, text: str) -> None:
        self.original_text = text or ""
        self.sync_edited_text()

    def sync_edited_text(self) -> None:
        if self._result_touched:
            return
        if not self.edited_text and self.original_text:
            self.edited_text = self.original_text
            self._result_touched = True

    def edit_result(self, text: str) -> None:
        """User typed in the result pane."""
        self.edited_text = text or ""
        self._result_touched = True

    def apply_result(self, text: str) -> None:
        """A transformation finished; show its output."""
        self.edited_text = text
        self._result_touched = True

    def set_error(self, error: Optional[ErrorState]) -> None:
        self.error = error

    def clear_error(self) -> None:
        self.error = None
