# core/dispatcher.py
"""
Validate a command, send it to the right backend operation, and fold the
outcome into the editor state and the command history.

Every call that passes validation leaves exactly one record in the history,
success or not. Validation failures leave none and never touch the network.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

import requests

import config as _cfg
from api_client import ApiClient
from state import EditorState
from utils.logger import get_logger
from .errors import ErrorKind, ErrorState, MESSAGES, classify, is_retryable
from .ledger import CommandLedger
from .records import AgentInfo, CommandRecord
from .router import Route, route_command

log = get_logger(__name__)

MAX_RETRIES = getattr(_cfg, "MAX_RETRIES", 3)
MIN_COMMAND_LENGTH = getattr(_cfg, "MIN_COMMAND_LENGTH", 3)


@dataclass(frozen=True)
class DispatchOk:
    text: str
    agent_info: AgentInfo
    record: CommandRecord

    ok = True


@dataclass(frozen=True)
class DispatchErr:
    kind: ErrorKind
    message: str
    retryable: bool
    record: Optional[CommandRecord] = None
    details: Optional[str] = None

    ok = False

    def as_error_state(self) -> ErrorState:
        return ErrorState(
            kind=self.kind,
            message=self.message,
            retryable=self.retryable,
            details=self.details,
        )


Outcome = Union[DispatchOk, DispatchErr]


def validate(command: str, source_text: str) -> Optional[ErrorKind]:
    """Return the first validation problem, or None when the pair can be sent."""
    cmd = (command or "").strip()
    if not cmd:
        return ErrorKind.EMPTY_COMMAND
    if not (source_text or "").strip():
        return ErrorKind.EMPTY_TEXT
    if len(cmd) < MIN_COMMAND_LENGTH:
        return ErrorKind.COMMAND_TOO_SHORT
    return None


def _local_error(kind: ErrorKind, message: Optional[str] = None) -> DispatchErr:
    return DispatchErr(kind=kind, message=message or MESSAGES[kind], retryable=False)


class CommandDispatcher:
    """
    Submissions are serialized: a second submit() waits for the first to
    finish, so history order always matches submission order and a stale
    response can never overwrite a newer one.

    The lock is reentrant. History listeners run while it is held, so a
    listener may itself submit or retry on the same thread.
    """

    def __init__(
        self,
        client: ApiClient,
        ledger: CommandLedger,
        state: Optional[EditorState] = None,
        max_retries: int = MAX_RETRIES,
    ) -> None:
        self.client = client
        self.ledger = ledger
        self.state = state if state is not None else EditorState()
        self.max_retries = max_retries
        self.retry_count = 0
        # the last dispatched (command, text) pair, kept only while it failed
        self._last: Optional[Tuple[str, str]] = None
        self._last_failure: Optional[DispatchErr] = None
        self._lock = threading.RLock()

    @property
    def retries_left(self) -> int:
        return max(0, self.max_retries - self.retry_count)

    def submit(self, command: str, source_text: str) -> Outcome:
        with self._lock:
            self.state.clear_error()
            self.retry_count = 0
            self._last_failure = None

            problem = validate(command, source_text)
            if problem is not None:
                log.info("Rejected command %r: %s", command, problem.value)
                self._last = None
                outcome = _local_error(problem)
                self.state.set_error(outcome.as_error_state())
                return outcome

            self._last = (command.strip(), source_text)
            return self._dispatch(*self._last)

    def retry(self) -> Outcome:
        with self._lock:
            if self._last is None:
                outcome = _local_error(ErrorKind.UNKNOWN, "There is no command to retry.")
                self.state.set_error(outcome.as_error_state())
                return outcome

            failure = self._last_failure
            if failure is not None and not failure.retryable:
                log.info("Not retrying %r: %s is not retryable", self._last[0], failure.kind.value)
                outcome = _local_error(failure.kind, failure.message)
                self.state.set_error(outcome.as_error_state())
                return outcome

            if self.retry_count >= self.max_retries:
                log.warning("Retry limit (%d) reached for %r", self.max_retries, self._last[0])
                outcome = _local_error(ErrorKind.RETRY_EXHAUSTED)
                self.state.set_error(outcome.as_error_state())
                return outcome

            self.retry_count += 1
            log.info("Retrying %r (%d/%d)", self._last[0], self.retry_count, self.max_retries)
            self.state.clear_error()
            return self._dispatch(*self._last)

    # ---- internals -------------------------------------------------------

    def _dispatch(self, command: str, source_text: str) -> Outcome:
        route = route_command(command)
        started = time.monotonic()
        try:
            data = self.client.post_json(route.path, {"text": source_text, "command": command})
        except requests.RequestException as exc:
            kind, message, retryable = classify(exc)
            log.error("%s via %s failed (%s): %s", command, route.path, kind.value, exc)
            return self._fail(command, source_text, kind, message, retryable, str(exc))
        except Exception as exc:
            log.exception("Unexpected failure calling %s", route.path)
            return self._fail(command, source_text, ErrorKind.UNKNOWN,
                              MESSAGES[ErrorKind.UNKNOWN], True, str(exc))

        elapsed_ms = int((time.monotonic() - started) * 1000)
        result = data.get("result")
        if not isinstance(result, str) or not result.strip():
            log.warning("%s returned no result for %r", route.path, command)
            kind = ErrorKind.EMPTY_RESULT
            return self._fail(command, source_text, kind, MESSAGES[kind], is_retryable(kind),
                              f"Empty result from {route.path}")

        return self._succeed(command, source_text, route, result, data, elapsed_ms)

    # State is settled before ledger.append(): listeners may re-enter submit().

    def _succeed(
        self,
        command: str,
        source_text: str,
        route: Route,
        result: str,
        data: Dict[str, Any],
        elapsed_ms: int,
    ) -> DispatchOk:
        agent_info = _agent_info(data, elapsed_ms)
        record = CommandRecord.create(
            command, source_text, success=True, result=result, agent_info=agent_info,
        )
        self.state.apply_result(result)
        self.retry_count = 0
        self._last = None
        self._last_failure = None
        log.info("%s handled by %s in %dms", route.name, agent_info.model, agent_info.processing_time_ms)
        self.ledger.append(record)
        return DispatchOk(text=result, agent_info=agent_info, record=record)

    def _fail(
        self,
        command: str,
        source_text: str,
        kind: ErrorKind,
        message: str,
        retryable: bool,
        raw: str,
    ) -> DispatchErr:
        record = CommandRecord.create(command, source_text, success=False, error=raw or message)
        outcome = DispatchErr(kind=kind, message=message, retryable=retryable,
                              record=record, details=raw or None)
        self._last_failure = outcome
        self.state.set_error(outcome.as_error_state())
        self.ledger.append(record)
        return outcome


def _agent_info(data: Dict[str, Any], elapsed_ms: int) -> AgentInfo:
    raw = data.get("agent_info")
    if isinstance(raw, dict):
        try:
            return AgentInfo.from_dict(raw)
        except (TypeError, ValueError) as e:
            log.warning("Ignoring malformed agent_info: %s", e)
    return AgentInfo.local(elapsed_ms)
