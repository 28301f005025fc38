# core/errors.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import requests


class ErrorKind(str, Enum):
    # pre-flight validation: no network, no history record
    EMPTY_COMMAND = "empty_command"
    EMPTY_TEXT = "empty_text"
    COMMAND_TOO_SHORT = "command_too_short"
    # post-dispatch: always recorded in the history
    EMPTY_RESULT = "empty_result"
    BAD_REQUEST = "bad_request"
    SERVER_ERROR = "server_error"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    CONNECTION_REFUSED = "connection_refused"
    UNKNOWN = "unknown"
    # local, after the retry budget is spent
    RETRY_EXHAUSTED = "retry_exhausted"


VALIDATION_KINDS = frozenset({
    ErrorKind.EMPTY_COMMAND,
    ErrorKind.EMPTY_TEXT,
    ErrorKind.COMMAND_TOO_SHORT,
})

MESSAGES = {
    ErrorKind.EMPTY_COMMAND: "Please enter a command.",
    ErrorKind.EMPTY_TEXT: "Please enter some text to transform first.",
    ErrorKind.COMMAND_TOO_SHORT: (
        'Command is too short. Please be more specific, e.g. "Make it more formal".'
    ),
    ErrorKind.EMPTY_RESULT: "The AI service returned an empty result. Please try again.",
    ErrorKind.BAD_REQUEST: "The command could not be processed. Try rephrasing it.",
    ErrorKind.SERVER_ERROR: "The AI service hit an internal error. Please try again.",
    ErrorKind.RATE_LIMITED: "Too many requests. Please wait a moment before trying again.",
    ErrorKind.TIMEOUT: "The request timed out. The AI service may be busy; please try again.",
    ErrorKind.CONNECTION_REFUSED: (
        "Cannot reach the AI service. Make sure the backend server is running."
    ),
    ErrorKind.UNKNOWN: "An unexpected error occurred.",
    ErrorKind.RETRY_EXHAUSTED: (
        "Maximum retry attempts reached. Try a different command or come back later."
    ),
}

NON_RETRYABLE = frozenset(VALIDATION_KINDS | {ErrorKind.BAD_REQUEST, ErrorKind.RETRY_EXHAUSTED})


def is_retryable(kind: ErrorKind) -> bool:
    return kind not in NON_RETRYABLE


@dataclass(frozen=True)
class ErrorState:
    """The single error currently shown to the user."""

    kind: ErrorKind
    message: str
    retryable: bool
    details: Optional[str] = None

    @classmethod
    def of(cls, kind: ErrorKind, details: Optional[str] = None) -> "ErrorState":
        return cls(kind=kind, message=MESSAGES[kind], retryable=is_retryable(kind), details=details)


def _status_kind(status: Optional[int]) -> ErrorKind:
    if status == 400:
        return ErrorKind.BAD_REQUEST
    if status == 429:
        return ErrorKind.RATE_LIMITED
    if status is not None and 500 <= status < 600:
        return ErrorKind.SERVER_ERROR
    return ErrorKind.UNKNOWN


def classify(exc: BaseException) -> Tuple[ErrorKind, str, bool]:
    """
    Map a failed backend call to (kind, user message, retryable).

    Order matters: requests.ConnectTimeout is both a Timeout and a
    ConnectionError, and counts as a timeout.
    """
    if isinstance(exc, requests.Timeout):
        kind = ErrorKind.TIMEOUT
    elif isinstance(exc, requests.ConnectionError):
        kind = ErrorKind.CONNECTION_REFUSED
    elif isinstance(exc, requests.HTTPError):
        response = getattr(exc, "response", None)
        kind = _status_kind(getattr(response, "status_code", None))
    else:
        kind = ErrorKind.UNKNOWN
    return kind, MESSAGES[kind], is_retryable(kind)
