# core/records.py
"""
Command history records.

A CommandRecord is one attempt to transform text through the backend. It is
built once the outcome is known and never changed afterwards; the history
only ever prepends new records or drops old ones.
"""
from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_ID_ALPHABET = string.digits + string.ascii_lowercase

MODEL_DISPLAY_NAMES = {
    "gpt-4": "GPT-4",
    "gpt-3.5-turbo": "GPT-3.5",
    "claude-3": "Claude-3",
    "claude-3-sonnet": "Claude-3 Sonnet",
    "claude-3-haiku": "Claude-3 Haiku",
}


def new_record_id() -> str:
    """Epoch milliseconds plus a random suffix; unique within one millisecond."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{int(time.time() * 1000)}-{suffix}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """
    Accept an ISO string or epoch milliseconds and return an aware datetime.
    Naive values are taken as UTC.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, bool):
        raise ValueError(f"not a timestamp: {value!r}")
    elif isinstance(value, (int, float)):
        dt = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        # JS toISOString() ends with 'Z', which older fromisoformat rejects
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f"not a timestamp: {value!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(frozen=True)
class AgentInfo:
    """Which backend engine handled a request, and how."""

    model: str
    processing_time_ms: int
    timestamp: str
    tokens_used: Optional[int] = None
    confidence_score: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AgentInfo":
        tokens = data.get("tokens_used")
        confidence = data.get("confidence_score")
        return cls(
            model=str(data.get("model") or "unknown"),
            processing_time_ms=int(data.get("processing_time_ms") or 0),
            timestamp=str(data.get("timestamp") or utcnow().isoformat()),
            tokens_used=int(tokens) if tokens is not None else None,
            confidence_score=float(confidence) if confidence is not None else None,
        )

    @classmethod
    def local(cls, processing_time_ms: int) -> "AgentInfo":
        """Minimal stand-in for responses from backends that send no agent_info."""
        return cls(
            model="unknown",
            processing_time_ms=int(processing_time_ms),
            timestamp=utcnow().isoformat(),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "model": self.model,
            "processing_time_ms": self.processing_time_ms,
            "timestamp": self.timestamp,
        }
        if self.tokens_used is not None:
            data["tokens_used"] = self.tokens_used
        if self.confidence_score is not None:
            data["confidence_score"] = self.confidence_score
        return data

    @property
    def display_model(self) -> str:
        return model_display_name(self.model)


@dataclass(frozen=True)
class CommandRecord:
    id: str
    command: str
    timestamp: datetime
    original_text: str
    success: bool = False
    result: Optional[str] = None
    error: Optional[str] = None
    agent_info: Optional[AgentInfo] = None

    @classmethod
    def create(
        cls,
        command: str,
        original_text: str,
        *,
        success: bool,
        result: Optional[str] = None,
        error: Optional[str] = None,
        agent_info: Optional[AgentInfo] = None,
    ) -> "CommandRecord":
        return cls(
            id=new_record_id(),
            command=command.strip(),
            timestamp=utcnow(),
            original_text=original_text,
            success=success,
            result=result,
            error=error,
            agent_info=agent_info,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "command": self.command,
            "timestamp": self.timestamp.isoformat(),
            "originalText": self.original_text,
            "success": self.success,
        }
        if self.result is not None:
            data["result"] = self.result
        if self.error is not None:
            data["error"] = self.error
        if self.agent_info is not None:
            data["agentInfo"] = self.agent_info.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CommandRecord":
        """Rebuild a record from its stored form. Raises on missing or mistyped fields."""
        if not isinstance(data, dict):
            raise ValueError("record must be an object")
        success = data.get("success", False)
        if not isinstance(success, bool):
            raise ValueError(f"success must be a boolean, got {success!r}")
        for name in ("result", "error"):
            value = data.get(name)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{name} must be a string, got {type(value).__name__}")
        agent = data.get("agentInfo")
        return cls(
            id=str(data["id"]),
            command=str(data["command"]),
            timestamp=parse_timestamp(data["timestamp"]),
            original_text=str(data.get("originalText", "")),
            success=success,
            result=data.get("result"),
            error=data.get("error"),
            agent_info=AgentInfo.from_dict(agent) if isinstance(agent, dict) else None,
        )


def model_display_name(model: str) -> str:
    return MODEL_DISPLAY_NAMES.get(model, model)


def confidence_band(score: Optional[float]) -> Optional[str]:
    if score is None:
        return None
    if score >= 0.8:
        return "high"
    if score >= 0.6:
        return "medium"
    return "low"
