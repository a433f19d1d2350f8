"""Context store data models."""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class LogKind(str, Enum):
    """Kinds of entries in the orchestrator audit log."""

    EVENT_RECEIVED = "event_received"
    REASONING_COMPLETE = "reasoning_complete"
    REASONING_ERROR = "reasoning_error"
    REASONING_PARSE_ERROR = "reasoning_parse_error"
    ACTION_EXECUTED = "action_executed"
    ACTION_FAILED = "action_failed"
    SUGGESTION_APPROVED = "suggestion_approved"
    SUGGESTION_DISMISSED = "suggestion_dismissed"


@dataclass
class LogEntry:
    """A single audit log record. Only rating/feedback are mutable."""

    id: int
    timestamp: datetime
    kind: LogKind
    payload: dict
    rating: float | None = None
    feedback: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "kind": self.kind.value,
            "payload": self.payload,
            "rating": self.rating,
            "feedback": self.feedback,
        }


@dataclass
class Pattern:
    """An observed behavioral pattern."""

    id: int
    data: dict  # observation fields
    confidence: float
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            **self.data,
            "id": self.id,
            "confidence": self.confidence,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class KeyedEntry:
    """Profile or preference value, unique by key."""

    key: str
    value: Any
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["updated_at"] = self.updated_at.isoformat()
        return data


ProfileEntry = KeyedEntry
Preference = KeyedEntry
