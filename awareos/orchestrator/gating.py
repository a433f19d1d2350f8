"""Gating policy: which events are worth a reasoning call."""

from typing import Any

IMPORTANT_TOPICS = frozenset(
    {
        "weather_precipitation_expected",
        "calendar_event_created",
        "calendar_event_moved",
        "calendar_conflict_detected",
        "todo_task_overdue",
        "message_received",
        "email_high_priority",
    }
)


def evaluate_event(topic: str, payload: Any) -> bool:
    """True if the topic is allow-listed or the payload asks for attention."""
    if topic in IMPORTANT_TOPICS:
        return True

    if isinstance(payload, dict):
        if payload.get("priority") == "high" or payload.get("needsAttention"):
            return True

    return False
