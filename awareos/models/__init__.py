"""Core data models for AwareOS."""

from .apps import AppManifest
from .context import KeyedEntry, LogEntry, LogKind, Pattern, Preference, ProfileEntry
from .events import ACTION_COMPLETE_TOPIC, SUGGESTION_TOPIC, WILDCARD
from .suggestions import ActionOutcome, ActionRequest, Priority, Suggestion

__all__ = [
    # Apps
    "AppManifest",
    # Context
    "KeyedEntry",
    "LogEntry",
    "LogKind",
    "Pattern",
    "Preference",
    "ProfileEntry",
    # Events
    "WILDCARD",
    "SUGGESTION_TOPIC",
    "ACTION_COMPLETE_TOPIC",
    # Suggestions
    "ActionOutcome",
    "ActionRequest",
    "Priority",
    "Suggestion",
]
