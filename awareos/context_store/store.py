"""ContextStore: profile, patterns, preferences and audit log."""

from datetime import datetime, timezone
from typing import Any, Protocol

from ..errors import ValidationError
from ..logging_config import get_logger
from ..models import KeyedEntry, LogEntry, LogKind, Pattern
from ..storage import IStorage

logger = get_logger(__name__)

DEFAULT_CONFIDENCE = 0.5
RATING_LOOKBACK = 100


class IContextStore(Protocol):
    """Local memory used to build the reasoning context."""

    async def init(self) -> None:
        """Create schema and load profile/patterns/preferences into cache."""
        ...

    async def log_action(self, kind: LogKind, payload: dict) -> LogEntry:
        """Append an audit log entry."""
        ...

    async def set_preference(self, key: str, value: Any) -> KeyedEntry:
        """Upsert a preference."""
        ...

    def get_full_context(self) -> dict:
        """Cached profile, patterns and preferences."""
        ...


class ContextStore:
    """Write-through cache over an IStorage backend.

    Profile, patterns and preferences are read from memory. The log is
    unbounded, so it is never cached and always read from storage.
    """

    def __init__(self, storage: IStorage):
        self._storage = storage
        self._initialized = False
        self._profile: dict[str, KeyedEntry] = {}
        self._patterns: list[Pattern] = []
        self._preferences: dict[str, KeyedEntry] = {}

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def init(self) -> None:
        """Create schema on first use and load the cache.

        A storage failure leaves the cache empty; startup continues.
        """
        if self._initialized:
            return

        try:
            await self._storage.init()
            await self._load_all()
            logger.info("Context store loaded from storage")
        except Exception:
            logger.exception("Failed to load context, starting with empty cache")
            self._reset_cache()

        self._initialized = True

    async def close(self) -> None:
        await self._storage.close()
        self._initialized = False

    async def _load_all(self) -> None:
        profile = await self._storage.get_entries("profile")
        patterns = await self._storage.get_patterns()
        preferences = await self._storage.get_entries("preferences")

        self._profile = {entry.key: entry for entry in profile}
        self._patterns = patterns
        self._preferences = {entry.key: entry for entry in preferences}

    def _reset_cache(self) -> None:
        self._profile = {}
        self._patterns = []
        self._preferences = {}

    # Profile
    async def set_profile(self, key: str, value: Any) -> KeyedEntry:
        if not key:
            raise ValidationError("Profile key is required")
        entry = KeyedEntry(key=key, value=value)
        self._profile[key] = entry
        await self._storage.upsert_entry("profile", entry)
        return entry

    def get_profile(self, key: str) -> Any:
        entry = self._profile.get(key)
        return entry.value if entry else None

    def get_all_profile(self) -> dict[str, Any]:
        return {key: entry.value for key, entry in self._profile.items()}

    async def delete_profile(self, key: str) -> None:
        self._profile.pop(key, None)
        await self._storage.delete_entry("profile", key)

    # Patterns
    async def add_pattern(self, data: dict, confidence: float | None = None) -> Pattern:
        """Append an observed pattern. Confidence defaults to 0.5."""
        if confidence is None:
            confidence = DEFAULT_CONFIDENCE
        if not 0.0 <= confidence <= 1.0:
            raise ValidationError(f"Confidence must be within [0, 1], got {confidence}")

        pattern = await self._storage.save_pattern(
            data=data,
            confidence=confidence,
            created_at=datetime.now(timezone.utc),
        )
        self._patterns.append(pattern)
        return pattern

    def get_patterns(self) -> list[Pattern]:
        return list(self._patterns)

    # Preferences
    async def set_preference(self, key: str, value: Any) -> KeyedEntry:
        if not key:
            raise ValidationError("Preference key is required")
        entry = KeyedEntry(key=key, value=value)
        self._preferences[key] = entry
        await self._storage.upsert_entry("preferences", entry)
        return entry

    def get_preference(self, key: str) -> Any:
        entry = self._preferences.get(key)
        return entry.value if entry else None

    def get_all_preferences(self) -> dict[str, Any]:
        return {key: entry.value for key, entry in self._preferences.items()}

    # Log
    async def log_action(self, kind: LogKind, payload: dict) -> LogEntry:
        """Append an audit entry; id and timestamp are assigned here."""
        return await self._storage.save_log_entry(
            kind=LogKind(kind),
            payload=payload,
            timestamp=datetime.now(timezone.utc),
        )

    async def get_log(self, limit: int = 50) -> list[LogEntry]:
        """Newest-first log entries, read directly from storage."""
        return await self._storage.get_log_entries(limit)

    async def rate_action(
        self, log_id: int, rating: float | None, feedback: str | None = None
    ) -> bool:
        """Rate a log entry among the most recent 100. Returns False if not found."""
        recent = await self._storage.get_log_entries(RATING_LOOKBACK)
        entry = next((e for e in recent if e.id == log_id), None)
        if entry is None:
            logger.debug("Log entry %s not in the last %s entries", log_id, RATING_LOOKBACK)
            return False

        await self._storage.update_log_feedback(log_id, rating, feedback)
        return True

    # Reasoning context
    def get_full_context(self) -> dict:
        return {
            "profile": self.get_all_profile(),
            "patterns": [p.to_dict() for p in self._patterns],
            "preferences": self.get_all_preferences(),
        }

    # User data ownership
    async def export_all(self) -> dict:
        """Snapshot of all four tables."""
        log = await self._storage.get_log_entries(limit=None)
        return {
            "profile": [entry.to_dict() for entry in self._profile.values()],
            "patterns": [p.to_dict() for p in self._patterns],
            "preferences": [entry.to_dict() for entry in self._preferences.values()],
            "log": [entry.to_dict() for entry in log],
            "exported_at": datetime.now(timezone.utc).isoformat(),
        }

    async def clear_all(self) -> None:
        """Wipe all four tables and the cache."""
        await self._storage.clear()
        self._reset_cache()
        logger.info("All context data cleared")
