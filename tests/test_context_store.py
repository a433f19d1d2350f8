"""Tests for ContextStore."""

from unittest.mock import AsyncMock

import pytest

from awareos.context_store import ContextStore
from awareos.context_store.store import DEFAULT_CONFIDENCE, RATING_LOOKBACK
from awareos.errors import ValidationError
from awareos.models import LogKind


class TestContextStoreInit:
    """Tests for ContextStore.init()."""

    async def test_init_is_idempotent(self, context_store):
        """Test that repeated init keeps cached data."""
        await context_store.set_profile("name", "Ada")

        await context_store.init()

        assert context_store.initialized
        assert context_store.get_profile("name") == "Ada"

    async def test_init_loads_existing_data(self, storage):
        """Test that a new store over the same storage sees persisted data."""
        first = ContextStore(storage)
        await first.init()
        await first.set_profile("name", "Ada")
        await first.set_preference("tone", "casual")
        await first.add_pattern({"habit": "gym"}, confidence=0.8)

        second = ContextStore(storage)
        await second.init()

        assert second.get_profile("name") == "Ada"
        assert second.get_preference("tone") == "casual"
        assert second.get_patterns()[0].data == {"habit": "gym"}

    async def test_init_storage_failure_degrades_to_empty(self):
        """Test that a failing backend leaves an empty, usable cache."""
        storage = AsyncMock()
        storage.init.side_effect = RuntimeError("disk gone")

        store = ContextStore(storage)
        await store.init()

        assert store.initialized
        assert store.get_full_context() == {"profile": {}, "patterns": [], "preferences": {}}


class TestContextStoreProfile:
    """Tests for profile operations."""

    async def test_set_and_get_profile(self, context_store):
        """Test profile write-through and read from cache."""
        entry = await context_store.set_profile("city", {"name": "Oslo"})

        assert entry.key == "city"
        assert context_store.get_profile("city") == {"name": "Oslo"}
        assert context_store.get_all_profile() == {"city": {"name": "Oslo"}}

    async def test_get_missing_profile(self, context_store):
        """Test that a missing key returns None."""
        assert context_store.get_profile("missing") is None

    async def test_set_profile_replaces_value(self, context_store):
        """Test that the same key keeps one value."""
        await context_store.set_profile("name", "Ada")
        await context_store.set_profile("name", "Grace")

        assert context_store.get_all_profile() == {"name": "Grace"}

    async def test_empty_key_rejected(self, context_store):
        """Test that an empty key is a validation error."""
        with pytest.raises(ValidationError):
            await context_store.set_profile("", "x")

    async def test_delete_profile(self, context_store, storage):
        """Test that delete removes from cache and storage."""
        await context_store.set_profile("name", "Ada")
        await context_store.delete_profile("name")

        assert context_store.get_profile("name") is None
        assert await storage.get_entries("profile") == []


class TestContextStorePatterns:
    """Tests for pattern operations."""

    async def test_default_confidence(self, context_store):
        """Test that confidence defaults to 0.5."""
        pattern = await context_store.add_pattern({"habit": "gym"})

        assert pattern.confidence == DEFAULT_CONFIDENCE
        assert pattern.id is not None

    @pytest.mark.parametrize("confidence", [-0.1, 1.5])
    async def test_confidence_out_of_range(self, context_store, confidence):
        """Test that confidence outside [0, 1] is rejected."""
        with pytest.raises(ValidationError):
            await context_store.add_pattern({"habit": "gym"}, confidence=confidence)

        assert context_store.get_patterns() == []

    async def test_patterns_in_context(self, context_store):
        """Test that patterns are flattened into the reasoning context."""
        await context_store.add_pattern({"habit": "gym", "day": "monday"}, confidence=0.9)

        [pattern] = context_store.get_full_context()["patterns"]
        assert pattern["habit"] == "gym"
        assert pattern["day"] == "monday"
        assert pattern["confidence"] == 0.9

    async def test_data_id_does_not_override_pattern_id(self, context_store):
        """Test that an 'id' key inside pattern data never replaces the stored id."""
        stored = await context_store.add_pattern({"id": "obs-1", "habit": "gym"})

        [pattern] = context_store.get_full_context()["patterns"]
        assert pattern["id"] == stored.id
        assert pattern["habit"] == "gym"


class TestContextStorePreferences:
    """Tests for preference operations."""

    async def test_set_and_get_preference(self, context_store):
        """Test preference write-through."""
        await context_store.set_preference("tone", "casual")

        assert context_store.get_preference("tone") == "casual"
        assert context_store.get_all_preferences() == {"tone": "casual"}

    async def test_full_context_shape(self, context_store):
        """Test the three sections of the reasoning context."""
        await context_store.set_profile("name", "Ada")
        await context_store.set_preference("tone", "casual")

        context = context_store.get_full_context()

        assert context["profile"] == {"name": "Ada"}
        assert context["preferences"] == {"tone": "casual"}
        assert context["patterns"] == []


class TestContextStoreLog:
    """Tests for audit log operations."""

    async def test_log_action_assigns_id_and_timestamp(self, context_store):
        """Test that log_action returns the stored entry."""
        entry = await context_store.log_action(LogKind.EVENT_RECEIVED, {"topic": "t"})

        assert entry.id is not None
        assert entry.timestamp.tzinfo is not None
        assert entry.kind == LogKind.EVENT_RECEIVED

    async def test_log_action_accepts_kind_value(self, context_store):
        """Test that the plain string kind is accepted."""
        entry = await context_store.log_action("action_executed", {})

        assert entry.kind == LogKind.ACTION_EXECUTED

    async def test_get_log_newest_first(self, context_store):
        """Test that get_log returns newest entries first."""
        for n in range(3):
            await context_store.log_action(LogKind.EVENT_RECEIVED, {"n": n})

        entries = await context_store.get_log()

        assert [e.payload["n"] for e in entries] == [2, 1, 0]

    async def test_get_log_default_limit(self, context_store):
        """Test that get_log returns at most 50 entries by default."""
        for n in range(60):
            await context_store.log_action(LogKind.EVENT_RECEIVED, {"n": n})

        assert len(await context_store.get_log()) == 50


class TestContextStoreRating:
    """Tests for rate_action()."""

    async def test_rate_recent_entry(self, context_store):
        """Test rating an entry within the lookback window."""
        entry = await context_store.log_action(LogKind.ACTION_EXECUTED, {"app": "calendar"})

        updated = await context_store.rate_action(entry.id, 5, "great")

        assert updated is True
        [stored] = await context_store.get_log()
        assert stored.rating == 5
        assert stored.feedback == "great"

    async def test_rate_unknown_entry(self, context_store):
        """Test that an unknown id is a no-op."""
        assert await context_store.rate_action(12345, 1) is False

    async def test_rate_entry_outside_window(self, context_store):
        """Test that entries older than the lookback window can't be rated."""
        old = await context_store.log_action(LogKind.ACTION_EXECUTED, {"n": "old"})
        for n in range(RATING_LOOKBACK):
            await context_store.log_action(LogKind.EVENT_RECEIVED, {"n": n})

        assert await context_store.rate_action(old.id, 3) is False

        entries = await context_store.get_log(limit=1000)
        stored = next(e for e in entries if e.id == old.id)
        assert stored.rating is None


class TestContextStoreOwnership:
    """Tests for export_all() and clear_all()."""

    async def test_export_all(self, context_store):
        """Test that export includes all four tables."""
        await context_store.set_profile("name", "Ada")
        await context_store.set_preference("tone", "casual")
        await context_store.add_pattern({"habit": "gym"})
        await context_store.log_action(LogKind.EVENT_RECEIVED, {"topic": "t"})

        export = await context_store.export_all()

        assert export["profile"][0]["key"] == "name"
        assert export["preferences"][0]["value"] == "casual"
        assert export["patterns"][0]["habit"] == "gym"
        assert export["log"][0]["kind"] == "event_received"
        assert "exported_at" in export

    async def test_clear_all(self, context_store, storage):
        """Test that clear_all wipes cache and storage."""
        await context_store.set_profile("name", "Ada")
        await context_store.add_pattern({"habit": "gym"})
        await context_store.log_action(LogKind.EVENT_RECEIVED, {})

        await context_store.clear_all()

        assert context_store.get_full_context() == {"profile": {}, "patterns": [], "preferences": {}}
        assert await context_store.get_log() == []

        reloaded = ContextStore(storage)
        await reloaded.init()
        assert reloaded.get_all_profile() == {}
