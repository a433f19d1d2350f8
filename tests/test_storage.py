"""Tests for Storage."""

import inspect
from datetime import datetime, timedelta, timezone

import pytest

from awareos.models import KeyedEntry, LogKind
from awareos.storage import IStorage, Storage


class TestStorageInit:
    """Tests for Storage initialization."""

    async def test_init_creates_tables(self, storage):
        """Test that init creates all tables."""
        async with storage._conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table'"
        ) as cursor:
            tables = [row[0] for row in await cursor.fetchall()]
            assert "profile" in tables
            assert "patterns" in tables
            assert "preferences" in tables
            assert "log" in tables

    async def test_init_is_idempotent(self, storage):
        """Test that a second init keeps the same connection."""
        conn = storage._conn
        await storage.init()
        assert storage._conn is conn

    async def test_not_initialized_raises(self):
        """Test that calls before init raise."""
        st = Storage(":memory:")
        with pytest.raises(RuntimeError, match="not initialized"):
            await st.get_log_entries()

    async def test_close(self):
        """Test that close releases the connection."""
        st = Storage(":memory:")
        await st.init()
        await st.close()
        assert st._conn is None

    def test_implements_backend_interface(self):
        """Test that Storage provides every IStorage operation."""
        operations = [
            name
            for name, member in vars(IStorage).items()
            if inspect.iscoroutinefunction(member)
        ]

        assert "upsert_entry" in operations
        assert "update_log_feedback" in operations
        for name in operations:
            assert inspect.iscoroutinefunction(getattr(Storage, name)), name


class TestStorageKeyed:
    """Tests for profile/preferences tables."""

    async def test_upsert_and_get(self, storage):
        """Test saving and reading keyed entries."""
        await storage.upsert_entry("profile", KeyedEntry(key="name", value="Ada"))
        await storage.upsert_entry("profile", KeyedEntry(key="city", value={"n": "Oslo"}))

        entries = await storage.get_entries("profile")
        assert {e.key: e.value for e in entries} == {"name": "Ada", "city": {"n": "Oslo"}}

    async def test_upsert_replaces_existing(self, storage):
        """Test that saving the same key replaces the value."""
        await storage.upsert_entry("preferences", KeyedEntry(key="tone", value="formal"))
        await storage.upsert_entry("preferences", KeyedEntry(key="tone", value="casual"))

        entries = await storage.get_entries("preferences")
        assert len(entries) == 1
        assert entries[0].value == "casual"

    async def test_delete_entry(self, storage):
        """Test deleting a keyed entry."""
        await storage.upsert_entry("profile", KeyedEntry(key="name", value="Ada"))
        await storage.delete_entry("profile", "name")

        assert await storage.get_entries("profile") == []

    async def test_tables_are_independent(self, storage):
        """Test that profile and preferences don't share keys."""
        await storage.upsert_entry("profile", KeyedEntry(key="k", value=1))

        assert await storage.get_entries("preferences") == []

    async def test_invalid_table(self, storage):
        """Test that only keyed tables are accepted."""
        with pytest.raises(ValueError):
            await storage.upsert_entry("log", KeyedEntry(key="k", value=1))


class TestStoragePatterns:
    """Tests for patterns table."""

    async def test_save_pattern_assigns_increasing_ids(self, storage):
        """Test that pattern ids are assigned by storage."""
        now = datetime.now(timezone.utc)
        first = await storage.save_pattern({"habit": "gym"}, 0.5, now)
        second = await storage.save_pattern({"habit": "run"}, 0.9, now)

        assert second.id > first.id

        patterns = await storage.get_patterns()
        assert [p.data["habit"] for p in patterns] == ["gym", "run"]
        assert patterns[1].confidence == 0.9


class TestStorageLog:
    """Tests for log table."""

    async def test_save_log_entry(self, storage):
        """Test that log entries get an id and null rating/feedback."""
        entry = await storage.save_log_entry(
            LogKind.EVENT_RECEIVED, {"topic": "t"}, datetime.now(timezone.utc)
        )

        assert entry.id is not None
        assert entry.rating is None
        assert entry.feedback is None

    async def test_log_ids_strictly_increase(self, storage):
        """Test that ids follow insertion order."""
        now = datetime.now(timezone.utc)
        ids = [
            (await storage.save_log_entry(LogKind.EVENT_RECEIVED, {"n": i}, now)).id
            for i in range(5)
        ]

        assert ids == sorted(ids)
        assert len(set(ids)) == 5

    async def test_get_log_newest_first(self, storage):
        """Test ordering by timestamp, newest first."""
        base = datetime(2025, 1, 1, tzinfo=timezone.utc)
        await storage.save_log_entry(LogKind.EVENT_RECEIVED, {"n": "old"}, base)
        await storage.save_log_entry(LogKind.EVENT_RECEIVED, {"n": "new"}, base + timedelta(hours=1))
        await storage.save_log_entry(LogKind.EVENT_RECEIVED, {"n": "mid"}, base + timedelta(minutes=30))

        entries = await storage.get_log_entries()
        assert [e.payload["n"] for e in entries] == ["new", "mid", "old"]

    async def test_get_log_limit(self, storage):
        """Test that limit bounds the result, and None returns everything."""
        now = datetime.now(timezone.utc)
        for i in range(10):
            await storage.save_log_entry(LogKind.EVENT_RECEIVED, {"n": i}, now)

        assert len(await storage.get_log_entries(3)) == 3
        assert len(await storage.get_log_entries(None)) == 10

    async def test_update_log_feedback(self, storage):
        """Test that rating and feedback can be set."""
        entry = await storage.save_log_entry(
            LogKind.ACTION_EXECUTED, {"app": "calendar"}, datetime.now(timezone.utc)
        )
        await storage.update_log_feedback(entry.id, 4.0, "useful")

        [stored] = await storage.get_log_entries()
        assert stored.rating == 4.0
        assert stored.feedback == "useful"
        assert stored.payload == {"app": "calendar"}
        assert stored.kind == LogKind.ACTION_EXECUTED

    async def test_payload_with_non_json_values(self, storage):
        """Test that non-JSON values are stored as strings."""
        when = datetime(2025, 1, 1, tzinfo=timezone.utc)
        await storage.save_log_entry(LogKind.ACTION_EXECUTED, {"when": when}, when)

        [stored] = await storage.get_log_entries()
        assert stored.payload["when"] == str(when)


class TestStorageClear:
    """Tests for Storage.clear()."""

    async def test_clear_removes_all_data(self, storage):
        """Test that clear empties every table."""
        now = datetime.now(timezone.utc)
        await storage.upsert_entry("profile", KeyedEntry(key="a", value=1))
        await storage.upsert_entry("preferences", KeyedEntry(key="b", value=2))
        await storage.save_pattern({"x": 1}, 0.5, now)
        await storage.save_log_entry(LogKind.EVENT_RECEIVED, {}, now)

        await storage.clear()

        assert await storage.get_entries("profile") == []
        assert await storage.get_entries("preferences") == []
        assert await storage.get_patterns() == []
        assert await storage.get_log_entries() == []
