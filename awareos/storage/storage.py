"""SQLite persistence backend for the context store."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

import aiosqlite

from ..config import resolve_db_path
from ..models import KeyedEntry, LogEntry, LogKind, Pattern

KEYED_TABLES = ("profile", "preferences")


class IStorage(Protocol):
    """Durable tables behind the context store.

    Two keyed tables (profile, preferences) with upsert-by-key and two
    append-only tables (patterns, log) with storage-assigned ids.
    """

    async def init(self) -> None:
        """Open the database and create tables."""
        ...

    async def close(self) -> None:
        """Close database connection."""
        ...

    # Keyed tables
    async def upsert_entry(self, table: str, entry: KeyedEntry) -> None:
        """Insert or replace an entry by key."""
        ...

    async def delete_entry(self, table: str, key: str) -> None:
        """Delete an entry by key."""
        ...

    async def get_entries(self, table: str) -> list[KeyedEntry]:
        """Get all entries of a keyed table."""
        ...

    # Patterns
    async def save_pattern(
        self, data: dict, confidence: float, created_at: datetime
    ) -> Pattern:
        """Append a pattern and return it with its assigned id."""
        ...

    async def get_patterns(self) -> list[Pattern]:
        """Get all patterns in insertion order."""
        ...

    # Log
    async def save_log_entry(
        self, kind: LogKind, payload: dict, timestamp: datetime
    ) -> LogEntry:
        """Append a log entry and return it with its assigned id."""
        ...

    async def get_log_entries(self, limit: int | None = 50) -> list[LogEntry]:
        """Get log entries, newest first."""
        ...

    async def update_log_feedback(
        self, entry_id: int, rating: float | None, feedback: str | None
    ) -> None:
        """Set rating/feedback of a log entry."""
        ...

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        ...


def _dumps(value: Any) -> str:
    return json.dumps(value, default=str)


class Storage:
    """SQLite storage implementation."""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            self._db_path = resolve_db_path()
        else:
            self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Initialize database and create tables."""
        if self._conn:
            return

        self._conn = await aiosqlite.connect(self._db_path)

        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            schema_sql = f.read()
        await self._conn.executescript(schema_sql)
        await self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _require_conn(self) -> aiosqlite.Connection:
        if not self._conn:
            raise RuntimeError("Storage not initialized")
        return self._conn

    @staticmethod
    def _check_keyed(table: str) -> None:
        if table not in KEYED_TABLES:
            raise ValueError(f"Not a keyed table: {table}")

    # Keyed tables
    async def upsert_entry(self, table: str, entry: KeyedEntry) -> None:
        """Insert or replace an entry by key."""
        conn = self._require_conn()
        self._check_keyed(table)

        await conn.execute(
            f"""
            INSERT OR REPLACE INTO {table} (key, value, updated_at)
            VALUES (?, ?, ?)
            """,
            (entry.key, _dumps(entry.value), entry.updated_at.isoformat()),
        )
        await conn.commit()

    async def delete_entry(self, table: str, key: str) -> None:
        """Delete an entry by key."""
        conn = self._require_conn()
        self._check_keyed(table)

        await conn.execute(f"DELETE FROM {table} WHERE key = ?", (key,))
        await conn.commit()

    async def get_entries(self, table: str) -> list[KeyedEntry]:
        """Get all entries of a keyed table."""
        conn = self._require_conn()
        self._check_keyed(table)

        cursor = await conn.execute(
            f"SELECT key, value, updated_at FROM {table} ORDER BY key ASC"
        )
        rows = await cursor.fetchall()

        return [
            KeyedEntry(
                key=row[0],
                value=json.loads(row[1]),
                updated_at=datetime.fromisoformat(row[2]),
            )
            for row in rows
        ]

    # Patterns
    async def save_pattern(
        self, data: dict, confidence: float, created_at: datetime
    ) -> Pattern:
        """Append a pattern and return it with its assigned id."""
        conn = self._require_conn()

        cursor = await conn.execute(
            """
            INSERT INTO patterns (data, confidence, created_at)
            VALUES (?, ?, ?)
            """,
            (_dumps(data), confidence, created_at.isoformat()),
        )
        await conn.commit()

        return Pattern(
            id=cursor.lastrowid,
            data=data,
            confidence=confidence,
            created_at=created_at,
        )

    async def get_patterns(self) -> list[Pattern]:
        """Get all patterns in insertion order."""
        conn = self._require_conn()

        cursor = await conn.execute(
            "SELECT id, data, confidence, created_at FROM patterns ORDER BY id ASC"
        )
        rows = await cursor.fetchall()

        return [
            Pattern(
                id=row[0],
                data=json.loads(row[1]),
                confidence=row[2],
                created_at=datetime.fromisoformat(row[3]),
            )
            for row in rows
        ]

    # Log
    async def save_log_entry(
        self, kind: LogKind, payload: dict, timestamp: datetime
    ) -> LogEntry:
        """Append a log entry and return it with its assigned id."""
        conn = self._require_conn()

        cursor = await conn.execute(
            """
            INSERT INTO log (timestamp, kind, payload, rating, feedback)
            VALUES (?, ?, ?, NULL, NULL)
            """,
            (timestamp.isoformat(), kind.value, _dumps(payload)),
        )
        await conn.commit()

        return LogEntry(
            id=cursor.lastrowid,
            timestamp=timestamp,
            kind=kind,
            payload=payload,
        )

    async def get_log_entries(self, limit: int | None = 50) -> list[LogEntry]:
        """Get log entries, newest first. limit=None returns all."""
        conn = self._require_conn()

        cursor = await conn.execute(
            """
            SELECT id, timestamp, kind, payload, rating, feedback
            FROM log
            ORDER BY timestamp DESC, id DESC
            LIMIT ?
            """,
            (-1 if limit is None else limit,),
        )
        rows = await cursor.fetchall()

        return [
            LogEntry(
                id=row[0],
                timestamp=datetime.fromisoformat(row[1]),
                kind=LogKind(row[2]),
                payload=json.loads(row[3]),
                rating=row[4],
                feedback=row[5],
            )
            for row in rows
        ]

    async def update_log_feedback(
        self, entry_id: int, rating: float | None, feedback: str | None
    ) -> None:
        """Set rating/feedback of a log entry."""
        conn = self._require_conn()

        await conn.execute(
            "UPDATE log SET rating = ?, feedback = ? WHERE id = ?",
            (rating, feedback, entry_id),
        )
        await conn.commit()

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        conn = self._require_conn()

        for table in ("profile", "patterns", "preferences", "log"):
            await conn.execute(f"DELETE FROM {table}")

        await conn.commit()
