"""Durable key-value stores for the performance history.

The tracker persists a single JSON blob, so the store interface is a
plain async get/set. SQLiteStore uses aiosqlite with WAL mode, matching
the rest of the persistence layer's conventions.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import aiosqlite

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Process-local store, used by default and in tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value


class SQLiteStore:
    """Key-value store backed by a SQLite file.

    Open with ``await store.open()`` or ``async with SQLiteStore(path)``.
    Supports ``:memory:`` for throwaway databases.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def open(self) -> None:
        """Open the connection and create the table if needed.

        Creates parent directories for file paths and supports ~ expansion.
        """
        if self._db is not None:
            return
        if self._db_path == ":memory:":
            target = self._db_path
        else:
            resolved = Path(self._db_path).expanduser()
            resolved.parent.mkdir(parents=True, exist_ok=True)
            target = str(resolved)

        self._db = await aiosqlite.connect(target)
        await self._db.execute("PRAGMA journal_mode=WAL")
        await self._db.executescript(_SCHEMA)
        await self._db.commit()
        logger.info("Key-value store initialized at %s", target)

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def __aenter__(self) -> SQLiteStore:
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _conn(self) -> aiosqlite.Connection:
        if self._db is None:
            raise RuntimeError("SQLiteStore is not open")
        return self._db

    async def get(self, key: str) -> str | None:
        cursor = await self._conn().execute(
            "SELECT value FROM kv WHERE key = ?", (key,),
        )
        row = await cursor.fetchone()
        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        db = self._conn()
        await db.execute(
            """
            INSERT INTO kv (key, value, updated_at) VALUES (?, ?, datetime('now'))
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, value),
        )
        await db.commit()
