"""Key-value persistence for the performance history."""

from taskroute.persistence.store import KeyValueStore, MemoryStore, SQLiteStore

__all__ = ["KeyValueStore", "MemoryStore", "SQLiteStore"]
