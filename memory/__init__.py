"""Memory store abstractions and implementations."""

from memory.store import DEFAULT_TTL_SECONDS, MemoryStore, SQLiteMemoryStore

__all__ = ["DEFAULT_TTL_SECONDS", "MemoryStore", "SQLiteMemoryStore"]
