"""
Memory Store — persistent key/value memories for the memory agent.

Design goals:
- Clear API (save/get/search/delete)
- Structured JSON values stored outside the LLM
- Per memory-type expiry (conversation memories fade, knowledge stays)
"""

from __future__ import annotations

import json
import sqlite3
import threading
import time
from abc import ABC, abstractmethod
from typing import Any

DAY = 86400

# Seconds a memory of each type stays retrievable.
DEFAULT_TTL_SECONDS: dict[str, int] = {
    "general": 30 * DAY,
    "conversation": 7 * DAY,
    "task": 14 * DAY,
    "knowledge": 365 * DAY,
    "relationship": 365 * DAY,
}


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class MemoryStore(ABC):
    """Memory abstraction used by the database capability."""

    @abstractmethod
    def save(self, key: str, value: Any, memory_type: str = "general") -> None:
        """Persist a value by key."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Retrieve a live value by key."""

    @abstractmethod
    def search(self, query: str, memory_type: str | None = None, limit: int = 10) -> list[dict[str, Any]]:
        """Search live memories by query text."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove a memory. Returns True when something was deleted."""


class SQLiteMemoryStore(MemoryStore):
    """SQLite-backed memory store with per-type expiry."""

    def __init__(
        self,
        db_path: str = "memory.db",
        ttl_seconds: dict[str, int] | None = None,
        clock=time.time,
    ):
        self.db_path = db_path
        self.ttl_seconds = {**DEFAULT_TTL_SECONDS, **(ttl_seconds or {})}
        self._clock = clock
        self._write_lock = threading.Lock()
        self._conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            isolation_level="DEFERRED",
        )
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._init_db()

    def _init_db(self) -> None:
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS memories (
                key TEXT PRIMARY KEY,
                memory_type TEXT NOT NULL,
                value_json TEXT NOT NULL,
                search_text TEXT NOT NULL,
                updated_at REAL NOT NULL,
                expires_at REAL NOT NULL
            )
            """
        )
        self._conn.execute("CREATE INDEX IF NOT EXISTS idx_memories_type ON memories(memory_type)")
        self._conn.commit()

    def save(self, key: str, value: Any, memory_type: str = "general") -> None:
        key_norm = (key or "").strip()
        if not key_norm:
            raise ValueError("Memory key cannot be empty.")
        type_norm = (memory_type or "general").strip().lower()
        if type_norm not in self.ttl_seconds:
            raise ValueError(f"Unknown memory type '{memory_type}'.")

        value_json = json.dumps(value, ensure_ascii=False, sort_keys=True)
        now = self._clock()
        with self._write_lock:
            self._conn.execute(
                """
                INSERT INTO memories(key, memory_type, value_json, search_text, updated_at, expires_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    memory_type = excluded.memory_type,
                    value_json = excluded.value_json,
                    search_text = excluded.search_text,
                    updated_at = excluded.updated_at,
                    expires_at = excluded.expires_at
                """,
                (
                    key_norm,
                    type_norm,
                    value_json,
                    f"{key_norm} {value_json}".lower(),
                    now,
                    now + self.ttl_seconds[type_norm],
                ),
            )
            self._conn.commit()

    def get(self, key: str) -> Any | None:
        row = self._conn.execute(
            "SELECT value_json FROM memories WHERE key = ? AND expires_at > ? LIMIT 1",
            ((key or "").strip(), self._clock()),
        ).fetchone()
        if not row:
            return None
        return json.loads(row["value_json"])

    def search(self, query: str, memory_type: str | None = None, limit: int = 10) -> list[dict[str, Any]]:
        query_text = (query or "").strip().lower()
        if not query_text:
            return []

        sql = (
            "SELECT key, memory_type, value_json, updated_at FROM memories "
            "WHERE search_text LIKE ? ESCAPE '\\' AND expires_at > ?"
        )
        params: list[Any] = [f"%{_escape_like(query_text)}%", self._clock()]
        if memory_type:
            sql += " AND memory_type = ?"
            params.append(memory_type.strip().lower())
        sql += " ORDER BY updated_at DESC LIMIT ?"
        params.append(max(1, limit))

        return [
            {
                "key": row["key"],
                "memory_type": row["memory_type"],
                "value": json.loads(row["value_json"]),
                "updated_at": row["updated_at"],
            }
            for row in self._conn.execute(sql, params).fetchall()
        ]

    def delete(self, key: str) -> bool:
        with self._write_lock:
            cursor = self._conn.execute("DELETE FROM memories WHERE key = ?", ((key or "").strip(),))
            self._conn.commit()
        return cursor.rowcount > 0

    def purge_expired(self) -> int:
        with self._write_lock:
            cursor = self._conn.execute("DELETE FROM memories WHERE expires_at <= ?", (self._clock(),))
            self._conn.commit()
        return cursor.rowcount

    def close(self) -> None:
        self._conn.close()
