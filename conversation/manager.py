"""
Conversation History — SQLite-backed write-after-response hook.

Responsibility:
- Record each (request, response) pair per conversation_id
- Keep only the most recent entries per conversation
- Retrieve history for front ends

Performance:
- Persistent SQLite connection (no reconnect per query)
- WAL mode for concurrent reads

Prohibitions:
- Never alters the response it records
"""

import json
import sqlite3
import threading
from datetime import datetime, timezone
from typing import Any


class ConversationManager:
    """SQLite-backed conversation history with persistent connection."""

    def __init__(self, db_path: str = "conversations.db", max_entries: int = 10):
        self.db_path = db_path
        self.max_entries = max(1, max_entries)
        self._lock = threading.Lock()
        # Persistent connection, reused for all operations
        self._conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            isolation_level="DEFERRED",
        )
        self._conn.row_factory = sqlite3.Row
        # Enable WAL mode for better concurrent read performance
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._init_db()

    def _init_db(self) -> None:
        """Create tables if they don't exist."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                conversation_id TEXT NOT NULL,
                request TEXT NOT NULL,
                response TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)
        self._conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_history_conversation
            ON history(conversation_id)
        """)
        self._conn.commit()

    def record(self, request: dict[str, Any], response: dict[str, Any]) -> None:
        """Persist one exchange and trim the conversation to max_entries."""
        conversation_id = str(request.get("conversation_id") or "default_conversation")
        with self._lock:
            self._conn.execute(
                """INSERT INTO history (conversation_id, request, response, created_at)
                   VALUES (?, ?, ?, ?)""",
                (
                    conversation_id,
                    json.dumps(request, ensure_ascii=False, default=str),
                    json.dumps(response, ensure_ascii=False, default=str),
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            self._conn.execute(
                """DELETE FROM history
                   WHERE conversation_id = ?
                     AND id NOT IN (
                         SELECT id FROM history
                         WHERE conversation_id = ?
                         ORDER BY id DESC
                         LIMIT ?
                     )""",
                (conversation_id, conversation_id, self.max_entries),
            )
            self._conn.commit()

    def get_history(self, conversation_id: str, limit: int | None = None) -> list[dict[str, Any]]:
        """Retrieve history for a conversation, oldest first."""
        rows = self._conn.execute(
            """SELECT request, response, created_at
               FROM history
               WHERE conversation_id = ?
               ORDER BY id DESC
               LIMIT ?""",
            (conversation_id, limit or self.max_entries),
        ).fetchall()

        return [
            {
                "request": json.loads(row["request"]),
                "response": json.loads(row["response"]),
                "created_at": row["created_at"],
            }
            for row in reversed(rows)
        ]

    def clear_session(self, conversation_id: str) -> None:
        """Clear all history for a conversation."""
        with self._lock:
            self._conn.execute("DELETE FROM history WHERE conversation_id = ?", (conversation_id,))
            self._conn.commit()

    def close(self) -> None:
        """Close the persistent connection."""
        self._conn.close()
