"""
Memory Agent — stores and recalls facts the user shares.

Uses the `database` capability; without it the agent still answers with an
empty, clearly-marked result.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from agents.base import BaseAgent

logger = logging.getLogger(__name__)


class MemoryAgent(BaseAgent):
    name = "memory"
    description = "Stores, retrieves and forgets personal information, facts and notes."

    def create_component(self, data: dict[str, Any]) -> dict[str, Any]:
        operation = str(data.get("operation", "retrieve")).strip().lower()
        if operation in ("store", "save", "remember"):
            return self._store(data)
        if operation in ("retrieve", "search", "recall"):
            return self._retrieve(data)
        if operation in ("forget", "delete"):
            return self._forget(data)
        return self._generic_component(operation, data)

    def _store(self, data: dict[str, Any]) -> dict[str, Any]:
        key = str(data.get("key") or data.get("name") or f"memory_{int(time.time() * 1000)}")
        value = data.get("value", data.get("content"))
        memory_type = str(data.get("memory_type", self.config.get("default_memory_type", "general")))

        database = self.capability("database")
        if database is None:
            return {"type": "memory_stored", "key": key, "stored": False, "reason": "storage unavailable"}

        outcome = database.execute({"action": "save", "key": key, "value": value, "memory_type": memory_type})
        return {
            "type": "memory_stored",
            "key": key,
            "memory_type": memory_type,
            "stored": bool(outcome.get("success")),
            "error": outcome.get("error"),
        }

    def _retrieve(self, data: dict[str, Any]) -> dict[str, Any]:
        search = str(data.get("search") or data.get("query") or data.get("key") or "")
        database = self.capability("database")
        if database is None:
            return {"type": "memory_results", "search": search, "results": [], "available": False}

        outcome = database.execute(
            {
                "action": "search",
                "query": search,
                "memory_type": data.get("memory_type"),
                "limit": data.get("limit", 10),
            }
        )
        results = (outcome.get("data") or {}).get("results", []) if outcome.get("success") else []
        return {"type": "memory_results", "search": search, "results": results, "available": True}

    def _forget(self, data: dict[str, Any]) -> dict[str, Any]:
        key = str(data.get("key", ""))
        database = self.capability("database")
        if database is None or not key:
            return {"type": "memory_deleted", "key": key, "deleted": False}
        outcome = database.execute({"action": "delete", "key": key})
        return {"type": "memory_deleted", "key": key, "deleted": bool((outcome.get("data") or {}).get("deleted"))}
