"""
Database capability — exposes the memory store through the uniform
execute(params) entry point.
"""

from __future__ import annotations

import logging
from typing import Any

from memory.store import MemoryStore

logger = logging.getLogger(__name__)


class DatabaseCapability:
    """Actions: save, get, search, delete."""

    def __init__(self, store: MemoryStore):
        self.store = store

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        action = str(params.get("action", "search")).strip().lower()
        try:
            if action == "save":
                self.store.save(
                    str(params.get("key", "")),
                    params.get("value"),
                    memory_type=str(params.get("memory_type", "general")),
                )
                return {"success": True, "data": {"key": params.get("key"), "saved": True}}
            if action == "get":
                value = self.store.get(str(params.get("key", "")))
                return {"success": True, "data": {"key": params.get("key"), "value": value}}
            if action == "search":
                rows = self.store.search(
                    str(params.get("query", "")),
                    memory_type=params.get("memory_type"),
                    limit=int(params.get("limit", 10)),
                )
                return {"success": True, "data": {"results": rows, "count": len(rows)}}
            if action == "delete":
                deleted = self.store.delete(str(params.get("key", "")))
                return {"success": True, "data": {"key": params.get("key"), "deleted": deleted}}
        except ValueError as e:
            logger.warning("Database capability rejected %s: %s", action, e)
            return {"success": False, "error": str(e)}

        return {"success": False, "error": f"Unsupported database action '{action}'."}
