"""Spiritual Agent — reflections, practices and meditation logs."""

from __future__ import annotations

from typing import Any

from agents.base import BaseAgent

GUIDANCE_NOTE = (
    "These insights are offered as perspectives for consideration. "
    "Please adapt them to your own beliefs and practices."
)


class SpiritualAgent(BaseAgent):
    name = "spiritual"
    description = "Reflection, meditation and spiritual practice."

    def create_component(self, data: dict[str, Any]) -> dict[str, Any]:
        operation = str(data.get("operation", "reflect")).strip().lower()
        if operation == "reflect":
            return self._reflect(data)
        if operation in ("log", "log_practice"):
            return self._log_practice(data)
        return self._generic_component(operation, data)

    def _reflect(self, data: dict[str, Any]) -> dict[str, Any]:
        sources: list[Any] = []
        query = str(data.get("search_query") or "").strip()
        if query:
            search = self.capability("search")
            if search is not None:
                outcome = search.execute({"query": query, "limit": 3})
                sources = (outcome.get("data") or {}).get("results", [])
        return {
            "type": "spiritual_reflection",
            "tradition": str(data.get("tradition", "non_specific")),
            "practice_suggestion": str(data.get("practice", "mindful_breathing")),
            "sources": sources,
            "guidance_note": GUIDANCE_NOTE,
        }

    def _log_practice(self, data: dict[str, Any]) -> dict[str, Any]:
        entry = {
            "practice": str(data.get("practice", "meditation")),
            "minutes": data.get("minutes", 0),
        }
        stored = False
        database = self.capability("database")
        if database is not None:
            outcome = database.execute(
                {"action": "save", "key": f"practice:{entry['practice']}", "value": entry, "memory_type": "task"}
            )
            stored = bool(outcome.get("success"))
        return {"type": "practice_logged", **entry, "stored": stored}
