"""Learning Agent — study plans and learning progress."""

from __future__ import annotations

from typing import Any

from agents.base import BaseAgent

_PACE_BY_HOURS = ((2, "gentle"), (5, "steady"))


class LearningAgent(BaseAgent):
    name = "learning"
    description = "Study plans, courses, skills and learning progress."

    def create_component(self, data: dict[str, Any]) -> dict[str, Any]:
        operation = str(data.get("operation", "plan")).strip().lower()
        if operation == "plan":
            return self._plan(data)
        if operation == "progress":
            return self._progress(data)
        return self._generic_component(operation, data)

    def _plan(self, data: dict[str, Any]) -> dict[str, Any]:
        subject = str(data.get("subject", "general"))
        resources: list[Any] = []
        search = self.capability("search")
        if search is not None:
            outcome = search.execute({"query": f"{subject} learning resources", "limit": 5})
            resources = (outcome.get("data") or {}).get("results", [])
        return {
            "type": "learning_plan",
            "subject": subject,
            "skill_level": str(data.get("skill_level", "beginner")),
            "suggested_pace": self._pace(data.get("hours_per_week")),
            "recommended_resources": resources,
        }

    def _progress(self, data: dict[str, Any]) -> dict[str, Any]:
        subject = str(data.get("subject", "general"))
        entry = {"subject": subject, "milestone": str(data.get("milestone", ""))}
        stored = False
        database = self.capability("database")
        if database is not None:
            outcome = database.execute(
                {"action": "save", "key": f"learning:{subject}", "value": entry, "memory_type": "knowledge"}
            )
            stored = bool(outcome.get("success"))
        return {"type": "learning_progress", **entry, "stored": stored}

    @staticmethod
    def _pace(hours_per_week: Any) -> str:
        try:
            hours = float(hours_per_week)
        except (TypeError, ValueError):
            return "steady"
        for limit, pace in _PACE_BY_HOURS:
            if hours <= limit:
                return pace
        return "intensive"
