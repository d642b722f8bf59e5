"""Planner Agent — goals, plans and scheduled tasks."""

from __future__ import annotations

import time
from typing import Any

from agents.base import BaseAgent


class PlannerAgent(BaseAgent):
    name = "planner"
    description = "Goals, plans, schedules, reminders and calendar events."

    def create_component(self, data: dict[str, Any]) -> dict[str, Any]:
        operation = str(data.get("operation", "plan")).strip().lower()
        if operation == "plan":
            return {
                "type": "plan",
                "goal": data.get("goal", "undefined"),
                "steps": data.get("steps", []),
                "timeline": data.get("timeline", "flexible"),
                "created_at": int(time.time()),
            }
        if operation == "schedule":
            return self._schedule(data)
        return self._generic_component(operation, data)

    def _schedule(self, data: dict[str, Any]) -> dict[str, Any]:
        component = {
            "type": "scheduled_task",
            "task": data.get("task", "undefined"),
            "when": data.get("when") or data.get("date"),
            "calendar_synced": False,
        }
        calendar = self.capability("calendar")
        if calendar is not None:
            outcome = calendar.execute({"action": "create_event", "title": component["task"], "when": component["when"]})
            component["calendar_synced"] = bool(outcome.get("success")) and not outcome.get("mock")
        return component
