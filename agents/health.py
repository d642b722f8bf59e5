"""Health Agent — tracks wellness metrics."""

from __future__ import annotations

import time
from typing import Any

from agents.base import BaseAgent


class HealthAgent(BaseAgent):
    name = "health"
    description = "Health metrics, workouts, sleep and wellness trends."

    def create_component(self, data: dict[str, Any]) -> dict[str, Any]:
        operation = str(data.get("operation", "track")).strip().lower()
        if operation == "track":
            return {
                "type": "health_metric",
                "metric": str(data.get("metric", "general")),
                "value": data.get("value", 0),
                "timestamp": int(time.time()),
            }
        if operation == "analyze":
            return {
                "type": "health_analysis",
                "trends": ["stable"],
                "recommendations": ["maintain_current_habits"],
                "period": data.get("period", "week"),
            }
        return self._generic_component(operation, data)
