"""Social Agent — communication advice and social events."""

from __future__ import annotations

from typing import Any

from agents.base import BaseAgent

COMMUNICATION_TIPS: dict[str, list[str]] = {
    "family": ["listen_before_responding", "share_appreciation"],
    "work": ["be_specific", "confirm_next_steps"],
    "friend": ["check_in_regularly", "plan_shared_activities"],
    "conflict": ["use_i_statements", "take_a_pause"],
}


class SocialAgent(BaseAgent):
    name = "social"
    description = "Friends, family, social events and communication advice."

    def create_component(self, data: dict[str, Any]) -> dict[str, Any]:
        operation = str(data.get("operation", "advise")).strip().lower()
        if operation == "advise":
            focus = str(data.get("relationship_focus", "friend")).strip().lower()
            return {
                "type": "social_advice",
                "relationship_focus": focus,
                "communication_tips": COMMUNICATION_TIPS.get(focus, ["be_present"]),
            }
        if operation == "event":
            return self._event(data)
        return self._generic_component(operation, data)

    def _event(self, data: dict[str, Any]) -> dict[str, Any]:
        component = {
            "type": "social_event",
            "title": data.get("title", "get-together"),
            "when": data.get("when") or data.get("date"),
            "people": data.get("people", []),
            "calendar_synced": False,
        }
        calendar = self.capability("calendar")
        if calendar is not None:
            outcome = calendar.execute(
                {"action": "create_event", "title": component["title"], "when": component["when"], "category": "social"}
            )
            component["calendar_synced"] = bool(outcome.get("success")) and not outcome.get("mock")
        return component
